"""
Caching data loader for metrics snapshots, quotes and company history.

Fetches quote-summary payloads from a Yahoo Finance compatible endpoint,
normalizes them into domain types, and keeps results in a time-boxed cache
so repeated views of the same ticker avoid repeated HTTP calls.

Usage:
  # Single projection
  loader = YahooFinanceLoader()
  metrics = loader.load_metrics('AAPL')
  quote = loader.load_quote('AAPL')
  history = loader.load_history('AAPL')
  quarters = loader.load_historical_financials('AAPL', 'quarterly')

  # Offline snapshot
  summary = load_snapshot_file(Path('snapshots/AAPL.json'))
  metrics = FinancialMetrics.from_quote_summary(summary)
"""

from collections.abc import Callable
import json
import logging
from pathlib import Path
import time
from typing import Any, Optional
from urllib.parse import quote

import requests

from projection.domain.types import FinancialMetrics
from projection.domain.types import HistoricalFinancials
from projection.domain.types import HistoricalPrice
from projection.domain.types import StockProfile
from projection.domain.types import StockQuote

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = 'https://query2.finance.yahoo.com'
DEFAULT_HEADERS = {
    'User-Agent': 'Mozilla/5.0 (Windows NT 10.0; Win64; x64) '
                  'AppleWebKit/537.36',
    'Accept': 'application/json',
}
METRICS_MODULES = ('defaultKeyStatistics', 'financialData', 'summaryDetail')
QUOTE_MODULES = ('price',)
PROFILE_MODULES = ('summaryProfile', 'price')
HISTORY_RANGE = '10y'
FINANCIAL_PERIODS = ('annual', 'quarterly')
FINANCIAL_FIELDS = (
    'TotalRevenue',
    'GrossProfit',
    'OperatingIncome',
    'NetIncome',
    'NetIncomeCommonStockholders',
    'DilutedEPS',
    'BasicEPS',
    'StockBasedCompensation',
)
# 2010-01-01T00:00:00Z
FINANCIALS_START_EPOCH = 1262304000
CACHE_TTL_SEC = 5 * 60


class TTLCache:
  """
  Key -> (value, timestamp) map with a fixed time-to-live.

  An entry is stale once now - timestamp exceeds the TTL. Stale entries are
  evicted when read, and all of them are pruned on every write.
  """

  def __init__(
      self,
      ttl_sec: float = CACHE_TTL_SEC,
      clock: Callable[[], float] = time.time,
  ):
    """
    Initialize cache.

    Args:
      ttl_sec: Time-to-live in seconds (default: 5 minutes)
      clock: Function returning the current time in seconds
    """
    self.ttl_sec = ttl_sec
    self._clock = clock
    self._entries: dict[Any, tuple[Any, float]] = {}

  def is_stale(self, timestamp: float) -> bool:
    return self._clock() - timestamp > self.ttl_sec

  def get(self, key: Any) -> Optional[Any]:
    """Return the cached value, or None if missing or stale."""
    entry = self._entries.get(key)
    if entry is None:
      return None
    value, timestamp = entry
    if self.is_stale(timestamp):
      del self._entries[key]
      return None
    return value

  def put(self, key: Any, value: Any) -> None:
    """Store a value, pruning every stale entry first."""
    stale = [k for k, (_, ts) in self._entries.items() if self.is_stale(ts)]
    for k in stale:
      del self._entries[k]
    self._entries[key] = (value, self._clock())

  def clear(self) -> None:
    """Clear all cached data."""
    self._entries.clear()

  def __len__(self) -> int:
    return len(self._entries)


def _is_client_error(err: Exception) -> bool:
  response = getattr(err, 'response', None)
  if response is None:
    return False
  status = response.status_code
  return 400 <= status < 500 and status != 429


def normalize_symbol(symbol: str) -> str:
  return symbol.strip().upper()


def load_snapshot_file(path: Path) -> dict[str, Any]:
  """
  Load a quote-summary payload saved as JSON.

  Accepts either the bare module mapping or the full
  {'quoteSummary': {'result': [...]}} envelope.

  Raises:
    FileNotFoundError: If the file does not exist
    ValueError: If the file holds no quote-summary result
  """
  if not path.exists():
    raise FileNotFoundError(f'Snapshot not found: {path}')

  data = json.loads(path.read_text(encoding='utf-8'))
  if 'quoteSummary' in data:
    results = (data['quoteSummary'] or {}).get('result') or []
    if not results:
      raise ValueError(f'Empty quote summary in {path}')
    return results[0]
  return data


def pivot_timeseries(data: Any, prefix: str) -> list[dict[str, Any]]:
  """
  Regroup a fundamentals-timeseries response into one record per period.

  The endpoint returns one series per requested type (e.g.
  'annualTotalRevenue'), each a list of {'asOfDate', 'reportedValue'}
  points. Records are keyed by the type name without the period prefix
  ('totalRevenue') plus the period end 'date'.
  """
  results = ((data or {}).get('timeseries') or {}).get('result') or []
  by_date: dict[str, dict[str, Any]] = {}
  for series in results:
    types = (series.get('meta') or {}).get('type') or []
    if not types or not types[0].startswith(prefix):
      continue
    type_name = types[0]
    name = type_name[len(prefix):]
    name = name[:1].lower() + name[1:]
    for point in series.get(type_name) or []:
      if not point or not point.get('asOfDate'):
        continue
      record = by_date.setdefault(point['asOfDate'],
                                  {'date': point['asOfDate']})
      record[name] = point.get('reportedValue')
  return [by_date[d] for d in sorted(by_date)]


class YahooFinanceLoader:
  """
  Cached loader for Yahoo Finance data.

  Loads and caches, per symbol:
  - FinancialMetrics snapshot
  - StockQuote
  - StockProfile
  - Daily price history
  - Annual or quarterly HistoricalFinancials
  """

  def __init__(
      self,
      session: Optional[requests.Session] = None,
      base_url: str = DEFAULT_BASE_URL,
      cache: Optional[TTLCache] = None,
      timeout_sec: float = 10.0,
      retries: int = 3,
      backoff_sec: float = 1.0,
  ):
    """
    Initialize loader.

    Args:
      session: HTTP session (default: new requests.Session)
      base_url: Endpoint root serving the quoteSummary, chart, search and
        fundamentals-timeseries APIs
      cache: Result cache (default: 5-minute TTLCache)
      timeout_sec: Per-request timeout
      retries: Attempts per request
      backoff_sec: Base delay for exponential backoff between attempts
    """
    self.session = session or requests.Session()
    self.base_url = base_url.rstrip('/')
    self.cache = cache if cache is not None else TTLCache()
    self.timeout_sec = timeout_sec
    self.retries = retries
    self.backoff_sec = backoff_sec

  def _get_json(self, url: str, params: dict[str, Any]) -> Any:
    """
    GET a JSON document, retrying transient failures.

    Connection errors, 5xx and 429 responses are retried with exponential
    backoff. Any other 4xx is a client error and raises immediately.
    """
    last_err: Optional[Exception] = None
    for attempt in range(self.retries):
      try:
        resp = self.session.get(url,
                                params=params,
                                headers=DEFAULT_HEADERS,
                                timeout=self.timeout_sec)
        if resp.status_code >= 400:
          raise requests.HTTPError(
              f'HTTP {resp.status_code} for {url}: {resp.text[:200]}',
              response=resp)
        return resp.json()
      except (requests.RequestException, ValueError) as e:
        if _is_client_error(e):
          raise
        last_err = e
        if attempt < self.retries - 1:
          logger.debug('Retrying %s after error: %s', url, e)
          time.sleep(self.backoff_sec * (2**attempt))
    assert last_err is not None
    raise last_err

  def fetch_quote_summary(self, symbol: str,
                          modules: tuple[str, ...]) -> dict[str, Any]:
    """
    Fetch raw quote-summary modules for one symbol.

    Raises:
      requests.HTTPError: If the endpoint keeps failing
      ValueError: If the response holds no result for the symbol
    """
    symbol = normalize_symbol(symbol)
    url = f'{self.base_url}/v10/finance/quoteSummary/{quote(symbol)}'
    data = self._get_json(url, {'modules': ','.join(modules)})

    results = ((data or {}).get('quoteSummary') or {}).get('result') or []
    if not results or results[0] is None:
      raise ValueError(f'No data for ticker {symbol}')
    return results[0]

  def _cached(self, kind: str, symbol: str, build: Callable[[str], Any]) -> Any:
    key = (kind, normalize_symbol(symbol))
    cached = self.cache.get(key)
    if cached is not None:
      return cached
    value = build(key[1])
    self.cache.put(key, value)
    return value

  def load_metrics(self, symbol: str) -> FinancialMetrics:
    """
    Load and cache the metrics snapshot for a symbol.

    Raises:
      ValueError: If no financial data is available for the symbol
    """

    def build(sym: str) -> FinancialMetrics:
      summary = self.fetch_quote_summary(sym, METRICS_MODULES)
      logger.info('Fetched metrics for %s', sym)
      return FinancialMetrics.from_quote_summary(summary)

    return self._cached('metrics', symbol, build)

  def load_quote(self, symbol: str) -> StockQuote:
    """
    Load and cache the latest quote for a symbol.

    Raises:
      ValueError: If no price data is available for the symbol
    """

    def build(sym: str) -> StockQuote:
      summary = self.fetch_quote_summary(sym, QUOTE_MODULES)
      return StockQuote.from_quote_summary(summary, sym)

    return self._cached('quote', symbol, build)

  def load_profile(self, symbol: str) -> StockProfile:
    """
    Load and cache the company profile for a symbol.

    Raises:
      ValueError: If no profile data is available for the symbol
    """

    def build(sym: str) -> StockProfile:
      summary = self.fetch_quote_summary(sym, PROFILE_MODULES)
      return StockProfile.from_quote_summary(summary, sym)

    return self._cached('profile', symbol, build)

  def load_history(self,
                   symbol: str,
                   range_: str = HISTORY_RANGE) -> list[HistoricalPrice]:
    """
    Load and cache daily prices (default: 10 years).

    Closes are adjusted for splits and dividends when upstream provides
    adjusted closes; days without a positive close are dropped.

    Raises:
      ValueError: If the chart response holds no result for the symbol
    """

    def build(sym: str) -> list[HistoricalPrice]:
      url = f'{self.base_url}/v8/finance/chart/{quote(sym)}'
      data = self._get_json(url, {'interval': '1d', 'range': range_})
      results = ((data or {}).get('chart') or {}).get('result') or []
      if not results or results[0] is None:
        raise ValueError(f'No price history for ticker {sym}')
      bars = HistoricalPrice.from_chart(results[0])
      logger.info('Fetched %d daily prices for %s', len(bars), sym)
      return bars

    return self._cached(f'history_{range_}', symbol, build)

  def load_historical_financials(
      self,
      symbol: str,
      period: str = 'annual') -> list[HistoricalFinancials]:
    """
    Load and cache reported income-statement history since 2010.

    Args:
      symbol: Ticker
      period: 'annual' or 'quarterly'

    Returns:
      Periods ordered by year then quarter label; empty when upstream has
      no statements for the symbol

    Raises:
      ValueError: If period is not 'annual' or 'quarterly'
    """
    if period not in FINANCIAL_PERIODS:
      raise ValueError(
          f'Unknown period {period!r}; expected one of {FINANCIAL_PERIODS}')

    def build(sym: str) -> list[HistoricalFinancials]:
      url = (f'{self.base_url}/ws/fundamentals-timeseries/v1/finance/'
             f'timeseries/{quote(sym)}')
      data = self._get_json(
          url, {
              'symbol': sym,
              'type': ','.join(f'{period}{f}' for f in FINANCIAL_FIELDS),
              'period1': FINANCIALS_START_EPOCH,
              'period2': int(time.time()),
          })
      records = pivot_timeseries(data, period)
      return HistoricalFinancials.series(records,
                                         quarterly=period == 'quarterly')

    return self._cached(f'financials_{period}', symbol, build)

  def search(self, query: str, limit: int = 10) -> list[dict[str, str]]:
    """
    Search symbols by ticker or company name.

    Returns:
      List of {'symbol', 'name', 'exchange', 'type'} for equities and ETFs
    """
    query = query.strip()
    if not query:
      return []

    url = f'{self.base_url}/v1/finance/search'
    data = self._get_json(url, {
        'q': query,
        'quotesCount': limit,
        'newsCount': 0
    })

    results = []
    for item in (data or {}).get('quotes') or []:
      if item.get('quoteType') not in ('EQUITY', 'ETF'):
        continue
      results.append({
          'symbol': item['symbol'],
          'name': item.get('longname') or item.get('shortname') or
                  item['symbol'],
          'exchange': item.get('exchange') or '',
          'type': item.get('quoteType') or 'EQUITY',
      })
    return results

  def clear_cache(self) -> None:
    """Clear all cached data."""
    self.cache.clear()
