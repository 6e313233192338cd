'''
Domain types for the projection engine.

These dataclasses provide typed interfaces between components, so the engine
never depends on the raw shape of upstream payloads. All of them are frozen:
every edit produces a new value.
'''

from dataclasses import dataclass, field, fields, replace
from datetime import datetime, timezone
from enum import Enum
from math import isfinite
from typing import Any, Dict, Generic, List, Mapping, Optional, Sequence, TypeVar

T = TypeVar('T')


class MultipleType(str, Enum):
  '''Valuation basis used to turn projected revenue into equity value.'''

  PE = 'pe'
  EV_EBIT = 'evEbit'
  EV_EBITDA = 'evEbitda'
  EV_REVENUE = 'evRevenue'
  EV_FCF = 'evFcf'

  @property
  def label(self) -> str:
    return _MULTIPLE_LABELS[self]


_MULTIPLE_LABELS = {
    MultipleType.PE: 'P/E Ratio',
    MultipleType.EV_EBIT: 'EV/EBIT',
    MultipleType.EV_EBITDA: 'EV/EBITDA',
    MultipleType.EV_REVENUE: 'EV/Revenue',
    MultipleType.EV_FCF: 'EV/FCF',
}


class Scenario(str, Enum):
  BEAR = 'bear'
  BASE = 'base'
  BULL = 'bull'


@dataclass
class PolicyOutput(Generic[T]):
  '''
  Standard output from any seeding policy.

  Attributes:
    value: The computed value (type depends on policy)
    diag: Dictionary of diagnostic information
  '''
  value: T
  diag: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ScenarioTriple:
  '''One value per scenario. No ordering between scenarios is enforced.'''
  bear: float
  base: float
  bull: float

  def get(self, scenario: Scenario) -> float:
    return getattr(self, Scenario(scenario).value)

  def with_value(self, scenario: Scenario, value: float) -> 'ScenarioTriple':
    '''Return a copy with one scenario's value replaced.'''
    return replace(self, **{Scenario(scenario).value: float(value)})

  def to_dict(self) -> Dict[str, float]:
    return {'bear': self.bear, 'base': self.base, 'bull': self.bull}

  @classmethod
  def from_dict(cls, data: Mapping[str, Any]) -> 'ScenarioTriple':
    return cls(bear=float(data['bear']),
               base=float(data['base']),
               bull=float(data['bull']))


def _num(value: Any) -> Optional[float]:
  '''Return a finite float or None. Accepts {'raw': x} wrappers.'''
  if isinstance(value, Mapping):
    value = value.get('raw')
  if isinstance(value, bool) or not isinstance(value, (int, float)):
    return None
  value = float(value)
  return value if isfinite(value) else None


def _pct(value: Any) -> Optional[float]:
  '''Convert a decimal ratio (0.44) to percent (44.0).'''
  n = _num(value)
  return n * 100.0 if n is not None else None


def _first(*values: Optional[float]) -> Optional[float]:
  for v in values:
    if v is not None:
      return v
  return None


@dataclass(frozen=True)
class FinancialMetrics:
  '''
  Trailing fundamentals snapshot for a single company.

  Every field may be None (unknown). Margins, ROE and ROA are percentages;
  monetary fields are in reporting currency units.
  '''
  # Valuation
  pe_ratio: Optional[float] = None
  forward_pe: Optional[float] = None
  peg_ratio: Optional[float] = None
  price_to_sales: Optional[float] = None
  price_to_book: Optional[float] = None
  ev_to_ebitda: Optional[float] = None
  ev_to_ebit: Optional[float] = None
  ev_to_revenue: Optional[float] = None

  # Profitability
  gross_margin: Optional[float] = None
  operating_margin: Optional[float] = None
  net_margin: Optional[float] = None
  roe: Optional[float] = None
  roa: Optional[float] = None

  # Financial data
  revenue: Optional[float] = None
  net_income: Optional[float] = None
  ebitda: Optional[float] = None
  ebit: Optional[float] = None
  eps: Optional[float] = None
  free_cash_flow: Optional[float] = None

  # Balance sheet
  total_cash: Optional[float] = None
  total_debt: Optional[float] = None
  net_debt: Optional[float] = None
  shares_outstanding: Optional[float] = None
  enterprise_value: Optional[float] = None

  @classmethod
  def from_quote_summary(cls, summary: Mapping[str, Any]) -> 'FinancialMetrics':
    '''
    Normalize a quote-summary payload into a metrics snapshot.

    Args:
      summary: Mapping with 'defaultKeyStatistics', 'financialData' and
        'summaryDetail' modules. Values may be plain numbers or
        {'raw': x, 'fmt': ...} wrappers.

    Returns:
      FinancialMetrics with unknown fields left as None

    Raises:
      ValueError: If neither statistics nor financial data is present
    '''
    stats = summary.get('defaultKeyStatistics')
    fin = summary.get('financialData')
    if not stats and not fin:
      raise ValueError('No financial data in quote summary')
    stats = stats or {}
    fin = fin or {}
    detail = summary.get('summaryDetail') or {}

    total_debt = _num(fin.get('totalDebt'))
    total_cash = _num(fin.get('totalCash'))
    revenue = _num(fin.get('totalRevenue'))
    operating_margin = _num(fin.get('operatingMargins'))

    ebit = None
    if revenue is not None and operating_margin is not None:
      ebit = revenue * operating_margin

    net_debt = None
    if total_debt is not None and total_cash is not None:
      net_debt = total_debt - total_cash

    return cls(
        pe_ratio=_num(detail.get('trailingPE')),
        forward_pe=_num(detail.get('forwardPE')),
        peg_ratio=_num(stats.get('pegRatio')),
        price_to_sales=_num(detail.get('priceToSalesTrailing12Months')),
        price_to_book=_num(stats.get('priceToBook')),
        ev_to_ebitda=_num(stats.get('enterpriseToEbitda')),
        ev_to_ebit=None,
        ev_to_revenue=_num(stats.get('enterpriseToRevenue')),
        gross_margin=_pct(fin.get('grossMargins')),
        operating_margin=_pct(fin.get('operatingMargins')),
        net_margin=_pct(fin.get('profitMargins')),
        roe=_pct(fin.get('returnOnEquity')),
        roa=_pct(fin.get('returnOnAssets')),
        revenue=revenue,
        net_income=_first(_num(fin.get('netIncomeToCommon')),
                          _num(stats.get('netIncomeToCommon'))),
        ebitda=_num(fin.get('ebitda')),
        ebit=ebit,
        eps=_num(stats.get('trailingEps')),
        free_cash_flow=_num(fin.get('freeCashflow')),
        total_cash=total_cash,
        total_debt=total_debt,
        net_debt=net_debt,
        shares_outstanding=_num(stats.get('sharesOutstanding')),
        enterprise_value=_num(stats.get('enterpriseValue')),
    )

  @classmethod
  def from_dict(cls, data: Mapping[str, Any]) -> 'FinancialMetrics':
    '''Build from a flat mapping of field name to value; unknown keys ignored.'''
    names = {f.name for f in fields(cls)}
    return cls(**{k: _num(v) for k, v in data.items() if k in names})

  def to_dict(self) -> Dict[str, Optional[float]]:
    return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class StockQuote:
  '''Latest market quote. Missing numbers are reported as 0.'''
  symbol: str
  name: str
  price: float = 0.0
  change: float = 0.0
  change_percent: float = 0.0
  high: float = 0.0
  low: float = 0.0
  open: float = 0.0
  previous_close: float = 0.0
  volume: float = 0.0
  market_cap: float = 0.0
  exchange: str = ''

  @classmethod
  def from_quote_summary(cls, summary: Mapping[str, Any],
                         symbol: str) -> 'StockQuote':
    '''
    Build a quote from the 'price' module of a quote-summary payload.

    Raises:
      ValueError: If the price module is missing
    '''
    p = summary.get('price')
    if not p:
      raise ValueError(f'No price data for {symbol}')

    def num0(key: str) -> float:
      return _first(_num(p.get(key)), 0.0)

    return cls(
        symbol=p.get('symbol') or symbol,
        name=p.get('longName') or p.get('shortName') or symbol,
        price=num0('regularMarketPrice'),
        change=num0('regularMarketChange'),
        # upstream reports change percent as a decimal
        change_percent=num0('regularMarketChangePercent') * 100.0,
        high=num0('regularMarketDayHigh'),
        low=num0('regularMarketDayLow'),
        open=num0('regularMarketOpen'),
        previous_close=num0('regularMarketPreviousClose'),
        volume=num0('regularMarketVolume'),
        market_cap=num0('marketCap'),
        exchange=p.get('exchangeName') or '',
    )


@dataclass(frozen=True)
class StockProfile:
  '''Company description. Missing text fields are empty strings.'''
  symbol: str
  name: str
  description: str = ''
  sector: str = ''
  industry: str = ''
  country: str = ''
  exchange: str = ''
  currency: str = 'USD'
  website: str = ''
  employees: int = 0

  @classmethod
  def from_quote_summary(cls, summary: Mapping[str, Any],
                         symbol: str) -> 'StockProfile':
    '''
    Build a profile from the 'summaryProfile' (or 'assetProfile') and
    'price' modules of a quote-summary payload.

    Raises:
      ValueError: If no profile module is present
    '''
    profile = summary.get('summaryProfile') or summary.get('assetProfile')
    if not profile:
      raise ValueError(f'No profile data for {symbol}')
    p = summary.get('price') or {}
    employees = _num(profile.get('fullTimeEmployees'))

    return cls(
        symbol=symbol,
        name=p.get('longName') or p.get('shortName') or symbol,
        description=profile.get('longBusinessSummary') or '',
        sector=profile.get('sector') or '',
        industry=profile.get('industry') or '',
        country=profile.get('country') or '',
        exchange=p.get('exchangeName') or '',
        currency=p.get('currency') or 'USD',
        website=profile.get('website') or '',
        employees=int(employees) if employees is not None else 0,
    )


@dataclass(frozen=True)
class HistoricalPrice:
  '''One daily bar. close is the split/dividend adjusted close when known.'''
  date: str
  open: float
  high: float
  low: float
  close: float
  volume: float

  @classmethod
  def from_chart(cls, chart: Mapping[str, Any]) -> List['HistoricalPrice']:
    '''
    Convert one chart result into daily bars.

    Args:
      chart: A 'chart.result[0]' mapping with 'timestamp' (epoch seconds)
        and 'indicators' holding 'quote' and optionally 'adjclose' arrays

    Returns:
      Bars in upstream order, without rows whose close is missing or <= 0
    '''
    timestamps = chart.get('timestamp') or []
    indicators = chart.get('indicators') or {}
    quote = (indicators.get('quote') or [{}])[0] or {}
    adjclose = ((indicators.get('adjclose') or [{}])[0] or {}).get(
        'adjclose') or []

    def at(values: Sequence[Any], i: int) -> Optional[float]:
      return _num(values[i]) if i < len(values) else None

    bars = []
    for i, ts in enumerate(timestamps):
      if _num(ts) is None:
        continue
      close = _first(at(adjclose, i), at(quote.get('close') or [], i), 0.0)
      if close <= 0:
        continue
      day = datetime.fromtimestamp(ts, tz=timezone.utc).date()
      bars.append(
          cls(
              date=day.isoformat(),
              open=_first(at(quote.get('open') or [], i), 0.0),
              high=_first(at(quote.get('high') or [], i), 0.0),
              low=_first(at(quote.get('low') or [], i), 0.0),
              close=close,
              volume=_first(at(quote.get('volume') or [], i), 0.0),
          ))
    return bars

  def to_dict(self) -> Dict[str, Any]:
    return {f.name: getattr(self, f.name) for f in fields(self)}


def _ratio_pct(numerator: Optional[float],
               revenue: Optional[float]) -> Optional[float]:
  if numerator is None or not revenue:
    return None
  return numerator / revenue * 100.0


@dataclass(frozen=True)
class HistoricalFinancials:
  '''
  Reported income-statement figures for one fiscal period.

  Attributes:
    year: Calendar year of the period end date
    label: Quarter label such as "Q1 '24"; None for annual periods
    gross_margin, operating_margin, net_margin: Percent of revenue, None
      when revenue is missing or zero
    sbc: Stock-based compensation
  '''
  year: int
  label: Optional[str] = None
  revenue: Optional[float] = None
  net_income: Optional[float] = None
  gross_profit: Optional[float] = None
  operating_income: Optional[float] = None
  eps: Optional[float] = None
  gross_margin: Optional[float] = None
  operating_margin: Optional[float] = None
  net_margin: Optional[float] = None
  sbc: Optional[float] = None

  @classmethod
  def from_statement(cls, record: Mapping[str, Any],
                     quarterly: bool = False) -> 'HistoricalFinancials':
    '''
    Build one period from a statement record keyed by upstream field name.

    Args:
      record: Mapping with 'date' (YYYY-MM-DD period end) and any of
        totalRevenue, grossProfit, operatingIncome, netIncome,
        netIncomeCommonStockholders, dilutedEPS, basicEPS,
        stockBasedCompensation
      quarterly: Attach a quarter label derived from the period end month

    Raises:
      ValueError: If the date is missing or malformed
    '''
    period_end = datetime.strptime(str(record.get('date', ''))[:10],
                                   '%Y-%m-%d')
    revenue = _num(record.get('totalRevenue'))
    gross_profit = _num(record.get('grossProfit'))
    operating_income = _num(record.get('operatingIncome'))
    net_income = _first(_num(record.get('netIncome')),
                        _num(record.get('netIncomeCommonStockholders')))

    label = None
    if quarterly:
      quarter = (period_end.month - 1) // 3 + 1
      label = f"Q{quarter} '{period_end.year % 100:02d}"

    return cls(
        year=period_end.year,
        label=label,
        revenue=revenue,
        net_income=net_income,
        gross_profit=gross_profit,
        operating_income=operating_income,
        eps=_first(_num(record.get('dilutedEPS')),
                   _num(record.get('basicEPS'))),
        gross_margin=_ratio_pct(gross_profit, revenue),
        operating_margin=_ratio_pct(operating_income, revenue),
        net_margin=_ratio_pct(net_income, revenue),
        sbc=_num(record.get('stockBasedCompensation')),
    )

  @classmethod
  def series(cls,
             records: Sequence[Mapping[str, Any]],
             quarterly: bool = False) -> List['HistoricalFinancials']:
    '''Build every period, ordered by year and then quarter label.'''
    periods = [cls.from_statement(r, quarterly) for r in records]
    return sorted(periods, key=lambda p: (p.year, p.label or ''))

  def to_dict(self) -> Dict[str, Any]:
    return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class PriceProjection:
  '''Projected per-share price for one future year.'''
  year: int
  bear_case: float
  base_case: float
  bull_case: float

  def get(self, scenario: Scenario) -> float:
    return getattr(self, f'{Scenario(scenario).value}_case')

  def to_dict(self) -> Dict[str, float]:
    return {
        'year': self.year,
        'bear_case': self.bear_case,
        'base_case': self.base_case,
        'bull_case': self.bull_case,
    }


@dataclass(frozen=True)
class ProjectionResult:
  '''
  Complete projection output for one company.

  Attributes:
    current_year: Calendar year of the fair-value anchor
    current_price: Market price used for implied returns
    fair_value_today: Year-0 price per scenario (no growth, no dilution)
    projections: One PriceProjection per future year
    implied_returns: Annualized return per scenario in percent, or None
    assumptions: The ProjectionAssumptions used for calculation
  '''
  current_year: int
  current_price: float
  fair_value_today: ScenarioTriple
  projections: List[PriceProjection]
  implied_returns: Dict[str, Optional[float]]
  assumptions: Any = None

  @property
  def final_year(self) -> Optional[PriceProjection]:
    return self.projections[-1] if self.projections else None

  def to_dict(self) -> Dict[str, Any]:
    '''Flatten headline numbers for DataFrame creation.'''
    result: Dict[str, Any] = {
        'current_year': self.current_year,
        'current_price': self.current_price,
    }
    for scenario in Scenario:
      result[f'fair_value_{scenario.value}'] = self.fair_value_today.get(
          scenario)
      result[f'implied_return_{scenario.value}'] = self.implied_returns.get(
          scenario.value)
    if self.final_year:
      result['final_year'] = self.final_year.year
      for scenario in Scenario:
        result[f'target_{scenario.value}'] = self.final_year.get(scenario)
    return result
