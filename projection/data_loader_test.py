import json
from unittest import mock

import pytest
import requests

from projection.data_loader import METRICS_MODULES
from projection.data_loader import TTLCache
from projection.data_loader import YahooFinanceLoader
from projection.data_loader import load_snapshot_file
from projection.data_loader import normalize_symbol
from projection.data_loader import pivot_timeseries


class FakeClock:
  """Manually advanced clock for cache expiry tests."""

  def __init__(self, now: float = 1000.0):
    self.now = now

  def __call__(self) -> float:
    return self.now


def _response(payload, status_code=200):
  resp = mock.Mock()
  resp.status_code = status_code
  resp.json.return_value = payload
  resp.text = json.dumps(payload)
  return resp


class TestTTLCache:
  """Tests for TTLCache."""

  def test_get_within_ttl(self):
    clock = FakeClock()
    cache = TTLCache(ttl_sec=300, clock=clock)
    cache.put('k', 1)

    clock.now += 300
    assert cache.get('k') == 1

  def test_stale_entry_evicted(self):
    clock = FakeClock()
    cache = TTLCache(ttl_sec=300, clock=clock)
    cache.put('k', 1)

    clock.now += 301
    assert cache.get('k') is None
    assert len(cache) == 0

  def test_missing_key(self):
    assert TTLCache().get('missing') is None

  def test_put_prunes_stale_entries(self):
    """Writing a new key drops entries that expired without being read."""
    clock = FakeClock()
    cache = TTLCache(ttl_sec=300, clock=clock)
    cache.put('old', 1)
    clock.now += 200
    cache.put('recent', 2)

    clock.now += 101
    cache.put('new', 3)

    assert len(cache) == 2
    assert cache.get('recent') == 2
    assert cache.get('new') == 3

  def test_clear(self):
    cache = TTLCache()
    cache.put('a', 1)
    cache.put('b', 2)

    cache.clear()

    assert len(cache) == 0


def test_normalize_symbol():
  assert normalize_symbol(' aapl ') == 'AAPL'


class TestLoadSnapshotFile:
  """Tests for load_snapshot_file function."""

  def test_bare_payload(self, tmp_path, quote_summary):
    path = tmp_path / 'TEST.json'
    path.write_text(json.dumps(quote_summary), encoding='utf-8')

    assert load_snapshot_file(path) == quote_summary

  def test_envelope(self, tmp_path, quote_summary):
    path = tmp_path / 'TEST.json'
    path.write_text(json.dumps(
        {'quoteSummary': {
            'result': [quote_summary],
            'error': None
        }}),
                    encoding='utf-8')

    assert load_snapshot_file(path) == quote_summary

  def test_empty_envelope(self, tmp_path):
    path = tmp_path / 'EMPTY.json'
    path.write_text(json.dumps({'quoteSummary': {'result': []}}),
                    encoding='utf-8')

    with pytest.raises(ValueError, match='Empty quote summary'):
      load_snapshot_file(path)

  def test_missing_file(self, tmp_path):
    with pytest.raises(FileNotFoundError, match='Snapshot not found'):
      load_snapshot_file(tmp_path / 'nope.json')


class TestYahooFinanceLoader:
  """Tests for YahooFinanceLoader."""

  def _loader(self, *responses, clock=None):
    session = mock.Mock()
    session.get.side_effect = list(responses)
    cache = TTLCache(clock=clock) if clock else None
    return YahooFinanceLoader(session=session,
                              base_url='https://example.test/',
                              cache=cache,
                              backoff_sec=0.0), session

  def test_fetch_quote_summary_request(self, quote_summary):
    loader, session = self._loader(
        _response({'quoteSummary': {
            'result': [quote_summary]
        }}))

    result = loader.fetch_quote_summary('brk.b', METRICS_MODULES)

    assert result == quote_summary
    url = session.get.call_args.args[0]
    params = session.get.call_args.kwargs['params']
    assert url == 'https://example.test/v10/finance/quoteSummary/BRK.B'
    assert params == {
        'modules': 'defaultKeyStatistics,financialData,summaryDetail'
    }

  def test_no_result_raises(self):
    loader, _ = self._loader(_response({'quoteSummary': {'result': None}}))

    with pytest.raises(ValueError, match='No data for ticker XYZ'):
      loader.fetch_quote_summary('xyz', METRICS_MODULES)

  def test_load_metrics_cached(self, quote_summary):
    """Second load within the TTL does not hit the network."""
    clock = FakeClock()
    loader, session = self._loader(
        _response({'quoteSummary': {
            'result': [quote_summary]
        }}),
        _response({'quoteSummary': {
            'result': [quote_summary]
        }}),
        clock=clock,
    )

    first = loader.load_metrics('test')
    second = loader.load_metrics('TEST')

    assert first == second
    assert first.revenue == 1000.0
    assert session.get.call_count == 1

    clock.now += 301
    loader.load_metrics('test')
    assert session.get.call_count == 2

  def test_metrics_and_quote_cached_separately(self, quote_summary):
    payload = {'quoteSummary': {'result': [quote_summary]}}
    loader, session = self._loader(_response(payload), _response(payload))

    loader.load_metrics('TEST')
    quote = loader.load_quote('TEST')

    assert quote.price == 25.0
    assert session.get.call_count == 2

  def test_clear_cache(self, quote_summary):
    payload = {'quoteSummary': {'result': [quote_summary]}}
    loader, session = self._loader(_response(payload), _response(payload))

    loader.load_quote('TEST')
    loader.clear_cache()
    loader.load_quote('TEST')

    assert session.get.call_count == 2

  def test_retries_then_succeeds(self, quote_summary):
    payload = {'quoteSummary': {'result': [quote_summary]}}
    loader, session = self._loader(
        requests.ConnectionError('reset'),
        _response({}, status_code=503),
        _response(payload),
    )

    with mock.patch('projection.data_loader.time.sleep') as mock_sleep:
      metrics = loader.load_metrics('TEST')

    assert metrics.shares_outstanding == 100.0
    assert session.get.call_count == 3
    assert mock_sleep.call_count == 2

  def test_retries_exhausted(self):
    loader, session = self._loader(
        _response({}, status_code=500),
        _response({}, status_code=500),
        _response({}, status_code=500),
    )

    with mock.patch('projection.data_loader.time.sleep'):
      with pytest.raises(requests.HTTPError, match='HTTP 500'):
        loader.load_metrics('TEST')

    assert session.get.call_count == 3

  @pytest.mark.parametrize('status_code', [400, 401, 404])
  def test_client_error_not_retried(self, status_code):
    loader, session = self._loader(
        _response({}, status_code=status_code),
        _response({}, status_code=200),
    )

    with mock.patch('projection.data_loader.time.sleep') as mock_sleep:
      with pytest.raises(requests.HTTPError, match=f'HTTP {status_code}'):
        loader.load_metrics('TEST')

    assert session.get.call_count == 1
    mock_sleep.assert_not_called()

  def test_rate_limit_retried(self, quote_summary):
    payload = {'quoteSummary': {'result': [quote_summary]}}
    loader, session = self._loader(
        _response({}, status_code=429),
        _response(payload),
    )

    with mock.patch('projection.data_loader.time.sleep') as mock_sleep:
      metrics = loader.load_metrics('TEST')

    assert metrics.revenue == 1000.0
    assert session.get.call_count == 2
    mock_sleep.assert_called_once()

  def test_failed_fetch_not_cached(self, quote_summary):
    payload = {'quoteSummary': {'result': [quote_summary]}}
    loader, _ = self._loader(
        _response({'quoteSummary': {
            'result': []
        }}),
        _response(payload),
    )

    with pytest.raises(ValueError):
      loader.load_metrics('TEST')
    assert loader.load_metrics('TEST').revenue == 1000.0

  def test_load_profile(self):
    payload = {
        'quoteSummary': {
            'result': [{
                'summaryProfile': {
                    'sector': 'Technology',
                    'fullTimeEmployees': 1200
                },
                'price': {
                    'shortName': 'Test Corp'
                },
            }]
        }
    }
    loader, session = self._loader(_response(payload))

    profile = loader.load_profile('test')
    again = loader.load_profile('TEST')

    assert profile is again
    assert profile.symbol == 'TEST'
    assert profile.name == 'Test Corp'
    assert profile.employees == 1200
    assert session.get.call_args.kwargs['params'] == {
        'modules': 'summaryProfile,price'
    }
    assert session.get.call_count == 1

  def test_load_history(self):
    chart = {
        'timestamp': [1704205800, 1704292200],
        'indicators': {
            'quote': [{
                'close': [185.6, -1.0]
            }],
        },
    }
    loader, session = self._loader(
        _response({'chart': {
            'result': [chart],
            'error': None
        }}))

    bars = loader.load_history('aapl')
    loader.load_history('AAPL')

    assert [(b.date, b.close) for b in bars] == [('2024-01-02', 185.6)]
    url = session.get.call_args.args[0]
    assert url == 'https://example.test/v8/finance/chart/AAPL'
    assert session.get.call_args.kwargs['params'] == {
        'interval': '1d',
        'range': '10y'
    }
    assert session.get.call_count == 1

  def test_load_history_no_result_raises(self):
    loader, _ = self._loader(
        _response({'chart': {
            'result': None,
            'error': {
                'code': 'Not Found'
            }
        }}))

    with pytest.raises(ValueError, match='No price history for ticker XYZ'):
      loader.load_history('xyz')

  def _timeseries(self, prefix, points):
    """points: {type suffix: [(asOfDate, raw), ...]}"""
    result = []
    for suffix, values in points.items():
      type_name = f'{prefix}{suffix}'
      result.append({
          'meta': {
              'symbol': ['TEST'],
              'type': [type_name]
          },
          type_name: [{
              'asOfDate': d,
              'reportedValue': {
                  'raw': v
              }
          } for d, v in values] + [None],
      })
    return {'timeseries': {'result': result, 'error': None}}

  def test_load_quarterly_financials(self):
    """Quarterly series are regrouped per period end and sorted."""
    loader, session = self._loader(
        _response(
            self._timeseries(
                'quarterly', {
                    'TotalRevenue': [('2024-03-31', 200.0),
                                     ('2023-12-31', 100.0)],
                    'GrossProfit': [('2024-03-31', 90.0),
                                    ('2023-12-31', 40.0)],
                    'StockBasedCompensation': [('2024-03-31', 7.0)],
                })))

    periods = loader.load_historical_financials('test', 'quarterly')

    assert [p.label for p in periods] == ["Q4 '23", "Q1 '24"]
    assert periods[0].gross_margin == pytest.approx(40.0)
    assert periods[1].gross_margin == pytest.approx(45.0)
    assert periods[0].sbc is None
    assert periods[1].sbc == 7.0

    url = session.get.call_args.args[0]
    params = session.get.call_args.kwargs['params']
    assert url == ('https://example.test/ws/fundamentals-timeseries/v1/'
                   'finance/timeseries/TEST')
    assert params['type'].split(',')[0] == 'quarterlyTotalRevenue'
    assert params['period1'] == 1262304000

  def test_annual_and_quarterly_cached_separately(self):
    annual = self._timeseries('annual',
                              {'TotalRevenue': [('2023-09-30', 400.0)]})
    loader, session = self._loader(_response(annual),
                                   _response(self._timeseries('quarterly', {})))

    periods = loader.load_historical_financials('TEST')
    loader.load_historical_financials('TEST')
    quarters = loader.load_historical_financials('TEST', 'quarterly')

    assert [(p.year, p.label, p.revenue) for p in periods] == [(2023, None,
                                                                400.0)]
    assert quarters == []
    assert session.get.call_count == 2

  def test_unknown_period_raises(self):
    loader, session = self._loader()

    with pytest.raises(ValueError, match='Unknown period'):
      loader.load_historical_financials('TEST', 'monthly')
    session.get.assert_not_called()

  def test_search_filters_types(self):
    loader, session = self._loader(
        _response({
            'quotes': [
                {
                    'symbol': 'AAPL',
                    'longname': 'Apple Inc.',
                    'exchange': 'NMS',
                    'quoteType': 'EQUITY'
                },
                {
                    'symbol': 'AAPL250117C00150000',
                    'quoteType': 'OPTION'
                },
                {
                    'symbol': 'QQQ',
                    'shortname': 'Invesco QQQ',
                    'quoteType': 'ETF'
                },
            ]
        }))

    results = loader.search('apple', limit=5)

    assert [r['symbol'] for r in results] == ['AAPL', 'QQQ']
    assert results[0]['name'] == 'Apple Inc.'
    assert results[1]['name'] == 'Invesco QQQ'
    assert results[1]['exchange'] == ''
    assert session.get.call_args.kwargs['params']['quotesCount'] == 5

  def test_search_blank_query(self):
    loader, session = self._loader()

    assert loader.search('   ') == []
    session.get.assert_not_called()


def test_pivot_timeseries_ignores_other_prefixes():
  data = {
      'timeseries': {
          'result': [
              {
                  'meta': {
                      'type': ['trailingTotalRevenue']
                  },
                  'trailingTotalRevenue': [{
                      'asOfDate': '2024-06-30',
                      'reportedValue': {
                          'raw': 1.0
                      }
                  }],
              },
              {
                  'meta': {
                      'type': ['annualNetIncome']
                  },
                  'annualNetIncome': [{
                      'asOfDate': '2023-12-31',
                      'reportedValue': {
                          'raw': 5.0
                      }
                  }],
              },
          ]
      }
  }

  assert pivot_timeseries(data, 'annual') == [{
      'date': '2023-12-31',
      'netIncome': {
          'raw': 5.0
      }
  }]
  assert pivot_timeseries({}, 'annual') == []
