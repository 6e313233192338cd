from typing import Any

import pytest

from projection.domain.types import FinancialMetrics
from projection.domain.types import MultipleType
from projection.domain.types import ScenarioTriple
from projection.scenarios.config import ProjectionAssumptions


@pytest.fixture
def sample_metrics() -> FinancialMetrics:
  """Profitable company with round numbers.

  Revenue 1000, net margin 10%, 100 shares, net debt 200.
  """
  return FinancialMetrics(
      pe_ratio=25.0,
      ev_to_ebitda=14.0,
      ev_to_revenue=4.0,
      operating_margin=13.0,
      net_margin=10.0,
      revenue=1000.0,
      net_income=100.0,
      ebitda=156.0,
      ebit=130.0,
      free_cash_flow=80.0,
      total_cash=100.0,
      total_debt=300.0,
      net_debt=200.0,
      shares_outstanding=100.0,
      enterprise_value=2600.0,
  )


@pytest.fixture
def loss_making_metrics() -> FinancialMetrics:
  """Company with a -10% net margin and no P/E."""
  return FinancialMetrics(
      net_margin=-10.0,
      revenue=500.0,
      net_income=-50.0,
      shares_outstanding=50.0,
      net_debt=-100.0,
  )


@pytest.fixture
def empty_metrics() -> FinancialMetrics:
  """Snapshot with every field unknown."""
  return FinancialMetrics()


@pytest.fixture
def flat_assumptions() -> ProjectionAssumptions:
  """Same growth, margin and multiple for every scenario, no dilution."""
  return ProjectionAssumptions(
      revenue_growth=ScenarioTriple(bear=0.0, base=0.0, bull=0.0),
      target_margin=ScenarioTriple(bear=10.0, base=10.0, bull=10.0),
      exit_multiple=ScenarioTriple(bear=20.0, base=20.0, bull=20.0),
      multiple_type=MultipleType.PE,
      dilution_rate=0.0,
      years=5,
  )


@pytest.fixture
def sample_assumptions() -> ProjectionAssumptions:
  """Typical seeded assumptions for sample_metrics (P/E basis)."""
  return ProjectionAssumptions(
      revenue_growth=ScenarioTriple(bear=5.0, base=10.0, bull=18.0),
      target_margin=ScenarioTriple(bear=5.0, base=10.0, bull=15.0),
      exit_multiple=ScenarioTriple(bear=17.5, base=25.0, bull=32.5),
      multiple_type=MultipleType.PE,
      dilution_rate=1.0,
      years=5,
  )


@pytest.fixture
def quote_summary() -> dict[str, Any]:
  """Quote-summary payload in the upstream {'raw': x} wrapper format."""
  return {
      'defaultKeyStatistics': {
          'pegRatio': {'raw': 2.1, 'fmt': '2.10'},
          'priceToBook': {'raw': 45.0},
          'enterpriseToEbitda': {'raw': 14.0},
          'enterpriseToRevenue': {'raw': 4.0},
          'trailingEps': {'raw': 1.0},
          'sharesOutstanding': {'raw': 100.0},
          'enterpriseValue': {'raw': 2600.0},
          'netIncomeToCommon': {'raw': 90.0},
      },
      'financialData': {
          'grossMargins': {'raw': 0.44},
          'operatingMargins': {'raw': 0.13},
          'profitMargins': {'raw': 0.10},
          'returnOnEquity': {'raw': 1.5},
          'returnOnAssets': {'raw': 0.2},
          'totalRevenue': {'raw': 1000.0},
          'netIncomeToCommon': {'raw': 100.0},
          'ebitda': {'raw': 156.0},
          'freeCashflow': {'raw': 80.0},
          'totalCash': {'raw': 100.0},
          'totalDebt': {'raw': 300.0},
      },
      'summaryDetail': {
          'trailingPE': {'raw': 25.0},
          'forwardPE': {'raw': 22.0},
          'priceToSalesTrailing12Months': {'raw': 2.5},
      },
      'price': {
          'symbol': 'TEST',
          'longName': 'Test Corp',
          'regularMarketPrice': {'raw': 25.0},
          'regularMarketChange': {'raw': 0.5},
          'regularMarketChangePercent': {'raw': 0.0204},
          'regularMarketDayHigh': {'raw': 25.5},
          'regularMarketDayLow': {'raw': 24.2},
          'regularMarketOpen': {'raw': 24.5},
          'regularMarketPreviousClose': {'raw': 24.5},
          'regularMarketVolume': {'raw': 1000000},
          'marketCap': {'raw': 2500.0},
          'exchangeName': 'NasdaqGS',
      },
  }
