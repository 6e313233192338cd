"""
Pure projection math.

Iterates the multiple-based valuation over a 1..N year horizon for the bear,
base and bull scenarios. Revenue compounds at each scenario's growth rate and
share count compounds at the shared dilution rate.

Key functions:
  project: Yearly PriceProjection sequence
  fair_value_today: Year-0 anchor (no growth, no dilution)
  compute_cagr: Annualized return between two prices
  implied_returns: CAGR from current price to each final-year target
"""

from collections.abc import Sequence
import math
from typing import Optional

from projection.domain.types import FinancialMetrics
from projection.domain.types import MultipleType
from projection.domain.types import PriceProjection
from projection.domain.types import Scenario
from projection.domain.types import ScenarioTriple
from projection.engine.multiples import fair_value_price
from projection.scenarios.config import ProjectionAssumptions


def base_revenue(metrics: FinancialMetrics) -> float:
  """Current revenue, 0 when unknown."""
  return metrics.revenue or 0.0


def base_shares(metrics: FinancialMetrics) -> float:
  """Current share count, 1 when unknown or zero."""
  return metrics.shares_outstanding or 1.0


def compound(value: float, rate: float, year: int) -> float:
  """
  value x (1 + rate)^year, saturating to +/-inf instead of overflowing.

  Long horizons with high rates exceed the float range; the result then
  carries the sign the exact product would have.
  """
  try:
    return value * (1.0 + rate)**year
  except OverflowError:
    if value == 0:
      return 0.0
    sign = -1.0 if (1.0 + rate) < 0 and year % 2 else 1.0
    return math.copysign(math.inf, value * sign)


def scenario_price(
    current_revenue: float,
    shares_outstanding: float,
    growth_rate: float,
    target_margin: float,
    exit_multiple: float,
    dilution_rate: float,
    year: int,
    multiple_type: MultipleType,
    metrics: FinancialMetrics,
) -> float:
  """
  Compute one scenario's price after compounding growth and dilution.

  Args:
    current_revenue: Trailing revenue
    shares_outstanding: Current share count
    growth_rate: Annual revenue growth (decimal)
    target_margin: Net margin in the projection year (decimal)
    exit_multiple: Multiple applied in the projection year
    dilution_rate: Annual share count growth (decimal)
    year: Years from today (0 means no compounding)
    multiple_type: Valuation basis
    metrics: Snapshot supplying net debt

  Returns:
    Price per share, floored at 0. Infinite when revenue compounding
    saturates and the margin is positive; 0 when dilution drives the share
    count to 0 or below.
  """
  projected_revenue = compound(current_revenue, growth_rate, year)
  projected_shares = compound(shares_outstanding, dilution_rate, year)
  return fair_value_price(
      revenue=projected_revenue,
      shares_outstanding=projected_shares,
      target_margin=target_margin,
      exit_multiple=exit_multiple,
      multiple_type=multiple_type,
      metrics=metrics,
  )


def _price_for(
    metrics: FinancialMetrics,
    assumptions: ProjectionAssumptions,
    scenario: Scenario,
    year: int,
) -> float:
  return scenario_price(
      current_revenue=base_revenue(metrics),
      shares_outstanding=base_shares(metrics),
      growth_rate=assumptions.revenue_growth.get(scenario) / 100.0,
      target_margin=assumptions.target_margin.get(scenario) / 100.0,
      exit_multiple=assumptions.exit_multiple.get(scenario),
      dilution_rate=assumptions.dilution_rate / 100.0,
      year=year,
      multiple_type=assumptions.multiple_type,
      metrics=metrics,
  )


def project(
    metrics: FinancialMetrics,
    assumptions: ProjectionAssumptions,
    current_year: int,
) -> list[PriceProjection]:
  """
  Project bear/base/bull prices for each year of the horizon.

  Args:
    metrics: Trailing fundamentals snapshot
    assumptions: Percent-denominated scenario assumptions
    current_year: Calendar year of the snapshot

  Returns:
    One PriceProjection per year, years current_year+1 .. current_year+N.
    Empty when the horizon is not positive.
  """
  projections = []
  for i in range(1, assumptions.years + 1):
    projections.append(
        PriceProjection(
            year=current_year + i,
            bear_case=_price_for(metrics, assumptions, Scenario.BEAR, i),
            base_case=_price_for(metrics, assumptions, Scenario.BASE, i),
            bull_case=_price_for(metrics, assumptions, Scenario.BULL, i),
        ))
  return projections


def fair_value_today(
    metrics: FinancialMetrics,
    assumptions: ProjectionAssumptions,
) -> ScenarioTriple:
  """Price per scenario on current revenue and shares, with no compounding."""
  return ScenarioTriple(
      bear=_price_for(metrics, assumptions, Scenario.BEAR, 0),
      base=_price_for(metrics, assumptions, Scenario.BASE, 0),
      bull=_price_for(metrics, assumptions, Scenario.BULL, 0),
  )


def compute_cagr(
    start: Optional[float],
    end: Optional[float],
    years: float,
) -> Optional[float]:
  """
  Compound annual growth rate between two values, in percent.

  Returns:
    None if start is missing or not positive, end is missing or zero,
    or years is not positive
  """
  if not start or not end or years <= 0 or start <= 0:
    return None
  return ((end / start)**(1.0 / years) - 1.0) * 100.0


def implied_returns(
    current_price: Optional[float],
    projections: Sequence[PriceProjection],
    years: int,
) -> dict[str, Optional[float]]:
  """
  Annualized return from current price to each final-year target.

  Returns:
    Mapping of scenario name to CAGR in percent (None when undefined)
  """
  if not projections:
    return {scenario.value: None for scenario in Scenario}

  final = projections[-1]
  return {
      scenario.value: compute_cagr(current_price, final.get(scenario), years)
      for scenario in Scenario
  }
