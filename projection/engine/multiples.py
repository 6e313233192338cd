"""
Pure multiple-based valuation math.

This module contains pure functions for turning a (revenue, margin, multiple)
triple into a per-share price. No pandas, no I/O, just numeric computations.

Key functions:
  fair_value_price: Main entry point, computes price per share
  equity_value: Equity value under one valuation basis

The EV-based formulas approximate operating margin as net margin x 1.3 and
EBITDA margin as operating margin x 1.2, so a single margin input drives
every basis. Both factors are fixed heuristics, not fitted values.
"""

from collections.abc import Callable

from projection.domain.types import FinancialMetrics
from projection.domain.types import MultipleType

OPERATING_MARGIN_FACTOR = 1.3
EBITDA_MARGIN_FACTOR = 1.2


def _pe_equity(revenue: float, margin: float, multiple: float,
               net_debt: float) -> float:
  del net_debt  # P/E values equity directly.
  return revenue * margin * multiple


def _ev_ebit_equity(revenue: float, margin: float, multiple: float,
                    net_debt: float) -> float:
  operating_margin = margin * OPERATING_MARGIN_FACTOR
  return revenue * operating_margin * multiple - net_debt


def _ev_ebitda_equity(revenue: float, margin: float, multiple: float,
                      net_debt: float) -> float:
  operating_margin = margin * OPERATING_MARGIN_FACTOR
  return (revenue * operating_margin * EBITDA_MARGIN_FACTOR * multiple -
          net_debt)


def _ev_revenue_equity(revenue: float, margin: float, multiple: float,
                       net_debt: float) -> float:
  del margin
  return revenue * multiple - net_debt


def _ev_fcf_equity(revenue: float, margin: float, multiple: float,
                   net_debt: float) -> float:
  # FCF margin taken as the net margin.
  return revenue * margin * multiple - net_debt


EQUITY_VALUE_FORMULAS: dict[MultipleType, Callable[[float, float, float, float],
                                                   float]] = {
    MultipleType.PE: _pe_equity,
    MultipleType.EV_EBIT: _ev_ebit_equity,
    MultipleType.EV_EBITDA: _ev_ebitda_equity,
    MultipleType.EV_REVENUE: _ev_revenue_equity,
    MultipleType.EV_FCF: _ev_fcf_equity,
}


def net_debt_or_zero(metrics: FinancialMetrics | None) -> float:
  """Net debt from the snapshot, 0 when unknown."""
  if metrics is None or metrics.net_debt is None:
    return 0.0
  return metrics.net_debt


def equity_value(
    revenue: float,
    target_margin: float,
    exit_multiple: float,
    multiple_type: MultipleType,
    net_debt: float = 0.0,
) -> float:
  """
  Compute equity value under one valuation basis.

  Args:
    revenue: Revenue (current or projected)
    target_margin: Net margin as a decimal (0.15 for 15%), may be negative
    exit_multiple: Multiple applied to the basis metric
    multiple_type: Valuation basis
    net_debt: Net debt subtracted for EV-based bases

  Returns:
    Equity value (may be negative)

  Raises:
    ValueError: If multiple_type is not a known basis
  """
  formula = EQUITY_VALUE_FORMULAS[MultipleType(multiple_type)]
  return formula(revenue, target_margin, exit_multiple, net_debt)


def fair_value_price(
    revenue: float,
    shares_outstanding: float,
    target_margin: float,
    exit_multiple: float,
    multiple_type: MultipleType,
    metrics: FinancialMetrics | None = None,
) -> float:
  """
  Compute price per share implied by a multiple.

  Callers substitute 1 for missing or zero share counts before calling. A
  share count that is not positive (for example after 100% buybacks) gives 0.

  Args:
    revenue: Revenue (current or projected)
    shares_outstanding: Share count (current or projected)
    target_margin: Net margin as a decimal, may be negative
    exit_multiple: Multiple applied to the basis metric
    multiple_type: Valuation basis
    metrics: Snapshot supplying net debt for EV-based bases

  Returns:
    Price per share, floored at 0
  """
  equity = equity_value(
      revenue=revenue,
      target_margin=target_margin,
      exit_multiple=exit_multiple,
      multiple_type=multiple_type,
      net_debt=net_debt_or_zero(metrics),
  )
  if not shares_outstanding > 0:
    return 0.0
  price = equity / shares_outstanding
  # NaN (infinite equity over infinite shares) also floors to 0
  return price if price > 0 else 0.0
