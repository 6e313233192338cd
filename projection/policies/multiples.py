'''
Current and exit multiple policies.

Current multiple policies read the company's prevailing multiple for a
valuation basis from the metrics snapshot. Exit multiple policies turn that
single number into a bear/base/bull triple.
'''

from abc import ABC, abstractmethod
from typing import Optional

from projection.domain.types import (
    FinancialMetrics,
    MultipleType,
    PolicyOutput,
    ScenarioTriple,
)

# Used when the snapshot yields no usable multiple.
FALLBACK_MULTIPLES = {
    MultipleType.PE: 20.0,
    MultipleType.EV_EBIT: 15.0,
    MultipleType.EV_EBITDA: 12.0,
    MultipleType.EV_REVENUE: 3.0,
    MultipleType.EV_FCF: 20.0,
}


def enterprise_value(metrics: FinancialMetrics,
                     market_cap: Optional[float] = None) -> Optional[float]:
  '''
  Enterprise value from the snapshot.

  Prefers the reported figure; otherwise market cap plus net debt when both
  are known.
  '''
  if metrics.enterprise_value is not None:
    return metrics.enterprise_value
  if market_cap is not None and metrics.net_debt is not None:
    return market_cap + metrics.net_debt
  return None


class CurrentMultiplePolicy(ABC):
  '''
  Base class for current multiple policies.

  Subclasses implement compute() to return the prevailing multiple for one
  valuation basis.
  '''

  @abstractmethod
  def compute(
      self,
      metrics: FinancialMetrics,
      multiple_type: MultipleType,
      market_cap: Optional[float] = None,
  ) -> PolicyOutput[float]:
    '''
    Compute the current multiple.

    Args:
      metrics: Trailing fundamentals snapshot
      multiple_type: Valuation basis
      market_cap: Market capitalization, used when EV is not reported

    Returns:
      PolicyOutput with the multiple and diagnostics
    '''


class ObservedMultiple(CurrentMultiplePolicy):
  '''
  Multiple observed in the snapshot.

  EV multiples are recomputed as EV / metric when both are non-zero,
  otherwise the reported ratio is used (none exists for EV/FCF). Missing or
  zero results use FALLBACK_MULTIPLES.
  '''

  def __init__(self, fallbacks: Optional[dict[MultipleType, float]] = None):
    '''
    Initialize observed multiple policy.

    Args:
      fallbacks: Multiple per basis when none is observed
        (default: FALLBACK_MULTIPLES)
    '''
    self.fallbacks = dict(FALLBACK_MULTIPLES)
    if fallbacks:
      self.fallbacks.update(fallbacks)

  def compute(
      self,
      metrics: FinancialMetrics,
      multiple_type: MultipleType,
      market_cap: Optional[float] = None,
  ) -> PolicyOutput[float]:
    '''Compute the observed multiple, or the fallback.'''
    multiple_type = MultipleType(multiple_type)
    ev = enterprise_value(metrics, market_cap)

    if multiple_type is MultipleType.PE:
      observed, source = metrics.pe_ratio, 'reported'
    else:
      denominator, reported = {
          MultipleType.EV_EBIT: (metrics.ebit, metrics.ev_to_ebit),
          MultipleType.EV_EBITDA: (metrics.ebitda, metrics.ev_to_ebitda),
          MultipleType.EV_REVENUE: (metrics.revenue, metrics.ev_to_revenue),
          MultipleType.EV_FCF: (metrics.free_cash_flow, None),
      }[multiple_type]
      if ev and denominator:
        observed, source = ev / denominator, 'computed'
      else:
        observed, source = reported, 'reported'

    if not observed:
      return PolicyOutput(value=self.fallbacks[multiple_type],
                          diag={
                              'multiple_method': 'observed',
                              'multiple_type': multiple_type.value,
                              'source': 'fallback',
                              'enterprise_value': ev,
                          })

    return PolicyOutput(value=observed,
                        diag={
                            'multiple_method': 'observed',
                            'multiple_type': multiple_type.value,
                            'source': source,
                            'enterprise_value': ev,
                        })


class ExitMultiplePolicy(ABC):
  '''
  Base class for exit multiple policies.

  Subclasses implement compute() to spread a current multiple across the
  three scenarios.
  '''

  @abstractmethod
  def compute(self, current_multiple: float) -> PolicyOutput[ScenarioTriple]:
    '''
    Compute exit multiples per scenario.

    Args:
      current_multiple: Prevailing multiple for the chosen basis

    Returns:
      PolicyOutput with a ScenarioTriple of exit multiples
    '''


class ScaledExitMultiple(ExitMultiplePolicy):
  '''
  Exit multiples scaled from the current multiple.

  Base keeps the current multiple; bear and bull scale it down and up.
  '''

  def __init__(self, bear_scale: float = 0.7, bull_scale: float = 1.3):
    '''
    Initialize scaled exit multiple policy.

    Args:
      bear_scale: Factor for the bear case (default: 0.7)
      bull_scale: Factor for the bull case (default: 1.3)
    '''
    self.bear_scale = bear_scale
    self.bull_scale = bull_scale

  def compute(self, current_multiple: float) -> PolicyOutput[ScenarioTriple]:
    '''Scale the current multiple per scenario.'''
    multiples = ScenarioTriple(
        bear=current_multiple * self.bear_scale,
        base=current_multiple,
        bull=current_multiple * self.bull_scale,
    )
    return PolicyOutput(value=multiples,
                        diag={
                            'exit_method': 'scaled',
                            'bear_scale': self.bear_scale,
                            'bull_scale': self.bull_scale,
                        })
