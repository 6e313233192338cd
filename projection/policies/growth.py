"""
Revenue growth policies.

These policies seed the bear/base/bull annual revenue growth rate (CAGR, in
percent) used over the whole projection horizon.
"""

from abc import ABC
from abc import abstractmethod

from projection.domain.types import FinancialMetrics
from projection.domain.types import PolicyOutput
from projection.domain.types import ScenarioTriple


class GrowthPolicy(ABC):
  """
  Base class for revenue growth policies.

  Subclasses implement compute() to return a growth rate per scenario.
  """

  @abstractmethod
  def compute(self, metrics: FinancialMetrics) -> PolicyOutput[ScenarioTriple]:
    """
    Compute revenue growth rates.

    Args:
      metrics: Trailing fundamentals snapshot

    Returns:
      PolicyOutput with a ScenarioTriple of growth rates in percent
    """


class FixedGrowth(GrowthPolicy):
  """
  Fixed growth rates independent of the snapshot.
  """

  def __init__(self, bear: float = 5.0, base: float = 10.0,
               bull: float = 18.0):
    """
    Initialize fixed growth policy.

    Args:
      bear: Bear case growth in percent (default: 5%)
      base: Base case growth in percent (default: 10%)
      bull: Bull case growth in percent (default: 18%)
    """
    self.bear = bear
    self.base = base
    self.bull = bull

  def compute(self, metrics: FinancialMetrics) -> PolicyOutput[ScenarioTriple]:
    """Return fixed growth rates."""
    del metrics
    return PolicyOutput(
        value=ScenarioTriple(bear=self.bear, base=self.base, bull=self.bull),
        diag={
            'growth_method': 'fixed',
            'bear': self.bear,
            'base': self.base,
            'bull': self.bull,
        })
