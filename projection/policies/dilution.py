"""
Share dilution policies.

These policies determine the annual share count growth (in percent) shared by
all scenarios.
"""

from abc import ABC
from abc import abstractmethod

from projection.domain.types import PolicyOutput


class DilutionPolicy(ABC):
  """
  Base class for dilution policies.

  Subclasses implement compute() to return an annual dilution rate.
  """

  @abstractmethod
  def compute(self) -> PolicyOutput[float]:
    """
    Compute annual dilution rate.

    Returns:
      PolicyOutput with dilution rate in percent and diagnostics
      Positive rate means share issuance, negative means buybacks
    """


class FixedDilution(DilutionPolicy):
  """
  Fixed dilution rate.

  Simple policy that returns a constant annual share count growth.
  """

  def __init__(self, rate: float = 1.0):
    """
    Initialize fixed dilution policy.

    Args:
      rate: Annual dilution in percent (default: 1%)
    """
    self.rate = rate

  def compute(self) -> PolicyOutput[float]:
    """Return fixed dilution rate."""
    return PolicyOutput(
      value=self.rate,
      diag={
        'dilution_method': 'fixed',
        'dilution_rate': self.rate,
      }
    )
