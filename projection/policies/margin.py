'''
Target margin policies.

These policies seed the bear/base/bull target net margin (in percent) from
the company's current net margin.
'''

from abc import ABC, abstractmethod

from projection.domain.types import FinancialMetrics, PolicyOutput, ScenarioTriple


class MarginPolicy(ABC):
  '''
  Base class for target margin policies.

  Subclasses implement compute() to return a margin per scenario.
  '''

  @abstractmethod
  def compute(self, metrics: FinancialMetrics) -> PolicyOutput[ScenarioTriple]:
    '''
    Compute target margins.

    Args:
      metrics: Trailing fundamentals snapshot

    Returns:
      PolicyOutput with a ScenarioTriple of margins in percent
    '''


class AdditiveSpreadMargin(MarginPolicy):
  '''
  Margins centered on the current net margin with an additive spread.

  spread = max(|margin| x spread_ratio, min_spread) percentage points,
  subtracted for bear and added for bull, so bull > base > bear holds for
  negative margins too.
  '''

  def __init__(
      self,
      spread_ratio: float = 0.25,
      min_spread: float = 5.0,
      fallback_margin: float = 10.0,
  ):
    '''
    Initialize additive spread policy.

    Args:
      spread_ratio: Spread as a fraction of |current margin| (default: 0.25)
      min_spread: Minimum spread in percentage points (default: 5)
      fallback_margin: Center when net margin is unknown (default: 10%)
    '''
    self.spread_ratio = spread_ratio
    self.min_spread = min_spread
    self.fallback_margin = fallback_margin

  def compute(self, metrics: FinancialMetrics) -> PolicyOutput[ScenarioTriple]:
    '''Compute margins around the current net margin.'''
    if metrics.net_margin is None:
      center = self.fallback_margin
      source = 'fallback'
    else:
      center = metrics.net_margin
      source = 'net_margin'

    spread = max(abs(center) * self.spread_ratio, self.min_spread)

    margins = ScenarioTriple(
        bear=center - spread,
        base=center,
        bull=center + spread,
    )
    return PolicyOutput(value=margins,
                        diag={
                            'margin_method': 'additive_spread',
                            'source': source,
                            'center': center,
                            'spread': spread,
                        })
