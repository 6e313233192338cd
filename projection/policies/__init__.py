"""
Seeding policies for default projection assumptions.

Each policy estimates one component of the default assumptions (growth,
margin, multiples, dilution) and returns both a value and diagnostic
information.

To add a new policy:
1. Create a new class inheriting from the appropriate base (e.g., MarginPolicy)
2. Implement the compute() method returning PolicyOutput
3. Register in scenarios/registry.py

Example:
  class SectorMargin(MarginPolicy):
    def compute(self, metrics: FinancialMetrics) -> PolicyOutput[ScenarioTriple]:
      margins = ...  # your calculation
      return PolicyOutput(value=margins, diag={"margin_method": "sector"})
"""

from projection.policies.dilution import DilutionPolicy
from projection.policies.dilution import FixedDilution
from projection.policies.growth import FixedGrowth
from projection.policies.growth import GrowthPolicy
from projection.policies.margin import AdditiveSpreadMargin
from projection.policies.margin import MarginPolicy
from projection.policies.multiples import CurrentMultiplePolicy
from projection.policies.multiples import ExitMultiplePolicy
from projection.policies.multiples import ObservedMultiple
from projection.policies.multiples import ScaledExitMultiple

__all__ = [
  'GrowthPolicy', 'FixedGrowth',
  'MarginPolicy', 'AdditiveSpreadMargin',
  'CurrentMultiplePolicy', 'ObservedMultiple',
  'ExitMultiplePolicy', 'ScaledExitMultiple',
  'DilutionPolicy', 'FixedDilution',
]
