"""
Policy registry for mapping string names to policy factories.

This enables seeding configurations to name policies with strings
(JSON friendly) while still instantiating the correct policy classes.

To add a new policy:
1. Implement the policy class in the appropriate module
   (e.g., policies/margin.py)
2. Add a factory here that creates the policy instance
3. Register it in the appropriate registry dictionary

Example:
  # In policies/margin.py
  class SectorMargin(MarginPolicy):
    def compute(self, metrics: FinancialMetrics) -> PolicyOutput[ScenarioTriple]:
      ...

  # In scenarios/registry.py
  MARGIN_POLICIES['sector'] = lambda: SectorMargin(sector_table=...)
"""

from collections.abc import Callable
from typing import Any, cast

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
from projection.scenarios.config import SeedConfig

GROWTH_POLICIES: dict[str, Callable[[], GrowthPolicy]] = {
    'fixed_5_10_18':
        lambda: FixedGrowth(bear=5.0, base=10.0, bull=18.0),
    'fixed_3_6_10':
        lambda: FixedGrowth(bear=3.0, base=6.0, bull=10.0),
    'fixed_10_20_30':
        lambda: FixedGrowth(bear=10.0, base=20.0, bull=30.0),
}

MARGIN_POLICIES: dict[str, Callable[[], MarginPolicy]] = {
    'additive_spread':
        lambda: AdditiveSpreadMargin(spread_ratio=0.25, min_spread=5.0),
    'additive_spread_wide':
        lambda: AdditiveSpreadMargin(spread_ratio=0.5, min_spread=10.0),
}

CURRENT_MULTIPLE_POLICIES: dict[str, Callable[[], CurrentMultiplePolicy]] = {
    'observed': ObservedMultiple,
}

EXIT_MULTIPLE_POLICIES: dict[str, Callable[[], ExitMultiplePolicy]] = {
    'scaled_30': lambda: ScaledExitMultiple(bear_scale=0.7, bull_scale=1.3),
    'scaled_20': lambda: ScaledExitMultiple(bear_scale=0.8, bull_scale=1.2),
    'flat': lambda: ScaledExitMultiple(bear_scale=1.0, bull_scale=1.0),
}

DILUTION_POLICIES: dict[str, Callable[[], DilutionPolicy]] = {
    'fixed_0pct': lambda: FixedDilution(rate=0.0),
    'fixed_1pct': lambda: FixedDilution(rate=1.0),
    'fixed_2pct': lambda: FixedDilution(rate=2.0),
    'buyback_2pct': lambda: FixedDilution(rate=-2.0),
}

POLICY_REGISTRY = {
    'growth': GROWTH_POLICIES,
    'margin': MARGIN_POLICIES,
    'current_multiple': CURRENT_MULTIPLE_POLICIES,
    'exit_multiple': EXIT_MULTIPLE_POLICIES,
    'dilution': DILUTION_POLICIES,
}


def create_policies(config: SeedConfig) -> dict[str, Any]:
  """
  Create policy instances from seeding configuration.

  Args:
    config: SeedConfig with policy names

  Returns:
    Dictionary with instantiated policy objects:
    - growth: GrowthPolicy
    - margin: MarginPolicy
    - current_multiple: CurrentMultiplePolicy
    - exit_multiple: ExitMultiplePolicy
    - dilution: DilutionPolicy

  Raises:
    KeyError: If a policy name is not found in the registry
  """
  policies: dict[str, Any] = {}
  for category, registry in POLICY_REGISTRY.items():
    name = getattr(config, category)
    policy_dict = cast(dict[str, Callable[[], Any]], registry)
    try:
      factory = policy_dict[name]
    except KeyError as e:
      raise KeyError(f"Unknown {category} policy: '{name}'. "
                     f'Available: {list(policy_dict.keys())}') from e
    policies[category] = factory()
  return policies


def list_policies() -> dict[str, list[str]]:
  """
  List all available policies by category.

  Returns:
    Dictionary mapping category names to list of policy names
  """
  result: dict[str, list[str]] = {}
  for category, policies_dict in POLICY_REGISTRY.items():
    policy_dict = cast(dict[str, object], policies_dict)
    result[category] = list(policy_dict.keys())
  return result
