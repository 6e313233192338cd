"""
Projection assumptions and seeding configuration.

ProjectionAssumptions is the user-editable input to the projection builder.
It is immutable; every edit goes through a with_*() method that returns a new
value, so each intermediate state can be inspected and compared.

SeedConfig is a serializable (JSON-friendly) configuration naming which
policies produce the default assumptions for a fresh metrics snapshot.
"""

from dataclasses import asdict
from dataclasses import dataclass
from dataclasses import replace
import json
from typing import Any

from projection.domain.types import MultipleType
from projection.domain.types import Scenario
from projection.domain.types import ScenarioTriple

SCENARIO_FIELDS = ('revenue_growth', 'target_margin', 'exit_multiple')


@dataclass(frozen=True)
class ProjectionAssumptions:
  """
  User assumptions for a three-scenario price projection.

  Attributes:
    revenue_growth: Annual revenue CAGR per scenario, in percent
    target_margin: Target net margin per scenario, in percent
    exit_multiple: Exit multiple per scenario (e.g., 20.0 for 20x)
    multiple_type: Valuation basis the exit multiple applies to
    dilution_rate: Annual share dilution shared by all scenarios, in percent
    years: Projection horizon in years
  """
  revenue_growth: ScenarioTriple
  target_margin: ScenarioTriple
  exit_multiple: ScenarioTriple
  multiple_type: MultipleType = MultipleType.PE
  dilution_rate: float = 1.0
  years: int = 5

  def __post_init__(self):
    object.__setattr__(self, 'multiple_type', MultipleType(self.multiple_type))

  def with_scenario_value(self, field_name: str, scenario: Scenario,
                          value: float) -> 'ProjectionAssumptions':
    """
    Return a copy with one scenario parameter changed.

    Args:
      field_name: One of 'revenue_growth', 'target_margin', 'exit_multiple'
      scenario: Scenario to edit
      value: New value

    Raises:
      KeyError: If field_name is not a per-scenario field
    """
    if field_name not in SCENARIO_FIELDS:
      raise KeyError(f"Unknown scenario field: '{field_name}'. "
                     f'Available: {list(SCENARIO_FIELDS)}')
    triple = getattr(self, field_name).with_value(scenario, value)
    return replace(self, **{field_name: triple})

  def with_dilution_rate(self, rate: float) -> 'ProjectionAssumptions':
    return replace(self, dilution_rate=float(rate))

  def with_years(self, years: int) -> 'ProjectionAssumptions':
    return replace(self, years=int(years))

  def with_multiple_type(
      self,
      multiple_type: MultipleType,
      exit_multiple: ScenarioTriple,
  ) -> 'ProjectionAssumptions':
    """
    Switch valuation basis and replace all three exit multiples together.

    Exit multiples are only meaningful for one basis, so the caller supplies
    the triple for the new basis (see scenarios.seeding.switch_multiple_type).
    """
    return replace(self,
                   multiple_type=MultipleType(multiple_type),
                   exit_multiple=exit_multiple)

  def to_dict(self) -> dict[str, Any]:
    """Convert to dictionary."""
    return {
        'revenue_growth': self.revenue_growth.to_dict(),
        'target_margin': self.target_margin.to_dict(),
        'exit_multiple': self.exit_multiple.to_dict(),
        'multiple_type': self.multiple_type.value,
        'dilution_rate': self.dilution_rate,
        'years': self.years,
    }

  def to_json(self) -> str:
    """Serialize to JSON string."""
    return json.dumps(self.to_dict(), indent=2)

  @classmethod
  def from_dict(cls, data: dict[str, Any]) -> 'ProjectionAssumptions':
    """Create from dictionary."""
    return cls(
        revenue_growth=ScenarioTriple.from_dict(data['revenue_growth']),
        target_margin=ScenarioTriple.from_dict(data['target_margin']),
        exit_multiple=ScenarioTriple.from_dict(data['exit_multiple']),
        multiple_type=MultipleType(data.get('multiple_type', 'pe')),
        dilution_rate=float(data.get('dilution_rate', 1.0)),
        years=int(data.get('years', 5)),
    )

  @classmethod
  def from_json(cls, json_str: str) -> 'ProjectionAssumptions':
    """Create from JSON string."""
    return cls.from_dict(json.loads(json_str))


@dataclass
class SeedConfig:
  """
  Configuration for seeding default assumptions from a metrics snapshot.

  All policy fields are strings that map to factories in the registry.

  Attributes:
    name: Human-readable configuration name
    growth: Revenue growth policy name (e.g., 'fixed_5_10_18')
    margin: Target margin policy name (e.g., 'additive_spread')
    current_multiple: Current multiple policy name (e.g., 'observed')
    exit_multiple: Exit multiple policy name (e.g., 'scaled_30')
    dilution: Dilution policy name (e.g., 'fixed_1pct')
    multiple_type: Initial valuation basis
    years: Projection horizon
  """
  name: str = 'default'
  growth: str = 'fixed_5_10_18'
  margin: str = 'additive_spread'
  current_multiple: str = 'observed'
  exit_multiple: str = 'scaled_30'
  dilution: str = 'fixed_1pct'
  multiple_type: str = MultipleType.PE.value
  years: int = 5

  @classmethod
  def default(cls) -> 'SeedConfig':
    """
    Create default seeding configuration.

    Uses:
      - Revenue growth 5% / 10% / 18%
      - Net margin +/- max(25% of |margin|, 5pp)
      - Current multiple from the snapshot, scaled 0.7x / 1.0x / 1.3x
      - 1% annual dilution
      - P/E basis over 5 years
    """
    return cls()

  @classmethod
  def conservative(cls) -> 'SeedConfig':
    """Lower growth, tighter exit multiples, 2% dilution."""
    return cls(
        name='conservative',
        growth='fixed_3_6_10',
        exit_multiple='scaled_20',
        dilution='fixed_2pct',
    )

  def to_dict(self) -> dict[str, Any]:
    """Convert to dictionary."""
    return asdict(self)

  def to_json(self) -> str:
    """Serialize to JSON string."""
    return json.dumps(self.to_dict(), indent=2)

  @classmethod
  def from_dict(cls, data: dict[str, Any]) -> 'SeedConfig':
    """Create from dictionary."""
    return cls(**data)

  @classmethod
  def from_json(cls, json_str: str) -> 'SeedConfig':
    """Create from JSON string."""
    return cls.from_dict(json.loads(json_str))
