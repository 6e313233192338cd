"""Projection assumptions, seeding configuration and policy registry."""

from projection.scenarios.config import ProjectionAssumptions
from projection.scenarios.config import SeedConfig
from projection.scenarios.registry import create_policies
from projection.scenarios.registry import list_policies
from projection.scenarios.registry import POLICY_REGISTRY
from projection.scenarios.seeding import seed_assumptions
from projection.scenarios.seeding import switch_multiple_type

__all__ = [
  'ProjectionAssumptions',
  'SeedConfig',
  'POLICY_REGISTRY',
  'create_policies',
  'list_policies',
  'seed_assumptions',
  'switch_multiple_type',
]
