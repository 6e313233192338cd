'''
Default assumption seeding.

Builds ProjectionAssumptions for a fresh metrics snapshot by running the
policies named in a SeedConfig, and handles the valuation basis switch,
which resets exit multiples to the new basis's current multiple.

Usage:
  from projection.scenarios.seeding import seed_assumptions

  assumptions = seed_assumptions(metrics, market_cap=quote.market_cap)
  assumptions = switch_multiple_type(assumptions, metrics, 'evEbitda')
'''

import logging
from typing import Optional

from projection.domain.types import FinancialMetrics, MultipleType
from projection.scenarios.config import ProjectionAssumptions, SeedConfig
from projection.scenarios.registry import create_policies

logger = logging.getLogger(__name__)


def seed_assumptions(
    metrics: FinancialMetrics,
    config: Optional[SeedConfig] = None,
    market_cap: Optional[float] = None,
) -> ProjectionAssumptions:
  '''
  Seed default assumptions from a metrics snapshot.

  Args:
    metrics: Trailing fundamentals snapshot
    config: SeedConfig (default: SeedConfig.default())
    market_cap: Market capitalization, used when EV is not reported

  Returns:
    ProjectionAssumptions ready for the projection builder

  Raises:
    KeyError: If the config names an unknown policy
    ValueError: If the config names an unknown valuation basis
  '''
  if config is None:
    config = SeedConfig.default()

  multiple_type = MultipleType(config.multiple_type)
  policies = create_policies(config)

  growth_result = policies['growth'].compute(metrics)
  margin_result = policies['margin'].compute(metrics)
  current_result = policies['current_multiple'].compute(
      metrics, multiple_type, market_cap)
  exit_result = policies['exit_multiple'].compute(current_result.value)
  dilution_result = policies['dilution'].compute()

  logger.debug('Seeded %s assumptions: margin %s, multiple %s', config.name,
               margin_result.diag, current_result.diag)

  return ProjectionAssumptions(
      revenue_growth=growth_result.value,
      target_margin=margin_result.value,
      exit_multiple=exit_result.value,
      multiple_type=multiple_type,
      dilution_rate=dilution_result.value,
      years=config.years,
  )


def switch_multiple_type(
    assumptions: ProjectionAssumptions,
    metrics: FinancialMetrics,
    multiple_type: MultipleType,
    market_cap: Optional[float] = None,
    config: Optional[SeedConfig] = None,
) -> ProjectionAssumptions:
  '''
  Change valuation basis, resetting all three exit multiples.

  Growth, margin, dilution and horizon are kept; exit multiples are reseeded
  from the current multiple of the new basis.
  '''
  if config is None:
    config = SeedConfig.default()

  multiple_type = MultipleType(multiple_type)
  policies = create_policies(config)
  current_result = policies['current_multiple'].compute(
      metrics, multiple_type, market_cap)
  exit_result = policies['exit_multiple'].compute(current_result.value)

  logger.debug('Switched to %s (current %.2fx, %s)', multiple_type.value,
               current_result.value, current_result.diag['source'])

  return assumptions.with_multiple_type(multiple_type, exit_result.value)
