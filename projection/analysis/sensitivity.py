"""
Sensitivity analysis for price projections.

This module provides tools to generate 2D sensitivity tables that show how
the final-year price target of one scenario varies across revenue growth
rates and exit multiples.

CLI Usage:
  python -m projection.analysis.sensitivity \\
      --metrics-json snapshots/AAPL.json \\
      --growth-rates 5,10,15,20 \\
      --exit-multiples 15,20,25
"""

import argparse
import logging
from pathlib import Path

import pandas as pd

from projection.data_loader import load_snapshot_file
from projection.domain.types import FinancialMetrics
from projection.domain.types import MultipleType
from projection.domain.types import Scenario
from projection.engine.projection import project
from projection.scenarios.config import ProjectionAssumptions
from projection.scenarios.config import SeedConfig
from projection.scenarios.seeding import seed_assumptions

logger = logging.getLogger(__name__)


class SensitivityTableBuilder:
  """
  Build 2D sensitivity tables for final-year price targets.

  Varies one scenario's revenue growth and exit multiple while keeping the
  rest of the assumptions (margins, dilution, horizon, basis) fixed.
  """

  def __init__(
      self,
      metrics: FinancialMetrics,
      assumptions: ProjectionAssumptions,
  ):
    """
    Initialize sensitivity table builder.

    Args:
        metrics: Company fundamentals snapshot
        assumptions: Base assumptions to vary
    """
    self.metrics = metrics
    self.assumptions = assumptions

    logger.info('Initialized SensitivityTableBuilder')
    logger.info('  Basis: %s', assumptions.multiple_type.label)
    logger.info('  Horizon: %d years', assumptions.years)
    logger.info('  Dilution: %.2f%%', assumptions.dilution_rate)

  def build(
      self,
      growth_rates: list[float],
      exit_multiples: list[float],
      scenario: Scenario = Scenario.BASE,
  ) -> pd.DataFrame:
    """
    Build 2D sensitivity table.

    Args:
        growth_rates: Revenue growth rates in percent (e.g., [5, 10, 15])
        exit_multiples: Exit multiples (e.g., [15, 20, 25])
        scenario: Scenario whose growth and multiple are varied

    Returns:
        DataFrame with growth rates as index, exit multiples as columns,
        and final-year prices per share as cell values
    """
    if not growth_rates:
      raise ValueError('growth_rates cannot be empty')
    if not exit_multiples:
      raise ValueError('exit_multiples cannot be empty')

    logger.info('Building sensitivity table: %d x %d', len(growth_rates),
                len(exit_multiples))

    data_rows = []
    for g in growth_rates:
      row_data = []
      for m in exit_multiples:
        varied = (self.assumptions.with_scenario_value(
            'revenue_growth', scenario,
            g).with_scenario_value('exit_multiple', scenario, m))
        projections = project(self.metrics, varied, current_year=0)
        row_data.append(projections[-1].get(scenario) if projections else 0.0)
      data_rows.append(row_data)

    g_labels = [f'{g:.1f}%' for g in growth_rates]
    m_labels = [f'{m:.1f}x' for m in exit_multiples]

    df = pd.DataFrame(data_rows, index=g_labels, columns=m_labels)
    df.index.name = 'Revenue Growth'
    df.columns.name = 'Exit Multiple'

    logger.info('Sensitivity table built successfully')
    return df


def _parse_float_list(s: str) -> list[float]:
  """Parse comma-separated float list."""
  return [float(x.strip()) for x in s.split(',')]


def main() -> None:
  """CLI entrypoint for sensitivity analysis."""
  parser = argparse.ArgumentParser(
      description='Price target sensitivity analysis',
      formatter_class=argparse.RawDescriptionHelpFormatter,
      epilog="""
Examples:
  python -m projection.analysis.sensitivity \\
      --metrics-json snapshots/AAPL.json \\
      --growth-rates 5,10,15,20 --exit-multiples 15,20,25

  # EV/EBITDA basis, bull scenario
  python -m projection.analysis.sensitivity \\
      --metrics-json snapshots/MSFT.json --multiple-type evEbitda \\
      --scenario bull --growth-rates 10,15,20 --exit-multiples 12,16,20
      """)

  parser.add_argument('--metrics-json',
                      type=Path,
                      required=True,
                      help='Quote-summary snapshot JSON file')
  parser.add_argument('--growth-rates',
                      type=str,
                      required=True,
                      help='Comma-separated growth rates in percent')
  parser.add_argument('--exit-multiples',
                      type=str,
                      required=True,
                      help='Comma-separated exit multiples')
  parser.add_argument('--scenario',
                      type=str,
                      default='base',
                      choices=[s.value for s in Scenario],
                      help='Scenario to vary')
  parser.add_argument('--multiple-type',
                      type=str,
                      default='pe',
                      choices=[m.value for m in MultipleType],
                      help='Valuation basis')
  parser.add_argument('--output',
                      type=Path,
                      default=None,
                      help='Optional CSV output path')
  args = parser.parse_args()

  metrics = FinancialMetrics.from_quote_summary(
      load_snapshot_file(args.metrics_json))
  assumptions = seed_assumptions(
      metrics, SeedConfig(multiple_type=args.multiple_type))

  builder = SensitivityTableBuilder(metrics, assumptions)
  df = builder.build(
      growth_rates=_parse_float_list(args.growth_rates),
      exit_multiples=_parse_float_list(args.exit_multiples),
      scenario=Scenario(args.scenario),
  )

  logger.info('\n%s', df.round(2).to_string())

  if args.output:
    args.output.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(args.output)
    logger.info('Saved sensitivity table to %s', args.output)


if __name__ == '__main__':
  logging.basicConfig(
      level=logging.INFO,
      format='%(message)s',
  )
  main()
