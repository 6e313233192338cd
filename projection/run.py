'''
Single-company projection entrypoint.

This module provides the main entry point for running projections. It:
1. Loads a metrics snapshot (live fetch or saved JSON)
2. Seeds default assumptions from the seeding configuration
3. Applies user overrides
4. Runs the projection engine
5. Returns ProjectionResult with fair value and implied returns

Usage:
  from projection.run import run_projection

  result = run_projection(metrics, current_price=180.0)
  print(f"Base target: ${result.final_year.base_case:.2f}")

CLI Usage:
  python -m projection.run --ticker AAPL
  python -m projection.run --metrics-json snapshots/AAPL.json --price 180 \\
      --multiple-type evEbitda --growth 4,8,14 --plot charts/AAPL.png
'''

import argparse
from datetime import date
import logging
from pathlib import Path
from typing import Any, Optional

from projection.analysis.format import format_large_number
from projection.analysis.format import format_multiple
from projection.analysis.format import format_percent
from projection.analysis.format import format_price
from projection.analysis.format import format_signed_percent
from projection.analysis.plot_projections import plot_projections
from projection.analysis.projection_table import build_projection_table
from projection.data_loader import YahooFinanceLoader
from projection.data_loader import load_snapshot_file
from projection.domain.types import FinancialMetrics
from projection.domain.types import MultipleType
from projection.domain.types import ProjectionResult
from projection.domain.types import Scenario
from projection.domain.types import StockQuote
from projection.engine.projection import fair_value_today
from projection.engine.projection import implied_returns
from projection.engine.projection import project
from projection.scenarios.config import ProjectionAssumptions
from projection.scenarios.config import SeedConfig
from projection.scenarios.seeding import seed_assumptions
from projection.scenarios.seeding import switch_multiple_type

logger = logging.getLogger(__name__)

SEED_PRESETS = {
    'default': SeedConfig.default,
    'conservative': SeedConfig.conservative,
}


def run_projection(
    metrics: FinancialMetrics,
    current_price: float,
    assumptions: Optional[ProjectionAssumptions] = None,
    current_year: Optional[int] = None,
    market_cap: Optional[float] = None,
    config: Optional[SeedConfig] = None,
) -> ProjectionResult:
  '''
  Run a three-scenario price projection for one company.

  Args:
    metrics: Trailing fundamentals snapshot
    current_price: Market price per share, used for implied returns
    assumptions: Scenario assumptions (default: seeded from metrics)
    current_year: Calendar year of the snapshot (default: this year)
    market_cap: Market capitalization, used when seeding EV multiples
    config: SeedConfig used when assumptions are not given

  Returns:
    ProjectionResult with fair value today, yearly targets and CAGRs
  '''
  if assumptions is None:
    assumptions = seed_assumptions(metrics, config, market_cap)
  if current_year is None:
    current_year = date.today().year

  projections = project(metrics, assumptions, current_year)
  returns = implied_returns(current_price, projections, assumptions.years)

  return ProjectionResult(
      current_year=current_year,
      current_price=current_price,
      fair_value_today=fair_value_today(metrics, assumptions),
      projections=projections,
      implied_returns=returns,
      assumptions=assumptions,
  )


def parse_triple(s: str) -> tuple[float, float, float]:
  '''Parse 'bear,base,bull' into three floats.'''
  parts = [x.strip() for x in s.split(',')]
  if len(parts) != 3:
    raise argparse.ArgumentTypeError(
        f'Expected three comma-separated values (bear,base,bull), got: {s!r}')
  try:
    return float(parts[0]), float(parts[1]), float(parts[2])
  except ValueError as e:
    raise argparse.ArgumentTypeError(str(e)) from e


def apply_overrides(
    assumptions: ProjectionAssumptions,
    overrides: dict[str, Optional[tuple[float, float, float]]],
    dilution_rate: Optional[float] = None,
    years: Optional[int] = None,
) -> ProjectionAssumptions:
  '''
  Apply per-scenario and shared overrides on top of seeded assumptions.

  Args:
    assumptions: Starting assumptions
    overrides: Scenario field name -> (bear, base, bull), None to keep
    dilution_rate: New annual dilution in percent, None to keep
    years: New horizon, None to keep
  '''
  for field_name, values in overrides.items():
    if values is None:
      continue
    for scenario, value in zip(Scenario, values):
      assumptions = assumptions.with_scenario_value(field_name, scenario,
                                                    value)
  if dilution_rate is not None:
    assumptions = assumptions.with_dilution_rate(dilution_rate)
  if years is not None:
    assumptions = assumptions.with_years(years)
  return assumptions


def _load_inputs(
    args: argparse.Namespace
) -> tuple[str, FinancialMetrics, Optional[StockQuote]]:
  if args.metrics_json:
    summary: dict[str, Any] = load_snapshot_file(args.metrics_json)
    symbol = args.metrics_json.stem.upper()
    metrics = FinancialMetrics.from_quote_summary(summary)
    quote = None
    if summary.get('price'):
      quote = StockQuote.from_quote_summary(summary, symbol)
    return symbol, metrics, quote

  loader = YahooFinanceLoader()
  return args.ticker.upper(), loader.load_metrics(
      args.ticker), loader.load_quote(args.ticker)


def _log_result(symbol: str, metrics: FinancialMetrics,
                result: ProjectionResult) -> None:
  assumptions = result.assumptions
  separator = '=' * 70
  logger.info('\n%s', separator)
  logger.info('Price Projection - %s (%d)', symbol, result.current_year)
  logger.info(separator)

  logger.info('\nSnapshot:')
  logger.info('  Revenue: %s', format_large_number(metrics.revenue))
  logger.info('  Net Margin: %s', format_percent(metrics.net_margin))
  logger.info('  Net Debt: %s', format_large_number(metrics.net_debt))
  logger.info('  Current Price: %s', format_price(result.current_price))

  logger.info('\nAssumptions (%s, %d years, %.2f%% dilution):',
              assumptions.multiple_type.label, assumptions.years,
              assumptions.dilution_rate)
  for scenario in Scenario:
    logger.info('  %-5s growth %s, margin %s, exit %s', scenario.value,
                format_percent(assumptions.revenue_growth.get(scenario)),
                format_percent(assumptions.target_margin.get(scenario)),
                format_multiple(assumptions.exit_multiple.get(scenario)))

  logger.info('\nPrice Targets:')
  logger.info('%s', build_projection_table(result).round(2).to_string())

  logger.info('\nImplied Returns:')
  for scenario in Scenario:
    logger.info('  %-5s fair value %s, CAGR %s', scenario.value,
                format_price(result.fair_value_today.get(scenario)),
                format_signed_percent(result.implied_returns.get(
                    scenario.value)))
  logger.info('%s\n', separator)


def main() -> None:
  '''CLI entrypoint.'''
  parser = argparse.ArgumentParser(description='Run price projection')
  source = parser.add_mutually_exclusive_group(required=True)
  source.add_argument('--ticker', type=str, help='Ticker to fetch')
  source.add_argument('--metrics-json',
                      type=Path,
                      help='Saved quote-summary snapshot JSON')
  parser.add_argument('--price',
                      type=float,
                      default=None,
                      help='Current price override')
  parser.add_argument('--multiple-type',
                      type=str,
                      default=None,
                      choices=[m.value for m in MultipleType],
                      help='Valuation basis (resets exit multiples)')
  parser.add_argument('--years', type=int, default=None, help='Horizon')
  parser.add_argument('--dilution',
                      type=float,
                      default=None,
                      help='Annual dilution in percent')
  parser.add_argument('--growth',
                      type=parse_triple,
                      default=None,
                      help='Revenue growth bear,base,bull in percent')
  parser.add_argument('--margin',
                      type=parse_triple,
                      default=None,
                      help='Target net margin bear,base,bull in percent')
  parser.add_argument('--multiple',
                      type=parse_triple,
                      default=None,
                      help='Exit multiple bear,base,bull')
  parser.add_argument('--seed',
                      type=str,
                      default='default',
                      choices=list(SEED_PRESETS),
                      help='Default assumption preset')
  parser.add_argument('--seed-config',
                      type=Path,
                      default=None,
                      help='SeedConfig JSON file (overrides --seed)')
  parser.add_argument('--plot',
                      type=Path,
                      default=None,
                      help='Write projection chart to this image path')
  args = parser.parse_args()

  symbol, metrics, quote = _load_inputs(args)
  market_cap = quote.market_cap if quote else None

  if args.price is not None:
    current_price = args.price
  elif quote is not None:
    current_price = quote.price
  else:
    parser.error('--price is required when the snapshot has no price data')

  if args.seed_config:
    config = SeedConfig.from_json(args.seed_config.read_text(encoding='utf-8'))
  else:
    config = SEED_PRESETS[args.seed]()

  assumptions = seed_assumptions(metrics, config, market_cap)
  if args.multiple_type and args.multiple_type != assumptions.multiple_type:
    assumptions = switch_multiple_type(assumptions, metrics,
                                       args.multiple_type, market_cap, config)

  assumptions = apply_overrides(
      assumptions,
      {
          'revenue_growth': args.growth,
          'target_margin': args.margin,
          'exit_multiple': args.multiple,
      },
      dilution_rate=args.dilution,
      years=args.years,
  )

  result = run_projection(metrics, current_price, assumptions)
  _log_result(symbol, metrics, result)

  if args.plot:
    plot_projections(result, args.plot, title=f'{symbol} Price Projections')


if __name__ == '__main__':
  logging.basicConfig(
      level=logging.INFO,
      format='%(message)s',
  )
  main()
