"""
Tabular views of a projection result.

The price-target table starts with the year-0 fair value row followed by one
row per projected year, matching what a reader sees in the dashboard.
"""

import pandas as pd

from projection.domain.types import ProjectionResult
from projection.domain.types import Scenario

SCENARIO_COLUMNS = {
    Scenario.BEAR: 'Bear',
    Scenario.BASE: 'Base',
    Scenario.BULL: 'Bull',
}


def build_projection_table(result: ProjectionResult) -> pd.DataFrame:
  """
  Build the price-target table.

  Args:
    result: ProjectionResult from run_projection

  Returns:
    DataFrame indexed by year label ('2025 (Fair Value)', '2026', ...) with
    Bear, Base and Bull price columns
  """
  rows = [{
      SCENARIO_COLUMNS[s]: result.fair_value_today.get(s) for s in Scenario
  }]
  labels = [f'{result.current_year} (Fair Value)']

  for p in result.projections:
    rows.append({SCENARIO_COLUMNS[s]: p.get(s) for s in Scenario})
    labels.append(str(p.year))

  df = pd.DataFrame(rows, index=labels, columns=list(SCENARIO_COLUMNS.values()))
  df.index.name = 'Year'
  return df


def build_returns_table(result: ProjectionResult) -> pd.DataFrame:
  """
  Build the valuation gap and implied return table.

  Returns:
    DataFrame indexed by scenario with fair value today, upside versus the
    current price (percent), final-year target and implied CAGR (percent)
  """
  final = result.final_year
  records = []
  for s in Scenario:
    fair_value = result.fair_value_today.get(s)
    upside = None
    if result.current_price > 0:
      upside = (fair_value / result.current_price - 1.0) * 100.0
    records.append({
        'scenario': SCENARIO_COLUMNS[s],
        'fair_value': fair_value,
        'upside_pct': upside,
        'target': final.get(s) if final else None,
        'implied_cagr_pct': result.implied_returns.get(s.value),
    })
  return pd.DataFrame.from_records(records, index='scenario')
