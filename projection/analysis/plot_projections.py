'''
Chart bear/base/bull price projections.

Draws the year-0 fair value anchor followed by each projected year, with the
current market price as a horizontal reference line.

Usage:
  from projection.analysis.plot_projections import plot_projections

  plot_projections(result, Path('charts/AAPL.png'), title='AAPL')
'''

import logging
from pathlib import Path
from typing import Optional

import matplotlib.pyplot as plt
from matplotlib.ticker import FuncFormatter

from projection.analysis.projection_table import build_projection_table
from projection.domain.types import ProjectionResult

logger = logging.getLogger(__name__)

SCENARIO_COLORS = {
    'Bear': '#ef4444',
    'Base': '#6b7280',
    'Bull': '#10b981',
}


def plot_projections(
    result: ProjectionResult,
    out_path: Path,
    title: Optional[str] = None,
) -> Path:
  '''
  Save a line chart of the projection.

  Args:
      result: ProjectionResult from run_projection
      out_path: Image file to write (format from suffix)
      title: Chart title (default: 'Price Projections')

  Returns:
      Path of the written image
  '''
  table = build_projection_table(result)
  x_labels = [str(result.current_year)] + [
      str(p.year) for p in result.projections
  ]

  fig, ax = plt.subplots(figsize=(10, 5))
  try:
    for column, color in SCENARIO_COLORS.items():
      ax.plot(x_labels,
              table[column].tolist(),
              marker='o',
              linewidth=2,
              color=color,
              label=column)

    if result.current_price > 0:
      ax.axhline(result.current_price,
                 color='#2563eb',
                 linestyle='--',
                 linewidth=1,
                 label=f'Current ${result.current_price:,.2f}')

    ax.set_title(title or 'Price Projections')
    ax.set_xlabel('Year')
    ax.set_ylabel('Price per share ($)')
    ax.yaxis.set_major_formatter(
        FuncFormatter(lambda v, _: f'${v:,.0f}'))
    ax.grid(True, linestyle=':', alpha=0.6)
    ax.legend()
    fig.tight_layout()

    out_path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(out_path, dpi=120)
  finally:
    plt.close(fig)

  logger.info('Saved projection chart to %s', out_path)
  return out_path
