'''
Projection analysis utilities.

Note: To avoid RuntimeWarning when using -m flag, import CLI modules directly:
  from projection.analysis.sensitivity import SensitivityTableBuilder
  from projection.analysis.plot_projections import plot_projections
'''

__all__ = [
    'build_projection_table',
    'build_returns_table',
    'format_large_number',
    'format_percent',
    'format_price',
]

from projection.analysis.format import format_large_number
from projection.analysis.format import format_percent
from projection.analysis.format import format_price
from projection.analysis.projection_table import build_projection_table
from projection.analysis.projection_table import build_returns_table
