'''Projection engine with pure math functions.'''

from projection.engine.multiples import (
    equity_value,
    fair_value_price,
)
from projection.engine.projection import (
    compute_cagr,
    fair_value_today,
    implied_returns,
    project,
    scenario_price,
)

__all__ = [
    'compute_cagr',
    'equity_value',
    'fair_value_price',
    'fair_value_today',
    'implied_returns',
    'project',
    'scenario_price',
]
