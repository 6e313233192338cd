"""Domain types for the projection engine."""

from projection.domain.types import FinancialMetrics
from projection.domain.types import HistoricalFinancials
from projection.domain.types import HistoricalPrice
from projection.domain.types import MultipleType
from projection.domain.types import PolicyOutput
from projection.domain.types import PriceProjection
from projection.domain.types import ProjectionResult
from projection.domain.types import Scenario
from projection.domain.types import ScenarioTriple
from projection.domain.types import StockProfile
from projection.domain.types import StockQuote

__all__ = [
    'FinancialMetrics',
    'HistoricalFinancials',
    'HistoricalPrice',
    'MultipleType',
    'PolicyOutput',
    'PriceProjection',
    'ProjectionResult',
    'Scenario',
    'ScenarioTriple',
    'StockProfile',
    'StockQuote',
]
