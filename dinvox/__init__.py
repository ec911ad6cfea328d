"""
Dinvox - Spending Analytics Engines
"""

from .records import ExpenseRecord
from .thirds import ThirdsResult, compute_thirds
from .pace import PaceConfig, PaceResult, compute_pace, resolve_day_limit
from .evolution import EvolutionResult, compute_evolution
from .summary import RangeSummary, summarize_range
from .config import Settings, configure_logging
from .report import PerformanceReporter

__all__ = [
    'ExpenseRecord',
    'ThirdsResult',
    'compute_thirds',
    'PaceConfig',
    'PaceResult',
    'compute_pace',
    'resolve_day_limit',
    'EvolutionResult',
    'compute_evolution',
    'RangeSummary',
    'summarize_range',
    'Settings',
    'configure_logging',
    'PerformanceReporter',
]

__version__ = '0.1.0'
