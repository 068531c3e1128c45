"""Signal fusion module.

Combines streaming indicators into one composite label:
- IndicatorSuite: six indicators fused by weighted crossover vote
- ScalpingIndicatorSuite: ten indicators fused by a volatility-adaptive score
"""

from .base_signal import SignalLabel, SignalThresholds, score_to_label
from .errors import (
    SuiteError,
    CollaboratorError,
    CollaboratorConstructionError,
    CollaboratorIngestionError,
    CollaboratorQueryError,
    InvalidSampleError,
)
from .base_suite import BaseSuite
from .indicator_suite import IndicatorSuite, CROSSOVER_WEIGHTS, crossover_vote_label
from .scalping_suite import (
    ScalpingIndicatorSuite,
    ScalpingScore,
    BASE_THRESHOLDS,
    volatility_adjusted_thresholds,
)

__all__ = [
    # Labels
    "SignalLabel",
    "SignalThresholds",
    "score_to_label",
    # Errors
    "SuiteError",
    "CollaboratorError",
    "CollaboratorConstructionError",
    "CollaboratorIngestionError",
    "CollaboratorQueryError",
    "InvalidSampleError",
    # Suites
    "BaseSuite",
    "IndicatorSuite",
    "CROSSOVER_WEIGHTS",
    "crossover_vote_label",
    "ScalpingIndicatorSuite",
    "ScalpingScore",
    "BASE_THRESHOLDS",
    "volatility_adjusted_thresholds",
]
