"""MEVGuard exports."""

from .classifier import Classifier, HeuristicClassifier, StubClassifier
from .dispatcher import (
    AnalysisEnvelope,
    DispatchChannel,
    Dispatcher,
    DispatchState,
    HTTPChannel,
    LocalChannel,
)
from .errors import (
    ChannelError,
    DispatchError,
    MEVGuardError,
    ValidationError,
    ValidationReason,
)
from .ledger import Incident, IncidentKind, IncidentLedger, IncidentStatus, LedgerStats
from .models import (
    AnalysisRequest,
    ClassificationResult,
    SandwichRequest,
    SandwichResult,
    TimeAnalysis,
    TimeRequest,
    TimeResult,
)
from .normalizer import normalize
from .parsing import ParallelFields, parse_parallel
from .schema import validate_request
from .service import AnalysisService
from .session import AnalysisOutcome, AnalysisSession

__all__ = [
    "AnalysisEnvelope",
    "AnalysisOutcome",
    "AnalysisRequest",
    "AnalysisService",
    "AnalysisSession",
    "ChannelError",
    "ClassificationResult",
    "Classifier",
    "DispatchChannel",
    "DispatchError",
    "DispatchState",
    "Dispatcher",
    "HTTPChannel",
    "HeuristicClassifier",
    "Incident",
    "IncidentKind",
    "IncidentLedger",
    "IncidentStatus",
    "LedgerStats",
    "LocalChannel",
    "MEVGuardError",
    "ParallelFields",
    "SandwichRequest",
    "SandwichResult",
    "StubClassifier",
    "TimeAnalysis",
    "TimeRequest",
    "TimeResult",
    "ValidationError",
    "ValidationReason",
    "normalize",
    "parse_parallel",
    "validate_request",
]
