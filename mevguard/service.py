"""In-process analysis pipeline shared by the HTTP handler and the local channel."""
from __future__ import annotations

import logging

from .classifier import Classifier
from .models import (
    AnalysisRequest,
    ClassificationResult,
    SandwichRequest,
    SandwichResult,
    TimeAnalysis,
    TimeResult,
)

logger = logging.getLogger(__name__)


class AnalysisService:
    """Run the classifier for a validated request and shape its answer."""

    def __init__(self, classifier: Classifier) -> None:
        self._classifier = classifier

    async def analyze(self, request: AnalysisRequest) -> ClassificationResult:
        result = await self._classifier.classify(request)
        if isinstance(request, SandwichRequest):
            if not isinstance(result, SandwichResult):
                raise TypeError(f"Classifier returned {type(result).__name__} for a sandwich request")
            logger.debug("Sandwich verdict: %s", result.is_sandwich_attack)
            return result
        if not isinstance(result, TimeResult):
            raise TypeError(f"Classifier returned {type(result).__name__} for a time request")
        logger.debug("Timing verdict: %s (%s close)", result.is_mev_bot_activity, result.number_of_close_transactions)
        return TimeAnalysis.from_result(result)


__all__ = ["AnalysisService"]
