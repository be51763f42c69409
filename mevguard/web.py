"""FastAPI application exposing the MEV analysis endpoint."""

from __future__ import annotations

import logging

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse

from .classifier import Classifier, HeuristicClassifier
from .config import configure_logging, get_settings
from .errors import ANALYSIS_FAILED_MESSAGE, ValidationError
from .schema import validate_request
from .service import AnalysisService

logger = logging.getLogger(__name__)

app = FastAPI(title="MEVGuard Analysis API", version="0.1.0")
settings = get_settings()
configure_logging(settings)

default_classifier = HeuristicClassifier()


def get_classifier() -> Classifier:
    return default_classifier


def get_service(classifier: Classifier = Depends(get_classifier)) -> AnalysisService:
    return AnalysisService(classifier)


@app.post("/api/analyze")
async def analyze(request: Request, service: AnalysisService = Depends(get_service)) -> JSONResponse:
    try:
        body = await request.json()
        analysis_request = validate_request(body)
        result = await service.analyze(analysis_request)
    except ValidationError as exc:
        logger.info("Rejected analysis request: %s", exc.message)
        return JSONResponse(status_code=400, content={"error": exc.message})
    except Exception:
        logger.exception("Unexpected error while analyzing transaction")
        return JSONResponse(status_code=500, content={"error": ANALYSIS_FAILED_MESSAGE})
    return JSONResponse(content={"data": result.to_wire()})


@app.get("/healthz")
async def health() -> dict[str, str]:
    return {"status": "ok"}
