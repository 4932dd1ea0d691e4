#!/usr/bin/env python3
"""
Feedback Sentiment Engine - JSON API
FastAPI application exposing the analysis service
"""

import os
from typing import Any, List, Optional

import uvicorn
from fastapi import Depends, FastAPI, Header, HTTPException, Query, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from config import Config, get_config
from services.analysis import ALL_SENTIMENTS, AnalysisService
from services.errors import ValidationError
from services.logging_utils import get_logger
from services.observability import elapsed, metrics_router, record_request_metrics, request_timer
from services.stats import StatsAggregator

# Initialize logger
logger = get_logger(__name__)


# Pydantic models for API
class AnalyzeRequest(BaseModel):
    text: Any = None

class BatchRequest(BaseModel):
    texts: Optional[List[Any]] = None


def create_app(service: Optional[AnalysisService] = None, config: Optional[Config] = None) -> FastAPI:
    """Build the API around ``service`` (a configured one by default)."""
    config = config or get_config()
    service = service or AnalysisService.from_config(config)

    app = FastAPI(
        title="Feedback Sentiment Engine",
        description="Lexicon-based sentiment scoring with history and dashboard statistics",
        version="1.0.0"
    )
    app.state.service = service
    app.state.config = config

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(metrics_router)

    @app.middleware("http")
    async def observe_requests(request: Request, call_next):
        start = request_timer()
        response = await call_next(request)
        record_request_metrics(request, response.status_code, elapsed(start))
        return response

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError):
        logger.warning(f"Rejected {request.method} {request.url.path}: {exc.message}")
        return JSONResponse(status_code=400, content={"error": exc.message, "details": exc.details})

    @app.exception_handler(RequestValidationError)
    async def request_validation_error_handler(request: Request, exc: RequestValidationError):
        logger.warning(f"Rejected {request.method} {request.url.path}: malformed parameters")
        return JSONResponse(
            status_code=400,
            content={"error": "Invalid request parameters", "details": {"errors": jsonable_encoder(exc.errors())}},
        )

    # Dependency for admin auth
    async def verify_admin_token(authorization: Optional[str] = Header(None)):
        scheme, _, token = (authorization or "").partition(" ")
        if scheme.lower() != "bearer" or not token or token != config.ADMIN_TOKEN:
            raise HTTPException(status_code=401, detail="Invalid admin token")
        return True

    @app.post("/api/analyze")
    async def analyze_text(request: AnalyzeRequest):
        """Score a single piece of feedback"""
        result = await service.analyze_text(request.text)
        return {"data": result.to_dict()}

    @app.post("/api/analyze/batch")
    async def analyze_batch(request: BatchRequest):
        """Score several texts at once"""
        outcome = await service.analyze_batch(request.texts)
        return {
            "data": [result.to_dict() for result in outcome["results"]],
            "summary": outcome["summary"],
        }

    @app.get("/api/history")
    async def get_history(page: int = Query(1), limit: int = Query(10)):
        """Get one page of analysis history"""
        page_data = await service.get_history(page=page, limit=limit)
        return {
            "data": [item.to_dict() for item in page_data["data"]],
            "pagination": page_data["pagination"],
        }

    @app.get("/api/stats")
    async def get_stats():
        """Get dashboard statistics"""
        stats = await service.get_stats()
        return {"data": {**stats.to_dict(), "distribution": StatsAggregator.distribution(stats)}}

    @app.get("/api/search")
    async def search(q: str = Query(""), sentiment: str = Query(ALL_SENTIMENTS)):
        """Search analysed texts"""
        matches = await service.search(q, sentiment)
        return {
            "data": [item.to_dict() for item in matches["data"]],
            "summary": matches["summary"],
        }

    @app.get("/api/export")
    async def export_snapshot():
        """Export history and statistics"""
        return {"data": await service.export_snapshot()}

    @app.delete("/api/history")
    async def clear_history(authorized: bool = Depends(verify_admin_token)):
        """Clear all analysis history"""
        outcome = await service.clear_history()
        if not outcome["success"]:
            return JSONResponse(status_code=500, content={"data": outcome})
        return {"data": outcome}

    @app.get("/api/health")
    async def health_check():
        return {"status": "healthy", "historySize": len(service.history)}

    @app.on_event("startup")
    async def startup_event():
        logger.info(
            f"Sentiment engine ready: {len(service.history)} analyses loaded, "
            f"store={config.STORE_BACKEND}"
        )

    return app


app = create_app()


if __name__ == "__main__":
    port = int(os.getenv("PORT", get_config().PORT))
    uvicorn.run(
        "app:app",
        host="0.0.0.0",
        port=port,
        reload=os.getenv("APP_ENV") == "development"
    )
