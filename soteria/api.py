"""
FastAPI backend for Soteria.

Endpoints:
- POST /api/score: Trust score for a URL (cached 24h)
- POST /api/registration: Domain registration date via RDAP
- POST /api/analyze: Score and registration in one call
- GET /api/events: Fetch recent events
- POST /api/cache/reset: Clear cached scores
- GET /api/status: System health check
"""
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from soteria.pipeline import trust_pipeline
from soteria.logging.event_logger import logger
from soteria.errors import InvalidURLError
from soteria.utils.url_utils import URLUtils
from soteria.schemas import (
    ScoreRequest, ScoreResult, RegistrationRequest, RegistrationInfo,
    AnalysisResponse, SystemStatus, EventLevel
)
from soteria import config

# Create FastAPI app
app = FastAPI(
    title="Soteria API",
    version=config.API_VERSION,
    description="Soteria: URL trust scoring"
)

# The browser extension calls from arbitrary page origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"]
)


# ==================== Scoring Endpoints ====================

@app.post("/api/score", response_model=ScoreResult)
async def score_url(request: ScoreRequest):
    """
    Compute trust score for a URL.

    Served from cache when a fresh result exists. Reputation service
    failures degrade to a neutral score and never fail the request.
    """
    try:
        return await trust_pipeline.aggregator.compute_score(
            request.url,
            trust_pipeline.resolve_contact(request)
        )
    except InvalidURLError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))


@app.post("/api/registration", response_model=RegistrationInfo)
async def lookup_registration(request: RegistrationRequest):
    """Domain registration date (informational, never cached)"""
    if not URLUtils.is_valid(request.url):
        raise HTTPException(status_code=400, detail=f"Invalid URL: {request.url!r}")

    return await trust_pipeline.registration.lookup_registration(request.url)


@app.post("/api/analyze", response_model=AnalysisResponse)
async def analyze_url(request: ScoreRequest):
    """Trust score and registration lookup, run concurrently"""
    try:
        return await trust_pipeline.analyze_request(request)
    except InvalidURLError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))


# ==================== Event Endpoints ====================

@app.get("/api/events")
async def get_events(limit: int = 100, level: str = None):
    """
    Fetch recent events from log.

    Args:
        limit: Maximum number of events to return
        level: Filter by event level (Information, Warning, Error, Critical)
    """
    try:
        event_level = EventLevel(level) if level else None
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Unknown event level: {level}")

    events = logger.read_events(limit=limit, level=event_level)
    return {"events": [e.model_dump(mode="json") for e in events]}


# ==================== Cache & System Endpoints ====================

@app.post("/api/cache/reset")
async def reset_cache():
    """
    Clear every cached score.

    Next request for any URL recomputes all signals.
    """
    try:
        cleared = trust_pipeline.aggregator.cache.size()
        trust_pipeline.aggregator.cache.clear()

        await logger.log_system_event(
            event_id=4003,
            message="Score cache reset",
            details={"cleared": cleared}
        )

        return {"status": "reset", "cleared": cleared}
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Reset failed: {str(e)}")


@app.get("/api/status", response_model=SystemStatus)
async def system_status():
    """System health check"""
    try:
        configured = trust_pipeline.aggregator.reputation.adapter.configured

        return SystemStatus(
            status="healthy" if configured else "degraded",
            version=config.API_VERSION,
            safe_browsing_configured=configured,
            cached_scores=trust_pipeline.aggregator.cache.size(),
            event_count=logger.get_event_count()
        )
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))


@app.get("/")
async def root():
    """Health check"""
    return {
        "status": "Soteria API running",
        "version": config.API_VERSION,
        "endpoints": {
            "docs": "/docs",
            "score": "/api/score",
            "analyze": "/api/analyze"
        }
    }


# ==================== Startup/Shutdown ====================

@app.on_event("startup")
async def startup():
    """Initialize pipeline on startup"""
    print("Starting Soteria API...")

    try:
        await trust_pipeline.initialize()

        if not trust_pipeline.aggregator.reputation.adapter.configured:
            print("WARNING: SAFE_BROWSING_API_KEY not set. Reputation will score neutral.")

        print(f"Cached scores: {trust_pipeline.aggregator.cache.size()}")
        print("Soteria API ready!")
    except Exception as e:
        print(f"ERROR during startup: {e}")


@app.on_event("shutdown")
async def shutdown():
    """Cleanup on shutdown"""
    print("Shutting down Soteria API...")
