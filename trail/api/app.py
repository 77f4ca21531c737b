"""
FastAPI Application - REST API for the combat engine.

Endpoints:
    POST   /api/v1/runs                      Create a run
    GET    /api/v1/runs                      List active runs
    GET    /api/v1/runs/{id}                 Get run status
    DELETE /api/v1/runs/{id}                 End a run
    POST   /api/v1/runs/{id}/combat          Start an encounter
    GET    /api/v1/runs/{id}/combat          Get encounter state
    POST   /api/v1/runs/{id}/combat/play     Play a card
    POST   /api/v1/runs/{id}/combat/end-turn End the turn (enemy resolves before the response)
    POST   /api/v1/runs/{id}/combat/flee     Leave the encounter
    GET    /api/v1/enemies                   Enemy catalog
    GET    /health                           Health check

All responses are JSON with explicit Pydantic schemas.
"""

from typing import Annotated, Optional, Union

from ..config import ALLOWED_ORIGINS, TRAIL_ENV
from .. import __version__


def create_app(service=None):
    """
    Create the FastAPI application.

    Args:
        service: Optional APIService instance (creates one backed by the
            configured storage if not provided)

    Returns:
        FastAPI application instance
    """
    try:
        from fastapi import FastAPI, Query, Request
        from fastapi.exceptions import RequestValidationError
        from fastapi.middleware.cors import CORSMiddleware
        from fastapi.responses import JSONResponse
    except ImportError:
        raise ImportError(
            "FastAPI not installed. Install with: pip install fastapi uvicorn"
        )

    from .service import APIService
    from .schemas import (
        # Request models
        CreateRunRequest,
        StartCombatRequest,
        PlayCardRequest,
        # Response models
        RunResponse,
        RunListResponse,
        EndRunResponse,
        CombatStateResponse,
        CombatActionResponse,
        EnemyListResponse,
        ErrorResponse,
        HealthResponse,
        # Enums
        ErrorCode,
    )
    from ..session import SessionManager
    from ..storage import StorageManager

    app = FastAPI(
        title="Parallel Trail Engine API",
        description="""
Turn-based card combat for Parallel Trail.

## Combat Flow

1. `POST /runs` creates a run with a fresh starter deck
2. `POST /runs/{id}/combat` starts an encounter and draws the opening hand
3. `POST /combat/play` plays cards; `POST /combat/end-turn` lets the enemy act
4. The encounter ends in `victory` or `defeat` (the run is reset on defeat)

## Error Codes

| Code | Description |
|------|-------------|
| `RUN_NOT_FOUND` | Run does not exist |
| `NO_ACTIVE_COMBAT` | No encounter running for the run |
| `COMBAT_OVER` | The encounter already ended |
| `VALIDATION_ERROR` | The request body is invalid |
        """,
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    storage = None
    if service is None:
        storage = StorageManager()
        service = APIService(session_manager=SessionManager(storage=storage))
    api_service = service

    # =========================================================================
    # Error helpers
    # =========================================================================

    status_codes = {
        ErrorCode.RUN_NOT_FOUND: 404,
        ErrorCode.NO_ACTIVE_COMBAT: 409,
        ErrorCode.COMBAT_OVER: 409,
        ErrorCode.VALIDATION_ERROR: 422,
    }

    def make_error_response(error: ErrorResponse) -> JSONResponse:
        """Create a standardized error response."""
        return JSONResponse(
            status_code=status_codes.get(error.error_code, 400),
            content=error.model_dump(mode="json"),
        )

    def respond(response):
        if isinstance(response, ErrorResponse):
            return make_error_response(response)
        return response

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return make_error_response(
            ErrorResponse(
                error="Invalid request",
                error_code=ErrorCode.VALIDATION_ERROR,
                details={"errors": [
                    {"loc": list(e.get("loc", ())), "msg": e.get("msg", "")}
                    for e in exc.errors()
                ]},
            )
        )

    # =========================================================================
    # Run Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/runs",
        response_model=RunResponse,
        responses={422: {"model": ErrorResponse}},
        tags=["Runs"],
        summary="Create a run",
    )
    async def create_run(request: Optional[CreateRunRequest] = None) -> RunResponse:
        """Start a new run with default stats and a shuffled starter deck."""
        return api_service.create_run(request or CreateRunRequest())

    @app.get(
        "/api/v1/runs",
        response_model=RunListResponse,
        tags=["Runs"],
        summary="List active runs",
    )
    async def list_runs() -> RunListResponse:
        runs = api_service.list_runs()
        return RunListResponse(runs=runs, count=len(runs))

    @app.get(
        "/api/v1/runs/{run_id}",
        response_model=RunResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Runs"],
        summary="Get run status",
    )
    async def get_run(run_id: str) -> Union[RunResponse, JSONResponse]:
        return respond(api_service.get_run(run_id))

    @app.delete(
        "/api/v1/runs/{run_id}",
        response_model=EndRunResponse,
        tags=["Runs"],
        summary="End a run",
    )
    async def end_run(
        run_id: str,
        reason: Annotated[str, Query(description="Reason for ending")] = "user_ended",
    ) -> EndRunResponse:
        """End a run and release its encounter."""
        success = api_service.end_run(run_id, reason)
        return EndRunResponse(success=success, run_id=run_id)

    # =========================================================================
    # Combat Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/runs/{run_id}/combat",
        response_model=CombatStateResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Combat"],
        summary="Start an encounter",
    )
    async def start_combat(
        run_id: str,
        request: Optional[StartCombatRequest] = None,
    ) -> Union[CombatStateResponse, JSONResponse]:
        return respond(api_service.start_combat(run_id, request or StartCombatRequest()))

    @app.get(
        "/api/v1/runs/{run_id}/combat",
        response_model=CombatStateResponse,
        responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
        tags=["Combat"],
        summary="Get encounter state",
    )
    async def get_combat_state(run_id: str) -> Union[CombatStateResponse, JSONResponse]:
        return respond(api_service.get_combat_state(run_id))

    @app.post(
        "/api/v1/runs/{run_id}/combat/play",
        response_model=CombatActionResponse,
        responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
        tags=["Combat"],
        summary="Play a card",
    )
    async def play_card(run_id: str, request: PlayCardRequest) -> Union[CombatActionResponse, JSONResponse]:
        """
        Play a card from hand.

        A declined play (card not in hand, not enough energy) is not an
        error: the response has `success=false`, `declined=true` and a reason.
        """
        return respond(await api_service.play_card(run_id, request))

    @app.post(
        "/api/v1/runs/{run_id}/combat/end-turn",
        response_model=CombatActionResponse,
        responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
        tags=["Combat"],
        summary="End the turn",
    )
    async def end_turn(run_id: str) -> Union[CombatActionResponse, JSONResponse]:
        """End the turn; the enemy acts and the next round begins before the response."""
        return respond(await api_service.end_turn(run_id))

    @app.post(
        "/api/v1/runs/{run_id}/combat/flee",
        response_model=CombatActionResponse,
        responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
        tags=["Combat"],
        summary="Flee the encounter",
    )
    async def flee(run_id: str) -> Union[CombatActionResponse, JSONResponse]:
        return respond(await api_service.flee(run_id))

    @app.get(
        "/api/v1/enemies",
        response_model=EnemyListResponse,
        tags=["Content"],
        summary="Enemy catalog",
    )
    async def list_enemies() -> EnemyListResponse:
        return api_service.list_enemies()

    # =========================================================================
    # Health Check
    # =========================================================================

    @app.get(
        "/health",
        response_model=HealthResponse,
        tags=["System"],
        summary="Health check",
    )
    async def health_check() -> HealthResponse:
        """Health check endpoint for load balancers."""
        storage_health = None
        if storage is not None:
            status = await storage.get_storage_status()
            storage_health = f"{status.provider}:{status.health}"
        return HealthResponse(
            status="healthy",
            service="parallel-trail-engine",
            version=__version__,
            storage=storage_health,
        )

    @app.get("/", tags=["System"])
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "Parallel Trail Engine API",
            "version": __version__,
            "environment": TRAIL_ENV,
            "docs": "/api/docs",
            "health": "/health",
        }

    return app


# For running directly: uvicorn trail.api.app:app
app = None
try:
    app = create_app()
except ImportError:
    # FastAPI not installed
    pass
