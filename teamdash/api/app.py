"""
FastAPI Application - Team Performance Dashboard API

Serves the aggregated overview, the team and individual views, and a few
diagnostic endpoints for checking Jira board/sprint wiring.

Usage:
    # Development
    uvicorn teamdash.api.app:app --reload --port 5001

    # Production
    python -m teamdash

API Documentation:
    http://localhost:5001/docs (Swagger UI)
    http://localhost:5001/redoc (ReDoc)
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Annotated, Any, Literal

from fastapi import Depends, FastAPI, HTTPException, Query, Request, status
from fastapi.responses import JSONResponse

from teamdash import __version__
from teamdash.aggregator.overview import CONFIG_MISSING_ERROR, DashboardAggregator
from teamdash.aggregator.team import TeamAggregator
from teamdash.api.middleware import CacheControlMiddleware, RequestIDMiddleware, add_cors_middleware
from teamdash.collectors.jira_client import JiraClient
from teamdash.context import AppContext, build_context
from teamdash.core import get_logger, log_with_context, setup_logging
from teamdash.errors import ConfigurationError, SourceFetchError
from teamdash.secure_config import get_config

setup_logging()

logger = get_logger(__name__)

DEBUG_SPRINT_LIMIT = 20


def get_context(request: Request) -> AppContext:
    return request.app.state.context


def get_jira(context: Annotated[AppContext, Depends(get_context)]) -> JiraClient:
    if context.jira is None:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Jira is not configured")
    return context.jira


def create_app(context: AppContext | None = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        context: Prebuilt application context (tests); built from the
            environment at startup when omitted
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if getattr(app.state, "context", None) is None:
            app.state.context = build_context()
        await app.state.context.startup()
        logger.info("Team dashboard API starting up")
        try:
            yield
        finally:
            await app.state.context.shutdown()
            logger.info("Team dashboard API shutting down")

    app = FastAPI(
        title="Team Performance Dashboard API",
        description="Sprint, source control, mobile health and code quality metrics for engineering teams",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.context = context

    # Middleware order matters - last added is executed first
    app.add_middleware(CacheControlMiddleware)
    app.add_middleware(RequestIDMiddleware)
    server_config = (context.config if context else get_config()).get_server_config()
    add_cors_middleware(app, server_config.cors_origins)

    @app.exception_handler(ConfigurationError)
    async def configuration_error_handler(request: Request, exc: ConfigurationError) -> JSONResponse:
        logger.error("Dashboard configuration missing", extra={"path": request.url.path, "error": str(exc)})
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": CONFIG_MISSING_ERROR, "message": str(exc)},
        )

    @app.exception_handler(SourceFetchError)
    async def source_error_handler(request: Request, exc: SourceFetchError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": str(exc), "status": exc.status_code},
        )

    # ============================================================
    # Health Check
    # ============================================================

    @app.get("/health", tags=["Health"])
    async def health_check(context: Annotated[AppContext, Depends(get_context)]) -> dict[str, Any]:
        """
        Liveness and configuration status. Makes no external calls.
        """
        return {
            "status": "ok",
            "timestamp": datetime.now(UTC).isoformat().replace("+00:00", "Z"),
            "services": context.service_status(),
            "configuration": {
                "projects": len(context.definitions.projects),
                "boards": len(context.definitions.boards),
            },
        }

    # ============================================================
    # Dashboard Endpoints
    # ============================================================

    @app.get("/api/dashboard/overview", tags=["Dashboard"])
    async def dashboard_overview(
        context: Annotated[AppContext, Depends(get_context)],
        filter: Literal["all", "mobile", "web"] = "all",
        start_date: Annotated[str | None, Query(alias="startDate")] = None,
        end_date: Annotated[str | None, Query(alias="endDate")] = None,
        sprint_id: Annotated[str | None, Query(alias="sprintId")] = None,
    ) -> dict[str, Any]:
        """
        Aggregated sprint, source control, mobile health and code quality snapshot.

        Sources that fail are reported in ``errors`` and leave their field null.
        """
        try:
            snapshot = await DashboardAggregator(context).build_overview(filter, start_date, end_date, sprint_id)
        except ValueError as e:
            raise HTTPException(status_code=422, detail=str(e)) from e

        log_with_context(
            logger,
            "info",
            "Overview served",
            filter=filter,
            sprint_selection=snapshot.selection_state.value,
            developers=len(snapshot.developers),
            errors=len(snapshot.errors),
        )
        return snapshot.to_dict()

    @app.get("/api/dashboard/team", tags=["Dashboard"])
    async def team_overview(
        context: Annotated[AppContext, Depends(get_context)],
        team_members: Annotated[list[str], Query(alias="teamMembers")] = [],
        days: Annotated[int, Query(ge=1, le=365)] = 30,
    ) -> dict[str, Any]:
        """Team performance across Jira, GitLab, SonarQube, Snyk and Slack."""
        return await TeamAggregator(context).team_overview(team_members, days)

    @app.get("/api/dashboard/individual/{user_id}", tags=["Dashboard"])
    async def individual_overview(
        user_id: str,
        context: Annotated[AppContext, Depends(get_context)],
        days: Annotated[int, Query(ge=1, le=365)] = 30,
    ) -> dict[str, Any]:
        """Individual performance across Jira, GitLab and Slack."""
        return await TeamAggregator(context).individual(user_id, days)

    # ============================================================
    # Debug Endpoints
    # ============================================================

    @app.get("/api/debug/boards", tags=["Debug"])
    async def debug_boards(
        context: Annotated[AppContext, Depends(get_context)],
        jira: Annotated[JiraClient, Depends(get_jira)],
    ) -> dict[str, Any]:
        """Boards visible to the Jira token next to the configured ones."""
        boards = await jira.list_boards()
        return {
            "totalBoards": len(boards),
            "boards": boards,
            "configuredBoards": [{"id": board.id, "name": board.name} for board in context.definitions.boards.values()],
        }

    @app.get("/api/debug/sprints/{board_id}", tags=["Debug"])
    async def debug_sprints(
        board_id: str,
        jira: Annotated[JiraClient, Depends(get_jira)],
        state: str = "active,future",
    ) -> dict[str, Any]:
        """Raw sprints of one board for a state filter (first 20)."""
        sprints = await jira.list_sprints(board_id, state, max_results=DEBUG_SPRINT_LIMIT)
        return {
            "boardId": board_id,
            "stateFilter": state,
            "totalSprints": len(sprints),
            "sprints": [
                {
                    "id": sprint.id,
                    "name": sprint.name,
                    "state": sprint.state,
                    "startDate": sprint.start_date.isoformat() if sprint.start_date else None,
                    "endDate": sprint.end_date.isoformat() if sprint.end_date else None,
                    "originBoardId": sprint.origin_board_id,
                }
                for sprint in sprints
            ],
        }

    return app


app = create_app()
