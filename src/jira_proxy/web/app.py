"""FastAPI application exposing the simplified task API."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, FastAPI, Query, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..jira import JiraClient, JiraClientError, Transition
from ..logging import get_logger, setup_logging
from ..models import ProxyConfig

logger = get_logger("web")

ENDPOINTS = {
    "GET /tasks": "Fetch tasks by project",
    "PUT /task/:key": "Update task fields",
    "GET /task/:key/transitions": "Get available transitions",
    "POST /task/:key/status": "Update status by transition ID",
    "POST /task/:key/status-by-name": "Update status by name",
    "GET /task/:key/transition/:statusName": "Find transition ID by status name",
    "GET /projects": "Get all projects",
    "GET /health": "Health check",
}


class StatusUpdate(BaseModel):
    """Body of POST /task/{key}/status."""

    statusId: str | int | None = None


class StatusNameUpdate(BaseModel):
    """Body of POST /task/{key}/status-by-name."""

    statusName: str | None = None
    comment: Any = None  # plain text or an ADF document


def get_jira_client(request: Request) -> JiraClient:
    """Dependency to get the process-wide Jira client."""
    return request.app.state.jira_client


JiraDep = Annotated[JiraClient, Depends(get_jira_client)]


def error_response(status_code: int, message: str, **extra: Any) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message, **extra})


def failure_response(exc: Exception) -> JSONResponse:
    """500 carrying the failure message, for routes that delegate to Jira."""
    if not isinstance(exc, JiraClientError):
        # The client logs its own errors; anything else is unexpected.
        logger.exception("Unexpected error while handling Jira response")
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc))


router = APIRouter()


# --- Task Routes ---


@router.get("/tasks")
async def list_tasks(
    jira: JiraDep,
    project_key: Annotated[str | None, Query(alias="projectKey")] = None,
    task_status: Annotated[str | None, Query(alias="status")] = None,
):
    """List the issues of a project."""
    if not project_key:
        return error_response(
            status.HTTP_400_BAD_REQUEST, "Missing required query param: projectKey"
        )

    try:
        return await jira.fetch_tasks(project_key, task_status or "Open")
    except Exception as e:
        return failure_response(e)


@router.put("/task/{key}")
async def update_task(
    key: str,
    jira: JiraDep,
    fields: Annotated[dict[str, Any] | None, Body()] = None,
):
    """Update fields of an issue."""
    try:
        return await jira.update_task(key, fields or {})
    except Exception as e:
        return failure_response(e)


@router.get("/task/{key}/transitions")
async def list_transitions(key: str, jira: JiraDep):
    """List the transitions available on an issue."""
    try:
        transitions = [
            Transition.from_api_response(t).to_dict()
            for t in await jira.get_transitions(key)
        ]
    except Exception as e:
        return failure_response(e)

    return {"issueKey": key, "transitions": transitions}


@router.post("/task/{key}/status")
async def update_task_status(key: str, jira: JiraDep, body: StatusUpdate | None = None):
    """Transition an issue by transition id."""
    if body is None or not body.statusId:
        return error_response(status.HTTP_400_BAD_REQUEST, "Missing required field: statusId")

    try:
        result = await jira.update_task_status(key, body.statusId)
    except Exception as e:
        return failure_response(e)

    return {
        "success": True,
        "message": f"Task {key} status updated successfully",
        "result": result,
    }


@router.post("/task/{key}/status-by-name")
async def update_task_status_by_name(
    key: str, jira: JiraDep, body: StatusNameUpdate | None = None
):
    """Transition an issue to a status given by name, optionally with a comment."""
    if body is None or not body.statusName:
        return error_response(
            status.HTTP_400_BAD_REQUEST, "Missing required field: statusName"
        )

    try:
        result = await jira.update_task_status_by_name(key, body.statusName, body.comment)
    except Exception as e:
        return failure_response(e)

    return {
        "success": True,
        "message": f'Task {key} status updated to "{body.statusName}" successfully',
        "result": result,
    }


@router.get("/task/{key}/transition/{status_name}")
async def find_transition(key: str, status_name: str, jira: JiraDep):
    """Resolve a status name to a transition id."""
    try:
        transition_id = await jira.find_transition_by_status_name(key, status_name)
        if transition_id:
            return {
                "issueKey": key,
                "statusName": status_name,
                "transitionId": transition_id,
                "found": True,
            }

        available = [
            Transition.from_api_response(t).to_summary()
            for t in await jira.get_transitions(key)
        ]
    except Exception as e:
        return failure_response(e)

    return error_response(
        status.HTTP_404_NOT_FOUND,
        f'No transition found for status "{status_name}"',
        issueKey=key,
        statusName=status_name,
        found=False,
        availableTransitions=available,
    )


# --- Project Routes ---


@router.get("/projects")
async def list_projects(jira: JiraDep):
    """List all projects visible to the configured account."""
    try:
        return await jira.get_projects()
    except Exception as e:
        return failure_response(e)


@router.get("/health")
async def health():
    """Liveness check listing the supported endpoints."""
    return {
        "status": "OK",
        "timestamp": datetime.now(timezone.utc)
        .isoformat(timespec="milliseconds")
        .replace("+00:00", "Z"),
        "endpoints": {k: v for k, v in ENDPOINTS.items() if k != "GET /health"},
    }


# --- Application ---


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Open one Jira client for the lifetime of the process."""
    config: ProxyConfig = app.state.config
    async with JiraClient(config.jira) as client:
        app.state.jira_client = client
        logger.info("Jira proxy forwarding with settings %s", config.jira.to_dict())
        logger.info("Health check: http://%s:%s/health", config.host, config.port)
        yield
    logger.info("Jira proxy stopped")


def create_app(config: ProxyConfig | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        config: Settings to use. Read from the environment when omitted.
    """
    if config is None:
        # Factory mode (uvicorn --reload): the child process sets up its own logging.
        config = ProxyConfig.from_env()
        setup_logging(config.log_level, config.log_dir)

    app = FastAPI(
        title="Jira Proxy",
        description="Simplified REST API in front of Jira",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.config = config

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(config.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Exception handlers
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        # Unknown path or unsupported method
        if exc.status_code in (status.HTTP_404_NOT_FOUND, status.HTTP_405_METHOD_NOT_ALLOWED):
            return error_response(
                status.HTTP_404_NOT_FOUND,
                "Endpoint not found",
                method=request.method,
                path=request.url.path,
                availableEndpoints=list(ENDPOINTS),
            )
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=exc.headers,
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        _request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return error_response(
            status.HTTP_400_BAD_REQUEST,
            "Invalid request body",
            details=jsonable_encoder(exc.errors(), custom_encoder={Exception: str}),
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        # Runs outside CORSMiddleware, so the allowed origin is echoed here.
        headers = {}
        origin = request.headers.get("origin")
        if origin and origin in config.cors_origins:
            headers = {
                "Access-Control-Allow-Origin": origin,
                "Access-Control-Allow-Credentials": "true",
                "Vary": "Origin",
            }
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Something went wrong!", "message": str(exc)},
            headers=headers,
        )

    app.include_router(router)

    return app
