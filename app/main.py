"""FastAPI application entry point."""

import uuid
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Annotated

from fastapi import Depends, FastAPI, Header, HTTPException, Query, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import get_settings
from app.logging_config import clear_request_id, get_logger, set_request_id, setup_logging
from app.models.error import GENERIC_ERROR_DETAIL, ErrorResponse
from app.models.search import (
    BestResultsSearchQuery,
    MovieSearchQuery,
    MultiSearchMode,
    MultiSearchResponse,
    PersonSearchQuery,
    PlaylistSearchQuery,
    SearchQuery,
    TvSeriesSearchQuery,
    TypeSearchResponse,
    UserSearchQuery,
)
from app.search.errors import SearchError
from app.security import Actor, AuthenticationError, decode_actor, parse_bearer
from app.services.search_service import SearchService

# Setup logging configuration
setup_logging()
logger = get_logger(__name__)

# Load and validate configuration at startup
settings = get_settings()

# Global service instance
search_service: SearchService | None = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the engine and store clients once for the process lifetime."""
    global search_service

    logger.info("Starting search service...")
    search_service = SearchService()
    logger.info("Search service started successfully")

    yield

    logger.info("Shutting down search service...")
    if search_service:
        await search_service.close()
    logger.info("Search service shut down successfully")


app = FastAPI(
    title=settings.api_title,
    version=settings.api_version,
    description="Federated search across movies, TV series, persons, users and playlists",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", None) or str(uuid.uuid4())


def _error_response(status_code: int, error: str, detail: str, request_id: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(
            error=error,
            detail=detail,
            timestamp=datetime.now(UTC),
            request_id=request_id,
        ).model_dump(mode="json"),
    )


# Request ID and error handling middleware
@app.middleware("http")
async def request_middleware(request: Request, call_next):
    """Add request ID tracking and a last-resort error response."""
    request_id = str(uuid.uuid4())
    request.state.request_id = request_id
    set_request_id(request_id)

    try:
        logger.info(f"Request started: {request.method} {request.url.path}")
        response = await call_next(request)
        logger.info(
            f"Request completed: {request.method} {request.url.path} - Status: {response.status_code}"
        )
        return response
    except Exception as e:
        logger.error(
            f"Unhandled exception: {type(e).__name__}: {e}",
            exc_info=True,
            extra={"path": request.url.path},
        )
        return _error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Internal Server Error",
            GENERIC_ERROR_DETAIL,
            request_id,
        )
    finally:
        clear_request_id()


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle Pydantic validation errors."""
    request_id = _request_id(request)

    errors = []
    for error in exc.errors():
        field = " -> ".join(str(loc) for loc in error["loc"])
        errors.append(f"{field}: {error['msg']}")
    detail = "; ".join(errors)

    logger.warning(f"Validation error for request {request_id}: {detail}")

    return _error_response(
        status.HTTP_422_UNPROCESSABLE_ENTITY, "Validation Error", detail, request_id
    )


@app.exception_handler(AuthenticationError)
async def authentication_exception_handler(request: Request, exc: AuthenticationError):
    """Reject requests carrying a bearer token that does not verify."""
    request_id = _request_id(request)
    logger.warning(f"Authentication failed for request {request_id}: {exc}")
    return _error_response(
        status.HTTP_401_UNAUTHORIZED,
        "Unauthorized",
        "Authorization token is invalid",
        request_id,
    )


@app.exception_handler(SearchError)
async def search_exception_handler(request: Request, exc: SearchError):
    """Engine and store failures surface as one generic error."""
    request_id = _request_id(request)
    logger.error(
        f"Search failed for request {request_id} on '{exc.collection}' "
        f"(query: '{exc.query}'): {type(exc).__name__}"
    )
    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Internal Server Error",
        GENERIC_ERROR_DETAIL,
        request_id,
    )


async def get_actor(
    authorization: Annotated[str | None, Header()] = None,
) -> Actor | None:
    """Verify the optional bearer token; no header means an anonymous caller."""
    return decode_actor(
        parse_bearer(authorization),
        secret=settings.jwt_secret.get_secret_value() if settings.jwt_secret else None,
        algorithm=settings.jwt_algorithm,
        audience=settings.jwt_audience,
    )


def get_search_service() -> SearchService:
    if not search_service:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Search service not initialized",
        )
    return search_service


ActorDep = Annotated[Actor | None, Depends(get_actor)]
LanguageHeader = Annotated[str | None, Header()]


async def _search_collection(
    params: SearchQuery, actor: Actor | None, language: str | None
) -> TypeSearchResponse:
    service = get_search_service()
    return await service.search_collection(params, actor=actor, language=language)


# API Endpoints


@app.get("/health")
async def health_check():
    """Health check endpoint.

    Returns:
        dict: Health status and the configured backends
    """
    return {
        "status": "healthy",
        "service": settings.api_title,
        "version": settings.api_version,
        "backends": {
            "engine": settings.typesense_base_url,
            "store": settings.store_rest_url,
        },
    }


@app.post(
    "/v1/search/best-results",
    response_model=MultiSearchResponse,
    summary="Search every type and pick one best result",
)
async def search_best_results(
    params: Annotated[BestResultsSearchQuery, Query()],
    actor: ActorDep,
    language: LanguageHeader = None,
) -> MultiSearchResponse:
    service = get_search_service()
    return await service.search_all(
        params, actor=actor, language=language, mode=MultiSearchMode.BEST_RESULTS
    )


@app.post(
    "/v1/search/all",
    response_model=MultiSearchResponse,
    summary="Preview the first page of every type",
)
async def search_all_types(
    params: Annotated[BestResultsSearchQuery, Query()],
    actor: ActorDep,
    language: LanguageHeader = None,
) -> MultiSearchResponse:
    service = get_search_service()
    return await service.search_all(
        params, actor=actor, language=language, mode=MultiSearchMode.ALL
    )


@app.post("/v1/search/movies", response_model=TypeSearchResponse, summary="Search movies")
async def search_movies(
    params: Annotated[MovieSearchQuery, Query()],
    actor: ActorDep,
    language: LanguageHeader = None,
) -> TypeSearchResponse:
    return await _search_collection(params, actor, language)


@app.post("/v1/search/tv-series", response_model=TypeSearchResponse, summary="Search TV series")
async def search_tv_series(
    params: Annotated[TvSeriesSearchQuery, Query()],
    actor: ActorDep,
    language: LanguageHeader = None,
) -> TypeSearchResponse:
    return await _search_collection(params, actor, language)


@app.post("/v1/search/persons", response_model=TypeSearchResponse, summary="Search persons")
async def search_persons(
    params: Annotated[PersonSearchQuery, Query()],
    actor: ActorDep,
    language: LanguageHeader = None,
) -> TypeSearchResponse:
    return await _search_collection(params, actor, language)


@app.post("/v1/search/users", response_model=TypeSearchResponse, summary="Search users")
async def search_users(
    params: Annotated[UserSearchQuery, Query()],
    actor: ActorDep,
    language: LanguageHeader = None,
) -> TypeSearchResponse:
    return await _search_collection(params, actor, language)


@app.post("/v1/search/playlists", response_model=TypeSearchResponse, summary="Search playlists")
async def search_playlists(
    params: Annotated[PlaylistSearchQuery, Query()],
    actor: ActorDep,
    language: LanguageHeader = None,
) -> TypeSearchResponse:
    return await _search_collection(params, actor, language)
