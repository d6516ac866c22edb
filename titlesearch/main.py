"""Main module for the FastAPI application."""
from contextlib import asynccontextmanager
from typing import List, Optional

import asyncpg
from fastapi import Depends, FastAPI, Form, HTTPException, Query, status
from redis.exceptions import RedisError
from .config import settings
from .models import ErrorResult, MattermostEnqueueResult, SongSummary, SongsShowResponse
from .search.errors import InvalidTokenError, NoCandidatesError, SongNotFoundError
from .search.search_service import SearchService
from .db.postgres_connector import PostgresConnector
from .db.queries import SongRepository
from .cache import cache_manager
from .logger import logger


# --- Initialisation des variables globales ---

db_connector: PostgresConnector = PostgresConnector(
    settings.DATABASE_URL, max_size=settings.DATABASE_POOL_SIZE
)
song_repository: SongRepository = SongRepository(db_connector)
search_service: SearchService = SearchService(repository=song_repository)
# Alias `service` pour les tests qui patchent `main.service`
service = search_service

DB_ERRORS = (asyncpg.PostgresError, OSError)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """Handle FastAPI startup and shutdown events."""
    logger.info("Starting up titlesearch API...")

    try:
        await db_connector.connect()
        logger.info("PostgreSQL connection pool established successfully.")
        # Le catalogue est chargé une seule fois, jamais rafraîchi.
        await search_service.load_catalog()
    except DB_ERRORS as e:
        # Sans catalogue, le service ne peut rien trouver : on refuse de démarrer.
        logger.critical("Failed to load catalog from PostgreSQL: {error}", error=e)
        await db_connector.close()
        raise

    try:
        await cache_manager.ping()
        logger.info("Redis cache connected successfully.")
    except RedisError as e:
        logger.error("Failed to connect to Redis: {error}", error=e)

    yield

    logger.info("Shutting down titlesearch API...")
    await db_connector.close()
    logger.info("PostgreSQL connection pool closed.")
    await cache_manager.close()
    logger.info("Redis connection closed.")


app = FastAPI(
    title="titlesearch - fuzzy title search service",
    lifespan=lifespan
)


def get_service() -> SearchService:
    """Dépendance FastAPI pour obtenir l'instance du service de recherche."""
    return service


def _error(status_code: int, reason: str) -> HTTPException:
    return HTTPException(status_code=status_code, detail=ErrorResult(reason=reason).model_dump())


@app.get("/songs/search", response_model=List[SongSummary])
async def songs_search(
    q: str = Query(..., description="Texte libre à rechercher"),
    limit: int = Query(settings.CANDIDATES_COUNT, ge=1, le=settings.MAX_CANDIDATES),
    svc: SearchService = Depends(get_service),
):
    """GET /songs/search?q=..."""
    try:
        return await svc.search(q, limit)
    except DB_ERRORS as e:
        logger.exception("Database error during search")
        raise _error(status.HTTP_500_INTERNAL_SERVER_ERROR, f"db error: {e}") from e


@app.get("/songs/show", response_model=SongsShowResponse)
async def songs_show(
    song_id: int = Query(..., alias="id"),
    svc: SearchService = Depends(get_service),
):
    """GET /songs/show?id=..."""
    try:
        return await svc.show(song_id)
    except SongNotFoundError as e:
        raise _error(status.HTTP_404_NOT_FOUND, f"not found: {e}") from e
    except DB_ERRORS as e:
        logger.exception("Database error during show")
        raise _error(status.HTTP_500_INTERNAL_SERVER_ERROR, f"db error: {e}") from e


@app.post("/mattermost/enqueue", response_model=Optional[MattermostEnqueueResult])
async def mattermost_enqueue(
    token: str = Form(...),
    text: str = Form(...),
    svc: SearchService = Depends(get_service),
):
    """POST /mattermost/enqueue (webhook sortant Mattermost)."""
    try:
        return await svc.enqueue(token, text)
    except InvalidTokenError as e:
        raise _error(status.HTTP_401_UNAUTHORIZED, str(e)) from e
    except NoCandidatesError as e:
        raise _error(status.HTTP_404_NOT_FOUND, f"not found: {e}") from e
    except DB_ERRORS as e:
        logger.exception("Database error during webhook")
        raise _error(status.HTTP_500_INTERNAL_SERVER_ERROR, f"db error: {e}") from e


@app.get("/")
def root():
    """Root endpoint to check API status."""
    return {"status": "ok", "message": "titlesearch API is running"}


@app.get("/health", status_code=status.HTTP_200_OK, tags=["Monitoring"])
async def health_check():
    """
    Health check endpoint.

    Checks connectivity to Database and Redis.
    Returns 200 OK if all services are reachable, otherwise 503 Service Unavailable.
    """
    services_status = {"database": "ok", "redis": "ok"}
    try:
        await cache_manager.ping()
    except RedisError:
        services_status["redis"] = "error"
        logger.error("Health check failed: Redis connection error.")

    try:
        await db_connector.execute_query("SELECT 1")
    except DB_ERRORS:
        services_status["database"] = "error"
        logger.error("Health check failed: Database connection error.")

    if "error" in services_status.values():
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=services_status)

    return {**services_status, **await service.stats()}
