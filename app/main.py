import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from app.cache.layer import RedisCache
from app.cache.memory import MemoryCache
from app.core.config import Settings, get_settings
from app.core.exception_handlers import register_exception_handlers
from app.core.exceptions import CacheUnavailable, StoreFailure
from app.core.logging import setup_logging
from app.core.middleware import RequestLogMiddleware
from app.database import build_engine, build_session_factory, create_db_and_tables
from app.routers import todos, users
from app.services.todo_service import TodoService
from app.services.user_service import UserService
from app.stores.todo_store import SqlTodoStore
from app.stores.user_store import SqlUserStore

logger = logging.getLogger(__name__)


def build_cache(settings: Settings):
    if settings.cache_backend == "memory":
        return MemoryCache(maxsize=settings.memory_cache_maxsize)
    return RedisCache.from_settings(settings)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = app.state.settings
    setup_logging(settings.log_level)
    app.state.started_at = time.monotonic()

    engine = build_engine(settings)
    session_factory = build_session_factory(engine)
    if engine.dialect.name == "sqlite":
        await create_db_and_tables(engine)

    cache = build_cache(settings)
    try:
        await cache.ping()
        logger.info("Cache backend %s reachable", settings.cache_backend)
    except CacheUnavailable as e:
        # degraded: every read falls through to the store until the cache returns
        logger.warning("Cache backend unreachable at startup: %s", e.message)

    isolation = settings.list_isolation_level if engine.dialect.name != "sqlite" else None
    todo_store = SqlTodoStore(session_factory, isolation_level=isolation)
    app.state.todo_store = todo_store
    app.state.cache = cache
    app.state.todo_service = TodoService(
        todo_store,
        cache,
        list_ttl=settings.list_cache_ttl_seconds,
        store_timeout=settings.store_timeout_seconds,
        single_flight=settings.single_flight,
    )
    app.state.user_service = UserService(
        SqlUserStore(session_factory), store_timeout=settings.store_timeout_seconds
    )
    yield
    await cache.close()
    await engine.dispose()


def create_app(settings: Settings | None = None) -> FastAPI:
    app = FastAPI(
        title="Todo API",
        description="Async todo API with a read-through Redis cache on listings",
        swagger_ui_parameters={"displayRequestDuration": True},
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings or get_settings()

    register_exception_handlers(app)
    app.add_middleware(RequestLogMiddleware)

    # Include routers
    app.include_router(users.router)
    app.include_router(todos.router)

    @app.get("/")
    async def root():
        return {
            "message": "Welcome to Todo API",
            "docs": "/docs",
            "version": "1.0.0",
        }

    @app.get("/health")
    async def health_check(request: Request):
        state = request.app.state
        try:
            await state.todo_store.ping()
            await state.cache.ping()
        except (StoreFailure, CacheUnavailable) as e:
            return JSONResponse(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                content={"status": "inactive", "error": e.message},
            )
        return {
            "status": "active",
            "db": "connected",
            "cache": "connected",
            "uptime": round(time.monotonic() - state.started_at, 3),
            "cache_stats": state.cache.get_stats(),
        }

    return app


app = create_app()
