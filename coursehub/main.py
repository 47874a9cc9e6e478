import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from coursehub.core.config import Settings, get_settings
from coursehub.core.errors import register_exception_handlers
from coursehub.core.identity import (
    IdentityProvider,
    build_identity_provider,
    build_identity_resolver,
)
from coursehub.core.logging_middleware import RequestLoggingMiddleware
from coursehub.db.init_db import init_db
from coursehub.db.session import build_engine, build_session_factory
from coursehub.routers.admin import router as admin_router
from coursehub.routers.auth import router as auth_router
from coursehub.routers.courses import router as courses_router
from coursehub.routers.enrollments import router as enrollments_router
from coursehub.routers.submissions import router as submissions_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings

    init_db(app.state.engine)

    injected = app.state.identity_provider
    provider = injected or build_identity_provider(settings)
    app.state.identity_resolver = build_identity_resolver(settings, provider)
    logger.info(
        "%s started (environment=%s, resolver=%s)",
        settings.app_name,
        settings.environment,
        type(app.state.identity_resolver).__name__,
    )

    yield

    # only tear down what we built
    if injected is None and hasattr(provider, "close"):
        provider.close()
    app.state.engine.dispose()
    logger.info("%s stopped", settings.app_name)


def create_app(
    settings: Settings | None = None,
    identity_provider: IdentityProvider | None = None,
) -> FastAPI:
    settings = settings or get_settings()
    logging.basicConfig(level=settings.log_level.upper())

    app = FastAPI(title=settings.app_name, lifespan=lifespan)

    engine = build_engine(settings.database_url)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)
    app.state.identity_provider = identity_provider

    register_exception_handlers(app)

    # Middleware
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Health check
    @app.get("/health")
    def health():
        return {"success": True, "data": {"status": "ok"}}

    app.include_router(auth_router, prefix="/auth", tags=["auth"])
    app.include_router(admin_router, prefix="/admin", tags=["admin"])
    app.include_router(courses_router, prefix="/courses", tags=["courses"])
    app.include_router(enrollments_router, prefix="/enrollments", tags=["enrollments"])
    app.include_router(submissions_router, tags=["submissions"])

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("coursehub.main:app", host="0.0.0.0", port=8000)
