from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from miroku.common.settings import get_settings
from miroku.services.api.errors import install_error_handlers
from miroku.services.api.routers import analytics, browse, catalog, movies, people, refresh, tags, watch_logs

cfg = get_settings()
dev = cfg.app_env.lower() == "development"


def create_app() -> FastAPI:
    app = FastAPI(
        title="Miroku API",
        version="0.1.0",
        docs_url=f"{cfg.api.prefix}/docs",
        openapi_url=f"{cfg.api.prefix}/openapi.json",
    )

    allow_origins = ["*"] if dev else cfg.api.cors_allow_origins
    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allow_origins,
        allow_methods=cfg.api.cors_allow_methods,
        allow_headers=cfg.api.cors_allow_headers,
        allow_credentials=cfg.api.cors_allow_credentials,
    )

    install_error_handlers(app)

    # Routers
    app.include_router(catalog.router)
    app.include_router(refresh.router)
    app.include_router(movies.router)
    app.include_router(people.router)
    app.include_router(tags.router)
    app.include_router(watch_logs.router)
    app.include_router(analytics.router)
    app.include_router(browse.router)
    return app

app = create_app()
