# beacon/main.py
from __future__ import annotations

from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from beacon import __version__
from beacon.config.settings import Settings, load_settings
from beacon.db import build_engine, build_sessionmaker
from beacon.errors import ConfigError, InvalidInput, Unauthorized
from beacon.init_db import init_db
from beacon.routes.collect import router as collect_router
from beacon.routes.stats import router as stats_router
from beacon.util.log import configure_logging, get_logger, log_event

logger = get_logger("api")


def _add_cors(app: FastAPI, settings: Settings) -> None:
    # No Origin header -> the middleware passes the request through untouched.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins) or ["*"],
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )


def _add_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(InvalidInput)
    async def _invalid_input(request: Request, exc: InvalidInput):
        return JSONResponse(status_code=400, content={"ok": False, "error": exc.code})

    @app.exception_handler(Unauthorized)
    async def _unauthorized(request: Request, exc: Unauthorized):
        return JSONResponse(status_code=401, content={"ok": False, "error": exc.code})

    @app.exception_handler(SQLAlchemyError)
    async def _storage_fault(request: Request, exc: SQLAlchemyError):
        log_event(
            logger,
            level="ERROR",
            event="storage_fault",
            msg="storage statement failed",
            method=request.method,
            path=request.url.path,
            error_type=type(exc).__name__,
            error=str(getattr(exc, "orig", None) or exc),
        )
        return JSONResponse(status_code=500, content={"ok": False, "error": "internal_error"})


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    if settings is None:
        try:
            settings = load_settings()
        except ConfigError as e:
            configure_logging()
            log_event(logger, level="ERROR", event="config_invalid", msg=str(e))
            raise

    configure_logging(settings.log_level)

    app = FastAPI(title="Beacon Analytics", version=__version__)

    engine = build_engine(settings)
    app.state.settings = settings
    app.state.engine = engine
    app.state.SessionLocal = build_sessionmaker(engine)

    _add_cors(app, settings)
    _add_error_handlers(app)

    app.include_router(collect_router)
    app.include_router(stats_router)

    @app.get("/health")
    def health():
        return {"ok": True}

    @app.on_event("startup")
    def on_startup():
        init_db(engine)
        log_event(
            logger,
            level="INFO",
            event="startup",
            msg="schema ready",
            auth_mode="token" if settings.stats_token else "open",
            cors="any" if settings.allow_any_origin else list(settings.cors_origins),
            pg_ssl=settings.pg_ssl,
        )

    @app.on_event("shutdown")
    def on_shutdown():
        engine.dispose()

    return app


def run() -> None:
    app = create_app()
    settings = app.state.settings
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    run()
