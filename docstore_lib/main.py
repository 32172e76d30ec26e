"""Application factory for the DocStore FastAPI app.

This module exposes `create_app(config: Config) -> FastAPI` which performs
all setup (logging, config loading, backend/store composition, exception
handlers and router registration). Nothing happens at import time so tests
can construct isolated apps.

    from docstore_lib.main import create_app, Config
    app = create_app(Config())
"""
from dataclasses import dataclass, field
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from docstore_lib.backend import BackendClientProtocol, get_client
from docstore_lib.config.config import ServerConfig, load_server_config
from docstore_lib.errors import BackendError, ConfigurationError, DecodeError, NotFoundError
from docstore_lib.logging_config import configure_logging
from docstore_lib.store import StoreConfig, create_store, get_codec


@dataclass
class Config:
    config_path: Optional[str] = None
    # Overrides the backend named in the server config when set
    backend: Optional[str] = None
    # Inject a ready client (tests); wins over `backend`
    client: Optional[BackendClientProtocol] = None
    server_config: Optional[ServerConfig] = None
    configure_logging: bool = True
    overrides: dict = field(default_factory=dict)


def _error(status: int, code: str, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=status, content={'error': code, 'message': str(exc)})


def create_app(config: Config) -> FastAPI:
    """Create and return a configured FastAPI application."""
    server_cfg = config.server_config or load_server_config(config.config_path)
    if config.configure_logging:
        logger = configure_logging(level=server_cfg.log_level)
    else:
        import logging
        logger = logging.getLogger(__name__)

    client = config.client
    if client is None:
        client = get_client(
            config.backend or server_cfg.backend,
            access_token=server_cfg.access_token(),
            spaces=server_cfg.spaces,
        )

    store = create_store(
        client,
        StoreConfig(
            codec=get_codec(server_cfg.codec),
            verbose=server_cfg.verbose,
            cache_folders=server_cfg.cache_folders,
        ),
        **config.overrides,
    )
    logger.info("Document store ready (backend=%s, cache_folders=%s)", server_cfg.backend, server_cfg.cache_folders)

    from docstore_lib.services import ServiceContainer

    container = ServiceContainer()
    container.register_singleton("server_config", server_cfg)
    container.register_singleton("backend_client", client)
    container.register_singleton("document_store", store)

    app = FastAPI(title="DocStore Server")
    app.state.container = container

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if isinstance(exc.detail, dict):
            return JSONResponse(status_code=exc.status_code, content=exc.detail)
        return JSONResponse(status_code=exc.status_code, content={'error': 'http_error', 'message': str(exc.detail)})

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError):
        return _error(404, 'not_found', exc)

    @app.exception_handler(ConfigurationError)
    async def configuration_handler(request: Request, exc: ConfigurationError):
        return _error(400, 'bad_path', exc)

    @app.exception_handler(DecodeError)
    async def decode_handler(request: Request, exc: DecodeError):
        return _error(400, 'decode_error', exc)

    @app.exception_handler(BackendError)
    async def backend_handler(request: Request, exc: BackendError):
        logger.warning("Backend failure on %s: %s", request.url.path, exc)
        return _error(502, 'backend_error', exc)

    # Router registration: import routers here to avoid import-time side-effects
    from docstore_lib.documents.api import router as documents_router
    from docstore_lib.server.api import router as server_router

    app.include_router(documents_router, prefix='/api')
    app.include_router(server_router, prefix='/api')

    return app
