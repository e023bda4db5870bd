"""JSON-RPC HTTP/WebSocket server.

FastAPI-based server exposing registered methods via JSON-RPC 2.0 over
HTTP POST and over a WebSocket endpoint, plus optional static assets.
"""

import logging
import time
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from pathlib import Path

from fastapi import Depends, FastAPI, Request, WebSocket
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse, Response
from fastapi.staticfiles import StaticFiles

from . import __version__
from .auth import AuthError, AuthManager, verify_bearer_token
from .books import register_book_methods
from .config import Config
from .models import HealthResponse
from .rpc import ErrorFormatter, MethodRegistry, RpcContext, RpcDispatcher
from .transports import HttpTransport, WebSocketTransport

logger = logging.getLogger(__name__)

# Close code sent to WebSocket peers that fail authentication
WS_UNAUTHORIZED = 4401


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager.

    Records the start time used for uptime reporting.
    """
    # Use monotonic time for uptime (not affected by system clock changes)
    app.state.start_time = time.monotonic()
    logger.info(
        "JSON-RPC server ready: %d methods, prefix=/%s, ws=%s",
        len(app.state.dispatcher.registry),
        app.state.config.rpc.prefix,
        app.state.config.rpc.ws_path,
    )
    yield


def create_app(
    config: Config | None = None,
    registry: MethodRegistry | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        config: Optional configuration (uses defaults if not provided).
        registry: Methods to serve (an empty registry if not provided).

    Returns:
        Configured FastAPI application.
    """
    config = config if config is not None else Config()

    app = FastAPI(
        title="JSON-RPC Server",
        description="Transport-agnostic JSON-RPC 2.0 dispatcher over HTTP and WebSocket",
        version=__version__,
        lifespan=lifespan,
    )

    dispatcher = RpcDispatcher(registry)
    formatter = ErrorFormatter(production=config.production)

    # Stored in app.state instead of module globals
    app.state.config = config
    app.state.start_time = time.monotonic()
    app.state.auth_manager = AuthManager(config)
    app.state.dispatcher = dispatcher
    app.state.http_transport = HttpTransport(
        dispatcher,
        formatter,
        prefix=config.rpc.prefix,
        mirror_error_status=config.rpc.mirror_error_status,
    )
    app.state.ws_transport = WebSocketTransport(dispatcher, formatter)

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.server.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register routes
    _register_routes(app, config)

    # Mount static assets
    _mount_static(app, config)

    return app


def _mount_static(app: FastAPI, config: Config) -> None:
    """Serve configured static prefixes from the static directory.

    Directory prefixes are mounted with StaticFiles; file prefixes get a
    single GET route.
    """
    if not config.static.directory:
        return

    root = Path(config.static.directory)
    for prefix in config.static.prefixes:
        name = prefix.strip("/")
        target = root / name
        if target.is_dir():
            app.mount(f"/{name}", StaticFiles(directory=target), name=f"static:{name}")
        elif target.is_file():
            app.add_api_route(
                f"/{name}",
                _file_endpoint(target),
                methods=["GET"],
                include_in_schema=False,
            )
        else:
            logger.warning("Static prefix %s not found under %s", name, root)


def _file_endpoint(path: Path):
    async def serve_file() -> FileResponse:
        return FileResponse(path)

    return serve_file


def _register_routes(app: FastAPI, config: Config) -> None:
    """Register all API routes.

    Args:
        app: FastAPI application.
        config: Server configuration.
    """

    @app.get("/health")
    async def health(request: Request) -> JSONResponse:
        """Health check endpoint."""
        start_time = getattr(request.app.state, "start_time", 0.0)
        uptime = time.monotonic() - start_time if start_time else 0.0
        dispatcher: RpcDispatcher = request.app.state.dispatcher
        response = HealthResponse(
            status="healthy",
            version=__version__,
            uptime_seconds=uptime,
            timestamp=datetime.now(UTC),
            methods=tuple(dispatcher.registry.methods),
        )
        return JSONResponse(content=response.to_dict())

    @app.websocket(config.rpc.ws_path)
    async def rpc_websocket(websocket: WebSocket) -> None:
        """JSON-RPC 2.0 over WebSocket, one request per frame."""
        auth_manager: AuthManager = websocket.app.state.auth_manager
        authorization = websocket.headers.get("authorization", "")
        token = websocket.query_params.get("token")
        if not authorization and token:
            authorization = f"Bearer {token}"

        try:
            user = auth_manager.authenticate(authorization)
        except AuthError as e:
            logger.info("Rejected WebSocket connection: %s", e)
            await websocket.close(code=WS_UNAUTHORIZED, reason=str(e))
            return

        await websocket.accept()
        logger.info("WebSocket connected (user=%s)", user)
        transport: WebSocketTransport = websocket.app.state.ws_transport
        await transport.serve(websocket, RpcContext(user=user, transport="ws"))

    @app.post("/{path:path}")
    async def rpc_endpoint(
        path: str,
        request: Request,
        user: str = Depends(verify_bearer_token),
    ) -> Response:
        """JSON-RPC 2.0 endpoint: POST /<prefix> or POST /<prefix>/<method>.

        Args:
            path: Request path.
            request: FastAPI request object.
            user: Authenticated user from bearer token.

        Returns:
            JSON-RPC response.
        """
        body = await request.body()
        transport: HttpTransport = request.app.state.http_transport
        return await transport.handle(path, body, user)


def run_server(
    host: str = "0.0.0.0",
    port: int = 8080,
    config_path: str | None = None,
    demo: bool = True,
    log_level: str = "info",
) -> None:
    """Run the JSON-RPC server.

    Args:
        host: Bind address.
        port: Bind port.
        config_path: Path to configuration file.
        demo: Register the example books.* methods.
        log_level: Logging level name.
    """
    import uvicorn

    logging.basicConfig(
        level=log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Load configuration (yaml when given, else environment, then defaults)
    if config_path:
        config = Config.from_yaml(Path(config_path))
    else:
        config = Config.from_env()

    # Override with CLI arguments
    config.server.host = host
    config.server.port = port

    registry = MethodRegistry()
    if demo:
        register_book_methods(registry)

    app = create_app(config, registry)
    uvicorn.run(app, host=host, port=port, log_level=log_level.lower())
