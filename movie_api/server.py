"""Server Bootstrap — binds the listening socket and runs the app under uvicorn.

Invariants:
    - The socket is bound before uvicorn starts; a bind failure is returned as
      a StartupResult, never raised
    - "Server running on port <port>" is written to stdout only after a successful bind
    - A uvicorn run that never reached "started" is a failed startup, not success
    - main() turns every outcome into a process exit code

Design Decisions:
    - Explicit bind over uvicorn's own: uvicorn calls sys.exit(1) on bind
      failure, which hides the cause from callers and tests
    - log_config=None: uvicorn logs through the root handler from setup_logging
"""

import logging
import socket
from dataclasses import dataclass

import uvicorn
from pydantic import ValidationError

from movie_api.config import Settings, get_settings
from movie_api.infrastructure.observability import get_announcer, setup_logging
from movie_api.main import create_app

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_BIND_FAILURE = 2
EXIT_STARTUP_FAILURE = 3
EXIT_CONFIG_ERROR = 78


@dataclass(frozen=True)
class StartupResult:
    """Outcome of a serve() call."""
    ok: bool
    port: int
    error: str | None = None
    exit_code: int = EXIT_OK


def bind_socket(host: str, port: int) -> socket.socket:
    """Bind a listening TCP socket; raises OSError on failure."""
    family = socket.AF_INET6 if ":" in host else socket.AF_INET
    sock = socket.socket(family, socket.SOCK_STREAM)
    try:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind((host, port))
    except OSError:
        sock.close()
        raise
    sock.set_inheritable(True)
    return sock


def serve(settings: Settings) -> StartupResult:
    """Bind, announce, and serve until uvicorn shuts down."""
    try:
        sock = bind_socket(settings.host, settings.port)
    except OSError as e:
        logger.error(
            f"Failed to bind {settings.host}:{settings.port}: {e}",
            extra={"port": settings.port},
        )
        return StartupResult(
            ok=False, port=settings.port, error=str(e),
            exit_code=EXIT_BIND_FAILURE,
        )

    get_announcer().info(f"Server running on port {settings.port}")
    config = uvicorn.Config(
        create_app(settings), log_config=None, log_level=settings.log_level.lower(),
    )
    server = uvicorn.Server(config)
    try:
        server.run(sockets=[sock])
    finally:
        sock.close()
    if not server.started:
        logger.error(
            f"Server on port {settings.port} aborted during startup",
            extra={"port": settings.port},
        )
        return StartupResult(
            ok=False, port=settings.port, error="startup aborted",
            exit_code=EXIT_STARTUP_FAILURE,
        )
    return StartupResult(ok=True, port=settings.port)


def main() -> int:
    """Process entry point: returns the exit code."""
    try:
        settings = get_settings()
    except ValidationError as e:
        setup_logging()
        logger.error(f"Invalid configuration: {e}")
        return EXIT_CONFIG_ERROR

    setup_logging(settings.log_level, settings.log_format)
    return serve(settings).exit_code
