"""HTTP server supporting echo, user-agent, and file operations."""

import signal
import sys

from tinyhttp.bootstrap.config import ServerConfig, parse_cli_args
from tinyhttp.bootstrap.logging_setup import configure_logging
from tinyhttp.domain.connection_id import get_logger
from tinyhttp.domain.file_store import FileStore
from tinyhttp.lifecycle.state import ServerLifecycle
from tinyhttp.pipeline.router import Router
from tinyhttp.transport.accept_loop import run_server

SERVER_LOGGER = get_logger("server")


def main(argv: list[str] | None = None) -> int:
    """Start the HTTP server and spawn a worker thread per connection."""
    args = parse_cli_args(sys.argv[1:] if argv is None else argv)
    configure_logging(
        args.log_level, args.log_destination, use_json=args.log_format == "json"
    )

    config = ServerConfig.from_args(args)
    router = Router(FileStore(config.directory))
    lifecycle = ServerLifecycle()

    def shutdown_handler(signum: int, _frame) -> None:
        SERVER_LOGGER.info(
            "Received shutdown signal", extra={"event": "signal", "signal": signum}
        )
        lifecycle.request_stop()

    signal.signal(signal.SIGTERM, shutdown_handler)
    signal.signal(signal.SIGINT, shutdown_handler)

    SERVER_LOGGER.info(
        "Starting HTTP server",
        extra={
            "event": "server_starting",
            "host": config.host,
            "port": config.port,
            "directory": str(router.store.root),
            "log_destination": args.log_destination,
            "log_level": args.log_level,
        },
    )
    try:
        run_server(config, router, lifecycle)
    except OSError:
        SERVER_LOGGER.critical("Server terminated", extra={"event": "server_failed"})
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
