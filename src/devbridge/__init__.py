"""Dev Bridge - WebSocket bridge between an editor and a local project.

Lets an external editor read, write, list, create and delete files in the
project directory and run git status/diff/commit/push, over a WebSocket
speaking one JSON object per frame.

Usage:
    import devbridge
    devbridge.start()

Usage (shell):
    devbridge --port 8080 --workspace /path/to/project
"""

__version__ = "0.1.0"

LOG_FORMAT = '[%(asctime)s] %(levelname)s - %(message)s'


def configure_logging(log_file):
    # type: (str) -> None
    """Send INFO and above to stdout and to ``log_file`` (truncated on start)."""
    import logging
    import os
    import sys

    log_dir = os.path.dirname(log_file)
    if log_dir and not os.path.exists(log_dir):
        os.makedirs(log_dir)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.INFO)
    root_logger.handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT)
    for handler in [logging.StreamHandler(sys.stdout),
                    logging.FileHandler(log_file, mode='w', encoding='utf-8')]:
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)


def start(host=None, port=None, workspace_dir=None):
    """Start the Dev Bridge server and block until interrupted.

    Arguments left as None fall back to the DEVBRIDGE_* environment variables.

    Args:
        host: Server host address.
        port: Server port number.
        workspace_dir: Project directory served to clients.
    """
    import asyncio
    import logging
    import os
    import socket

    from .config import get_bridge_settings
    from .server import create_server

    settings = get_bridge_settings().override(
        host=host,
        port=port,
        workspace_dir=os.path.abspath(workspace_dir) if workspace_dir else None,
    )

    # ── Logging ───────────────────────────────────────────────
    configure_logging(settings.log_file)
    logger = logging.getLogger("devbridge")

    if not os.path.isdir(settings.workspace_dir):
        raise RuntimeError("Workspace directory does not exist: {}".format(settings.workspace_dir))

    # ── Port availability check ──────────────────────────────
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    try:
        sock.bind((settings.host, settings.port))
    except OSError:
        raise RuntimeError(
            "Port {} is already in use. "
            "Another bridge may be running, or another process is using this port.\n"
            "Try: devbridge --port {}".format(settings.port, settings.port + 1)
        )
    finally:
        sock.close()

    # ── Status display ────────────────────────────────────────
    print("\n" + "=" * 60)
    print("Dev Bridge Server")
    print("=" * 60)
    print("  URL:         ws://{}:{}".format(settings.host, settings.port))
    print("  Workspace:   {}".format(settings.workspace_dir))
    print("  Log:         {}".format(settings.log_file))
    print("=" * 60 + "\n")

    bridge = create_server(settings)

    async def serve():
        await bridge.start()
        logger.info("Ready for connections!")
        await bridge.wait_closed()

    try:
        asyncio.run(serve())
    except KeyboardInterrupt:
        logger.info("Bridge stopped by user")
