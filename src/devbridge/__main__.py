"""Allow running as: python -m devbridge"""

import argparse

from devbridge import __version__, start


def main():
    parser = argparse.ArgumentParser(
        prog="devbridge",
        description="Dev Bridge - WebSocket file and git bridge for editors",
    )
    parser.add_argument(
        "--version", "-v", action="version", version="devbridge {}".format(__version__)
    )
    parser.add_argument("--host", default=None, help="server host (default: $DEVBRIDGE_HOST or localhost)")
    parser.add_argument("--port", type=int, default=None, help="server port (default: $DEVBRIDGE_PORT or 8080)")
    parser.add_argument("--workspace", default=None,
                        help="project directory (default: $DEVBRIDGE_WORKSPACE or current directory)")
    args = parser.parse_args()

    start(host=args.host, port=args.port, workspace_dir=args.workspace)


if __name__ == "__main__":
    main()
