#!/usr/bin/env python3
"""
Dispatch Desk Server

Starts the dispatch desk API server with:
- Zone management (guard, battery, custom status, contract)
- Call queue and staff roster
- Dashboard statistics
- Simulated alarms and battery drain

Usage:
    python -m dispatch_desk.server
    # or
    uvicorn dispatch_desk.api.manager:app --host 0.0.0.0 --port 8080 --reload

Tunables are read from DISPATCH_DESK_* environment variables (see config.py).
"""

import argparse
import logging

import uvicorn

from . import __version__


def main():
    parser = argparse.ArgumentParser(description="Dispatch Desk Server")
    parser.add_argument("--host", default="0.0.0.0", help="Host to bind to")
    parser.add_argument("--port", type=int, default=8080, help="Port to bind to")
    parser.add_argument("--reload", action="store_true", help="Enable auto-reload")
    parser.add_argument(
        "--log-level",
        default="info",
        choices=["debug", "info", "warning", "error"],
        help="Log level",
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper()),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger = logging.getLogger("dispatch_desk")
    logger.info("[STARTUP] Dispatch Desk v%s", __version__)
    logger.info("[STARTUP] API: http://%s:%s/docs", args.host, args.port)

    uvicorn.run(
        "dispatch_desk.api.manager:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=args.log_level,
    )


if __name__ == "__main__":
    main()
