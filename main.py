#!/usr/bin/env python3
"""
Car rental backend -- server entry point.

Usage:
  python main.py
  python main.py --port 8000
  python main.py --host 127.0.0.1 --reload

Configuration comes from the environment and .env (see core/config.py).
The most important variables:
  SECRET_KEY    Signing key for access tokens (>= 32 chars). Required unless DEBUG=true.
  DATABASE_URL  SQLAlchemy URL. Defaults to a SQLite file next to this script.
  UPLOAD_DIR    Where car images are stored.
  PORT          Listen port (default 5000).
"""

import argparse

import uvicorn

from core.config import get_settings


def main() -> None:
    settings = get_settings()

    parser = argparse.ArgumentParser(
        description="Car rental backend API server.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--host", default=settings.host, help=f"Bind address (default: {settings.host})")
    parser.add_argument("--port", type=int, default=settings.port, help=f"Listen port (default: {settings.port})")
    parser.add_argument("--reload", action="store_true", help="Restart on code changes (development only)")
    args = parser.parse_args()

    print(f"  Car rental API listening on http://{args.host}:{args.port}")
    uvicorn.run("asgi:app", host=args.host, port=args.port, reload=args.reload)


if __name__ == "__main__":
    main()
