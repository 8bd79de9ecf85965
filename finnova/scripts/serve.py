"""
FinNova - HTTP Server Launcher
================================
Validates configuration first (a missing ``GOOGLE_API_KEY`` aborts
with exit code 1 before anything is served), then runs the FastAPI
app under uvicorn.

Usage:
    finnova-server
    python -m finnova.scripts.serve
"""

from __future__ import annotations

import sys


def main() -> None:
    try:
        from finnova.config.settings import settings
    except Exception as exc:
        print("\n[FATAL] Configuration error — check your .env file:\n")
        print(f"  {exc}")
        print()
        sys.exit(1)

    import uvicorn

    from finnova.src.main import create_app

    uvicorn.run(create_app(), host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    main()
