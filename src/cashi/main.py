from __future__ import annotations

import asyncio
import logging
import os
import sys

import uvicorn

# Install uvloop for better async performance (Linux/macOS only)
if sys.platform != "win32":
    try:
        import uvloop

        asyncio.set_event_loop_policy(uvloop.EventLoopPolicy())
    except ImportError:
        pass  # uvloop not available, continue with default event loop

from .envs.server_env import get_settings


def _setup_prometheus_multiproc_dir() -> None:
    """Prepare the Prometheus multiprocess directory before Uvicorn forks workers.

    Each run starts from an empty directory so the collector in the app only
    aggregates files written by the current workers.
    """
    prom_dir = os.environ.get("PROMETHEUS_MULTIPROC_DIR")
    if not prom_dir:
        return

    os.makedirs(prom_dir, exist_ok=True)
    for filename in os.listdir(prom_dir):
        file_path = os.path.join(prom_dir, filename)
        if os.path.isfile(file_path):
            os.remove(file_path)


def main() -> None:
    """Main entry point for the payment server."""

    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    print(f"Starting {settings.app_name} v{settings.app_version}")
    print(f"Database: {settings.database_url}")
    print(f"API will be available at: http://{settings.api_host}:{settings.api_port}")
    print(f"API Documentation: http://{settings.api_host}:{settings.api_port}/docs")

    # Uvicorn doesn't support multi-worker with reload, so debug forces one worker.
    reload = settings.api_debug
    workers = 1 if reload else settings.api_workers

    _setup_prometheus_multiproc_dir()

    uvicorn.run(
        "cashi.api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=reload,
        workers=workers,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
