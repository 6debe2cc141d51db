"""FastAPI application for the i18n lens service."""

import logging
from typing import Optional

import uvicorn
from fastapi import FastAPI

from ..config import Config, config
from ..extraction.locale_loader import LocaleStore
from .routes import api, sse
from .services.job_manager import JobManager

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Config] = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = settings or config

    app = FastAPI(
        title="CodeLens i18n",
        description="Inline translation lookup and unused key analysis",
        version="0.1.0",
    )

    for error in settings.validate():
        logger.warning(error)

    # Store services in app state
    app.state.config = settings
    app.state.store = LocaleStore(settings.project_root, settings.i18n_folders)
    app.state.job_manager = JobManager()

    # Include routers
    app.include_router(api.router, prefix="/api")
    app.include_router(sse.router, prefix="/api")

    return app


app = create_app()


def main():
    """Entry point for the codelens-i18n-web command."""
    import argparse

    parser = argparse.ArgumentParser(description="Run the CodeLens i18n web service")
    parser.add_argument("--host", default="127.0.0.1", help="Host to bind to")
    parser.add_argument("--port", type=int, default=8000, help="Port to bind to")
    parser.add_argument("--reload", action="store_true", help="Enable auto-reload")

    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    print(f"Starting CodeLens i18n at http://{args.host}:{args.port}")
    uvicorn.run(
        "codelens_i18n.web.app:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
    )


if __name__ == "__main__":
    main()
