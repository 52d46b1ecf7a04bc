"""
FastAPI app factory.

Responsibilities:
- Create and configure FastAPI app
- Set up middleware
- Initialize shared resources (voting store)
- Register routes
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import AppConfig
from observability import logger
from store.voting_store import VotingStore

from server.routes import register_routes


def create_app(config: AppConfig | None = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Tests pass an explicit config; the ASGI entry point loads it from
    the environment.
    """
    if config is None:
        config = AppConfig.load_from_env()

    logger.configure(enabled=config.enable_json_logs, level=config.log_level)

    app = FastAPI(title="Voice Command API")

    app.state.config = config

    # Middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(config.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # One store per process; each connection gets its own voter key (VotingStore.for_session)
    app.state.store = VotingStore.from_path(config.store_path)

    # Routes
    register_routes(app)

    return app
