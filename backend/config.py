"""
Application configuration.

Responsibilities:
- Load deployment-specific configuration
- Read environment variables
- Provide a typed, immutable config object

Non-responsibilities:
- No engine logic
- No behavioral timing constants (see constants.py)
- No runtime mutation
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from constants import SPEECH_LANG_DEFAULT
from orchestrator.enums.page_context import PageContext


def _env_flag(name: str, default: str) -> bool:
    return os.environ.get(name, default).strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class AppConfig:
    """
    Immutable application configuration.

    Constructed once at process startup.
    Passed downward to the app factory and each SessionGateway.
    """

    # ------------------------------------------------------------------
    # Environment
    # ------------------------------------------------------------------

    env: str
    log_level: str

    # ------------------------------------------------------------------
    # Observability
    # ------------------------------------------------------------------

    enable_json_logs: bool

    # ------------------------------------------------------------------
    # Server
    # ------------------------------------------------------------------

    host: str
    port: int
    cors_origins: tuple[str, ...]

    # ------------------------------------------------------------------
    # Voice
    # ------------------------------------------------------------------

    speech_lang: str
    auto_start_voice: bool
    default_page: PageContext

    # ------------------------------------------------------------------
    # Storage
    # ------------------------------------------------------------------

    store_path: str | None

    # ------------------------------------------------------------------
    # Factory
    # ------------------------------------------------------------------

    @staticmethod
    def load_from_env() -> AppConfig:
        """
        Load configuration from environment variables.

        Raises:
            ValueError if DEFAULT_PAGE or PORT hold unusable values.
        """
        origins = os.environ.get("CORS_ORIGINS", "*")

        return AppConfig(
            env=os.environ.get("ENV", "dev"),
            log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),

            enable_json_logs=_env_flag("ENABLE_JSON_LOGS", "1"),

            host=os.environ.get("HOST", "0.0.0.0"),
            port=int(os.environ.get("PORT", "8000")),
            cors_origins=tuple(o.strip() for o in origins.split(",") if o.strip()),

            speech_lang=os.environ.get("SPEECH_LANG", SPEECH_LANG_DEFAULT),
            auto_start_voice=_env_flag("VOICE_AUTO_START", "1"),
            default_page=PageContext.parse(os.environ.get("DEFAULT_PAGE", "login")),

            store_path=os.environ.get("STORE_PATH") or None,
        )
