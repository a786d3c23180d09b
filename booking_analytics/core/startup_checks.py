from __future__ import annotations

import logging

from booking_analytics.core.config import settings

logger = logging.getLogger(__name__)


def _is_production() -> bool:
    env = (settings.environment or "").strip().lower()
    return env in {"prod", "production"}


def _looks_like_localhost(url: str | None) -> bool:
    value = (url or "").strip().lower()
    if not value:
        return False
    return "localhost" in value or "127.0.0.1" in value


def _append_if(problems: list[str], *, condition: bool, message: str) -> None:
    if condition:
        problems.append(message)


def _validate_store_settings(problems: list[str]) -> None:
    uri = (settings.mongodb_uri or "").strip()
    _append_if(problems, condition=not uri, message="MONGODB_URI must be set in production.")
    _append_if(
        problems,
        condition=_looks_like_localhost(uri),
        message="MONGODB_URI must not point at localhost in production.",
    )
    _append_if(
        problems,
        condition=not (settings.mongodb_database or "").strip(),
        message="MONGODB_DATABASE must not be empty.",
    )
    _append_if(
        problems,
        condition=not (settings.mongodb_collection or "").strip(),
        message="MONGODB_COLLECTION must not be empty.",
    )


def _validate_observability_settings(problems: list[str]) -> None:
    _append_if(
        problems,
        condition=not (settings.sentry_dsn or "").strip(),
        message="SENTRY_DSN must be configured in production.",
    )


def validate_production_settings() -> None:
    """
    Fail fast on unusable defaults when running in production.

    Local and test environments are never checked.
    """
    if not _is_production():
        return

    problems: list[str] = []
    _validate_store_settings(problems)
    _validate_observability_settings(problems)

    if problems:
        raise RuntimeError("Production configuration checks failed:\n- " + "\n- ".join(problems))
    logger.info("production_settings_ok")
