from __future__ import annotations

from booking_analytics.core.config import settings


def init_sentry() -> bool:
    """Enable Sentry error reporting when a DSN is configured."""
    if not (settings.sentry_dsn or "").strip():
        return False

    import sentry_sdk
    from sentry_sdk.integrations import Integration
    from sentry_sdk.integrations.fastapi import FastApiIntegration
    from sentry_sdk.integrations.pymongo import PyMongoIntegration

    integrations: list[Integration] = [
        FastApiIntegration(),
        PyMongoIntegration(),
    ]

    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        environment=settings.environment,
        release=settings.app_version,
        traces_sample_rate=settings.sentry_traces_sample_rate,
        integrations=integrations,
        attach_stacktrace=True,
        send_default_pii=False,
    )
    return True
