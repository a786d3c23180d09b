from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request
from pymongo import AsyncMongoClient
from pymongo.asynchronous.collection import AsyncCollection
from pymongo.errors import PyMongoError

from booking_analytics.core.config import Settings, settings

logger = logging.getLogger(__name__)


class EventStoreUnavailableError(RuntimeError):
    """Raised when a query is attempted before the event store is connected."""


class EventStore:
    """Long-lived handle on the booking event collection."""

    def __init__(self, config: Settings) -> None:
        self.config = config
        self.client: AsyncMongoClient | None = None

    @property
    def is_open(self) -> bool:
        return self.client is not None

    def _client_options(self) -> dict[str, Any]:
        options: dict[str, Any] = {
            "serverSelectionTimeoutMS": self.config.mongodb_server_selection_timeout_ms,
            "tz_aware": True,
            "appname": self.config.app_name,
        }
        if self.config.mongodb_socket_timeout_ms is not None:
            options["socketTimeoutMS"] = self.config.mongodb_socket_timeout_ms
        return options

    def open(self) -> None:
        if self.client is not None:
            return
        uri = (self.config.mongodb_uri or "").strip()
        if not uri:
            raise EventStoreUnavailableError("MONGODB_URI is not configured")
        self.client = AsyncMongoClient(uri, **self._client_options())

    async def ping(self) -> None:
        if self.client is None:
            raise EventStoreUnavailableError("Event store is not connected")
        await self.client.admin.command("ping")

    async def close(self) -> None:
        client, self.client = self.client, None
        if client is not None:
            await client.close()

    @property
    def collection(self) -> AsyncCollection:
        if self.client is None:
            raise EventStoreUnavailableError("Event store is not connected")
        return self.client[self.config.mongodb_database][self.config.mongodb_collection]


async def start(app: FastAPI, config: Settings | None = None) -> EventStore:
    """Open the store and attach it to app.state before traffic is accepted."""
    config = config or settings
    store = EventStore(config)
    app.state.event_store = store
    try:
        store.open()
    except EventStoreUnavailableError as exc:
        logger.error("event_store_not_configured", extra={"error": str(exc)})
        return store

    try:
        await store.ping()
    except PyMongoError as exc:
        # The client reconnects lazily, so a failed ping is not fatal.
        logger.error("event_store_ping_failed", extra={"error": str(exc)})
    else:
        logger.info(
            "event_store_connected",
            extra={"database": config.mongodb_database, "collection": config.mongodb_collection},
        )
    return store


async def stop(app: FastAPI) -> None:
    store: EventStore | None = getattr(app.state, "event_store", None)
    if store is None:
        return
    await store.close()
    delattr(app.state, "event_store")
    logger.info("event_store_closed")


def get_event_store(request: Request) -> EventStore:
    store: EventStore | None = getattr(request.app.state, "event_store", None)
    if store is None or not store.is_open:
        raise EventStoreUnavailableError("Event store is not connected")
    return store


def get_event_collection(request: Request) -> AsyncCollection:
    """FastAPI dependency providing the booking event collection."""
    return get_event_store(request).collection
