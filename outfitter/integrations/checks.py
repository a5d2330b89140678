"""Connectivity checks for the database, media storage and remote AI services."""

from __future__ import annotations

import asyncio
import time
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Awaitable, Callable

from sqlalchemy import text

from outfitter.ai.suggestion_client import SuggestionClient
from outfitter.config.settings import get_settings
from outfitter.db.session import Database
from outfitter.imgproc.background import BackgroundRemovalClient
from outfitter.storage.backend import LocalStorage


@dataclass(slots=True)
class IntegrationCheckResult:
    """Outcome of one connectivity check."""

    name: str
    success: bool
    message: str
    elapsed_ms: float = 0.0


async def _run_check(
    name: str,
    probe: Callable[[], Awaitable[bool]],
    success_message: str,
) -> IntegrationCheckResult:
    started = time.perf_counter()
    try:
        healthy = await probe()
    except Exception as exc:  # noqa: BLE001
        healthy, message = False, str(exc) or exc.__class__.__name__
    else:
        message = success_message if healthy else "Service responded with non-success status."
    elapsed_ms = (time.perf_counter() - started) * 1000
    return IntegrationCheckResult(name=name, success=healthy, message=message, elapsed_ms=elapsed_ms)


async def check_suggestion_model() -> IntegrationCheckResult:
    """List models on the suggestion provider."""

    async def _probe() -> bool:
        client = SuggestionClient()
        try:
            return await client.ping()
        finally:
            await client.close()

    return await _run_check("Suggestion model", _probe, "Suggestion model API is reachable.")


async def check_background_removal() -> IntegrationCheckResult:
    """Reach the background-removal host."""

    async def _probe() -> bool:
        client = BackgroundRemovalClient()
        try:
            return await client.ping()
        finally:
            await client.close()

    return await _run_check("Background removal", _probe, "Background removal API is reachable.")


async def check_database() -> IntegrationCheckResult:
    """Open a connection and run a trivial query."""

    async def _probe() -> bool:
        database = Database(get_settings().database_url)
        try:
            async with database.engine.connect() as conn:
                return (await conn.scalar(text("SELECT 1"))) == 1
        finally:
            await database.dispose()

    return await _run_check("Database", _probe, "Database accepts connections.")


async def check_media_storage() -> IntegrationCheckResult:
    """Write, read back and delete a probe object in media storage."""

    async def _probe() -> bool:
        settings = get_settings()
        storage = LocalStorage(Path(settings.media_root), signing_key=settings.media_signing_key)
        key = f"healthchecks/{uuid.uuid4().hex}.txt"
        await storage.save(key, b"ok")
        try:
            data, _ = await storage.read(key)
        finally:
            await storage.delete(key)
        return data == b"ok"

    return await _run_check("Media storage", _probe, "Media storage is writable.")


async def run_all_checks() -> list[IntegrationCheckResult]:
    """Execute all checks concurrently, in a stable order."""

    return list(
        await asyncio.gather(
            check_database(),
            check_media_storage(),
            check_suggestion_model(),
            check_background_removal(),
        ),
    )
