"""Request-scoped dependencies resolved from the application state."""

from __future__ import annotations

from collections.abc import AsyncIterator

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession

from outfitter.api.container import ServiceContainer


def get_container(request: Request) -> ServiceContainer:
    return request.app.state.container


async def get_session(request: Request) -> AsyncIterator[AsyncSession]:
    """Yield a database session bound to the application's engine."""

    container: ServiceContainer = request.app.state.container
    async for session in container.database.session():
        yield session
