"""GraphQL Context — per-request database session and remote user.

Invariants:
    - One AsyncSession per GraphQL request, from the same get_db dependency as REST routes
    - remote_user is None for anonymous or invalid-token requests (never an error)
"""

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession
import strawberry

from fundhost.core.permissions import RemoteUser
from fundhost.infrastructure.auth import ACCESS_TOKEN_COOKIE
from fundhost.infrastructure.database import get_db
from fundhost.services.accounts import resolve_remote_user


async def get_context(request: Request, db: AsyncSession = Depends(get_db)) -> dict:
    """Strawberry context_getter: resolved once per request."""
    remote_user = await resolve_remote_user(
        db,
        request.headers.get("authorization"),
        request.cookies.get(ACCESS_TOKEN_COOKIE),
    )
    return {"db": db, "remote_user": remote_user}


def get_db_session(info: strawberry.Info) -> AsyncSession:
    return info.context["db"]


def get_remote_user(info: strawberry.Info) -> RemoteUser | None:
    return info.context["remote_user"]
