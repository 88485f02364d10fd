"""Profile Page — server-rendered profile of a user or organization account.

Invariants:
    - GET /{slug} renders USER and ORGANIZATION accounts; anything else is 404
    - The viewer is read from the Authorization header, then the accessToken cookie
    - Anonymous viewers get the page too, without edit links

Design Decisions:
    - Registered after every other router: /{slug} would otherwise shadow them
"""

import logging
from pathlib import Path

from fastapi import APIRouter, Cookie, Depends, Header, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates
from sqlalchemy.ext.asyncio import AsyncSession

from fundhost.core import profile_strings
from fundhost.core.profile_view import build_profile_view
from fundhost.infrastructure.auth import ACCESS_TOKEN_COOKIE
from fundhost.infrastructure.database import get_db
from fundhost.services import accounts, profile

logger = logging.getLogger(__name__)
router = APIRouter(tags=["profile"])

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parents[2] / "templates"))


def _format_amount(cents: int | None, currency: str = "USD") -> str:
    if cents is None:
        return ""
    return f"{cents / 100:,.2f} {currency}"


templates.env.filters["amount"] = _format_amount


@router.get("/{slug}", response_class=HTMLResponse)
async def profile_page(
    request: Request,
    slug: str,
    authorization: str | None = Header(default=None),
    access_token: str | None = Cookie(default=None, alias=ACCESS_TOKEN_COOKIE),
    db: AsyncSession = Depends(get_db),
):
    """Render the profile page of the account with this slug."""
    account = await profile.get_profile_account(db, slug)
    remote_user = await accounts.resolve_remote_user(db, authorization, access_token)
    data = await profile.load_profile_data(db, account)
    view = build_profile_view(
        data,
        logged_in=remote_user is not None,
        can_edit=remote_user is not None and remote_user.can_edit_collective(account),
        query=dict(request.query_params),
    )
    logger.info(
        f"Profile page rendered for {slug}",
        extra={"collective_id": account.id, "user_id": remote_user.id if remote_user else None},
    )
    return templates.TemplateResponse(
        request=request,
        name="user_collective.html",
        context={"view": view, "strings": profile_strings},
    )
