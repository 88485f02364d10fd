"""Root conftest — shared test configuration, database and account fixtures.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - Settings come from environment defaults set here, never from a developer .env
    - make_account / make_user build rows directly; services are never used to seed

Design Decisions:
    - SQLite in-memory: fast, no external dependency; PostgreSQL-only features
      (pool sizing, asyncpg) are not exercised by unit tests
    - Fixture factories over a static seed: each test states the accounts it relies on
"""

import os
from types import SimpleNamespace

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)

from fundhost.core.domain_types import CollectiveType, MemberRole
from fundhost.core.permissions import RemoteUser
from fundhost.db.base import Base
import fundhost.models  # noqa: F401
from fundhost.models.collective import Collective
from fundhost.models.member import Member
from fundhost.models.user import User
from fundhost.services.accounts import load_remote_user

# Settings are read lazily (get_settings), so these apply to every test
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-for-fundhost-tests-only")
os.environ.setdefault("PLATFORM_SLUG", "platform")
os.environ.setdefault("LOG_FORMAT", "text")


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


# ─── Factories ───────────────────────────────────────────────────

@pytest.fixture
def make_account(test_db):
    async def _make(slug: str, account_type: CollectiveType = CollectiveType.COLLECTIVE, **kwargs):
        account = Collective(
            slug=slug,
            name=kwargs.pop("name", slug.replace("-", " ").title()),
            type=account_type.value,
            **kwargs,
        )
        test_db.add(account)
        await test_db.flush()
        return account
    return _make


@pytest.fixture
def make_member(test_db):
    async def _make(account, member_account, role: MemberRole, **kwargs):
        member = Member(
            collective_id=account.id,
            member_collective_id=member_account.id,
            role=role.value,
            **kwargs,
        )
        test_db.add(member)
        await test_db.flush()
        return member
    return _make


@pytest.fixture
def make_user(test_db, make_account):
    async def _make(slug: str, **kwargs):
        profile = await make_account(slug, CollectiveType.USER, **kwargs)
        user = User(email=f"{slug}@example.com", collective_id=profile.id)
        test_db.add(user)
        await test_db.flush()
        return user, profile
    return _make


@pytest.fixture
def remote_user_for(test_db):
    async def _load(user: User) -> RemoteUser:
        return await load_remote_user(test_db, user.id)
    return _load


@pytest.fixture
async def ledger(test_db, make_account, make_user, make_member):
    """Platform, a host with one hosted collective, a host admin and a backer."""
    platform = await make_account("platform", CollectiveType.ORGANIZATION)
    host = await make_account("host", CollectiveType.ORGANIZATION, currency="USD")
    host.host_collective_id = host.id
    collective = await make_account(
        "webpack", CollectiveType.COLLECTIVE, host_collective_id=host.id,
    )
    host_admin, host_admin_profile = await make_user("host-admin")
    platform_admin, platform_admin_profile = await make_user("platform-admin")
    backer, backer_profile = await make_user("backer")
    await make_member(host, host_admin_profile, MemberRole.ADMIN)
    await make_member(platform, platform_admin_profile, MemberRole.ADMIN)
    await test_db.commit()
    return SimpleNamespace(
        platform=platform,
        host=host,
        collective=collective,
        host_admin=host_admin,
        platform_admin=platform_admin,
        backer=backer,
        backer_profile=backer_profile,
    )
