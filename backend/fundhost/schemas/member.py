"""Member Schemas — validated parameters for invitations and public messages.

Invariants:
    - Only ADMIN, MEMBER and ACCOUNTANT can be invited
    - description: at most 255 chars, stripped
    - public message: stripped; blank clears it; bounded by settings.public_message_max_length
"""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from fundhost.config import get_settings
from fundhost.core.domain_types import MemberRole, MANAGEABLE_MEMBER_ROLES


class MemberInvitationParams(BaseModel):
    """Role, description and start date of an invitation."""
    role: MemberRole
    description: str | None = Field(None, max_length=255)
    since: datetime | None = None

    @field_validator("role")
    @classmethod
    def check_invitable_role(cls, v: MemberRole) -> MemberRole:
        if v not in MANAGEABLE_MEMBER_ROLES:
            raise ValueError(f"Cannot invite a member with role {v.value}")
        return v

    @field_validator("description")
    @classmethod
    def strip_description(cls, v: str | None) -> str | None:
        if v is None:
            return None
        return v.strip() or None


class PublicMessageUpdate(BaseModel):
    """New public message shown next to a membership."""
    message: str | None = None

    @field_validator("message")
    @classmethod
    def normalize_message(cls, v: str | None) -> str | None:
        if v is None:
            return None
        v = v.strip()
        if not v:
            return None
        limit = get_settings().public_message_max_length
        if len(v) > limit:
            raise ValueError(f"Public message must be at most {limit} characters")
        return v
