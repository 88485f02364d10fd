"""Account Schemas — references to accounts received from API callers.

Invariants:
    - AccountReference needs legacy_id or slug (legacy_id wins when both are given)
"""

from pydantic import BaseModel, Field, model_validator


class AccountReference(BaseModel):
    """Reference to an account by numeric id or slug."""
    legacy_id: int | None = Field(None, ge=1)
    slug: str | None = Field(None, min_length=1, max_length=255)

    @model_validator(mode="after")
    def require_identifier(self) -> "AccountReference":
        if self.legacy_id is None and not self.slug:
            raise ValueError("Account reference needs a legacyId or a slug")
        return self

    def describe(self) -> str:
        return str(self.legacy_id) if self.legacy_id is not None else str(self.slug)
