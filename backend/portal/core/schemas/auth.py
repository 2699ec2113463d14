from __future__ import annotations

from uuid import UUID

from portal.core.models.base import AppBaseModel

ANONYMOUS_USER_ID = UUID(int=0)


class AuthUser(AppBaseModel):
    """Authenticated user extracted from a Supabase JWT; owns one tag registry session."""

    id: UUID
    email: str = ""
    role: str | None = None

    @property
    def session_id(self) -> str:
        return str(self.id)

    @classmethod
    def anonymous(cls) -> AuthUser:
        return cls(id=ANONYMOUS_USER_ID, role="anon")
