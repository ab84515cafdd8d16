"""Authentication provider protocol."""

from dataclasses import dataclass
from typing import Optional, Protocol
from uuid import UUID


@dataclass
class TokenUser:
    """The signed-in user as described by a bearer token."""

    id: UUID
    email: str
    display_name: Optional[str] = None
    role: Optional[str] = None
    preferred_language: str = "en"


class IAuthProvider(Protocol):
    """Validates and issues bearer tokens."""

    async def validate_token(self, token: str) -> Optional[TokenUser]:
        """Return the token's user, or None when the token is invalid or expired."""
        ...

    def create_token(self, user: TokenUser) -> str:
        ...
