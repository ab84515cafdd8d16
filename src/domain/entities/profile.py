"""Profile domain entity."""

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID, uuid4

SUPPORTED_LANGUAGES = ("en", "ko")


@dataclass
class Profile:
    """A signed-in user's profile, mirrored from the auth provider on first request."""

    id: UUID = field(default_factory=uuid4)
    email: str = ""
    display_name: str | None = None
    avatar_url: str | None = None
    preferred_language: str = "en"
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)

    def __post_init__(self) -> None:
        if self.preferred_language not in SUPPORTED_LANGUAGES:
            self.preferred_language = "en"
