"""Musical role entities (the parts a member can be assigned to play)."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from uuid import UUID, uuid4


class Proficiency(StrEnum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"
    EXPERT = "expert"


@dataclass
class Role:
    """A team-scoped musical part, e.g. "Keys" or "Vocals"."""

    team_id: UUID
    name: str
    id: UUID = field(default_factory=uuid4)
    name_ko: str | None = None
    description: str | None = None
    color: str | None = None
    icon: str | None = None
    min_required: int = 0
    max_allowed: int | None = None
    display_order: int = 0
    is_active: bool = True
    created_at: datetime = field(default_factory=datetime.utcnow)

    def localized_name(self, language: str = "en") -> str:
        if language == "ko" and self.name_ko:
            return self.name_ko
        return self.name


@dataclass
class MemberRole:
    """Link between a membership and a role the member can cover."""

    team_member_id: UUID
    role_id: UUID
    id: UUID = field(default_factory=uuid4)
    proficiency: Proficiency = Proficiency.INTERMEDIATE
    is_primary: bool = False
    notes: str | None = None
    created_at: datetime = field(default_factory=datetime.utcnow)
