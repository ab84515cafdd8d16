"""Profile service layer."""

from collections.abc import Callable
from dataclasses import replace
from datetime import datetime
from typing import Any
from uuid import UUID

from core.exceptions import ProfileNotFoundError, ValidationError
from domain.entities.profile import SUPPORTED_LANGUAGES, Profile
from domain.repositories.unit_of_work import IUnitOfWork

_EDITABLE_FIELDS = frozenset({"display_name", "avatar_url", "preferred_language"})


class ProfileService:
    """Keeps the local profile table in step with the auth provider."""

    def __init__(self, uow_factory: Callable[[], IUnitOfWork]) -> None:
        self._uow_factory = uow_factory

    async def ensure_profile(self, user_id: UUID, email: str, display_name: str | None = None) -> Profile:
        async with self._uow_factory() as uow:
            profile = await uow.profiles.upsert(
                Profile(id=user_id, email=email, display_name=display_name)
            )
            await uow.commit()
            return profile  # type: ignore[no-any-return]

    async def get_profile(self, user_id: UUID) -> Profile:
        async with self._uow_factory() as uow:
            profile = await uow.profiles.get(user_id)
            if not profile:
                raise ProfileNotFoundError(str(user_id))
            return profile  # type: ignore[no-any-return]

    async def update_profile(self, user_id: UUID, **changes: Any) -> Profile:
        """Edit the caller's own profile. Email follows the auth provider and is not editable."""
        unknown = set(changes) - _EDITABLE_FIELDS
        if unknown:
            raise ValidationError(f"Fields not editable: {', '.join(sorted(unknown))}")
        language = changes.get("preferred_language")
        if language is not None and language not in SUPPORTED_LANGUAGES:
            raise ValidationError(
                f"Unsupported language: {language}",
                details={"supported": list(SUPPORTED_LANGUAGES)},
            )

        async with self._uow_factory() as uow:
            profile = await uow.profiles.get(user_id)
            if not profile:
                raise ProfileNotFoundError(str(user_id))
            if language is None:
                changes.pop("preferred_language", None)
            updated = await uow.profiles.update(
                replace(profile, **changes, updated_at=datetime.utcnow())
            )
            await uow.commit()
            return updated  # type: ignore[no-any-return]
