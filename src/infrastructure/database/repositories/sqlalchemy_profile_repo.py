"""SQLAlchemy implementation of Profile repository."""

from datetime import datetime
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from domain.entities.profile import Profile
from infrastructure.database.models import ProfileModel


class SQLAlchemyProfileRepository:
    """SQLAlchemy implementation of IProfileRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, id: UUID) -> Profile | None:
        model = await self._session.get(ProfileModel, id)
        return self._to_entity(model) if model else None

    async def upsert(self, profile: Profile) -> Profile:
        model = await self._session.get(ProfileModel, profile.id)
        if model:
            model.email = profile.email
            if profile.display_name:
                model.display_name = profile.display_name
            model.updated_at = datetime.utcnow()
        else:
            model = ProfileModel(
                id=profile.id,
                email=profile.email,
                display_name=profile.display_name,
                avatar_url=profile.avatar_url,
                preferred_language=profile.preferred_language,
                created_at=profile.created_at,
                updated_at=profile.updated_at,
            )
            self._session.add(model)

        await self._session.flush()
        await self._session.refresh(model)
        return self._to_entity(model)

    async def update(self, profile: Profile) -> Profile:
        model = await self._session.get(ProfileModel, profile.id)
        if not model:
            raise ValueError(f"Profile {profile.id} not found")

        model.display_name = profile.display_name
        model.avatar_url = profile.avatar_url
        model.preferred_language = profile.preferred_language
        model.updated_at = datetime.utcnow()

        await self._session.flush()
        await self._session.refresh(model)
        return self._to_entity(model)

    def _to_entity(self, model: ProfileModel) -> Profile:
        """Convert ORM model to domain entity."""
        return Profile(
            id=model.id,
            email=model.email,
            display_name=model.display_name,
            avatar_url=model.avatar_url,
            preferred_language=model.preferred_language,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )
