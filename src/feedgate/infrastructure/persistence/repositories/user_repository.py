"""Data access for the ``users`` table."""

from sqlalchemy import exists, select
from sqlalchemy.ext.asyncio import AsyncSession

from feedgate.infrastructure.persistence.models import UserModel


class UserRepository:
    """Reads and inserts users. Commit and rollback belong to the caller."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create(self, user: UserModel) -> UserModel:
        """Stage a new user and flush it.

        Flushing makes a duplicate email fail here, as ``IntegrityError``,
        rather than at commit.
        """
        self.session.add(user)
        await self.session.flush()
        return user

    async def get_by_id(self, user_id: str) -> UserModel | None:
        return await self.session.get(UserModel, user_id)

    async def get_by_email(self, email: str) -> UserModel | None:
        """Look up a user by their stored (normalized) email."""
        stmt = select(UserModel).where(UserModel.email == email)
        return (await self.session.scalars(stmt)).one_or_none()

    async def email_exists(self, email: str) -> bool:
        stmt = select(exists().where(UserModel.email == email))
        return bool(await self.session.scalar(stmt))
