"""
SQLAlchemy-backed user repository.
"""

from __future__ import annotations

from sqlalchemy import or_, select, update

from .db import Database, UserRecord
from .models import User


def _to_user(record: UserRecord) -> User:
    return User(
        id=record.id,
        email=record.email,
        invite_token=record.invite_token,
        example_workspace_id=record.example_workspace_id,
        release_notes_viewed_version=record.release_notes_viewed_version,
    )


class UserDAO:
    """Data Access Object for users."""

    def __init__(self, db: Database) -> None:
        self._db = db

    async def get_user(self, user_id: str) -> User | None:
        async with self._db.session() as session:
            record = await session.get(UserRecord, user_id)
            return _to_user(record) if record else None

    async def save_user(self, user: User) -> None:
        """Insert the user or overwrite the stored row."""
        async with self._db.session() as session:
            await session.merge(
                UserRecord(
                    id=user.id,
                    email=user.email,
                    invite_token=user.invite_token,
                    example_workspace_id=user.example_workspace_id,
                    release_notes_viewed_version=user.release_notes_viewed_version,
                )
            )
            await session.commit()

    async def set_release_notes_version(self, user_id: str, version: str) -> bool:
        """Record ``version`` as viewed. Returns False when it already was."""
        async with self._db.session() as session:
            stmt = (
                update(UserRecord)
                .where(UserRecord.id == user_id)
                .where(
                    or_(
                        UserRecord.release_notes_viewed_version.is_(None),
                        UserRecord.release_notes_viewed_version != version,
                    )
                )
                .values(release_notes_viewed_version=version)
            )
            result = await session.execute(stmt)
            await session.commit()
            return result.rowcount > 0

    async def set_example_workspace_if_absent(
        self, user_id: str, workspace_id: str
    ) -> str | None:
        """Store ``workspace_id`` unless the user already has one.

        Returns the workspace id stored after the call, which is the earlier
        value when another request won the race. ``None`` means the user row
        does not exist.
        """
        async with self._db.session() as session:
            stmt = (
                update(UserRecord)
                .where(UserRecord.id == user_id)
                .where(UserRecord.example_workspace_id.is_(None))
                .values(example_workspace_id=workspace_id)
            )
            await session.execute(stmt)
            await session.commit()

            stored = await session.execute(
                select(UserRecord.example_workspace_id).where(UserRecord.id == user_id)
            )
            return stored.scalar_one_or_none()
