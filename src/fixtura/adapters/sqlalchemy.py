"""Adapters for SQLAlchemy mapped classes.

Both adapters construct rows with ``model(**attributes)`` and persist them
through a session supplied by the caller; the session owns transactions.
"""

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session


class SQLAlchemyAdapter:
    """Persist rows through a synchronous ``Session``.

    Args:
        session: Session that receives the saved rows.
        commit: Commit after each save instead of only flushing.
    """

    def __init__(self, session: Session, commit: bool = False) -> None:
        self.session = session
        self.commit = commit

    def build(self, model: type, attributes: dict[str, Any]) -> Any:
        return model(**attributes)

    def save(self, instance: Any, model: type) -> Any:
        self.session.add(instance)
        if self.commit:
            self.session.commit()
        else:
            self.session.flush()
        self.session.refresh(instance)
        return instance

    def get(self, instance: Any, key: str) -> Any:
        return getattr(instance, key)


class AsyncSQLAlchemyAdapter:
    """Persist rows through an ``AsyncSession``.

    Args:
        session: Async session that receives the saved rows.
        commit: Commit after each save instead of only flushing.
    """

    def __init__(self, session: AsyncSession, commit: bool = False) -> None:
        self.session = session
        self.commit = commit

    def build(self, model: type, attributes: dict[str, Any]) -> Any:
        return model(**attributes)

    async def save(self, instance: Any, model: type) -> Any:
        self.session.add(instance)
        if self.commit:
            await self.session.commit()
        else:
            await self.session.flush()
        await self.session.refresh(instance)
        return instance

    def get(self, instance: Any, key: str) -> Any:
        return getattr(instance, key)
