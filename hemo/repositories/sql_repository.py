"""High-level data access helpers backed by SQLAlchemy."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import delete, select, text, update

from hemo.db.models import User, VerifyToken
from hemo.db.session import get_session


class SQLRepository:
    """CRUD helpers wrapping the SQLAlchemy session.

    Every method runs in its own short session. Store exceptions
    (``SQLAlchemyError`` and subclasses) propagate to the caller.
    """

    # -------------------------- users --------------------------
    def get_user(self, user_id: str) -> Optional[User]:
        with get_session() as session:
            return session.get(User, user_id)

    def find_user_by_email(self, email: str) -> Optional[User]:
        with get_session() as session:
            stmt = select(User).where(User.email == email)
            return session.execute(stmt).scalar_one_or_none()

    def list_users(self) -> list[User]:
        with get_session() as session:
            stmt = select(User).order_by(User.created_at, User.id)
            return list(session.execute(stmt).scalars().all())

    def create_user(self, name: str, email: str, password_hash: str) -> User:
        """Insert an unverified user; raises IntegrityError on a duplicate email."""
        now = datetime.now(timezone.utc)
        entity = User(
            name=name,
            email=email,
            password_hash=password_hash,
            verified=False,
            created_at=now,
            updated_at=now,
        )
        with get_session() as session:
            session.add(entity)
            session.commit()
            session.refresh(entity)
            return entity

    def update_user(self, user_id: str, **fields) -> Optional[User]:
        """Atomic find-and-update by id. Returns the updated user or None."""
        values = dict(fields)
        values["updated_at"] = datetime.now(timezone.utc)
        with get_session() as session:
            result = session.execute(update(User).where(User.id == user_id).values(**values))
            if not result.rowcount:
                session.rollback()
                return None
            session.commit()
            return session.get(User, user_id)

    def delete_user(self, user_id: str) -> Optional[User]:
        """Find-and-delete by id, together with the user's pending tokens."""
        with get_session() as session:
            user = session.get(User, user_id)
            if not user:
                return None
            self._delete_tokens_for_user(session, user_id)
            session.delete(user)
            session.commit()
            return user

    def list_unverified_users(self) -> list[User]:
        with get_session() as session:
            stmt = select(User).where(User.verified.is_(False)).order_by(User.created_at)
            return list(session.execute(stmt).scalars().all())

    # -------------------------- tokens --------------------------
    def create_verify_token(self, user_id: str, token: str) -> VerifyToken:
        entity = VerifyToken(unique_string=token, user_id=user_id, created_at=datetime.now(timezone.utc))
        with get_session() as session:
            session.add(entity)
            session.commit()
            session.refresh(entity)
            return entity

    def get_verify_token(self, token: str) -> Optional[VerifyToken]:
        with get_session() as session:
            return session.get(VerifyToken, token)

    def get_verify_tokens_for_user(self, user_id: str) -> list[VerifyToken]:
        with get_session() as session:
            stmt = select(VerifyToken).where(VerifyToken.user_id == user_id).order_by(VerifyToken.created_at)
            return list(session.execute(stmt).scalars().all())

    def delete_verify_tokens_for_user(self, user_id: str) -> int:
        with get_session() as session:
            count = self._delete_tokens_for_user(session, user_id)
            session.commit()
            return count

    @staticmethod
    def _delete_tokens_for_user(session, user_id: str) -> int:
        result = session.execute(delete(VerifyToken).where(VerifyToken.user_id == user_id))
        return result.rowcount or 0

    def redeem_verify_token(self, token: str) -> Optional[tuple[str, bool]]:
        """Consume a token and verify its user in one transaction.

        The token row is deleted first, so of two concurrent redemptions only
        one sees a deleted row. Returns ``(user_id, newly_verified)``, or None
        when the token does not exist (anymore).
        """
        with get_session() as session:
            user_id = session.execute(
                select(VerifyToken.user_id).where(VerifyToken.unique_string == token)
            ).scalar_one_or_none()
            if user_id is None:
                return None
            deleted = session.execute(delete(VerifyToken).where(VerifyToken.unique_string == token))
            if not deleted.rowcount:
                session.rollback()
                return None
            updated = session.execute(
                update(User)
                .where(User.id == user_id, User.verified.is_(False))
                .values(verified=True, updated_at=datetime.now(timezone.utc))
            )
            session.commit()
            return user_id, bool(updated.rowcount)

    # -------------------------- health --------------------------
    def ping(self) -> bool:
        with get_session() as session:
            session.execute(text("SELECT 1"))
        return True
