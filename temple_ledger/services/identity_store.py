"""Identity Store — users and temples as reference entities.

Invariants:
    - A non-null email belongs to at most one user (pre-flight check + UNIQUE backstop)
    - Users are never deleted; only email and phone change after creation
    - Lookups raise NotFoundError naming the entity kind and id

Design Decisions:
    - Getters use populate_existing: a lookup always reflects committed state, even
      when this session already holds an older copy of the row
"""

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from temple_ledger.core.domain_types import EntityKind, TempleId, UserId
from temple_ledger.core.errors import DuplicateKeyError, NotFoundError
from temple_ledger.core.validate_inputs import (
    normalize_email, normalize_phone, normalize_text,
)
from temple_ledger.models.temple import Temple
from temple_ledger.models.user import User
from temple_ledger.services.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)

UNSET = object()


class IdentityStore:
    """Create and look up users and temples."""

    def __init__(self, uow: UnitOfWork):
        self._uow = uow
        self._db = uow.db

    # ─── Users ───────────────────────────────────────────────────

    async def create_user(
        self, name: str, email: str | None = None, phone: str | None = None,
    ) -> UserId:
        name = normalize_text(name, "name")
        email = normalize_email(email)
        phone = normalize_phone(phone)

        async with self._uow.transaction():
            if email is not None:
                await self._require_email_free(email)
            user = User(name=name, email=email, phone=phone)
            self._db.add(user)
            await self._flush_user(email)

        logger.info(f"User {user.id} created", extra={"user_id": user.id})
        return UserId(user.id)

    async def get_user(self, user_id: int) -> User:
        user = await self._db.get(User, user_id, populate_existing=True)
        if user is None:
            raise NotFoundError(EntityKind.USER.value, user_id)
        return user

    async def update_contact(
        self, user_id: int, email=UNSET, phone=UNSET,
    ) -> User:
        """Change contact fields. Omitted fields keep their value; None clears."""
        new_email = UNSET if email is UNSET else normalize_email(email)
        new_phone = UNSET if phone is UNSET else normalize_phone(phone)

        async with self._uow.transaction():
            await self._uow.lock(EntityKind.USER, user_id)
            user = await self._db.scalar(
                select(User).where(User.id == user_id)
                .with_for_update()
                .execution_options(populate_existing=True),
            )
            if user is None:
                raise NotFoundError(EntityKind.USER.value, user_id)
            if new_email is not UNSET and new_email != user.email:
                if new_email is not None:
                    await self._require_email_free(new_email)
                user.email = new_email
            if new_phone is not UNSET:
                user.phone = new_phone
            await self._flush_user(user.email)

        logger.info(f"User {user_id} contact updated", extra={"user_id": user_id})
        return user

    async def _require_email_free(self, email: str) -> None:
        taken = await self._db.scalar(select(User.id).where(User.email == email))
        if taken is not None:
            raise DuplicateKeyError(EntityKind.USER.value, "email", email)

    async def _flush_user(self, email: str | None) -> None:
        try:
            await self._db.flush()
        except IntegrityError:
            raise DuplicateKeyError(EntityKind.USER.value, "email", email)

    # ─── Temples ─────────────────────────────────────────────────

    async def create_temple(self, name: str, location: str) -> TempleId:
        name = normalize_text(name, "name")
        location = normalize_text(location, "location")

        async with self._uow.transaction():
            temple = Temple(name=name, location=location)
            self._db.add(temple)
            await self._db.flush()

        logger.info(f"Temple {temple.id} created", extra={"temple_id": temple.id})
        return TempleId(temple.id)

    async def get_temple(self, temple_id: int) -> Temple:
        temple = await self._db.get(Temple, temple_id, populate_existing=True)
        if temple is None:
            raise NotFoundError(EntityKind.TEMPLE.value, temple_id)
        return temple

    async def list_temples(self) -> list[Temple]:
        result = await self._db.execute(select(Temple).order_by(Temple.id))
        return list(result.scalars().all())
