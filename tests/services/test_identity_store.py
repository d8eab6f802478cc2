"""Identity Store — users and temples.

Tests cover:
    - create_user / create_temple assign increasing ids starting at 1
    - email uniqueness (case-insensitive), NULL emails never collide
    - lookups raise NotFoundError naming the entity
    - update_contact changes only contact fields and re-checks email uniqueness
"""

import pytest

from temple_ledger.core.errors import (
    DuplicateKeyError, InvalidArgumentError, NotFoundError,
)
from temple_ledger.models.user import User
from tests.fakes import count_rows


async def test_create_user_assigns_first_id(store):
    user_id = await store.create_user("Rama", "rama@gmail.com", "9876543210")
    assert user_id == 1
    user = await store.get_user(user_id)
    assert user.name == "Rama"
    assert user.email == "rama@gmail.com"
    assert user.phone == "9876543210"


async def test_ids_are_monotonic(store):
    first = await store.create_user("Rama")
    second = await store.create_user("Sita")
    assert second > first


async def test_duplicate_email_rejected(store):
    await store.create_user("Rama", "rama@gmail.com")
    with pytest.raises(DuplicateKeyError) as exc_info:
        await store.create_user("Another Rama", "RAMA@gmail.com")
    assert exc_info.value.key == "email"
    assert await count_rows(store._db, User) == 1


async def test_users_without_email_do_not_collide(store):
    await store.create_user("Rama")
    await store.create_user("Sita", email="  ")
    assert await count_rows(store._db, User) == 2


async def test_blank_name_rejected_before_write(store):
    with pytest.raises(InvalidArgumentError):
        await store.create_user("   ")
    assert await count_rows(store._db, User) == 0


async def test_get_unknown_user_raises_not_found(store):
    with pytest.raises(NotFoundError) as exc_info:
        await store.get_user(999)
    assert exc_info.value.entity == "User"
    assert exc_info.value.entity_id == 999


async def test_create_and_get_temple(store):
    temple_id = await store.create_temple("Tirupati", "Tirupati")
    temple = await store.get_temple(temple_id)
    assert (temple.name, temple.location) == ("Tirupati", "Tirupati")


async def test_get_unknown_temple_raises_not_found(store):
    with pytest.raises(NotFoundError) as exc_info:
        await store.get_temple(5)
    assert exc_info.value.entity == "Temple"


async def test_list_temples_in_id_order(store):
    await store.create_temple("Tirupati", "Tirupati")
    await store.create_temple("Somnath", "Gujarat")
    names = [t.name for t in await store.list_temples()]
    assert names == ["Tirupati", "Somnath"]


async def test_update_contact_changes_email_and_phone(store, rama):
    user = await store.update_contact(rama, email="rama@temple.org", phone="1112223333")
    assert user.email == "rama@temple.org"
    assert user.phone == "1112223333"
    assert user.name == "Rama"


async def test_update_contact_omitted_field_is_kept(store, rama):
    user = await store.update_contact(rama, phone=None)
    assert user.phone is None
    assert user.email == "rama@gmail.com"


async def test_update_contact_rejects_taken_email(store, rama):
    sita = await store.create_user("Sita", "sita@gmail.com")
    with pytest.raises(DuplicateKeyError):
        await store.update_contact(sita, email="rama@gmail.com")
    assert (await store.get_user(sita)).email == "sita@gmail.com"


async def test_update_contact_same_email_is_noop(store, rama):
    user = await store.update_contact(rama, email="Rama@Gmail.com")
    assert user.email == "rama@gmail.com"


async def test_update_contact_unknown_user(store):
    with pytest.raises(NotFoundError):
        await store.update_contact(42, phone="1")
