import asyncio
from datetime import datetime, timezone

import pytest

from microcredx.core.exceptions import InvalidArgumentError, NotFoundError
from microcredx.services import LoanCatalogService


def _naive(value: datetime) -> datetime:
    return value.replace(tzinfo=None) if value.tzinfo else value


@pytest.mark.asyncio
async def test_create_then_get_returns_same_fields(mongo_db, catalog_service):
    created = await catalog_service.create({
        "title": "Personal Loan",
        "short_desc": "Quick cash",
        "interest_rate": 5,
        "max_limit": 10000,
        "show_on_home": True,
        "created_by": "manager@x.com",
    })

    fetched = await catalog_service.get_by_id(str(created.id))

    assert fetched.id == created.id
    assert fetched.title == "Personal Loan"
    assert fetched.short_desc == "Quick cash"
    assert fetched.interest_rate == 5
    assert fetched.max_limit == 10000
    assert fetched.show_on_home is True
    assert fetched.created_at == fetched.updated_at


@pytest.mark.asyncio
async def test_create_keeps_caller_supplied_timestamps(mongo_db, catalog_service):
    stamp = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
    created = await catalog_service.create({"title": "Legacy", "created_at": stamp, "updated_at": stamp})

    fetched = await catalog_service.get_by_id(str(created.id))

    assert _naive(fetched.created_at) == datetime(2024, 1, 1, 12, 0)
    assert _naive(fetched.updated_at) == datetime(2024, 1, 1, 12, 0)


@pytest.mark.asyncio
async def test_update_changes_only_given_fields(mongo_db, catalog_service):
    created = await catalog_service.create({
        "title": "Home Loan",
        "category": "housing",
        "interest_rate": 7.5,
        "max_limit": 50000,
    })
    before = await catalog_service.get_by_id(str(created.id))
    await asyncio.sleep(0.01)

    modified = await catalog_service.update(str(created.id), {"interestRate": 6.0})

    after = await catalog_service.get_by_id(str(created.id))
    assert modified == 1
    assert after.interest_rate == 6.0
    assert after.title == "Home Loan"
    assert after.category == "housing"
    assert after.max_limit == 50000
    assert after.created_at == before.created_at
    assert after.updated_at > before.updated_at


@pytest.mark.asyncio
async def test_update_unknown_id_raises_not_found(mongo_db, catalog_service):
    with pytest.raises(NotFoundError):
        await catalog_service.update("65a1b2c3d4e5f60718293a4b", {"title": "Nothing"})


@pytest.mark.asyncio
async def test_update_malformed_id_is_invalid_argument(mongo_db, catalog_service):
    with pytest.raises(InvalidArgumentError):
        await catalog_service.update("not-an-id", {"title": "Nothing"})


@pytest.mark.asyncio
async def test_delete_then_get_is_not_found_and_repeat_delete_is_zero(mongo_db, catalog_service):
    created = await catalog_service.create({"title": "Short Term"})

    first = await catalog_service.delete(str(created.id))
    assert first.deleted_count == 1

    with pytest.raises(NotFoundError):
        await catalog_service.get_by_id(str(created.id))

    second = await catalog_service.delete(str(created.id))
    assert second.deleted_count == 0


@pytest.mark.asyncio
async def test_get_by_malformed_id_is_not_found(mongo_db, catalog_service):
    with pytest.raises(NotFoundError):
        await catalog_service.get_by_id("1234")


@pytest.mark.asyncio
async def test_list_home_respects_configured_limit(mongo_db):
    capped = LoanCatalogService(home_limit=2)
    for i in range(3):
        await capped.create({"title": f"Featured {i}", "show_on_home": True})
    await capped.create({"title": "Hidden", "show_on_home": False})

    assert len(await capped.list_home()) == 2
    unbounded = LoanCatalogService()
    titles = {p.title for p in await unbounded.list_home()}
    assert titles == {"Featured 0", "Featured 1", "Featured 2"}


@pytest.mark.asyncio
async def test_list_by_creator_filters_on_email(mongo_db, catalog_service):
    await catalog_service.create({"title": "Mine", "created_by": "a@x.com"})
    await catalog_service.create({"title": "Theirs", "created_by": "b@x.com"})

    products = await catalog_service.list_by_creator("a@x.com")

    assert [p.title for p in products] == ["Mine"]
    assert len(await catalog_service.list_all()) == 2
