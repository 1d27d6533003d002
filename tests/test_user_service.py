import pytest

from microcredx.core.exceptions import InvalidArgumentError, NotFoundError
from microcredx.database.models import RoleEnum, User


@pytest.mark.asyncio
async def test_register_or_fetch_is_idempotent(mongo_db, user_service):
    first = await user_service.register_or_fetch("a@x.com", name="A")
    second = await user_service.register_or_fetch("a@x.com", name="Someone Else", role="admin")

    assert first.id == second.id
    assert second.name == "A"
    assert second.role == RoleEnum.borrower
    assert await User.find({"email": "a@x.com"}).count() == 1


@pytest.mark.asyncio
async def test_register_keeps_supplied_role(mongo_db, user_service):
    user = await user_service.register_or_fetch("m@x.com", name="M", role="manager")

    assert user.role == RoleEnum.manager
    assert await user_service.get_role("m@x.com") == RoleEnum.manager


@pytest.mark.asyncio
async def test_register_rejects_unknown_role(mongo_db, user_service):
    with pytest.raises(InvalidArgumentError):
        await user_service.register_or_fetch("z@x.com", name="Z", role="superuser")


@pytest.mark.asyncio
async def test_email_lookup_is_case_sensitive(mongo_db, user_service):
    await user_service.register_or_fetch("Case@x.com", name="C")

    with pytest.raises(NotFoundError):
        await user_service.get_role("case@x.com")


@pytest.mark.asyncio
async def test_set_role_updates_and_validates(mongo_db, user_service):
    user = await user_service.register_or_fetch("b@x.com", name="B")

    result = await user_service.set_role(str(user.id), "manager")
    assert result.matched_count == 1
    assert await user_service.get_role("b@x.com") == RoleEnum.manager

    with pytest.raises(InvalidArgumentError):
        await user_service.set_role(str(user.id), "bogus")
    assert await user_service.get_role("b@x.com") == RoleEnum.manager


@pytest.mark.asyncio
async def test_count_pending_counts_only_pending_applications(mongo_db, user_service, ledger_service):
    first = await ledger_service.submit("p1@x.com", {"loan_title": "Personal Loan"})
    await ledger_service.submit("p2@x.com", {"loan_title": "Personal Loan"})
    await ledger_service.set_status(str(first.id), "Approved")

    assert await user_service.count_pending() == 1
