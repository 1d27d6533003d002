import asyncio

import pytest
from pymongo.errors import DuplicateKeyError

from microcredx.core.exceptions import ConflictError, InvalidArgumentError, NotFoundError
from microcredx.database.models import (
    ApplicationFeeStatusEnum,
    ApplicationStatusEnum,
    LoanApplication,
)

FORM = {
    "loan_title": "Personal Loan",
    "interest_rate": 5,
    "first_name": "Bina",
    "last_name": "Rahman",
    "contact_number": "01700000000",
    "national_id": "1990123456",
    "income_source": "Salary",
    "monthly_income": 30000,
    "loan_amount": 8000,
    "reason": "Medical bills",
    "address": "Dhaka",
    "extra_notes": "",
}


@pytest.mark.asyncio
async def test_first_submission_creates_pending_unpaid_application(mongo_db, ledger_service):
    application = await ledger_service.submit("a@x.com", FORM)

    assert isinstance(application, LoanApplication)
    stored = await ledger_service.get_by_id(str(application.id))
    assert stored.status == ApplicationStatusEnum.pending
    assert stored.application_fee_status == ApplicationFeeStatusEnum.unpaid
    assert stored.loan_title == "Personal Loan"
    assert stored.created_at is not None


@pytest.mark.asyncio
async def test_resubmission_overwrites_the_pending_application(mongo_db, ledger_service):
    await ledger_service.submit("b@x.com", FORM)
    result = await ledger_service.submit("b@x.com", {**FORM, "loan_amount": 12000, "reason": "School fees"})

    assert result.matched_count == 1
    applications = await ledger_service.list_by_email("b@x.com")
    assert len(applications) == 1
    assert applications[0].loan_amount == 12000
    assert applications[0].reason == "School fees"
    assert applications[0].status == ApplicationStatusEnum.pending
    assert applications[0].updated_at is not None


@pytest.mark.asyncio
async def test_concurrent_first_submissions_leave_one_pending_application(mongo_db, ledger_service):
    await asyncio.gather(
        ledger_service.submit("c@x.com", FORM),
        ledger_service.submit("c@x.com", {**FORM, "loan_amount": 9000}),
    )

    pending = await LoanApplication.find({"email": "c@x.com", "status": "Pending"}).to_list()
    assert len(pending) == 1


@pytest.mark.asyncio
async def test_lost_insert_race_is_retried_as_update(mongo_db, ledger_service, monkeypatch):
    original_insert = LoanApplication.insert

    async def insert_after_competitor(self, *args, **kwargs):
        # A competing request lands its insert first
        await original_insert(LoanApplication(email=self.email, loan_title="Competitor"))
        raise DuplicateKeyError("E11000 duplicate key error", 11000)

    monkeypatch.setattr(LoanApplication, "insert", insert_after_competitor)

    result = await ledger_service.submit("d@x.com", FORM)

    assert result.matched_count == 1
    applications = await LoanApplication.find({"email": "d@x.com"}).to_list()
    assert len(applications) == 1
    assert applications[0].loan_title == "Personal Loan"


@pytest.mark.asyncio
async def test_conflict_surfaces_when_retry_finds_nothing(mongo_db, ledger_service, monkeypatch):
    async def always_duplicate(self, *args, **kwargs):
        raise DuplicateKeyError("E11000 duplicate key error", 11000)

    monkeypatch.setattr(LoanApplication, "insert", always_duplicate)

    with pytest.raises(ConflictError):
        await ledger_service.submit("e@x.com", FORM)


@pytest.mark.asyncio
async def test_finalised_application_does_not_block_a_new_one(mongo_db, ledger_service):
    first = await ledger_service.submit("f@x.com", FORM)
    await ledger_service.set_status(str(first.id), "Approved")

    second = await ledger_service.submit("f@x.com", {**FORM, "loan_title": "Business Loan"})

    assert isinstance(second, LoanApplication)
    assert second.id != first.id
    history = await ledger_service.list_by_email("f@x.com")
    assert {a.status for a in history} == {ApplicationStatusEnum.approved, ApplicationStatusEnum.pending}


@pytest.mark.asyncio
async def test_set_status_moves_application_between_lists(mongo_db, ledger_service):
    application = await ledger_service.submit("g@x.com", FORM)

    result = await ledger_service.set_status(str(application.id), "Approved")

    assert result.matched_count == 1
    approved_ids = [a.id for a in await ledger_service.list_by_status("Approved")]
    pending_ids = [a.id for a in await ledger_service.list_by_status("Pending")]
    assert application.id in approved_ids
    assert application.id not in pending_ids
    stored = await ledger_service.get_by_id(str(application.id))
    assert stored.updated_at is not None


@pytest.mark.asyncio
async def test_set_status_rejects_unknown_status(mongo_db, ledger_service):
    application = await ledger_service.submit("h@x.com", FORM)

    with pytest.raises(InvalidArgumentError):
        await ledger_service.set_status(str(application.id), "bogus")

    stored = await ledger_service.get_by_id(str(application.id))
    assert stored.status == ApplicationStatusEnum.pending


@pytest.mark.asyncio
async def test_delete_is_idempotent(mongo_db, ledger_service):
    application = await ledger_service.submit("i@x.com", FORM)

    assert (await ledger_service.delete(str(application.id))).deleted_count == 1
    assert (await ledger_service.delete(str(application.id))).deleted_count == 0
    with pytest.raises(NotFoundError):
        await ledger_service.get_by_id(str(application.id))


@pytest.mark.asyncio
async def test_reopening_rejected_application_conflicts_with_pending_one(mongo_db, ledger_service):
    rejected = await ledger_service.submit("j@x.com", FORM)
    await ledger_service.set_status(str(rejected.id), "Rejected")
    pending = await ledger_service.submit("j@x.com", {**FORM, "loan_title": "Business Loan"})
    assert isinstance(pending, LoanApplication)

    with pytest.raises(ConflictError):
        await ledger_service.set_status(str(rejected.id), "Pending")

    stored = await ledger_service.get_by_id(str(rejected.id))
    assert stored.status == ApplicationStatusEnum.rejected
