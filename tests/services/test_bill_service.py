from unittest.mock import AsyncMock

import pytest
from pydantic import ValidationError as PydanticValidationError

from society_ledgers.core.config import settings
from society_ledgers.core.exceptions import AccessDenied, Conflict, Forbidden, NotFound, ValidationError
from society_ledgers.models.bill import BillStatus
from society_ledgers.services.bill_service import BillService
from society_ledgers.services.notification_service import NotificationEvent, NotificationService


@pytest.fixture
def notifier():
    mock = AsyncMock()
    mock.notify = AsyncMock()
    return mock


@pytest.fixture
def service(test_db, notifier):
    return BillService(test_db, notifier=notifier)


@pytest.mark.asyncio
async def test_create_bill_starts_pending(service, notifier, societies, principals, bill_payload):
    s1 = str(societies["S1"].id)
    bill = await service.create_bill(principals["treasurer"], bill_payload(s1))

    assert bill.status == BillStatus.PENDING
    assert bill.remarks == []
    assert bill.version == 1
    assert bill.submitted_by == principals["treasurer"].id
    notifier.notify.assert_awaited_once()
    assert notifier.notify.await_args.args[0] == NotificationEvent.BILL_CREATED


@pytest.mark.asyncio
async def test_create_bill_out_of_scope_is_denied(service, test_db, societies, principals, bill_payload):
    s2 = str(societies["S2"].id)
    with pytest.raises(AccessDenied):
        await service.create_bill(principals["treasurer"], bill_payload(s2))
    assert await test_db["bills"].count_documents({}) == 0


@pytest.mark.asyncio
async def test_agent_cannot_create_bill(service, societies, principals, bill_payload):
    with pytest.raises(Forbidden):
        await service.create_bill(principals["agent"], bill_payload(str(societies["S2"].id)))


def test_bill_amount_must_be_positive(bill_payload):
    with pytest.raises(PydanticValidationError):
        bill_payload("s1", amount=0)


@pytest.mark.asyncio
async def test_status_workflow_records_remark_trail(service, societies, principals, bill_payload):
    """Pending -> Clarification Required -> Approved, one remark per move."""
    s1 = str(societies["S1"].id)
    bill = await service.create_bill(principals["treasurer"], bill_payload(s1, amount=500))
    bill_id = str(bill.id)

    await service.update_status(
        principals["secretary"], bill_id, BillStatus.CLARIFICATION_REQUIRED, remark="Need invoice"
    )
    updated = await service.update_status(principals["president"], bill_id, BillStatus.APPROVED)

    assert updated.status == BillStatus.APPROVED
    assert len(updated.remarks) == 2
    first, second = updated.remarks
    assert first.text == "Need invoice"
    assert first.author_role == "Secretary"
    assert first.previous_status == BillStatus.PENDING
    assert first.new_status == BillStatus.CLARIFICATION_REQUIRED
    assert second.previous_status == BillStatus.CLARIFICATION_REQUIRED
    assert second.new_status == BillStatus.APPROVED
    assert updated.version == 3


@pytest.mark.asyncio
async def test_manager_cannot_approve(service, test_db, societies, principals, bill_payload):
    bill = await service.create_bill(principals["treasurer"], bill_payload(str(societies["S1"].id)))

    with pytest.raises(Forbidden) as exc_info:
        await service.update_status(principals["manager"], str(bill.id), BillStatus.APPROVED)
    assert "Managers" in exc_info.value.detail

    stored = await service.repo.get_bill(str(bill.id))
    assert stored.status == BillStatus.PENDING
    assert stored.remarks == []


@pytest.mark.asyncio
async def test_manager_may_reject(service, societies, principals, bill_payload):
    bill = await service.create_bill(principals["treasurer"], bill_payload(str(societies["S1"].id)))
    updated = await service.update_status(principals["manager"], str(bill.id), BillStatus.REJECTED, remark="Too high")
    assert updated.status == BillStatus.REJECTED


@pytest.mark.asyncio
async def test_terminal_bills_can_be_reopened_by_default(service, societies, principals, bill_payload):
    bill = await service.create_bill(principals["treasurer"], bill_payload(str(societies["S1"].id)))
    await service.update_status(principals["president"], str(bill.id), BillStatus.APPROVED)

    reopened = await service.update_status(principals["treasurer"], str(bill.id), BillStatus.UNDER_REVIEW)
    assert reopened.status == BillStatus.UNDER_REVIEW


@pytest.mark.asyncio
async def test_terminal_lock_limits_reopening_to_admin(service, monkeypatch, societies, principals, bill_payload):
    monkeypatch.setattr(settings, "LOCK_TERMINAL_BILLS", True)
    bill = await service.create_bill(principals["treasurer"], bill_payload(str(societies["S1"].id)))
    await service.update_status(principals["president"], str(bill.id), BillStatus.REJECTED)

    with pytest.raises(Forbidden):
        await service.update_status(principals["treasurer"], str(bill.id), BillStatus.PENDING)

    reopened = await service.update_status(principals["admin"], str(bill.id), BillStatus.PENDING)
    assert reopened.status == BillStatus.PENDING


@pytest.mark.asyncio
async def test_stale_expected_version_conflicts(service, societies, principals, bill_payload):
    bill = await service.create_bill(principals["treasurer"], bill_payload(str(societies["S1"].id)))
    bill_id = str(bill.id)

    await service.update_status(principals["secretary"], bill_id, BillStatus.UNDER_REVIEW, expected_version=1)
    with pytest.raises(Conflict):
        await service.update_status(principals["president"], bill_id, BillStatus.APPROVED, expected_version=1)

    stored = await service.repo.get_bill(bill_id)
    assert stored.status == BillStatus.UNDER_REVIEW
    assert len(stored.remarks) == 1


@pytest.mark.asyncio
async def test_agent_reviews_only_assigned_society(service, societies, principals, bill_payload):
    s1_bill = await service.create_bill(principals["treasurer"], bill_payload(str(societies["S1"].id)))
    s2_bill = await service.create_bill(principals["admin"], bill_payload(str(societies["S2"].id)))

    with pytest.raises(AccessDenied):
        await service.update_status(principals["agent"], str(s1_bill.id), BillStatus.UNDER_REVIEW)

    updated = await service.update_status(principals["agent"], str(s2_bill.id), BillStatus.UNDER_REVIEW)
    assert updated.remarks[0].author_role == "Agent"


@pytest.mark.asyncio
async def test_get_bill_missing_or_malformed_id(service, principals):
    with pytest.raises(NotFound):
        await service.get_bill(principals["admin"], "507f1f77bcf86cd799439011")
    with pytest.raises(NotFound):
        await service.get_bill(principals["admin"], "not-an-id")


@pytest.mark.asyncio
async def test_add_remark_keeps_status(service, notifier, societies, principals, bill_payload):
    bill = await service.create_bill(principals["treasurer"], bill_payload(str(societies["S1"].id)))

    updated = await service.add_remark(principals["secretary"], str(bill.id), "Vendor called")
    assert updated.status == BillStatus.PENDING
    assert updated.remarks[-1].text == "Vendor called"
    assert updated.remarks[-1].new_status is None
    assert notifier.notify.await_args.args[0] == NotificationEvent.REMARK_ADDED


@pytest.mark.asyncio
async def test_add_remark_rejects_blank_text(service, societies, principals, bill_payload):
    bill = await service.create_bill(principals["treasurer"], bill_payload(str(societies["S1"].id)))
    with pytest.raises(ValidationError):
        await service.add_remark(principals["secretary"], str(bill.id), "   ")


@pytest.mark.asyncio
async def test_list_bills_is_scoped(service, societies, principals, bill_payload):
    s1, s2, s3 = (str(societies[key].id) for key in ("S1", "S2", "S3"))
    await service.create_bill(principals["treasurer"], bill_payload(s1, vendor_name="Acme Plumbing"))
    await service.create_bill(principals["admin"], bill_payload(s2, vendor_name="Bright Electric"))
    await service.create_bill(principals["s3_treasurer"], bill_payload(s3, vendor_name="City Water"))

    assert {b.society_id for b in await service.list_bills(principals["treasurer"])} == {s1}
    assert {b.society_id for b in await service.list_bills(principals["agent"])} == {s2}
    assert len(await service.list_bills(principals["admin"])) == 3

    # Filter outside scope yields nothing rather than widening
    assert await service.list_bills(principals["agent"], society_id=s1) == []


@pytest.mark.asyncio
async def test_list_bills_filters(service, societies, principals, bill_payload):
    s1 = str(societies["S1"].id)
    first = await service.create_bill(principals["treasurer"], bill_payload(s1, vendor_name="Acme Plumbing"))
    await service.create_bill(principals["treasurer"], bill_payload(s1, vendor_name="Bright Electric"))
    await service.update_status(principals["president"], str(first.id), BillStatus.APPROVED)

    approved = await service.list_bills(principals["admin"], status=BillStatus.APPROVED)
    assert [b.vendor_name for b in approved] == ["Acme Plumbing"]

    matched = await service.list_bills(principals["admin"], q="electric")
    assert [b.vendor_name for b in matched] == ["Bright Electric"]


@pytest.mark.asyncio
async def test_list_society_bills_requires_scope(service, societies, principals, bill_payload):
    s1 = str(societies["S1"].id)
    await service.create_bill(principals["treasurer"], bill_payload(s1))

    assert len(await service.list_society_bills(principals["president"], s1)) == 1
    with pytest.raises(AccessDenied):
        await service.list_society_bills(principals["agent"], s1)


@pytest.mark.asyncio
async def test_notification_failure_does_not_fail_create(test_db, societies, principals, bill_payload):
    email_client = AsyncMock()
    email_client.send = AsyncMock(side_effect=RuntimeError("smtp down"))
    service = BillService(test_db, notifier=NotificationService(test_db, email_client=email_client))
    bill = await service.create_bill(principals["treasurer"], bill_payload(str(societies["S1"].id)))

    assert bill.status == BillStatus.PENDING
    email_client.send.assert_awaited_once()
