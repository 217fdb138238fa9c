"""
Best-effort notifications for bill workflow events.

``notify`` never raises: a failed lookup or email call is logged and the
workflow operation that triggered it still succeeds.
"""
import logging
from enum import Enum
from typing import List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from society_ledgers.models.bill import Bill, Remark
from society_ledgers.repositories.society_repo import SocietyRepository
from society_ledgers.repositories.user_repo import UserRepository
from society_ledgers.services.email_service import EmailClient

logger = logging.getLogger(__name__)


class NotificationEvent(str, Enum):
    BILL_CREATED = "BillCreated"
    REMARK_ADDED = "RemarkAdded"


class NotificationService:
    def __init__(self, db: AsyncIOMotorDatabase, email_client: Optional[EmailClient] = None):
        self.db = db
        self.email_client = email_client or EmailClient()

    async def recipients_for(self, society_id: str) -> List[str]:
        """Emails of the society's officers and its assigned agent(s)."""
        user_repo = UserRepository(self.db)
        users = await user_repo.list_society_recipients(society_id)
        emails = {user.email for user in users}

        society = await SocietyRepository(self.db).get_society(society_id)
        if society and society.assigned_agent_id:
            agent = await user_repo.get_user_by_id(society.assigned_agent_id)
            if agent and agent.is_active:
                emails.add(agent.email)
        return sorted(emails)

    async def notify(self, event: NotificationEvent, bill: Bill, remark: Optional[Remark] = None) -> None:
        try:
            recipients = await self.recipients_for(bill.society_id)
            if not recipients:
                logger.info("No recipients for notification", extra={"event": event.value, "bill_id": str(bill.id)})
                return

            society = await SocietyRepository(self.db).get_society(bill.society_id)
            society_name = society.name if society else bill.society_id
            subject, body = self._render(event, bill, society_name, remark)
            await self.email_client.send(recipients, subject, body)
        except Exception:
            logger.exception(
                "Failed to send notification",
                extra={"event": event.value, "bill_id": str(bill.id)},
            )

    @staticmethod
    def _render(event: NotificationEvent, bill: Bill, society_name: str, remark: Optional[Remark]):
        if event == NotificationEvent.BILL_CREATED:
            subject = f"New Expense Added - {society_name}"
            body = (
                f"A new expense has been added to {society_name}:\n\n"
                f"Vendor: {bill.vendor_name}\n"
                f"Amount: {bill.amount:,.2f}\n"
                f"Nature: {bill.transaction_nature}\n"
                f"Due Date: {bill.due_date:%Y-%m-%d}\n\n"
                "Please review this expense in the Society Ledgers system.\n"
            )
            return subject, body

        subject = f"Bill Update - {bill.vendor_name} ({society_name})"
        lines = [f"A remark was added to the bill from {bill.vendor_name} ({bill.amount:,.2f})."]
        if remark is not None:
            if remark.new_status:
                lines.append(f"Status: {remark.previous_status} -> {remark.new_status}")
            if remark.text:
                lines.append(f"Remark by {remark.author_role}: {remark.text}")
        return subject, "\n".join(lines) + "\n"
