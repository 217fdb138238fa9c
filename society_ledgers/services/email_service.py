import logging
from typing import List, Optional

import httpx

from society_ledgers.core.config import settings

logger = logging.getLogger(__name__)


class EmailClient:
    """Thin client for the outbound email HTTP service."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        sender: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url if base_url is not None else settings.EMAIL_SERVICE_URL).rstrip("/")
        self.api_key = api_key if api_key is not None else settings.EMAIL_SERVICE_API_KEY
        self.sender = sender if sender is not None else settings.EMAIL_FROM
        self.timeout = timeout if timeout is not None else settings.EMAIL_TIMEOUT_SECONDS
        self.transport = transport

    @property
    def configured(self) -> bool:
        return bool(self.base_url and self.api_key and self.sender)

    async def send(self, to: List[str], subject: str, body: str) -> bool:
        """
        POST one message to ``{base_url}/send``.

        Returns False when the service is unconfigured; raises
        ``httpx.HTTPError`` on transport or HTTP failures.
        """
        if not self.configured:
            logger.warning("Email service not configured, skipping notification")
            return False

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            response = await client.post(
                f"{self.base_url}/send",
                headers={"Authorization": f"Bearer {self.api_key}"},
                json={
                    "from": self.sender,
                    "to": to,
                    "subject": subject,
                    "text": body,
                },
            )
            response.raise_for_status()

        logger.info("Email sent", extra={"recipients": len(to), "subject": subject})
        return True
