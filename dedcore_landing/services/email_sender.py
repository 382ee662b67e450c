"""
Email sending service using Brevo (Sendinblue) API.
Handles configuration checks and single-recipient delivery.
"""
import httpx
import logging
from typing import Dict, Any, Optional
from datetime import datetime

from dedcore_landing.core.config import Settings
from dedcore_landing.core.exceptions import EmailDeliveryError, EmailNotConfiguredError
from dedcore_landing.models.newsletter import EmailConfigStatus

logger = logging.getLogger(__name__)

NOT_CONFIGURED = "Not configured"

class BrevoEmailSender:
    """Handles email sending via Brevo API."""

    configured = True
    service = "brevo"

    def __init__(
        self,
        api_key: str,
        sender_email: str,
        sender_name: str = "DedCore",
        base_url: str = "https://api.brevo.com/v3",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.api_key = api_key
        self.sender_email = sender_email
        self.sender_name = sender_name
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        # Tests inject an httpx.MockTransport here
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    def _headers(self) -> Dict[str, str]:
        return {
            "api-key": self.api_key,
            "accept": "application/json",
            "content-type": "application/json"
        }

    async def verify_configuration(self) -> bool:
        """
        Check the API key against the account endpoint without sending.

        Returns:
            True when Brevo accepts the credentials
        """
        try:
            async with self._client() as client:
                response = await client.get(f"{self.base_url}/account", headers=self._headers())
                response.raise_for_status()
            return True
        except httpx.HTTPStatusError as e:
            logger.error(f"Email configuration error: HTTP {e.response.status_code}: {e.response.text}")
            return False
        except httpx.RequestError as e:
            logger.error(f"Email configuration error: {e}")
            return False

    async def send_email(self, to_email: str, subject: str, html_content: str) -> Dict[str, Any]:
        """
        Send one HTML message.

        Args:
            to_email: Recipient email address
            subject: Email subject
            html_content: HTML body

        Returns:
            Dict with message_id and sent_at

        Raises:
            EmailDeliveryError: the transport rejected or never received the message
        """
        email_data = {
            "sender": {
                "name": self.sender_name,
                "email": self.sender_email
            },
            "to": [{"email": to_email}],
            "subject": subject,
            "htmlContent": html_content,
            "tags": ["newsletter"]
        }

        try:
            async with self._client() as client:
                response = await client.post(
                    f"{self.base_url}/smtp/email",
                    headers=self._headers(),
                    json=email_data
                )
                response.raise_for_status()
                result = response.json()
        except httpx.HTTPStatusError as e:
            error_msg = f"HTTP error {e.response.status_code}: {e.response.text}"
            logger.error(f"Email send failed for {to_email}: {error_msg}")
            raise EmailDeliveryError(to_email, error_msg) from e
        except httpx.RequestError as e:
            error_msg = f"Request error: {str(e)}"
            logger.error(f"Email send failed for {to_email}: {error_msg}")
            raise EmailDeliveryError(to_email, error_msg) from e

        message_id = result.get("messageId", "")
        logger.info(f"Email sent successfully to {to_email}, message_id: {message_id}")
        return {
            "message_id": message_id,
            "to_email": to_email,
            "sent_at": datetime.utcnow().isoformat()
        }

    def get_config_status(self) -> EmailConfigStatus:
        return EmailConfigStatus(
            configured=True,
            service=self.service,
            user=self.sender_email,
            sender=f"{self.sender_name} <{self.sender_email}>"
        )

class UnconfiguredEmailSender:
    """Stand-in used when BREVO_API_KEY or SENDER_EMAIL is missing."""

    configured = False
    service = "brevo"

    async def verify_configuration(self) -> bool:
        return False

    async def send_email(self, to_email: str, subject: str, html_content: str) -> Dict[str, Any]:
        raise EmailNotConfiguredError("BREVO_API_KEY and SENDER_EMAIL environment variables are required")

    def get_config_status(self) -> EmailConfigStatus:
        return EmailConfigStatus(
            configured=False,
            service=NOT_CONFIGURED,
            user=NOT_CONFIGURED,
            sender=NOT_CONFIGURED
        )

def build_email_sender(settings: Settings):
    """Pick the sender variant from the configured credentials."""
    if not (settings.BREVO_API_KEY and settings.SENDER_EMAIL):
        logger.warning("⚠️ Email transport not configured, newsletter sending disabled")
        return UnconfiguredEmailSender()
    return BrevoEmailSender(
        api_key=settings.BREVO_API_KEY,
        sender_email=settings.SENDER_EMAIL,
        sender_name=settings.SENDER_NAME,
        base_url=settings.BREVO_BASE_URL,
        timeout=settings.EMAIL_TIMEOUT
    )
