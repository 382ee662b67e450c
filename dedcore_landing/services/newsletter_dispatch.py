"""
Newsletter dispatch pipeline.

validate -> resolve recipients -> verify transport -> send one by one -> tally

Sends are strictly sequential: each one is awaited before the next starts,
and a failure for one recipient is recorded and the loop moves on.
"""
import logging
from typing import Any, List, Optional

from dedcore_landing.core.exceptions import (
    ConfigurationError, EmailNotConfiguredError, NewsletterError,
    NoRecipientsError, ValidationError
)
from dedcore_landing.models.newsletter import DispatchResult, SendMode
from dedcore_landing.utils.validation import normalize_email, validate_email_address

logger = logging.getLogger(__name__)

class NewsletterDispatcher:
    """Sends one composed newsletter through the email gateway."""

    def __init__(self, store, sender):
        self.store = store
        self.sender = sender

    def _validate(self, subject: Any, html_content: Any, mode: SendMode,
                  test_recipient: Any) -> None:
        for value in (subject, html_content):
            if not isinstance(value, str) or not value.strip():
                raise ValidationError("Subject and content are required")
        if mode == SendMode.TEST:
            if not test_recipient:
                raise ValidationError("A test email address is required in test mode")
            if not validate_email_address(test_recipient):
                raise ValidationError("Invalid test email format")

    async def _resolve_recipients(self, mode: SendMode, test_recipient: Optional[str]) -> List[str]:
        if mode == SendMode.TEST:
            return [normalize_email(test_recipient)]

        subscribers = await self.store.list_active()
        recipients = [s.email for s in subscribers]
        if not recipients:
            raise NoRecipientsError("No active subscribers found")
        return recipients

    async def dispatch(
        self,
        subject: Optional[str],
        html_content: Optional[str],
        mode: SendMode = SendMode.BROADCAST,
        test_recipient: Optional[str] = None
    ) -> DispatchResult:
        """
        Send a newsletter and report per-recipient results.

        Args:
            subject: Email subject, must be non-empty
            html_content: HTML body, must be non-empty
            mode: broadcast to every active subscriber, or test to one address
            test_recipient: the single address used in test mode

        Returns:
            DispatchResult; success is True whenever at least one send worked

        Raises:
            ValidationError: missing subject/content or test address
            ConfigurationError: transport not configured or not working
            NoRecipientsError: broadcast with no active subscribers
            DependencyError: the subscriber list could not be fetched
        """
        mode = SendMode(mode)
        self._validate(subject, html_content, mode, test_recipient)

        if not self.sender.configured:
            raise EmailNotConfiguredError("Email transport is not configured")

        recipients = await self._resolve_recipients(mode, test_recipient)

        # Refuse to start a partial send against a broken transport
        if not await self.sender.verify_configuration():
            logger.error("Email configuration is invalid, newsletter not sent")
            raise ConfigurationError("Email configuration is invalid")

        logger.info(f"📧 Sending newsletter '{subject}' to {len(recipients)} recipient(s) ({mode.value} mode)")
        result = DispatchResult()
        for email in recipients:
            try:
                await self.sender.send_email(email, subject, html_content)
                result.sent += 1
            except NewsletterError as e:
                result.failed += 1
                result.errors.append(f"Failed to send to {email}: {e}")
            except Exception as e:
                logger.error(f"Unexpected error sending to {email}: {e}")
                result.failed += 1
                result.errors.append(f"Failed to send to {email}: {e}")

        result.success = result.sent > 0
        logger.info(f"Newsletter dispatch finished: sent={result.sent} failed={result.failed}")
        return result
