"""
Subscriber store gateway backed by a Supabase (PostgREST) table.

Emails are normalized before every query so the table's unique constraint
is comparison-stable. A duplicate-key violation on insert is absorbed into
the ``already_subscribed`` outcome; every other failure propagates as a
``DependencyError``.
"""
from postgrest.exceptions import APIError
from supabase import Client
from dedcore_landing.core.config import Settings
from dedcore_landing.core.database import create_supabase_client
from dedcore_landing.core.exceptions import DependencyError, StoreNotConfiguredError
from dedcore_landing.models.subscriber import (
    Subscriber, SubscriberStatus, SubscriptionOutcome, SubscriptionResult
)
from dedcore_landing.utils.timezone_utils import to_utc, now_utc
from dedcore_landing.utils.validation import normalize_email
from typing import Dict, Any, List, Optional
import logging
import uuid

logger = logging.getLogger(__name__)

# Postgres unique_violation
UNIQUE_VIOLATION = "23505"

def _to_subscriber(row: Dict[str, Any]) -> Subscriber:
    return Subscriber(
        id=str(row.get("id")),
        email=row["email"],
        created_at=to_utc(row.get("created_at")) or now_utc(),
        source=row.get("source") or "website",
        status=row.get("status") or SubscriberStatus.ACTIVE,
    )

class SupabaseSubscriberStore:
    """Reads and writes subscriber rows through a Supabase client."""

    configured = True

    def __init__(self, client: Client, table: str = "newsletter_subscribers"):
        self.client = client
        self.table = table

    async def add_subscriber(self, email: str, source: str = "website") -> SubscriptionResult:
        """Insert an active subscriber; a repeat signup is not an error."""
        email = normalize_email(email)
        row = {
            "id": str(uuid.uuid4()),
            "email": email,
            "source": source or "website",
            "status": SubscriberStatus.ACTIVE.value,
            "created_at": now_utc().isoformat(),
        }
        try:
            response = self.client.table(self.table).insert(row).execute()
        except APIError as e:
            if e.code == UNIQUE_VIOLATION:
                logger.info(f"Email already subscribed: {email}")
                return SubscriptionResult(
                    outcome=SubscriptionOutcome.ALREADY_SUBSCRIBED,
                    message="Email already subscribed!"
                )
            logger.error(f"Error adding subscriber {email}: {e.message}")
            raise DependencyError(f"Failed to add subscriber: {e.message}") from e
        except Exception as e:
            logger.error(f"Error adding subscriber {email}: {e}")
            raise DependencyError(f"Failed to add subscriber: {e}") from e

        subscriber = _to_subscriber(response.data[0]) if response.data else None
        logger.info(f"Successfully added subscriber: {email} (source: {row['source']})")
        return SubscriptionResult(
            outcome=SubscriptionOutcome.CREATED,
            message="Successfully subscribed!",
            subscriber=subscriber
        )

    async def list_subscribers(self, status: Optional[SubscriberStatus] = None) -> List[Subscriber]:
        """All subscribers, newest first, optionally filtered by status."""
        try:
            query = self.client.table(self.table).select('*')
            if status:
                query = query.eq('status', SubscriberStatus(status).value)
            response = query.order('created_at', desc=True).execute()
        except Exception as e:
            logger.error(f"Error fetching subscribers: {e}")
            raise DependencyError(f"Failed to fetch subscribers: {e}") from e
        return [_to_subscriber(row) for row in response.data or []]

    async def list_active(self) -> List[Subscriber]:
        return await self.list_subscribers(SubscriberStatus.ACTIVE)

    async def unsubscribe(self, email: str) -> SubscriptionResult:
        """Flip a subscriber to unsubscribed. Rows are never deleted."""
        email = normalize_email(email)
        try:
            response = (
                self.client.table(self.table)
                .update({"status": SubscriberStatus.UNSUBSCRIBED.value})
                .eq('email', email)
                .execute()
            )
        except Exception as e:
            logger.error(f"Error unsubscribing {email}: {e}")
            raise DependencyError(f"Failed to unsubscribe: {e}") from e

        if not response.data:
            logger.info(f"Unsubscribe for unknown email: {email}")
            return SubscriptionResult(
                outcome=SubscriptionOutcome.NOT_FOUND,
                message="Email not found"
            )
        logger.info(f"Unsubscribed: {email}")
        return SubscriptionResult(
            outcome=SubscriptionOutcome.UPDATED,
            message="Successfully unsubscribed!",
            subscriber=_to_subscriber(response.data[0])
        )

    async def count_records(self) -> int:
        """Row count of the table; doubles as a connection probe."""
        try:
            response = self.client.table(self.table).select('id', count='exact').execute()
        except Exception as e:
            logger.error(f"Error counting subscribers: {e}")
            raise DependencyError(f"Database connection error: {e}") from e
        return response.count or 0

class UnconfiguredSubscriberStore:
    """Stand-in used when Supabase credentials are missing."""

    configured = False
    message = "Newsletter service is not configured"

    def __init__(self, table: str = "newsletter_subscribers"):
        self.table = table

    async def add_subscriber(self, email: str, source: str = "website") -> SubscriptionResult:
        raise StoreNotConfiguredError(self.message)

    async def list_subscribers(self, status: Optional[SubscriberStatus] = None) -> List[Subscriber]:
        raise StoreNotConfiguredError(self.message)

    async def list_active(self) -> List[Subscriber]:
        raise StoreNotConfiguredError(self.message)

    async def unsubscribe(self, email: str) -> SubscriptionResult:
        raise StoreNotConfiguredError(self.message)

    async def count_records(self) -> int:
        raise StoreNotConfiguredError(self.message)

def build_subscriber_store(settings: Settings):
    """Pick the store variant from the configured credentials."""
    client = create_supabase_client(settings)
    if client is None:
        return UnconfiguredSubscriberStore(settings.SUBSCRIBERS_TABLE)
    return SupabaseSubscriberStore(client, settings.SUBSCRIBERS_TABLE)
