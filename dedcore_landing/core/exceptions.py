"""
Error taxonomy shared by the gateways, the dispatch pipeline and the routers.

Services raise these; routers translate them to HTTP status codes.
"""


class NewsletterError(Exception):
    """Base class for all service errors."""


class ValidationError(NewsletterError):
    """Malformed or missing input, detected before any external call."""


class ConfigurationError(NewsletterError):
    """Required external credentials or settings are absent or not working."""


class StoreNotConfiguredError(ConfigurationError):
    """Supabase credentials are missing."""


class EmailNotConfiguredError(ConfigurationError):
    """Email transport credentials are missing."""


class AdminAuthNotConfiguredError(ConfigurationError):
    """ADMIN_PASSWORD is not set on the server."""


class AuthenticationError(NewsletterError):
    """The candidate admin password did not match."""


class DependencyError(NewsletterError):
    """An external store or transport call failed."""


class EmailDeliveryError(DependencyError):
    """A single message could not be delivered to one recipient."""

    def __init__(self, recipient: str, reason: str):
        self.recipient = recipient
        self.reason = reason
        super().__init__(reason)


class NoRecipientsError(NewsletterError):
    """A broadcast found no active subscribers to send to."""
