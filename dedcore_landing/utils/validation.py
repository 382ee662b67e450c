import re

# Basic local@domain.tld shape, no whitespace and a single @
EMAIL_PATTERN = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')

def validate_email_address(email) -> bool:
    """
    Validate an email address format.

    Args:
        email: Value submitted by the client

    Returns:
        True if it is a string with a local@domain.tld shape
    """
    if not isinstance(email, str):
        return False
    return bool(EMAIL_PATTERN.match(email.strip()))

def normalize_email(email: str) -> str:
    """Trim and lowercase, the form used as the unique key in the store."""
    return email.strip().lower()
