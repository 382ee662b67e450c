"""
Admin session guard: single shared password, cookie-borne session token.

Tokens are HS256 JWTs signed with SECRET_KEY and carrying an ``exp`` claim
``max_age`` seconds after issue. With ``verify_tokens`` on, a token is valid
only if it decodes and has not expired. With it off, any non-empty token is
accepted.
"""
import hmac
import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from jose import JWTError, jwt

from dedcore_landing.core.config import Settings
from dedcore_landing.core.exceptions import AdminAuthNotConfiguredError, AuthenticationError

logger = logging.getLogger(__name__)

SESSION_COOKIE_NAME = "admin-session"
ALGORITHM = "HS256"
SESSION_SUBJECT = "admin"

class AdminSessionGuard:

    def __init__(
        self,
        admin_password: str,
        secret_key: str,
        max_age: int = 24 * 60 * 60,
        verify_tokens: bool = True,
        secure_cookie: bool = False
    ):
        self.admin_password = admin_password
        self.secret_key = secret_key
        self.max_age = max_age
        self.verify_tokens = verify_tokens
        self.secure_cookie = secure_cookie

    @classmethod
    def from_settings(cls, settings: Settings) -> "AdminSessionGuard":
        return cls(
            admin_password=settings.ADMIN_PASSWORD,
            secret_key=settings.SECRET_KEY,
            max_age=settings.ADMIN_SESSION_MAX_AGE,
            verify_tokens=settings.ADMIN_SESSION_VERIFY,
            secure_cookie=settings.is_production
        )

    def issue_session(self, candidate_password: Any, now: Optional[datetime] = None) -> str:
        """
        Mint a session token when the candidate matches ADMIN_PASSWORD.

        Raises:
            AdminAuthNotConfiguredError: no password configured on the server
            AuthenticationError: wrong or non-string password
        """
        if not self.admin_password:
            raise AdminAuthNotConfiguredError("Admin authentication not configured")
        if not isinstance(candidate_password, str) or not hmac.compare_digest(
            candidate_password.encode(), self.admin_password.encode()
        ):
            logger.warning("Admin login failed: invalid password")
            raise AuthenticationError("Invalid password")

        issued_at = now or datetime.now(timezone.utc)
        claims = {
            "sub": SESSION_SUBJECT,
            "iat": issued_at,
            "exp": issued_at + timedelta(seconds=self.max_age),
            "jti": secrets.token_urlsafe(16),
        }
        logger.info("Admin session issued")
        return jwt.encode(claims, self.secret_key, algorithm=ALGORITHM)

    def has_valid_session(self, token: Optional[str]) -> bool:
        if not token:
            return False
        if not self.verify_tokens:
            return True

        try:
            claims = jwt.decode(token, self.secret_key, algorithms=[ALGORITHM])
        except JWTError:
            return False
        return claims.get("sub") == SESSION_SUBJECT

    def cookie_options(self) -> dict:
        """Keyword arguments for Response.set_cookie."""
        return {
            "key": SESSION_COOKIE_NAME,
            "httponly": True,
            "secure": self.secure_cookie,
            "samesite": "strict",
            "max_age": self.max_age,
        }
