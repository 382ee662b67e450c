"""
FastAPI dependency providers.

Clients are built once in the application lifespan and kept on app.state;
tests swap them through app.dependency_overrides.
"""
from fastapi import Depends, HTTPException, Request, status

from dedcore_landing.core.config import Settings, settings
from dedcore_landing.services.newsletter_dispatch import NewsletterDispatcher
from dedcore_landing.services.session_guard import SESSION_COOKIE_NAME, AdminSessionGuard

def get_settings() -> Settings:
    return settings

def get_subscriber_store(request: Request):
    return request.app.state.subscriber_store

def get_email_sender(request: Request):
    return request.app.state.email_sender

def get_session_guard(request: Request) -> AdminSessionGuard:
    return request.app.state.session_guard

def get_newsletter_dispatcher(
    store=Depends(get_subscriber_store),
    sender=Depends(get_email_sender)
) -> NewsletterDispatcher:
    return NewsletterDispatcher(store, sender)

def require_admin_session(
    request: Request,
    guard: AdminSessionGuard = Depends(get_session_guard)
) -> str:
    """Reject the request with 401 unless it carries a valid admin-session cookie"""
    token = request.cookies.get(SESSION_COOKIE_NAME)
    if not guard.has_valid_session(token):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Admin authentication required"
        )
    return token
