from fastapi import APIRouter, HTTPException, Depends, Query, Request, Response, status
from fastapi.responses import JSONResponse
from dedcore_landing.core.config import Settings
from dedcore_landing.core.deps import (
    get_email_sender, get_newsletter_dispatcher, get_session_guard, get_settings,
    get_subscriber_store, require_admin_session
)
from dedcore_landing.core.exceptions import (
    AdminAuthNotConfiguredError, AuthenticationError, ConfigurationError,
    DependencyError, NoRecipientsError, StoreNotConfiguredError, ValidationError
)
from dedcore_landing.models.admin import AdminLogin, SessionStatus
from dedcore_landing.models.analytics import AnalyticsSnapshot, DashboardSummary, DatabaseStatus
from dedcore_landing.models.newsletter import EmailStatusResponse, NewsletterSendRequest, SendMode
from dedcore_landing.services.analytics import compute_analytics, compute_dashboard_summary
from dedcore_landing.services.newsletter_dispatch import NewsletterDispatcher
from dedcore_landing.services.session_guard import SESSION_COOKIE_NAME, AdminSessionGuard
from dedcore_landing.services.subscriber_directory import (
    export_filename, filter_subscribers, subscribers_to_csv
)
from typing import Dict, Any, Optional
import logging
import time

logger = logging.getLogger(__name__)
router = APIRouter(tags=["admin"])

admin_only = [Depends(require_admin_session)]

# Records above which the database page reports "excellent"
EXCELLENT_RECORD_THRESHOLD = 1000

def _store_error(e: Exception, action: str) -> HTTPException:
    """Map a store failure to 503 (not set up) or 500 (anything else)"""
    logger.error(f"{action} failed: {e}")
    if isinstance(e, StoreNotConfiguredError):
        return HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Supabase is not configured"
        )
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"{action} failed"
    )

def _format_uptime(seconds: float) -> str:
    seconds = int(seconds)
    return f"{seconds // 3600}h {(seconds % 3600) // 60}m"

# --- Session ---

@router.post("/login", response_model=Dict[str, Any])
async def login(
    credentials: AdminLogin,
    response: Response,
    guard: AdminSessionGuard = Depends(get_session_guard)
):
    """Admin login with the shared password"""
    try:
        token = guard.issue_session(credentials.password)
    except AdminAuthNotConfiguredError as e:
        logger.error(f"Admin login unavailable: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Admin authentication not configured"
        )
    except AuthenticationError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid password"
        )

    response.set_cookie(value=token, **guard.cookie_options())
    return {"success": True}

@router.post("/logout", response_model=Dict[str, Any])
async def logout(response: Response):
    response.delete_cookie(SESSION_COOKIE_NAME)
    return {"success": True}

@router.get("/session-check", response_model=SessionStatus)
@router.get("/check-auth", response_model=SessionStatus, include_in_schema=False)
async def session_check(request: Request, guard: AdminSessionGuard = Depends(get_session_guard)):
    token = request.cookies.get(SESSION_COOKIE_NAME)
    return SessionStatus(authenticated=guard.has_valid_session(token))

# --- Email ---

@router.get("/email-status", response_model=EmailStatusResponse, dependencies=admin_only)
async def email_status(sender=Depends(get_email_sender)):
    """Transport configuration and a live verify call"""
    try:
        config_status = sender.get_config_status()
        working = await sender.verify_configuration()
        return EmailStatusResponse(**config_status.model_dump(), working=working)
    except Exception as e:
        logger.error(f"Email status check failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to check email status"
        )

@router.post("/send-newsletter", response_model=Dict[str, Any], dependencies=admin_only)
async def send_newsletter(
    payload: NewsletterSendRequest,
    dispatcher: NewsletterDispatcher = Depends(get_newsletter_dispatcher)
):
    """Send a composed newsletter to every active subscriber, or to one test address"""
    try:
        result = await dispatcher.dispatch(
            payload.subject,
            payload.content,
            mode=payload.mode,
            test_recipient=payload.test_email
        )
    except (ValidationError, NoRecipientsError) as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except ConfigurationError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
    except DependencyError as e:
        logger.error(f"Newsletter dispatch failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch subscribers"
        )

    if not result.success:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "success": False,
                "message": "Failed to send newsletter",
                "statusCode": status.HTTP_500_INTERNAL_SERVER_ERROR,
                **result.model_dump(exclude={"success"})
            }
        )

    if payload.mode == SendMode.TEST:
        message = "Test email sent successfully"
    else:
        message = f"Newsletter sent to {result.sent} subscribers"
    return {"message": message, **result.model_dump()}

# --- Analytics and subscribers ---

@router.get("/analytics", response_model=Dict[str, Any], dependencies=admin_only)
async def analytics(
    store=Depends(get_subscriber_store),
    app_settings: Settings = Depends(get_settings)
):
    try:
        subscribers = await store.list_active()
    except Exception as e:
        raise _store_error(e, "Fetching analytics")

    snapshot: AnalyticsSnapshot = compute_analytics(subscribers, timezone_name=app_settings.ANALYTICS_TIMEZONE)
    return {
        "success": True,
        "data": snapshot.model_dump(mode="json", by_alias=True),
        "refreshInterval": app_settings.ANALYTICS_REFRESH_SECONDS
    }

@router.get("/dashboard", response_model=Dict[str, Any], dependencies=admin_only)
async def dashboard(
    store=Depends(get_subscriber_store),
    app_settings: Settings = Depends(get_settings)
):
    try:
        subscribers = await store.list_active()
    except Exception as e:
        raise _store_error(e, "Fetching dashboard")

    summary: DashboardSummary = compute_dashboard_summary(subscribers, timezone_name=app_settings.ANALYTICS_TIMEZONE)
    return {
        "success": True,
        "data": summary.model_dump(mode="json", by_alias=True),
        "refreshInterval": app_settings.ANALYTICS_REFRESH_SECONDS
    }

@router.get("/subscribers", response_model=Dict[str, Any], dependencies=admin_only)
async def list_subscribers(
    search: Optional[str] = None,
    status_filter: str = Query("all", alias="status"),
    store=Depends(get_subscriber_store)
):
    try:
        subscribers = await store.list_subscribers()
    except Exception as e:
        raise _store_error(e, "Fetching subscribers")

    matched = filter_subscribers(subscribers, search=search, status=status_filter)
    return {
        "success": True,
        "data": [s.model_dump(mode="json") for s in matched],
        "total": len(subscribers),
        "count": len(matched)
    }

@router.get("/subscribers/export", dependencies=admin_only)
async def export_subscribers(
    search: Optional[str] = None,
    status_filter: str = Query("all", alias="status"),
    store=Depends(get_subscriber_store)
):
    try:
        subscribers = await store.list_subscribers()
    except Exception as e:
        raise _store_error(e, "Exporting subscribers")

    matched = filter_subscribers(subscribers, search=search, status=status_filter)
    return Response(
        content=subscribers_to_csv(matched),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{export_filename()}"'}
    )

@router.get("/database-status", response_model=DatabaseStatus, dependencies=admin_only)
async def database_status(request: Request, store=Depends(get_subscriber_store)):
    """Connection probe and record count for the database page"""
    started_at = getattr(request.app.state, "started_at", time.monotonic())
    uptime = _format_uptime(time.monotonic() - started_at)
    try:
        total = await store.count_records()
    except (ConfigurationError, DependencyError) as e:
        logger.warning(f"Database status check failed: {e}")
        return DatabaseStatus(
            connected=False,
            table=store.table,
            table_count=0,
            total_records=0,
            performance="unknown",
            uptime=uptime,
            error="Supabase is not configured" if isinstance(e, StoreNotConfiguredError) else "Database connection error"
        )

    return DatabaseStatus(
        connected=True,
        table=store.table,
        table_count=1,
        total_records=total,
        performance="excellent" if total > EXCELLENT_RECORD_THRESHOLD else "good",
        uptime=uptime
    )
