from fastapi import APIRouter, HTTPException, Depends, status
from dedcore_landing.core.deps import get_subscriber_store
from dedcore_landing.core.exceptions import StoreNotConfiguredError
from dedcore_landing.models.subscriber import SubscribeRequest, SubscriptionOutcome, UnsubscribeRequest
from dedcore_landing.utils.validation import validate_email_address
from typing import Dict, Any
import logging

logger = logging.getLogger(__name__)
router = APIRouter(tags=["newsletter"])

def _check_email(email) -> None:
    if not email or not isinstance(email, str):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email is required")
    if not validate_email_address(email):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid email format")

@router.post("/subscribe", response_model=Dict[str, Any])
async def subscribe(payload: SubscribeRequest, store=Depends(get_subscriber_store)):
    """Newsletter signup from the landing page"""
    _check_email(payload.email)
    try:
        result = await store.add_subscriber(payload.email, payload.source or "website")
        return {
            "success": True,
            "message": result.message,
            "data": {
                "email": payload.email.strip().lower(),
                "alreadySubscribed": result.outcome == SubscriptionOutcome.ALREADY_SUBSCRIBED
            }
        }
    except StoreNotConfiguredError as e:
        logger.error(f"Newsletter signup error: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Newsletter service is not configured"
        )
    except Exception as e:
        logger.error(f"Newsletter signup error: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to subscribe. Please try again."
        )

@router.post("/unsubscribe", response_model=Dict[str, Any])
async def unsubscribe(payload: UnsubscribeRequest, store=Depends(get_subscriber_store)):
    """Mark an address as unsubscribed"""
    _check_email(payload.email)
    try:
        result = await store.unsubscribe(payload.email)
    except StoreNotConfiguredError as e:
        logger.error(f"Unsubscribe error: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Newsletter service is not configured"
        )
    except Exception as e:
        logger.error(f"Unsubscribe error: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to unsubscribe. Please try again."
        )

    if result.outcome == SubscriptionOutcome.NOT_FOUND:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=result.message)
    return {
        "success": True,
        "message": result.message
    }
