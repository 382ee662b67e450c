from pydantic import BaseModel
from typing import Any, Optional
from datetime import datetime
from enum import Enum

class SubscriberStatus(str, Enum):
    ACTIVE = "active"
    UNSUBSCRIBED = "unsubscribed"

class SubscriptionOutcome(str, Enum):
    CREATED = "created"
    ALREADY_SUBSCRIBED = "already_subscribed"
    UPDATED = "updated"
    NOT_FOUND = "not_found"

class Subscriber(BaseModel):
    """A row of the subscriber table"""
    id: str
    email: str
    created_at: datetime
    source: str = "website"
    status: SubscriberStatus = SubscriberStatus.ACTIVE

class SubscribeRequest(BaseModel):
    """Visitor newsletter signup"""
    # Any JSON type, checked by the router so malformed input maps to 400
    email: Optional[Any] = None
    source: Optional[str] = "website"

class UnsubscribeRequest(BaseModel):
    email: Optional[Any] = None

class SubscriptionResult(BaseModel):
    """Outcome of a store write"""
    outcome: SubscriptionOutcome
    message: str
    subscriber: Optional[Subscriber] = None
