from pydantic import BaseModel, Field, ConfigDict
from typing import Any, List, Optional
from enum import Enum

class SendMode(str, Enum):
    BROADCAST = "broadcast"
    TEST = "test"

class NewsletterSendRequest(BaseModel):
    """Compose form of the admin newsletter page"""
    model_config = ConfigDict(populate_by_name=True)

    # Any JSON type, the dispatcher rejects non-strings with a 400
    subject: Optional[Any] = None
    content: Optional[Any] = None
    test_mode: bool = Field(False, alias="testMode")
    test_email: Optional[Any] = Field(None, alias="testEmail")

    @property
    def mode(self) -> SendMode:
        return SendMode.TEST if self.test_mode else SendMode.BROADCAST

class DispatchResult(BaseModel):
    """Tally of one newsletter dispatch; success is sent > 0"""
    success: bool = False
    sent: int = 0
    failed: int = 0
    errors: List[str] = []

class EmailConfigStatus(BaseModel):
    configured: bool
    service: str
    user: str
    sender: str = Field(serialization_alias="from")

class EmailStatusResponse(EmailConfigStatus):
    working: bool
