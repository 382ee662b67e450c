from pydantic import BaseModel
from typing import Any, Optional

class AdminLogin(BaseModel):
    password: Optional[Any] = None

class SessionStatus(BaseModel):
    authenticated: bool
