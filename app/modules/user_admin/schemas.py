from enum import Enum
from pydantic import BaseModel, EmailStr
from typing import Optional, List


class UserRole(str, Enum):
    CLIENT = "client"
    ADMIN = "admin"


class ActionResult(BaseModel):
    """Outcome of every admin action. Callers branch on ``success`` only."""
    success: bool
    message: str
    error: Optional[str] = None
    errors: Optional[List[str]] = None  # per-user details, bulk sync only

    @classmethod
    def ok(cls, message: str, errors: Optional[List[str]] = None) -> "ActionResult":
        return cls(success=True, message=message, errors=errors or None)

    @classmethod
    def failed(cls, message: str, error: str) -> "ActionResult":
        return cls(success=False, message=message, error=error)


class ChangeEmailRequest(BaseModel):
    new_email: EmailStr


class EmailRequest(BaseModel):
    email: EmailStr


class InviteUserRequest(BaseModel):
    email: EmailStr
    role: UserRole = UserRole.CLIENT


class UpdateAppMetadataRequest(BaseModel):
    role: UserRole
