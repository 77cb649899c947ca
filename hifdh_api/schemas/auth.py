from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, field_validator


class Role(str, Enum):
    ADMIN = "admin"
    STUDENT = "student"


class Credentials(BaseModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def clean_email(cls, v: str) -> str:
        return v.strip().lower()


class AuthSession(BaseModel):
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    user_id: str
    email: str
    role: Role


# --- Session context (one per request) ---
class SessionContext(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    supabase: Any
    user_id: str
    email: str = ""
    role: Role = Role.STUDENT
    profile: Optional[Dict[str, Any]] = None

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN
