"""Security utilities: JWT decoding and the request principal."""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Optional

from jose import JWTError, jwt

from gigmarket.config import settings


class Role(str, Enum):
    """User roles."""

    STUDENT = "student"
    EMPLOYER = "employer"
    ADMIN = "admin"


@dataclass(frozen=True)
class Principal:
    """Authenticated caller as asserted by the auth service."""

    id: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN.value

    @property
    def is_employer(self) -> bool:
        return self.role == Role.EMPLOYER.value

    @property
    def is_student(self) -> bool:
        return self.role == Role.STUDENT.value


def create_access_token(subject: str, role: str, expires_delta: Optional[timedelta] = None) -> str:
    """Create a JWT access token (used by scripts and tests; login lives in the auth service)."""
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(hours=24))
    to_encode = {"sub": str(subject), "role": role, "exp": expire, "type": "access"}
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> Optional[Principal]:
    """Decode a bearer token into a Principal, None when invalid."""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None

    subject = payload.get("sub")
    role = payload.get("role")
    if not subject or role not in {r.value for r in Role}:
        return None
    return Principal(id=str(subject), role=role)
