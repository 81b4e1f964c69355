"""
Bearer-token helpers. Tokens are minted by the portal login service; this
module only decodes them and enforces the caller's role.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from fastapi import Depends, HTTPException
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt

from config import Config

security = HTTPBearer(auto_error=False)

ROLES = ("admin", "student", "teacher", "registrar", "cashier", "records", "faculty")


@dataclass
class CurrentUser:
    subject: str  # username, or the student number for students
    role: str


def create_access_token(subject: str, role: str, expires_minutes: Optional[int] = None) -> str:
    expire = datetime.utcnow() + timedelta(minutes=expires_minutes or Config.ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode = {"sub": subject, "role": role, "exp": expire}
    return jwt.encode(to_encode, Config.SECRET_KEY, algorithm=Config.JWT_ALGORITHM)


def get_current_user(credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)) -> CurrentUser:
    if credentials is None:
        raise HTTPException(status_code=401, detail="not authenticated")
    try:
        payload = jwt.decode(credentials.credentials, Config.SECRET_KEY, algorithms=[Config.JWT_ALGORITHM])
    except JWTError:
        raise HTTPException(status_code=401, detail="Session expired, please login again")

    subject = payload.get("sub")
    role = payload.get("role")
    if not subject or role not in ROLES:
        raise HTTPException(status_code=401, detail="invalid token")
    return CurrentUser(subject=subject, role=role)


def require_role(*roles: str):
    """Dependency factory: only callers holding one of `roles` get through."""

    def checker(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if user.role not in roles:
            raise HTTPException(status_code=403, detail="forbidden")
        return user

    return checker
