from datetime import datetime, timedelta, timezone
from typing import Optional
import logging
import uuid

import bcrypt

from fastapi import Depends, Header, HTTPException
from jose import jwt, JWTError
from sqlalchemy.orm import Session

from app.config import get_settings
from app.database import get_db
from app.models.user import User

logger = logging.getLogger(__name__)

# ===== Password helpers =====
def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, stored: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), stored.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


# ===== JWT helpers =====
def create_access_token(user_id: str, email: str, expires_delta: Optional[timedelta] = None) -> str:
    settings = get_settings()
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    payload = {
        "userid": user_id,
        "sub": email,
        "exp": expire,
        "iat": now,
        "jti": uuid.uuid4().hex,
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> dict:
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid or expired token.")
    if not payload.get("userid"):
        raise HTTPException(status_code=401, detail="Invalid token payload.")
    return payload


def get_current_user(
    x_auth_token: Optional[str] = Header(None, alias="x-auth-token"),
    db: Session = Depends(get_db),
) -> User:
    if not x_auth_token:
        raise HTTPException(status_code=401, detail="Access Denied. No token provided.")
    payload = decode_access_token(x_auth_token)
    user = db.query(User).filter(User.id == payload["userid"]).first()
    if not user:
        logger.warning("Token for unknown user %s", payload["userid"])
        raise HTTPException(status_code=401, detail="Invalid token.")
    return user
