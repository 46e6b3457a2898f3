import logging

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.config import get_settings
from app.database import get_db
from app.models.user import User
from app.schemas.user import RegisterSchema, LoginSchema, TokenOut
from app.utils.security import create_access_token, hash_password, verify_password

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/register")
def register(user: RegisterSchema, db: Session = Depends(get_db)):
    email = user.email.strip().lower()
    existing = db.query(User).filter(User.email == email).first()
    if existing:
        raise HTTPException(status_code=400, detail="Email already registered")
    new_user = User(name=user.name.strip(), email=email, password_hash=hash_password(user.password))
    try:
        db.add(new_user)
        db.commit()
    except IntegrityError:
        # Another registration for the same email committed first
        db.rollback()
        raise HTTPException(status_code=400, detail="Email already registered")
    db.refresh(new_user)
    logger.info("Registered user %s", new_user.id)
    return {"message": "User registered successfully", "id": new_user.id}


@router.post("/login", response_model=TokenOut)
def login(credentials: LoginSchema, response: Response, db: Session = Depends(get_db)):
    user = db.query(User).filter(User.email == credentials.email.strip().lower()).first()
    if not user or not verify_password(credentials.password, user.password_hash):
        raise HTTPException(status_code=401, detail="Invalid email or password")
    token = create_access_token(user.id, user.email)
    # Clients read the token from the body or from the same header they send it back in
    response.headers["x-auth-token"] = token
    return TokenOut(access_token=token, expires_in_minutes=get_settings().ACCESS_TOKEN_EXPIRE_MINUTES)
