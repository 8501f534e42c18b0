from datetime import datetime, timedelta
from typing import Optional

import bcrypt
import jwt
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from config import Settings


##########
# Security
##########
# missing header is reported by require_user
security = HTTPBearer(auto_error=False)


def get_settings(request: Request) -> Settings:
    """Dependency returning the settings bound to the running app"""
    return request.app.state.settings


##########
# JWT Token
##########
def create_access_token(data: dict, settings: Settings, expires_delta: Optional[timedelta] = None):
    """Create JWT token with expiration"""
    to_encode = data.copy()
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=settings.access_token_expire_minutes))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def verify_token(token: str, settings: Settings):
    """Verify JWT token, return payload or None if invalid"""
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except jwt.ExpiredSignatureError:
        return None
    except jwt.PyJWTError:
        return None


##########
# Passwords
##########
# bcrypt only reads the first 72 bytes and newer releases refuse longer input
MAX_PASSWORD_BYTES = 72


def password_too_long(password: str) -> bool:
    return len(password.encode('utf-8')) > MAX_PASSWORD_BYTES


def hash_password(password: str):
    """Hash password using bcrypt"""
    if password_too_long(password):
        raise ValueError(f"password cannot be longer than {MAX_PASSWORD_BYTES} bytes")
    return bcrypt.hashpw(password.encode('utf-8'), bcrypt.gensalt()).decode('utf-8')


def verify_password(password: str, hashed: str):
    """Verify password against hashed value"""
    if password_too_long(password):
        return False
    return bcrypt.checkpw(password.encode('utf-8'), hashed.encode('utf-8'))


##########
# Authorization Guard
##########
async def require_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    settings: Settings = Depends(get_settings),
) -> dict:
    """Reject the request unless it carries a valid bearer token.

    On success the token subject is bound to ``request.state.user_id`` (and
    the role to ``request.state.role``) and the claims are returned. The user
    record is not loaded here; handlers that need the profile fetch it.
    """
    if not credentials:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED,
                            detail="Access denied. No token provided.")

    payload = verify_token(credentials.credentials, settings)
    if not payload or not payload.get("userId"):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")

    request.state.user_id = payload["userId"]
    request.state.role = payload.get("role", "user")
    return payload


def current_user_id(claims: dict = Depends(require_user)) -> str:
    """Acting user id, as a plain string"""
    return str(claims["userId"])


##########
# Ownership
##########
def ensure_owner(user_id: str, owner_id) -> None:
    """Only the author of an entity may change it"""
    if str(owner_id) != str(user_id):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN,
                            detail="you do not have permission")


def ensure_can_delete_comment(user_id: str, comment: dict, post: Optional[dict]) -> None:
    """A comment may be removed by its author or by the author of its post"""
    is_author = str(comment["author"]) == str(user_id)
    is_post_owner = post is not None and str(post["author"]) == str(user_id)
    if not is_author and not is_post_owner:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN,
                            detail="you do not have permission")
