"""
Security helpers
Password hashing and JWT encoding/decoding
"""
from datetime import datetime, timedelta
from typing import Optional

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from intranet.config import settings
from intranet.errors import InternalServerError, UnauthorizedError


# Note: Using pbkdf2_sha256 as primary for better compatibility across Python versions
pwd_context = CryptContext(schemes=["pbkdf2_sha256", "bcrypt"], deprecated="auto")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify password against hash"""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash password"""
    return pwd_context.hash(password)


def _secret() -> str:
    if not settings.JWT_SECRET:
        raise InternalServerError("JWT_SECRET not configured")
    return settings.JWT_SECRET


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create JWT access token"""
    to_encode = data.copy()
    now = datetime.utcnow()

    if expires_delta is not None:
        expire = now + expires_delta
    else:
        expire = now + timedelta(days=settings.JWT_EXPIRE_DAYS)

    to_encode.update({"iat": now, "exp": expire})
    return jwt.encode(to_encode, _secret(), algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> dict:
    """Decode a token, telling expired tokens apart from otherwise invalid ones"""
    secret = _secret()
    try:
        return jwt.decode(token, secret, algorithms=[settings.JWT_ALGORITHM])
    except ExpiredSignatureError:
        raise UnauthorizedError("Token expired")
    except JWTError:
        raise UnauthorizedError("Invalid token")
