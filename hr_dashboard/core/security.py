# hr-dashboard/hr_dashboard/core/security.py
# Resolves the requester identity from bearer JWTs and guards the sync trigger.
from fastapi import Depends, HTTPException, Security, status
from fastapi.security import OAuth2PasswordBearer
from fastapi.security.api_key import APIKeyHeader
from jose import JWTError, jwt
from datetime import datetime, timedelta

from hr_dashboard.core.config import settings

# --- JWT Creation ---
def create_access_token(data: dict) -> str:
    to_encode = data.copy()
    expire = datetime.utcnow() + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)

# --- Requester Dependency ---
# Tokens are issued by the upstream identity provider; this service only reads them.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/token", auto_error=True)

def get_requester_email(token: str = Depends(oauth2_scheme)) -> str:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
        email = payload.get("sub")
    except JWTError:
        raise credentials_exception
    if not isinstance(email, str) or not email.strip():
        raise credentials_exception
    return email.strip().lower()

# --- Sync Trigger Dependency ---
api_key_header_scheme = APIKeyHeader(name="X-API-Key")

def get_sync_api_key(key: str = Security(api_key_header_scheme)) -> str:
    """Checks the cron caller's key against the configured one."""
    if settings.SYNC_API_KEY and key == settings.SYNC_API_KEY:
        return key
    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail="Invalid or missing API key"
    )
