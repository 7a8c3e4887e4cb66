from typing import Optional
import logging

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from app.core.config import settings
from app.schemas.provider import Provider, ProviderSource
from app.services.provider_service import get_provider

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")

async def get_current_provider(token: str = Depends(oauth2_scheme)) -> Provider:
    """Get the provider a bearer token was issued to.

    Tokens are issued by the auth service with the shape
    ``{ sub: <provider or application _id>, source: "provider" | "applicant" }``.
    A missing ``source`` claim means an approved provider.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        payload = jwt.decode(
            token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM]
        )
        subject: Optional[str] = payload.get("sub")
        if subject is None:
            raise credentials_exception
        source = ProviderSource(payload.get("source", ProviderSource.PROVIDER.value))
    except JWTError as jwt_error:
        logger.info(f"JWT decode error: {jwt_error}")
        raise credentials_exception
    except ValueError:
        raise credentials_exception

    provider = await get_provider(subject, source)
    if provider is None:
        logger.info(f"No {source.value} found for token subject {subject}")
        raise credentials_exception

    return provider
