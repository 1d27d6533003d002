from jose import jwt, JWTError
from typing import Optional, Dict, Any
from microcredx.core.config import settings


# Decodes and validates an identity-provider token returning its payload
def decode_token(token: str) -> Optional[Dict[str, Any]]:
    if not settings.JWT_SECRET_KEY:
        raise RuntimeError("JWT_SECRET_KEY is not set in environment variables")

    options = {"verify_aud": settings.JWT_AUDIENCE is not None}
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM],
            audience=settings.JWT_AUDIENCE,
            issuer=settings.JWT_ISSUER,
            options=options,
        )
        return payload
    except JWTError:
        return None
