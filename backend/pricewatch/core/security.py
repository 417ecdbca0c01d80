"""Bearer token verification.

Tokens are issued by an external identity provider. We only check the
signature and read the owner id from the ``sub`` claim.
"""

import uuid
from typing import Optional

from jose import JWTError, jwt

from pricewatch.config import settings


def decode_owner_id(token: str) -> Optional[uuid.UUID]:
    """Decode a JWT and return the owner UUID, or None if invalid."""
    try:
        payload = jwt.decode(
            token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM]
        )
    except JWTError:
        return None

    subject = payload.get("sub")
    if not subject:
        return None
    try:
        return uuid.UUID(str(subject))
    except ValueError:
        return None
