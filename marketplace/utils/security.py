# marketplace/utils/security.py
from datetime import datetime, timedelta, timezone

import jwt

from marketplace.utils.settings import JWT_SECRET, JWT_ALGORITHM, ACCESS_TOKEN_EXPIRE_MINUTES


def create_access_token(user_id: int, email: str, name: str, expires_minutes: int | None = None) -> str:
    """
    Token issuance belongs to the auth service, this is only used by the seed
    script and tests to mint tokens the API will accept.
    """
    expire = datetime.now(timezone.utc) + timedelta(
        minutes=expires_minutes if expires_minutes is not None else ACCESS_TOKEN_EXPIRE_MINUTES
    )
    payload = {"id": user_id, "email": email, "name": name, "exp": expire}
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)


def decode_access_token(token: str) -> dict:
    # raises jwt.PyJWTError on bad signature, expiry or garbage
    return jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
