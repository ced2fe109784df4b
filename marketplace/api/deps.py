# marketplace/api/deps.py
from fastapi import Depends, Query
from fastapi.security import OAuth2PasswordBearer
import jwt
from pydantic import ValidationError as PydanticValidationError

from marketplace.domain.errors import Unauthorized
from marketplace.domain.schemas import CurrentUser
from marketplace.services.lock_service import LockService
from marketplace.services.notification_service import NotificationService
from marketplace.utils.security import decode_access_token
from marketplace.utils.settings import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)

# tokens are issued by the auth service, we only verify them
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login", auto_error=False)


def get_current_user(token: str | None = Depends(oauth2_scheme)) -> CurrentUser:
    if not token:
        raise Unauthorized()

    try:
        payload = decode_access_token(token)
        return CurrentUser(
            id=payload["id"],
            email=payload.get("email", ""),
            name=payload.get("name", ""),
        )
    except (jwt.PyJWTError, KeyError, PydanticValidationError) as e:
        logger.warning(f"Rejected bearer token: {e}")
        raise Unauthorized("Invalid token")


def get_lock_service() -> LockService:
    return LockService()


def get_notifier() -> NotificationService:
    return NotificationService()


class Pagination:
    def __init__(
        self,
        page: int = Query(1, ge=1),
        page_size: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    ):
        self.page = page
        self.page_size = page_size
