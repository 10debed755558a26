# storefront/api/deps.py
from fastapi import Depends, Query, Request
from sqlalchemy.orm import Session

from storefront.data.database import get_db
from storefront.data.models.user import UserModel
from storefront.domain.errors import ForbiddenError, TooManyRequestsError, UnauthorizedError
from storefront.repos.user_repo import UserRepo
from storefront.services.rate_limit_service import RateLimitService
from storefront.utils import settings

_rate_limiter: RateLimitService | None = None


def get_current_user(
    user_id: int = Query(..., gt=0),
    db: Session = Depends(get_db),
) -> UserModel:
    # identity comes in as user_id, token issuance lives outside this service
    user = UserRepo(db).get_user(user_id)
    if not user:
        raise UnauthorizedError("Not authorized - unknown user")
    return user


def require_roles(*roles: str):
    def dependency(user: UserModel = Depends(get_current_user)) -> UserModel:
        if user.role not in roles:
            raise ForbiddenError("Not authorized to access this route")
        return user

    return dependency


def get_rate_limiter() -> RateLimitService:
    global _rate_limiter
    if _rate_limiter is None:
        _rate_limiter = RateLimitService()
    return _rate_limiter


def rate_limit(scope: str, max_requests: int | None = None, window_seconds: int | None = None):
    def dependency(request: Request, limiter: RateLimitService = Depends(get_rate_limiter)) -> None:
        if not settings.RATE_LIMIT_ENABLED:
            return

        client_id = request.client.host if request.client else "unknown"
        allowed = limiter.allow(
            scope,
            client_id,
            max_requests or settings.RATE_LIMIT_MAX_REQUESTS,
            window_seconds or settings.RATE_LIMIT_WINDOW_SECONDS,
        )
        if not allowed:
            raise TooManyRequestsError("Too many requests, please try again later")

    return dependency
