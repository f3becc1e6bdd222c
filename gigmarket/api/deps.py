"""
API Dependencies
Common dependencies for API endpoints (authentication, service wiring)
"""

from functools import lru_cache

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import sessionmaker

from gigmarket.core.security import Principal, decode_access_token
from gigmarket.db.session import SyncSessionLocal
from gigmarket.services.inbox_service import InboxService
from gigmarket.services.inspection_queue import InspectionQueue
from gigmarket.services.job_service import JobService
from gigmarket.services.profile_inspector import ProfileInspector
from gigmarket.services.review_service import ReviewService
from gigmarket.services.score_service import ScoreService
from gigmarket.services.wallet_service import WalletService

bearer_scheme = HTTPBearer(auto_error=False)


def get_session_factory() -> sessionmaker:
    """Session factory used by the services (overridden in tests)."""
    return SyncSessionLocal


def get_current_principal(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
) -> Principal:
    """
    Resolve the caller from the bearer token
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if credentials is None or not credentials.credentials:
        raise credentials_exception

    principal = decode_access_token(credentials.credentials)
    if principal is None:
        raise credentials_exception
    return principal


def get_current_admin(principal: Principal = Depends(get_current_principal)) -> Principal:
    """
    Get current caller and verify they have admin privileges
    """
    if not principal.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not enough privileges. Admin access required."
        )
    return principal


def get_wallet_service(session_factory: sessionmaker = Depends(get_session_factory)) -> WalletService:
    return WalletService(session_factory)


def get_score_service(session_factory: sessionmaker = Depends(get_session_factory)) -> ScoreService:
    return ScoreService(session_factory)


@lru_cache
def get_profile_inspector() -> ProfileInspector:
    """One inspector (and one pooled httpx client) shared by every request."""
    return ProfileInspector()


def get_job_service(
    session_factory: sessionmaker = Depends(get_session_factory),
    wallet_service: WalletService = Depends(get_wallet_service),
    score_service: ScoreService = Depends(get_score_service),
    inspector: ProfileInspector = Depends(get_profile_inspector),
) -> JobService:
    return JobService(
        session_factory,
        wallet_service=wallet_service,
        score_service=score_service,
        inspection_queue=InspectionQueue(session_factory, inspector=inspector),
    )


def get_inbox_service(session_factory: sessionmaker = Depends(get_session_factory)) -> InboxService:
    return InboxService(session_factory)


def get_review_service(session_factory: sessionmaker = Depends(get_session_factory)) -> ReviewService:
    return ReviewService(session_factory)
