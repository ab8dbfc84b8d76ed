"""
API dependencies - shared across all routes.
"""
import uuid
from typing import Optional

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlmodel.ext.asyncio.session import AsyncSession

from leadqual.database import get_session
from leadqual.config import settings
from leadqual.core.security import verify_token
from leadqual.core.exceptions import UnauthorizedError
from leadqual.repositories.lead_repo import LeadRepository
from leadqual.repositories.scoring_repo import LeadScoreRepository
from leadqual.repositories.user_repo import UserRepository
from leadqual.services.lead_pipeline_service import LeadPipelineService


# Tokens are issued by the identity service; this API only verifies them
oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_PREFIX}/auth/login", auto_error=False)


async def get_current_user_id(token: Optional[str] = Depends(oauth2_scheme)) -> uuid.UUID:
    """
    Resolve the caller from the bearer token.
    Only decodes the token; the user row is looked up later.
    """
    if not token:
        raise UnauthorizedError()

    payload = verify_token(token)
    if not payload:
        raise UnauthorizedError("Could not validate credentials")

    try:
        return uuid.UUID(str(payload.get("user_id")))
    except ValueError:
        raise UnauthorizedError("Could not validate credentials")


def get_user_repository(session: AsyncSession = Depends(get_session)) -> UserRepository:
    return UserRepository(session)


def get_lead_repository(session: AsyncSession = Depends(get_session)) -> LeadRepository:
    return LeadRepository(session)


def get_score_repository(session: AsyncSession = Depends(get_session)) -> LeadScoreRepository:
    return LeadScoreRepository(session)


def get_pipeline_service(
    user_repo: UserRepository = Depends(get_user_repository),
    lead_repo: LeadRepository = Depends(get_lead_repository),
    score_repo: LeadScoreRepository = Depends(get_score_repository)
) -> LeadPipelineService:
    return LeadPipelineService(user_repo, lead_repo, score_repo)
