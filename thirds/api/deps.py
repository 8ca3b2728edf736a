"""
Dependency injection for API endpoints.

This module provides FastAPI dependencies that inject the correct
infrastructure implementations based on environment configuration.
"""

from functools import lru_cache
from typing import Annotated, Optional

from fastapi import Depends, Header, HTTPException, status

from thirds.core.config import Settings, get_settings
from thirds.core.logger import setup_logger
from thirds.interfaces.auth_provider import IAuthProvider, User
from thirds.interfaces.llm_provider import ILLMProvider
from thirds.interfaces.schedule_repository import IScheduleRepository
from thirds.interfaces.task_repository import ITaskRepository

logger = setup_logger(__name__)


# ===========================================
# Repository Dependencies
# ===========================================


@lru_cache()
def get_schedule_repository() -> IScheduleRepository:
    """Get schedule repository instance."""
    from thirds.infrastructure.local.schedule_repository import SqliteScheduleRepository

    return SqliteScheduleRepository()


@lru_cache()
def get_task_repository() -> ITaskRepository:
    """Get task repository instance."""
    from thirds.infrastructure.local.task_repository import SqliteTaskRepository

    return SqliteTaskRepository()


# ===========================================
# Provider Dependencies
# ===========================================


@lru_cache()
def get_llm_provider() -> Optional[ILLMProvider]:
    """
    Get LLM provider instance based on LLM_PROVIDER setting.

    Returns None when AI narratives are disabled or the provider cannot be
    configured; insights then use rule-based suggestions only.
    """
    settings = get_settings()
    if not settings.INSIGHTS_AI_ENABLED:
        return None

    try:
        if settings.LLM_PROVIDER == "litellm":
            from thirds.infrastructure.local.litellm_provider import LiteLLMProvider

            return LiteLLMProvider(settings.LITELLM_MODEL)

        from thirds.infrastructure.local.gemini_api_provider import GeminiAPIProvider

        return GeminiAPIProvider(settings.GEMINI_MODEL)
    except ValueError as e:
        logger.warning(f"LLM provider unavailable, insights use rules only: {e}")
        return None


@lru_cache()
def get_auth_provider() -> IAuthProvider:
    """Get auth provider instance."""
    settings = get_settings()
    from thirds.infrastructure.local.mock_auth import MockAuthProvider

    return MockAuthProvider(enabled=settings.AUTH_REQUIRED)


# ===========================================
# Authentication
# ===========================================


async def get_current_user(
    authorization: Annotated[str | None, Header()] = None,
    auth_provider: IAuthProvider = Depends(get_auth_provider),
) -> User:
    """
    Get current authenticated user.

    With authentication disabled, returns the development user.
    """
    if not auth_provider.is_enabled():
        return User(id="dev_user", email="dev@example.com", display_name="Developer")

    if not authorization:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authorization header required",
        )

    # Extract token from "Bearer <token>"
    try:
        scheme, token = authorization.split()
        if scheme.lower() != "bearer":
            raise ValueError("Invalid scheme")
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authorization header format",
        )

    try:
        return await auth_provider.verify_token(token)
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
        )


# ===========================================
# Type Aliases for Dependency Injection
# ===========================================

ScheduleRepo = Annotated[IScheduleRepository, Depends(get_schedule_repository)]
TaskRepo = Annotated[ITaskRepository, Depends(get_task_repository)]
LLMProvider = Annotated[Optional[ILLMProvider], Depends(get_llm_provider)]
AppSettings = Annotated[Settings, Depends(get_settings)]
CurrentUser = Annotated[User, Depends(get_current_user)]
