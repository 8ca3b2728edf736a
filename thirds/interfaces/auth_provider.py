"""
Authentication provider interface.

Identity is owned by an external collaborator; the core only needs a user id.
"""

from abc import ABC, abstractmethod
from typing import Optional

from pydantic import BaseModel


class User(BaseModel):
    """Authenticated user."""

    id: str
    email: Optional[str] = None
    display_name: Optional[str] = None


class IAuthProvider(ABC):
    """Abstract interface for authentication providers."""

    @abstractmethod
    async def verify_token(self, token: str) -> User:
        """
        Verify a bearer token.

        Raises:
            AuthenticationError: token is invalid
        """
        pass

    @abstractmethod
    def is_enabled(self) -> bool:
        """Whether requests must carry a token."""
        pass
