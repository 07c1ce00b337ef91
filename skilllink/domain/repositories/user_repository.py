"""
User repository interfaces.
Roles, talent profiles and employer accounts.
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

from skilllink.domain.models.user import Profile, Employer, RoleAssignment, UserRole


class RoleRepository(ABC):
    """Repository interface for role assignments."""

    @abstractmethod
    def add(self, assignment: RoleAssignment) -> RoleAssignment:
        """Grant a role. Granting an already held role is a no-op."""
        pass

    @abstractmethod
    def get_roles(self, user_id: str) -> List[UserRole]:
        pass

    @abstractmethod
    def has_role(self, user_id: str, role: UserRole) -> bool:
        pass

    @abstractmethod
    def find_user_ids_with_role(self, role: UserRole) -> List[str]:
        pass


class ProfileRepository(ABC):
    """Repository interface for talent profiles."""

    @abstractmethod
    def save(self, profile: Profile) -> Profile:
        pass

    @abstractmethod
    def find_by_user_id(self, user_id: str) -> Optional[Profile]:
        pass

    @abstractmethod
    def find_by_user_ids(self, user_ids: List[str]) -> List[Profile]:
        pass


class EmployerRepository(ABC):
    """Repository interface for employer accounts."""

    @abstractmethod
    def save(self, employer: Employer) -> Employer:
        pass

    @abstractmethod
    def find_by_user_id(self, user_id: str) -> Optional[Employer]:
        pass

    @abstractmethod
    def list_by_verification(
        self,
        verified: Optional[bool] = None,
        limit: int = 20,
        offset: int = 0
    ) -> Tuple[List[Employer], int]:
        """
        List employers for the verification queue.
        Returns the page and the total number of matches.
        """
        pass
