"""
Verification repository interfaces.
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

from skilllink.domain.models.verification import (
    VerificationBadge, VerificationRequest, BadgeType, VerificationRequestStatus
)


class BadgeRepository(ABC):

    @abstractmethod
    def save(self, badge: VerificationBadge) -> VerificationBadge:
        pass

    @abstractmethod
    def find_by_talent(self, talent_id: str) -> List[VerificationBadge]:
        pass

    @abstractmethod
    def find_by_talent_and_type(self, talent_id: str, badge_type: BadgeType) -> Optional[VerificationBadge]:
        pass


class VerificationRequestRepository(ABC):

    @abstractmethod
    def save(self, request: VerificationRequest) -> VerificationRequest:
        pass

    @abstractmethod
    def find_by_id(self, request_id: str) -> Optional[VerificationRequest]:
        pass

    @abstractmethod
    def find_pending(self, talent_id: str, request_type: BadgeType) -> Optional[VerificationRequest]:
        pass

    @abstractmethod
    def find_by_talent(self, talent_id: str) -> List[VerificationRequest]:
        pass

    @abstractmethod
    def list_by_status(
        self,
        status: Optional[VerificationRequestStatus] = None,
        limit: int = 20,
        offset: int = 0
    ) -> Tuple[List[VerificationRequest], int]:
        pass
