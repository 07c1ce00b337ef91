"""
Dispute repository interfaces.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional, Tuple

from skilllink.domain.models.dispute import Dispute, DisputeEscalation, DisputeStatus


class DisputeRepository(ABC):

    @abstractmethod
    def save(self, dispute: Dispute) -> Dispute:
        pass

    @abstractmethod
    def find_by_id(self, dispute_id: str) -> Optional[Dispute]:
        pass

    @abstractmethod
    def find_unresolved_by_contract(self, contract_id: str) -> Optional[Dispute]:
        pass

    @abstractmethod
    def find_by_contract_ids(self, contract_ids: List[str]) -> List[Dispute]:
        pass

    @abstractmethod
    def list_by_status(
        self,
        status: Optional[DisputeStatus] = None,
        limit: int = 20,
        offset: int = 0
    ) -> Tuple[List[Dispute], int]:
        pass

    @abstractmethod
    def find_open_created_before(self, cutoff: datetime) -> List[Dispute]:
        """Open disputes created at or before ``cutoff``."""
        pass


class EscalationRepository(ABC):

    @abstractmethod
    def save(self, escalation: DisputeEscalation) -> DisputeEscalation:
        pass

    @abstractmethod
    def exists_for_dispute(self, dispute_id: str) -> bool:
        pass
