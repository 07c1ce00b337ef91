"""
Contract repository interfaces.
Contracts with their milestones, amendments, negotiations and reminder records.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from skilllink.domain.models.contract import Contract, ContractAmendment, ContractStatus
from skilllink.domain.models.negotiation import ContractNegotiation
from skilllink.domain.models.reminder import MilestoneReminder, ReminderType


class ContractRepository(ABC):
    """
    Repository interface for the Contract aggregate.
    Saving a contract persists its milestones too.
    """

    @abstractmethod
    def save(self, contract: Contract) -> Contract:
        """
        Save a contract and its milestones.
        Raises ConcurrencyError if the stored version moved on since loading.
        """
        pass

    @abstractmethod
    def find_by_id(self, contract_id: str) -> Optional[Contract]:
        pass

    @abstractmethod
    def find_by_id_for_update(self, contract_id: str) -> Optional[Contract]:
        """Load the contract holding a row lock until the transaction ends."""
        pass

    @abstractmethod
    def find_by_party(self, user_id: str, status: Optional[ContractStatus] = None) -> List[Contract]:
        pass

    @abstractmethod
    def find_live_by_application(self, application_id: str) -> Optional[Contract]:
        """Non-renewal draft, active or disputed contract for an application."""
        pass

    @abstractmethod
    def find_with_milestones_in_progress(self) -> List[Contract]:
        pass


class AmendmentRepository(ABC):

    @abstractmethod
    def save(self, amendment: ContractAmendment) -> ContractAmendment:
        pass

    @abstractmethod
    def find_by_id(self, amendment_id: str) -> Optional[ContractAmendment]:
        pass

    @abstractmethod
    def find_by_contract(self, contract_id: str) -> List[ContractAmendment]:
        pass


class NegotiationRepository(ABC):

    @abstractmethod
    def save(self, negotiation: ContractNegotiation) -> ContractNegotiation:
        pass

    @abstractmethod
    def find_by_id(self, negotiation_id: str) -> Optional[ContractNegotiation]:
        pass

    @abstractmethod
    def find_open_by_application(self, application_id: str) -> Optional[ContractNegotiation]:
        pass

    @abstractmethod
    def find_by_party(self, user_id: str) -> List[ContractNegotiation]:
        pass


class ReminderRepository(ABC):

    @abstractmethod
    def exists(self, milestone_id: str, reminder_type: ReminderType) -> bool:
        pass

    @abstractmethod
    def save(self, reminder: MilestoneReminder) -> MilestoneReminder:
        pass
