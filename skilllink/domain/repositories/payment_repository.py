"""
Payment repository interfaces.
Ledger rows, wallets and payment proofs.
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

from skilllink.domain.models.payment import (
    Transaction, Wallet, PaymentProof, TransactionType, TransactionStatus
)


class TransactionRepository(ABC):
    """Repository interface for the append-only ledger."""

    @abstractmethod
    def save(self, transaction: Transaction) -> Transaction:
        """
        Save a ledger row.
        Raises DuplicateEntityError when a milestone already has a row of the same type.
        """
        pass

    @abstractmethod
    def find_by_id(self, transaction_id: str, for_update: bool = False) -> Optional[Transaction]:
        pass

    @abstractmethod
    def find_by_external_reference(self, reference: str, for_update: bool = False) -> Optional[Transaction]:
        pass

    @abstractmethod
    def find_pending_escrow(self, contract_id: str) -> Optional[Transaction]:
        pass

    @abstractmethod
    def find_by_milestone(self, milestone_id: str, transaction_type: TransactionType) -> Optional[Transaction]:
        pass

    @abstractmethod
    def held_balance(self, contract_id: str) -> int:
        """
        Funds still held in escrow for a contract:
        completed escrow minus completed releases and refunds, in minor units.
        """
        pass

    @abstractmethod
    def find_by_user(
        self,
        user_id: str,
        transaction_type: Optional[TransactionType] = None,
        limit: int = 20,
        offset: int = 0
    ) -> Tuple[List[Transaction], int]:
        """Rows where the user sent or received money, newest first."""
        pass

    @abstractmethod
    def find_by_type_and_status(
        self,
        transaction_type: TransactionType,
        status: TransactionStatus,
        limit: int = 20,
        offset: int = 0
    ) -> Tuple[List[Transaction], int]:
        pass

    @abstractmethod
    def total_for_user(
        self,
        user_id: str,
        transaction_type: TransactionType,
        status: TransactionStatus,
        received: bool
    ) -> int:
        """Sum of amounts a user received (or sent) for one type and status."""
        pass

    @abstractmethod
    def count_pending_for_user(self, user_id: str) -> int:
        """Pending rows where the user is sender or receiver."""
        pass


class WalletRepository(ABC):

    @abstractmethod
    def save(self, wallet: Wallet) -> Wallet:
        pass

    @abstractmethod
    def find_by_user_id(self, user_id: str, for_update: bool = False) -> Optional[Wallet]:
        pass


class PaymentProofRepository(ABC):

    @abstractmethod
    def save(self, proof: PaymentProof) -> PaymentProof:
        pass

    @abstractmethod
    def find_by_id(self, proof_id: str) -> Optional[PaymentProof]:
        pass

    @abstractmethod
    def find_unreviewed_by_transaction(self, transaction_id: str) -> Optional[PaymentProof]:
        pass

    @abstractmethod
    def list_unreviewed(self, limit: int = 20, offset: int = 0) -> Tuple[List[PaymentProof], int]:
        pass
