"""
Payment repository implementations using SQLAlchemy.
"""

from typing import List, Optional, Tuple

from sqlalchemy import func, or_, case

from skilllink.domain.models.payment import (
    Transaction, Wallet, PaymentProof, TransactionType, TransactionStatus
)
from skilllink.domain.repositories.payment_repository import (
    TransactionRepository, WalletRepository, PaymentProofRepository
)
from skilllink.infrastructure.db.models import TransactionModel, WalletModel, PaymentProofModel
from skilllink.infrastructure.mappers.payment_mapper import (
    TransactionMapper, WalletMapper, PaymentProofMapper
)
from .base import SQLAlchemyRepository


class SQLAlchemyTransactionRepository(SQLAlchemyRepository, TransactionRepository):
    """SQLAlchemy implementation of the ledger."""

    model = TransactionModel
    entity_name = "Transaction"

    def __init__(self, session):
        super().__init__(session, TransactionMapper())

    def save(self, transaction: Transaction) -> Transaction:
        return self._save(transaction)

    def find_by_id(self, transaction_id: str, for_update: bool = False) -> Optional[Transaction]:
        model = self._get_model(transaction_id, for_update)
        return self.mapper.model_to_domain(model) if model else None

    def find_by_external_reference(self, reference: str, for_update: bool = False) -> Optional[Transaction]:
        query = self.session.query(TransactionModel).filter(TransactionModel.external_reference == reference)
        if for_update:
            query = query.populate_existing().with_for_update()
        model = query.first()
        return self.mapper.model_to_domain(model) if model else None

    def find_pending_escrow(self, contract_id: str) -> Optional[Transaction]:
        model = (
            self.session.query(TransactionModel)
            .filter_by(
                contract_id=contract_id,
                transaction_type=TransactionType.ESCROW,
                status=TransactionStatus.PENDING
            )
            .order_by(TransactionModel.created_at.desc())
            .first()
        )
        return self.mapper.model_to_domain(model) if model else None

    def find_by_milestone(self, milestone_id: str, transaction_type: TransactionType) -> Optional[Transaction]:
        model = self.session.query(TransactionModel).filter_by(
            milestone_id=milestone_id,
            transaction_type=transaction_type
        ).first()
        return self.mapper.model_to_domain(model) if model else None

    def held_balance(self, contract_id: str) -> int:
        signed_amount = case(
            (TransactionModel.transaction_type == TransactionType.ESCROW, TransactionModel.amount_minor_units),
            else_=-TransactionModel.amount_minor_units
        )
        balance = (
            self.session.query(func.coalesce(func.sum(signed_amount), 0))
            .filter(
                TransactionModel.contract_id == contract_id,
                TransactionModel.status == TransactionStatus.COMPLETED,
                TransactionModel.transaction_type.in_((
                    TransactionType.ESCROW, TransactionType.RELEASE, TransactionType.REFUND
                ))
            )
            .scalar()
        )
        return int(balance or 0)

    def find_by_user(
        self,
        user_id: str,
        transaction_type: Optional[TransactionType] = None,
        limit: int = 20,
        offset: int = 0
    ) -> Tuple[List[Transaction], int]:
        query = self.session.query(TransactionModel).filter(or_(
            TransactionModel.from_user_id == user_id,
            TransactionModel.to_user_id == user_id
        ))
        if transaction_type is not None:
            query = query.filter(TransactionModel.transaction_type == transaction_type)

        total = query.with_entities(func.count(TransactionModel.id)).scalar() or 0
        models = query.order_by(TransactionModel.created_at.desc()).offset(offset).limit(limit).all()
        return [self.mapper.model_to_domain(model) for model in models], total

    def find_by_type_and_status(
        self,
        transaction_type: TransactionType,
        status: TransactionStatus,
        limit: int = 20,
        offset: int = 0
    ) -> Tuple[List[Transaction], int]:
        query = self.session.query(TransactionModel).filter_by(
            transaction_type=transaction_type,
            status=status
        )
        total = query.with_entities(func.count(TransactionModel.id)).scalar() or 0
        models = query.order_by(TransactionModel.created_at).offset(offset).limit(limit).all()
        return [self.mapper.model_to_domain(model) for model in models], total

    def total_for_user(
        self,
        user_id: str,
        transaction_type: TransactionType,
        status: TransactionStatus,
        received: bool
    ) -> int:
        user_column = TransactionModel.to_user_id if received else TransactionModel.from_user_id
        amount_column = (
            TransactionModel.net_amount_minor_units if received else TransactionModel.amount_minor_units
        )
        total = (
            self.session.query(func.coalesce(func.sum(amount_column), 0))
            .filter(
                user_column == user_id,
                TransactionModel.transaction_type == transaction_type,
                TransactionModel.status == status
            )
            .scalar()
        )
        return int(total or 0)

    def count_pending_for_user(self, user_id: str) -> int:
        return (
            self.session.query(func.count(TransactionModel.id))
            .filter(
                or_(TransactionModel.from_user_id == user_id, TransactionModel.to_user_id == user_id),
                TransactionModel.status == TransactionStatus.PENDING
            )
            .scalar()
        ) or 0


class SQLAlchemyWalletRepository(SQLAlchemyRepository, WalletRepository):

    model = WalletModel
    entity_name = "Wallet"

    def __init__(self, session):
        super().__init__(session, WalletMapper())

    def save(self, wallet: Wallet) -> Wallet:
        return self._save(wallet)

    def find_by_user_id(self, user_id: str, for_update: bool = False) -> Optional[Wallet]:
        query = self.session.query(WalletModel).filter(WalletModel.user_id == user_id)
        if for_update:
            query = query.populate_existing().with_for_update()
        model = query.first()
        return self.mapper.model_to_domain(model) if model else None


class SQLAlchemyPaymentProofRepository(SQLAlchemyRepository, PaymentProofRepository):

    model = PaymentProofModel
    entity_name = "PaymentProof"

    def __init__(self, session):
        super().__init__(session, PaymentProofMapper())

    def save(self, proof: PaymentProof) -> PaymentProof:
        return self._save(proof)

    def find_by_id(self, proof_id: str) -> Optional[PaymentProof]:
        model = self._get_model(proof_id)
        return self.mapper.model_to_domain(model) if model else None

    def find_unreviewed_by_transaction(self, transaction_id: str) -> Optional[PaymentProof]:
        model = (
            self.session.query(PaymentProofModel)
            .filter(
                PaymentProofModel.transaction_id == transaction_id,
                PaymentProofModel.verified_at.is_(None)
            )
            .first()
        )
        return self.mapper.model_to_domain(model) if model else None

    def list_unreviewed(self, limit: int = 20, offset: int = 0) -> Tuple[List[PaymentProof], int]:
        query = self.session.query(PaymentProofModel).filter(PaymentProofModel.verified_at.is_(None))
        total = query.with_entities(func.count(PaymentProofModel.id)).scalar() or 0
        models = query.order_by(PaymentProofModel.created_at).offset(offset).limit(limit).all()
        return [self.mapper.model_to_domain(model) for model in models], total
