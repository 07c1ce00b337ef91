"""
SQLAlchemy models for the database.
Maps domain entities to database tables.
"""

from sqlalchemy import (
    Column, Integer, String, DateTime, Text, Boolean, Float,
    ForeignKey, JSON, Enum as SQLEnum,
    Index, UniqueConstraint, CheckConstraint
)
from sqlalchemy.orm import relationship

from skilllink.domain.models.user import UserRole, VerificationLevel
from skilllink.domain.models.job import (
    JobStatus, JobVerificationStatus, ApplicationStatus, ScrapingStatus
)
from skilllink.domain.models.contract import (
    ContractStatus, EscrowStatus, MilestoneStatus, AmendmentType, AmendmentStatus
)
from skilllink.domain.models.negotiation import NegotiationStatus
from skilllink.domain.models.payment import TransactionType, TransactionStatus, PaymentProvider
from skilllink.domain.models.dispute import DisputeStatus, DisputeOutcome
from skilllink.domain.models.verification import BadgeType, BadgeLevel, VerificationRequestStatus
from skilllink.domain.models.reminder import ReminderType
from skilllink.domain.models.alert import AlertFrequency

from .database import Base


def _enum(enum_class):
    """Store enum values (not names) in a portable VARCHAR column."""
    return SQLEnum(
        enum_class,
        values_callable=lambda members: [member.value for member in members],
        native_enum=False,
        length=32,
    )


class UserRoleModel(Base):
    """Role assignments - a user may hold several roles"""
    __tablename__ = 'user_roles'

    id = Column(String(36), primary_key=True)
    user_id = Column(String(36), nullable=False)
    role = Column(_enum(UserRole), nullable=False)
    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)

    __table_args__ = (
        UniqueConstraint('user_id', 'role', name='unique_user_role'),
        Index('idx_user_roles_user', 'user_id'),
    )


class ProfileModel(Base):
    """Talent profiles - keyed by the identity provider user id"""
    __tablename__ = 'profiles'

    id = Column(String(36), primary_key=True)
    user_id = Column(String(36), nullable=False, unique=True)
    full_name = Column(String(200), nullable=False)
    email = Column(String(255))
    phone_number = Column(String(50))
    bio = Column(Text)
    location = Column(String(255))
    skills = Column(JSON)

    rating = Column(Float, default=0.0)
    total_reviews = Column(Integer, default=0)
    total_gigs_completed = Column(Integer, default=0)
    id_verified = Column(Boolean, default=False)

    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)

    # Optimistic locking: every UPDATE checks and bumps the version
    version = Column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}


class EmployerModel(Base):
    """Employer accounts"""
    __tablename__ = 'employers'

    id = Column(String(36), primary_key=True)
    user_id = Column(String(36), nullable=False, unique=True)
    company_name = Column(String(200), nullable=False)
    email = Column(String(255))
    company_description = Column(Text)
    website = Column(String(500))

    verified = Column(Boolean, default=False)
    verification_level = Column(_enum(VerificationLevel), default=VerificationLevel.UNVERIFIED)
    verification_date = Column(DateTime)
    verified_by = Column(String(36))
    verification_notes = Column(Text)

    total_jobs_posted = Column(Integer, default=0)
    successful_hires = Column(Integer, default=0)

    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)

    # Optimistic locking: every UPDATE checks and bumps the version
    version = Column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        Index('idx_employers_verified', 'verified'),
    )


class JobModel(Base):
    """Job postings, both native and aggregated"""
    __tablename__ = 'jobs'

    id = Column(String(36), primary_key=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    employer_id = Column(String(36))
    company_name = Column(String(255))
    location = Column(String(255))
    remote = Column(Boolean, default=False)
    budget_min = Column(Integer, nullable=False)
    budget_max = Column(Integer, nullable=False)
    currency = Column(String(3), default='USD')
    required_skills = Column(JSON)
    duration_days = Column(Integer, default=30)

    status = Column(_enum(JobStatus), nullable=False, default=JobStatus.OPEN)
    source = Column(String(50), nullable=False, default='platform')
    external_url = Column(String(1000))
    verification_status = Column(
        _enum(JobVerificationStatus), nullable=False, default=JobVerificationStatus.UNVERIFIED
    )
    is_featured = Column(Boolean, default=False)
    featured_until = Column(DateTime)

    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)

    applications = relationship("JobApplicationModel", back_populates="job")

    # Optimistic locking: every UPDATE checks and bumps the version
    version = Column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        Index('idx_jobs_status', 'status', 'verification_status'),
        Index('idx_jobs_title_company', 'title', 'company_name'),
        Index('idx_jobs_employer', 'employer_id'),
        Index('idx_jobs_featured', 'is_featured', 'featured_until'),
    )


class JobApplicationModel(Base):
    """Applications from talent to jobs"""
    __tablename__ = 'job_applications'

    id = Column(String(36), primary_key=True)
    job_id = Column(String(36), ForeignKey('jobs.id'), nullable=False)
    applicant_id = Column(String(36), nullable=False)
    proposal_text = Column(Text, nullable=False)
    status = Column(_enum(ApplicationStatus), nullable=False, default=ApplicationStatus.PENDING)

    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)

    job = relationship("JobModel", back_populates="applications")

    __table_args__ = (
        UniqueConstraint('job_id', 'applicant_id', name='unique_application_per_job'),
        Index('idx_applications_applicant', 'applicant_id'),
    )


class JobScrapingLogModel(Base):
    """One row per aggregation run"""
    __tablename__ = 'job_scraping_logs'

    id = Column(String(36), primary_key=True)
    jobs_found = Column(Integer, default=0)
    jobs_created = Column(Integer, default=0)
    jobs_rejected = Column(Integer, default=0)
    execution_time_ms = Column(Integer, default=0)
    status = Column(_enum(ScrapingStatus), nullable=False)
    error_message = Column(Text)

    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)


class JobAlertModel(Base):
    """Saved job searches emailed to talent"""
    __tablename__ = 'job_alerts'

    id = Column(String(36), primary_key=True)
    user_id = Column(String(36), nullable=False)
    skills = Column(JSON)
    locations = Column(JSON)
    min_budget = Column(Integer, nullable=False, default=0)
    remote_only = Column(Boolean, default=False)
    frequency = Column(_enum(AlertFrequency), nullable=False, default=AlertFrequency.DAILY)
    active = Column(Boolean, nullable=False, default=True)
    last_sent_at = Column(DateTime)

    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)

    __table_args__ = (
        Index('idx_job_alerts_user', 'user_id'),
        Index('idx_job_alerts_active', 'active'),
        CheckConstraint('min_budget >= 0', name='check_alert_min_budget'),
    )


class ContractModel(Base):
    """Contracts between an employer and a talent"""
    __tablename__ = 'contracts'

    id = Column(String(36), primary_key=True)
    job_id = Column(String(36), ForeignKey('jobs.id'), nullable=False)
    application_id = Column(String(36), ForeignKey('job_applications.id'))
    employer_id = Column(String(36), nullable=False)
    talent_id = Column(String(36), nullable=False)
    total_amount_minor_units = Column(Integer, nullable=False)
    currency = Column(String(3), nullable=False, default='NGN')
    terms = Column(Text)
    start_date = Column(DateTime)
    end_date = Column(DateTime)
    status = Column(_enum(ContractStatus), nullable=False, default=ContractStatus.DRAFT)
    escrow_status = Column(_enum(EscrowStatus), nullable=False, default=EscrowStatus.UNFUNDED)
    parent_contract_id = Column(String(36), ForeignKey('contracts.id'))
    is_renewal = Column(Boolean, default=False)

    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)

    milestones = relationship(
        "MilestoneModel",
        back_populates="contract",
        cascade="all, delete-orphan",
        order_by="MilestoneModel.order_index",
    )

    # Optimistic locking: every UPDATE checks and bumps the version
    version = Column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        CheckConstraint('total_amount_minor_units > 0', name='check_contract_amount_positive'),
        Index('idx_contracts_employer', 'employer_id'),
        Index('idx_contracts_talent', 'talent_id'),
        Index('idx_contracts_application', 'application_id'),
    )


class MilestoneModel(Base):
    """Milestones - owned by their contract"""
    __tablename__ = 'milestones'

    id = Column(String(36), primary_key=True)
    contract_id = Column(String(36), ForeignKey('contracts.id'), nullable=False)
    title = Column(String(255), nullable=False)
    description = Column(Text)
    amount_minor_units = Column(Integer, nullable=False)
    due_date = Column(DateTime)
    status = Column(_enum(MilestoneStatus), nullable=False, default=MilestoneStatus.PENDING)
    depends_on = Column(String(36))
    order_index = Column(Integer, default=0)
    submitted_at = Column(DateTime)
    approved_at = Column(DateTime)
    released = Column(Boolean, nullable=False, default=False)
    released_at = Column(DateTime)

    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)

    contract = relationship("ContractModel", back_populates="milestones")

    __table_args__ = (
        CheckConstraint('amount_minor_units > 0', name='check_milestone_amount_positive'),
        Index('idx_milestones_status_due', 'status', 'due_date'),
    )


class ContractAmendmentModel(Base):
    """Proposed changes to a contract"""
    __tablename__ = 'contract_amendments'

    id = Column(String(36), primary_key=True)
    contract_id = Column(String(36), ForeignKey('contracts.id'), nullable=False)
    proposed_by = Column(String(36), nullable=False)
    amendment_type = Column(_enum(AmendmentType), nullable=False)
    amendment_data = Column(JSON, nullable=False)
    status = Column(_enum(AmendmentStatus), nullable=False, default=AmendmentStatus.PENDING)
    approved_by = Column(String(36))
    rejection_reason = Column(Text)
    reviewed_at = Column(DateTime)

    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)

    __table_args__ = (
        Index('idx_amendments_contract', 'contract_id'),
    )


class ContractNegotiationModel(Base):
    """Offer and counter offer before a contract is drawn up"""
    __tablename__ = 'contract_negotiations'

    id = Column(String(36), primary_key=True)
    job_id = Column(String(36), ForeignKey('jobs.id'), nullable=False)
    application_id = Column(String(36), ForeignKey('job_applications.id'), nullable=False)
    employer_id = Column(String(36), nullable=False)
    talent_id = Column(String(36), nullable=False)
    proposed_amount_minor_units = Column(Integer, nullable=False)
    terms = Column(Text)
    counter_offer_amount_minor_units = Column(Integer)
    counter_terms = Column(Text)
    status = Column(_enum(NegotiationStatus), nullable=False, default=NegotiationStatus.PENDING)
    contract_id = Column(String(36), ForeignKey('contracts.id'))

    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)

    # Optimistic locking: every UPDATE checks and bumps the version
    version = Column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        Index('idx_negotiations_application', 'application_id', 'status'),
    )


class TransactionModel(Base):
    """Append-only money ledger"""
    __tablename__ = 'transactions'

    id = Column(String(36), primary_key=True)
    transaction_type = Column(_enum(TransactionType), nullable=False)
    status = Column(_enum(TransactionStatus), nullable=False, default=TransactionStatus.PENDING)
    amount_minor_units = Column(Integer, nullable=False)
    platform_fee_minor_units = Column(Integer, nullable=False, default=0)
    net_amount_minor_units = Column(Integer, nullable=False)
    currency = Column(String(3), nullable=False)

    job_id = Column(String(36), ForeignKey('jobs.id'))
    contract_id = Column(String(36), ForeignKey('contracts.id'))
    milestone_id = Column(String(36), ForeignKey('milestones.id'))
    from_user_id = Column(String(36))
    to_user_id = Column(String(36))

    description = Column(Text)
    payment_provider = Column(_enum(PaymentProvider), nullable=False, default=PaymentProvider.INTERNAL)
    external_reference = Column(String(255), unique=True)
    payment_metadata = Column(JSON)
    completed_at = Column(DateTime)

    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)

    __table_args__ = (
        UniqueConstraint('milestone_id', 'transaction_type', name='unique_transaction_per_milestone'),
        CheckConstraint('amount_minor_units > 0', name='check_transaction_amount_positive'),
        CheckConstraint(
            'net_amount_minor_units = amount_minor_units - platform_fee_minor_units',
            name='check_transaction_net'
        ),
        Index('idx_transactions_contract', 'contract_id', 'transaction_type', 'status'),
        Index('idx_transactions_from_user', 'from_user_id'),
        Index('idx_transactions_to_user', 'to_user_id'),
    )


class WalletModel(Base):
    """Spendable balances"""
    __tablename__ = 'wallets'

    id = Column(String(36), primary_key=True)
    user_id = Column(String(36), nullable=False, unique=True)
    balance_minor_units = Column(Integer, nullable=False, default=0)
    currency = Column(String(3), nullable=False)

    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)

    # Optimistic locking: every UPDATE checks and bumps the version
    version = Column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        CheckConstraint('balance_minor_units >= 0', name='check_wallet_balance_non_negative'),
    )


class PaymentProofModel(Base):
    """Uploaded evidence of manual transfers"""
    __tablename__ = 'payment_proofs'

    id = Column(String(36), primary_key=True)
    transaction_id = Column(String(36), ForeignKey('transactions.id'), nullable=False)
    user_id = Column(String(36), nullable=False)
    proof_url = Column(String(1000), nullable=False)
    bank_details = Column(JSON)
    notes = Column(Text)
    verified_by = Column(String(36))
    verified_at = Column(DateTime)
    rejected = Column(Boolean, default=False)
    admin_notes = Column(Text)

    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)

    __table_args__ = (
        Index('idx_payment_proofs_transaction', 'transaction_id'),
    )


class DisputeModel(Base):
    """Disputes raised on contracts"""
    __tablename__ = 'disputes'

    id = Column(String(36), primary_key=True)
    contract_id = Column(String(36), ForeignKey('contracts.id'), nullable=False)
    raised_by = Column(String(36), nullable=False)
    reason = Column(Text, nullable=False)
    status = Column(_enum(DisputeStatus), nullable=False, default=DisputeStatus.OPEN)
    resolution = Column(Text)
    outcome = Column(_enum(DisputeOutcome))
    resolved_by = Column(String(36))
    resolved_at = Column(DateTime)

    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)

    # Optimistic locking: every UPDATE checks and bumps the version
    version = Column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        Index('idx_disputes_contract', 'contract_id', 'status'),
        Index('idx_disputes_status_created', 'status', 'created_at'),
    )


class DisputeEscalationModel(Base):
    """Automatic hand-off of stale disputes"""
    __tablename__ = 'dispute_escalations'

    id = Column(String(36), primary_key=True)
    dispute_id = Column(String(36), ForeignKey('disputes.id'), nullable=False, unique=True)
    escalated_to = Column(String(36), nullable=False)
    escalation_reason = Column(String(100), nullable=False)
    notes = Column(Text)

    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)


class VerificationBadgeModel(Base):
    """Trust badges"""
    __tablename__ = 'verification_badges'

    id = Column(String(36), primary_key=True)
    talent_id = Column(String(36), nullable=False)
    badge_type = Column(_enum(BadgeType), nullable=False)
    badge_level = Column(_enum(BadgeLevel), nullable=False)
    issued_by = Column(String(36))
    issued_at = Column(DateTime, nullable=False)

    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)

    __table_args__ = (
        UniqueConstraint('talent_id', 'badge_type', name='unique_badge_per_type'),
    )


class VerificationRequestModel(Base):
    """Talent requests for a badge"""
    __tablename__ = 'verification_requests'

    id = Column(String(36), primary_key=True)
    talent_id = Column(String(36), nullable=False)
    request_type = Column(_enum(BadgeType), nullable=False)
    verification_data = Column(JSON)
    status = Column(
        _enum(VerificationRequestStatus), nullable=False, default=VerificationRequestStatus.PENDING
    )
    reviewed_by = Column(String(36))
    reviewed_at = Column(DateTime)
    admin_notes = Column(Text)

    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)

    __table_args__ = (
        Index('idx_verification_requests_talent', 'talent_id', 'request_type', 'status'),
    )


class MilestoneReminderModel(Base):
    """Deadline reminders already sent"""
    __tablename__ = 'milestone_reminders'

    id = Column(String(36), primary_key=True)
    milestone_id = Column(String(36), ForeignKey('milestones.id'), nullable=False)
    reminder_type = Column(_enum(ReminderType), nullable=False)

    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)

    __table_args__ = (
        UniqueConstraint('milestone_id', 'reminder_type', name='unique_reminder_per_milestone'),
    )


def create_all_tables(engine):
    """Create all tables. Development and tests only; deployments use Alembic."""
    Base.metadata.create_all(bind=engine)


def drop_all_tables(engine):
    Base.metadata.drop_all(bind=engine)
