"""
Shared fixtures: an in-memory database, a unit of work over it and a small
seeded marketplace (an employer, a talent and an admin).
"""

import os

os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from skilllink.application.use_cases.settlement import build_settlement
from skilllink.domain.events.base import get_event_dispatcher
from skilllink.domain.models.contract import Contract
from skilllink.domain.models.job import Job, JobApplication
from skilllink.domain.models.payment import PaymentProvider
from skilllink.domain.models.user import Employer, Profile, RoleAssignment, UserRole
from skilllink.infrastructure.db.models import create_all_tables, drop_all_tables
from skilllink.infrastructure.db.unit_of_work import SQLAlchemyUnitOfWork


EMPLOYER_ID = "employer-1"
TALENT_ID = "talent-1"
ADMIN_ID = "admin-1"


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_all_tables(engine)
    yield engine
    drop_all_tables(engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def uow(db_session):
    return SQLAlchemyUnitOfWork(db_session)


@pytest.fixture(autouse=True)
def event_dispatcher():
    """Each test starts without registered handlers or logged events."""
    dispatcher = get_event_dispatcher()
    dispatcher.clear_handlers()
    dispatcher.clear_event_log()
    yield dispatcher
    dispatcher.clear_handlers()
    dispatcher.clear_event_log()


class Marketplace:
    """Builds the rows most tests need, committed through the unit of work."""

    employer_id = EMPLOYER_ID
    talent_id = TALENT_ID
    admin_id = ADMIN_ID

    def __init__(self, uow: SQLAlchemyUnitOfWork):
        self.uow = uow

    def _commit(self):
        self.uow.commit()
        self.uow.collect_events()

    def seed_people(self):
        for user_id, role in (
            (EMPLOYER_ID, UserRole.EMPLOYER),
            (TALENT_ID, UserRole.TALENT),
            (ADMIN_ID, UserRole.ADMIN),
        ):
            self.uow.roles.add(RoleAssignment(user_id=user_id, role=role))
        self.uow.profiles.save(Profile(user_id=TALENT_ID, full_name="Ada Talent", email="ada@example.com"))
        self.uow.profiles.save(Profile(user_id=ADMIN_ID, full_name="Grace Admin", email="admin@example.com"))
        self.uow.employers.save(Employer(user_id=EMPLOYER_ID, company_name="Lagos Widgets", email="hire@widgets.ng"))
        self._commit()

    def open_job(self, **overrides) -> Job:
        fields = dict(
            title="Build a payments dashboard",
            description="React dashboard for a fintech startup in Lagos.",
            employer_id=EMPLOYER_ID,
            company_name="Lagos Widgets",
            budget_min=500,
            budget_max=900,
        )
        fields.update(overrides)
        job = self.uow.jobs.save(Job(**fields))
        self._commit()
        return job

    def application(self, job: Job, accepted: bool = True) -> JobApplication:
        application = JobApplication.submit(job, TALENT_ID, "I have built three dashboards like this one.")
        if accepted:
            application.accept(job.title)
        saved = self.uow.applications.save(application)
        self._commit()
        return saved

    def draft_contract(self, milestones=(("Design", 40000), ("Build", 60000)), total: int = 100000) -> Contract:
        job = self.open_job()
        application = self.application(job)
        contract = Contract.create(
            job_id=job.id,
            application_id=application.id,
            employer_id=EMPLOYER_ID,
            talent_id=TALENT_ID,
            total_amount_minor_units=total,
            currency="NGN",
        )
        for title, amount in milestones:
            contract.add_milestone(title, amount)
        saved = self.uow.contracts.save(contract)
        self._commit()
        return saved

    def funded_contract(self, **kwargs) -> Contract:
        contract = self.draft_contract(**kwargs)
        settlement = build_settlement(self.uow)
        transaction = settlement.escrow_service.open_escrow(contract, PaymentProvider.MANUAL_TRANSFER)
        self.uow.transactions.save(transaction)
        self.uow.contracts.save(contract)
        settlement.confirm_escrow(transaction)
        self._commit()
        return self.uow.contracts.find_by_id(contract.id)


@pytest.fixture
def marketplace(uow):
    market = Marketplace(uow)
    market.seed_people()
    return market
