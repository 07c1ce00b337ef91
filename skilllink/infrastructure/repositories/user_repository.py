"""
User repository implementations using SQLAlchemy.
"""

from typing import List, Optional, Tuple

from sqlalchemy import func

from skilllink.domain.models.user import Profile, Employer, RoleAssignment, UserRole
from skilllink.domain.repositories.user_repository import (
    RoleRepository, ProfileRepository, EmployerRepository
)
from skilllink.infrastructure.db.models import UserRoleModel, ProfileModel, EmployerModel
from skilllink.infrastructure.mappers.user_mapper import RoleMapper, ProfileMapper, EmployerMapper
from .base import SQLAlchemyRepository


class SQLAlchemyRoleRepository(SQLAlchemyRepository, RoleRepository):
    """SQLAlchemy implementation of role repository."""

    model = UserRoleModel
    entity_name = "UserRole"

    def __init__(self, session):
        super().__init__(session, RoleMapper())

    def add(self, assignment: RoleAssignment) -> RoleAssignment:
        existing = self.session.query(UserRoleModel).filter_by(
            user_id=assignment.user_id,
            role=assignment.role
        ).first()
        if existing:
            return self.mapper.model_to_domain(existing)

        self.session.add(self.mapper.domain_to_model(assignment))
        self._flush()
        self._track(assignment)
        return assignment

    def get_roles(self, user_id: str) -> List[UserRole]:
        rows = self.session.query(UserRoleModel.role).filter_by(user_id=user_id).all()
        return [row.role for row in rows]

    def has_role(self, user_id: str, role: UserRole) -> bool:
        return self.session.query(UserRoleModel.id).filter_by(
            user_id=user_id,
            role=role
        ).first() is not None

    def find_user_ids_with_role(self, role: UserRole) -> List[str]:
        rows = (
            self.session.query(UserRoleModel.user_id)
            .filter_by(role=role)
            .order_by(UserRoleModel.created_at)
            .all()
        )
        return [row.user_id for row in rows]


class SQLAlchemyProfileRepository(SQLAlchemyRepository, ProfileRepository):
    """SQLAlchemy implementation of talent profile repository."""

    model = ProfileModel
    entity_name = "Profile"

    def __init__(self, session):
        super().__init__(session, ProfileMapper())

    def save(self, profile: Profile) -> Profile:
        return self._save(profile)

    def find_by_user_id(self, user_id: str) -> Optional[Profile]:
        model = self.session.query(ProfileModel).filter_by(user_id=user_id).first()
        return self.mapper.model_to_domain(model) if model else None

    def find_by_user_ids(self, user_ids: List[str]) -> List[Profile]:
        if not user_ids:
            return []
        models = self.session.query(ProfileModel).filter(ProfileModel.user_id.in_(user_ids)).all()
        return [self.mapper.model_to_domain(model) for model in models]


class SQLAlchemyEmployerRepository(SQLAlchemyRepository, EmployerRepository):
    """SQLAlchemy implementation of employer repository."""

    model = EmployerModel
    entity_name = "Employer"

    def __init__(self, session):
        super().__init__(session, EmployerMapper())

    def save(self, employer: Employer) -> Employer:
        return self._save(employer)

    def find_by_user_id(self, user_id: str) -> Optional[Employer]:
        model = self.session.query(EmployerModel).filter_by(user_id=user_id).first()
        return self.mapper.model_to_domain(model) if model else None

    def list_by_verification(
        self,
        verified: Optional[bool] = None,
        limit: int = 20,
        offset: int = 0
    ) -> Tuple[List[Employer], int]:
        query = self.session.query(EmployerModel)
        if verified is not None:
            query = query.filter(EmployerModel.verified == verified)

        total = query.with_entities(func.count(EmployerModel.id)).scalar() or 0
        models = query.order_by(EmployerModel.created_at.desc()).offset(offset).limit(limit).all()
        return [self.mapper.model_to_domain(model) for model in models], total
