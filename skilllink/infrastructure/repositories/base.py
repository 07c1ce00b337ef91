"""
Shared save logic for the SQLAlchemy repositories.
"""

import logging
from typing import Any, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from skilllink.domain.models.base import BaseEntity, AggregateRoot, ConcurrencyError, DuplicateEntityError


logger = logging.getLogger(__name__)


class SQLAlchemyRepository:
    """
    Base class for repositories persisting one entity type.
    Aggregates carry a version that is checked on every update.
    """

    model = None
    entity_name = "Entity"

    def __init__(self, session: Session, mapper: Any):
        self.session = session
        self.mapper = mapper
        self.seen: List[BaseEntity] = []

    def _track(self, entity: BaseEntity) -> None:
        """Remember saved entities so their events can be published after commit."""
        self.seen.append(entity)

    def _get_model(self, entity_id: str, for_update: bool = False) -> Optional[Any]:
        if not for_update:
            return self.session.get(self.model, entity_id)
        return (
            self.session.query(self.model)
            .filter(self.model.id == entity_id)
            .populate_existing()
            .with_for_update()
            .first()
        )

    def _save(self, entity: BaseEntity) -> BaseEntity:
        model = self.session.get(self.model, entity.id)
        if model is None:
            model = self.mapper.domain_to_model(entity)
            self.session.add(model)
        else:
            if isinstance(entity, AggregateRoot) and model.version != entity.version:
                raise ConcurrencyError(
                    f"{self.entity_name} {entity.id} was modified by another request"
                )
            self.mapper.update_model(model, entity)

        self._flush()

        if isinstance(entity, AggregateRoot):
            entity.version = model.version
        self._track(entity)
        return entity

    def _flush(self) -> None:
        try:
            self.session.flush()
        except StaleDataError as exc:
            logger.warning(f"Stale {self.entity_name} update: {exc}")
            raise ConcurrencyError()
        except IntegrityError as exc:
            logger.warning(f"Integrity error saving {self.entity_name}: {exc.orig}")
            raise DuplicateEntityError(self.entity_name, "unique key", str(exc.orig))
