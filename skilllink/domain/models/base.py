"""
Base entity and value objects for the domain layer.
This module contains the foundational classes for all domain entities.
"""

from datetime import datetime, timezone
from typing import Optional, Any, Dict, List
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
import uuid

from skilllink.domain.events.base import DomainEvent


def utc_now() -> datetime:
    """Naive UTC timestamp, the representation used by every persisted column."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def as_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Convert an offset-aware datetime to naive UTC. Naive values are assumed to be UTC already."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def new_id() -> str:
    return str(uuid.uuid4())


@dataclass
class BaseEntity(ABC):
    """
    Base class for all domain entities.
    Provides common attributes and behavior for all entities.
    """

    id: Optional[str] = None
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    # Domain events
    _events: List[DomainEvent] = field(default_factory=list, init=False, repr=False, compare=False)

    def __post_init__(self):
        """Initialize entity after creation."""
        if self.id is None:
            self.id = new_id()
        if self.created_at is None:
            self.created_at = utc_now()
        if self.updated_at is None:
            self.updated_at = utc_now()

    def __eq__(self, other: Any) -> bool:
        """Entities are equal if they have the same ID and are of the same type."""
        if not isinstance(other, self.__class__):
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        """Hash based on entity ID."""
        return hash((self.__class__.__name__, self.id))

    def mark_as_updated(self) -> None:
        """Update the updated_at timestamp."""
        self.updated_at = utc_now()

    def add_event(self, event: DomainEvent) -> None:
        """Add a domain event."""
        self._events.append(event)

    def pull_events(self) -> List[DomainEvent]:
        """Get and clear all domain events."""
        events = self._events.copy()
        self._events.clear()
        return events

    def validate(self) -> None:
        """
        Validate the entity's state.
        Should be overridden by subclasses to implement specific validation rules.
        Raises ValidationError if the entity is in an invalid state.
        """
        pass

    def to_dict(self) -> Dict[str, Any]:
        """Convert entity to dictionary representation."""
        data = {}
        for key, value in self.__dict__.items():
            if key.startswith('_'):
                continue
            data[key] = _serialize(value)
        return data


def _serialize(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, BaseEntity):
        return value.to_dict()
    if isinstance(value, list):
        return [_serialize(item) for item in value]
    return value


@dataclass(eq=False)
class AggregateRoot(BaseEntity):
    """
    Base class for aggregate roots.
    The version column is checked on every update for optimistic locking.
    """

    version: int = field(default=1)


class DomainException(Exception):
    """Base exception for domain errors."""

    def __init__(self, message: str, code: Optional[str] = None):
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(self.message)


class ValidationError(DomainException):
    """Exception raised when entity validation fails."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message, "VALIDATION_ERROR")
        self.field = field


class BusinessRuleViolation(DomainException):
    """Exception raised when a business rule is violated."""

    def __init__(self, message: str):
        super().__init__(message, "BUSINESS_RULE_VIOLATION")


class EntityNotFoundError(DomainException):
    """Exception raised when an entity is not found."""

    def __init__(self, entity_type: str, entity_id: Any):
        message = f"{entity_type} with id {entity_id} not found"
        super().__init__(message, "ENTITY_NOT_FOUND")
        self.entity_type = entity_type
        self.entity_id = entity_id


class DuplicateEntityError(DomainException):
    """Exception raised when trying to create a duplicate entity."""

    def __init__(self, entity_type: str, field: str, value: Any):
        message = f"{entity_type} with {field}='{value}' already exists"
        super().__init__(message, "DUPLICATE_ENTITY")
        self.entity_type = entity_type
        self.field = field
        self.value = value


class AuthorizationError(DomainException):
    """Exception raised when the acting user may not perform an operation."""

    def __init__(self, message: str = "Insufficient permissions"):
        super().__init__(message, "FORBIDDEN")


class ConcurrencyError(DomainException):
    """Exception raised when an aggregate was modified by another transaction."""

    def __init__(self, message: str = "The resource was modified concurrently, retry the operation"):
        super().__init__(message, "CONCURRENCY_CONFLICT")


@dataclass(frozen=True)
class ValueObject(ABC):
    """
    Base class for value objects.
    Value objects are immutable and are compared by their values.
    """

    def __post_init__(self):
        """Validate value object after creation."""
        self.validate()

    @abstractmethod
    def validate(self) -> None:
        """Validate the value object's state."""
        pass


@dataclass(frozen=True)
class Money(ValueObject):
    """
    Money in integer minor units (kobo, cents) with an ISO 4217 currency.
    Ledger arithmetic never touches floats.
    """

    amount_minor_units: int
    currency: str = "NGN"

    def validate(self) -> None:
        if not isinstance(self.amount_minor_units, int) or isinstance(self.amount_minor_units, bool):
            raise ValidationError("Money amount must be an integer number of minor units", "amount")
        if self.amount_minor_units < 0:
            raise ValidationError("Money amount cannot be negative", "amount")
        if not self.currency or len(self.currency) != 3 or not self.currency.isalpha() or not self.currency.isupper():
            raise ValidationError(f"Invalid currency code: {self.currency}", "currency")

    def __str__(self) -> str:
        return f"{self.currency} {self.amount_minor_units / 100:,.2f}"

    def _check_currency(self, other: 'Money') -> None:
        if not isinstance(other, Money):
            raise TypeError("Can only combine Money with Money")
        if self.currency != other.currency:
            raise ValidationError(
                f"Cannot combine different currencies: {self.currency} and {other.currency}", "currency"
            )

    def __add__(self, other: 'Money') -> 'Money':
        self._check_currency(other)
        return Money(self.amount_minor_units + other.amount_minor_units, self.currency)

    def __sub__(self, other: 'Money') -> 'Money':
        self._check_currency(other)
        return Money(self.amount_minor_units - other.amount_minor_units, self.currency)

    def percentage(self, percent: int) -> 'Money':
        """Floor of ``percent`` percent of this amount."""
        return Money(self.amount_minor_units * percent // 100, self.currency)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "amount_minor_units": self.amount_minor_units,
            "currency": self.currency
        }
