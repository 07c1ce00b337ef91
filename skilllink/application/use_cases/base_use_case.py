"""
Base use case classes for the application layer.
Provides common patterns and structure for use case implementations.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, TypeVar, Generic, List
from dataclasses import dataclass
from datetime import datetime

from skilllink.domain.events.base import DomainEvent, publish_event
from skilllink.domain.models.base import (
    DomainException, ValidationError, BusinessRuleViolation, AuthorizationError, utc_now
)
from skilllink.domain.models.user import UserRole
from skilllink.domain.repositories.unit_of_work import UnitOfWork


logger = logging.getLogger(__name__)

T = TypeVar('T')
R = TypeVar('R')


@dataclass
class UseCaseResult(Generic[T]):
    """Result wrapper for use case operations."""

    success: bool
    data: Optional[T] = None
    error: Optional[str] = None
    error_code: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None

    @classmethod
    def success_result(cls, data: T, metadata: Optional[Dict[str, Any]] = None) -> "UseCaseResult[T]":
        """Create a successful result."""
        return cls(success=True, data=data, metadata=metadata)

    @classmethod
    def error_result(
        cls,
        error: str,
        error_code: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None
    ) -> "UseCaseResult[T]":
        """Create an error result."""
        return cls(
            success=False,
            error=error,
            error_code=error_code,
            metadata=metadata
        )

    @classmethod
    def from_exception(cls, exc: Exception) -> "UseCaseResult[T]":
        """Create error result from exception."""
        if isinstance(exc, ValidationError):
            return cls.error_result(exc.message, "VALIDATION_ERROR")
        elif isinstance(exc, BusinessRuleViolation):
            return cls.error_result(exc.message, "BUSINESS_RULE_VIOLATION")
        elif isinstance(exc, DomainException):
            return cls.error_result(exc.message, exc.code)
        else:
            return cls.error_result("An unexpected error occurred", "UNKNOWN_ERROR")


class BaseUseCase(ABC, Generic[T, R]):
    """
    Base class for all use cases.
    Provides common structure and error handling.
    """

    def __init__(self, uow: Optional[UnitOfWork] = None, **kwargs):
        super().__init__(**kwargs)
        self.uow = uow
        self.execution_start: Optional[datetime] = None
        self.execution_end: Optional[datetime] = None

    async def execute(self, request: T) -> UseCaseResult[R]:
        """
        Execute the use case with proper error handling and logging.
        """
        self.execution_start = utc_now()

        try:
            # Validate input
            await self._validate_request(request)

            # Execute business logic
            result = await self._execute_business_logic(request)

            self.execution_end = utc_now()
            execution_time = (self.execution_end - self.execution_start).total_seconds()

            return UseCaseResult.success_result(
                result,
                metadata={
                    "execution_time_seconds": execution_time,
                    "executed_at": self.execution_end.isoformat()
                }
            )

        except Exception as exc:
            self.execution_end = utc_now()
            execution_time = (self.execution_end - self.execution_start).total_seconds()

            if not isinstance(exc, DomainException):
                logger.exception(f"{self.__class__.__name__} failed unexpectedly")

            error_result = UseCaseResult.from_exception(exc)
            error_result.metadata = {
                "execution_time_seconds": execution_time,
                "failed_at": self.execution_end.isoformat(),
                "exception_type": type(exc).__name__
            }

            return error_result

    async def _validate_request(self, request: T) -> None:
        """
        Validate the request. Override in subclasses if needed.
        """
        if hasattr(request, 'model_validate') and hasattr(request, 'model_dump'):
            # Pydantic models
            request.model_validate(request.model_dump())

    @abstractmethod
    async def _execute_business_logic(self, request: T) -> R:
        """
        Execute the core business logic. Must be implemented by subclasses.
        """
        pass


class QueryUseCase(BaseUseCase[T, R]):
    """
    Base class for query use cases (read operations).
    """
    pass


class CommandUseCase(BaseUseCase[T, R]):
    """
    Base class for command use cases (write operations).
    Commits the unit of work, then publishes the domain events it collected.
    """

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.events: List[DomainEvent] = []

    async def _execute_business_logic(self, request: T) -> R:
        """
        Execute command with transaction handling.
        """
        try:
            result = await self._execute_command_logic(request)
            if self.uow is not None:
                self.uow.commit()
                self.events.extend(self.uow.collect_events())
        except Exception:
            if self.uow is not None:
                self.uow.rollback()
            self.events.clear()
            raise

        # Publish domain events once the transaction is durable
        await self._publish_events()
        return result

    @abstractmethod
    async def _execute_command_logic(self, request: T) -> R:
        """Execute the command logic. Must be implemented by subclasses."""
        pass

    async def _publish_events(self) -> None:
        """Publish collected domain events."""
        events = list(self.events)
        self.events.clear()
        for event in events:
            await publish_event(event)


class PaginatedQueryUseCase(QueryUseCase[T, R]):
    """
    Base class for paginated query use cases.
    """

    def __init__(self, default_page_size: int = 20, max_page_size: int = 100, **kwargs):
        super().__init__(**kwargs)
        self.default_page_size = default_page_size
        self.max_page_size = max_page_size

    async def _validate_request(self, request: T) -> None:
        """Validate paginated request."""
        await super()._validate_request(request)

        if hasattr(request, 'page_size'):
            if request.page_size > self.max_page_size:
                raise ValidationError(f"Page size cannot exceed {self.max_page_size}")
            if request.page_size < 1:
                raise ValidationError("Page size must be positive")


# Authorization mixin
class AuthorizedUseCase(BaseUseCase[T, R]):
    """
    Mixin for use cases that require authorization.
    Listed before the command or query base so its checks run first.
    """

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.current_user_id: Optional[str] = None
        self.current_user_roles: List[str] = []

    def set_current_user(self, user_id: str, roles: List[str]):
        """Set the current user context."""
        self.current_user_id = user_id
        self.current_user_roles = [getattr(role, "value", role) for role in roles]
        return self

    async def _validate_request(self, request: T) -> None:
        """Validate request with authorization check."""
        await super()._validate_request(request)

        if not self.current_user_id:
            raise AuthorizationError("User authentication required")

        await self._check_authorization(request)

    async def _check_authorization(self, request: T) -> None:
        """Check if the current user is authorized. Override in subclasses."""
        pass

    @property
    def is_admin(self) -> bool:
        return UserRole.ADMIN.value in self.current_user_roles

    def _require_role(self, required_role: UserRole) -> None:
        """Check if user has required role."""
        if required_role.value not in self.current_user_roles:
            raise AuthorizationError(f"Role '{required_role.value}' required")

    def _require_owner_or_role(self, resource_owner_id: str, required_role: UserRole) -> None:
        """Check if user is owner or has required role."""
        if self.current_user_id != resource_owner_id and required_role.value not in self.current_user_roles:
            raise AuthorizationError("Insufficient permissions")
