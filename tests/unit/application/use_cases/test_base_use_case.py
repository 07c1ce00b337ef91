"""
Unit tests for the use case base classes.
"""

import pytest
from dataclasses import dataclass
from unittest.mock import Mock

from skilllink.application.use_cases.base_use_case import (
    UseCaseResult, CommandUseCase, QueryUseCase, AuthorizedUseCase
)
from skilllink.domain.events.base import DomainEvent, get_event_dispatcher
from skilllink.domain.models.base import (
    ValidationError, BusinessRuleViolation, EntityNotFoundError, AuthorizationError, ConcurrencyError
)
from skilllink.domain.models.user import UserRole


class TestUseCaseResult:
    """Test cases for UseCaseResult."""

    def test_success_result(self):
        """Test creating successful result."""
        result = UseCaseResult.success_result({"id": 1, "name": "test"})

        assert result.success is True
        assert result.data == {"id": 1, "name": "test"}
        assert result.error is None
        assert result.error_code is None

    def test_error_result(self):
        """Test creating error result."""
        result = UseCaseResult.error_result("Something went wrong", "TEST_ERROR")

        assert result.success is False
        assert result.data is None
        assert result.error == "Something went wrong"
        assert result.error_code == "TEST_ERROR"

    def test_error_result_with_metadata(self):
        metadata = {"attempt": 1, "retry_after": 60}
        result = UseCaseResult.error_result("Error", "ERR_001", metadata)

        assert result.metadata == metadata

    @pytest.mark.parametrize("exc, code", [
        (ValidationError("bad amount", "amount"), "VALIDATION_ERROR"),
        (BusinessRuleViolation("frozen"), "BUSINESS_RULE_VIOLATION"),
        (EntityNotFoundError("Contract", "c-1"), "ENTITY_NOT_FOUND"),
        (AuthorizationError("nope"), "FORBIDDEN"),
        (ConcurrencyError(), "CONCURRENCY_CONFLICT"),
    ])
    def test_from_domain_exception(self, exc, code):
        """Test domain errors keep their message and map to their code."""
        result = UseCaseResult.from_exception(exc)

        assert result.success is False
        assert result.error_code == code
        assert result.error == exc.message

    def test_unexpected_exception_is_hidden(self):
        """Test internal error details are not exposed."""
        result = UseCaseResult.from_exception(RuntimeError("password=hunter2"))

        assert result.error == "An unexpected error occurred"
        assert result.error_code == "UNKNOWN_ERROR"


@dataclass
class Pinged(DomainEvent):
    target: str = ""


class PingUseCase(CommandUseCase[str, str]):

    def __init__(self, fail_with=None, **kwargs):
        super().__init__(**kwargs)
        self.fail_with = fail_with

    async def _execute_command_logic(self, request: str) -> str:
        if self.fail_with:
            raise self.fail_with
        return f"pong {request}"


class WhoAmIUseCase(AuthorizedUseCase, QueryUseCase[str, str]):

    async def _check_authorization(self, request: str) -> None:
        self._require_role(UserRole.ADMIN)

    async def _execute_business_logic(self, request: str) -> str:
        return self.current_user_id


class TestCommandUseCase:
    """Test cases for the commit and publish cycle."""

    @pytest.mark.asyncio
    async def test_commits_then_publishes(self):
        """Test collected events reach the dispatcher after the commit."""
        uow = Mock()
        uow.collect_events.return_value = [Pinged(target="talent-1")]

        result = await PingUseCase(uow=uow).execute("a")

        assert result.success is True
        assert result.data == "pong a"
        uow.commit.assert_called_once()
        uow.rollback.assert_not_called()
        logged = get_event_dispatcher().get_event_log()
        assert logged[0]["event_type"] == "Pinged"
        assert logged[0]["data"] == {"target": "talent-1"}

    @pytest.mark.asyncio
    async def test_failure_rolls_back_without_events(self):
        uow = Mock()

        result = await PingUseCase(fail_with=BusinessRuleViolation("Contract is frozen"), uow=uow).execute("a")

        assert result.success is False
        assert result.error == "Contract is frozen"
        uow.commit.assert_not_called()
        uow.rollback.assert_called_once()
        assert get_event_dispatcher().get_event_log() == []

    @pytest.mark.asyncio
    async def test_commit_failure_rolls_back(self):
        uow = Mock()
        uow.commit.side_effect = ConcurrencyError()

        result = await PingUseCase(uow=uow).execute("a")

        assert result.error_code == "CONCURRENCY_CONFLICT"
        uow.rollback.assert_called_once()

    @pytest.mark.asyncio
    async def test_result_metadata(self):
        uow = Mock()
        uow.collect_events.return_value = []

        result = await PingUseCase(uow=uow).execute("a")

        assert "execution_time_seconds" in result.metadata
        assert "executed_at" in result.metadata


class TestAuthorizedUseCase:
    """Test cases for the authorization mixin."""

    @pytest.mark.asyncio
    async def test_requires_user(self):
        result = await WhoAmIUseCase().execute("x")

        assert result.success is False
        assert result.error == "User authentication required"
        assert result.error_code == "FORBIDDEN"

    @pytest.mark.asyncio
    async def test_requires_role(self):
        result = await WhoAmIUseCase().set_current_user("talent-1", ["talent"]).execute("x")

        assert result.error_code == "FORBIDDEN"

    @pytest.mark.asyncio
    async def test_role_enums_accepted(self):
        """Test roles may be given as enum members or plain values."""
        use_case = WhoAmIUseCase().set_current_user("admin-1", [UserRole.ADMIN])

        result = await use_case.execute("x")

        assert use_case.is_admin is True
        assert result.data == "admin-1"
