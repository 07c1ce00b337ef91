"""
Helpers shared by the routers: running use cases and mapping their results to HTTP.
"""

from typing import Annotated, Any, Optional, Type, TypeVar

from fastapi import HTTPException, Query, status
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError as PydanticValidationError

from skilllink.application.dto.base_dto import RequestDTO
from skilllink.application.use_cases.base_use_case import BaseUseCase, UseCaseResult
from skilllink.infrastructure.auth.dependencies import CurrentUser


D = TypeVar("D", bound=RequestDTO)

ERROR_STATUS_CODES = {
    "VALIDATION_ERROR": status.HTTP_422_UNPROCESSABLE_ENTITY,
    "ENTITY_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "FORBIDDEN": status.HTTP_403_FORBIDDEN,
    "BUSINESS_RULE_VIOLATION": status.HTTP_409_CONFLICT,
    "DUPLICATE_ENTITY": status.HTTP_409_CONFLICT,
    "CONCURRENCY_CONFLICT": status.HTTP_409_CONFLICT,
    "UNKNOWN_ERROR": status.HTTP_500_INTERNAL_SERVER_ERROR,
}

PageQuery = Annotated[int, Query(ge=1, description="Page number")]
PageSizeQuery = Annotated[int, Query(ge=1, le=100, description="Items per page")]


def status_for(error_code: Optional[str]) -> int:
    return ERROR_STATUS_CODES.get(error_code or "", status.HTTP_400_BAD_REQUEST)


def unwrap(result: UseCaseResult) -> Any:
    """Return the use case data or raise the matching HTTP error."""
    if result.success:
        return result.data
    raise HTTPException(status_code=status_for(result.error_code), detail=result.error)


async def run_use_case(use_case: BaseUseCase, request: Any = None, user: Optional[CurrentUser] = None) -> Any:
    if user is not None:
        use_case.set_current_user(user.user_id, user.roles)
    return unwrap(await use_case.execute(request))


def build_request(dto_class: Type[D], **data: Any) -> D:
    """
    Build a request DTO from path and body values.
    Invalid input is reported as a 422 like any other request validation error.
    """
    try:
        return dto_class(**data)
    except PydanticValidationError as e:
        raise RequestValidationError(e.errors(include_url=False))
