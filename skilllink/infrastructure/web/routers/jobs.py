"""
Job router.
Public discovery plus posting and applications for signed-in users.
"""

from typing import Annotated, List, Optional
from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field

from skilllink.application.dto.base_dto import EntityRequestDTO, ListResponseDTO
from skilllink.application.dto.job_dto import (
    CreateJobRequestDTO, JobSearchRequestDTO, ApplyToJobRequestDTO, ApplicationDecisionRequestDTO,
    JobResponseDTO, ApplicationResponseDTO, CreateJobAlertRequestDTO, JobAlertResponseDTO
)
from skilllink.application.use_cases.job_use_cases import (
    PostJobUseCase, SearchJobsUseCase, GetJobUseCase, ListMyJobsUseCase, ApplyToJobUseCase,
    ListJobApplicationsUseCase, ListMyApplicationsUseCase, DecideApplicationUseCase,
    CreateJobAlertUseCase, ListMyJobAlertsUseCase, DeleteJobAlertUseCase
)
from skilllink.infrastructure.auth import CurrentUser, get_current_user
from skilllink.infrastructure.db.unit_of_work import SQLAlchemyUnitOfWork, get_unit_of_work
from .common import run_use_case, build_request, PageQuery, PageSizeQuery


router = APIRouter()


class ApplicationBody(BaseModel):
    proposal_text: str = Field(..., min_length=10, max_length=10000)


class DecisionBody(BaseModel):
    accept: bool


@router.get("", response_model=ListResponseDTO[JobResponseDTO])
async def search_jobs(
    uow: Annotated[SQLAlchemyUnitOfWork, Depends(get_unit_of_work)],
    query: Optional[str] = Query(None, max_length=200, description="Text in title or description"),
    skills: Optional[List[str]] = Query(None, description="Any of these skills"),
    remote: Optional[bool] = Query(None),
    min_budget: Optional[int] = Query(None, ge=0),
    location: Optional[str] = Query(None, max_length=200),
    page: PageQuery = 1,
    page_size: PageSizeQuery = 20
):
    """
    Search open, verified jobs that have not expired.

    Featured jobs come first, then the newest.
    """
    request = build_request(
        JobSearchRequestDTO,
        query=query, skills=skills, remote=remote, min_budget=min_budget,
        location=location, page=page, page_size=page_size
    )
    return await run_use_case(SearchJobsUseCase(uow=uow), request)


@router.post("", status_code=status.HTTP_201_CREATED, response_model=JobResponseDTO)
async def post_job(
    request: CreateJobRequestDTO,
    user: Annotated[CurrentUser, Depends(get_current_user)],
    uow: Annotated[SQLAlchemyUnitOfWork, Depends(get_unit_of_work)]
):
    """Employers post jobs; they stay pending until an admin verifies them."""
    return await run_use_case(PostJobUseCase(uow=uow), request, user)


@router.get("/mine", response_model=List[JobResponseDTO])
async def list_my_jobs(
    user: Annotated[CurrentUser, Depends(get_current_user)],
    uow: Annotated[SQLAlchemyUnitOfWork, Depends(get_unit_of_work)]
):
    return await run_use_case(ListMyJobsUseCase(uow=uow), None, user)


@router.get("/applications/mine", response_model=List[ApplicationResponseDTO])
async def list_my_applications(
    user: Annotated[CurrentUser, Depends(get_current_user)],
    uow: Annotated[SQLAlchemyUnitOfWork, Depends(get_unit_of_work)]
):
    return await run_use_case(ListMyApplicationsUseCase(uow=uow), None, user)


@router.post("/applications/{application_id}/decision", response_model=ApplicationResponseDTO)
async def decide_application(
    application_id: str,
    body: DecisionBody,
    user: Annotated[CurrentUser, Depends(get_current_user)],
    uow: Annotated[SQLAlchemyUnitOfWork, Depends(get_unit_of_work)]
):
    request = build_request(ApplicationDecisionRequestDTO, application_id=application_id, accept=body.accept)
    return await run_use_case(DecideApplicationUseCase(uow=uow), request, user)


@router.post("/alerts", status_code=status.HTTP_201_CREATED, response_model=JobAlertResponseDTO)
async def create_job_alert(
    request: CreateJobAlertRequestDTO,
    user: Annotated[CurrentUser, Depends(get_current_user)],
    uow: Annotated[SQLAlchemyUnitOfWork, Depends(get_unit_of_work)]
):
    """Save a search; matching new jobs are emailed at the chosen frequency."""
    return await run_use_case(CreateJobAlertUseCase(uow=uow), request, user)


@router.get("/alerts", response_model=List[JobAlertResponseDTO])
async def list_my_job_alerts(
    user: Annotated[CurrentUser, Depends(get_current_user)],
    uow: Annotated[SQLAlchemyUnitOfWork, Depends(get_unit_of_work)]
):
    return await run_use_case(ListMyJobAlertsUseCase(uow=uow), None, user)


@router.delete("/alerts/{alert_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_job_alert(
    alert_id: str,
    user: Annotated[CurrentUser, Depends(get_current_user)],
    uow: Annotated[SQLAlchemyUnitOfWork, Depends(get_unit_of_work)]
):
    await run_use_case(DeleteJobAlertUseCase(uow=uow), build_request(EntityRequestDTO, id=alert_id), user)


@router.get("/{job_id}", response_model=JobResponseDTO)
async def get_job(
    job_id: str,
    uow: Annotated[SQLAlchemyUnitOfWork, Depends(get_unit_of_work)]
):
    return await run_use_case(GetJobUseCase(uow=uow), build_request(EntityRequestDTO, id=job_id))


@router.post("/{job_id}/applications", status_code=status.HTTP_201_CREATED, response_model=ApplicationResponseDTO)
async def apply_to_job(
    job_id: str,
    body: ApplicationBody,
    user: Annotated[CurrentUser, Depends(get_current_user)],
    uow: Annotated[SQLAlchemyUnitOfWork, Depends(get_unit_of_work)]
):
    """Talent apply once per job."""
    request = build_request(ApplyToJobRequestDTO, job_id=job_id, proposal_text=body.proposal_text)
    return await run_use_case(ApplyToJobUseCase(uow=uow), request, user)


@router.get("/{job_id}/applications", response_model=List[ApplicationResponseDTO])
async def list_job_applications(
    job_id: str,
    user: Annotated[CurrentUser, Depends(get_current_user)],
    uow: Annotated[SQLAlchemyUnitOfWork, Depends(get_unit_of_work)]
):
    return await run_use_case(ListJobApplicationsUseCase(uow=uow), build_request(EntityRequestDTO, id=job_id), user)
