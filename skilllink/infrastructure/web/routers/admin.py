"""
Admin router.
Moderation of jobs and employers, payment proof review, payouts and badges.
"""

from typing import Annotated, List, Optional
from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field

from skilllink.application.dto.base_dto import ListRequestDTO, ListResponseDTO
from skilllink.application.dto.job_dto import (
    ModerateJobRequestDTO, FeatureJobRequestDTO, ModerationListRequestDTO,
    JobResponseDTO, ScrapingLogResponseDTO
)
from skilllink.application.dto.payment_dto import (
    PaymentProofReviewInputDTO, ReviewPaymentProofRequestDTO, SettlePayoutInputDTO,
    SettlePayoutRequestDTO, PendingPayoutListRequestDTO, PaymentProofResponseDTO,
    TransactionResponseDTO
)
from skilllink.application.dto.user_dto import (
    EmployerVerificationDecisionDTO, VerifyEmployerRequestDTO, EmployerListRequestDTO,
    EmployerResponseDTO
)
from skilllink.application.dto.verification_dto import (
    VerificationReviewInputDTO, ReviewVerificationRequestDTO, IssueBadgeRequestDTO,
    VerificationListRequestDTO, BadgeResponseDTO, VerificationRequestResponseDTO
)
from skilllink.application.use_cases.job_use_cases import (
    ModerateJobUseCase, FeatureJobUseCase, ListJobsForModerationUseCase, ListScrapingLogsUseCase
)
from skilllink.application.use_cases.payment_use_cases import (
    ReviewPaymentProofUseCase, ListPendingPaymentProofsUseCase, SettlePayoutUseCase,
    ListPendingPayoutsUseCase
)
from skilllink.application.use_cases.user_use_cases import VerifyEmployerUseCase, ListEmployersUseCase
from skilllink.application.use_cases.verification_use_cases import (
    ReviewVerificationRequestUseCase, IssueBadgeUseCase, ListVerificationRequestsUseCase
)
from skilllink.domain.models.job import JobVerificationStatus
from skilllink.domain.models.verification import VerificationRequestStatus
from skilllink.infrastructure.auth import CurrentUser, require_admin
from skilllink.infrastructure.db.unit_of_work import SQLAlchemyUnitOfWork, get_unit_of_work
from .common import run_use_case, build_request, PageQuery, PageSizeQuery


router = APIRouter()

Admin = Annotated[CurrentUser, Depends(require_admin)]
UoW = Annotated[SQLAlchemyUnitOfWork, Depends(get_unit_of_work)]


class ModerationBody(BaseModel):
    approve: bool


class FeatureBody(BaseModel):
    featured: bool = True
    days: Optional[int] = Field(default=None, gt=0, le=365)


# Jobs

@router.get("/jobs", response_model=ListResponseDTO[JobResponseDTO])
async def list_jobs_for_moderation(
    admin: Admin,
    uow: UoW,
    verification_status: Optional[JobVerificationStatus] = Query(None),
    page: PageQuery = 1,
    page_size: PageSizeQuery = 20
):
    request = build_request(
        ModerationListRequestDTO, verification_status=verification_status, page=page, page_size=page_size
    )
    return await run_use_case(ListJobsForModerationUseCase(uow=uow), request, admin)


@router.post("/jobs/{job_id}/moderate", response_model=JobResponseDTO)
async def moderate_job(job_id: str, body: ModerationBody, admin: Admin, uow: UoW):
    request = build_request(ModerateJobRequestDTO, job_id=job_id, approve=body.approve)
    return await run_use_case(ModerateJobUseCase(uow=uow), request, admin)


@router.post("/jobs/{job_id}/feature", response_model=JobResponseDTO)
async def feature_job(job_id: str, body: FeatureBody, admin: Admin, uow: UoW):
    request = build_request(FeatureJobRequestDTO, job_id=job_id, featured=body.featured, days=body.days)
    return await run_use_case(FeatureJobUseCase(uow=uow), request, admin)


@router.get("/scraping-logs", response_model=List[ScrapingLogResponseDTO])
async def list_scraping_logs(admin: Admin, uow: UoW):
    return await run_use_case(ListScrapingLogsUseCase(uow=uow), None, admin)


# Employers

@router.get("/employers", response_model=ListResponseDTO[EmployerResponseDTO])
async def list_employers(
    admin: Admin,
    uow: UoW,
    verified: Optional[bool] = Query(None),
    page: PageQuery = 1,
    page_size: PageSizeQuery = 20
):
    request = build_request(EmployerListRequestDTO, verified=verified, page=page, page_size=page_size)
    return await run_use_case(ListEmployersUseCase(uow=uow), request, admin)


@router.post("/employers/{employer_user_id}/verification", response_model=EmployerResponseDTO)
async def verify_employer(employer_user_id: str, body: EmployerVerificationDecisionDTO, admin: Admin, uow: UoW):
    request = build_request(VerifyEmployerRequestDTO, employer_user_id=employer_user_id, **body.model_dump())
    return await run_use_case(VerifyEmployerUseCase(uow=uow), request, admin)


# Payments

@router.get("/payment-proofs", response_model=ListResponseDTO[PaymentProofResponseDTO])
async def list_pending_payment_proofs(admin: Admin, uow: UoW, page: PageQuery = 1, page_size: PageSizeQuery = 20):
    request = build_request(ListRequestDTO, page=page, page_size=page_size)
    return await run_use_case(ListPendingPaymentProofsUseCase(uow=uow), request, admin)


@router.post("/payment-proofs/{proof_id}/review", response_model=PaymentProofResponseDTO)
async def review_payment_proof(proof_id: str, body: PaymentProofReviewInputDTO, admin: Admin, uow: UoW):
    """Approving a proof completes the escrow deposit and activates the contract."""
    request = build_request(ReviewPaymentProofRequestDTO, proof_id=proof_id, **body.model_dump())
    return await run_use_case(ReviewPaymentProofUseCase(uow=uow), request, admin)


@router.get("/payouts", response_model=ListResponseDTO[TransactionResponseDTO])
async def list_pending_payouts(admin: Admin, uow: UoW, page: PageQuery = 1, page_size: PageSizeQuery = 20):
    request = build_request(PendingPayoutListRequestDTO, page=page, page_size=page_size)
    return await run_use_case(ListPendingPayoutsUseCase(uow=uow), request, admin)


@router.post("/payouts/{transaction_id}/settle", response_model=TransactionResponseDTO)
async def settle_payout(transaction_id: str, body: SettlePayoutInputDTO, admin: Admin, uow: UoW):
    """A failed payout puts the amount back in the wallet."""
    request = build_request(SettlePayoutRequestDTO, transaction_id=transaction_id, **body.model_dump())
    return await run_use_case(SettlePayoutUseCase(uow=uow), request, admin)


# Verification

@router.get("/verification-requests", response_model=ListResponseDTO[VerificationRequestResponseDTO])
async def list_verification_requests(
    admin: Admin,
    uow: UoW,
    request_status: Optional[VerificationRequestStatus] = Query(None, alias="status"),
    page: PageQuery = 1,
    page_size: PageSizeQuery = 20
):
    request = build_request(VerificationListRequestDTO, status=request_status, page=page, page_size=page_size)
    return await run_use_case(ListVerificationRequestsUseCase(uow=uow), request, admin)


@router.post("/verification-requests/{request_id}/review", response_model=VerificationRequestResponseDTO)
async def review_verification_request(request_id: str, body: VerificationReviewInputDTO, admin: Admin, uow: UoW):
    request = build_request(ReviewVerificationRequestDTO, request_id=request_id, **body.model_dump())
    return await run_use_case(ReviewVerificationRequestUseCase(uow=uow), request, admin)


@router.post("/badges", status_code=status.HTTP_201_CREATED, response_model=BadgeResponseDTO)
async def issue_badge(request: IssueBadgeRequestDTO, admin: Admin, uow: UoW):
    """Issue a badge or change the level of the one the talent holds."""
    return await run_use_case(IssueBadgeUseCase(uow=uow), request, admin)
