"""
Payment router.
Escrow funding, manual-transfer proofs, wallet, payouts and the provider webhook.
"""

import logging
from typing import Annotated, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from skilllink.application.dto.base_dto import ListResponseDTO
from skilllink.application.dto.payment_dto import (
    InitializeEscrowRequestDTO, SubmitPaymentProofRequestDTO, PaymentWebhookRequestDTO,
    TransactionListRequestDTO, PayoutRequestDTO, EscrowInitResponseDTO, PaymentProofResponseDTO,
    WalletResponseDTO, TransactionResponseDTO, PaymentSummaryResponseDTO, WebhookResultDTO
)
from skilllink.application.use_cases.payment_use_cases import (
    InitializeEscrowUseCase, SubmitPaymentProofUseCase, HandlePaymentWebhookUseCase,
    GetWalletUseCase, ListTransactionsUseCase, PaymentSummaryUseCase, RequestPayoutUseCase
)
from skilllink.config import settings
from skilllink.domain.models.payment import TransactionType
from skilllink.infrastructure.auth import CurrentUser, get_current_user
from skilllink.infrastructure.db.unit_of_work import SQLAlchemyUnitOfWork, get_unit_of_work
from skilllink.infrastructure.payments import FlutterwaveClient, get_payment_gateway, verify_webhook_signature
from skilllink.infrastructure.rate_limiting import payment_rate_limit
from .common import run_use_case, build_request, PageQuery, PageSizeQuery


logger = logging.getLogger(__name__)

router = APIRouter()

User = Annotated[CurrentUser, Depends(get_current_user)]
UoW = Annotated[SQLAlchemyUnitOfWork, Depends(get_unit_of_work)]

WEBHOOK_SIGNATURE_HEADER = "verif-hash"


@router.post("/escrow", status_code=status.HTTP_201_CREATED, response_model=EscrowInitResponseDTO)
async def initialize_escrow(
    request: InitializeEscrowRequestDTO,
    user: User,
    uow: UoW,
    gateway: Annotated[Optional[FlutterwaveClient], Depends(get_payment_gateway)],
    _=Depends(payment_rate_limit)
):
    """
    Open the escrow deposit for a contract.

    - **provider**: `manual_transfer` (upload a proof afterwards) or `flutterwave`
      (returns a hosted payment link)
    """
    use_case = InitializeEscrowUseCase(payment_gateway=gateway, uow=uow)
    return await run_use_case(use_case, request, user)


@router.post("/proofs", status_code=status.HTTP_201_CREATED, response_model=PaymentProofResponseDTO)
async def submit_payment_proof(request: SubmitPaymentProofRequestDTO, user: User, uow: UoW):
    return await run_use_case(SubmitPaymentProofUseCase(uow=uow), request, user)


@router.get("/wallet", response_model=WalletResponseDTO)
async def get_wallet(user: User, uow: UoW):
    return await run_use_case(GetWalletUseCase(uow=uow), None, user)


@router.get("/transactions", response_model=ListResponseDTO[TransactionResponseDTO])
async def list_transactions(
    user: User,
    uow: UoW,
    transaction_type: Optional[TransactionType] = Query(None),
    page: PageQuery = 1,
    page_size: PageSizeQuery = 20
):
    request = build_request(
        TransactionListRequestDTO, transaction_type=transaction_type, page=page, page_size=page_size
    )
    return await run_use_case(ListTransactionsUseCase(uow=uow), request, user)


@router.get("/summary", response_model=PaymentSummaryResponseDTO)
async def payment_summary(user: User, uow: UoW):
    """Wallet balance, money held in escrow for the caller and pending transactions."""
    return await run_use_case(PaymentSummaryUseCase(uow=uow), None, user)


@router.post("/payouts", status_code=status.HTTP_201_CREATED, response_model=TransactionResponseDTO)
async def request_payout(
    request: PayoutRequestDTO,
    user: User,
    uow: UoW,
    _=Depends(payment_rate_limit)
):
    """The amount leaves the wallet immediately and comes back if the payout fails."""
    return await run_use_case(RequestPayoutUseCase(uow=uow), request, user)


@router.post("/webhook", response_model=WebhookResultDTO)
async def payment_webhook(request: Request, uow: UoW):
    """
    Flutterwave charge notifications.
    Replayed notifications for an already completed deposit change nothing.
    """
    signature = request.headers.get(WEBHOOK_SIGNATURE_HEADER)
    if settings.flutterwave_webhook_hash:
        if not verify_webhook_signature(signature, settings.flutterwave_webhook_hash):
            logger.warning("Rejected payment webhook with an invalid signature")
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid signature")
    else:
        logger.warning("Payment webhook accepted without signature check; FLUTTERWAVE_WEBHOOK_HASH is not set")

    payload = await request.json()
    if not isinstance(payload, dict):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Webhook payload must be an object")

    webhook = build_request(
        PaymentWebhookRequestDTO,
        event=str(payload.get("event") or ""),
        data=payload.get("data") or {}
    )
    return await run_use_case(HandlePaymentWebhookUseCase(uow=uow), webhook)
