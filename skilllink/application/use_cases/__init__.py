"""
Application layer use cases.
Business logic for the SkillLink Africa marketplace.
"""

from .base_use_case import (
    BaseUseCase, QueryUseCase, CommandUseCase, PaginatedQueryUseCase, AuthorizedUseCase, UseCaseResult
)
from .user_use_cases import (
    RegisterUserUseCase, LoginUseCase, RefreshTokenUseCase, GetMeUseCase, GetProfileUseCase,
    UpdateProfileUseCase, UpdateEmployerUseCase, VerifyEmployerUseCase, ListEmployersUseCase,
)
from .job_use_cases import (
    PostJobUseCase, SearchJobsUseCase, GetJobUseCase, ListMyJobsUseCase, ApplyToJobUseCase,
    ListJobApplicationsUseCase, ListMyApplicationsUseCase, DecideApplicationUseCase,
    ModerateJobUseCase, FeatureJobUseCase, ListJobsForModerationUseCase,
    ListScrapingLogsUseCase,
)
from .contract_use_cases import (
    CreateContractUseCase, GetContractUseCase, ListContractsUseCase, AddMilestoneUseCase,
    SetMilestoneDependencyUseCase, StartMilestoneUseCase, SubmitMilestoneUseCase,
    ApproveMilestoneUseCase, RejectMilestoneUseCase, CompleteContractUseCase,
    CancelContractUseCase, RenewContractUseCase,
)
from .negotiation_use_cases import (
    OpenNegotiationUseCase, CounterOfferUseCase, RespondToNegotiationUseCase,
    ListNegotiationsUseCase, ProposeAmendmentUseCase, ReviewAmendmentUseCase,
    ListAmendmentsUseCase,
)
from .payment_use_cases import (
    InitializeEscrowUseCase, SubmitPaymentProofUseCase, ReviewPaymentProofUseCase,
    ListPendingPaymentProofsUseCase, HandlePaymentWebhookUseCase, GetWalletUseCase,
    ListTransactionsUseCase, PaymentSummaryUseCase, RequestPayoutUseCase, SettlePayoutUseCase,
    ListPendingPayoutsUseCase,
)
from .dispute_use_cases import (
    RaiseDisputeUseCase, GetDisputeUseCase, ListDisputesUseCase, ReviewDisputeUseCase,
    ResolveDisputeUseCase, CloseDisputeUseCase,
)
from .verification_use_cases import (
    RequestVerificationUseCase, ReviewVerificationRequestUseCase, IssueBadgeUseCase,
    ListBadgesUseCase, ListMyVerificationRequestsUseCase, ListVerificationRequestsUseCase,
)
from .task_use_cases import (
    AggregateJobsUseCase, EscalateDisputesUseCase, MilestoneRemindersUseCase,
)

__all__ = [
    # Base Use Cases
    "BaseUseCase",
    "QueryUseCase",
    "CommandUseCase",
    "PaginatedQueryUseCase",
    "AuthorizedUseCase",
    "UseCaseResult",
    "RegisterUserUseCase",
    "LoginUseCase",
    "RefreshTokenUseCase",
    "GetMeUseCase",
    "GetProfileUseCase",
    "UpdateProfileUseCase",
    "UpdateEmployerUseCase",
    "VerifyEmployerUseCase",
    "ListEmployersUseCase",
    "PostJobUseCase",
    "SearchJobsUseCase",
    "GetJobUseCase",
    "ListMyJobsUseCase",
    "ApplyToJobUseCase",
    "ListJobApplicationsUseCase",
    "ListMyApplicationsUseCase",
    "DecideApplicationUseCase",
    "ModerateJobUseCase",
    "FeatureJobUseCase",
    "ListJobsForModerationUseCase",
    "ListScrapingLogsUseCase",
    "CreateContractUseCase",
    "GetContractUseCase",
    "ListContractsUseCase",
    "AddMilestoneUseCase",
    "SetMilestoneDependencyUseCase",
    "StartMilestoneUseCase",
    "SubmitMilestoneUseCase",
    "ApproveMilestoneUseCase",
    "RejectMilestoneUseCase",
    "CompleteContractUseCase",
    "CancelContractUseCase",
    "RenewContractUseCase",
    "OpenNegotiationUseCase",
    "CounterOfferUseCase",
    "RespondToNegotiationUseCase",
    "ListNegotiationsUseCase",
    "ProposeAmendmentUseCase",
    "ReviewAmendmentUseCase",
    "ListAmendmentsUseCase",
    "InitializeEscrowUseCase",
    "SubmitPaymentProofUseCase",
    "ReviewPaymentProofUseCase",
    "ListPendingPaymentProofsUseCase",
    "HandlePaymentWebhookUseCase",
    "GetWalletUseCase",
    "ListTransactionsUseCase",
    "PaymentSummaryUseCase",
    "RequestPayoutUseCase",
    "SettlePayoutUseCase",
    "ListPendingPayoutsUseCase",
    "RaiseDisputeUseCase",
    "GetDisputeUseCase",
    "ListDisputesUseCase",
    "ReviewDisputeUseCase",
    "ResolveDisputeUseCase",
    "CloseDisputeUseCase",
    "RequestVerificationUseCase",
    "ReviewVerificationRequestUseCase",
    "IssueBadgeUseCase",
    "ListBadgesUseCase",
    "ListMyVerificationRequestsUseCase",
    "ListVerificationRequestsUseCase",
    "AggregateJobsUseCase",
    "EscalateDisputesUseCase",
    "MilestoneRemindersUseCase",
]
