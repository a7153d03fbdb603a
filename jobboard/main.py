"""FastAPI application for job moderation and promotion review."""

from dataclasses import dataclass
from datetime import datetime
from functools import lru_cache
from typing import Callable, List, Optional

from fastapi import Depends, FastAPI, Header, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from jobboard.api.schemas.job_schemas import (
    BulkActionRequest,
    ChangeStatusRequest,
    ExtendPromotionRequest,
    JobResponse,
    ReviewJobRequest
)
from jobboard.api.schemas.promotion_request_schemas import ApproveRequest, RejectRequest
from jobboard.config import (
    PromotionPolicy,
    allow_list_authorizer,
    configure_logging,
    load_admin_user_ids,
    load_promotion_policy
)
from jobboard.constants import ACTOR_HEADER
from jobboard.database.client import get_supabase_client
from jobboard.exceptions import (
    AlreadyProcessed,
    InvalidTransition,
    NotFound,
    PromotionNotAllowed,
    StorePersistenceError
)
from jobboard.models.bulk import BulkReport
from jobboard.models.job import Job, JobStatus, PromotionKind
from jobboard.models.promotion import ReconciliationReport
from jobboard.models.promotion_request import ApprovalResult, PromotionRequest, RequestStatus
from jobboard.repositories.job_repository import JobRepository
from jobboard.repositories.notification_repository import NotificationRepository
from jobboard.repositories.promotion_request_repository import PromotionRequestRepository
from jobboard.services.approval_workflow import ApprovalWorkflow
from jobboard.services.bulk_operation_service import BulkOperationCoordinator
from jobboard.services.job_service import JobService
from jobboard.services.lifecycle_engine import LifecycleEngine
from jobboard.services.notification_service import NotificationService
from jobboard.services.promotion_scheduler import PromotionScheduler
from jobboard.utils.authorization import Authorizer, ensure_can_moderate
from jobboard.utils.clock import utc_now
from jobboard.utils.job_locks import JobLocks


@dataclass
class AdminServices:
    """Services backing the admin API, sharing one lock registry."""
    job_service: JobService
    promotion_scheduler: PromotionScheduler
    approval_workflow: ApprovalWorkflow
    bulk_coordinator: BulkOperationCoordinator


def build_services(
    job_repository,
    request_repository,
    notification_repository,
    can_approve: Authorizer,
    policy: Optional[PromotionPolicy] = None,
    clock: Callable[[], datetime] = utc_now
) -> AdminServices:
    """Wire the moderation services around the given repositories.

    Args:
        job_repository: Job store (Supabase or in-memory).
        request_repository: Promotion request store.
        notification_repository: Notification port.
        can_approve: Authorization capability for moderators.
        policy: Promotion policy; defaults to 30 day windows.
        clock: Callable returning the current time.

    Returns:
        AdminServices container.
    """
    policy = policy or PromotionPolicy()
    locks = JobLocks()
    lifecycle_engine = LifecycleEngine()
    notification_service = NotificationService(notification_repository)
    promotion_scheduler = PromotionScheduler(job_repository, policy, can_approve, locks, clock)

    return AdminServices(
        job_service=JobService(
            job_repository, lifecycle_engine, promotion_scheduler, notification_service, can_approve, locks
        ),
        promotion_scheduler=promotion_scheduler,
        approval_workflow=ApprovalWorkflow(
            job_repository, request_repository, notification_service, lifecycle_engine,
            policy, can_approve, locks, clock
        ),
        bulk_coordinator=BulkOperationCoordinator(
            job_repository, notification_service, lifecycle_engine, promotion_scheduler,
            policy, can_approve, locks, clock
        )
    )


@lru_cache
def get_services() -> AdminServices:
    """Supabase-backed services, created on first request."""
    supabase = get_supabase_client()
    return build_services(
        job_repository=JobRepository(supabase),
        request_repository=PromotionRequestRepository(supabase),
        notification_repository=NotificationRepository(supabase),
        can_approve=allow_list_authorizer(load_admin_user_ids()),
        policy=load_promotion_policy()
    )


configure_logging()
app = FastAPI(title="jobboard-moderation")

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Global exception handlers
@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError):
    """Convert ValueError to appropriate HTTP exception.

    - NotFound or "not found" → 404 Not Found
    - InvalidTransition, PromotionNotAllowed, AlreadyProcessed → 409 Conflict
    - Everything else → 400 Bad Request
    """
    error_msg = str(exc).lower()

    if isinstance(exc, NotFound) or "not found" in error_msg:
        status_code = 404
    elif isinstance(exc, (InvalidTransition, PromotionNotAllowed, AlreadyProcessed)):
        status_code = 409
    else:
        status_code = 400

    return JSONResponse(
        status_code=status_code,
        content={"detail": str(exc)}
    )


@app.exception_handler(PermissionError)
async def permission_error_handler(request: Request, exc: PermissionError):
    """Reject actors that fail the moderation capability check."""
    return JSONResponse(status_code=403, content={"detail": str(exc)})


@app.exception_handler(StorePersistenceError)
async def store_error_handler(request: Request, exc: StorePersistenceError):
    """Report storage outages as retryable."""
    return JSONResponse(status_code=503, content={"detail": str(exc)})


@app.get("/")
def root():
    """Health check endpoint.

    Returns:
        Dictionary with status indicator.
    """
    return {"status": "ok"}


# Job endpoints
@app.get("/jobs", response_model=List[JobResponse])
def list_jobs(
    status: Optional[JobStatus] = None,
    employer_id: Optional[str] = None,
    promoted_only: bool = False,
    services: AdminServices = Depends(get_services)
):
    """List jobs with their effective promotion state."""
    rows = services.job_service.list_jobs(status, employer_id, promoted_only)
    return [JobResponse(job=job, promotion=state) for job, state in rows]


@app.get("/jobs/{job_id}", response_model=JobResponse)
def get_job(job_id: str, services: AdminServices = Depends(get_services)):
    """Get a job with its effective promotion state (expired jobs show as expired)."""
    job, state = services.job_service.view_job(job_id)
    return JobResponse(job=job, promotion=state)


@app.post("/jobs/bulk", response_model=BulkReport)
def apply_bulk_action(
    request: BulkActionRequest,
    actor_id: Optional[str] = Header(default=None, alias=ACTOR_HEADER),
    services: AdminServices = Depends(get_services)
):
    """Apply one action to many jobs; per-job outcomes are reported, not raised."""
    return services.bulk_coordinator.apply(request.job_ids, request.action, actor_id, request.reason)


@app.post("/jobs/{job_id}/status", response_model=Job)
def change_job_status(
    job_id: str,
    request: ChangeStatusRequest,
    actor_id: Optional[str] = Header(default=None, alias=ACTOR_HEADER),
    services: AdminServices = Depends(get_services)
):
    """Change a job's moderation status."""
    return services.job_service.change_status(
        job_id, request.status, actor_id, request.notes, request.reason
    )


@app.post("/jobs/{job_id}/extend", response_model=Job)
def extend_promotion(
    job_id: str,
    request: ExtendPromotionRequest,
    actor_id: Optional[str] = Header(default=None, alias=ACTOR_HEADER),
    services: AdminServices = Depends(get_services)
):
    """Extend a job's featured or freelance window."""
    return services.promotion_scheduler.extend_job(job_id, request.kind, actor_id, request.days)


@app.post("/jobs/{job_id}/review", response_model=ApprovalResult)
def review_job(
    job_id: str,
    request: ReviewJobRequest,
    actor_id: Optional[str] = Header(default=None, alias=ACTOR_HEADER),
    services: AdminServices = Depends(get_services)
):
    """Approve or decline a job submitted directly as featured or freelance."""
    return services.approval_workflow.review_job(
        job_id, request.decision, request.kind, actor_id, request.notes
    )


@app.delete("/jobs/{job_id}")
def delete_job(
    job_id: str,
    actor_id: Optional[str] = Header(default=None, alias=ACTOR_HEADER),
    services: AdminServices = Depends(get_services)
):
    """Permanently delete a job."""
    services.job_service.delete_job(job_id, actor_id)
    return {"deleted": True, "job_id": job_id}


# Promotion request endpoints
@app.get("/promotion-requests", response_model=List[PromotionRequest])
def list_promotion_requests(
    status: Optional[RequestStatus] = None,
    kind: Optional[PromotionKind] = None,
    services: AdminServices = Depends(get_services)
):
    """List promotion requests for the review queue."""
    return services.approval_workflow.list_requests(status, kind)


@app.post("/promotion-requests/{request_id}/approve", response_model=ApprovalResult)
def approve_promotion_request(
    request_id: str,
    request: ApproveRequest,
    actor_id: Optional[str] = Header(default=None, alias=ACTOR_HEADER),
    services: AdminServices = Depends(get_services)
):
    """Approve a payment-backed promotion request."""
    return services.approval_workflow.approve(request_id, actor_id, request.notes)


@app.post("/promotion-requests/{request_id}/reject", response_model=ApprovalResult)
def reject_promotion_request(
    request_id: str,
    request: RejectRequest,
    actor_id: Optional[str] = Header(default=None, alias=ACTOR_HEADER),
    services: AdminServices = Depends(get_services)
):
    """Reject a payment-backed promotion request and notify the employer."""
    return services.approval_workflow.reject(request_id, actor_id, request.reason)


# Maintenance endpoints
@app.post("/promotions/reconcile", response_model=ReconciliationReport)
def reconcile_promotions(
    actor_id: Optional[str] = Header(default=None, alias=ACTOR_HEADER),
    services: AdminServices = Depends(get_services)
):
    """Persist expiry of lapsed promotion windows."""
    ensure_can_moderate(services.promotion_scheduler.can_approve, actor_id)
    return services.promotion_scheduler.reconcile_expired()
