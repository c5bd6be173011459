from fastapi import APIRouter, Depends
from gosave.core.audit import log_access, log_security_event
from gosave.core.dependencies import get_optional_user, require_admin
from gosave.core.roles import PartnerStatus
from gosave.database.supabase_client import get_supabase
from gosave.modules.auth.schemas import CurrentUser
from gosave.modules.partners.schemas import (
    ApplicationResponse, ApplicationStatusResponse, PartnerApply, PartnerListResponse,
    PartnerReject, PartnerResponse, PartnerReview
)
from gosave.modules.partners.service import PartnerService
from supabase import Client
from typing import Optional

router = APIRouter(prefix="/partners", tags=["partners"])


def get_partner_service(supabase: Client = Depends(get_supabase)) -> PartnerService:
    return PartnerService(supabase)


@router.get("", response_model=PartnerListResponse)
async def list_partners(service: PartnerService = Depends(get_partner_service)):
    """List approved partners (public)"""
    partners = service.list_partners(role=None)
    return PartnerListResponse(data=partners, count=len(partners))


@router.get("/all", response_model=PartnerListResponse)
async def list_all_partners(
    user: CurrentUser = Depends(require_admin),
    service: PartnerService = Depends(get_partner_service)
):
    """List partners in every status (admin only)"""
    partners = service.list_partners(role=user.role)
    log_access(user.id, "partners", "view_all")
    return PartnerListResponse(data=partners, count=len(partners))


@router.get("/pending", response_model=PartnerListResponse)
async def list_pending_partners(
    user: CurrentUser = Depends(require_admin),
    service: PartnerService = Depends(get_partner_service)
):
    """Applications awaiting review (admin only)"""
    partners = service.list_by_status(PartnerStatus.PENDING)
    return PartnerListResponse(data=partners, count=len(partners))


@router.post("/apply", response_model=ApplicationResponse, status_code=201)
async def apply(
    application: PartnerApply,
    service: PartnerService = Depends(get_partner_service)
):
    """Submit a partner application"""
    return service.apply(application)


@router.get("/application-status/{email}", response_model=ApplicationStatusResponse)
async def application_status(
    email: str,
    service: PartnerService = Depends(get_partner_service)
):
    """Check an application by the applicant's email"""
    return service.application_status(email)


@router.get("/{partner_id}", response_model=PartnerResponse)
async def get_partner(
    partner_id: str,
    user: Optional[CurrentUser] = Depends(get_optional_user),
    service: PartnerService = Depends(get_partner_service)
):
    """Get a partner; non-admins only see approved partners"""
    return service.get_partner(partner_id, user.role if user else None)


@router.post("/{partner_id}/approve", response_model=PartnerResponse)
async def approve_partner(
    partner_id: str,
    review: Optional[PartnerReview] = None,
    user: CurrentUser = Depends(require_admin),
    service: PartnerService = Depends(get_partner_service)
):
    """Approve a pending application (admin only)"""
    partner = service.approve(partner_id, user.id, review.notes if review else None)
    log_security_event(user.id, "PARTNER_APPROVED", f"Partner ID: {partner_id}")
    return partner


@router.post("/{partner_id}/reject", response_model=PartnerResponse)
async def reject_partner(
    partner_id: str,
    rejection: PartnerReject,
    user: CurrentUser = Depends(require_admin),
    service: PartnerService = Depends(get_partner_service)
):
    """Reject a pending application with a reason (admin only)"""
    partner = service.reject(partner_id, user.id, rejection.reason, rejection.notes)
    log_security_event(user.id, "PARTNER_REJECTED", f"Partner ID: {partner_id} reason={rejection.reason}")
    return partner
