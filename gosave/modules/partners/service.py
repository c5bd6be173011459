import logging
from datetime import datetime, timezone
from supabase import Client
from typing import Any, Dict, List, Optional
from gosave.core.exceptions import (
    ConflictError, NotFoundError, UpstreamError, ValidationError, is_unique_violation
)
from gosave.core.filters import visible_partner_statuses
from gosave.core.roles import PartnerStatus, Role
from gosave.core.secure_queries import SecureQueries
from gosave.modules.partners.schemas import (
    ApplicationResponse, ApplicationStatusResponse, PartnerApply, PartnerResponse
)

logger = logging.getLogger(__name__)

# pending is the only non-terminal state
ALLOWED_TRANSITIONS = {
    PartnerStatus.PENDING: {PartnerStatus.APPROVED, PartnerStatus.REJECTED},
    PartnerStatus.APPROVED: set(),
    PartnerStatus.REJECTED: set(),
}

EXISTING_APPLICATION_MESSAGES = {
    PartnerStatus.PENDING.value: "Your application is already submitted and under review",
    PartnerStatus.APPROVED.value: "You are already an approved partner",
    PartnerStatus.REJECTED.value: "Your previous application was rejected. Please contact support for more information",
}

STATUS_MESSAGES = {
    PartnerStatus.PENDING.value: "Your application is under review",
    PartnerStatus.APPROVED.value: "Congratulations! Your application has been approved",
    PartnerStatus.REJECTED.value: "Your application has been rejected",
}


class PartnerService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.queries = SecureQueries(supabase)

    def list_partners(self, role: Optional[Role]) -> List[PartnerResponse]:
        """Partners the role may observe (approved only for non-admins)"""
        partners, error = self.queries.get_partners_for_user(role)
        if error:
            raise UpstreamError("Failed to fetch partners")
        return [PartnerResponse(**p) for p in partners]

    def list_by_status(self, status: PartnerStatus) -> List[PartnerResponse]:
        """Admin view of partners in one status"""
        try:
            result = self.supabase.table("partners")\
                .select("*")\
                .eq("status", status.value)\
                .order("created_at", desc=True)\
                .execute()
        except Exception as e:
            raise UpstreamError("Failed to fetch partners", cause=e)
        return [PartnerResponse(**p) for p in result.data or []]

    def get_partner(self, partner_id: str, role: Optional[Role]) -> PartnerResponse:
        partner = self._fetch(partner_id)
        statuses = visible_partner_statuses(role)
        if partner is None or (statuses is not None and partner.get("status") not in statuses):
            raise NotFoundError("Partner not found")
        return PartnerResponse(**partner)

    def apply(self, application: PartnerApply) -> ApplicationResponse:
        """Submit a partner application; it starts as pending"""
        email = application.email.lower()
        try:
            existing = self.supabase.table("partners")\
                .select("id, status, email")\
                .eq("email", email)\
                .limit(1)\
                .execute()
        except Exception as e:
            raise UpstreamError("Failed to process application", cause=e)

        if existing.data:
            status = existing.data[0].get("status")
            raise ConflictError(EXISTING_APPLICATION_MESSAGES.get(status, "Application already exists"))

        try:
            result = self.supabase.table("partners").insert({
                "brand_name": application.brand_name,
                "owner_name": application.owner_name,
                "email": email,
                "phone": application.phone,
                "website": application.website,
                "business_type": application.business_type,
                "address": application.address,
                "city": application.city,
                "min_discount": application.min_discount,
                "max_discount": application.max_discount,
                "contract_duration_months": application.contract_duration_months,
                "admin_notes": application.description,
                "status": PartnerStatus.PENDING.value,
            }).execute()
        except Exception as e:
            if is_unique_violation(e):
                raise ConflictError("Application already exists")
            raise UpstreamError("Failed to submit application", cause=e)

        if not result.data:
            raise UpstreamError("Failed to submit application")
        partner = result.data[0]
        logger.info(f"New partner application {partner['id']}: {application.brand_name} ({email})")
        return ApplicationResponse(
            application_id=str(partner["id"]),
            email=email,
            brand_name=application.brand_name,
            status=PartnerStatus.PENDING.value,
            message="Your application is now under review. You will be notified once it's processed.",
        )

    def application_status(self, email: str) -> ApplicationStatusResponse:
        try:
            result = self.supabase.table("partners")\
                .select("id, brand_name, status, created_at, approved_at, rejection_reason")\
                .eq("email", email.lower())\
                .limit(1)\
                .execute()
        except Exception as e:
            raise UpstreamError("Failed to check application status", cause=e)
        if not result.data:
            raise NotFoundError("No application found for this email address")

        partner = result.data[0]
        status = partner.get("status")
        return ApplicationStatusResponse(
            application_id=str(partner["id"]),
            brand_name=partner["brand_name"],
            status=status,
            message=STATUS_MESSAGES.get(status, "Unknown application status"),
            submitted_at=partner.get("created_at"),
            processed_at=partner.get("approved_at"),
            rejection_reason=partner.get("rejection_reason") if status == PartnerStatus.REJECTED.value else None,
        )

    def approve(self, partner_id: str, admin_id: str, notes: Optional[str] = None) -> PartnerResponse:
        return self._transition(partner_id, PartnerStatus.APPROVED, admin_id, {
            "admin_notes": notes,
        })

    def reject(self, partner_id: str, admin_id: str, reason: str, notes: Optional[str] = None) -> PartnerResponse:
        return self._transition(partner_id, PartnerStatus.REJECTED, admin_id, {
            "rejection_reason": reason,
            "admin_notes": notes,
        })

    def _transition(self, partner_id: str, target: PartnerStatus, admin_id: str, extra: Dict[str, Any]) -> PartnerResponse:
        partner = self._fetch(partner_id)
        if partner is None:
            raise NotFoundError("Partner not found")

        try:
            current = PartnerStatus(partner.get("status"))
        except ValueError:
            raise ValidationError(f"Partner has unknown status {partner.get('status')!r}")
        if target not in ALLOWED_TRANSITIONS[current]:
            raise ValidationError(f"Partner is already {current.value}")

        now = datetime.now(timezone.utc).isoformat()
        try:
            # Guarded on the current status so two reviewers cannot both move it
            result = self.supabase.table("partners")\
                .update({
                    "status": target.value,
                    "approved_by": admin_id,
                    "approved_at": now,
                    "updated_at": now,
                    **extra,
                })\
                .eq("id", partner_id)\
                .eq("status", current.value)\
                .execute()
        except Exception as e:
            raise UpstreamError(f"Failed to update partner to {target.value}", cause=e)

        if not result.data:
            raise ValidationError("Partner was already processed")
        logger.info(f"Admin {admin_id} moved partner {partner_id} from {current.value} to {target.value}")
        return PartnerResponse(**result.data[0])

    def _fetch(self, partner_id: str) -> Optional[Dict[str, Any]]:
        try:
            result = self.supabase.table("partners")\
                .select("*")\
                .eq("id", partner_id)\
                .limit(1)\
                .execute()
        except Exception as e:
            raise UpstreamError("Failed to fetch partner", cause=e)
        return result.data[0] if result.data else None
