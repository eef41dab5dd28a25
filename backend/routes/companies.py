"""Company Routes - Commercial state of a company for dashboard banners and copy.

Endpoints:
- GET /api/companies/{company_id}/trial-status
- GET /api/companies/{company_id}/plan-messaging
- GET /api/companies/{company_id}/upgrade-message?target=pro
- GET /api/companies/{company_id}/trial-banner?locale=hi
"""
from fastapi import APIRouter, HTTPException, Request, status
from typing import Optional
from models import Company, PlanMessaging, TrialStatus
from services.company_store import company_store
from services.plan_messaging import get_plan_messaging, get_upgrade_message
from services.plan_registry import plan_registry
from services.trial_banner import build_trial_banner
from services.trial_lifecycle import compute_trial_status
import logging

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/companies", tags=["companies"])


async def _load_company(company_id: str) -> Company:
    try:
        company = await company_store.get_company(company_id)
    except Exception as e:
        logger.error(f"Company lookup error for {company_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to load company"
        )

    if company is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Company not found"
        )
    return company


@router.get("/{company_id}/trial-status", response_model=TrialStatus)
async def get_trial_status(company_id: str):
    """Get the company's trial snapshot, computed against the current time."""
    company = await _load_company(company_id)
    return compute_trial_status(company)


@router.get("/{company_id}/plan-messaging", response_model=PlanMessaging)
async def get_company_plan_messaging(company_id: str):
    """Get plan-aware copy for the company's stored plan."""
    company = await _load_company(company_id)
    return get_plan_messaging(plan_registry.resolve_plan_tier(company.plan))


@router.get("/{company_id}/upgrade-message")
async def get_company_upgrade_message(company_id: str, target: str):
    """Get the upgrade line for moving from the company's plan to `target`."""
    company = await _load_company(company_id)
    current = plan_registry.resolve_plan_tier(company.plan)
    return {
        "current_plan": current.value,
        "target_plan": target,
        "message": get_upgrade_message(current, target),
    }


@router.get("/{company_id}/trial-banner")
async def get_trial_banner(request: Request, company_id: str, locale: Optional[str] = None):
    """Get the trial banner, or null when the company has none."""
    company = await _load_company(company_id)
    if locale is None:
        locale = request.app.state.locale_state.get_current_locale()
    banner = build_trial_banner(company, locale)
    return {"banner": banner.model_dump(mode="json") if banner else None}
