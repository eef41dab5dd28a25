"""Feature Routes - Entitlement checks for the selected company.

Endpoints:
- GET /api/features - All features and whether the company has them
- GET /api/features/matrix - Feature/plan matrix (pricing page, docs)
- GET /api/features/check/{feature_id} - Single entitlement check
- GET /api/features/{feature_id}/gate - Locked-feature overlay copy
- POST /api/features/cache/invalidate - Forget cached answers after a plan change
"""
from fastapi import APIRouter, HTTPException, Request, status
from middleware.feature_gating import COMPANY_HEADER, get_company_id
from models import FeatureAccessDecision, FeatureGateContent, FeaturesResponse
from services.feature_entitlement import feature_entitlement_resolver
from services.plan_messaging import build_feature_gate
from services.plan_registry import plan_registry
import logging

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/features", tags=["features"])


def _require_company_id(request: Request) -> str:
    company_id = get_company_id(request)
    if not company_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Company not selected. Send the {COMPANY_HEADER} header."
        )
    return company_id


@router.get("", response_model=FeaturesResponse)
async def list_features(request: Request):
    """Get every registered feature with its availability for the company."""
    company_id = _require_company_id(request)
    return await feature_entitlement_resolver.get_company_features(company_id)


@router.get("/matrix")
async def get_feature_matrix():
    """Get the complete feature/plan matrix."""
    return plan_registry.get_entitlement_matrix()


@router.get("/check/{feature_id}", response_model=FeatureAccessDecision)
async def check_feature(request: Request, feature_id: str):
    """Check one feature. Lookup failures answer has_access=false, never an error."""
    company_id = _require_company_id(request)
    return await feature_entitlement_resolver.check(company_id, feature_id)


@router.get("/{feature_id}/gate", response_model=FeatureGateContent)
async def get_feature_gate(request: Request, feature_id: str):
    """Get upgrade copy for a locked feature, tuned to the company's plan."""
    company_id = _require_company_id(request)
    features = await feature_entitlement_resolver.get_company_features(company_id)
    return build_feature_gate(feature_id, features.plan)


@router.post("/cache/invalidate")
async def invalidate_feature_cache(request: Request):
    """Drop cached entitlement answers for the company."""
    company_id = _require_company_id(request)
    feature_entitlement_resolver.invalidate(company_id)
    logger.info(f"Feature cache invalidated for company {company_id}")
    return {"success": True, "company_id": company_id}
