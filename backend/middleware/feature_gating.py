"""
Feature Gating Middleware
Server-side enforcement of plan-based feature access for dashboard endpoints.
The company is taken from the path (company_id) or the X-Company-Id header and
checked through the feature entitlement resolver; anything but a clear grant is a 403.
"""
from fastapi import HTTPException, Request
from functools import wraps
from typing import Optional
import logging

logger = logging.getLogger(__name__)

COMPANY_HEADER = "X-Company-Id"


def get_company_id(request: Request) -> Optional[str]:
    """Company the request is scoped to: path parameter first, then header."""
    company_id = request.path_params.get("company_id") or request.headers.get(COMPANY_HEADER)
    if company_id:
        company_id = company_id.strip()
    return company_id or None


def require_feature(feature_id: str):
    """
    Decorator to enforce plan-based feature access.

    Provided for the routers that serve premium dashboard modules (analytics,
    benchmarking, integrations); the routers in this package only report
    entitlements and are not gated themselves.

    Usage:
        @router.get("/benchmarks")
        @require_feature("benchmarking")
        async def my_endpoint(request: Request):
            ...
    """
    def decorator(func):
        @wraps(func)
        async def wrapper(request: Request, *args, **kwargs):
            from services.feature_entitlement import feature_entitlement_resolver
            from services.plan_messaging import build_feature_gate

            company_id = get_company_id(request)
            if not company_id:
                raise HTTPException(400, f"Company not selected. Send the {COMPANY_HEADER} header.")

            if await feature_entitlement_resolver.has_feature(company_id, feature_id):
                return await func(request, *args, **kwargs)

            features = await feature_entitlement_resolver.get_company_features(company_id)
            gate = build_feature_gate(feature_id, features.plan)

            logger.warning(
                "Feature access denied: company_id=%s plan=%s requested_feature=%s endpoint=%s method=%s",
                company_id, features.plan.value, feature_id, request.url.path, request.method
            )

            raise HTTPException(
                status_code=403,
                detail={
                    "error_code": "PLAN_NOT_ELIGIBLE",
                    "feature": feature_id,
                    "message": f"{gate.feature} requires the {gate.required_plan.value} plan. {gate.upgrade_prompt}",
                    "required_plan": gate.required_plan.value,
                    "upgrade_required": True,
                }
            )

        return wrapper
    return decorator
