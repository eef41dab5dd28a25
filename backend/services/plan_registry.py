"""Canonical Plan Registry - Single Source of Truth for plan tiers and features.

This is the AUTHORITATIVE source for:
- Plan tiers and their ordering
- User limits
- Feature entitlements per tier

RULES:
1. Plans only toggle access to completed capability modules
2. Unknown plan values resolve to starter, never to a higher tier
3. A pro company whose trial has expired is evaluated as starter
4. Only trial and active subscriptions unlock features

Plan Structure:
- starter: ESG tracking essentials, 5 users
- pro: analytics, benchmarking, API access, 20 users
- enterprise: everything, unlimited users
"""
from typing import Dict, Optional, Any
from models import PlanTier, SubscriptionStatus, TrialStatus
import logging

logger = logging.getLogger(__name__)


PLAN_ORDER = {
    PlanTier.STARTER: 0,
    PlanTier.PRO: 1,
    PlanTier.ENTERPRISE: 2,
}


# ============================================================================
# SUBSCRIPTION ALLOW-LIST - Shared helper for feature gating
# ============================================================================
SUBSCRIPTION_STATUSES_ALLOWING_FEATURE_ACCESS = frozenset({
    SubscriptionStatus.TRIAL.value,
    SubscriptionStatus.ACTIVE.value,
})


def subscription_allows_feature_access(subscription_status: Optional[str]) -> bool:
    """
    Return True if subscription status is in the allow-list for feature access.
    Pass the status from a TrialStatus so missing values already carry their default.
    """
    if not subscription_status or not isinstance(subscription_status, str):
        return False
    return subscription_status.lower() in SUBSCRIPTION_STATUSES_ALLOWING_FEATURE_ACCESS


# ============================================================================
# PLAN DEFINITIONS
# ============================================================================
PLAN_DEFINITIONS = {
    PlanTier.STARTER: {
        "code": "starter",
        "name": "Starter",
        "display_name": "Starter Plan",
        "description": "ESG tracking and BRSR-ready reporting for growing companies",
        "max_users": 5,
    },
    PlanTier.PRO: {
        "code": "pro",
        "name": "Pro",
        "display_name": "Pro Plan",
        "description": "Analytics, benchmarking and integrations for enterprise-ready teams",
        "max_users": 20,
    },
    PlanTier.ENTERPRISE: {
        "code": "enterprise",
        "name": "Enterprise",
        "display_name": "Enterprise Plan",
        "description": "Fully audit-ready ESG operations with custom frameworks and SLAs",
        "max_users": -1,  # Unlimited
    },
}


# ============================================================================
# FEATURE METADATA
# ============================================================================
FEATURE_METADATA = {
    # Dashboard & Tracking
    "esg_tracking_dashboard": {"name": "ESG Tracking Dashboard", "description": "Track environment, social and governance metrics", "category": "tracking"},
    "unlimited_report_exports": {"name": "Unlimited Report Exports", "description": "Export reports without monthly caps", "category": "tracking"},
    "year_on_year_comparison": {"name": "Year-on-Year Comparison", "description": "Compare metrics against the previous reporting year", "category": "tracking"},
    "multi_year_trend_analysis": {"name": "Multi-Year Trend Analysis", "description": "Trends across several reporting years", "category": "tracking"},

    # Reports & Templates
    "brsr_compliant_templates": {"name": "BRSR-Compliant Templates", "description": "Business Responsibility and Sustainability Report templates", "category": "reports"},
    "industry_specific_templates": {"name": "Industry-Specific Templates", "description": "Sector-specific ESG reporting templates", "category": "reports"},
    "custom_report_branding": {"name": "Custom Report Branding", "description": "Company branding on exported reports", "category": "reports"},

    # Scoring & Analytics
    "basic_esg_scoring": {"name": "Basic ESG Scoring", "description": "ESG scorecard with pillar scores", "category": "analytics"},
    "advanced_analytics": {"name": "Advanced Analytics", "description": "Deeper drill-downs and derived indicators", "category": "analytics"},
    "benchmarking": {"name": "Industry Benchmarking", "description": "Compare performance against industry peers", "category": "analytics"},

    # Compliance
    "compliance_deadline_alerts": {"name": "Compliance Deadline Alerts", "description": "Alerts ahead of regulatory deadlines", "category": "compliance"},
    "custom_compliance_frameworks": {"name": "Custom Compliance Frameworks", "description": "Define frameworks beyond BRSR", "category": "compliance"},

    # Support
    "email_support": {"name": "Email Support", "description": "Support over email", "category": "support"},
    "priority_email_support": {"name": "Priority Email Support", "description": "Faster email response times", "category": "support"},
    "dedicated_account_manager": {"name": "Dedicated Account Manager", "description": "A named account manager", "category": "support"},
    "dedicated_success_manager": {"name": "Dedicated Success Manager", "description": "Strategic ESG improvement guidance", "category": "support"},
    "training_onboarding_support": {"name": "Training & Onboarding", "description": "Guided onboarding for your team", "category": "support"},
    "support_247": {"name": "24/7 Priority Support", "description": "Round-the-clock support", "category": "support"},

    # Users & Access
    "api_access": {"name": "API Access", "description": "Programmatic access to ESG data", "category": "access"},

    # Enterprise Features
    "white_label_options": {"name": "White-Label Options", "description": "Present ESG data under your own brand", "category": "enterprise"},
    "custom_integrations": {"name": "Custom Integrations", "description": "Connect ERP and accounting systems", "category": "enterprise"},
    "advanced_security_sso": {"name": "Advanced Security & SSO", "description": "Single sign-on and security controls", "category": "enterprise"},
    "on_premise_deployment": {"name": "On-Premise Deployment", "description": "Run inside your own infrastructure", "category": "enterprise"},
    "custom_sla_guarantees": {"name": "Custom SLA Guarantees", "description": "Contracted uptime and support levels", "category": "enterprise"},
}


# ============================================================================
# FEATURE ENTITLEMENT MATRIX - What each plan gets
# ============================================================================
FEATURE_MATRIX = {
    PlanTier.STARTER: {
        "esg_tracking_dashboard": True,
        "unlimited_report_exports": True,
        "year_on_year_comparison": True,
        "multi_year_trend_analysis": False,
        "brsr_compliant_templates": True,
        "industry_specific_templates": False,
        "custom_report_branding": False,
        "basic_esg_scoring": True,
        "advanced_analytics": False,
        "benchmarking": False,
        "compliance_deadline_alerts": True,
        "custom_compliance_frameworks": False,
        "email_support": True,
        "priority_email_support": False,
        "dedicated_account_manager": False,
        "dedicated_success_manager": False,
        "training_onboarding_support": False,
        "support_247": False,
        "api_access": False,
        "white_label_options": False,
        "custom_integrations": False,
        "advanced_security_sso": False,
        "on_premise_deployment": False,
        "custom_sla_guarantees": False,
    },
    PlanTier.PRO: {
        "esg_tracking_dashboard": True,
        "unlimited_report_exports": True,
        "year_on_year_comparison": True,
        "multi_year_trend_analysis": True,
        "brsr_compliant_templates": True,
        "industry_specific_templates": True,
        "custom_report_branding": True,
        "basic_esg_scoring": True,
        "advanced_analytics": True,
        "benchmarking": True,
        "compliance_deadline_alerts": True,
        "custom_compliance_frameworks": False,
        "email_support": True,
        "priority_email_support": True,
        "dedicated_account_manager": True,
        "dedicated_success_manager": False,
        "training_onboarding_support": True,
        "support_247": False,
        "api_access": True,
        "white_label_options": False,
        "custom_integrations": False,
        "advanced_security_sso": False,
        "on_premise_deployment": False,
        "custom_sla_guarantees": False,
    },
    PlanTier.ENTERPRISE: {feature_id: True for feature_id in FEATURE_METADATA},
}


class PlanRegistryService:
    """Lookups over the plan definitions and feature matrix."""

    def resolve_plan_tier(self, value: Any) -> PlanTier:
        """Resolve a stored plan value to a PlanTier; anything unknown is starter."""
        if isinstance(value, PlanTier):
            return value
        if isinstance(value, str):
            try:
                return PlanTier(value.strip().lower())
            except ValueError:
                pass
        if value not in (None, ""):
            logger.debug(f"Unknown plan value {value!r}, resolving to starter")
        return PlanTier.STARTER

    def get_features(self, plan: Any) -> Dict[str, bool]:
        return FEATURE_MATRIX[self.resolve_plan_tier(plan)].copy()

    def is_known_feature(self, feature_id: str) -> bool:
        return feature_id in FEATURE_METADATA

    def plan_has_feature(self, plan: Any, feature_id: str) -> bool:
        return FEATURE_MATRIX[self.resolve_plan_tier(plan)].get(feature_id, False) is True

    def get_user_limit(self, plan: Any) -> int:
        return PLAN_DEFINITIONS[self.resolve_plan_tier(plan)]["max_users"]

    def is_upgrade(self, current: Any, target: Any) -> bool:
        return PLAN_ORDER[self.resolve_plan_tier(target)] > PLAN_ORDER[self.resolve_plan_tier(current)]

    def get_minimum_plan_for_feature(self, feature_id: str) -> Optional[PlanTier]:
        """Lowest tier that includes the feature, or None for unknown features."""
        for tier in sorted(PLAN_ORDER, key=PLAN_ORDER.get):
            if FEATURE_MATRIX[tier].get(feature_id):
                return tier
        return None

    def get_effective_plan(self, plan: Any, trial_status: Optional[TrialStatus]) -> PlanTier:
        """
        Plan used for entitlement checks.
        An expired pro trial is downgraded to starter features.
        """
        tier = self.resolve_plan_tier(plan)
        if (
            trial_status is not None
            and trial_status.is_trial
            and trial_status.is_expired
            and tier == PlanTier.PRO
        ):
            return PlanTier.STARTER
        return tier

    def get_entitlement_matrix(self) -> Dict[str, Any]:
        """Generate complete feature/plan matrix for documentation."""
        matrix = {}
        for feature_id, info in FEATURE_METADATA.items():
            matrix[feature_id] = {
                "name": info["name"],
                "description": info["description"],
                "category": info["category"],
                "plans": {
                    tier.value: FEATURE_MATRIX[tier].get(feature_id, False)
                    for tier in PlanTier
                },
            }

        return {
            "features": matrix,
            "plans": {
                tier.value: {
                    "name": plan["name"],
                    "display_name": plan["display_name"],
                    "max_users": plan["max_users"],
                }
                for tier, plan in PLAN_DEFINITIONS.items()
            },
        }


# Singleton instance
plan_registry = PlanRegistryService()
