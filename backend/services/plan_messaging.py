"""Plan-aware messaging.

Language matters more than logic here: each tier sees different copy for the
same commercial situation. Everything in this module is a constant table plus
total lookups; no function raises for an unknown plan or feature.
"""
from typing import Any, Dict, List, Optional
from models import (
    FeatureGateContent,
    PlanMessaging,
    PlanTier,
    RequiredPlan,
    UpgradeCategory,
    UpgradeReason,
)
from services.plan_registry import plan_registry


PLAN_MESSAGING: Dict[PlanTier, PlanMessaging] = {
    PlanTier.STARTER: PlanMessaging(
        upgrade_prompt="Upgrade to Pro to unlock enterprise-ready insights.",
        status_message="Starter Plan",
        readiness_message="Getting started with ESG compliance",
        enterprise_ready="Upgrade to Pro to unlock enterprise-ready insights.",
        audit_ready="Upgrade to Pro for audit-ready reporting.",
    ),
    PlanTier.PRO: PlanMessaging(
        upgrade_prompt="You're enterprise-ready.",
        status_message="Pro Plan - Enterprise Ready",
        readiness_message="You're enterprise-ready.",
        enterprise_ready="You're enterprise-ready.",
        audit_ready="Upgrade to Enterprise for fully audit-ready compliance.",
    ),
    PlanTier.ENTERPRISE: PlanMessaging(
        upgrade_prompt="Fully audit-ready.",
        status_message="Enterprise Plan - Fully Audit Ready",
        readiness_message="Fully audit-ready.",
        enterprise_ready="Fully audit-ready.",
        audit_ready="Fully audit-ready.",
    ),
}

# Explicit transition table; pairs not listed use the current tier's prompt
UPGRADE_MESSAGES = {
    (PlanTier.STARTER, PlanTier.PRO): "Upgrade to Pro to unlock enterprise-ready insights.",
    (PlanTier.PRO, PlanTier.ENTERPRISE): "Upgrade to Enterprise for fully audit-ready compliance.",
    (PlanTier.STARTER, PlanTier.ENTERPRISE): "Upgrade to Enterprise for fully audit-ready compliance.",
}


def _known_tier(plan: Any) -> Optional[PlanTier]:
    try:
        return PlanTier(plan)
    except ValueError:
        return None


def get_plan_messaging(plan: Any) -> PlanMessaging:
    """Messaging entry for a tier; anything outside the three tiers gets starter copy."""
    return PLAN_MESSAGING.get(_known_tier(plan), PLAN_MESSAGING[PlanTier.STARTER])


def get_upgrade_message(current_plan: Any, target_plan: Any) -> str:
    message = UPGRADE_MESSAGES.get((_known_tier(current_plan), _known_tier(target_plan)))
    if message is not None:
        return message
    return get_plan_messaging(current_plan).upgrade_prompt


# ============================================================================
# UPGRADE REASONS - feature to business value
# ============================================================================
UPGRADE_REASONS: Dict[str, UpgradeReason] = {
    # Analytics & Reporting
    "multi_year_trend_analysis": UpgradeReason(
        feature="Multi-Year Trend Analysis",
        why_it_matters="Required by investors",
        business_impact="Multi-year trends help you answer investor & client ESG questions faster.",
        risk_avoided="Without trend analysis, you may struggle to demonstrate ESG progress to stakeholders.",
        value_unlocked="Show continuous improvement and build trust with enterprise clients.",
        required_plan=RequiredPlan.PRO,
        category=UpgradeCategory.ANALYTICS,
    ),
    "advanced_analytics": UpgradeReason(
        feature="Advanced Analytics",
        why_it_matters="Increases audit confidence for large enterprises",
        business_impact="Advanced analytics increases audit confidence for large enterprises.",
        risk_avoided="Missing advanced insights can delay enterprise deals and reduce competitive advantage.",
        value_unlocked="Unlock deeper insights that help you win enterprise contracts.",
        required_plan=RequiredPlan.PRO,
        category=UpgradeCategory.ANALYTICS,
    ),
    "benchmarking": UpgradeReason(
        feature="Industry Benchmarking",
        why_it_matters="Helps win enterprise deals",
        business_impact="Benchmarking helps you understand where you stand vs competitors.",
        risk_avoided="Without benchmarking, you can't identify improvement opportunities or competitive gaps.",
        value_unlocked="Position your company as an ESG leader in your industry.",
        required_plan=RequiredPlan.PRO,
        category=UpgradeCategory.ANALYTICS,
    ),

    # Integration & Automation
    "api_access": UpgradeReason(
        feature="API Access",
        why_it_matters="Needed for large clients",
        business_impact="API access automates data collection and integrates with your existing systems.",
        risk_avoided="Manual data entry increases errors and delays reporting cycles.",
        value_unlocked="Save 10+ hours per month with automated data sync and integrations.",
        required_plan=RequiredPlan.PRO,
        category=UpgradeCategory.INTEGRATION,
    ),
    "custom_integrations": UpgradeReason(
        feature="Custom Integrations",
        why_it_matters="Required for enterprise IT infrastructure",
        business_impact="Custom integrations connect ESG data with your ERP, accounting, and other systems.",
        risk_avoided="Manual data transfer increases errors and delays critical reporting deadlines.",
        value_unlocked="Eliminate data silos and create a single source of truth for ESG data.",
        required_plan=RequiredPlan.ENTERPRISE,
        category=UpgradeCategory.INTEGRATION,
    ),

    # Branding & Presentation
    "custom_report_branding": UpgradeReason(
        feature="Custom Report Branding",
        why_it_matters="Client-facing credibility",
        business_impact="Branded reports strengthen your company's professional image with clients.",
        risk_avoided="Unbranded reports look unprofessional and reduce client confidence.",
        value_unlocked="Present ESG data in a way that matches your brand identity.",
        required_plan=RequiredPlan.PRO,
        category=UpgradeCategory.BRANDING,
    ),
    "white_label_options": UpgradeReason(
        feature="White-Label Options",
        why_it_matters="Enables ESG as a service offering",
        business_impact="White-labeling lets you present ESG data under your own brand to clients.",
        risk_avoided="Without white-labeling, you can't offer ESG services as your own product.",
        value_unlocked="Monetize ESG reporting as a value-added service to your clients.",
        required_plan=RequiredPlan.ENTERPRISE,
        category=UpgradeCategory.BRANDING,
    ),

    # Templates & Compliance
    "industry_specific_templates": UpgradeReason(
        feature="Industry-Specific Templates",
        why_it_matters="Ensures sector compliance",
        business_impact="Industry templates save time and ensure compliance with sector-specific requirements.",
        risk_avoided="Generic templates may miss critical industry-specific ESG requirements.",
        value_unlocked="Reduce reporting time by 40% with pre-built industry templates.",
        required_plan=RequiredPlan.PRO,
        category=UpgradeCategory.COMPLIANCE,
    ),
    "custom_compliance_frameworks": UpgradeReason(
        feature="Custom Compliance Frameworks",
        why_it_matters="Meets specific regulatory requirements",
        business_impact="Custom frameworks align with your specific regulatory and client requirements.",
        risk_avoided="Generic frameworks may not meet all your compliance needs, creating audit risks.",
        value_unlocked="Ensure 100% compliance with your specific regulatory requirements.",
        required_plan=RequiredPlan.ENTERPRISE,
        category=UpgradeCategory.COMPLIANCE,
    ),

    # Support & Training
    "dedicated_account_manager": UpgradeReason(
        feature="Dedicated Account Manager",
        why_it_matters="Maximizes platform ROI",
        business_impact="A dedicated manager ensures you get maximum value from your ESG platform.",
        risk_avoided="Without dedicated support, you may miss optimization opportunities and best practices.",
        value_unlocked="Get personalized guidance to improve your ESG scores faster.",
        required_plan=RequiredPlan.PRO,
        category=UpgradeCategory.SUPPORT,
    ),
    "training_onboarding_support": UpgradeReason(
        feature="Training & Onboarding",
        why_it_matters="Ensures correct adoption",
        business_impact="Expert training helps your team adopt ESG practices quickly and correctly.",
        risk_avoided="Without proper training, your team may make errors that affect compliance scores.",
        value_unlocked="Ensure your team is fully trained and maximizing platform value.",
        required_plan=RequiredPlan.PRO,
        category=UpgradeCategory.SUPPORT,
    ),
    "support_247": UpgradeReason(
        feature="24/7 Priority Support",
        why_it_matters="Critical for enterprise operations",
        business_impact="24/7 support ensures issues are resolved immediately, even during off-hours.",
        risk_avoided="Delayed support during critical periods can impact compliance deadlines and client deliverables.",
        value_unlocked="Get instant help when you need it, ensuring zero disruption to your operations.",
        required_plan=RequiredPlan.ENTERPRISE,
        category=UpgradeCategory.SUPPORT,
    ),
    "dedicated_success_manager": UpgradeReason(
        feature="Dedicated Success Manager",
        why_it_matters="Strategic ESG improvement",
        business_impact="A success manager ensures you achieve maximum ROI and ESG score improvements.",
        risk_avoided="Without dedicated success support, you may not realize the full potential of the platform.",
        value_unlocked="Get strategic guidance to continuously improve your ESG performance and scores.",
        required_plan=RequiredPlan.ENTERPRISE,
        category=UpgradeCategory.SUPPORT,
    ),

    # Security & Infrastructure
    "advanced_security_sso": UpgradeReason(
        feature="Advanced Security & SSO",
        why_it_matters="Required for enterprise IT audits",
        business_impact="SSO and advanced security meet enterprise IT requirements and reduce access risks.",
        risk_avoided="Without SSO, you may fail enterprise security audits and lose large deals.",
        value_unlocked="Meet enterprise security standards and pass IT audits seamlessly.",
        required_plan=RequiredPlan.ENTERPRISE,
        category=UpgradeCategory.SECURITY,
    ),
    "on_premise_deployment": UpgradeReason(
        feature="On-Premise Deployment",
        why_it_matters="Meets data residency requirements",
        business_impact="On-premise deployment meets strict data residency and security requirements.",
        risk_avoided="Cloud-only solutions may be rejected by enterprises with strict data policies.",
        value_unlocked="Deploy ESG platform within your own infrastructure for maximum control.",
        required_plan=RequiredPlan.ENTERPRISE,
        category=UpgradeCategory.SECURITY,
    ),
    "custom_sla_guarantees": UpgradeReason(
        feature="Custom SLA Guarantees",
        why_it_matters="Ensures enterprise uptime",
        business_impact="Custom SLAs ensure uptime and support levels required for enterprise operations.",
        risk_avoided="Without SLAs, platform downtime could delay critical ESG reporting deadlines.",
        value_unlocked="Get guaranteed uptime and support levels for mission-critical ESG operations.",
        required_plan=RequiredPlan.ENTERPRISE,
        category=UpgradeCategory.SECURITY,
    ),
}

DEFAULT_WHY_IT_MATTERS = "Available in higher plans"
CONCISE_LIMIT = 60


def get_upgrade_reason(feature_id: str) -> Optional[UpgradeReason]:
    return UPGRADE_REASONS.get(feature_id)


def get_upgrade_reasons_by_category(category: Any) -> List[UpgradeReason]:
    return [reason for reason in UPGRADE_REASONS.values() if reason.category == category]


def get_upgrade_reasons_by_plan(required_plan: Any) -> List[UpgradeReason]:
    return [reason for reason in UPGRADE_REASONS.values() if reason.required_plan == required_plan]


def _concise(text: str) -> str:
    if len(text) > CONCISE_LIMIT:
        return text[:CONCISE_LIMIT - 3] + "..."
    return text


def build_feature_gate(feature_id: str, plan: Any) -> FeatureGateContent:
    """Copy for the locked-feature overlay shown to a company on `plan`."""
    tier = plan_registry.resolve_plan_tier(plan)
    reason = get_upgrade_reason(feature_id)

    if reason is None:
        reason = UpgradeReason(
            feature="Premium Feature",
            why_it_matters=DEFAULT_WHY_IT_MATTERS,
            business_impact="This feature is available in higher plans.",
            risk_avoided="Upgrade to unlock this feature.",
            value_unlocked="Get access to advanced capabilities.",
            required_plan=RequiredPlan.PRO if tier == PlanTier.STARTER else RequiredPlan.ENTERPRISE,
            category=UpgradeCategory.ANALYTICS,
        )

    return FeatureGateContent(
        feature_id=feature_id,
        feature=reason.feature,
        why_it_matters=reason.why_it_matters,
        business_impact=reason.business_impact,
        risk_avoided=reason.risk_avoided,
        value_unlocked=reason.value_unlocked,
        concise_impact=_concise(reason.business_impact),
        concise_risk=_concise(reason.risk_avoided),
        concise_value=_concise(reason.value_unlocked),
        required_plan=reason.required_plan,
        upgrade_prompt=get_plan_messaging(tier).upgrade_prompt,
    )
