from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import Optional, Dict, List
from datetime import datetime, timezone
from enum import Enum
import uuid

# ============================================================================
# ENUMS (System Constants)
# ============================================================================

class PlanTier(str, Enum):
    STARTER = "starter"
    PRO = "pro"
    ENTERPRISE = "enterprise"

class SubscriptionStatus(str, Enum):
    TRIAL = "trial"
    ACTIVE = "active"
    EXPIRED = "expired"
    CANCELLED = "cancelled"

class Locale(str, Enum):
    EN = "en"
    HI = "hi"

class FeatureSource(str, Enum):
    PLAN = "plan"
    CUSTOM = "custom"

class UpgradeCategory(str, Enum):
    ANALYTICS = "Analytics"
    INTEGRATION = "Integration"
    SUPPORT = "Support"
    COMPLIANCE = "Compliance"
    BRANDING = "Branding"
    SECURITY = "Security"

class RequiredPlan(str, Enum):
    PRO = "Pro"
    ENTERPRISE = "Enterprise"

class TrialBannerVariant(str, Enum):
    ACTIVE = "active"
    EXPIRED = "expired"


# ============================================================================
# COMPANY (read-only input, owned by the companies collection)
# ============================================================================

class Company(BaseModel):
    """Company/account record as stored in the companies collection.

    plan and subscription_status are kept as plain strings so that legacy or
    unknown values survive loading; the plan registry resolves them.
    """
    model_config = ConfigDict(extra="ignore")

    company_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: Optional[str] = None
    industry: Optional[str] = None
    plan: str = PlanTier.STARTER.value
    is_trial: bool = False
    trial_end_date: Optional[datetime] = None
    subscription_status: Optional[str] = None
    custom_features: List[str] = Field(default_factory=list)
    feature_overrides: Dict[str, bool] = Field(default_factory=dict)

    @field_validator("trial_end_date")
    @classmethod
    def _assume_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        # Mongo hands back naive datetimes that are UTC
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @field_validator("plan", mode="before")
    @classmethod
    def _plan_to_str(cls, value):
        if value is None:
            return PlanTier.STARTER.value
        if isinstance(value, PlanTier):
            return value.value
        return str(value)

    @field_validator("custom_features", "feature_overrides", mode="before")
    @classmethod
    def _null_to_empty(cls, value, info):
        # Older documents store null instead of an empty list/map
        if value is None:
            return [] if info.field_name == "custom_features" else {}
        return value

    @field_validator("subscription_status", mode="before")
    @classmethod
    def _status_to_str(cls, value):
        if isinstance(value, SubscriptionStatus):
            return value.value
        return value


# ============================================================================
# DERIVED STATE
# ============================================================================

class TrialStatus(BaseModel):
    """Trial snapshot derived from a company record and the wall clock."""
    is_trial: bool
    is_expired: bool
    days_remaining: Optional[int] = None
    trial_end_date: Optional[datetime] = None
    subscription_status: str


class FeatureAccessDecision(BaseModel):
    feature_id: str
    has_access: bool


class PlanMessaging(BaseModel):
    model_config = ConfigDict(frozen=True)

    upgrade_prompt: str
    status_message: str
    readiness_message: str
    enterprise_ready: str
    audit_ready: str


class UpgradeReason(BaseModel):
    model_config = ConfigDict(frozen=True)

    feature: str
    why_it_matters: str
    business_impact: str
    risk_avoided: str
    value_unlocked: str
    required_plan: RequiredPlan
    category: UpgradeCategory


class FeatureInfo(BaseModel):
    id: str
    name: str
    description: str
    enabled: bool
    source: FeatureSource = FeatureSource.PLAN


class FeaturesResponse(BaseModel):
    plan: PlanTier = PlanTier.STARTER
    features: List[FeatureInfo] = Field(default_factory=list)
    custom_features: List[str] = Field(default_factory=list)


class FeatureGateContent(BaseModel):
    """Copy shown in place of a locked capability."""
    feature_id: str
    feature: str
    why_it_matters: str
    business_impact: str
    risk_avoided: str
    value_unlocked: str
    concise_impact: str
    concise_risk: str
    concise_value: str
    required_plan: RequiredPlan
    upgrade_prompt: str


class TrialBanner(BaseModel):
    variant: TrialBannerVariant
    title: str
    detail: str
    action_label: str
    action_href: str
    days_remaining: Optional[int] = None


# ============================================================================
# REQUEST BODIES
# ============================================================================

class TranslateRequest(BaseModel):
    key: str
    params: Optional[Dict[str, object]] = None
    locale: Optional[str] = None


class LocaleUpdateRequest(BaseModel):
    locale: str
