"""Trial banner copy for pro companies on trial."""
from typing import Any, Mapping, Optional, Union
from datetime import datetime

from models import Company, PlanTier, TrialBanner, TrialBannerVariant
from services.locale_state import format_date
from services.plan_registry import plan_registry
from services.translation import MessageCatalogService, message_catalog_service
from services.trial_lifecycle import compute_trial_status

PLANS_SETTINGS_HREF = "/dashboard/settings?tab=plans"


def build_trial_banner(
    company: Union[Company, Mapping[str, Any], None],
    locale,
    catalogs: Optional[MessageCatalogService] = None,
    now: Optional[datetime] = None,
) -> Optional[TrialBanner]:
    """Banner shown above the dashboard, or None when there is nothing to say.

    Only pro companies on trial get a banner; the plan field is read from the
    stored record, not the effective (possibly downgraded) plan.
    """
    catalogs = catalogs or message_catalog_service
    if company is not None and not isinstance(company, Company):
        company = Company.model_validate(company)

    trial_status = compute_trial_status(company, now)
    if not trial_status.is_trial or plan_registry.resolve_plan_tier(company.plan) != PlanTier.PRO:
        return None

    def t(key, params=None):
        return catalogs.translate(locale, key, params)

    if trial_status.is_expired:
        return TrialBanner(
            variant=TrialBannerVariant.EXPIRED,
            title=t("admin.trial.trialExpired"),
            detail=t("admin.trial.trialEnded"),
            action_label=t("admin.trial.upgradeToContinue"),
            action_href=PLANS_SETTINGS_HREF,
            days_remaining=0,
        )

    days = trial_status.days_remaining
    day_word = t("common.day") if days == 1 else t("common.days")
    return TrialBanner(
        variant=TrialBannerVariant.ACTIVE,
        title=f"{t('admin.trial.trialActive')} - {days} {day_word} {t('common.left')}",
        detail=t("admin.trial.trialEndsOn", {"date": format_date(trial_status.trial_end_date, locale)}),
        action_label=t("admin.trial.convertToPaid"),
        action_href=PLANS_SETTINGS_HREF,
        days_remaining=days,
    )
