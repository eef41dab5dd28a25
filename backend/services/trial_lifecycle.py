"""Trial lifecycle calculator.

Derives the trial snapshot for a company from its stored record and the
current wall clock. Nothing is cached: the snapshot drifts with time, so
callers recompute it on every observation.
"""
from typing import Any, Mapping, Optional, Union
from datetime import datetime, timezone
import math

from models import Company, SubscriptionStatus, TrialStatus

SECONDS_PER_DAY = 24 * 60 * 60


def _as_company(company: Union[Company, Mapping[str, Any], None]) -> Optional[Company]:
    if company is None or isinstance(company, Company):
        return company
    return Company.model_validate(company)


def compute_trial_status(
    company: Union[Company, Mapping[str, Any], None],
    now: Optional[datetime] = None,
) -> TrialStatus:
    """Compute trial state, remaining days and effective subscription status.

    A trial flag without an end date degrades to "not a trial". Remaining
    days are the ceiling of the time left in whole days; zero or less means
    expired, and days_remaining is clamped to 0 from then on.
    """
    company = _as_company(company)

    if company is None or not company.is_trial or company.trial_end_date is None:
        return TrialStatus(
            is_trial=False,
            is_expired=False,
            days_remaining=None,
            trial_end_date=None,
            subscription_status=(company.subscription_status if company else None) or SubscriptionStatus.ACTIVE.value,
        )

    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    end_date = company.trial_end_date
    diff_days = math.ceil((end_date - now).total_seconds() / SECONDS_PER_DAY)
    is_expired = diff_days <= 0

    return TrialStatus(
        is_trial=True,
        is_expired=is_expired,
        days_remaining=0 if is_expired else diff_days,
        trial_end_date=end_date,
        subscription_status=company.subscription_status or SubscriptionStatus.TRIAL.value,
    )
