"""
Trial lifecycle tests.
Ceiling-of-days arithmetic, expiry at the boundary, defaults for
non-trial companies and degraded records.
"""
from datetime import timedelta

from conftest import FIXED_NOW, company_doc, trial_ending_in
from models import Company
from services.trial_lifecycle import compute_trial_status


class TestDaysRemaining:
    """days_remaining = ceil((end - now) / 1 day)."""

    def test_five_days_left(self, now):
        """Trial ending in exactly 5 days."""
        status = compute_trial_status(trial_ending_in(timedelta(days=5)), now)
        assert status.is_trial is True
        assert status.is_expired is False
        assert status.days_remaining == 5
        assert status.subscription_status == "trial"

    def test_partial_day_rounds_up(self, now):
        """4 days and 1 hour left counts as 5 days."""
        status = compute_trial_status(trial_ending_in(timedelta(days=4, hours=1)), now)
        assert status.days_remaining == 5

    def test_one_millisecond_left_is_one_day(self, now):
        """Any positive remainder is still a live trial."""
        status = compute_trial_status(trial_ending_in(timedelta(milliseconds=1)), now)
        assert status.is_expired is False
        assert status.days_remaining == 1

    def test_end_equal_to_now_is_expired(self, now):
        """Zero time left means expired."""
        status = compute_trial_status(trial_ending_in(timedelta(0)), now)
        assert status.is_expired is True
        assert status.days_remaining == 0

    def test_ended_a_day_ago(self, now):
        """End date 24h in the past, minus a millisecond, is expired with 0 days."""
        status = compute_trial_status(
            trial_ending_in(-timedelta(hours=24) + timedelta(milliseconds=1)), now
        )
        assert status.is_expired is True
        assert status.days_remaining == 0

    def test_long_expired_clamps_to_zero(self, now):
        """days_remaining never goes negative."""
        status = compute_trial_status(trial_ending_in(-timedelta(days=30)), now)
        assert status.is_expired is True
        assert status.days_remaining == 0

    def test_trial_end_date_echoed(self, now):
        """The stored end date is returned unchanged."""
        status = compute_trial_status(trial_ending_in(timedelta(days=2)), now)
        assert status.trial_end_date == FIXED_NOW + timedelta(days=2)


class TestNonTrial:
    """Companies that are not on a trial."""

    def test_paid_company(self, now):
        """Not a trial: no expiry, no day count, stored status."""
        status = compute_trial_status(company_doc(plan="pro"), now)
        assert status.is_trial is False
        assert status.is_expired is False
        assert status.days_remaining is None
        assert status.trial_end_date is None
        assert status.subscription_status == "active"

    def test_missing_company(self, now):
        """None behaves as a non-trial active account."""
        status = compute_trial_status(None, now)
        assert status.is_trial is False
        assert status.subscription_status == "active"

    def test_trial_flag_without_end_date(self, now):
        """is_trial without trial_end_date degrades to not a trial."""
        status = compute_trial_status(company_doc(is_trial=True, trial_end_date=None), now)
        assert status.is_trial is False
        assert status.days_remaining is None

    def test_missing_status_defaults_to_active(self, now):
        """Non-trial without a subscription status reports active."""
        status = compute_trial_status(company_doc(subscription_status=None), now)
        assert status.subscription_status == "active"

    def test_stored_status_preserved(self, now):
        """A cancelled company keeps its cancelled status."""
        status = compute_trial_status(company_doc(subscription_status="cancelled"), now)
        assert status.subscription_status == "cancelled"


class TestInputs:
    """Accepted input shapes and clock handling."""

    def test_trial_without_status_defaults_to_trial(self, now):
        """Live trial with no stored status reports 'trial'."""
        status = compute_trial_status(trial_ending_in(timedelta(days=3), subscription_status=None), now)
        assert status.subscription_status == "trial"

    def test_accepts_company_model(self, now):
        """Company instances and raw documents give the same answer."""
        doc = trial_ending_in(timedelta(days=3))
        assert compute_trial_status(Company.model_validate(doc), now) == compute_trial_status(doc, now)

    def test_naive_datetimes_are_utc(self, now):
        """Naive end date and naive now are both read as UTC."""
        doc = trial_ending_in(timedelta(days=2))
        doc["trial_end_date"] = doc["trial_end_date"].replace(tzinfo=None)
        status = compute_trial_status(doc, now.replace(tzinfo=None))
        assert status.days_remaining == 2

    def test_same_inputs_same_result(self, now):
        """Pure function of (company, now)."""
        doc = trial_ending_in(timedelta(days=7, minutes=5))
        assert compute_trial_status(doc, now) == compute_trial_status(doc, now)

    def test_later_observation_has_fewer_days(self, now):
        """Observing one day later removes one day."""
        doc = trial_ending_in(timedelta(days=7))
        later = compute_trial_status(doc, now + timedelta(days=1))
        assert later.days_remaining == 6

    def test_defaults_to_wall_clock(self):
        """Without now, a trial ending far in the future is live."""
        status = compute_trial_status(trial_ending_in(timedelta(days=36500)))
        assert status.is_expired is False
        assert status.days_remaining > 0

    def test_null_list_fields_tolerated(self, now):
        """Documents with null custom_features/feature_overrides still compute."""
        status = compute_trial_status(
            company_doc(custom_features=None, feature_overrides=None), now
        )
        assert status.is_trial is False
        assert status.subscription_status == "active"
