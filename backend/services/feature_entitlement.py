"""Feature Entitlement Resolver - answers "may this company use feature X?".

RULES:
1. Fail closed: lookup errors, timeouts and malformed answers are "no access"
2. Deny by default: only a literal True from the source grants access
3. The company is always passed explicitly; nothing reads an ambient selection
4. Failures are never cached, so a transient outage heals on the next check
5. An answer that depends on a live trial is cached no longer than the trial runs

Resolution order for the plan-backed source:
- company missing                          -> False
- subscription not trial/active            -> False
- per-company override                     -> override value
- per-company custom feature grant         -> True
- effective plan feature matrix            -> matrix value (unknown ids False)

Concurrent checks for the same (company, feature) share one in-flight lookup.
"""
from typing import Callable, Dict, NamedTuple, Optional, Protocol, Tuple, Union
from datetime import datetime, timezone
import asyncio
import logging
import os
import time

from models import Company, FeatureAccessDecision, FeatureInfo, FeatureSource, FeaturesResponse
from services.company_store import company_store
from services.plan_registry import (
    FEATURE_METADATA,
    plan_registry,
    subscription_allows_feature_access,
)
from services.trial_lifecycle import compute_trial_status

logger = logging.getLogger(__name__)

DEFAULT_CACHE_TTL_SECONDS = 10 * 60  # features don't change often
DEFAULT_LOOKUP_TIMEOUT_SECONDS = 5.0


class EntitlementAnswer(NamedTuple):
    """An answer plus how long it stays true, when the source knows."""
    has_access: bool
    valid_for_seconds: Optional[float] = None


class EntitlementSource(Protocol):
    """Where entitlement answers come from (database, remote service, ...).

    lookup() returns a bool, or an EntitlementAnswer when the answer has a
    known expiry (a live trial ends at a fixed time).
    """

    async def lookup(self, company_id: str, feature_id: str) -> Union[bool, EntitlementAnswer]:
        ...

    async def list_features(self, company_id: str) -> FeaturesResponse:
        ...


# ============================================================================
# PLAN-BACKED SOURCE
# ============================================================================

def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class PlanEntitlementSource:
    """Entitlements derived from the company record and the plan registry."""

    def __init__(self, store=None, wall_clock: Callable[[], datetime] = _utc_now):
        self.store = store or company_store
        self._wall_clock = wall_clock

    def evaluate(self, company: Company, feature_id: str, now: Optional[datetime] = None) -> bool:
        trial_status = compute_trial_status(company, now)
        if not subscription_allows_feature_access(trial_status.subscription_status):
            return False

        if feature_id in company.feature_overrides:
            return company.feature_overrides[feature_id] is True

        if feature_id in company.custom_features:
            return True

        effective_plan = plan_registry.get_effective_plan(company.plan, trial_status)
        return plan_registry.plan_has_feature(effective_plan, feature_id)

    async def lookup(self, company_id: str, feature_id: str) -> EntitlementAnswer:
        company = await self.store.get_company(company_id)
        if company is None:
            logger.info(f"Entitlement lookup for unknown company {company_id}")
            return EntitlementAnswer(False)

        now = self._wall_clock()
        has_access = self.evaluate(company, feature_id, now)
        trial_status = compute_trial_status(company, now)
        if trial_status.is_trial and not trial_status.is_expired:
            # The answer may flip when the trial ends
            return EntitlementAnswer(has_access, (trial_status.trial_end_date - now).total_seconds())
        return EntitlementAnswer(has_access)

    async def list_features(self, company_id: str) -> FeaturesResponse:
        company = await self.store.get_company(company_id)
        if company is None:
            return FeaturesResponse()

        features = []
        for feature_id, info in FEATURE_METADATA.items():
            granted_per_company = (
                feature_id in company.custom_features or feature_id in company.feature_overrides
            )
            features.append(FeatureInfo(
                id=feature_id,
                name=info["name"],
                description=info["description"],
                enabled=self.evaluate(company, feature_id),
                source=FeatureSource.CUSTOM if granted_per_company else FeatureSource.PLAN,
            ))

        return FeaturesResponse(
            plan=plan_registry.resolve_plan_tier(company.plan),
            features=features,
            custom_features=list(company.custom_features),
        )


# ============================================================================
# RESOLVER
# ============================================================================

CacheKey = Tuple[str, str]
Generation = Tuple[int, int]


class FeatureEntitlementResolver:
    """Asynchronous, fail-closed entitlement checks with a TTL cache."""

    def __init__(
        self,
        source: EntitlementSource,
        cache_ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS,
        lookup_timeout_seconds: Optional[float] = DEFAULT_LOOKUP_TIMEOUT_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.source = source
        self.cache_ttl_seconds = cache_ttl_seconds
        self.lookup_timeout_seconds = lookup_timeout_seconds
        self._clock = clock
        self._cache: Dict[CacheKey, Tuple[float, bool]] = {}
        self._in_flight: Dict[CacheKey, "asyncio.Future[bool]"] = {}
        # Bumped on invalidation so lookups started earlier don't repopulate the cache
        self._epoch = 0
        self._company_generations: Dict[str, int] = {}

    def _generation(self, company_id: str) -> Generation:
        return (self._epoch, self._company_generations.get(company_id, 0))

    async def has_feature(self, company_id: str, feature_id: str) -> bool:
        if not isinstance(company_id, str) or not isinstance(feature_id, str):
            return False
        if not company_id or not feature_id:
            return False

        key = (company_id, feature_id)
        cached = self._cache.get(key)
        if cached is not None:
            expires_at, has_access = cached
            if self._clock() < expires_at:
                return has_access
            self._cache.pop(key, None)

        task = self._in_flight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._resolve(key, self._generation(company_id)))
            self._in_flight[key] = task
            task.add_done_callback(lambda done, key=key: self._forget_in_flight(key, done))

        # A caller that gives up must not cancel the lookup other callers share
        return await asyncio.shield(task)

    async def check(self, company_id: str, feature_id: str) -> FeatureAccessDecision:
        has_access = await self.has_feature(company_id, feature_id)
        return FeatureAccessDecision(feature_id=str(feature_id), has_access=has_access)

    async def get_company_features(self, company_id: str) -> FeaturesResponse:
        """Full feature list for a company; starter defaults when the lookup fails."""
        try:
            response = await asyncio.wait_for(
                self.source.list_features(company_id),
                timeout=self.lookup_timeout_seconds,
            )
        except Exception as e:
            logger.warning(f"Failed to fetch features for company {company_id}: {e!r}")
            return FeaturesResponse()

        if not isinstance(response, FeaturesResponse):
            logger.warning(f"Malformed feature list for company {company_id}: {type(response).__name__}")
            return FeaturesResponse()
        return response

    def invalidate(self, company_id: Optional[str] = None) -> None:
        """Drop cached answers for one company, or for everyone."""
        if company_id is None:
            self._epoch += 1
            self._company_generations.clear()
            self._cache.clear()
            self._in_flight.clear()
            return
        self._company_generations[company_id] = self._company_generations.get(company_id, 0) + 1
        for key in [k for k in self._cache if k[0] == company_id]:
            del self._cache[key]
        for key in [k for k in self._in_flight if k[0] == company_id]:
            del self._in_flight[key]

    async def _resolve(self, key: CacheKey, generation: Generation) -> bool:
        company_id, feature_id = key

        try:
            result = await asyncio.wait_for(
                self.source.lookup(company_id, feature_id),
                timeout=self.lookup_timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.warning(
                f"Entitlement lookup timed out: company={company_id} feature={feature_id} "
                f"timeout={self.lookup_timeout_seconds}s"
            )
            return False
        except Exception as e:
            logger.warning(f"Entitlement lookup failed: company={company_id} feature={feature_id} error={e!r}")
            return False

        ttl = self.cache_ttl_seconds
        if isinstance(result, EntitlementAnswer):
            if result.valid_for_seconds is not None:
                ttl = min(ttl, result.valid_for_seconds)
            result = result.has_access

        if not isinstance(result, bool):
            logger.warning(
                f"Malformed entitlement answer: company={company_id} feature={feature_id} "
                f"type={type(result).__name__}"
            )
            return False

        if ttl > 0 and generation == self._generation(company_id):
            self._cache[key] = (self._clock() + ttl, result)
        return result

    def _forget_in_flight(self, key: CacheKey, done: "asyncio.Future[bool]") -> None:
        if self._in_flight.get(key) is done:
            del self._in_flight[key]


def _env_float(name: str, default: Optional[float]) -> Optional[float]:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"Ignoring invalid {name}={raw!r}, using {default}")
        return default


# Singleton instance
feature_entitlement_resolver = FeatureEntitlementResolver(
    PlanEntitlementSource(),
    cache_ttl_seconds=_env_float("ENTITLEMENT_CACHE_TTL_SECONDS", DEFAULT_CACHE_TTL_SECONDS),
    lookup_timeout_seconds=_env_float("ENTITLEMENT_LOOKUP_TIMEOUT_SECONDS", DEFAULT_LOOKUP_TIMEOUT_SECONDS),
)
