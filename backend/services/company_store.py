"""Read-only access to company records.

The dashboard selects a company on the client; this backend only ever reads
the record it is pointed at. Writes belong to the onboarding/billing side.
"""
from typing import Optional
from database import database
from models import Company
import logging

logger = logging.getLogger(__name__)

COMPANY_PROJECTION = {
    "_id": 0,
    "company_id": 1,
    "name": 1,
    "industry": 1,
    "plan": 1,
    "is_trial": 1,
    "trial_end_date": 1,
    "subscription_status": 1,
    "custom_features": 1,
    "feature_overrides": 1,
}


class CompanyStore:
    """Loads company records from the companies collection."""

    async def get_company(self, company_id: str) -> Optional[Company]:
        if not company_id:
            return None

        db = database.get_db()
        if db is None:
            raise RuntimeError("Database is not connected")

        doc = await db.companies.find_one({"company_id": company_id}, COMPANY_PROJECTION)
        if not doc:
            return None
        return Company.model_validate(doc)


# Singleton instance
company_store = CompanyStore()
