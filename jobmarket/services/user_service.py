"""
User Service - accounts, talent and company profiles.

Profile lookups back the session resolver: a verified token names a user, and
the matching talent or company row turns it into a Principal.
"""

from typing import Optional

from sqlalchemy import select, update

from jobmarket.core.errors import NotFoundError
from jobmarket.core.logging import get_logger
from jobmarket.core.permissions import Principal, authorize_profile_update
from jobmarket.core.tokens import Identity, Role
from jobmarket.db.database import Database, utcnow
from jobmarket.db.schema import companies, talents, users
from jobmarket.services.reference_service import check_references

logger = get_logger(__name__)

_USER_COLUMNS = (users.c.id, users.c.phone, users.c.user_type, users.c.created_at, users.c.updated_at)


def _user_dict(row) -> dict:
    data = dict(row._mapping)
    data["role"] = data.pop("user_type")
    return data


class UserService:
    def __init__(self, db: Database):
        self.db = db

    # ------------------------------------------------------------
    # Accounts
    # ------------------------------------------------------------

    def get_user(self, user_id: int) -> Optional[dict]:
        """User row without the password hash."""
        with self.db.session() as db:
            row = db.execute(select(*_USER_COLUMNS).where(users.c.id == user_id)).fetchone()
        return _user_dict(row) if row else None

    def get_talent_by_user_id(self, user_id: int) -> Optional[dict]:
        with self.db.session() as db:
            row = db.execute(select(talents).where(talents.c.user_id == user_id)).fetchone()
        return dict(row._mapping) if row else None

    def get_company_by_user_id(self, user_id: int) -> Optional[dict]:
        with self.db.session() as db:
            row = db.execute(select(companies).where(companies.c.user_id == user_id)).fetchone()
        return dict(row._mapping) if row else None

    def find_principal(self, identity: Identity) -> Optional[Principal]:
        """Join a verified identity with its profile row. None when the profile is missing."""
        table = talents if identity.role == Role.talent else companies
        with self.db.session() as db:
            profile_id = db.execute(
                select(table.c.id).where(table.c.user_id == identity.user_id)
            ).scalar_one_or_none()

        if profile_id is None:
            return None
        if identity.role == Role.talent:
            return Principal(user_id=identity.user_id, role=identity.role, talent_id=profile_id)
        return Principal(user_id=identity.user_id, role=identity.role, company_id=profile_id)

    def get_profile(self, user_id: int) -> dict:
        """User plus its talent or company row."""
        user = self.get_user(user_id)
        if not user:
            raise NotFoundError("User")

        if user["role"] == Role.talent.value:
            return {"user": user, "talent": self.get_talent_by_user_id(user_id)}
        return {"user": user, "company": self.get_company_by_user_id(user_id)}

    def get_display_name(self, user_id: int) -> Optional[str]:
        """Real name for talents, company name for companies, phone as fallback."""
        user = self.get_user(user_id)
        if not user:
            return None

        if user["role"] == Role.talent.value:
            talent = self.get_talent_by_user_id(user_id)
            if talent and talent["real_name"]:
                return talent["real_name"]
        else:
            company = self.get_company_by_user_id(user_id)
            if company and company["company_name"]:
                return company["company_name"]
        return user["phone"]

    # ------------------------------------------------------------
    # Profile updates
    # ------------------------------------------------------------

    def update_talent_profile(self, principal: Principal, changes: dict) -> dict:
        return self._update_profile(talents, "Talent profile", principal, changes)

    def update_company_profile(self, principal: Principal, changes: dict) -> dict:
        return self._update_profile(companies, "Company profile", principal, changes)

    def _update_profile(self, table, label: str, principal: Principal, changes: dict) -> dict:
        with self.db.session() as db:
            row = db.execute(select(table).where(table.c.user_id == principal.user_id)).fetchone()
            if not row:
                raise NotFoundError(label)
            authorize_profile_update(principal, row.user_id)

            # Industry pair is checked as it will be stored, not only as sent
            stored = row._mapping
            check_references(
                db,
                city_id=changes.get("city_id"),
                industry_level1_id=changes.get("industry_level1_id", stored.get("industry_level1_id")),
                industry_level2_id=changes.get("industry_level2_id", stored.get("industry_level2_id")),
            )

            values = dict(changes)
            values["updated_at"] = utcnow()
            db.execute(update(table).where(table.c.id == row.id).values(**values))
            updated = db.execute(select(table).where(table.c.id == row.id)).fetchone()

        logger.info("%s %s updated fields: %s", label, row.id, ", ".join(sorted(changes)) or "-")
        return dict(updated._mapping)
