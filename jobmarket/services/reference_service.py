"""
Reference Service - provinces, cities, industries and skills.

These lists feed dropdowns and filters. They are non-critical: when the
store is unavailable they degrade to an empty list instead of failing.
"""

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from jobmarket.core.errors import ValidationError
from jobmarket.db.database import Database, degrade_on_store_unavailable
from jobmarket.db.schema import cities, industries_level1, industries_level2, provinces, skills


def _rows(result) -> List[dict]:
    return [dict(row._mapping) for row in result]


class ReferenceService:
    def __init__(self, db: Database):
        self.db = db

    @degrade_on_store_unavailable(list)
    def get_provinces(self) -> List[dict]:
        with self.db.session() as db:
            return _rows(db.execute(
                select(provinces.c.id, provinces.c.name, provinces.c.code).order_by(provinces.c.id)
            ))

    @degrade_on_store_unavailable(list)
    def get_cities(self, province_id: Optional[int] = None) -> List[dict]:
        stmt = select(cities.c.id, cities.c.name, cities.c.province_id, cities.c.code)
        if province_id is not None:
            stmt = stmt.where(cities.c.province_id == province_id)
        with self.db.session() as db:
            return _rows(db.execute(stmt.order_by(cities.c.id)))

    @degrade_on_store_unavailable(list)
    def get_industries_level1(self) -> List[dict]:
        stmt = select(
            industries_level1.c.id, industries_level1.c.name,
            industries_level1.c.code, industries_level1.c.description,
        )
        with self.db.session() as db:
            return _rows(db.execute(stmt.order_by(industries_level1.c.id)))

    @degrade_on_store_unavailable(list)
    def get_industries_level2(self, level1_id: Optional[int] = None) -> List[dict]:
        stmt = select(
            industries_level2.c.id, industries_level2.c.name, industries_level2.c.industry_level1_id,
            industries_level2.c.code, industries_level2.c.description,
        )
        if level1_id is not None:
            stmt = stmt.where(industries_level2.c.industry_level1_id == level1_id)
        with self.db.session() as db:
            return _rows(db.execute(stmt.order_by(industries_level2.c.id)))

    @degrade_on_store_unavailable(list)
    def get_skills(self, category: Optional[str] = None) -> List[dict]:
        stmt = select(skills.c.id, skills.c.name, skills.c.category, skills.c.description)
        if category:
            stmt = stmt.where(skills.c.category == category)
        with self.db.session() as db:
            return _rows(db.execute(stmt.order_by(skills.c.category, skills.c.name)))


def check_references(
    db: Session,
    city_id: Optional[int] = None,
    industry_level1_id: Optional[int] = None,
    industry_level2_id: Optional[int] = None,
    skill_ids: Optional[List[int]] = None,
) -> None:
    """
    Reject unknown reference ids with a 400 before they reach a foreign key.

    A level-2 industry given together with a level-1 industry must belong to it.
    """
    if city_id is not None:
        if db.execute(select(cities.c.id).where(cities.c.id == city_id)).fetchone() is None:
            raise ValidationError(f"Unknown city_id: {city_id}")

    if industry_level1_id is not None:
        found = db.execute(
            select(industries_level1.c.id).where(industries_level1.c.id == industry_level1_id)
        ).fetchone()
        if found is None:
            raise ValidationError(f"Unknown industry_level1_id: {industry_level1_id}")

    if industry_level2_id is not None:
        parent = db.execute(
            select(industries_level2.c.industry_level1_id).where(industries_level2.c.id == industry_level2_id)
        ).scalar_one_or_none()
        if parent is None:
            raise ValidationError(f"Unknown industry_level2_id: {industry_level2_id}")
        if industry_level1_id is not None and parent != industry_level1_id:
            raise ValidationError("industry_level2_id does not belong to industry_level1_id")

    if skill_ids:
        wanted = set(skill_ids)
        found = set(db.execute(select(skills.c.id).where(skills.c.id.in_(wanted))).scalars())
        missing = sorted(wanted - found)
        if missing:
            raise ValidationError(f"Unknown skill_ids: {', '.join(str(i) for i in missing)}")
