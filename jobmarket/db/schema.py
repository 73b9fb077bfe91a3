"""
Table definitions (SQLAlchemy Core).

Reference data:  provinces, cities, industries_level1, industries_level2, skills
Accounts:        users, talents, companies, revoked_tokens
Marketplace:     job_positions, job_skills, applications, job_favorites

Enumerated columns are stored as short strings; the allowed values live in
jobmarket.schemas.schemas.
"""

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    Numeric,
    String,
    Table,
    Text,
    UniqueConstraint,
    func,
)

metadata = MetaData()


def _timestamps():
    return [
        Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
        Column("updated_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    ]


# ============================================================
# REFERENCE DATA
# ============================================================

provinces = Table(
    "provinces", metadata,
    Column("id", Integer, primary_key=True),
    Column("name", String(50), nullable=False, unique=True),
    Column("code", String(10), nullable=False, unique=True),
    Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
)

cities = Table(
    "cities", metadata,
    Column("id", Integer, primary_key=True),
    Column("name", String(50), nullable=False),
    Column("province_id", Integer, ForeignKey("provinces.id"), nullable=False, index=True),
    Column("code", String(10), nullable=False),
    Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    UniqueConstraint("province_id", "name", name="unique_province_city"),
)

industries_level1 = Table(
    "industries_level1", metadata,
    Column("id", Integer, primary_key=True),
    Column("name", String(50), nullable=False, unique=True),
    Column("code", String(10), nullable=False, unique=True),
    Column("description", Text),
    Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
)

industries_level2 = Table(
    "industries_level2", metadata,
    Column("id", Integer, primary_key=True),
    Column("name", String(50), nullable=False),
    Column("industry_level1_id", Integer, ForeignKey("industries_level1.id"), nullable=False, index=True),
    Column("code", String(10), nullable=False),
    Column("description", Text),
    Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    UniqueConstraint("industry_level1_id", "name", name="unique_level1_industry"),
)

skills = Table(
    "skills", metadata,
    Column("id", Integer, primary_key=True),
    Column("name", String(50), nullable=False, unique=True),
    Column("category", String(50), nullable=False),
    Column("description", Text),
    Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
)


# ============================================================
# ACCOUNTS
# ============================================================

users = Table(
    "users", metadata,
    Column("id", Integer, primary_key=True),
    Column("phone", String(20), nullable=False, unique=True),
    Column("password", String(255), nullable=False),
    Column("user_type", String(20), nullable=False),
    *_timestamps(),
)

talents = Table(
    "talents", metadata,
    Column("id", Integer, primary_key=True),
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True),
    Column("real_name", String(50), nullable=False),
    Column("gender", String(10)),
    Column("birth_date", DateTime(timezone=True)),
    Column("city_id", Integer, ForeignKey("cities.id"), index=True),
    Column("work_experience_years", Integer, nullable=False, default=0),
    Column("education", String(20)),
    Column("major", String(100)),
    Column("bio", Text),
    Column("avatar", String(255)),
    Column("phone_verified", Boolean, nullable=False, default=False),
    *_timestamps(),
)

companies = Table(
    "companies", metadata,
    Column("id", Integer, primary_key=True),
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True),
    Column("company_name", String(100), nullable=False),
    Column("company_size", String(50)),
    Column("city_id", Integer, ForeignKey("cities.id"), nullable=False, index=True),
    Column("industry_level1_id", Integer, ForeignKey("industries_level1.id"), nullable=False, index=True),
    Column("industry_level2_id", Integer, ForeignKey("industries_level2.id"), index=True),
    Column("description", Text),
    Column("logo", String(255)),
    Column("website", String(255)),
    Column("business_license", String(255)),
    Column("verification_status", String(20), nullable=False, default="unverified"),
    Column("verification_time", DateTime(timezone=True)),
    *_timestamps(),
)

revoked_tokens = Table(
    "revoked_tokens", metadata,
    Column("jti", String(64), primary_key=True),
    Column("user_id", Integer, nullable=False, index=True),
    Column("expires_at", DateTime(timezone=True), nullable=False),
    Column("revoked_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
)


# ============================================================
# MARKETPLACE
# ============================================================

job_positions = Table(
    "job_positions", metadata,
    Column("id", Integer, primary_key=True),
    Column("company_id", Integer, ForeignKey("companies.id", ondelete="CASCADE"), nullable=False, index=True),
    Column("position_name", String(100), nullable=False),
    Column("description", Text, nullable=False),
    Column("industry_level1_id", Integer, ForeignKey("industries_level1.id"), nullable=False, index=True),
    Column("industry_level2_id", Integer, ForeignKey("industries_level2.id"), index=True),
    Column("salary_min", Numeric(10, 2)),
    Column("salary_max", Numeric(10, 2)),
    Column("city_id", Integer, ForeignKey("cities.id"), nullable=False, index=True),
    Column("work_experience_required", Integer, nullable=False, default=0),
    Column("education_required", String(20)),
    Column("position_count", Integer, nullable=False, default=1),
    Column("status", String(20), nullable=False, default="draft", index=True),
    Column("published_at", DateTime(timezone=True)),
    Column("expired_at", DateTime(timezone=True)),
    *_timestamps(),
)

job_skills = Table(
    "job_skills", metadata,
    Column("id", Integer, primary_key=True),
    Column("job_position_id", Integer, ForeignKey("job_positions.id", ondelete="CASCADE"), nullable=False, index=True),
    Column("skill_id", Integer, ForeignKey("skills.id"), nullable=False, index=True),
    Column("is_required", Boolean, nullable=False, default=True),
    Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    UniqueConstraint("job_position_id", "skill_id", name="unique_job_skill"),
)

applications = Table(
    "applications", metadata,
    Column("id", Integer, primary_key=True),
    Column("talent_id", Integer, ForeignKey("talents.id", ondelete="CASCADE"), nullable=False, index=True),
    Column("job_position_id", Integer, ForeignKey("job_positions.id", ondelete="CASCADE"), nullable=False, index=True),
    Column("status", String(20), nullable=False, default="pending", index=True),
    Column("applied_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    Column("reviewed_at", DateTime(timezone=True)),
    Column("company_reply", Text),
    Column("reply_at", DateTime(timezone=True)),
    *_timestamps(),
    # Sole source of truth against duplicate applications under concurrent submission
    UniqueConstraint("talent_id", "job_position_id", name="unique_talent_job"),
)

job_favorites = Table(
    "job_favorites", metadata,
    Column("id", Integer, primary_key=True),
    Column("talent_id", Integer, ForeignKey("talents.id", ondelete="CASCADE"), nullable=False),
    Column("job_position_id", Integer, ForeignKey("job_positions.id", ondelete="CASCADE"), nullable=False),
    Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    UniqueConstraint("talent_id", "job_position_id", name="unique_talent_favorite"),
    Index("job_favorites_talent_id_idx", "talent_id"),
)
