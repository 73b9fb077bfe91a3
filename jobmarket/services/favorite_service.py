"""
Favorite Service - talents bookmarking jobs.

There is no "set" operation: a favorite is toggled. Toggling twice returns
the pair to its original state.
"""

from typing import List, Optional

from sqlalchemy import delete, insert, select

from jobmarket.core.errors import ConflictError, NotFoundError
from jobmarket.core.logging import get_logger
from jobmarket.core.permissions import PUBLISHED, Principal, authorize_favorite_toggle, require_talent
from jobmarket.db.database import Database, utcnow
from jobmarket.db.schema import job_favorites, job_positions
from jobmarket.services.job_service import job_query, load_jobs

logger = get_logger(__name__)


class FavoriteService:
    def __init__(self, db: Database):
        self.db = db

    def toggle(self, principal: Principal, job_id: int) -> bool:
        """Flip the favorite for (caller, job). Returns True when the job is now favorited."""
        talent_id = authorize_favorite_toggle(principal)
        pair = (job_favorites.c.talent_id == talent_id, job_favorites.c.job_position_id == job_id)

        try:
            with self.db.session() as db:
                exists = db.execute(select(job_positions.c.id).where(job_positions.c.id == job_id)).fetchone()
                if not exists:
                    raise NotFoundError("Job")

                favorite_id = db.execute(select(job_favorites.c.id).where(*pair)).scalar_one_or_none()
                if favorite_id is not None:
                    db.execute(delete(job_favorites).where(job_favorites.c.id == favorite_id))
                    favorited = False
                else:
                    db.execute(insert(job_favorites).values(
                        talent_id=talent_id, job_position_id=job_id, created_at=utcnow(),
                    ))
                    favorited = True
        except ConflictError:
            # A concurrent toggle inserted the same pair first
            favorited = True

        logger.info("Talent %s %s job %s", talent_id, "favorited" if favorited else "unfavorited", job_id)
        return favorited

    def is_favorite(self, principal: Optional[Principal], job_id: int) -> bool:
        """Anonymous callers and non-talents always get False."""
        if principal is None or not principal.is_talent:
            return False
        with self.db.session() as db:
            row = db.execute(
                select(job_favorites.c.id).where(
                    job_favorites.c.talent_id == principal.talent_id,
                    job_favorites.c.job_position_id == job_id,
                )
            ).fetchone()
        return row is not None

    def list_favorites(self, principal: Principal) -> List[dict]:
        """Favorited jobs that are still published, most recently favorited first."""
        talent_id = require_talent(principal)
        stmt = (
            job_query(job_favorites.c.created_at.label("favorited_at"))
            .join(job_favorites, job_favorites.c.job_position_id == job_positions.c.id)
            .where(job_favorites.c.talent_id == talent_id, job_positions.c.status == PUBLISHED)
            .order_by(job_favorites.c.created_at.desc(), job_favorites.c.id.desc())
        )
        with self.db.session() as db:
            return load_jobs(db, stmt)
