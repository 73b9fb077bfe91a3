"""
Authorization guard.

Pure decisions over (principal, resource facts). Nothing here touches the
database: services load the ownership facts and call these functions before
any write. A denial raises ForbiddenError; failed state preconditions raise
ValidationError; uniqueness conflicts raise ConflictError.

Policy
------
Job posting      create          company
                 update/delete   company owning the posting
                 read            anyone (published) / owning company (other statuses)
Application      create          talent, posting published, not applied before
                 read            owning talent, or company owning the posting
                 update status   company owning the posting
                 withdraw        owning talent
Favorite         toggle          talent, own talent id only
Profile          update          the profile's own user
"""

from dataclasses import dataclass
from typing import Optional

from jobmarket.core.errors import ConflictError, ForbiddenError, ValidationError
from jobmarket.core.tokens import Role

PUBLISHED = "published"

REVIEW_STATUSES = frozenset({"reviewed", "accepted", "rejected"})
WITHDRAWN = "withdrawn"

# Company-driven review transitions
_COMPANY_TRANSITIONS = {
    "pending": {"reviewed", "accepted", "rejected"},
    "reviewed": {"accepted", "rejected"},
}


@dataclass(frozen=True)
class Principal:
    """A verified identity joined with its profile row."""

    user_id: int
    role: Role
    talent_id: Optional[int] = None
    company_id: Optional[int] = None

    @property
    def is_talent(self) -> bool:
        return self.role == Role.talent and self.talent_id is not None

    @property
    def is_company(self) -> bool:
        return self.role == Role.company and self.company_id is not None


def require_talent(principal: Principal) -> int:
    if not principal.is_talent:
        raise ForbiddenError("Talent accounts only")
    return principal.talent_id


def require_company(principal: Principal) -> int:
    if not principal.is_company:
        raise ForbiddenError("Company accounts only")
    return principal.company_id


# ============================================================
# JOB POSTINGS
# ============================================================

def authorize_job_create(principal: Principal) -> int:
    """Return the company id the new posting will belong to."""
    return require_company(principal)


def authorize_job_mutation(principal: Principal, job_company_id: int) -> None:
    company_id = require_company(principal)
    if company_id != job_company_id:
        raise ForbiddenError("You do not have permission to modify this job")


def can_view_job(principal: Optional[Principal], job_status: str, job_company_id: int) -> bool:
    if job_status == PUBLISHED:
        return True
    return principal is not None and principal.is_company and principal.company_id == job_company_id


# ============================================================
# APPLICATIONS
# ============================================================

def authorize_application_create(principal: Principal, job_status: str, already_applied: bool) -> int:
    """Return the applying talent id."""
    talent_id = require_talent(principal)
    if job_status != PUBLISHED:
        raise ValidationError("This job is not accepting applications")
    if already_applied:
        raise ConflictError("You have already applied to this job")
    return talent_id


def authorize_application_read(principal: Principal, application_talent_id: int, job_company_id: int) -> None:
    if principal.is_talent and principal.talent_id == application_talent_id:
        return
    if principal.is_company and principal.company_id == job_company_id:
        return
    raise ForbiddenError("You do not have permission to view this application")


def authorize_application_review(principal: Principal, job_company_id: int) -> None:
    company_id = require_company(principal)
    if company_id != job_company_id:
        raise ForbiddenError("You do not have permission to update this application")


def authorize_application_withdraw(principal: Principal, application_talent_id: int) -> None:
    talent_id = require_talent(principal)
    if talent_id != application_talent_id:
        raise ForbiddenError("You do not have permission to withdraw this application")


def check_review_transition(current: str, new: str) -> None:
    """Company-side status change. Re-saving the current status is allowed to attach a reply."""
    if current == WITHDRAWN:
        raise ValidationError("This application has been withdrawn")
    if new == WITHDRAWN:
        raise ValidationError("Only the applicant can withdraw an application")
    if new == current:
        return
    if new not in _COMPANY_TRANSITIONS.get(current, set()):
        raise ValidationError(f"Cannot change application status from '{current}' to '{new}'")


def check_withdraw_transition(current: str) -> None:
    if current == WITHDRAWN:
        raise ValidationError("This application has already been withdrawn")


# ============================================================
# FAVORITES & PROFILES
# ============================================================

def authorize_favorite_toggle(principal: Principal) -> int:
    """Favorites always operate on the caller's own talent id."""
    return require_talent(principal)


def authorize_profile_update(principal: Principal, profile_user_id: int) -> None:
    if principal.user_id != profile_user_id:
        raise ForbiddenError("You can only update your own profile")
