"""Role and ownership rules for every resource action.

Each ``(resource, action)`` entry names all three roles. ``None`` denies the
role outright; a :class:`Rule` allows it subject to ownership and fixed-value
constraints on the record. Single records go through :func:`authorize`, list
queries through :func:`scope`.
"""
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from hoarding_api.models import Assignment, Billing, Contract, Hoarding, Photo, User
from hoarding_api.models.enums import AssignmentStatus, HoardingStatus, PaymentStatus, Role
from hoarding_api.utils.exceptions import AppException


@dataclass(frozen=True)
class Through:
    """Indirect ownership: ``record.<attr>`` must be in ``target`` rows whose ``owner`` is the user."""

    attr: str
    target: Any
    owner: Any


@dataclass(frozen=True)
class Rule:
    fields: tuple[str, ...] = ()
    where: dict[str, str] = field(default_factory=dict)
    through: Through | None = None


ALLOW = Rule()


def _rules(*, owner: Rule | None, client: Rule | None, photographer: Rule | None) -> dict[Role, Rule | None]:
    return {Role.OWNER: owner, Role.CLIENT: client, Role.PHOTOGRAPHER: photographer}


_ACTIVE_ONLY = Rule(where={"status": HoardingStatus.ACTIVE.value})
_OWNS = Rule(fields=("owner_id",))
_IS_CLIENT = Rule(fields=("client_id",))
_ASSIGNED_BY = Rule(fields=("assigned_by_id",))
_PHOTOGRAPHED_BY = Rule(fields=("photographer_id",))
_UPLOADED_BY = Rule(fields=("uploaded_by_id",))
_OWNS_PHOTO_HOARDING = Rule(through=Through("hoarding_id", Hoarding.id, Hoarding.owner_id))
_CONTRACTED_PHOTO_HOARDING = Rule(through=Through("hoarding_id", Contract.hoarding_id, Contract.client_id))

POLICY: dict[tuple[str, str], dict[Role, Rule | None]] = {
    ("hoarding", "create"): _rules(owner=ALLOW, client=None, photographer=None),
    ("hoarding", "read"): _rules(owner=_OWNS, client=_ACTIVE_ONLY, photographer=_ACTIVE_ONLY),
    ("hoarding", "update"): _rules(owner=_OWNS, client=None, photographer=None),
    ("hoarding", "delete"): _rules(owner=_OWNS, client=None, photographer=None),

    ("assignment", "create"): _rules(owner=ALLOW, client=None, photographer=None),
    ("assignment", "read"): _rules(owner=_ASSIGNED_BY, client=None, photographer=_PHOTOGRAPHED_BY),
    ("assignment", "update"): _rules(owner=_ASSIGNED_BY, client=None, photographer=_PHOTOGRAPHED_BY),
    ("assignment", "delete"): _rules(owner=_ASSIGNED_BY, client=None, photographer=None),
    ("assignment", "stats"): _rules(owner=None, client=None, photographer=ALLOW),

    ("contract", "create"): _rules(owner=ALLOW, client=None, photographer=None),
    ("contract", "read"): _rules(owner=_OWNS, client=_IS_CLIENT, photographer=None),
    ("contract", "update"): _rules(owner=_OWNS, client=None, photographer=None),
    ("contract", "delete"): _rules(owner=_OWNS, client=None, photographer=None),

    ("billing", "create"): _rules(owner=ALLOW, client=None, photographer=None),
    ("billing", "read"): _rules(owner=_OWNS, client=_IS_CLIENT, photographer=None),
    ("billing", "update"): _rules(owner=_OWNS, client=_IS_CLIENT, photographer=None),
    ("billing", "delete"): _rules(owner=_OWNS, client=None, photographer=None),
    ("billing", "remind"): _rules(owner=_OWNS, client=None, photographer=None),
    ("billing", "analytics"): _rules(owner=ALLOW, client=None, photographer=None),

    ("photo", "create"): _rules(owner=ALLOW, client=None, photographer=ALLOW),
    ("photo", "read"): _rules(
        owner=_OWNS_PHOTO_HOARDING, client=_CONTRACTED_PHOTO_HOARDING, photographer=_UPLOADED_BY
    ),
    ("photo", "update"): _rules(owner=_OWNS_PHOTO_HOARDING, client=None, photographer=_UPLOADED_BY),
    ("photo", "delete"): _rules(owner=_OWNS_PHOTO_HOARDING, client=None, photographer=_UPLOADED_BY),

    ("user", "read"): _rules(owner=ALLOW, client=ALLOW, photographer=ALLOW),
    ("user", "update"): _rules(owner=ALLOW, client=None, photographer=None),
    ("user", "delete"): _rules(owner=ALLOW, client=None, photographer=None),
}

# Field-level allow-lists applied on top of the table.
PHOTOGRAPHER_TRANSITIONS: frozenset[tuple[str, str]] = frozenset({
    (AssignmentStatus.ASSIGNED.value, AssignmentStatus.IN_PROGRESS.value),
    (AssignmentStatus.IN_PROGRESS.value, AssignmentStatus.COMPLETED.value),
})
CLIENT_PAYMENT_STATUSES: frozenset[str] = frozenset({PaymentStatus.PAID.value})
PHOTO_STATUS_ROLES: frozenset[Role] = frozenset({Role.OWNER})

# Models the scope helpers accept, keyed by resource name.
MODELS = {
    "hoarding": Hoarding,
    "assignment": Assignment,
    "contract": Contract,
    "billing": Billing,
    "photo": Photo,
    "user": User,
}


def role_of(user: User) -> Role:
    try:
        return Role(user.role)
    except ValueError:
        raise AppException("Unknown role", status_code=403)


def rule_for(user: User, resource: str, action: str) -> Rule | None:
    return POLICY[(resource, action)][role_of(user)]


def is_allowed(user: User, resource: str, action: str) -> bool:
    return rule_for(user, resource, action) is not None


def require(user: User, resource: str, action: str, message: str | None = None) -> Rule:
    """Role-only check, for actions that have no record yet (create, list)."""
    rule = rule_for(user, resource, action)
    if rule is None:
        raise AppException(
            message or f"You don't have permission to {action} this {resource}",
            status_code=403,
        )
    return rule


async def authorize(
    db: AsyncSession,
    user: User,
    resource: str,
    action: str,
    record: Any,
    message: str | None = None,
) -> Rule:
    """Role and ownership check against a loaded record. Raises 403 on failure."""
    rule = require(user, resource, action, message)
    denied = AppException(
        message or f"You don't have permission to {action} this {resource}",
        status_code=403,
    )

    for attr, expected in rule.where.items():
        if getattr(record, attr) != expected:
            raise denied

    if rule.fields and not any(getattr(record, name) == user.id for name in rule.fields):
        raise denied

    if rule.through is not None:
        value = getattr(record, rule.through.attr)
        result = await db.execute(
            select(rule.through.target)
            .where(rule.through.target == value, rule.through.owner == user.id)
            .limit(1)
        )
        if result.first() is None:
            raise denied

    return rule


def scope(user: User, resource: str, action: str = "read", message: str | None = None) -> list:
    """SQL filter clauses restricting a list query to records the user may see."""
    rule = require(user, resource, action, message)
    model = MODELS[resource]
    clauses = [getattr(model, attr) == expected for attr, expected in rule.where.items()]

    if rule.fields:
        clauses.append(or_(*(getattr(model, name) == user.id for name in rule.fields)))

    if rule.through is not None:
        owned = select(rule.through.target).where(rule.through.owner == user.id)
        clauses.append(getattr(model, rule.through.attr).in_(owned))

    return clauses
