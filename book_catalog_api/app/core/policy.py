"""
Access‑control policy for profiles, books and reviews.

Every mutation performed by a service goes through ``authorize``,
which evaluates the rule for a (resource, action, actor, target,
payload) tuple and raises ``Unauthorized`` when it does not hold.
``is_permitted`` exposes the same decision as a boolean.

Rules
-----
* Reads of any resource are open to every caller, anonymous included.
* A profile may only be updated by its owner and only its ``name``
  may change.  Profiles are never created or deleted by an actor;
  registration creates them.
* Any authenticated actor may create a book or a review.  A submitted
  owner reference (``added_by`` / ``user_id``) must equal the actor.
* Books are updated/deleted by their ``added_by`` profile only,
  reviews by their ``user_id`` profile only.  Ownership references
  never change.

The rating range and the one‑review‑per‑book rule are data constraints
rather than permissions; ``check_rating`` and ``check_review_unique``
raise ``ConstraintViolation`` for them.
"""

from enum import Enum
from typing import Any, Mapping, Optional

from .errors import ConstraintViolation, Unauthorized, ValidationError

RATING_MIN = 1
RATING_MAX = 5

PROFILE_MUTABLE_FIELDS = frozenset({"name"})
BOOK_MUTABLE_FIELDS = frozenset({"title", "author", "description", "genre", "published_year"})
REVIEW_MUTABLE_FIELDS = frozenset({"rating", "review_text"})


class Resource(str, Enum):
    PROFILE = "profile"
    BOOK = "book"
    REVIEW = "review"


class Action(str, Enum):
    READ = "read"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


# Column holding the owning profile id for each resource kind.
OWNER_FIELD = {
    Resource.PROFILE: "id",
    Resource.BOOK: "added_by",
    Resource.REVIEW: "user_id",
}

_MUTABLE_FIELDS = {
    Resource.PROFILE: PROFILE_MUTABLE_FIELDS,
    Resource.BOOK: BOOK_MUTABLE_FIELDS,
    Resource.REVIEW: REVIEW_MUTABLE_FIELDS,
}


def actor_id(actor: Optional[Mapping[str, Any]]) -> Optional[str]:
    """Return the profile id of an actor, or ``None`` when anonymous."""
    if not actor:
        return None
    return actor.get("user_id") or None


def _owns(actor: Optional[Mapping[str, Any]], resource: Resource, target: Optional[Mapping[str, Any]]) -> bool:
    uid = actor_id(actor)
    if uid is None or target is None:
        return False
    return target[OWNER_FIELD[resource]] == uid


def _changes_only(resource: Resource, payload: Optional[Mapping[str, Any]], target: Mapping[str, Any]) -> bool:
    """True if ``payload`` touches nothing but the resource's mutable fields.

    Immutable keys are tolerated when they repeat the stored value, so a
    client may echo back the full record.
    """
    allowed = _MUTABLE_FIELDS[resource]
    for key, value in (payload or {}).items():
        if key in allowed:
            continue
        if key in target.keys() and target[key] == value:
            continue
        return False
    return True


def is_permitted(
    actor: Optional[Mapping[str, Any]],
    resource: Resource,
    action: Action,
    target: Optional[Mapping[str, Any]] = None,
    payload: Optional[Mapping[str, Any]] = None,
) -> bool:
    """Evaluate the policy for one request.

    ``target`` is the stored row for update/delete; ``payload`` holds the
    submitted fields for create/update.
    """
    if action is Action.READ:
        return True

    uid = actor_id(actor)

    if resource is Resource.PROFILE:
        if action is Action.UPDATE:
            return _owns(actor, resource, target) and _changes_only(resource, payload, target)
        return False

    if action is Action.CREATE:
        if uid is None:
            return False
        submitted_owner = (payload or {}).get(OWNER_FIELD[resource])
        return submitted_owner is None or submitted_owner == uid

    if action is Action.UPDATE:
        return _owns(actor, resource, target) and _changes_only(resource, payload, target)

    if action is Action.DELETE:
        return _owns(actor, resource, target)

    return False


def authorize(
    actor: Optional[Mapping[str, Any]],
    resource: Resource,
    action: Action,
    target: Optional[Mapping[str, Any]] = None,
    payload: Optional[Mapping[str, Any]] = None,
) -> None:
    """Raise ``Unauthorized`` unless ``is_permitted`` allows the request."""
    if not is_permitted(actor, resource, action, target, payload):
        raise Unauthorized(
            f"Not allowed to {action.value} this {resource.value}"
        )


def check_rating(rating: Any) -> int:
    """Return ``rating`` if it is an integer within the allowed range.

    Non‑integers are malformed input (``ValidationError``); integers
    outside 1..5 break the rating constraint (``ConstraintViolation``).
    """
    if isinstance(rating, bool) or not isinstance(rating, int):
        raise ValidationError("Rating must be an integer")
    if not RATING_MIN <= rating <= RATING_MAX:
        raise ConstraintViolation(
            f"Rating must be between {RATING_MIN} and {RATING_MAX}"
        )
    return rating


def check_review_unique(existing: Optional[Mapping[str, Any]]) -> None:
    """Raise ``ConstraintViolation`` if the actor already reviewed the book."""
    if existing is not None:
        raise ConstraintViolation("You have already reviewed this book")
