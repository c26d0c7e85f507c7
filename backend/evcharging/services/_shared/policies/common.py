"""Role tags and ownership predicates shared by services.

Roles are plain strings; new tags can be issued without touching this module.
"""

EV_OWNER = "EVOwner"
BACK_OFFICE = "BackOffice"

KNOWN_ROLES = frozenset({EV_OWNER, BACK_OFFICE})


def is_owner(*, actor_id, owner_id) -> bool:
    """Return True if the actor owns the resource."""
    return actor_id is not None and str(actor_id) == str(owner_id)


def is_back_office(role) -> bool:
    return role == BACK_OFFICE


def can_manage_owner(*, actor_id, role, owner_id) -> bool:
    """Owners manage themselves; back-office manages everyone."""
    return is_back_office(role) or is_owner(actor_id=actor_id, owner_id=owner_id)
