"""
Squad roles and the few authorization rules built on them.

Only two rules exist: the squad creator alone may update or delete the
squad, and the join call can never grant a privileged role.
"""

from enum import Enum
from typing import Optional, Set


class SquadRole(str, Enum):
    """Roles a squad member can hold"""
    CREATOR = "creator"        # Exactly one per squad, set at creation
    MODERATOR = "moderator"
    MEMBER = "member"
    CONTRIBUTOR = "contributor"
    FRONTEND = "frontend"
    BACKEND = "backend"
    DESIGNER = "designer"
    QA = "qa"
    DOCS = "docs"


# Roles that cannot be self-assigned through the join endpoint
PRIVILEGED_ROLES: Set[SquadRole] = {SquadRole.CREATOR, SquadRole.MODERATOR}


def sanitize_join_role(requested: Optional[str]) -> SquadRole:
    """
    Resolve the role stored for a self-service join.

    Missing, unknown and privileged roles all become ``member``.
    """
    if not requested:
        return SquadRole.MEMBER
    try:
        role = SquadRole(requested)
    except ValueError:
        return SquadRole.MEMBER
    if role in PRIVILEGED_ROLES:
        return SquadRole.MEMBER
    return role


def is_squad_creator(squad, user_id: Optional[int]) -> bool:
    """True when ``user_id`` is the stored ``created_by`` of the squad."""
    return user_id is not None and squad is not None and squad.created_by == user_id
