"""
Access rules

Collection rules are evaluated with the host convention:

    None      - superusers only
    ""        - anyone, including anonymous callers
    otherwise - any authenticated user
"""

from typing import Optional

from valueboard.auth.firebase_auth import FirebaseUser
from valueboard.core.exceptions import AccessDeniedError
from valueboard.schemas.collections import Collection

ACTIONS = ("list", "view", "create", "update", "delete")


def is_allowed(rule: Optional[str], user: Optional[FirebaseUser]) -> bool:
    if user is not None and user.is_superuser:
        return True
    if rule is None:
        return False
    if rule == "":
        return True
    return user is not None


def check_rule(collection: Collection, action: str, user: Optional[FirebaseUser]) -> None:
    """Raise AccessDeniedError unless the collection's rule for ``action`` allows ``user``."""
    if action not in ACTIONS:
        raise ValueError(f"Unknown action '{action}'")

    rule = getattr(collection, f"{action}_rule")
    if not is_allowed(rule, user):
        raise AccessDeniedError(
            f"Not allowed to {action} records of {collection.name}",
            details={"collection": collection.name, "action": action},
        )
