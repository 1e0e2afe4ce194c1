"""
Firebase Authentication

Verifies Firebase ID tokens and extracts user information for access rule
checks. Supports demo mode with pseudo-IDs for testing.
"""

from dataclasses import dataclass
from typing import Optional

import firebase_admin
from fastapi import Depends, Header
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from firebase_admin import auth

from valueboard.core.config import get_settings
from valueboard.core.logging import get_logger

logger = get_logger(__name__)


def _ensure_firebase_initialized():
    """Lazy Firebase initialization - only when actually needed for token verification."""
    if not firebase_admin._apps:
        firebase_admin.initialize_app()

# HTTP Bearer scheme for Authorization header
security = HTTPBearer(auto_error=False)

DEMO_USER_PREFIX = "demo_"
SUPERUSER_CLAIM = "admin"


@dataclass
class FirebaseUser:
    """Represents an authenticated Firebase user."""

    uid: str
    email: Optional[str] = None
    is_superuser: bool = False
    is_demo: bool = False

    @classmethod
    def from_token(cls, decoded_token: dict) -> "FirebaseUser":
        """Create FirebaseUser from decoded Firebase ID token."""
        return cls(
            uid=decoded_token["uid"],
            email=decoded_token.get("email"),
            is_superuser=decoded_token.get(SUPERUSER_CLAIM) is True,
            is_demo=False,
        )

    @classmethod
    def demo_user(cls, demo_id: str) -> "FirebaseUser":
        """Create a demo user with pseudo-ID. Demo users are never superusers."""
        return cls(
            uid=f"{DEMO_USER_PREFIX}{demo_id}",
            email=f"{demo_id}@demo.valueboard.local",
            is_demo=True,
        )


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    x_demo_user_id: Optional[str] = Header(None, alias="X-Demo-User-Id"),
) -> Optional[FirebaseUser]:
    """
    Dependency that optionally verifies a Firebase ID token.
    Returns None for anonymous requests, for tokens that fail verification and
    when the signing certificates cannot be fetched;
    access rules then decide what an anonymous caller may do.

    Demo mode:
        Send header: X-Demo-User-Id: my-demo-session
        Returns demo user with uid: demo_my-demo-session
    """
    if get_settings().demo_mode and x_demo_user_id:
        return FirebaseUser.demo_user(x_demo_user_id)

    if credentials is None:
        return None

    try:
        _ensure_firebase_initialized()
        decoded_token = auth.verify_id_token(credentials.credentials)
        return FirebaseUser.from_token(decoded_token)
    except (
        auth.InvalidIdTokenError,
        auth.ExpiredIdTokenError,
        auth.UserDisabledError,
        ValueError,
    ) as e:
        logger.warning(f"Ignoring unverifiable token: {e}")
        return None
    except auth.CertificateFetchError as e:
        # Signing keys unreachable; the request continues as anonymous
        logger.error(f"Could not fetch Firebase certificates, treating request as anonymous: {e}")
        return None
