"""
User Service
Lazy account creation from a verified Google profile, plus user lookups.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from models import db, User

logger = logging.getLogger(__name__)


class AccountConflict(Exception):
    """The profile's email already belongs to a different Google identity."""


@dataclass(frozen=True)
class OAuthProfile:
    google_id: str
    email: str
    display_name: str
    first_name: str = ""
    last_name: str = ""
    image: Optional[str] = None

    @classmethod
    def from_userinfo(cls, userinfo: Dict[str, Any]) -> "OAuthProfile":
        """Build a profile from Google's OpenID userinfo response."""
        email = userinfo["email"].strip().lower()
        display_name = userinfo.get("name") or userinfo.get("given_name") or email.split("@")[0]
        return cls(
            google_id=str(userinfo["sub"]),
            email=email,
            display_name=display_name,
            first_name=userinfo.get("given_name", ""),
            last_name=userinfo.get("family_name", ""),
            image=userinfo.get("picture"),
        )


def find_by_google_id(google_id: str) -> Optional[User]:
    return db.session.execute(
        select(User).where(User.google_id == google_id)
    ).scalar_one_or_none()


def find_or_create_from_profile(profile: OAuthProfile) -> User:
    """
    Return the user for this Google identity, creating it on first login.

    Raises:
        AccountConflict: the email is already registered to another identity
    """
    user = find_by_google_id(profile.google_id)
    if user:
        logger.info(f"User logged in via Google OAuth: {user.email}")
        return user

    user = User(
        google_id=profile.google_id,
        email=profile.email,
        display_name=profile.display_name,
        first_name=profile.first_name,
        last_name=profile.last_name,
        image=profile.image,
    )
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        # A concurrent first login may have inserted the same identity
        user = find_by_google_id(profile.google_id)
        if user:
            return user
        logger.warning(f"Google OAuth email already linked to another account: {profile.email}")
        raise AccountConflict(profile.email)

    logger.info(f"New user created via Google OAuth: {profile.email}")
    return user


def list_users() -> List[User]:
    return list(db.session.execute(
        select(User).order_by(User.created_at.asc())
    ).scalars().all())


def get_user(user_id: str) -> Optional[User]:
    return db.session.get(User, user_id)
