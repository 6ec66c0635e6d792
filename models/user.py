"""
User Model
Accounts are created lazily from the Google OAuth profile on first sign-in.
"""

import re
from typing import Optional
from datetime import datetime

from flask_login import UserMixin
from sqlalchemy import String, DateTime
from sqlalchemy.orm import Mapped, mapped_column, validates

from .base import db, new_id, utcnow

EMAIL_PATTERN = re.compile(r".+@.+\..+")


class User(UserMixin, db.Model):
    """
    Authenticated person known to the app.

    `google_id` is the OAuth provider's subject identifier. It is unique so a
    repeated first login can never produce duplicate identity rows.
    """
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    google_id: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)

    display_name: Mapped[str] = mapped_column(String(255), nullable=False)
    first_name: Mapped[Optional[str]] = mapped_column(String(120))
    last_name: Mapped[Optional[str]] = mapped_column(String(120))
    image: Mapped[Optional[str]] = mapped_column(String(512))
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)

    def __repr__(self):
        return f'<User {self.id}: {self.email}>'

    @validates("email")
    def _validate_email(self, key, value):
        value = (value or "").strip().lower()
        if not EMAIL_PATTERN.fullmatch(value):
            raise ValueError("Please fill a valid email address")
        return value

    @property
    def full_name(self) -> str:
        parts = [p for p in (self.first_name, self.last_name) if p]
        return " ".join(parts) or self.display_name

    def to_summary(self):
        """Compact form embedded in task payloads."""
        return {
            'id': self.id,
            'display_name': self.display_name,
            'email': self.email,
        }

    def to_dict(self):
        return {
            'id': self.id,
            'display_name': self.display_name,
            'first_name': self.first_name,
            'last_name': self.last_name,
            'email': self.email,
            'image': self.image,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
