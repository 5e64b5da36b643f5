"""User accounts."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from ..database import get_db_connection
from ..errors import ValidationError


class UserRepository:
    """Repository for user records."""

    def __init__(self, db_path: Optional[Path] = None):
        self.db_path = db_path

    def create(self, email: str, name: Optional[str] = None) -> str:
        """Create a user. Emails are stored lowercase and must be unique."""
        email = (email or "").strip().lower()
        if "@" not in email:
            raise ValidationError(f"Invalid email: {email!r}")

        if self.get_by_email(email):
            raise ValidationError(f"User already exists: {email}")

        user_id = str(uuid.uuid4())
        now = datetime.now(timezone.utc).isoformat()

        with get_db_connection(self.db_path) as conn:
            cursor = conn.cursor()
            cursor.execute(
                "INSERT INTO users (id, email, name, created_at) VALUES (?, ?, ?, ?)",
                (user_id, email, name, now)
            )
            conn.commit()

        return user_id

    def get(self, user_id: str) -> Optional[dict]:
        with get_db_connection(self.db_path) as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT * FROM users WHERE id = ?", (user_id,))
            row = cursor.fetchone()
            return dict(row) if row else None

    def get_by_email(self, email: str) -> Optional[dict]:
        with get_db_connection(self.db_path) as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT * FROM users WHERE email = ?", (email.strip().lower(),))
            row = cursor.fetchone()
            return dict(row) if row else None

    def get_by_stripe_customer(self, customer_id: str) -> Optional[dict]:
        with get_db_connection(self.db_path) as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT * FROM users WHERE stripe_customer_id = ?", (customer_id,))
            row = cursor.fetchone()
            return dict(row) if row else None

    def list(self) -> list[dict]:
        with get_db_connection(self.db_path) as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT * FROM users ORDER BY created_at")
            return [dict(row) for row in cursor.fetchall()]

    def set_stripe_customer(self, user_id: str, customer_id: str) -> None:
        with get_db_connection(self.db_path) as conn:
            cursor = conn.cursor()
            cursor.execute(
                "UPDATE users SET stripe_customer_id = ? WHERE id = ?",
                (customer_id, user_id)
            )
            conn.commit()

    def resolve(self, identifier: str) -> Optional[dict]:
        """Find a user by id or email."""
        if "@" in identifier:
            return self.get_by_email(identifier)
        return self.get(identifier)
