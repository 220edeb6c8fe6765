"""
automodeler auth - User model.
"""

from __future__ import annotations

from ..models.base import Model
from ..models.relations import Relation


class User(Model):
    """
    Application user.

    Looked up by numeric id, or by a string matching either the username or
    the email. Assigning ``password`` stores its hash.
    """

    table = "users"

    class Meta:
        fields = ["id", "username", "password", "email", "last_login", "logins"]
        rules = {
            "username": [("required",)],
            "email": [("email",)],
        }
        relations = [
            Relation("roles", owner_key="user_id", foreign_key="role_id", name_column="name"),
            Relation("tokens", owner_key="user_id", foreign_key="token_id"),
        ]
        natural_keys = ["username", "email"]
        password_field = "password"

    def username_exists(self, name: str) -> bool:
        return self.exists("username", name)

    def check_password(self, password: str) -> bool:
        """Verify a plaintext password against the stored hash."""
        stored = self.get("password")
        if not stored:
            return False
        return self._get_hasher().verify(stored, password)
