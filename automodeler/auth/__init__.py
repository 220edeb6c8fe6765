"""
automodeler auth - password hashing and the User model.
"""

from .hashing import PasswordHasher, ALGORITHMS
from .models import User

__all__ = [
    "PasswordHasher",
    "ALGORITHMS",
    "User",
]
