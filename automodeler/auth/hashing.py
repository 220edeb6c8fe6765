"""
automodeler auth - password hashing.

Argon2id (argon2-cffi) is the default; PBKDF2-HMAC-SHA256 (passlib) is
available for deployments that cannot afford Argon2's memory cost.

Hashes are self-describing, so ``verify`` accepts either format regardless
of the algorithm a hasher was configured with:

    $argon2id$v=19$m=65536,t=2,p=4$<salt>$<hash>
    $pbkdf2-sha256$600000$<salt>$<hash>
"""

from __future__ import annotations

from typing import Literal

from argon2 import PasswordHasher as Argon2PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError
from passlib.hash import pbkdf2_sha256

from ..faults.domains import ConfigInvalidFault

Algorithm = Literal["argon2id", "pbkdf2_sha256"]

ALGORITHMS = ("argon2id", "pbkdf2_sha256")


class PasswordHasher:
    """
    Password hasher used for a model's password field.

    Security parameters:
    - Argon2id: time_cost=2, memory_cost=65536 (64MB), parallelism=4
    - PBKDF2: iterations=600000, hash=SHA256
    """

    def __init__(
        self,
        algorithm: Algorithm = "argon2id",
        # Argon2 parameters
        time_cost: int = 2,
        memory_cost: int = 65536,  # 64 MB
        parallelism: int = 4,
        hash_len: int = 32,
        salt_len: int = 16,
        # PBKDF2 parameters
        iterations: int = 600000,
    ):
        """
        Args:
            algorithm: ``"argon2id"`` or ``"pbkdf2_sha256"``
            time_cost: Argon2 time cost (iterations)
            memory_cost: Argon2 memory cost (KB)
            parallelism: Argon2 parallelism (threads)
            hash_len: Output hash length
            salt_len: Salt length
            iterations: PBKDF2 iterations
        """
        if algorithm not in ALGORITHMS:
            raise ConfigInvalidFault(
                key="auth.password_algorithm",
                reason=f"Unsupported algorithm {algorithm!r}; expected one of {ALGORITHMS}",
            )
        self.algorithm = algorithm
        self.iterations = iterations

        self._argon2 = Argon2PasswordHasher(
            time_cost=time_cost,
            memory_cost=memory_cost,
            parallelism=parallelism,
            hash_len=hash_len,
            salt_len=salt_len,
        )
        self._pbkdf2 = pbkdf2_sha256.using(rounds=iterations, salt_size=salt_len)

    def hash(self, password: str) -> str:
        """Hash a plaintext password with the configured algorithm."""
        if self.algorithm == "argon2id":
            return self._argon2.hash(password)
        return self._pbkdf2.hash(password)

    def verify(self, password_hash: str, password: str) -> bool:
        """
        Check a plaintext password against a stored hash.

        Returns False for a mismatch and for hashes in an unknown format.
        """
        if password_hash.startswith("$argon2"):
            try:
                return self._argon2.verify(password_hash, password)
            except (VerifyMismatchError, VerificationError, InvalidHashError):
                return False
        if pbkdf2_sha256.identify(password_hash):
            try:
                return pbkdf2_sha256.verify(password, password_hash)
            except ValueError:
                return False
        return False

    def check_needs_rehash(self, password_hash: str) -> bool:
        """True when the hash was made with another algorithm or other parameters."""
        if self.algorithm == "argon2id":
            if not password_hash.startswith("$argon2"):
                return True
            try:
                return self._argon2.check_needs_rehash(password_hash)
            except InvalidHashError:
                return True
        if not pbkdf2_sha256.identify(password_hash):
            return True
        return self._pbkdf2.needs_update(password_hash)
