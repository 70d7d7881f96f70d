"""Password hashing and random tokens.

Passwords are hashed with argon2id (``argon2-cffi``) into PHC-format
strings that embed their own parameters::

    from wren.security import hash_password, verify_password

    hashed = hash_password("my-password")
    verify_password("my-password", hashed)   # True
"""

import secrets

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

_hasher = PasswordHasher()


def hash_password(password: str) -> str:
    """Hash *password* with argon2id. Empty passwords raise ``ValueError``."""
    if not password:
        msg = "Password must not be empty."
        raise ValueError(msg)
    return _hasher.hash(password)


def verify_password(password: str, phc_hash: str) -> bool:
    """True when *password* matches *phc_hash*. Malformed hashes never match."""
    if not password or not phc_hash:
        return False
    try:
        return _hasher.verify(phc_hash, password)
    except (VerificationError, InvalidHashError):
        return False


def needs_rehash(phc_hash: str) -> bool:
    """True when *phc_hash* was made with weaker parameters than the current ones."""
    return _hasher.check_needs_rehash(phc_hash)


def unique_token(length: int = 32) -> str:
    """A random hex string of ``2 * length`` characters."""
    return secrets.token_hex(length)
