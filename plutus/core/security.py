import hashlib
import secrets

import bcrypt

from plutus.core.config import settings


def _password_bytes(password: str) -> bytes:
    password_bytes = password.encode("utf-8")
    # bcrypt only looks at the first 72 bytes
    if len(password_bytes) > 72:
        password_bytes = hashlib.sha256(password_bytes).hexdigest().encode("utf-8")
    return password_bytes


def get_password_hash(password: str) -> str:
    hashed = bcrypt.hashpw(
        _password_bytes(password), bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)
    )
    return hashed.decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return bcrypt.checkpw(
            _password_bytes(plain_password), hashed_password.encode("utf-8")
        )
    except ValueError:
        # malformed stored hash
        return False


def generate_user_id() -> str:
    return "user_" + secrets.token_hex(16)
