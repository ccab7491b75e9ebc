"""Password hashing with passlib's bcrypt scheme."""

from passlib.context import CryptContext

from ..config import settings

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.password_hash_rounds,
)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """Check a plain password against a stored hash; malformed hashes never match."""
    try:
        return pwd_context.verify(password, password_hash)
    except ValueError:
        return False
