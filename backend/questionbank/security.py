"""PIN hashing.

PINs are hashed with passlib's `pbkdf2_sha256` scheme using a fixed
round count taken from settings. Only the auth service calls into this
module; neither the PIN nor its digest is ever logged.
"""

from passlib.context import CryptContext

from .config import settings

PWD_CTX = CryptContext(
    schemes=["pbkdf2_sha256"],
    deprecated="auto",
    pbkdf2_sha256__default_rounds=settings.PIN_HASH_ROUNDS,
)


def hash_pin(pin: str) -> str:
    """Return a salted digest of `pin`."""
    return PWD_CTX.hash(pin)


def verify_pin(pin: str, digest: str) -> bool:
    """Check `pin` against a stored digest.

    A digest in a format the context does not recognise counts as a
    mismatch rather than an error.
    """
    try:
        return PWD_CTX.verify(pin, digest)
    except ValueError:
        return False
