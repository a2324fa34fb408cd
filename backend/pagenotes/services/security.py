"""
PageNotes Backend — Password Hashing & Token Signing Primitives
=================================================================

What:  Abstract capability interfaces (Hasher, TokenSigner) and their
       production implementations (bcrypt via passlib, HS256 JWT via
       python-jose).
Why:   Hashing uses a random salt and signing depends on the clock, so the
       services that use them take them as constructor arguments. Tests pass
       deterministic fakes; production passes the classes below.

Implementations:
    - BcryptHasher:     passlib CryptContext, bcrypt scheme, configurable cost
    - JoseTokenSigner:  python-jose jwt.encode / jwt.decode with an HMAC key

Failure contract:
    TokenSigner.decode raises InvalidTokenError for every kind of failure
    (bad signature, malformed input, expired, missing claims). Callers never
    see library exceptions.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict

from jose import JWTError, jwt
from passlib.context import CryptContext

from pagenotes.exceptions import InvalidTokenError

logger = logging.getLogger(__name__)

# bcrypt ignores everything past the first 72 bytes of the password
MAX_PASSWORD_BYTES = 72


class Hasher(ABC):
    """
    One-way salted password hashing.

    Contract:
        - hash() returns a self-describing string (salt embedded), different
          on every call for the same input
        - verify() compares in constant time and never raises for a
          mismatched password
    """

    @abstractmethod
    def hash(self, plaintext: str) -> str:
        ...

    @abstractmethod
    def verify(self, plaintext: str, hashed: str) -> bool:
        ...


class BcryptHasher(Hasher):
    """
    bcrypt through passlib.

    rounds is the bcrypt cost factor (2**rounds iterations). 10 is the
    production default; tests use 4 to stay fast.

    Only the first MAX_PASSWORD_BYTES of the UTF-8 password are hashed and
    passlib truncates silently. AuthService rejects longer passwords before
    they get here.
    """

    def __init__(self, rounds: int = 10):
        self.rounds = rounds
        self._context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=rounds,
        )

    def hash(self, plaintext: str) -> str:
        return self._context.hash(plaintext)

    def verify(self, plaintext: str, hashed: str) -> bool:
        try:
            return self._context.verify(plaintext, hashed)
        except ValueError:
            # Stored value is not a recognizable hash
            logger.error("Password hash in unrecognized format; treating as mismatch")
            return False


class TokenSigner(ABC):
    """
    Signs and verifies claim sets.

    Contract:
        - encode() returns a compact string
        - decode() returns the claims of a valid, unexpired token or raises
          InvalidTokenError
    """

    @abstractmethod
    def encode(self, claims: Dict[str, Any]) -> str:
        ...

    @abstractmethod
    def decode(self, token: str) -> Dict[str, Any]:
        ...


class JoseTokenSigner(TokenSigner):
    """
    HMAC-signed JWTs via python-jose.

    decode() pins the accepted algorithm list to the configured one (no
    'alg' downgrade) and requires both 'exp' and 'sub'.
    """

    def __init__(self, secret: str, algorithm: str = "HS256"):
        if not secret:
            raise ValueError("Token signing secret must not be empty")
        self._secret = secret
        self.algorithm = algorithm

    def encode(self, claims: Dict[str, Any]) -> str:
        return jwt.encode(claims, self._secret, algorithm=self.algorithm)

    def decode(self, token: str) -> Dict[str, Any]:
        try:
            return jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                options={"require_exp": True, "require_sub": True},
            )
        except JWTError as e:
            # ExpiredSignatureError and JWTClaimsError are JWTError subclasses
            raise InvalidTokenError(context={"cause": type(e).__name__}) from e
        except (ValueError, TypeError, AttributeError) as e:
            raise InvalidTokenError(context={"cause": type(e).__name__}) from e
