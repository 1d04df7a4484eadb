import base64
import binascii
import logging
import os
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Optional, Tuple

import jwt
from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from passlib.context import CryptContext

from errors import Forbidden, Unauthorized
from settings import Settings, get_settings

log = logging.getLogger(__name__)

bearer = HTTPBearer(auto_error=False)
password_ctx = CryptContext(schemes=["bcrypt"], deprecated="auto")

MASKED = "****"


class Role(str, Enum):
    CUSTOMER = "customer"
    ADMIN = "admin"


@dataclass(frozen=True)
class Identity:
    id: int
    email: str
    role: Role
    name: str

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN


# Passwords

def hash_password(password: str) -> str:
    return password_ctx.hash(password)


def verify_password(password: str, hashed: str) -> bool:
    try:
        return password_ctx.verify(password, hashed)
    except ValueError:
        # unknown or corrupt hash format
        return False


# Tokens

def create_token(identity: Identity, settings: Settings) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(identity.id),
        "id": identity.id,
        "email": identity.email,
        "role": identity.role.value,
        "name": identity.name,
        "iat": now,
        "exp": now + timedelta(minutes=settings.jwt_expires_min),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm="HS256")


def decode_token(token: str, settings: Settings) -> Identity:
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=["HS256"])
    except jwt.ExpiredSignatureError:
        raise Unauthorized("Token expired")
    except jwt.InvalidTokenError:
        raise Unauthorized("Invalid token")
    try:
        return Identity(
            id=int(payload["id"]),
            email=payload["email"],
            role=Role(payload["role"]),
            name=payload.get("name") or "",
        )
    except (KeyError, TypeError, ValueError):
        raise Unauthorized("Invalid token")


def require_role(identity: Identity, role: Role) -> Identity:
    if identity.role is not role:
        raise Forbidden("Admin only" if role is Role.ADMIN else "Access denied")
    return identity


# FastAPI dependencies

def get_current_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
    settings: Settings = Depends(get_settings),
) -> Identity:
    if credentials is None or not credentials.credentials:
        raise Unauthorized("Token required")
    return decode_token(credentials.credentials, settings)


def require_admin(identity: Identity = Depends(get_current_identity)) -> Identity:
    return require_role(identity, Role.ADMIN)


def catalog_writer(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
    settings: Settings = Depends(get_settings),
) -> Optional[Identity]:
    """Catalog writes are public unless CATALOG_REQUIRE_ADMIN is switched on."""
    if not settings.catalog_requires_admin:
        return None
    identity = get_current_identity(credentials, settings)
    return require_role(identity, Role.ADMIN)


# Card encryption

def derive_key(secret: str) -> Tuple[bytes, str]:
    """Turn the configured secret into a 32 byte AES key.

    Tried in order: base64, hex (first 64 chars), then the raw string cut or
    zero-padded to 32 bytes. Returns the key and the name of the branch used.
    """
    try:
        decoded = base64.b64decode(secret, validate=True)
    except (binascii.Error, ValueError):
        decoded = b""
    if len(decoded) == 32:
        return decoded, "base64"

    try:
        decoded = bytes.fromhex(secret[:64])
    except ValueError:
        decoded = b""
    if len(decoded) == 32:
        return decoded, "hex"

    return secret.encode("utf-8")[:32].ljust(32, b"0"), "raw"


class CardCipher:
    """AES-256-CBC with a random IV per value, stored as ``hex(iv):hex(data)``."""

    def __init__(self, key: bytes):
        if len(key) != 32:
            raise ValueError("encryption key must be 32 bytes")
        self._key = key

    @classmethod
    def from_secret(cls, secret: str) -> "CardCipher":
        key, source = derive_key(secret)
        if source == "raw":
            log.warning("ENCRYPTION_KEY is neither base64 nor hex; using the padded raw string")
        else:
            log.info("ENCRYPTION_KEY loaded from %s (32 bytes)", source)
        return cls(key)

    def encrypt(self, text: str) -> str:
        iv = os.urandom(16)
        padder = padding.PKCS7(algorithms.AES.block_size).padder()
        data = padder.update(text.encode("utf-8")) + padder.finalize()
        encryptor = Cipher(algorithms.AES(self._key), modes.CBC(iv)).encryptor()
        encrypted = encryptor.update(data) + encryptor.finalize()
        return iv.hex() + ":" + encrypted.hex()

    def decrypt(self, token: str) -> str:
        iv_hex, _, data_hex = token.partition(":")
        iv = bytes.fromhex(iv_hex)
        decryptor = Cipher(algorithms.AES(self._key), modes.CBC(iv)).decryptor()
        data = decryptor.update(bytes.fromhex(data_hex)) + decryptor.finalize()
        unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
        return (unpadder.update(data) + unpadder.finalize()).decode("utf-8")

    def last4(self, token: str) -> str:
        try:
            return self.decrypt(token)[-4:]
        except ValueError as e:
            log.warning("Could not decrypt stored card number: %s", e)
            return MASKED


def get_cipher(request: Request) -> CardCipher:
    return request.app.state.cipher
