"""Hashing Handlers — md5/sha1/sha256/sha512 of strings, bcrypt, uuid, uuidv5.

Invariants:
    - Digests are lowercase hex of the UTF-8 encoded input
    - bcrypt uses a fixed cost factor (BCRYPT_COST)
    - uuid() is random (v4); uuidv5(namespace, name) is deterministic

Design Decisions:
    - hashlib for digests, bcrypt package for password hashing (no stdlib bcrypt)
    - File-content digests live in handle_files.py: they need the storage root
"""

import hashlib
import uuid as _uuid

import bcrypt as _bcrypt

from hclrender.core.domain_types import Value
from hclrender.core.function_types import FunctionError, FunctionResult

BCRYPT_COST = 12


def _digest(algorithm: str):
    def handler(args: list[Value]) -> FunctionResult:
        return hashlib.new(algorithm, args[0].encode("utf-8")).hexdigest()
    handler.__name__ = f"{algorithm}_hash"
    return handler


md5_hash = _digest("md5")
sha1_hash = _digest("sha1")
sha256_hash = _digest("sha256")
sha512_hash = _digest("sha512")


def bcrypt_hash(args: list[Value]) -> FunctionResult:
    try:
        hashed = _bcrypt.hashpw(
            args[0].encode("utf-8"), _bcrypt.gensalt(rounds=BCRYPT_COST),
        )
    except ValueError as e:
        return FunctionError(f"bcrypt error: {e}")
    return hashed.decode("ascii")


def uuid_v4(args: list[Value]) -> FunctionResult:
    return str(_uuid.uuid4())


def uuid_v5(args: list[Value]) -> FunctionResult:
    namespace, name = args
    try:
        namespace_uuid = _uuid.UUID(namespace)
    except ValueError as e:
        return FunctionError(f"invalid namespace UUID: {e}")
    return str(_uuid.uuid5(namespace_uuid, name))
