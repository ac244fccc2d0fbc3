"""Function Registry — explicit routing from qualified function name to definition.

Invariants:
    - Every name->definition mapping is visible in build_function_registry:
      no getattr magic, no auto-discovery
    - Unknown names return an `argument` FunctionError (never raise)
    - Arity and argument types are checked before the implementation runs
    - Exceptions escaping an implementation propagate (bugs are not data)
    - A bare alias and its namespaced name share one FunctionDefinition

Design Decisions:
    - Explicit dict over decorators/metaclasses: adding a function means
      editing one table (ADR: no convention-over-config)
    - Built per evaluation: file and remote handlers capture the storage root,
      secret backend and an HTTP client owned by this registry
"""

import logging
from collections.abc import Sequence
from pathlib import Path

import httpx

from hclrender.config import Settings
from hclrender.core.domain_types import ParamType, Value
from hclrender.core.function_types import (
    FunctionDefinition,
    FunctionError,
    FunctionResult,
    Implementation,
)
from hclrender.infrastructure.remote_client import RemoteClient
from hclrender.services import (
    handle_cidr,
    handle_collections,
    handle_dates,
    handle_encoding,
    handle_hashing,
    handle_numeric,
    handle_strings,
)
from hclrender.services.handle_files import FileHandlers
from hclrender.services.handle_remote import RemoteHandlers

logger = logging.getLogger(__name__)

ANY = ParamType.ANY
STRING = ParamType.STRING
NUMBER = ParamType.NUMBER
ARRAY = ParamType.ARRAY
OBJECT = ParamType.OBJECT
COLLECTION = ParamType.COLLECTION


class FunctionRegistry:
    """Read-only table of built-ins for one evaluation."""

    def __init__(
        self,
        definitions: dict[str, FunctionDefinition],
        remote: RemoteClient | None = None,
    ):
        self._definitions = dict(definitions)
        self._remote = remote

    def __contains__(self, name: str) -> bool:
        return name in self._definitions

    def names(self) -> list[str]:
        return sorted(self._definitions)

    def definition(self, name: str) -> FunctionDefinition | None:
        return self._definitions.get(name)

    def call(self, name: str, args: Sequence[Value]) -> FunctionResult:
        """Validate the call against the declared signature, then run it."""
        definition = self._definitions.get(name)
        if definition is None:
            return FunctionError(f"unknown function '{name}'")
        args = list(args)
        problem = definition.check_call(args)
        if problem is not None:
            return problem
        return definition.implementation(args)

    def close(self) -> None:
        """Release the HTTP client owned by this registry."""
        if self._remote is not None:
            self._remote.close()


def _fn(
    implementation: Implementation,
    *params: ParamType,
    variadic: ParamType | None = None,
) -> FunctionDefinition:
    return FunctionDefinition(implementation, tuple(params), variadic)


def build_function_registry(
    settings: Settings,
    http_client: httpx.Client | None = None,
    storage_root: Path | None = None,
) -> FunctionRegistry:
    """Declare every built-in. Called once per document evaluation."""
    remote = RemoteClient(settings.http_timeout_seconds, client=http_client)
    files = FileHandlers(storage_root or Path(settings.storage))
    network = RemoteHandlers(remote, settings.vault_url, settings.vault_token)

    # Shared definitions for names that have a bare alias
    upper = _fn(handle_strings.upper, STRING)
    lower = _fn(handle_strings.lower, STRING)
    trim = _fn(handle_strings.trim, STRING, STRING)
    trimspace = _fn(handle_strings.trimspace, STRING)
    trimprefix = _fn(handle_strings.trimprefix, STRING, STRING)
    trimsuffix = _fn(handle_strings.trimsuffix, STRING, STRING)
    tostring = _fn(handle_strings.tostring, ANY)
    tonumber = _fn(handle_numeric.tonumber, ANY)
    unique = _fn(handle_collections.unique, ARRAY)
    keys = _fn(handle_collections.keys, OBJECT)
    values = _fn(handle_collections.values, OBJECT)
    tovec = _fn(handle_collections.tovec, variadic=ANY)

    md5 = _fn(handle_hashing.md5_hash, STRING)
    sha1 = _fn(handle_hashing.sha1_hash, STRING)
    sha256 = _fn(handle_hashing.sha256_hash, STRING)
    sha512 = _fn(handle_hashing.sha512_hash, STRING)
    bcrypt = _fn(handle_hashing.bcrypt_hash, STRING)
    filemd5 = _fn(files.md5, STRING)
    filesha1 = _fn(files.sha1, STRING)
    filesha256 = _fn(files.sha256, STRING)
    filesha512 = _fn(files.sha512, STRING)

    timestamp = _fn(handle_dates.timestamp)
    timeadd = _fn(handle_dates.timeadd, NUMBER, STRING)
    formatdate = _fn(handle_dates.formatdate, STRING, NUMBER)
    parseduration = _fn(handle_dates.parseduration, STRING)

    base64encode = _fn(handle_encoding.base64encode, STRING)
    base64decode = _fn(handle_encoding.base64decode, STRING)
    urlencode = _fn(handle_encoding.urlencode, STRING)
    urldecode = _fn(handle_encoding.urldecode, STRING)
    jsonencode = _fn(handle_encoding.jsonencode, ANY)
    jsondecode = _fn(handle_encoding.jsondecode, STRING)
    yamlencode = _fn(handle_encoding.yamlencode, ANY)
    yamldecode = _fn(handle_encoding.yamldecode, STRING)

    cidrnetmask = _fn(handle_cidr.cidrnetmask, STRING)
    cidrrange = _fn(handle_cidr.cidrrange, STRING)
    cidrhost = _fn(handle_cidr.cidrhost, STRING, NUMBER)
    cidrsubnets = _fn(handle_cidr.cidrsubnets, STRING, NUMBER)

    read_file = _fn(files.read, STRING)

    # ADR: every mapping explicit, adding a function requires editing this dict
    definitions = {
        # Collections
        "length": _fn(handle_collections.length, ANY),
        "compact": _fn(handle_collections.compact, COLLECTION),
        "unique": unique,
        "toset": unique,
        "set": unique,
        "contains": _fn(handle_collections.contains, ANY, ANY),
        "keys": keys,
        "map::keys": keys,
        "values": values,
        "map::values": values,
        "merge": _fn(handle_collections.merge, variadic=OBJECT),
        "flatten": _fn(handle_collections.flatten, ARRAY),
        "reverse": _fn(handle_collections.reverse, ANY),
        "range": _fn(handle_collections.range_, NUMBER, NUMBER),

        # Strings
        "upper": upper,
        "str::upper": upper,
        "lower": lower,
        "str::lower": lower,
        "trim": trim,
        "str::trim": trim,
        "trimspace": trimspace,
        "str::trimspace": trimspace,
        "trimprefix": trimprefix,
        "str::trimprefix": trimprefix,
        "trimsuffix": trimsuffix,
        "str::trimsuffix": trimsuffix,
        "split": _fn(handle_strings.split, STRING, STRING),
        "join": _fn(handle_strings.join, ARRAY, STRING),
        "format": _fn(handle_strings.format_, STRING, variadic=ANY),
        "concat": _fn(handle_strings.concat, variadic=STRING),

        # Numeric
        "abs": _fn(handle_numeric.abs_, NUMBER),
        "ceil": _fn(handle_numeric.ceil, NUMBER),
        "floor": _fn(handle_numeric.floor, NUMBER),
        "parseint": _fn(handle_numeric.parseint, STRING),
        "sum": _fn(handle_numeric.sum_, ARRAY),
        "max": _fn(handle_numeric.max_, ARRAY),
        "min": _fn(handle_numeric.min_, ARRAY),

        # Hashing / crypto
        "md5": md5,
        "hash::md5": md5,
        "sha1": sha1,
        "hash::sha1": sha1,
        "sha256": sha256,
        "hash::sha256": sha256,
        "sha512": sha512,
        "hash::sha512": sha512,
        "bcrypt": bcrypt,
        "hash::bcrypt": bcrypt,
        "filemd5": filemd5,
        "fs::hash::md5": filemd5,
        "filesha1": filesha1,
        "fs::hash::sha1": filesha1,
        "filesha256": filesha256,
        "fs::hash::sha256": filesha256,
        "filesha512": filesha512,
        "fs::hash::sha512": filesha512,
        "uuid": _fn(handle_hashing.uuid_v4),
        "uuidv5": _fn(handle_hashing.uuid_v5, STRING, STRING),

        # Date / time
        "timestamp": timestamp,
        "date::timestamp": timestamp,
        "timeadd": timeadd,
        "date::timeadd": timeadd,
        "formatdate": formatdate,
        "date::format": formatdate,
        "parseduration": parseduration,
        "date::duration": parseduration,

        # Encoding
        "base64encode": base64encode,
        "encode::base64": base64encode,
        "base64decode": base64decode,
        "decode::base64": base64decode,
        "urlencode": urlencode,
        "encode::url": urlencode,
        "urldecode": urldecode,
        "decode::url": urldecode,
        "jsonencode": jsonencode,
        "encode::json": jsonencode,
        "jsondecode": jsondecode,
        "decode::json": jsondecode,
        "yamlencode": yamlencode,
        "encode::yaml": yamlencode,
        "yamldecode": yamldecode,
        "decode::yaml": yamldecode,

        # CIDR
        "cidrnetmask": cidrnetmask,
        "cidr::netmask": cidrnetmask,
        "cidrrange": cidrrange,
        "cidr::range": cidrrange,
        "cidrhost": cidrhost,
        "cidr::host": cidrhost,
        "cidrsubnets": cidrsubnets,
        "cidr::subnets": cidrsubnets,

        # I/O and remote
        "file": read_file,
        "fs::read": read_file,
        "http::get": _fn(network.http_get, STRING, variadic=ANY),
        "http::post": _fn(network.http_post, STRING, STRING, variadic=ANY),
        "http::post_json": _fn(network.http_post_json, STRING, ANY, variadic=ANY),
        "http::put": _fn(network.http_put, STRING, STRING, variadic=ANY),
        "secret::kv": _fn(network.secret_kv, STRING, variadic=ANY),

        # Type utilities
        "type_of": _fn(handle_collections.type_of, ANY),
        "tostring": tostring,
        "string": tostring,
        "tonumber": tonumber,
        "number": tonumber,
        "tovec": tovec,
        "list": tovec,
        "tuple": tovec,
    }
    logger.debug(f"Function registry built with {len(definitions)} names")
    return FunctionRegistry(definitions, remote=remote)
