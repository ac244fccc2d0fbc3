"""File Handlers — file()/fs::read and streaming file digests.

Invariants:
    - Relative paths resolve against the storage root; absolute paths are used as-is
    - file() returns the whole content as UTF-8 text or an `io`/`encoding` error
    - Digests stream the file in CHUNK_SIZE blocks, never load it wholesale
    - Handlers instantiated per registry build (one per request)
"""

import hashlib
from pathlib import Path

from hclrender.core.domain_types import FunctionErrorKind, Value
from hclrender.core.function_types import FunctionError, FunctionResult

CHUNK_SIZE = 64 * 1024


class FileHandlers:
    """Filesystem-backed functions rooted at the storage directory."""

    def __init__(self, storage_root: Path):
        self.storage_root = storage_root

    def _resolve(self, path: str) -> Path:
        candidate = Path(path)
        if candidate.is_absolute():
            return candidate
        return self.storage_root / candidate

    def read(self, args: list[Value]) -> FunctionResult:
        """Read a whole file as UTF-8 text."""
        path = self._resolve(args[0])
        try:
            raw = path.read_bytes()
        except OSError as e:
            return FunctionError(f"failed to read file: {e}", FunctionErrorKind.IO)
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as e:
            return FunctionError(
                f"file is not valid UTF-8: {e}", FunctionErrorKind.ENCODING,
            )

    def _digest(self, algorithm: str, path_arg: str) -> FunctionResult:
        path = self._resolve(path_arg)
        hasher = hashlib.new(algorithm)
        try:
            with path.open("rb") as f:
                while chunk := f.read(CHUNK_SIZE):
                    hasher.update(chunk)
        except OSError as e:
            return FunctionError(f"failed to read file: {e}", FunctionErrorKind.IO)
        return hasher.hexdigest()

    def md5(self, args: list[Value]) -> FunctionResult:
        return self._digest("md5", args[0])

    def sha1(self, args: list[Value]) -> FunctionResult:
        return self._digest("sha1", args[0])

    def sha256(self, args: list[Value]) -> FunctionResult:
        return self._digest("sha256", args[0])

    def sha512(self, args: list[Value]) -> FunctionResult:
        return self._digest("sha512", args[0])
