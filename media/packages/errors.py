# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from media.packages.hashing import Hash

# Loader.
MAGIC_BYTES = "magic-bytes"
MANIFEST_INDEX_RANGE = "manifest-index-range"
MANIFEST_INDEX_OUT_OF_BOUNDS = "manifest-index-out-of-bounds"
FILE_HASH_ORDER = "file-hash-order"
FILE_HASH_DUPLICATED = "file-hash-duplicated"
FILE_LENGTH_RANGE = "file-length-range"
FILE_HASH_INVALID = "file-hash-invalid"
UNEXPECTED_EOF = "unexpected-eof"
TRAILING_BYTES = "trailing-bytes"
DESERIALIZE_MANIFEST = "deserialize-manifest"
MANIFEST_EXTRA_FILES = "manifest-extra-files"
MANIFEST_MISSING_FILES = "manifest-missing-files"

# Writer.
FILE_IO = "file-io"
IO_COPY = "io-copy"

# Either direction.
IO = "io"


@dataclass(frozen=True)
class PackageError(ValueError):
	"""
	A structured error raised by the package writer and loader.

	`reason_code` is stable; the optional fields carry just enough context to
	diagnose a bad package without re-reading it.
	"""

	reason_code: str
	message: str
	hash: Hash | None = None
	expected: Hash | None = None
	actual: Hash | None = None
	index: int | None = None
	length: int | None = None
	trailing: int | None = None
	extra: int | None = None
	missing: int | None = None
	data: bytes | None = None
	path: str | None = None

	def __str__(self) -> str:
		return self.format_human()

	def to_dict(self) -> dict[str, Any]:
		return {
			"reason_code": self.reason_code,
			"message": self.message,
			"hash": str(self.hash) if self.hash is not None else None,
			"expected": str(self.expected) if self.expected is not None else None,
			"actual": str(self.actual) if self.actual is not None else None,
			"index": self.index,
			"length": self.length,
			"trailing": self.trailing,
			"extra": self.extra,
			"missing": self.missing,
			"data": self.data.hex() if self.data is not None else None,
			"path": self.path,
		}

	def format_human(self) -> str:
		parts: list[str] = [f"[{self.reason_code}] {self.message}"]
		if self.path:
			parts.append(f"path={self.path}")
		if self.hash is not None:
			parts.append(f"hash={self.hash}")
		if self.expected is not None or self.actual is not None:
			parts.append(f"expected={self.expected}")
			parts.append(f"actual={self.actual}")
		return " ".join(parts)
