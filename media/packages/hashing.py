# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Content hashes for package blobs.

Pinned scheme:
- BLAKE3 with the default 32-byte output,
- equality and ordering are byte-wise over the raw digest,
- text form is lowercase hex (manifest JSON, diagnostics).
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO

from blake3 import blake3

HASH_LEN = 32
READ_CHUNK = 1 << 20


@dataclass(frozen=True, order=True)
class Hash:
	"""A 256-bit BLAKE3 digest identifying a blob."""

	digest: bytes

	def __post_init__(self) -> None:
		if not isinstance(self.digest, bytes) or len(self.digest) != HASH_LEN:
			raise ValueError(f"hash must be exactly {HASH_LEN} bytes")

	@classmethod
	def of(cls, data: bytes) -> "Hash":
		"""Hash `data` in one shot."""
		return cls(blake3(data).digest())

	@classmethod
	def from_hex(cls, text: str) -> "Hash":
		if len(text) != HASH_LEN * 2 or text != text.lower():
			raise ValueError(f"invalid hash hex: {text!r}")
		return cls(bytes.fromhex(text))

	def hex(self) -> str:
		return self.digest.hex()

	def __str__(self) -> str:
		return self.hex()


def hash_stream(f: BinaryIO) -> tuple[Hash, int]:
	"""Hash a binary stream to EOF, returning (hash, byte count)."""
	hasher = blake3()
	total = 0
	while True:
		chunk = f.read(READ_CHUNK)
		if not chunk:
			break
		hasher.update(chunk)
		total += len(chunk)
	return Hash(hasher.digest()), total


def hash_file(path: Path) -> tuple[Hash, int]:
	"""Hash the file at `path` without reading it into memory at once."""
	with path.open("rb") as f:
		return hash_stream(f)
