# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Fixed-width primitives of the package container (v0).

Layout (byte-exact):
  magic marker     10 bytes, "MEDIA📦\\0" in UTF-8
  manifest_index   u64 LE
  entry_count      u64 LE
  entry_count x { hash (32 raw bytes), length u64 LE }
  entry_count x { blob bytes }

There is no framing beyond this: fixed headers, then back-to-back blobs.
"""

from __future__ import annotations

import struct
from typing import BinaryIO

from blake3 import blake3

from media.packages import errors
from media.packages.errors import PackageError
from media.packages.hashing import HASH_LEN, READ_CHUNK, Hash

MAGIC = "MEDIA📦\0".encode("utf-8")

_U64 = struct.Struct("<Q")


def write_magic(f: BinaryIO) -> None:
	f.write(MAGIC)


def write_u64(f: BinaryIO, value: int) -> None:
	f.write(_U64.pack(value))


def write_hash(f: BinaryIO, value: Hash) -> None:
	f.write(value.digest)


def read_up_to(f: BinaryIO, n: int) -> bytes:
	"""Read `n` bytes, looping on short reads; returns fewer only at EOF."""
	buf = bytearray()
	while len(buf) < n:
		chunk = f.read(n - len(buf))
		if not chunk:
			break
		buf += chunk
	return bytes(buf)


def read_exact(f: BinaryIO, n: int) -> bytes:
	data = read_up_to(f, n)
	if len(data) != n:
		raise PackageError(
			reason_code=errors.UNEXPECTED_EOF,
			message=f"unexpected end of package: wanted {n} bytes, got {len(data)}",
			length=n,
		)
	return data


def read_magic(f: BinaryIO) -> None:
	data = read_up_to(f, len(MAGIC))
	if data != MAGIC:
		raise PackageError(
			reason_code=errors.MAGIC_BYTES,
			message=f"unexpected package magic bytes {data.hex()} ({data.decode('utf-8', errors='replace')!r})",
			data=data,
		)


def read_u64(f: BinaryIO) -> int:
	(value,) = _U64.unpack(read_exact(f, _U64.size))
	return value


def read_hash(f: BinaryIO) -> Hash:
	return Hash(read_exact(f, HASH_LEN))


def read_blob(f: BinaryIO, length: int) -> tuple[bytes, Hash]:
	"""
	Read exactly `length` blob bytes and hash them as they arrive.

	Reads are chunked so a forged length never allocates more than the file
	actually holds.
	"""
	hasher = blake3()
	buf = bytearray()
	while len(buf) < length:
		chunk = f.read(min(READ_CHUNK, length - len(buf)))
		if not chunk:
			raise PackageError(
				reason_code=errors.UNEXPECTED_EOF,
				message=f"unexpected end of package: blob declares {length} bytes, got {len(buf)}",
				length=length,
			)
		hasher.update(chunk)
		buf += chunk
	return bytes(buf), Hash(hasher.digest())
