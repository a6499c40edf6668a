# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Package container writer and verifying loader (v0).

The container is deterministic: the index is sorted by raw hash bytes, so two
packagings of the same logical content are byte-identical no matter how the
caller enumerated its files.

Loading is strict and sequential. Every invariant violation aborts with a
`PackageError` carrying a stable reason code; there is no partial result.
"""

from __future__ import annotations

import mimetypes
import os
import shutil
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from media.packages import codec_v0, errors
from media.packages.errors import PackageError
from media.packages.hashing import Hash
from media.packages.manifest_v0 import AppManifest, ComicManifest, Manifest, decode_manifest, encode_manifest

OCTET_STREAM = "application/octet-stream"
IMAGE_JPEG = "image/jpeg"
MAX_PAGE = (1 << 64) - 1


@dataclass(frozen=True)
class IndexEntry:
	"""An on-disk index entry: a blob hash and its length in bytes."""

	hash: Hash
	length: int


@dataclass(frozen=True)
class Package:
	"""
	A fully verified package.

	`files` holds every blob keyed by its hash, including the manifest's own
	encoded bytes. Never mutated after `load_package` returns it.
	"""

	files: dict[Hash, bytes]
	manifest: Manifest

	def file(self, path: str) -> Optional[tuple[str, bytes]]:
		"""
		Resolve a logical path to (content type, bytes), or None if not found.

		App packages are addressed by relative path, comic packages by page
		number ("0", "1", ...).
		"""
		m = self.manifest
		if isinstance(m, AppManifest):
			h = m.paths.get(path)
			if h is None:
				return None
			content_type, _encoding = mimetypes.guess_type(path, strict=False)
			return content_type or OCTET_STREAM, self.files[h]
		if isinstance(m, ComicManifest):
			page = _parse_page(path)
			if page is None or page >= len(m.pages):
				return None
			return IMAGE_JPEG, self.files[m.pages[page]]
		raise AssertionError(f"unhandled manifest {type(m).__name__}")


def _parse_page(text: str) -> Optional[int]:
	# Unsigned decimal: one optional leading '+', ASCII digits, at most u64.
	digits = text[1:] if text.startswith("+") else text
	if not digits or not digits.isascii() or not digits.isdigit():
		return None
	significant = digits.lstrip("0")
	if len(significant) > len(str(MAX_PAGE)):
		return None
	page = int(significant or "0")
	if page > MAX_PAGE:
		return None
	return page


def _index(hashes: Mapping[str, tuple[Hash, int]], manifest_hash: Hash, manifest_len: int) -> tuple[list[IndexEntry], dict[Hash, str]]:
	"""
	Build the sorted index plus the source path of every non-manifest blob.

	Paths sharing content collapse into one entry sourced from the first path.
	"""
	sources: dict[Hash, str] = {}
	lengths: dict[Hash, int] = {}
	for rel in sorted(hashes.keys()):
		h, length = hashes[rel]
		if h in sources:
			continue
		sources[h] = rel
		lengths[h] = int(length)
	if manifest_hash not in lengths:
		lengths[manifest_hash] = manifest_len
	entries = [IndexEntry(hash=h, length=n) for h, n in lengths.items()]
	entries.sort(key=lambda e: e.hash.digest)
	return entries, sources


def save_package(hashes: Mapping[str, tuple[Hash, int]], manifest: Manifest, output: Path, root: Path) -> None:
	"""
	Write a package file.

	`hashes` maps each path (relative to `root`) to the blob's hash and
	declared length. Declared lengths are trusted; the caller is responsible
	for having hashed the files it names. Creates or overwrites `output`.
	"""
	manifest_bytes = encode_manifest(manifest)
	manifest_hash = Hash.of(manifest_bytes)
	entries, sources = _index(hashes, manifest_hash, len(manifest_bytes))
	manifest_index = next(i for i, e in enumerate(entries) if e.hash == manifest_hash)

	try:
		f = output.open("wb")
	except OSError as err:
		raise PackageError(reason_code=errors.IO, message=f"cannot create package: {err}", path=str(output)) from err
	with f:
		try:
			codec_v0.write_magic(f)
			codec_v0.write_u64(f, manifest_index)
			codec_v0.write_u64(f, len(entries))
			for e in entries:
				codec_v0.write_hash(f, e.hash)
				codec_v0.write_u64(f, e.length)
		except OSError as err:
			raise PackageError(reason_code=errors.IO, message=f"cannot write package index: {err}", path=str(output)) from err

		for e in entries:
			rel = sources.get(e.hash)
			if rel is None:
				try:
					f.write(manifest_bytes)
				except OSError as err:
					raise PackageError(reason_code=errors.IO, message=f"cannot write manifest: {err}", path=str(output)) from err
				continue
			_copy_source(f, root / rel)


def _copy_source(out, path: Path) -> None:
	try:
		src = path.open("rb")
	except OSError as err:
		raise PackageError(reason_code=errors.FILE_IO, message=f"I/O error reading file: {err}", path=str(path)) from err
	with src:
		try:
			shutil.copyfileobj(src, out)
		except OSError as err:
			raise PackageError(reason_code=errors.IO_COPY, message=f"I/O error copying file: {err}", path=str(path)) from err


def _read_index(f) -> tuple[int, list[IndexEntry]]:
	manifest_index = codec_v0.read_u64(f)
	if manifest_index > sys.maxsize:
		raise PackageError(
			reason_code=errors.MANIFEST_INDEX_RANGE,
			message=f"could not convert manifest index {manifest_index} to a native index",
			index=manifest_index,
		)

	count = codec_v0.read_u64(f)
	entries: list[IndexEntry] = []
	prev: Optional[Hash] = None
	for _ in range(count):
		h = codec_v0.read_hash(f)
		length = codec_v0.read_u64(f)
		if length > sys.maxsize:
			raise PackageError(
				reason_code=errors.FILE_LENGTH_RANGE,
				message=f"package file length {length} cannot be converted to a native size",
				length=length,
			)
		if prev is not None:
			if h.digest < prev.digest:
				raise PackageError(reason_code=errors.FILE_HASH_ORDER, message="package file hash out of order", hash=h)
			if h.digest == prev.digest:
				raise PackageError(reason_code=errors.FILE_HASH_DUPLICATED, message="package file hash duplicated", hash=h)
		entries.append(IndexEntry(hash=h, length=length))
		prev = h
	return manifest_index, entries


def load_package(path: Path) -> Package:
	"""
	Load a package file and verify it.

Verification steps:
	- magic marker
	- index sorted strictly ascending by hash bytes (no duplicates)
	- manifest index addresses an entry
	- every blob hashes to its index entry
	- no bytes after the last blob
	- manifest decodes and accounts for exactly the package's blobs
	"""
	try:
		f = path.open("rb")
	except OSError as err:
		raise PackageError(reason_code=errors.IO, message=f"cannot open package: {err}", path=str(path)) from err

	with f:
		try:
			total = os.fstat(f.fileno()).st_size
			codec_v0.read_magic(f)
			manifest_index, entries = _read_index(f)

			if manifest_index >= len(entries):
				raise PackageError(
					reason_code=errors.MANIFEST_INDEX_OUT_OF_BOUNDS,
					message=f"manifest index {manifest_index} out of bounds of hash array",
					index=manifest_index,
				)
			manifest_hash = entries[manifest_index].hash

			files: dict[Hash, bytes] = {}
			for e in entries:
				data, actual = codec_v0.read_blob(f, e.length)
				if actual != e.hash:
					raise PackageError(
						reason_code=errors.FILE_HASH_INVALID,
						message="package file hash does not match its contents",
						expected=e.hash,
						actual=actual,
					)
				files[e.hash] = data

			position = f.tell()
		except OSError as err:
			raise PackageError(reason_code=errors.IO, message=f"cannot read package: {err}", path=str(path)) from err

	if position != total:
		trailing = max(total - position, 0)
		raise PackageError(
			reason_code=errors.TRAILING_BYTES,
			message=f"package has trailing {trailing} bytes",
			trailing=trailing,
		)

	manifest = decode_manifest(files[manifest_hash])
	manifest.verify(manifest_hash, files)
	return Package(files=files, manifest=manifest)
