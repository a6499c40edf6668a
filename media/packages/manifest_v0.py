# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Package manifests (v0).

A manifest is a closed union:
- `AppManifest`: a path-addressed bundle (e.g. a web front end) that declares
  which content type it handles,
- `ComicManifest`: an index-addressed bundle of JPEG pages.

The manifest is stored inside the package as one more blob, encoded as
canonical JSON so identical values always produce identical bytes (and so an
identical manifest hash).
"""

from __future__ import annotations

import enum
import json
from dataclasses import dataclass, field
from typing import Any, Mapping, Union

from media.packages import errors
from media.packages.errors import PackageError
from media.packages.hashing import Hash


class Type(str, enum.Enum):
	APP = "app"
	COMIC = "comic"

	def __str__(self) -> str:
		return self.value


def canonical_json_bytes(obj: Any) -> bytes:
	"""
	Render JSON deterministically.

Rules:
	- UTF-8
	- no insignificant whitespace
	- stable key ordering
	"""
	return json.dumps(obj, sort_keys=True, ensure_ascii=False, separators=(",", ":")).encode("utf-8")


def _verify_references(manifest_hash: Hash, referenced: set[Hash], files: Mapping[Hash, bytes]) -> None:
	"""
	Require the package blobs to be exactly the manifest's references.

	The manifest blob itself counts as referenced.
	"""
	expected = set(referenced)
	expected.add(manifest_hash)
	present = set(files.keys())
	extra = present - expected
	if extra:
		raise PackageError(
			reason_code=errors.MANIFEST_EXTRA_FILES,
			message=f"package contains {len(extra)} extra files not accounted for in manifest",
			extra=len(extra),
		)
	missing = expected - present
	if missing:
		raise PackageError(
			reason_code=errors.MANIFEST_MISSING_FILES,
			message=f"manifest references {len(missing)} files missing from package",
			missing=len(missing),
		)


@dataclass(frozen=True)
class AppManifest:
	handles: Type
	paths: dict[str, Hash] = field(default_factory=dict)

	def ty(self) -> Type:
		return Type.APP

	def hashes(self) -> set[Hash]:
		return set(self.paths.values())

	def to_obj(self) -> dict[str, Any]:
		return {
			"type": Type.APP.value,
			"handles": self.handles.value,
			"paths": {path: h.hex() for path, h in sorted(self.paths.items())},
		}

	def verify(self, manifest_hash: Hash, files: Mapping[Hash, bytes]) -> None:
		_verify_references(manifest_hash, self.hashes(), files)


@dataclass(frozen=True)
class ComicManifest:
	pages: tuple[Hash, ...] = ()

	def ty(self) -> Type:
		return Type.COMIC

	def hashes(self) -> set[Hash]:
		return set(self.pages)

	def to_obj(self) -> dict[str, Any]:
		return {
			"type": Type.COMIC.value,
			"pages": [h.hex() for h in self.pages],
		}

	def verify(self, manifest_hash: Hash, files: Mapping[Hash, bytes]) -> None:
		_verify_references(manifest_hash, self.hashes(), files)


Manifest = Union[AppManifest, ComicManifest]


def encode_manifest(manifest: Manifest) -> bytes:
	return canonical_json_bytes(manifest.to_obj())


def _require_keys(obj: dict[str, Any], keys: set[str]) -> None:
	if set(obj.keys()) != keys:
		raise ValueError(f"manifest keys must be {sorted(keys)}, got {sorted(obj.keys())}")


def _decode_hash(value: Any) -> Hash:
	if not isinstance(value, str):
		raise ValueError("manifest hash must be a hex string")
	return Hash.from_hex(value)


def _decode_type(value: Any) -> Type:
	if not isinstance(value, str):
		raise ValueError("manifest type must be a string")
	try:
		return Type(value)
	except ValueError as err:
		raise ValueError(f"unknown manifest type {value!r}") from err


def manifest_from_obj(obj: Any) -> Manifest:
	"""Decode a manifest from its JSON object form; raises ValueError when malformed."""
	if not isinstance(obj, dict):
		raise ValueError("manifest must be a JSON object")
	ty = _decode_type(obj.get("type"))
	if ty is Type.APP:
		_require_keys(obj, {"type", "handles", "paths"})
		paths_obj = obj["paths"]
		if not isinstance(paths_obj, dict):
			raise ValueError("app manifest 'paths' must be an object")
		paths = {str(path): _decode_hash(h) for path, h in paths_obj.items()}
		return AppManifest(handles=_decode_type(obj["handles"]), paths=paths)
	_require_keys(obj, {"type", "pages"})
	pages_obj = obj["pages"]
	if not isinstance(pages_obj, list):
		raise ValueError("comic manifest 'pages' must be an array")
	return ComicManifest(pages=tuple(_decode_hash(h) for h in pages_obj))


def decode_manifest(data: bytes) -> Manifest:
	"""Decode canonical manifest bytes; any malformation is a `deserialize-manifest` error."""
	try:
		obj = json.loads(data.decode("utf-8"))
		return manifest_from_obj(obj)
	except (ValueError, RecursionError) as err:
		raise PackageError(
			reason_code=errors.DESERIALIZE_MANIFEST,
			message=f"failed to deserialize manifest: {err}",
		) from err
