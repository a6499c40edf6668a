# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Templates: the shape of a package before its files are hashed.

A template is derived from `metadata.yaml` plus the directory listing, and
turns the path -> (hash, length) map into the final manifest.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Union

from media.packages.hashing import Hash
from media.packages.manifest_v0 import AppManifest, ComicManifest, Manifest, Type


@dataclass(frozen=True)
class AppTemplate:
	handles: Type

	def manifest(self, hashes: Mapping[str, tuple[Hash, int]]) -> Manifest:
		return AppManifest(
			handles=self.handles,
			paths={path: h for path, (h, _length) in sorted(hashes.items())},
		)


@dataclass(frozen=True)
class ComicTemplate:
	pages: tuple[str, ...]

	def manifest(self, hashes: Mapping[str, tuple[Hash, int]]) -> Manifest:
		return ComicManifest(pages=tuple(hashes[path][0] for path in self.pages))


Template = Union[AppTemplate, ComicTemplate]
