# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Package a directory tree.

The root must hold a `metadata.yaml`; every other regular file (except
`.DS_Store`) becomes a blob. The metadata decides the manifest shape.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from media import errors
from media.errors import MediaError
from media.metadata import Metadata, load_metadata
from media.packages.errors import PackageError
from media.packages.hashing import Hash, hash_file
from media.packages.package_v0 import save_package

IGNORED_NAMES = frozenset({".DS_Store"})


@dataclass(frozen=True)
class PackageOptions:
	root: Path
	output: Path


def _is_within(path: Path, root: Path) -> bool:
	try:
		path.resolve().relative_to(root.resolve())
	except ValueError:
		return False
	return True


def collect_paths(root: Path) -> set[str]:
	"""Relative POSIX paths of every file to package under `root`."""

	def _onerror(err: OSError) -> None:
		raise MediaError(reason_code=errors.WALK_DIR, message=f"cannot walk directory: {err}", root=str(root)) from err

	paths: set[str] = set()
	for dirpath, dirnames, filenames in os.walk(root, onerror=_onerror):
		dirnames.sort()
		for name in sorted(filenames):
			if name in IGNORED_NAMES:
				continue
			rel = (Path(dirpath) / name).relative_to(root).as_posix()
			if rel == Metadata.PATH:
				continue
			paths.add(rel)
	return paths


def hash_paths(root: Path, paths: set[str]) -> dict[str, tuple[Hash, int]]:
	hashes: dict[str, tuple[Hash, int]] = {}
	for rel in sorted(paths):
		path = root / rel
		try:
			hashes[rel] = hash_file(path)
		except OSError as err:
			raise MediaError(reason_code=errors.IO, message=f"cannot hash file: {err}", path=str(path)) from err
	return hashes


def package_dir_v0(opts: PackageOptions) -> None:
	if _is_within(opts.output, opts.root):
		raise MediaError(
			reason_code=errors.OUTPUT_IN_ROOT,
			message="package output may not be inside package root",
			output=str(opts.output),
			root=str(opts.root),
		)
	if opts.output.is_dir():
		raise MediaError(reason_code=errors.OUTPUT_IS_DIR, message="package output is a directory", output=str(opts.output))

	metadata_path = opts.root / Metadata.PATH
	if not metadata_path.exists():
		raise MediaError(reason_code=errors.METADATA_MISSING, message=f"{Metadata.PATH} missing from root", root=str(opts.root))

	metadata = load_metadata(metadata_path)
	paths = collect_paths(opts.root)
	template = metadata.template(opts.root, paths)
	hashes = hash_paths(opts.root, paths)
	manifest = template.manifest(hashes)

	try:
		save_package(hashes, manifest, opts.output, opts.root)
	except PackageError as err:
		raise MediaError(reason_code=errors.PACKAGE_SAVE, message="failed to save package", output=str(opts.output)) from err
