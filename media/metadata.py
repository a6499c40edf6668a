# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
`metadata.yaml`: the per-directory description of what is being packaged.

Schema:
  type: app            # or: comic
  handles: comic       # apps only: the content type the app can display
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional

import yaml

from media import errors
from media.errors import MediaError
from media.packages.manifest_v0 import Type
from media.template import AppTemplate, ComicTemplate, Template

MAX_PAGE = (1 << 64) - 1

_PAGE_RE = re.compile(r"([0-9]+)\.jpg")


@dataclass(frozen=True)
class Metadata:
	PATH = "metadata.yaml"

	ty: Type
	handles: Optional[Type] = None

	def template(self, root: Path, paths: Iterable[str]) -> Template:
		if self.ty is Type.APP:
			return _app_template(root, set(paths), self.handles)
		return _comic_template(root, set(paths))


def _invalid(path: Path, message: str) -> MediaError:
	return MediaError(reason_code=errors.METADATA_INVALID, message=message, path=str(path))


def _parse_type(path: Path, value: object, key: str) -> Type:
	if not isinstance(value, str):
		raise _invalid(path, f"metadata '{key}' must be a string")
	try:
		return Type(value)
	except ValueError as err:
		raise _invalid(path, f"metadata '{key}' has unknown type {value!r}") from err


def load_metadata(path: Path) -> Metadata:
	try:
		text = path.read_text(encoding="utf-8")
	except OSError as err:
		raise MediaError(reason_code=errors.IO, message=f"cannot read metadata: {err}", path=str(path)) from err
	try:
		obj = yaml.safe_load(text)
	except yaml.YAMLError as err:
		raise _invalid(path, f"metadata is not valid YAML: {err}") from err
	if not isinstance(obj, dict):
		raise _invalid(path, "metadata must be a mapping")

	ty = _parse_type(path, obj.get("type"), "type")
	if ty is Type.APP:
		allowed = {"type", "handles"}
		if "handles" not in obj:
			raise _invalid(path, "app metadata requires 'handles'")
		handles: Optional[Type] = _parse_type(path, obj["handles"], "handles")
	else:
		allowed = {"type"}
		handles = None
	unknown = sorted(str(k) for k in obj.keys() if k not in allowed)
	if unknown:
		raise _invalid(path, f"unknown metadata keys: {unknown}")
	return Metadata(ty=ty, handles=handles)


def _app_template(root: Path, paths: set[str], handles: Optional[Type]) -> Template:
	assert handles is not None
	if "index.html" not in paths:
		raise MediaError(reason_code=errors.INDEX_MISSING, message="app is missing index.html", root=str(root))
	return AppTemplate(handles=handles)


def _comic_template(root: Path, paths: set[str]) -> Template:
	pages: dict[int, str] = {}
	for path in sorted(paths):
		m = _PAGE_RE.fullmatch(path)
		if m is None:
			raise MediaError(
				reason_code=errors.UNEXPECTED_FILE,
				message=f"unexpected file `{path}` in {Type.COMIC} package",
				file=path,
				ty=Type.COMIC,
			)
		page = int(m.group(1))
		if page > MAX_PAGE:
			raise MediaError(reason_code=errors.INVALID_PAGE, message=f"invalid page `{path}`", path=path)
		if page in pages:
			raise MediaError(reason_code=errors.PAGE_DUPLICATED, message=f"page {page} duplicated", page=page)
		pages[page] = path

	if not pages:
		raise MediaError(reason_code=errors.NO_PAGES, message="comic has no pages", root=str(root))

	for page in range(len(pages)):
		if page not in pages:
			raise MediaError(reason_code=errors.PAGE_MISSING, message=f"page {page} missing", page=page)

	return ComicTemplate(pages=tuple(pages[i] for i in range(len(pages))))
