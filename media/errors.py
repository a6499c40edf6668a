# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from media.packages.manifest_v0 import Type

# Packaging.
OUTPUT_IN_ROOT = "output-in-root"
OUTPUT_IS_DIR = "output-is-dir"
METADATA_MISSING = "metadata-missing"
METADATA_INVALID = "metadata-invalid"
WALK_DIR = "walk-dir"
IO = "io"
INDEX_MISSING = "index-missing"
NO_PAGES = "no-pages"
PAGE_MISSING = "page-missing"
PAGE_DUPLICATED = "page-duplicated"
INVALID_PAGE = "invalid-page"
UNEXPECTED_FILE = "unexpected-file"
PACKAGE_SAVE = "package-save"

# Serving.
PACKAGE_LOAD = "package-load"
APP_TYPE = "app-type"
CONTENT_TYPE = "content-type"


@dataclass(frozen=True)
class MediaError(Exception):
	"""
	A structured error for `media` tooling.

	Package codec failures are chained as `__cause__`.
	"""

	reason_code: str
	message: str
	path: str | None = None
	root: str | None = None
	output: str | None = None
	page: int | None = None
	file: str | None = None
	ty: Type | None = None
	handles: Type | None = None
	content: Type | None = None

	def __str__(self) -> str:
		return self.format_human()

	def to_dict(self) -> dict[str, Any]:
		return {
			"reason_code": self.reason_code,
			"message": self.message,
			"path": self.path,
			"root": self.root,
			"output": self.output,
			"page": self.page,
			"file": self.file,
			"ty": str(self.ty) if self.ty is not None else None,
			"handles": str(self.handles) if self.handles is not None else None,
			"content": str(self.content) if self.content is not None else None,
		}

	def format_human(self) -> str:
		parts: list[str] = [f"[{self.reason_code}] {self.message}"]
		if self.path:
			parts.append(f"path={self.path}")
		if self.root:
			parts.append(f"root={self.root}")
		if self.output:
			parts.append(f"output={self.output}")
		cause = self.__cause__
		if cause is not None:
			parts.append(f"cause={cause}")
		return " ".join(parts)
