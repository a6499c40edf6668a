# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Flask front end serving one app package and one content package.

Routes:
  GET /                 app index.html
  GET /api/manifest     content manifest (canonical JSON)
  GET /app/<path>       app file by path
  GET /content/<path>   content file by path or page number

Both packages are loaded and checked before the server accepts traffic; a
package that fails to load is fatal at startup, never per request.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from flask import Flask, Response

from media import errors
from media.errors import MediaError
from media.logging_utils import configure_logging
from media.packages.errors import PackageError
from media.packages.manifest_v0 import AppManifest, encode_manifest
from media.packages.package_v0 import Package, load_package

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ServerState:
	app: Package
	content: Package


@dataclass(frozen=True)
class ServeOptions:
	host: str
	port: int
	app_path: Path
	content_path: Path


def _load(path: Path) -> Package:
	try:
		package = load_package(path)
	except PackageError as err:
		raise MediaError(reason_code=errors.PACKAGE_LOAD, message="failed to load package", path=str(path)) from err
	logger.info("loaded %s package %s (%d files)", package.manifest.ty(), path, len(package.files))
	return package


def load_state(app_path: Path, content_path: Path) -> ServerState:
	app = _load(app_path)
	content = _load(content_path)

	if not isinstance(app.manifest, AppManifest):
		raise MediaError(
			reason_code=errors.APP_TYPE,
			message=f"app package has type {app.manifest.ty()}",
			path=str(app_path),
			ty=app.manifest.ty(),
		)
	handles = app.manifest.handles
	if content.manifest.ty() != handles:
		raise MediaError(
			reason_code=errors.CONTENT_TYPE,
			message=f"app handles {handles} but content is {content.manifest.ty()}",
			content=content.manifest.ty(),
			handles=handles,
		)
	return ServerState(app=app, content=content)


def _resource(package: Package, prefix: str, path: str) -> Response:
	found = package.file(path)
	if found is None:
		logger.info("not found: %s%s", prefix, path)
		return Response(f"{prefix}{path} not found", status=404, content_type="text/plain; charset=utf-8")
	content_type, data = found
	return Response(data, content_type=content_type)


def create_app(state: ServerState) -> Flask:
	app = Flask(__name__)

	@app.get("/")
	def root() -> Response:
		return _resource(state.app, "", "index.html")

	@app.get("/api/manifest")
	def manifest() -> Response:
		return Response(encode_manifest(state.content.manifest), content_type="application/json")

	@app.get("/app/<path:path>")
	def app_file(path: str) -> Response:
		return _resource(state.app, "/app/", path)

	@app.get("/content/<path:path>")
	def content_file(path: str) -> Response:
		return _resource(state.content, "/content/", path)

	return app


def serve_v0(opts: ServeOptions) -> None:
	configure_logging()
	state = load_state(opts.app_path, opts.content_path)
	logger.info("serving on %s:%d", opts.host, opts.port)
	create_app(state).run(host=opts.host, port=opts.port)
