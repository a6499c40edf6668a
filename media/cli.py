# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import argparse
from pathlib import Path

from media.pack import PackageOptions, package_dir_v0
from media.server import ServeOptions, serve_v0


def parse_address(text: str) -> tuple[str, int]:
	"""Parse `host:port` (IPv6 hosts in brackets, e.g. `[::1]:8080`)."""
	host, sep, port = text.rpartition(":")
	if not sep or not host or not port.isdigit():
		raise argparse.ArgumentTypeError(f"invalid address {text!r}, expected HOST:PORT")
	if host.startswith("[") and host.endswith("]"):
		host = host[1:-1]
	value = int(port)
	if value > 65535:
		raise argparse.ArgumentTypeError(f"invalid port {value}")
	return host, value


def _build_parser() -> argparse.ArgumentParser:
	p = argparse.ArgumentParser(prog="media", description="Media package tooling (packaging, serving)")
	sub = p.add_subparsers(dest="cmd", required=True)

	package = sub.add_parser("package", help="Package the contents of a directory")
	package.add_argument("--root", type=Path, required=True, help="Package contents of directory <ROOT>")
	package.add_argument("--output", type=Path, required=True, help="Save package to <OUTPUT>")

	server = sub.add_parser("server", help="Serve a content package with an app package")
	server.add_argument("--address", type=parse_address, required=True, help="Listen on <ADDRESS> (HOST:PORT)")
	server.add_argument("--app", type=Path, required=True, metavar="PACKAGE", help="Serve contents with app <PACKAGE>")
	server.add_argument("--content", type=Path, required=True, metavar="PACKAGE", help="Serve contents of <PACKAGE>")
	return p


def main(argv: list[str] | None = None) -> int:
	p = _build_parser()
	args = p.parse_args(argv)

	if args.cmd == "package":
		opts = PackageOptions(root=args.root, output=args.output)
		try:
			package_dir_v0(opts)
			return 0
		except Exception as err:
			p.error(str(err))
			return 2

	if args.cmd == "server":
		host, port = args.address
		opts = ServeOptions(
			host=host,
			port=port,
			app_path=args.app,
			content_path=args.content,
		)
		try:
			serve_v0(opts)
			return 0
		except Exception as err:
			p.error(str(err))
			return 2

	raise AssertionError("unreachable")
