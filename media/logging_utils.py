# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""Logging helpers for the media server."""

from __future__ import annotations

import logging


def configure_logging(level: int = logging.INFO) -> None:
	"""Configure default logging if no handlers are present."""
	root = logging.getLogger()
	if root.handlers:
		return
	logging.basicConfig(
		level=level,
		format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
		datefmt="%Y-%m-%d %H:%M:%S",
		handlers=[logging.StreamHandler()],
	)
