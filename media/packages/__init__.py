# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Package container tooling.

A package is a single file holding a set of content-addressed blobs (BLAKE3)
and one manifest blob describing how the blobs compose into an app or a comic.

Pinned model:
- the container layout is fixed and identified only by its magic marker,
- blob order is the ascending order of raw hash bytes (reproducible output),
- the loader authenticates every blob before exposing any bytes.
"""

from __future__ import annotations

__all__ = [
	"codec_v0",
	"hashing",
	"manifest_v0",
	"package_v0",
]
