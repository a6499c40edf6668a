# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
media: content-addressed package containers for apps and comics.

Layout:
  packages: container codec (writer, verifying loader, manifest)
  pack:     directory tree -> package file
  server:   HTTP front end serving an app package and a content package
  cli:      `media` command line (`python -m media`)
"""

__all__ = ["packages"]
