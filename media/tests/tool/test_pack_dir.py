# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from pathlib import Path

import pytest

from media import errors
from media.errors import MediaError
from media.pack import PackageOptions, package_dir_v0
from media.packages.hashing import Hash
from media.packages.manifest_v0 import AppManifest, ComicManifest, Type, encode_manifest
from media.packages.package_v0 import load_package


def _write_file(path: Path, data: str | bytes) -> None:
	path.parent.mkdir(parents=True, exist_ok=True)
	if isinstance(data, str):
		path.write_text(data, encoding="utf-8")
	else:
		path.write_bytes(data)


def _package(root: Path, output: Path) -> None:
	package_dir_v0(PackageOptions(root=root, output=output))


def test_output_in_root_error(tmp_path: Path) -> None:
	root = tmp_path / "foo"

	with pytest.raises(MediaError) as excinfo:
		_package(root, root / "bar")

	err = excinfo.value
	assert err.reason_code == errors.OUTPUT_IN_ROOT
	assert err.output == str(root / "bar")
	assert err.root == str(root)


def test_output_is_dir_error(tmp_path: Path) -> None:
	output = tmp_path / "out"
	output.mkdir()

	with pytest.raises(MediaError) as excinfo:
		_package(tmp_path / "foo", output)

	assert excinfo.value.reason_code == errors.OUTPUT_IS_DIR
	assert excinfo.value.output == str(output)


def test_metadata_missing_error(tmp_path: Path) -> None:
	root = tmp_path / "root"
	root.mkdir()

	with pytest.raises(MediaError) as excinfo:
		_package(root, tmp_path / "output.package")

	assert excinfo.value.reason_code == errors.METADATA_MISSING
	assert excinfo.value.root == str(root)


@pytest.mark.parametrize(
	"text",
	[
		"type: video\n",
		"type: app\n",
		"type: app\nhandles: book\n",
		"type: comic\nhandles: comic\n",
		"- type\n- comic\n",
		"type: [unclosed\n",
	],
)
def test_metadata_invalid_error(tmp_path: Path, text: str) -> None:
	root = tmp_path / "root"
	_write_file(root / "metadata.yaml", text)
	_write_file(root / "0.jpg", b"")
	_write_file(root / "index.html", b"")

	with pytest.raises(MediaError) as excinfo:
		_package(root, tmp_path / "output.package")

	assert excinfo.value.reason_code == errors.METADATA_INVALID


def test_app_requires_index_html(tmp_path: Path) -> None:
	root = tmp_path / "root"
	_write_file(root / "metadata.yaml", "type: app\nhandles: comic")

	with pytest.raises(MediaError) as excinfo:
		_package(root, tmp_path / "output.package")

	assert excinfo.value.reason_code == errors.INDEX_MISSING
	assert excinfo.value.root == str(root)


def test_app_package_includes_all_files(tmp_path: Path) -> None:
	root = tmp_path / "root"
	output = tmp_path / "output.package"
	_write_file(root / "metadata.yaml", "type: app\nhandles: comic")
	_write_file(root / "index.html", "foo")
	_write_file(root / "index.js", "bar")
	_write_file(root / "css" / "site.css", "baz")

	_package(root, output)
	package = load_package(output)

	foo = Hash.of(b"foo")
	bar = Hash.of(b"bar")
	baz = Hash.of(b"baz")
	assert package.manifest == AppManifest(
		handles=Type.COMIC,
		paths={"index.html": foo, "index.js": bar, "css/site.css": baz},
	)
	manifest_bytes = encode_manifest(package.manifest)
	assert package.files == {
		foo: b"foo",
		bar: b"bar",
		baz: b"baz",
		Hash.of(manifest_bytes): manifest_bytes,
	}


def test_comic_package_includes_all_pages(tmp_path: Path) -> None:
	root = tmp_path / "root"
	output = tmp_path / "output.package"
	_write_file(root / "metadata.yaml", "type: comic")
	_write_file(root / "0.jpg", "foo")
	_write_file(root / "1.jpg", "bar")

	_package(root, output)
	package = load_package(output)

	assert package.manifest == ComicManifest(pages=(Hash.of(b"foo"), Hash.of(b"bar")))
	assert len(package.files) == 3


def test_comic_pages_are_numeric_order(tmp_path: Path) -> None:
	root = tmp_path / "root"
	output = tmp_path / "output.package"
	_write_file(root / "metadata.yaml", "type: comic")
	for page in range(11):
		_write_file(root / f"{page}.jpg", f"page {page}")

	_package(root, output)
	package = load_package(output)

	assert package.file("10") == ("image/jpeg", b"page 10")
	assert package.file("2") == ("image/jpeg", b"page 2")


def test_packaging_is_reproducible(tmp_path: Path) -> None:
	root = tmp_path / "root"
	_write_file(root / "metadata.yaml", "type: app\nhandles: comic")
	_write_file(root / "index.html", "<html></html>")
	_write_file(root / "a" / "b.js", "x")

	_package(root, tmp_path / "p1.package")
	_package(root, tmp_path / "p2.package")

	assert (tmp_path / "p1.package").read_bytes() == (tmp_path / "p2.package").read_bytes()


def test_directories_are_ignored(tmp_path: Path) -> None:
	root = tmp_path / "root"
	_write_file(root / "metadata.yaml", "type: comic")
	_write_file(root / "0.jpg", "")
	(root / "bar").mkdir()

	_package(root, tmp_path / "output.package")


def test_ds_store_files_are_ignored(tmp_path: Path) -> None:
	root = tmp_path / "root"
	_write_file(root / "metadata.yaml", "type: comic")
	_write_file(root / "0.jpg", "")
	_write_file(root / ".DS_Store", "")

	_package(root, tmp_path / "output.package")


def test_comic_must_have_pages(tmp_path: Path) -> None:
	root = tmp_path / "root"
	_write_file(root / "metadata.yaml", "type: comic")

	with pytest.raises(MediaError) as excinfo:
		_package(root, tmp_path / "output.package")

	assert excinfo.value.reason_code == errors.NO_PAGES
	assert excinfo.value.root == str(root)


def test_comic_page_missing_error(tmp_path: Path) -> None:
	root = tmp_path / "root"
	_write_file(root / "metadata.yaml", "type: comic")
	_write_file(root / "1.jpg", "")

	with pytest.raises(MediaError) as excinfo:
		_package(root, tmp_path / "output.package")

	assert excinfo.value.reason_code == errors.PAGE_MISSING
	assert excinfo.value.page == 0


def test_comic_page_duplicated_error(tmp_path: Path) -> None:
	root = tmp_path / "root"
	_write_file(root / "metadata.yaml", "type: comic")
	_write_file(root / "0.jpg", "")
	_write_file(root / "00.jpg", "")

	with pytest.raises(MediaError) as excinfo:
		_package(root, tmp_path / "output.package")

	assert excinfo.value.reason_code == errors.PAGE_DUPLICATED
	assert excinfo.value.page == 0


def test_comic_unexpected_file(tmp_path: Path) -> None:
	root = tmp_path / "root"
	_write_file(root / "metadata.yaml", "type: comic")
	_write_file(root / "0.jpg", "")
	_write_file(root / "foo.jpg", "")

	with pytest.raises(MediaError) as excinfo:
		_package(root, tmp_path / "output.package")

	assert excinfo.value.reason_code == errors.UNEXPECTED_FILE
	assert excinfo.value.file == "foo.jpg"
	assert excinfo.value.ty is Type.COMIC


def test_comic_invalid_page(tmp_path: Path) -> None:
	root = tmp_path / "root"
	_write_file(root / "metadata.yaml", "type: comic")
	_write_file(root / f"{2**64}.jpg", "")

	with pytest.raises(MediaError) as excinfo:
		_package(root, tmp_path / "output.package")

	assert excinfo.value.reason_code == errors.INVALID_PAGE
	assert excinfo.value.path == "18446744073709551616.jpg"
