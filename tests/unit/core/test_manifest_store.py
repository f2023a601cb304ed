"""Tests for RealManifestStore on real package.json files."""

import json
from pathlib import Path
from unittest.mock import patch

import pytest

from lpck.core.errors import ManifestLoadError
from lpck.core.manifest import RealManifestStore
from lpck.core.manifest.real import detect_formatting
from tests.test_utils.workspace_helpers import write_package_json


def test_load_reads_name_version_and_dependencies(tmp_path: Path) -> None:
    write_package_json(
        tmp_path,
        {"name": "@scope/a", "version": "1.0.0", "dependencies": {"left-pad": "^1.0.0"}},
    )

    manifest = RealManifestStore().load(tmp_path)

    assert manifest.name == "@scope/a"
    assert manifest.version == "1.0.0"
    assert manifest.dependency_field("dependencies") == {"left-pad": "^1.0.0"}
    assert manifest.dependency_field("peerDependencies") is None
    assert manifest.path == tmp_path / "package.json"


def test_exists(tmp_path: Path) -> None:
    store = RealManifestStore()
    assert store.exists(tmp_path) is False

    write_package_json(tmp_path, {"name": "a"})

    assert store.exists(tmp_path) is True


def test_load_missing_manifest_raises(tmp_path: Path) -> None:
    with pytest.raises(ManifestLoadError, match="file not found"):
        RealManifestStore().load(tmp_path)


def test_load_invalid_json_raises(tmp_path: Path) -> None:
    (tmp_path / "package.json").write_text("{ not json", encoding="utf-8")

    with pytest.raises(ManifestLoadError, match="invalid JSON") as exc_info:
        RealManifestStore().load(tmp_path)

    assert exc_info.value.manifest_path == tmp_path / "package.json"


@pytest.mark.parametrize(
    ("content", "reason"),
    [
        ([], "Input should be a valid dictionary"),
        ({"name": 42}, "'name': Input should be a valid string"),
        ({"name": "a", "version": 1}, "'version': Input should be a valid string"),
        (
            {"name": "a", "dependencies": ["b"]},
            "'dependencies': Input should be a valid dictionary",
        ),
        (
            {"name": "a", "devDependencies": {"b": 1}},
            "'devDependencies.b': Input should be a valid string",
        ),
    ],
)
def test_load_malformed_manifest_raises(tmp_path: Path, content: object, reason: str) -> None:
    (tmp_path / "package.json").write_text(json.dumps(content), encoding="utf-8")

    with pytest.raises(ManifestLoadError) as exc_info:
        RealManifestStore().load(tmp_path)

    assert reason in exc_info.value.reason


def test_save_without_changes_reproduces_npm_formatted_file(tmp_path: Path) -> None:
    original = (
        '{\n  "name": "a",\n  "version": "1.0.0",\n'
        '  "dependencies": {\n    "b": "^1.0.0"\n  }\n}\n'
    )
    (tmp_path / "package.json").write_text(original, encoding="utf-8")
    store = RealManifestStore()

    store.save(store.load(tmp_path))

    assert (tmp_path / "package.json").read_text(encoding="utf-8") == original


def test_save_preserves_four_space_indent_and_crlf(tmp_path: Path) -> None:
    original = (
        '{\r\n    "name": "a",\r\n    "dependencies": {\r\n'
        '        "b": "1"\r\n    }\r\n}\r\n'
    )
    (tmp_path / "package.json").write_bytes(original.encode("utf-8"))
    store = RealManifestStore()

    manifest = store.load(tmp_path)
    manifest.set_dependency_field("dependencies", {"b": "2"})
    store.save(manifest)

    assert (tmp_path / "package.json").read_bytes() == original.replace('"1"', '"2"').encode()


def test_save_keeps_unrelated_keys_and_order(tmp_path: Path) -> None:
    write_package_json(
        tmp_path,
        {
            "name": "a",
            "scripts": {"build": "tsc"},
            "dependencies": {"b": "1"},
            "files": ["dist"],
        },
    )
    store = RealManifestStore()

    manifest = store.load(tmp_path)
    manifest.set_dependency_field("dependencies", {"b": "/packs/b-1.0.0.tgz"})
    store.save(manifest)

    saved = json.loads((tmp_path / "package.json").read_text(encoding="utf-8"))
    assert list(saved) == ["name", "scripts", "dependencies", "files"]
    assert saved["scripts"] == {"build": "tsc"}
    assert saved["dependencies"] == {"b": "/packs/b-1.0.0.tgz"}


def test_save_leaves_no_temporary_file(tmp_path: Path) -> None:
    write_package_json(tmp_path, {"name": "a"})
    store = RealManifestStore()

    store.save(store.load(tmp_path))

    assert sorted(p.name for p in tmp_path.iterdir()) == ["package.json"]


def test_failed_save_removes_temporary_file_and_keeps_manifest(tmp_path: Path) -> None:
    write_package_json(tmp_path, {"name": "a", "dependencies": {"b": "1"}})
    before = (tmp_path / "package.json").read_bytes()
    store = RealManifestStore()
    manifest = store.load(tmp_path)
    manifest.set_dependency_field("dependencies", {"b": "2"})

    with patch.object(Path, "replace", side_effect=PermissionError("read-only")):
        with pytest.raises(PermissionError):
            store.save(manifest)

    assert sorted(p.name for p in tmp_path.iterdir()) == ["package.json"]
    assert (tmp_path / "package.json").read_bytes() == before


def test_save_keeps_non_ascii_characters(tmp_path: Path) -> None:
    write_package_json(tmp_path, {"name": "a", "description": "Zürich ☃"})
    store = RealManifestStore()

    store.save(store.load(tmp_path))

    assert "Zürich ☃" in (tmp_path / "package.json").read_text(encoding="utf-8")


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ('{\n  "a": 1\n}\n', ("  ", "\n")),
        ('{\n\t"a": 1\n}\n', ("\t", "\n")),
        ('{\r\n    "a": 1\r\n}\r\n', ("    ", "\r\n")),
        ('{"a": 1}', ("  ", "\n")),
    ],
)
def test_detect_formatting(text: str, expected: tuple[str, str]) -> None:
    assert detect_formatting(text) == expected
