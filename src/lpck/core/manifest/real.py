"""Production ManifestStore backed by package.json files."""

import json
import logging
import re
from pathlib import Path

from lpck.core.errors import ManifestLoadError
from lpck.core.manifest.abc import (
    MANIFEST_FILENAME,
    Manifest,
    ManifestStore,
    validate_manifest_content,
)

logger = logging.getLogger(__name__)

# Indentation of the first member line, e.g. '{\n  "name"' -> "  "
_INDENT_RE = re.compile(r"^\{\r?\n([ \t]+)\S")

DEFAULT_INDENT = "  "


def detect_formatting(text: str) -> tuple[str, str]:
    """Detect (indent, newline) used by a JSON document.

    Falls back to two spaces and "\\n" for documents without an indented
    first member, matching what npm writes for new files.
    """
    newline = "\r\n" if "\r\n" in text else "\n"
    match = _INDENT_RE.match(text.lstrip())
    indent = match.group(1) if match else DEFAULT_INDENT
    return indent, newline


def render_manifest(manifest: Manifest) -> str:
    """Serialize a manifest the way npm does: indented JSON plus a final newline."""
    text = json.dumps(manifest.content, indent=manifest.indent, ensure_ascii=False)
    text += "\n"
    if manifest.newline != "\n":
        text = text.replace("\n", manifest.newline)
    return text


class RealManifestStore(ManifestStore):
    """Reads and writes `package.json` in a package directory.

    Writes go to a temporary sibling file that is then renamed over the
    manifest, so an interrupted save never leaves a truncated package.json.
    """

    def exists(self, package_dir: Path) -> bool:
        return (package_dir / MANIFEST_FILENAME).is_file()

    def load(self, package_dir: Path) -> Manifest:
        manifest_path = package_dir / MANIFEST_FILENAME
        if not manifest_path.is_file():
            raise ManifestLoadError(manifest_path, "file not found")

        try:
            # newline="" so CRLF files are detected as such
            with manifest_path.open(encoding="utf-8", newline="") as f:
                text = f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise ManifestLoadError(manifest_path, f"cannot read file: {e}") from e

        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise ManifestLoadError(manifest_path, f"invalid JSON: {e}") from e

        content = validate_manifest_content(manifest_path, data)
        indent, newline = detect_formatting(text)
        logger.debug("Loaded manifest %s", manifest_path)
        return Manifest(package_dir=package_dir, content=content, indent=indent, newline=newline)

    def save(self, manifest: Manifest) -> None:
        manifest_path = manifest.path
        temp_path = manifest_path.with_name(f"{MANIFEST_FILENAME}.tmp")
        try:
            # newline="" keeps the detected line endings verbatim
            with temp_path.open("w", encoding="utf-8", newline="") as f:
                f.write(render_manifest(manifest))
            temp_path.replace(manifest_path)
        except OSError:
            temp_path.unlink(missing_ok=True)
            raise
        logger.debug("Saved manifest %s", manifest_path)
