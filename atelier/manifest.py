"""Reading and editing the project manifest (``gleam.toml``).

Edits are line-based text operations, never a TOML round-trip, so user
formatting and comments survive.  Each edit checks for presence first, which
makes ``update_manifest`` safe to run any number of times.
"""

import logging
import tomllib
from pathlib import Path

from atelier.errors import IOFailure, ParseFailure

logger = logging.getLogger(__name__)

MANIFEST_FILE = "gleam.toml"
TARGET_LINE = 'target = "javascript"'

ENGINE_DEPENDENCIES: list[tuple[str, str]] = [
    ("tiramisu", '">= 5.0.0 and < 6.0.0"'),
    ("gleam_stdlib", '">= 0.44.0 and < 2.0.0"'),
]
UI_OVERLAY_DEPENDENCIES: list[tuple[str, str]] = [
    ("lustre", '">= 5.2.0 and < 6.0.0"'),
]
DEV_DEPENDENCIES: list[tuple[str, str]] = [
    ("gleeunit", '">= 1.0.0 and < 2.0.0"'),
    ("lustre_dev_tools", '">= 2.0.0 and < 3.0.0"'),
]

TOOLING_HEADER = "[tooling.html]"
TOOLING_BLOCK = """[tooling.html]
title = "{project_name}"
scripts = [
  { type = "importmap", content = '{ "imports": { "three": "/node_modules/three/build/three.module.js", "three/addons/": "/node_modules/three/examples/jsm/", "@dimforge/rapier3d-compat": "/node_modules/@dimforge/rapier3d-compat/rapier.es.js" } }' },
]
stylesheets = [
  { content = "body { margin: 0; overflow: hidden; } canvas { display: block; }" },
]
"""


def find_project_root(start: Path, max_depth: int = 16) -> Path | None:
    """Walk upwards from ``start`` looking for ``gleam.toml``.

    At most ``max_depth`` parent directories are inspected and the walk stops
    at the filesystem root.  Returns None when no manifest is found.
    """
    current = start.resolve()
    for _ in range(max_depth + 1):
        if (current / MANIFEST_FILE).is_file():
            return current
        if current.parent == current:
            return None
        current = current.parent
    return None


def read_manifest_key(root: Path, key: str) -> str:
    """Look up a top-level string key in the manifest."""
    path = root / MANIFEST_FILE
    try:
        with open(path, "rb") as fh:
            data = tomllib.load(fh)
    except OSError as e:
        raise ParseFailure(f"Could not read {path}: {e}") from e
    except (tomllib.TOMLDecodeError, UnicodeDecodeError) as e:
        raise ParseFailure(f"Could not parse {path}: {e}") from e

    value = data.get(key)
    if not isinstance(value, str) or not value:
        raise ParseFailure(f"{path} has no '{key}' entry")
    return value


def read_project_name(root: Path) -> str:
    return read_manifest_key(root, "name")


def required_dependencies(include_ui_overlay: bool) -> list[tuple[str, str]]:
    deps = list(ENGINE_DEPENDENCIES)
    if include_ui_overlay:
        deps.extend(UI_OVERLAY_DEPENDENCIES)
    return deps


def _is_header(line: str) -> bool:
    return line.strip().startswith("[")


def _line_key(line: str) -> str | None:
    stripped = line.strip()
    if not stripped or stripped.startswith("#") or "=" not in stripped:
        return None
    return stripped.split("=", 1)[0].strip().strip('"')


def _ensure_target(lines: list[str]) -> list[str]:
    top_level_end = next(
        (i for i, line in enumerate(lines) if _is_header(line)), len(lines)
    )
    if any(_line_key(line) == "target" for line in lines[:top_level_end]):
        return lines
    # Insert after the last non-blank top-level line.
    insert_at = 0
    for i in range(top_level_end):
        if lines[i].strip():
            insert_at = i + 1
    return lines[:insert_at] + [TARGET_LINE] + lines[insert_at:]


def _table_name(line: str) -> str | None:
    """Name of the table a ``[header]`` line opens, or None.

    ``[ dependencies ]  # comment`` yields ``dependencies``.  Array-of-tables
    headers (``[[...]]``) are not tables we edit and yield None.
    """
    stripped = line.split("#", 1)[0].strip()
    if not stripped.startswith("[") or stripped.startswith("[[") or not stripped.endswith("]"):
        return None
    parts = stripped[1:-1].split(".")
    return ".".join(part.strip().strip('"') for part in parts)


def _ensure_section(
    lines: list[str], table: str, entries: list[tuple[str, str]]
) -> list[str]:
    start = next((i for i, line in enumerate(lines) if _table_name(line) == table), None)
    if start is None:
        section = [f"[{table}]"] + [
            f"{name} = {requirement}" for name, requirement in entries
        ]
        trimmed = list(lines)
        while trimmed and not trimmed[-1].strip():
            trimmed.pop()
        prefix = trimmed + [""] if trimmed else []
        return prefix + section

    end = next(
        (i for i in range(start + 1, len(lines)) if _is_header(lines[i])), len(lines)
    )
    present = {_line_key(line) for line in lines[start + 1 : end]}
    missing = [f"{name} = {requirement}" for name, requirement in entries if name not in present]
    if not missing:
        return lines

    insert_at = start + 1
    for i in range(start + 1, end):
        if lines[i].strip():
            insert_at = i + 1
    return lines[:insert_at] + missing + lines[insert_at:]


def apply_manifest_edits(text: str, project_name: str, include_ui_overlay: bool) -> str:
    """Return the manifest text with target, dependencies and tooling block ensured."""
    lines = text.splitlines()
    lines = _ensure_target(lines)
    lines = _ensure_section(
        lines, "dependencies", required_dependencies(include_ui_overlay)
    )
    lines = _ensure_section(lines, "dev-dependencies", DEV_DEPENDENCIES)
    result = "\n".join(lines).rstrip("\n") + "\n"
    if TOOLING_HEADER not in result:
        result += "\n" + TOOLING_BLOCK.replace("{project_name}", project_name)
    return result


def update_manifest(root: Path, project_name: str, include_ui_overlay: bool) -> bool:
    """Apply the manifest edits in place.  Returns True if the file changed."""
    path = root / MANIFEST_FILE
    try:
        original = path.read_text(encoding="utf-8")
    except OSError as e:
        raise IOFailure(f"Could not read {path}: {e}") from e
    except UnicodeDecodeError as e:
        raise ParseFailure(f"{path} is not valid UTF-8: {e}") from e

    updated = apply_manifest_edits(original, project_name, include_ui_overlay)
    if updated == original:
        logger.info(f"{path} already up to date")
        return False
    try:
        path.write_text(updated, encoding="utf-8")
    except OSError as e:
        raise IOFailure(f"Could not write {path}: {e}") from e
    logger.info(f"Updated {path}")
    return True
