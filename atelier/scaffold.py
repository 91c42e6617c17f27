"""Static and template-selected files written into the project."""

import json
import logging
from pathlib import Path
from typing import Any

from atelier.errors import IOFailure
from atelier.model import Template

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent / "templates"
IGNORE_FILE = ".gitignore"
PACKAGE_DESCRIPTOR = "package.json"
DESCRIPTOR_VERSION = "0.1.0"

RUNTIME_DEPENDENCIES = {
    "three": "^0.180.0",
    "@dimforge/rapier3d-compat": "^0.11.2",
}

_TEMPLATE_FILES = {
    Template.TWO_D: "main_2d.gleam",
    Template.THREE_D: "main_3d.gleam",
    Template.PHYSICS: "main_physics.gleam",
}


def render_template(content: str, **kwargs) -> str:
    """Render a template string by replacing {{variable}} placeholders."""
    result = content
    for key, value in kwargs.items():
        placeholder = f"{{{{{key}}}}}"
        result = result.replace(placeholder, str(value))
    return result


def _read_template(name: str) -> str:
    path = TEMPLATE_DIR / name
    try:
        return path.read_text(encoding="utf-8")
    except OSError as e:
        raise IOFailure(f"Template not found: {path}") from e


def _write(path: Path, content: str) -> Path:
    try:
        path.write_text(content, encoding="utf-8")
    except OSError as e:
        raise IOFailure(f"Could not write {path}: {e}") from e
    logger.info(f"Wrote {path}")
    return path


def write_ignore_file(root: Path) -> Path:
    """Overwrite the project's ignore file with the fixed pattern list."""
    return _write(root / IGNORE_FILE, _read_template("gitignore"))


def main_source_path(root: Path, project_name: str) -> Path:
    return root / "src" / f"{project_name}.gleam"


def write_main_source_file(root: Path, project_name: str, template: Template) -> Path:
    """Write ``src/<project_name>.gleam`` from the chosen template.

    The ``src`` directory must already exist (it does in any Gleam project).
    """
    content = render_template(
        _read_template(_TEMPLATE_FILES[template]), project_name=project_name
    )
    return _write(main_source_path(root, project_name), content)


def package_descriptor(
    project_name: str,
    bundle_for_desktop: bool,
    window_width: int = 1280,
    window_height: int = 720,
) -> dict[str, Any]:
    """The ``package.json`` object read by the desktop runtime."""
    descriptor: dict[str, Any] = {
        "name": project_name,
        "version": DESCRIPTOR_VERSION,
        "main": "index.html",
    }
    if bundle_for_desktop:
        descriptor["window"] = {
            "title": project_name,
            "width": window_width,
            "height": window_height,
        }
        descriptor["dependencies"] = dict(RUNTIME_DEPENDENCIES)
    return descriptor


def write_package_descriptor(root: Path, descriptor: dict[str, Any]) -> Path:
    return _write(root / PACKAGE_DESCRIPTOR, json.dumps(descriptor, indent=2) + "\n")
