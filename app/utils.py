"""Helpers shared by services and scripts."""

from pathlib import Path

# app/utils.py -> project root
PROJECT_ROOT = Path(__file__).resolve().parent.parent


def get_resource_path(relative_path: str) -> Path:
    """
    Absolute path of a resource shipped with the app.

    Args:
        relative_path: Path from the project root, e.g. "app/resources/templates"
    """
    return PROJECT_ROOT / relative_path
