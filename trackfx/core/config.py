"""
Configuration management for trackfx.

Effects are configured with JSON documents. This module parses those
documents, keeps a registry of effect types so a document can be turned
back into the right effect, and reads overlay defaults from environment
variables.
"""

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable

from trackfx.core.errors import InvalidJSON

# Registry of effect classes, keyed by their "type" field
_EFFECTS: dict[str, type] = {}


def register_effect(name: str) -> Callable[[type], type]:
    """Class decorator registering an effect type for load_effect()."""
    def decorator(cls: type) -> type:
        _EFFECTS[name] = cls
        return cls
    return decorator


def get_effect_types() -> list[str]:
    """Return the names of all registered effect types."""
    return list(_EFFECTS.keys())


def create_effect(name: str) -> Any:
    """Instantiate a registered effect by type name."""
    if name not in _EFFECTS:
        raise InvalidJSON(
            f"Unknown effect type: {name}. Available: {get_effect_types()}", key="type"
        )
    return _EFFECTS[name]()


def parse_json(value: str) -> dict[str, Any]:
    """
    Parse a JSON object.

    Raises:
        InvalidJSON: If the text isn't valid JSON or its root isn't an object
    """
    try:
        root = json.loads(value)
    except (TypeError, json.JSONDecodeError) as e:
        raise InvalidJSON(f"JSON is invalid: {e}") from e
    if not isinstance(root, dict):
        raise InvalidJSON("JSON root must be an object")
    return root


def load_effect(path: str | Path) -> Any:
    """
    Create an effect from a JSON file.

    The document's "type" field selects the effect class.

    Args:
        path: Path to the JSON effect file

    Returns:
        The configured effect

    Raises:
        FileNotFoundError: If the file doesn't exist
        InvalidJSON: If the document is malformed
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Effect file not found: {path}")

    with open(path, "r") as f:
        root = parse_json(f.read())

    effect_type = root.get("type")
    if not isinstance(effect_type, str):
        raise InvalidJSON("Effect document has no type", key="type")

    effect = create_effect(effect_type)
    effect.set_json_value(root)
    return effect


def save_effect(effect: Any, path: str | Path) -> None:
    """
    Save an effect's configuration to a JSON file.

    Args:
        effect: Effect with a json_value() method
        path: Output path for the JSON file
    """
    path = Path(path)
    with open(path, "w") as f:
        json.dump(effect.json_value(), f, indent=2)


@dataclass
class OverlayStyle:
    """Stroke used to draw tracked boxes. Color is BGR."""
    color: tuple[int, int, int] = (255, 0, 0)
    thickness: int = 2

    @classmethod
    def from_env(cls, prefix: str = "TRACKFX_") -> "OverlayStyle":
        """
        Build a style from environment variables.

        TRACKFX_STROKE=3 sets the thickness, TRACKFX_COLOR=0,255,0 the color.
        Unparseable values fall back to the defaults.
        """
        env = get_env_config(prefix)
        style = cls()
        try:
            if "stroke" in env:
                style.thickness = max(1, int(env["stroke"]))
            if "color" in env:
                b, g, r = (int(c) for c in env["color"].split(","))
                style.color = (b, g, r)
        except ValueError:
            return cls()
        return style


def get_env_config(prefix: str = "TRACKFX_") -> dict[str, Any]:
    """
    Get configuration from environment variables.

    All environment variables starting with the prefix will be included.
    Variable names are converted to lowercase with the prefix removed.

    Example:
        TRACKFX_STROKE=3 -> {"stroke": "3"}
    """
    config = {}
    for key, value in os.environ.items():
        if key.startswith(prefix):
            config_key = key[len(prefix):].lower()
            config[config_key] = value
    return config
