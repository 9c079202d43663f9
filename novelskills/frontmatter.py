"""YAML frontmatter parsing and typed access to frontmatter fields."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import yaml

_TIMESTAMP_TAG = "tag:yaml.org,2002:timestamp"


class _FrontmatterLoader(yaml.SafeLoader):
    """Safe loader that keeps timestamp-like scalars as plain strings."""


_FrontmatterLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != _TIMESTAMP_TAG]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


def _load_yaml_mapping(text: str) -> dict[str, Any]:
    """Parse YAML text that must describe a mapping; empty input gives {}."""
    loaded = yaml.load(text, Loader=_FrontmatterLoader)
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ValueError("frontmatter must be a YAML mapping")
    return loaded


def _format_scalar(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    return str(value)


@dataclass
class Frontmatter:
    """Parsed frontmatter data and the document body that follows it."""

    data: dict[str, Any] = field(default_factory=dict)
    body: str = ""


def split_frontmatter(text: str) -> Frontmatter:
    """Split a document into its YAML frontmatter and trimmed body.

    A document without a complete ``---`` block is returned unchanged as body.
    Raises ``yaml.YAMLError`` or ``ValueError`` when the frontmatter is invalid.
    """
    trimmed = text.removeprefix("\ufeff")
    if not (trimmed.startswith("---\n") or trimmed.startswith("---\r\n")):
        return Frontmatter(data={}, body=text)
    lines = trimmed.split("\n")
    end = next(
        (index for index, line in enumerate(lines[1:], start=1) if line.strip() == "---"),
        None,
    )
    if end is None:
        return Frontmatter(data={}, body=text)
    yaml_text = "\n".join(lines[1:end])
    body = "\n".join(lines[end + 1 :])
    data = _load_yaml_mapping(yaml_text) if yaml_text.strip() else {}
    return Frontmatter(data=data, body=body.strip())


def frontmatter_string(data: dict[str, Any], key: str) -> str:
    """Return the field as a trimmed string, or "" when absent."""
    value = data.get(key)
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    return _format_scalar(value).strip()


def frontmatter_string_list(data: dict[str, Any], key: str) -> list[str]:
    """Return the field as a list of non-empty strings.

    A list is taken item by item; a string is split on commas.
    """
    value = data.get(key)
    if isinstance(value, list):
        items = (_format_scalar(item).strip() for item in value)
    elif isinstance(value, str):
        items = (part.strip() for part in value.split(","))
    else:
        return []
    return [item for item in items if item]


def frontmatter_map(data: dict[str, Any], key: str) -> dict[str, Any] | None:
    """Return the field as a normalized mapping, or None if it is not one."""
    value = data.get(key)
    if value is None:
        return None
    normalized = normalize_frontmatter_value(value)
    return normalized if isinstance(normalized, dict) else None


def normalize_frontmatter_value(value: Any) -> Any:
    """Recursively convert mapping keys to strings, dropping blank converted keys."""
    if isinstance(value, dict):
        out: dict[str, Any] = {}
        for key, item in value.items():
            if isinstance(key, str):
                out[key] = normalize_frontmatter_value(item)
                continue
            text_key = _format_scalar(key).strip()
            if text_key:
                out[text_key] = normalize_frontmatter_value(item)
        return out
    if isinstance(value, list):
        return [normalize_frontmatter_value(item) for item in value]
    return value