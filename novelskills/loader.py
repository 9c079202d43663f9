"""Reading skill entry files: cheap metadata scans and full body loads."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterator

from novelskills.frontmatter import _load_yaml_mapping, split_frontmatter

_SUMMARY_LIMIT = 220
_MAX_LINE_BYTES = 1024 * 1024


@dataclass
class SkillMetadata:
    """Frontmatter data, a short summary and the body size of a skill file."""

    data: dict[str, Any] = field(default_factory=dict)
    summary: str = ""
    body_length: int = 0


class _BodyCollector:
    """Tracks body byte length and a bounded first-paragraph summary."""

    def __init__(self) -> None:
        self.length = 0
        self._parts: list[str] = []
        self._size = 0

    def add(self, raw: bytes) -> None:
        self.length += len(raw) + 1
        trimmed = raw.decode("utf-8", "replace").replace("#", "").strip()
        if not trimmed or self._size >= _SUMMARY_LIMIT:
            return
        if self._parts:
            self._size += 1
        self._parts.append(trimmed)
        self._size += len(trimmed.encode("utf-8"))

    @property
    def paragraph(self) -> str:
        return " ".join(self._parts)


def _read_lines(path: str | os.PathLike[str]) -> Iterator[bytes]:
    with open(path, "rb") as handle:
        for raw in handle:
            if raw.endswith(b"\n"):
                raw = raw[:-1]
            if raw.endswith(b"\r"):
                raw = raw[:-1]
            if len(raw) > _MAX_LINE_BYTES:
                raise ValueError(f"line too long in {path}")
            yield raw


def _trim_summary(text: str) -> str:
    text = text.strip()
    encoded = text.encode("utf-8")
    if len(encoded) > _SUMMARY_LIMIT:
        return encoded[:_SUMMARY_LIMIT].decode("utf-8", "ignore")
    return text


def load_skill_metadata(entry_path: str | os.PathLike[str]) -> SkillMetadata:
    """Scan a skill file for its frontmatter, summary and body length."""
    collector = _BodyCollector()
    yaml_lines: list[str] = []
    started = False
    in_frontmatter = False
    frontmatter_done = False

    for raw in _read_lines(entry_path):
        line = raw.decode("utf-8", "replace")
        if not started:
            started = True
            if line.strip() == "---":
                in_frontmatter = True
                continue
            collector.add(raw)
        elif in_frontmatter:
            if line.strip() == "---":
                in_frontmatter = False
                frontmatter_done = True
                continue
            yaml_lines.append(line)
        else:
            collector.add(raw)

    if in_frontmatter:
        return SkillMetadata({}, collector.paragraph.strip(), collector.length)
    data = _load_yaml_mapping("\n".join(yaml_lines)) if frontmatter_done and yaml_lines else {}
    return SkillMetadata(data, _trim_summary(collector.paragraph), collector.length)


def load_skill_body(entry_path: str | os.PathLike[str]) -> str:
    """Return the body of a skill file with its frontmatter removed."""
    text = Path(entry_path).read_bytes().decode("utf-8", "replace")
    return split_frontmatter(text).body