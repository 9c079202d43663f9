"""Discovery of skills on disk and lookup, loading and search over them."""

from __future__ import annotations

import dataclasses
import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from novelskills.command import Command
from novelskills.frontmatter import (
    frontmatter_map,
    frontmatter_string,
    frontmatter_string_list,
)
from novelskills.loader import load_skill_body, load_skill_metadata
from novelskills.search import DEFAULT_LIMIT, SearchHit, search_commands

ENTRY_FILE = "SKILL.md"
_SUMMARY_LIMIT = 220


class SkillNotFoundError(LookupError):
    """Raised when a skill id is not known to the registry."""

    def __init__(self, skill_id: str) -> None:
        super().__init__(f"skill not found: {skill_id}")
        self.skill_id = skill_id


def _first_non_empty(primary: str, fallback: str) -> str:
    return primary if primary.strip() else fallback


def _extract_first_paragraph(text: str) -> str:
    for paragraph in text.split("\n\n"):
        cleaned = paragraph.replace("#", "").strip()
        if cleaned:
            encoded = cleaned.encode("utf-8")
            if len(encoded) > _SUMMARY_LIMIT:
                return encoded[:_SUMMARY_LIMIT].decode("utf-8", "ignore")
            return cleaned
    return ""


def _load_command(skills_dir: str, skill_id: str) -> Command:
    skill_root = os.path.join(skills_dir, skill_id)
    entry_path = os.path.join(skill_root, ENTRY_FILE)
    try:
        meta = load_skill_metadata(entry_path)
    except (ValueError, yaml.YAMLError) as exc:
        raise ValueError(f"load skill metadata {entry_path}: {exc}") from exc
    data = meta.data
    return Command(
        id=skill_id,
        name=_first_non_empty(frontmatter_string(data, "name"), skill_id),
        description=_first_non_empty(frontmatter_string(data, "description"), meta.summary),
        when_to_use=frontmatter_string(data, "when_to_use"),
        version=frontmatter_string(data, "version"),
        tags=frontmatter_string_list(data, "tags"),
        aliases=frontmatter_string_list(data, "aliases"),
        search_hint=frontmatter_string(data, "search_hint"),
        allowed_tools=frontmatter_string_list(data, "allowed_tools"),
        argument_hint=frontmatter_string(data, "argument_hint"),
        tool_description=_first_non_empty(
            frontmatter_string(data, "tool_description"),
            frontmatter_string(data, "tool_prompt"),
        ),
        tool_contract=frontmatter_string(data, "tool_contract"),
        tool_output=frontmatter_string(data, "tool_output_contract"),
        tool_input_schema=frontmatter_map(data, "tool_input_schema"),
        model=frontmatter_string(data, "model"),
        user_invocable=frontmatter_string(data, "user_invocable").lower() != "false",
        entry_path=entry_path,
        skill_root=skill_root,
        content_length=meta.body_length,
    )


@dataclass
class Registry:
    """Skills found in one directory, keyed by their directory name."""

    skills_dir: str
    commands: dict[str, Command] = field(default_factory=dict)

    def list(self) -> list[Command]:
        """All commands ordered by id."""
        return sorted(self.commands.values(), key=lambda command: command.id)

    def get(self, skill_id: str) -> Command | None:
        """The command with this id, or None."""
        return self.commands.get(skill_id)

    def load_invocation_command(self, skill_id: str) -> Command:
        """A copy of the command with its full markdown body loaded."""
        command = self.get(skill_id)
        if command is None:
            raise SkillNotFoundError(skill_id)
        body = load_skill_body(command.entry_path)
        loaded = dataclasses.replace(command, markdown_content=body)
        if loaded.content_length == 0:
            loaded.content_length = len(body.encode("utf-8"))
        if not loaded.description.strip():
            loaded.description = _extract_first_paragraph(body)
        return loaded

    def search(self, query: str, limit: int = DEFAULT_LIMIT) -> list[SearchHit]:
        """Search the registered commands; see ``search_commands``."""
        return search_commands(self.commands.values(), query, limit)


def load_registry(skills_dir: str | os.PathLike[str]) -> Registry:
    """Read every sub-directory's SKILL.md metadata; bodies are loaded later."""
    root = os.fspath(skills_dir)
    registry = Registry(skills_dir=root)
    entries = sorted(Path(root).iterdir(), key=lambda entry: entry.name)
    for entry in entries:
        if not entry.is_dir() or entry.is_symlink():
            continue
        command = _load_command(root, entry.name)
        registry.commands[command.id] = command
    return registry