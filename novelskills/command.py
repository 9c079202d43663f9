"""The skill command record and deep copying of schema maps."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


def _clone_value(value: Any) -> Any:
    if isinstance(value, dict):
        return clone_map(value)
    if isinstance(value, list):
        return [_clone_value(item) for item in value] or None
    return value


def clone_map(src: dict[str, Any] | None) -> dict[str, Any] | None:
    """Deep-copy a mapping; empty mappings and lists become None."""
    if not src:
        return None
    return {key: _clone_value(value) for key, value in src.items()}


@dataclass
class Command:
    """A skill known to the registry, described by its SKILL.md frontmatter."""

    id: str
    name: str
    description: str = ""
    when_to_use: str = ""
    version: str = ""
    tags: list[str] = field(default_factory=list)
    aliases: list[str] = field(default_factory=list)
    search_hint: str = ""
    allowed_tools: list[str] = field(default_factory=list)
    argument_hint: str = ""
    tool_description: str = ""
    tool_contract: str = ""
    tool_output: str = ""
    tool_input_schema: dict[str, Any] | None = None
    model: str = ""
    user_invocable: bool = True
    entry_path: str = ""
    skill_root: str = ""
    content_length: int = 0
    markdown_content: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Serialisable view; empty optional fields and the body are left out."""
        fields: list[tuple[str, Any, bool]] = [
            ("id", self.id, False),
            ("name", self.name, False),
            ("description", self.description, False),
            ("when_to_use", self.when_to_use, False),
            ("version", self.version, True),
            ("tags", list(self.tags), True),
            ("aliases", list(self.aliases), True),
            ("search_hint", self.search_hint, True),
            ("allowed_tools", list(self.allowed_tools), True),
            ("argument_hint", self.argument_hint, True),
            ("tool_description", self.tool_description, True),
            ("tool_contract", self.tool_contract, True),
            ("tool_output_contract", self.tool_output, True),
            ("tool_input_schema", clone_map(self.tool_input_schema), True),
            ("model", self.model, True),
            ("user_invocable", self.user_invocable, False),
            ("entry_path", self.entry_path, False),
            ("skill_root", self.skill_root, False),
            ("content_length", self.content_length, False),
        ]
        return {key: value for key, value, omit_empty in fields if value or not omit_empty}