"""Skill providers, context packs and sequential workflow execution."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Protocol

from novelskills.command import Command, clone_map
from novelskills.registry import load_registry


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class SkillSpec:
    """Public description of a skill as offered by a provider."""

    id: str
    name: str
    version: str = ""
    description: str = ""
    when_to_use: str = ""
    tags: list[str] = field(default_factory=list)
    input_schema: dict[str, Any] | None = None
    output_contract: str = ""
    source: str = ""


@dataclass
class SkillDefinition:
    """A skill spec together with its full markdown body and location."""

    spec: SkillSpec
    markdown_content: str = ""
    entry_path: str = ""
    skill_root: str = ""


@dataclass
class ContextDocument:
    """One project document included in a context pack."""

    kind: str = ""
    title: str = ""
    body: str = ""


@dataclass
class ContextProject:
    """The project a context pack was built for."""

    id: str = ""
    name: str = ""
    description: str = ""
    status: str = ""
    storage_provider: str = ""
    storage_bucket: str = ""
    storage_prefix: str = ""


@dataclass
class ContextPack:
    """Project context handed to skills: documents and rendered text."""

    project: ContextProject = field(default_factory=ContextProject)
    project_id: str = ""
    request: str = ""
    documents: list[ContextDocument] = field(default_factory=list)
    text: str = ""


@dataclass
class SkillInput:
    """Everything a skill runner needs to execute one skill."""

    skill_id: str
    request: str = ""
    arguments: dict[str, Any] | None = None
    project_id: str = ""
    context: ContextPack = field(default_factory=ContextPack)
    workflow_run_id: str = ""


@dataclass
class SkillOutput:
    """The text a skill produced and where its run was recorded."""

    skill_id: str
    text: str = ""
    run_id: str = ""
    run_dir: str = ""


@dataclass
class WorkflowStep:
    """One skill invocation inside a workflow."""

    id: str = ""
    skill_id: str = ""
    arguments: dict[str, Any] | None = None


@dataclass
class WorkflowInput:
    """A workflow request: shared inputs and the ordered steps to run."""

    workflow_id: str = ""
    request: str = ""
    project_id: str = ""
    context: ContextPack = field(default_factory=ContextPack)
    arguments: dict[str, Any] | None = None
    steps: list[WorkflowStep] = field(default_factory=list)


@dataclass
class WorkflowStepOutput:
    """The output of one workflow step."""

    step_id: str
    output: SkillOutput


@dataclass
class WorkflowOutput:
    """Results of a workflow run with its start and finish times."""

    workflow_id: str
    started_at: datetime
    finished_at: datetime
    steps: list[WorkflowStepOutput] = field(default_factory=list)


class SkillRunner(Protocol):
    """Anything able to execute a single skill."""

    def run_skill(self, skill_input: SkillInput) -> SkillOutput:
        """Run the skill described by ``skill_input`` and return its output."""


def skill_spec_from_command(command: Command) -> SkillSpec:
    """Describe a registry command as a locally sourced skill spec."""
    return SkillSpec(
        id=command.id,
        name=command.name,
        version=command.version,
        description=command.description,
        when_to_use=command.when_to_use,
        tags=list(command.tags),
        input_schema=clone_map(command.tool_input_schema),
        output_contract=command.tool_output,
        source="local",
    )


def merge_arguments(
    base: dict[str, Any] | None, override: dict[str, Any] | None
) -> dict[str, Any]:
    """A deep copy of ``base`` with the keys of ``override`` laid over it."""
    merged = clone_map(base) or {}
    merged.update(override or {})
    return merged


@dataclass
class LocalSkillProvider:
    """Provides skills read from a directory of SKILL.md folders."""

    skills_dir: str | os.PathLike[str]

    def list_skills(self) -> list[SkillSpec]:
        """Specs of every skill in the directory, ordered by id."""
        registry = load_registry(self.skills_dir)
        return [skill_spec_from_command(command) for command in registry.list()]

    def load_skill(self, skill_id: str) -> SkillDefinition:
        """The full definition of one skill, body included.

        Raises ``SkillNotFoundError`` when the skill does not exist.
        """
        registry = load_registry(self.skills_dir)
        command = registry.load_invocation_command(skill_id)
        return SkillDefinition(
            spec=skill_spec_from_command(command),
            markdown_content=command.markdown_content,
            entry_path=command.entry_path,
            skill_root=command.skill_root,
        )


@dataclass
class SequentialWorkflowRunner:
    """Runs workflow steps one after another with a skill runner."""

    skill_runner: SkillRunner | None
    clock: Callable[[], datetime] = _now_utc

    def run_workflow(self, workflow_input: WorkflowInput) -> WorkflowOutput:
        """Run every step in order; the first failing step aborts the run."""
        if self.skill_runner is None:
            raise ValueError("skill runner is required")
        workflow_id = workflow_input.workflow_id.strip()
        started_at = self.clock()
        steps: list[WorkflowStepOutput] = []
        for number, step in enumerate(workflow_input.steps, start=1):
            step_id = step.id.strip() or f"step-{number:02d}"
            output = self.skill_runner.run_skill(
                SkillInput(
                    skill_id=step.skill_id,
                    request=workflow_input.request,
                    arguments=merge_arguments(workflow_input.arguments, step.arguments),
                    project_id=workflow_input.project_id,
                    context=workflow_input.context,
                    workflow_run_id=workflow_input.workflow_id,
                )
            )
            steps.append(WorkflowStepOutput(step_id=step_id, output=output))
        return WorkflowOutput(
            workflow_id=workflow_id,
            started_at=started_at,
            finished_at=self.clock(),
            steps=steps,
        )