# novelskills

A small framework for working with Markdown "skills": directories that each
hold a `SKILL.md` file with YAML frontmatter describing what the skill does.

It provides:

- **Frontmatter parsing** (`novelskills.frontmatter`): `split_frontmatter`
  separates a YAML header from the Markdown body, and helpers such as
  `frontmatter_string`, `frontmatter_string_list` and `frontmatter_map` read
  typed values from it.
- **A skill registry** (`novelskills.registry`): `load_registry(skills_dir)`
  reads only each skill's metadata; the full body is read on demand by
  `Registry.load_invocation_command`.
- **Keyword search** (`novelskills.search`): `Registry.search(query, limit)`
  ranks skills by id, name, aliases, tags, search hint and description.
  It understands `select:name-a,name-b` to pick skills directly, `+term` for
  terms that must match, and exact id, name or alias queries.
  `explain_query` shows how a query was interpreted.
- **Workflows** (`novelskills.workflow`): `LocalSkillProvider` lists and loads
  skills as `SkillSpec` and `SkillDefinition` values, and
  `SequentialWorkflowRunner` runs `WorkflowStep`s in order through any
  `SkillRunner`, merging workflow and step arguments.
- **Interactive sessions** (`novelskills.sessions`): `SessionManager` starts a
  skill through a `SkillSessionRuntime`, records a transcript of `Turn`s, and
  resumes sessions that stopped to ask the user a question.

## Installation

```
pip install .
```

## Layout of a skills directory

```
skills/
  opening-sniper/
    SKILL.md
```

with `SKILL.md` such as:

```markdown
---
name: Opening Sniper
description: Writes a strong 600-word opening
when_to_use: Use when the user asks for a novel opening
aliases:
  - opening-sniper
search_hint: urban power
tags:
  - novel
  - opening
---
# Skill Body

Instructions for the skill.
```

## Usage

```python
from novelskills.registry import load_registry

registry = load_registry("skills")

for command in registry.list():
    print(command.id, command.name)

for hit in registry.search("+urban opening", 5):
    print(hit.id, hit.score, hit.reason)

registry.search("select:opening-sniper", 5)

command = registry.load_invocation_command("opening-sniper")
print(command.markdown_content)
```

Running a workflow:

```python
from novelskills.workflow import (
    SequentialWorkflowRunner,
    SkillOutput,
    SkillRunner,
    WorkflowInput,
    WorkflowStep,
)


class EchoRunner(SkillRunner):
    def run_skill(self, skill_input):
        return SkillOutput(skill_id=skill_input.skill_id, text="ok")


runner = SequentialWorkflowRunner(skill_runner=EchoRunner())
result = runner.run_workflow(
    WorkflowInput(
        workflow_id="bootstrap",
        request="build world bible",
        arguments={"shared": "base"},
        steps=[WorkflowStep(id="world", skill_id="worldbuilding")],
    )
)
print([step.step_id for step in result.steps])
```

## Running the tests

```
pip install .[test]
pytest
```