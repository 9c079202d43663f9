"""Interactive skill sessions that pause for human input and resume later."""

from __future__ import annotations

import copy
import dataclasses
import threading
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Protocol


class SessionStatus(str, Enum):
    """Status of a skill run as reported by the runtime."""

    NEEDS_INPUT = "needs_input"
    COMPLETED = "completed"


class SkillSessionError(Exception):
    """Raised when a session cannot be started, found or resumed."""


@dataclass
class AskHumanQuestion:
    """One question the skill wants a human to answer."""

    question: str
    field: str = ""
    header: str = ""
    options: list[dict[str, str]] = dataclasses.field(default_factory=list)


@dataclass
class AskHumanRequest:
    """A request from a running skill for human clarification."""

    reason: str = ""
    questions: list[AskHumanQuestion] = field(default_factory=list)


@dataclass
class AskHumanAnswer:
    """Answers given by a human to a pending request."""

    answers: dict[str, str] | None = None
    notes: str = ""


@dataclass
class SkillSessionResult:
    """What the runtime returns after running or resuming a skill."""

    status: str
    text: str = ""
    ask_human: AskHumanRequest | None = None
    run_id: str = ""
    run_dir: str = ""
    state: Any = None


class SkillSessionRuntime(Protocol):
    """A runtime able to run skills that may stop to ask a human."""

    def execute_skill_session(
        self, skill_id: str, request: str, arguments: dict[str, Any] | None
    ) -> SkillSessionResult:
        """Start the skill and run it until it completes or needs input."""

    def continue_skill_interactive(
        self, state: Any, answer: AskHumanAnswer
    ) -> SkillSessionResult:
        """Resume a paused skill from ``state`` with the human's answer."""


@dataclass
class StartInput:
    """Parameters for starting a new session."""

    skill_id: str
    request: str
    project_id: str = ""
    arguments: dict[str, Any] | None = None


@dataclass
class ContinueInput:
    """Parameters for resuming a session that waits for input."""

    input: str = ""
    answers: dict[str, str] | None = None
    notes: str = ""


@dataclass
class Turn:
    """One entry of a session transcript."""

    role: str
    created_at: datetime
    content: str = ""
    answers: dict[str, str] | None = None


@dataclass
class Snapshot:
    """The externally visible state of a session."""

    id: str
    status: str
    skill_id: str
    request: str
    created_at: datetime
    updated_at: datetime
    project_id: str = ""
    arguments: dict[str, Any] | None = None
    ask_human: AskHumanRequest | None = None
    final_text: str = ""
    run_id: str = ""
    run_dir: str = ""
    turns: list[Turn] = field(default_factory=list)


@dataclass
class _SessionState:
    snapshot: Snapshot
    runtime: SkillSessionRuntime | None
    state: Any


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


def _default_session_id() -> str:
    nanos = time.time_ns()
    stamp = datetime.fromtimestamp(nanos // 1_000_000_000, timezone.utc)
    return f"ss_{stamp:%Y%m%dT%H%M%S}.{nanos % 1_000_000_000:09d}"


def _copy_map(src: dict[Any, Any] | None) -> dict[Any, Any] | None:
    return None if src is None else dict(src)


def _clone_snapshot(snapshot: Snapshot) -> Snapshot:
    return dataclasses.replace(
        snapshot,
        arguments=_copy_map(snapshot.arguments),
        turns=list(snapshot.turns),
    )


def ask_human_summary(request: AskHumanRequest) -> str:
    """The pending questions, one per line."""
    return "\n".join(question.question for question in request.questions)


class SessionManager:
    """Keeps interactive skill sessions in memory and drives them forward."""

    def __init__(
        self,
        id_factory: Callable[[], str] | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._next_id = id_factory or _default_session_id
        self._now = clock or _now_utc
        self._lock = threading.RLock()
        self._sessions: dict[str, _SessionState] = {}

    def start(self, runtime: SkillSessionRuntime | None, start_input: StartInput) -> Snapshot:
        """Run a skill and record the session; returns its first snapshot."""
        if runtime is None:
            raise SkillSessionError("runtime is required")
        skill_id = start_input.skill_id.strip()
        request = start_input.request.strip()
        if not skill_id:
            raise SkillSessionError("skill_id is required")
        if not request:
            raise SkillSessionError("request is required")

        result = runtime.execute_skill_session(
            skill_id, request, _copy_map(start_input.arguments)
        )
        now = self._now()
        turns = [Turn(role="user", content=request, created_at=now)]
        if result.status == SessionStatus.NEEDS_INPUT and result.ask_human is not None:
            turns.append(
                Turn(role="assistant", content=ask_human_summary(result.ask_human), created_at=now)
            )
        snapshot = Snapshot(
            id=self._next_id(),
            status=result.status,
            project_id=start_input.project_id.strip(),
            skill_id=skill_id,
            request=request,
            arguments=_copy_map(start_input.arguments),
            ask_human=result.ask_human,
            final_text=result.text,
            run_id=result.run_id,
            run_dir=result.run_dir,
            turns=turns,
            created_at=now,
            updated_at=now,
        )
        with self._lock:
            self._sessions[snapshot.id] = _SessionState(
                snapshot=snapshot, runtime=runtime, state=result.state
            )
            return _clone_snapshot(snapshot)

    def continue_session(self, session_id: str, continue_input: ContinueInput) -> Snapshot:
        """Resume a session waiting for input with the human's answers."""
        session_id = session_id.strip()
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                raise SkillSessionError(f"skill session {session_id!r} not found")
            if session.snapshot.status != SessionStatus.NEEDS_INPUT:
                raise SkillSessionError(
                    f"skill session {session_id!r} is not waiting for input; "
                    f"status={session.snapshot.status}"
                )
            if session.runtime is None or session.state is None:
                raise SkillSessionError(
                    f"skill session {session_id!r} cannot resume because "
                    "runtime state is unavailable"
                )
            runtime = session.runtime
            state = copy.copy(session.state)

        result = runtime.continue_skill_interactive(
            state,
            AskHumanAnswer(
                answers=_copy_map(continue_input.answers),
                notes=continue_input.notes.strip(),
            ),
        )

        now = self._now()
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                raise SkillSessionError(f"skill session {session_id!r} not found")
            snapshot = session.snapshot
            snapshot.status = result.status
            snapshot.ask_human = result.ask_human
            snapshot.final_text = result.text
            snapshot.run_id = result.run_id
            snapshot.run_dir = result.run_dir
            snapshot.updated_at = now
            session.state = result.state
            snapshot.turns.append(
                Turn(
                    role="user",
                    content=continue_input.input.strip(),
                    answers=_copy_map(continue_input.answers),
                    created_at=now,
                )
            )
            if result.status == SessionStatus.NEEDS_INPUT and result.ask_human is not None:
                snapshot.turns.append(
                    Turn(
                        role="assistant",
                        content=ask_human_summary(result.ask_human),
                        created_at=now,
                    )
                )
            if result.status == SessionStatus.COMPLETED and result.text.strip():
                snapshot.turns.append(Turn(role="assistant", content=result.text, created_at=now))
            return _clone_snapshot(snapshot)

    def get(self, session_id: str) -> Snapshot | None:
        """A copy of the session's snapshot, or None if it is unknown."""
        with self._lock:
            session = self._sessions.get(session_id.strip())
            return None if session is None else _clone_snapshot(session.snapshot)