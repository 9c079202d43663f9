"""Keyword, exact and select-style search over skill commands."""

from __future__ import annotations

import unicodedata
from dataclasses import dataclass, field
from typing import Any, Iterable

from novelskills.command import Command

KNOWN_INTENT_TERMS: tuple[str, ...] = (
    "opening",
    "hook",
    "first chapter",
    "first-chapter",
    "novel",
    "urban",
    "power",
    "supernatural",
    "forensic",
    "report",
    "worldbuilding",
    "world",
    "setting",
    "idea",
    "premise",
    "cheat",
    "golden finger",
    "companion",
    "side character",
    "mission",
    "outline",
    "plot",
    "emotional core",
    "novel core",
    "story heart",
    "desire",
    "recognition",
    "catharsis",
    "\u5f00\u5934",
    "\u5f00\u7bc7",
    "\u7b2c\u4e00\u7ae0",
    "\u9ec4\u91d1600",
    "\u94a9\u5b50",
    "\u5f00\u5c40",
    "\u7f51\u6587",
    "\u5c0f\u8bf4",
    "\u90fd\u5e02",
    "\u5f02\u80fd",
    "\u5c38\u68c0",
    "\u62a5\u544a",
    "\u723d\u70b9",
    "\u60ac\u5ff5",
    "\u4e16\u754c\u89c2",
    "\u8bbe\u5b9a",
    "\u91d1\u624b\u6307",
    "\u521b\u610f",
    "\u8111\u6d1e",
    "\u8d77\u76d8",
    "\u4eba\u8bbe",
    "\u4e3b\u7ebf",
    "\u914d\u89d2",
    "\u60c5\u611f\u5185\u6838",
    "\u5c0f\u8bf4\u5185\u6838",
    "\u65b0\u4e66\u5185\u6838",
    "\u723d\u611f",
    "\u8ba4\u53ef\u611f",
    "\u4ee3\u507f",
    "\u538b\u8feb",
    "\u6e34\u671b",
)

OPENING_INTENT_TERMS: tuple[str, ...] = (
    "opening",
    "hook",
    "first chapter",
    "first-chapter",
    "\u5f00\u5934",
    "\u5f00\u7bc7",
    "\u7b2c\u4e00\u7ae0",
    "\u9ec4\u91d1600",
    "\u94a9\u5b50",
    "\u5f00\u5c40",
)

DEFAULT_LIMIT = 5
_SELECT_PREFIX = "select:"
_SEPARATORS = str.maketrans(
    {
        ch: " "
        for ch in (
            "\u3000", "\u3001", "\u3002", "\uff0c", "\uff1a", "\uff1b",
            ",", ".", ":", ";", "-", "_", "/", "\n", "\t",
        )
    }
)


@dataclass
class QueryExplanation:
    """How a raw query was interpreted."""

    raw: str
    mode: str
    required_terms: list[str] = field(default_factory=list)
    optional_terms: list[str] = field(default_factory=list)
    scoring_terms: list[str] = field(default_factory=list)


@dataclass
class SearchHit:
    """One command matched by a search, with its score and explanation."""

    id: str
    name: str
    description: str
    score: float
    reason: str
    when_to_use: str = ""
    tags: list[str] = field(default_factory=list)
    matched_fields: list[str] = field(default_factory=list)
    matched_terms: list[str] = field(default_factory=list)
    exact: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Serialisable view; empty optional fields are left out."""
        out: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "description": self.description,
        }
        if self.when_to_use:
            out["when_to_use"] = self.when_to_use
        if self.tags:
            out["tags"] = list(self.tags)
        out["score"] = self.score
        out["reason"] = self.reason
        if self.matched_fields:
            out["matched_fields"] = list(self.matched_fields)
        if self.matched_terms:
            out["matched_terms"] = list(self.matched_terms)
        if self.exact:
            out["exact"] = True
        return out


@dataclass
class _SearchQuery:
    explanation: QueryExplanation
    selected_names: list[str] = field(default_factory=list)


@dataclass
class _SearchIndex:
    id_parts: list[str]
    name_parts: list[str]
    alias_parts: list[str]
    tag_parts: list[str]
    full: str
    hint: str
    narrative: str


def _byte_len(text: str) -> int:
    return len(text.encode("utf-8"))


def _unique(items: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    out: list[str] = []
    for item in items:
        item = item.strip()
        if item and item not in seen:
            seen.add(item)
            out.append(item)
    return out


def normalize_search_text(text: str) -> str:
    """Lower-case text and turn punctuation and separators into spaces."""
    return text.lower().translate(_SEPARATORS)


def tokenize_query(text: str) -> list[str]:
    """Split text into unique search terms, adding any known intent phrases it contains."""
    normalized = normalize_search_text(text)
    terms = [word.removeprefix("+").strip() for word in normalized.split()]
    for term in KNOWN_INTENT_TERMS:
        needle = normalize_search_text(term)
        if needle and needle in normalized:
            terms.append(needle)
    return _unique(terms)


def _insert_camel_breaks(text: str) -> str:
    out: list[str] = []
    prev_lower_or_digit = False
    for ch in text:
        category = unicodedata.category(ch)
        if prev_lower_or_digit and category == "Lu":
            out.append(" ")
        out.append(ch)
        prev_lower_or_digit = category in ("Ll", "Nd")
    return "".join(out)


def _parse_search_parts(text: str) -> list[str]:
    if not text.strip():
        return []
    return tokenize_query(_insert_camel_breaks(text))


def _parse_search_query(query: str) -> _SearchQuery:
    raw = query.strip()
    if raw.lower().startswith(_SELECT_PREFIX):
        names = raw[len(_SELECT_PREFIX):].strip().split(",")
        return _SearchQuery(
            explanation=QueryExplanation(raw=raw, mode="select"),
            selected_names=_unique(names),
        )

    all_terms = tokenize_query(raw)
    required = _unique(
        word[1:]
        for word in normalize_search_text(raw).split()
        if word.startswith("+") and len(word) > 1
    )
    required_set = set(required)
    optional = _unique(term for term in all_terms if term not in required_set)
    scoring = _unique(required + optional) if required else list(optional)
    return _SearchQuery(
        explanation=QueryExplanation(
            raw=raw,
            mode="keyword",
            required_terms=required,
            optional_terms=optional,
            scoring_terms=scoring,
        )
    )


def explain_query(query: str) -> QueryExplanation:
    """Describe how a query string would be interpreted by a search."""
    return _parse_search_query(query).explanation


def _build_index(command: Command) -> _SearchIndex:
    alias_parts = [part for alias in command.aliases for part in _parse_search_parts(alias)]
    tag_parts = [part for tag in command.tags for part in _parse_search_parts(tag)]
    full = normalize_search_text(
        " ".join(
            [command.id, command.name, " ".join(command.aliases), " ".join(command.tags)]
        )
    )
    return _SearchIndex(
        id_parts=_unique(_parse_search_parts(command.id)),
        name_parts=_unique(_parse_search_parts(command.name)),
        alias_parts=_unique(alias_parts),
        tag_parts=_unique(tag_parts),
        full=full,
        hint=normalize_search_text(command.search_hint),
        narrative=normalize_search_text(f"{command.when_to_use} {command.description}"),
    )


def _contains_exact_part(parts: list[str], term: str) -> bool:
    term = normalize_search_text(term)
    return any(normalize_search_text(part) == term for part in parts)


def _contains_partial_part(parts: list[str], term: str) -> bool:
    term = normalize_search_text(term)
    if not term:
        return False
    for part in parts:
        part = normalize_search_text(part)
        if _byte_len(term) >= 2 and term in part:
            return True
        if _byte_len(part) >= 3 and part in term:
            return True
    return False


def _text_contains_token(text: str, term: str) -> bool:
    text = normalize_search_text(text)
    term = normalize_search_text(term)
    if not text or not term:
        return False
    return term in text.split() or term in text


def _matches_term(term: str, index: _SearchIndex) -> bool:
    part_lists = (index.id_parts, index.name_parts, index.alias_parts, index.tag_parts)
    return (
        any(_contains_exact_part(parts, term) for parts in part_lists)
        or any(_contains_partial_part(parts, term) for parts in part_lists)
        or _text_contains_token(index.hint, term)
        or _text_contains_token(index.narrative, term)
    )


def _matches_required_terms(required: list[str], index: _SearchIndex) -> bool:
    return all(_matches_term(term, index) for term in required)


def _score_term(term: str, index: _SearchIndex) -> tuple[float, list[str]]:
    score = 0.0
    fields: list[str] = []
    weighted = (
        (index.id_parts, 12, "id", 6, "id-partial"),
        (index.name_parts, 11, "name", 5, "name-partial"),
        (index.alias_parts, 10, "alias", 5, "alias-partial"),
        (index.tag_parts, 10, "tag", 5, "tag-partial"),
    )
    for parts, exact_weight, exact_name, partial_weight, partial_name in weighted:
        if _contains_exact_part(parts, term):
            score += exact_weight
            fields.append(exact_name)
        elif _contains_partial_part(parts, term):
            score += partial_weight
            fields.append(partial_name)

    if score == 0 and term in index.full:
        score += 3
        fields.append("full-name")
    if _text_contains_token(index.hint, term):
        score += 4
        fields.append("search-hint")
    if _text_contains_token(index.narrative, term):
        score += 2
        fields.append("description")
    return score, _unique(fields)


def _contains_intent_term(text: str, terms: Iterable[str]) -> bool:
    normalized = normalize_search_text(text)
    for term in terms:
        needle = normalize_search_text(term)
        if needle and needle in normalized:
            return True
    return False


def _command_intent_text(command: Command, index: _SearchIndex) -> str:
    return " ".join(
        [command.id, command.name, " ".join(command.tags), command.search_hint, index.narrative]
    )


def _score_command(
    query: _SearchQuery, command: Command, index: _SearchIndex
) -> tuple[float, list[str], list[str]]:
    scoring_terms = query.explanation.scoring_terms
    total = 0.0
    matched_fields: list[str] = []
    matched_terms: list[str] = []
    for term in scoring_terms:
        score, fields = _score_term(term, index)
        if score <= 0:
            continue
        total += score
        matched_fields.extend(fields)
        matched_terms.append(term)

    matched_terms = _unique(matched_terms)
    if not matched_terms:
        return 0.0, [], []
    matched_fields = _unique(matched_fields)

    if _contains_intent_term(query.explanation.raw, OPENING_INTENT_TERMS) and _contains_intent_term(
        _command_intent_text(command, index), OPENING_INTENT_TERMS
    ):
        total += 3
        matched_fields.append("opening-intent")

    final = total / (len(scoring_terms) + 3)
    return final, _unique(matched_fields), matched_terms


def _build_reason(fields: list[str], terms: list[str]) -> str:
    if not fields and not terms:
        return "matched"
    if not fields:
        return "terms: " + ", ".join(terms)
    if not terms:
        return "fields: " + ", ".join(fields)
    return "fields: " + ", ".join(fields) + "; terms: " + ", ".join(terms)


def _normalize_identity(text: str) -> str:
    return text.strip().lower()


def _exact_hit(command: Command, field_name: str, raw: str) -> SearchHit:
    raw = raw.strip()
    return SearchHit(
        id=command.id,
        name=command.name,
        description=command.description,
        when_to_use=command.when_to_use,
        tags=list(command.tags),
        score=2.2,
        reason=f"fields: {field_name}; terms: {raw}",
        matched_fields=[field_name],
        matched_terms=[raw],
        exact=True,
    )


def _search_exact(commands: list[Command], raw: str) -> SearchHit | None:
    target = _normalize_identity(raw)
    if not target:
        return None
    for command in commands:
        if not command.user_invocable:
            continue
        if _normalize_identity(command.id) == target:
            return _exact_hit(command, "exact-id", raw)
        if _normalize_identity(command.name) == target:
            return _exact_hit(command, "exact-name", raw)
        if any(_normalize_identity(alias) == target for alias in command.aliases):
            return _exact_hit(command, "exact-alias", raw)
    return None


def _find_selectable(commands: list[Command], name: str) -> tuple[Command, str] | None:
    target = name.strip().casefold()
    if not target:
        return None
    for command in commands:
        if not command.user_invocable:
            continue
        if command.id.casefold() == target:
            return command, "fields: select-exact-id"
        if command.name.casefold() == target:
            return command, "fields: select-exact-name"
        if any(alias.casefold() == target for alias in command.aliases):
            return command, "fields: select-alias"
    return None


def _search_selected(commands: list[Command], selected: list[str], limit: int) -> list[SearchHit]:
    hits: list[SearchHit] = []
    for name in selected:
        found = _find_selectable(commands, name)
        if found is None:
            continue
        command, reason = found
        hits.append(
            SearchHit(
                id=command.id,
                name=command.name,
                description=command.description,
                when_to_use=command.when_to_use,
                tags=list(command.tags),
                score=2.0,
                reason=reason,
                matched_fields=["select"],
                matched_terms=[name.strip()],
                exact=True,
            )
        )
    return hits[:limit]


def search_commands(
    commands: Iterable[Command], query: str, limit: int = DEFAULT_LIMIT
) -> list[SearchHit]:
    """Search commands by select list, exact identity or weighted keywords.

    Results are ordered by descending score, then by id, and cut to ``limit``
    (a non-positive limit means the default of 5).
    """
    if limit <= 0:
        limit = DEFAULT_LIMIT
    pool = list(commands)
    parsed = _parse_search_query(query)
    if parsed.selected_names:
        return _search_selected(pool, parsed.selected_names, limit)
    exact = _search_exact(pool, parsed.explanation.raw)
    if exact is not None:
        return [exact]

    hits: list[SearchHit] = []
    for command in pool:
        if not command.user_invocable:
            continue
        index = _build_index(command)
        if not _matches_required_terms(parsed.explanation.required_terms, index):
            continue
        score, fields, terms = _score_command(parsed, command, index)
        if score <= 0:
            continue
        hits.append(
            SearchHit(
                id=command.id,
                name=command.name,
                description=command.description,
                when_to_use=command.when_to_use,
                tags=list(command.tags),
                score=score,
                reason=_build_reason(fields, terms),
                matched_fields=fields,
                matched_terms=terms,
            )
        )
    hits.sort(key=lambda hit: (-hit.score, hit.id))
    return hits[:limit]