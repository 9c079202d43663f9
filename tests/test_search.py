import pytest

from novelskills.command import Command
from novelskills.search import (
    QueryExplanation,
    SearchHit,
    explain_query,
    normalize_search_text,
    search_commands,
    tokenize_query,
)


def _opening_sniper(**overrides):
    values = dict(
        id="webnovel-opening-sniper",
        name="Opening Sniper",
        description="Writes a strong 600-word opening",
        when_to_use="Use when the user asks for an urban power novel opening",
        aliases=["opening-sniper"],
        search_hint="forensic-report urban-power",
        tags=["novel", "opening"],
    )
    values.update(overrides)
    return Command(**values)


def _outline():
    return Command(
        id="generic-outline",
        name="Outline Builder",
        description="Generates plot outlines",
        tags=["outline"],
    )


def test_select_resolves_alias_and_marks_exact():
    hits = search_commands([_opening_sniper(), _outline()], "select:opening-sniper", 5)
    assert [hit.id for hit in hits] == ["webnovel-opening-sniper"]
    assert hits[0].exact is True
    assert hits[0].reason == "fields: select-alias"
    assert hits[0].matched_fields == ["select"]
    assert hits[0].score == 2.0


def test_select_by_id_and_name_case_insensitive():
    commands = [_opening_sniper(), _outline()]
    hits = search_commands(commands, "SELECT: Outline Builder, WEBNOVEL-OPENING-SNIPER", 5)
    assert [hit.id for hit in hits] == ["generic-outline", "webnovel-opening-sniper"]
    assert hits[0].reason == "fields: select-exact-name"
    assert hits[1].reason == "fields: select-exact-id"


def test_select_respects_limit_and_skips_unknown():
    commands = [_opening_sniper(), _outline()]
    hits = search_commands(commands, "select:missing,generic-outline,opening-sniper", 1)
    assert [hit.id for hit in hits] == ["generic-outline"]


def test_required_terms_rank_opening_skill_first():
    hits = search_commands([_opening_sniper(), _outline()], "+forensic urban opening", 5)
    assert hits
    assert hits[0].id == "webnovel-opening-sniper"
    assert "search-hint" in hits[0].reason or "when-to-use" in hits[0].reason


def test_required_term_excludes_non_matching_commands():
    hits = search_commands([_opening_sniper(), _outline()], "+forensic outline", 5)
    assert [hit.id for hit in hits] == ["webnovel-opening-sniper"]


def test_bare_exact_query_matches_name():
    command = Command(
        id="webnovel-opening-sniper", name="Opening Sniper", aliases=["opening-sniper"]
    )
    hits = search_commands([command], "Opening Sniper", 5)
    assert len(hits) == 1
    assert hits[0].exact is True
    assert hits[0].matched_fields[0] == "exact-name"
    assert hits[0].score == 2.2
    assert hits[0].reason == "fields: exact-name; terms: Opening Sniper"


def test_bare_exact_query_matches_id_and_alias():
    command = _opening_sniper()
    by_id = search_commands([command], "  webnovel-opening-sniper ", 5)
    assert by_id[0].matched_fields == ["exact-id"]
    assert by_id[0].matched_terms == ["webnovel-opening-sniper"]
    by_alias = search_commands([command], "Opening-Sniper", 5)
    assert by_alias[0].matched_fields == ["exact-alias"]


def test_idea_query_ranks_bootstrap_skill_first():
    opening = Command(
        id="webnovel-opening-sniper",
        name="Opening Sniper",
        description="Writes a strong 600-word opening",
        when_to_use="Use when the user asks for an opening or first chapter",
        tags=["novel", "opening", "hook"],
    )
    bootstrap = Command(
        id="novel-idea-bootstrap",
        name="Idea Bootstrapper",
        description=(
            "Turns a rough novel idea into worldview, power system, and early plot scaffolding"
        ),
        when_to_use=(
            "Use when the user gives a rough idea and wants worldbuilding or golden finger design"
        ),
        aliases=["world-power-designer"],
        search_hint="idea worldbuilding setting golden finger 世界观 金手指 起盘 配角 主线",
        tags=["小说", "世界观", "金手指", "创意"],
    )
    hits = search_commands([opening, bootstrap], "帮我根据一个都市异能idea设计世界观和金手指", 5)
    assert hits
    assert hits[0].id == "novel-idea-bootstrap"


def test_novel_core_query_ranks_emotional_core_skill_first():
    core = Command(
        id="novel-emotional-core",
        name="Emotional Core Designer",
        description="Build the emotional core for a new webnovel before worldbuilding",
        when_to_use=(
            "Use when the user wants novel core, reader desire, recognition, catharsis, "
            "or emotional payoff"
        ),
        aliases=["emotional-core", "novel-core"],
        search_hint=(
            "emotional core novel core desire recognition catharsis "
            "情感内核 小说内核 爽感 认可感 压迫 渴望"
        ),
        tags=["情感内核", "新书内核", "爽感"],
    )
    bootstrap = Command(
        id="novel-idea-bootstrap",
        name="Idea Bootstrapper",
        description="Turns a rough novel idea into worldview and power system",
        tags=["世界观", "金手指"],
    )
    hits = search_commands(
        [bootstrap, core], "我想先设计新书情感内核和中年男人被生活压迫后的爽感", 5
    )
    assert hits
    assert hits[0].id == "novel-emotional-core"


def test_hits_are_sorted_and_limited():
    commands = [Command(id=f"plot-{name}", name=name.title()) for name in "dcba"]
    hits = search_commands(commands, "plot", 2)
    assert [hit.id for hit in hits] == ["plot-a", "plot-b"]
    scores = [hit.score for hit in search_commands(commands, "plot", 10)]
    assert scores == sorted(scores, reverse=True)


def test_non_positive_limit_uses_default_of_five():
    commands = [Command(id=f"plot-{index}", name=f"P{index}") for index in range(8)]
    assert len(search_commands(commands, "plot", 0)) == 5
    assert len(search_commands(commands, "plot", -3)) == 5


def test_non_invocable_commands_are_hidden():
    hidden = Command(id="secret-outline", name="Hidden", user_invocable=False)
    assert search_commands([hidden], "secret-outline", 5) == []
    assert search_commands([hidden], "select:secret-outline", 5) == []
    assert search_commands([hidden], "outline", 5) == []


def test_camel_case_id_parts_are_searchable():
    command = Command(id="OpeningSniper", name="Thing")
    hits = search_commands([command], "sniper", 5)
    assert [hit.id for hit in hits] == ["OpeningSniper"]
    assert hits[0].matched_fields == ["id"]
    assert hits[0].matched_terms == ["sniper"]
    assert hits[0].reason == "fields: id; terms: sniper"


def test_no_match_returns_empty_list():
    assert search_commands([_outline()], "zebra", 5) == []


def test_explain_query_keyword_mode():
    explanation = explain_query("+forensic urban opening")
    assert explanation == QueryExplanation(
        raw="+forensic urban opening",
        mode="keyword",
        required_terms=["forensic"],
        optional_terms=["urban", "opening"],
        scoring_terms=["forensic", "urban", "opening"],
    )


def test_explain_query_select_mode():
    explanation = explain_query("  select:a, b  ")
    assert explanation.mode == "select"
    assert explanation.raw == "select:a, b"
    assert explanation.required_terms == []
    assert explanation.scoring_terms == []


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("Hello_World/Foo-Bar", "hello world foo bar"),
        ("a,b.c:d;e", "a b c d e"),
        ("甲，乙：丙；丁。戊、己\u3000庚", "甲 乙 丙 丁 戊 己 庚"),
    ],
)
def test_normalize_search_text(text, expected):
    assert normalize_search_text(text) == expected


def test_tokenize_query_adds_known_intent_phrases():
    assert tokenize_query("First-Chapter hook") == ["first", "chapter", "hook", "first chapter"]


def test_tokenize_query_strips_plus_and_dedupes():
    assert tokenize_query("+plot plot PLOT") == ["plot"]


def test_tokenize_query_finds_chinese_intent_terms():
    assert tokenize_query("设计世界观") == ["设计世界观", "世界观"]


def test_search_hit_to_dict_omits_empty_fields():
    hit = SearchHit(id="x", name="X", description="d", score=1.5, reason="matched")
    assert hit.to_dict() == {
        "id": "x",
        "name": "X",
        "description": "d",
        "score": 1.5,
        "reason": "matched",
    }


def test_search_hit_to_dict_includes_filled_fields():
    hit = SearchHit(
        id="x",
        name="X",
        description="d",
        score=2.0,
        reason="fields: select",
        when_to_use="w",
        tags=["t"],
        matched_fields=["select"],
        matched_terms=["x"],
        exact=True,
    )
    data = hit.to_dict()
    assert data["when_to_use"] == "w"
    assert data["tags"] == ["t"]
    assert data["matched_fields"] == ["select"]
    assert data["matched_terms"] == ["x"]
    assert data["exact"] is True