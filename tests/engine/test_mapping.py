from __future__ import annotations

import pytest

from tasksync.contracts.exceptions import ConfigError, UnmappedValueError
from tasksync.engine.mapping import (
    OMIT,
    WhenEmpty,
    compile_mapping,
    resolve_inbound,
    resolve_outbound,
    values_equal,
)


def _rule(entry: object, local_field: str = "status"):
    return compile_mapping({local_field: entry})[0]


def test_compile_shorthand_is_identity_rule() -> None:
    rule = _rule("summary", "title")

    assert rule.local_field == "title"
    assert rule.remote_field == "summary"
    assert rule.kind == "identity"


def test_compile_detailed_rule_defaults_remote_field_to_local_name() -> None:
    rule = _rule({"values": {"Done": "closed"}})

    assert rule.remote_field == "status"
    assert rule.values == {"Done": "closed"}
    assert rule.kind == "transform"


def test_compile_preserves_declaration_order() -> None:
    rules = compile_mapping({"b": "x", "a": "y", "c": {"field": "z"}})

    assert [rule.local_field for rule in rules] == ["b", "a", "c"]


@pytest.mark.parametrize(
    ("raw", "message"),
    [
        ({}, "mapping is empty"),
        ({"status": {"field": "state", "valuez": {}}}, "unrecognized key"),
        ({"status": {"values": ["Done"]}}, "values must be an object"),
        ({"status": {"values": {"Done": 1}}}, "must be a string"),
        ({"status": {"when_empty": "drop"}}, "when_empty must be one of"),
        ({"labels": {"add": "x"}}, "add must be a list"),
        ({"title": ""}, "must name a remote field"),
        ({"title": 3}, "field name or an object"),
        ({"title": "summary", "name": "summary"}, "already mapped"),
    ],
)
def test_compile_rejects_malformed_mapping(raw: dict[str, object], message: str) -> None:
    with pytest.raises(ConfigError, match=message):
        compile_mapping(raw)


def test_compile_rejects_non_object_mapping() -> None:
    with pytest.raises(ConfigError):
        compile_mapping(None)


def test_outbound_identity_passes_value_and_omits_empty() -> None:
    rule = _rule("summary", "title")

    assert resolve_outbound("Write docs", rule) == "Write docs"
    assert resolve_outbound("", rule) is OMIT
    assert resolve_outbound(None, rule) is OMIT


def test_outbound_values_table_translates_and_is_case_sensitive() -> None:
    rule = _rule({"field": "state", "values": {"Done": "closed", "Todo": "open"}})

    assert resolve_outbound("Done", rule) == "closed"
    with pytest.raises(UnmappedValueError) as exc:
        resolve_outbound("done", rule)
    assert exc.value.field == "status"
    assert exc.value.value == "done"


def test_outbound_values_table_translates_lists() -> None:
    rule = _rule({"field": "labels", "values": {"bug": "type:bug", "ui": "area:ui"}}, "tags")

    assert resolve_outbound(["bug", "ui", "bug"], rule) == ["type:bug", "area:ui"]


def test_outbound_set_ignores_local_value() -> None:
    rule = _rule({"field": "issuetype", "set": "Story"}, "kind")

    assert resolve_outbound("Epic", rule) == "Story"
    assert resolve_outbound(None, rule) == "Story"
    assert not rule.inbound


def test_outbound_default_applies_only_when_empty() -> None:
    rule = _rule({"field": "priority", "default": "Medium"}, "priority")

    assert resolve_outbound("", rule) == "Medium"
    assert resolve_outbound("High", rule) == "High"


def test_outbound_default_bypasses_values_table_for_empty_value() -> None:
    rule = _rule({"values": {"Done": "closed"}, "default": "open"})

    assert resolve_outbound(None, rule) == "open"


def test_outbound_unmapped_value_falls_back_to_default() -> None:
    rule = _rule({"values": {"Done": "closed"}, "default": "open"})

    assert resolve_outbound("Blocked", rule) == "open"
    assert resolve_outbound(["Done", "Blocked"], rule) == ["closed", "open"]


def test_outbound_when_empty_clear_clears_remote_field() -> None:
    rule = _rule({"field": "assignee", "when_empty": "clear"}, "owner")

    assert rule.when_empty is WhenEmpty.CLEAR
    assert rule.kind == "clear"
    assert resolve_outbound("", rule) is None
    assert resolve_outbound([], rule) == []
    assert resolve_outbound("ana", rule) == "ana"


def test_outbound_add_unions_without_duplicates() -> None:
    rule = _rule({"field": "labels", "add": ["x", "y"]}, "tags")

    assert resolve_outbound(["z"], rule) == ["z", "x", "y"]
    assert resolve_outbound(["x", "z"], rule) == ["x", "z", "y"]


def test_outbound_add_extends_current_remote_value_when_local_is_empty() -> None:
    rule = _rule({"field": "labels", "add": ["synced"]}, "tags")

    assert resolve_outbound(None, rule, current=["triage"]) == ["triage", "synced"]


def test_outbound_add_still_appends_when_clear_fires() -> None:
    rule = _rule({"field": "labels", "add": ["synced"], "when_empty": "clear"}, "tags")

    assert resolve_outbound([], rule, current=["triage"]) == ["synced"]


@pytest.mark.parametrize("value", ["Todo", "Done", "Blocked", "done", "", None, "In Progress"])
@pytest.mark.parametrize("modifier", [{}, {"default": "open"}, {"set": "open"}])
def test_outbound_table_raises_iff_value_unmapped_without_default_or_set(
    value: str | None, modifier: dict[str, str]
) -> None:
    table = {"Todo": "open", "Done": "closed"}
    rule = _rule({"field": "state", "values": table, **modifier})
    should_raise = value not in table and not modifier

    if should_raise:
        with pytest.raises(UnmappedValueError):
            resolve_outbound(value, rule)
    else:
        assert resolve_outbound(value, rule) is not OMIT


def test_inbound_inverts_values_table() -> None:
    rule = _rule({"field": "state", "values": {"Done": "closed", "Todo": "open"}})

    assert resolve_inbound("closed", rule) == "Done"
    with pytest.raises(UnmappedValueError):
        resolve_inbound("reopened", rule)


def test_inbound_inverted_table_prefers_current_local_value() -> None:
    rule = _rule({"field": "state", "values": {"Done": "closed", "Cancelled": "closed"}})

    assert resolve_inbound("closed", rule) == "Done"
    assert resolve_inbound("closed", rule, current="Cancelled") == "Cancelled"


def test_inbound_set_rule_is_outbound_only() -> None:
    rule = _rule({"field": "issuetype", "set": "Story"}, "kind")

    assert resolve_inbound("Bug", rule) is OMIT


def test_inbound_strips_added_items() -> None:
    rule = _rule({"field": "labels", "add": ["x", "y"]}, "tags")

    assert resolve_inbound(["z", "x", "y"], rule) == ["z"]


def test_inbound_empty_value_is_omitted_unless_clear() -> None:
    skip = _rule("assignee", "owner")
    clear = _rule({"field": "assignee", "when_empty": "clear"}, "owner")

    assert resolve_inbound(None, skip) is OMIT
    assert resolve_inbound(None, clear) is None
    assert resolve_inbound(None, clear, current=["a"]) == []


def test_values_equal_normalizes_empties_whitespace_and_order() -> None:
    assert values_equal(None, "")
    assert values_equal([], None)
    assert values_equal(" Done ", "Done")
    assert values_equal(["a", "b"], ["b", "a", "a"])
    assert not values_equal("Done", "done")
    assert not values_equal(["a"], ["a", "b"])
