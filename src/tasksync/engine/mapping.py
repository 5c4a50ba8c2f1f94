"""Declarative field-mapping rules.

A remote's ``mapping`` config is compiled once per run into an ordered list of
:class:`MappingRule` objects. Shorthand entries (``title: summary``) become
identity rules; detailed entries may combine the ``values``, ``set``,
``default``, ``add`` and ``when_empty`` modifiers. Compilation rejects any
unrecognized key, so a malformed mapping fails the run before network I/O.

Outbound evaluation order for one rule:

1. ``when_empty: clear`` with an empty local value clears the remote field.
2. ``set`` returns its constant, ignoring the local value.
3. ``default`` replaces an empty local value.
4. ``values`` translates the local value (exact, case-sensitive); a value
   missing from the table falls back to ``default``, or raises
   :class:`UnmappedValueError` when there is none.
5. Otherwise the local value passes through; an empty value is omitted.

``add`` is applied after any of the above and unions its literal items into the
(list-typed) remote field.

Every function here is pure.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Final

from tasksync.contracts.exceptions import ConfigError, UnmappedValueError
from tasksync.contracts.task import FieldValue

_RULE_KEYS = frozenset({"field", "values", "set", "default", "add", "when_empty"})


class WhenEmpty(str, Enum):
    SKIP = "skip"
    CLEAR = "clear"


class _Omitted:
    """Sentinel for "leave the target field untouched"."""

    _instance: _Omitted | None = None

    def __new__(cls) -> _Omitted:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "OMIT"

    def __bool__(self) -> bool:
        return False


OMIT: Final = _Omitted()


@dataclass(frozen=True)
class MappingRule:
    """One local field <-> one remote field, with optional modifiers."""

    local_field: str
    remote_field: str
    values: Mapping[str, str] | None = None
    set: str | None = None
    default: str | None = None
    add: tuple[str, ...] = ()
    when_empty: WhenEmpty = WhenEmpty.SKIP
    _inverse: Mapping[str, tuple[str, ...]] = field(default_factory=dict, repr=False, compare=False)

    @property
    def kind(self) -> str:
        if self.values is None and self.set is None and self.default is None and not self.add:
            return "clear" if self.when_empty is WhenEmpty.CLEAR else "identity"
        return "transform"

    @property
    def inbound(self) -> bool:
        """Whether pulls write this rule's local field. ``set`` rules are outbound-only."""
        return self.set is None


# ----------------------------------------------------------------------
# Compilation
# ----------------------------------------------------------------------


def _require_str(value: Any, where: str) -> str:
    if not isinstance(value, str):
        raise ConfigError(f"{where} must be a string")
    return value


def _compile_values(raw: Any, where: str) -> tuple[dict[str, str], dict[str, tuple[str, ...]]]:
    if not isinstance(raw, Mapping):
        raise ConfigError(f"{where} must be an object of local -> remote values")
    table: dict[str, str] = {}
    inverse: dict[str, list[str]] = {}
    for local_value, remote_value in raw.items():
        local_text = _require_str(local_value, f"{where} key")
        remote_text = _require_str(remote_value, f"{where}.{local_text}")
        table[local_text] = remote_text
        inverse.setdefault(remote_text, []).append(local_text)
    return table, {remote: tuple(locals_) for remote, locals_ in inverse.items()}


def _compile_rule(local_field: str, entry: Any) -> MappingRule:
    where = f"mapping.{local_field}"
    if isinstance(entry, str):
        remote_field = entry.strip()
        if not remote_field:
            raise ConfigError(f"{where} must name a remote field")
        return MappingRule(local_field=local_field, remote_field=remote_field)

    if not isinstance(entry, Mapping):
        raise ConfigError(f"{where} must be a field name or an object")

    unknown = sorted(str(key) for key in entry if key not in _RULE_KEYS)
    if unknown:
        raise ConfigError(f"{where}: unrecognized key(s): {', '.join(unknown)}")

    remote_field = _require_str(entry.get("field", local_field), f"{where}.field").strip()
    if not remote_field:
        raise ConfigError(f"{where}.field must not be empty")

    values: dict[str, str] | None = None
    inverse: dict[str, tuple[str, ...]] = {}
    if "values" in entry:
        values, inverse = _compile_values(entry["values"], f"{where}.values")

    set_value = _require_str(entry["set"], f"{where}.set") if "set" in entry else None
    default = _require_str(entry["default"], f"{where}.default") if "default" in entry else None

    add: tuple[str, ...] = ()
    if "add" in entry:
        raw_add = entry["add"]
        if not isinstance(raw_add, list):
            raise ConfigError(f"{where}.add must be a list of strings")
        add = tuple(dict.fromkeys(_require_str(item, f"{where}.add[]").strip() for item in raw_add if item))

    when_empty = WhenEmpty.SKIP
    if "when_empty" in entry:
        try:
            when_empty = WhenEmpty(entry["when_empty"])
        except ValueError as exc:
            raise ConfigError(f"{where}.when_empty must be one of: clear, skip") from exc

    return MappingRule(
        local_field=local_field,
        remote_field=remote_field,
        values=values,
        set=set_value,
        default=default,
        add=add,
        when_empty=when_empty,
        _inverse=inverse,
    )


def compile_mapping(raw: Mapping[str, Any] | None) -> list[MappingRule]:
    """Compile a raw mapping config into rules, preserving declaration order.

    Raises:
        ConfigError: The mapping is empty or any entry is malformed.
    """
    if raw is None or not isinstance(raw, Mapping):
        raise ConfigError("mapping must be an object of local field -> remote field")
    if not raw:
        raise ConfigError("mapping is empty; nothing to synchronize")

    rules: list[MappingRule] = []
    seen_remote: dict[str, str] = {}
    for local_field, entry in raw.items():
        if not isinstance(local_field, str) or not local_field.strip():
            raise ConfigError("mapping keys must be non-empty local field names")
        rule = _compile_rule(local_field.strip(), entry)
        if rule.remote_field in seen_remote:
            raise ConfigError(
                f"mapping.{rule.local_field}: remote field {rule.remote_field!r} "
                f"is already mapped from {seen_remote[rule.remote_field]!r}"
            )
        seen_remote[rule.remote_field] = rule.local_field
        rules.append(rule)
    return rules


# ----------------------------------------------------------------------
# Value helpers
# ----------------------------------------------------------------------


def is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, list):
        return all(not str(item).strip() for item in value)
    return False


def as_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, list):
        items = [str(item).strip() for item in value]
    else:
        items = [str(value).strip()]
    return [item for item in dict.fromkeys(items) if item]


def _union(base: Iterable[str], extra: Iterable[str]) -> list[str]:
    return list(dict.fromkeys([*base, *extra]))


def values_equal(a: Any, b: Any) -> bool:
    """Diff comparison: empties are equal, strings compare stripped, lists compare as sets."""
    if is_empty(a) and is_empty(b):
        return True
    if isinstance(a, list) or isinstance(b, list):
        return set(as_list(a)) == set(as_list(b))
    return str(a).strip() == str(b).strip()


def _cleared(value: Any, rule: MappingRule, current: Any = None) -> FieldValue:
    if isinstance(value, list) or isinstance(current, list) or rule.add:
        return []
    return None


# ----------------------------------------------------------------------
# Evaluation
# ----------------------------------------------------------------------


def _lookup(rule: MappingRule, value: Any) -> str:
    assert rule.values is not None
    if isinstance(value, str) and value in rule.values:
        return rule.values[value]
    if rule.default is not None:
        return rule.default
    raise UnmappedValueError(
        f"{rule.local_field}: value {value!r} has no entry in the values table",
        field=rule.local_field,
        value=value,
    )


def resolve_outbound(
    local_value: FieldValue, rule: MappingRule, *, current: FieldValue = None
) -> FieldValue | _Omitted:
    """Translate a local value into the remote value for *rule*.

    *current* is the remote field's present value; it is only consulted when
    ``add`` has to extend a field whose primary value is omitted.

    Returns:
        The remote value, or :data:`OMIT` when the remote field must be left untouched.

    Raises:
        UnmappedValueError: A ``values`` table has no entry for the local value
            and the rule has no ``default``.
    """
    empty = is_empty(local_value)
    primary: FieldValue | _Omitted
    if empty and rule.when_empty is WhenEmpty.CLEAR:
        primary = _cleared(local_value, rule)
    elif rule.set is not None:
        primary = rule.set
    elif empty and rule.default is not None:
        primary = rule.default
    elif rule.values is not None:
        if isinstance(local_value, list):
            primary = [_lookup(rule, item) for item in as_list(local_value)] or OMIT
        else:
            primary = _lookup(rule, local_value)
    elif empty:
        primary = OMIT
    else:
        primary = as_list(local_value) if isinstance(local_value, list) else local_value

    if rule.add:
        base = current if primary is OMIT else primary
        return _union(as_list(base), rule.add)
    return primary


def _invert(rule: MappingRule, remote_value: str, preferred: list[str]) -> str:
    candidates = rule._inverse.get(remote_value)
    if not candidates:
        raise UnmappedValueError(
            f"{rule.local_field}: remote value {remote_value!r} of {rule.remote_field} has no entry "
            "in the values table",
            field=rule.local_field,
            value=remote_value,
        )
    for candidate in candidates:
        if candidate in preferred:
            return candidate
    return candidates[0]


def resolve_inbound(
    remote_value: FieldValue, rule: MappingRule, *, current: FieldValue = None
) -> FieldValue | _Omitted:
    """Translate a remote value into the local value for *rule*.

    ``set`` rules are outbound-only and always yield :data:`OMIT`. Items that
    ``add`` appends on push are removed again so they do not leak into the
    local field. An inverted ``values`` table that maps several local values
    to one remote value prefers *current* (the task's present value).

    Raises:
        UnmappedValueError: The remote value is absent from the inverted table.
            Callers skip this field only, not the whole task.
    """
    if not rule.inbound:
        return OMIT

    value: Any = remote_value
    if rule.add and isinstance(value, list):
        value = [item for item in value if str(item).strip() not in rule.add]

    if is_empty(value):
        if rule.when_empty is WhenEmpty.CLEAR:
            return _cleared(value, rule, current)
        return OMIT

    if rule.values is not None:
        preferred = as_list(current)
        if isinstance(value, list):
            return list(dict.fromkeys(_invert(rule, item, preferred) for item in as_list(value)))
        return _invert(rule, str(value), preferred)

    return as_list(value) if isinstance(value, list) else value
