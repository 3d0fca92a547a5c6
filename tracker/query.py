"""
List-query helpers for the generic collection routes.

Follows json-server's conventions: plain ``field=value`` parameters filter by
exact match, ``_ne``/``_like``/``_gte``/``_lte`` suffixes select other
operators, ``q`` searches the text of every field, and ``_sort``/``_order``,
``_page``/``_limit`` and ``_start``/``_end`` shape the result.
"""

from __future__ import annotations

import json
import re
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional, Sequence

OPERATOR_SUFFIXES = ("_ne", "_like", "_gte", "_lte")
_MISSING = object()


class QueryError(ValueError):
    """Raised for query parameters that cannot be applied."""


@dataclass
class ListQuery:
    filters: dict[str, list[str]] = field(default_factory=dict)
    search: Optional[str] = None
    sort: list[str] = field(default_factory=list)
    order: list[str] = field(default_factory=list)
    page: Optional[int] = None
    limit: Optional[int] = None
    start: Optional[int] = None
    end: Optional[int] = None
    embed: list[str] = field(default_factory=list)
    expand: list[str] = field(default_factory=list)

    @property
    def is_sliced(self) -> bool:
        return self.page is not None or self.end is not None or self.limit is not None


def _int_param(name: str, raw: str) -> int:
    try:
        return int(raw)
    except ValueError as exc:
        raise QueryError(f"'{name}' must be an integer") from exc


def _split(raw: str) -> list[str]:
    return [part.strip() for part in raw.split(",") if part.strip()]


def parse_query(params: Iterable[tuple[str, str]]) -> ListQuery:
    """Build a ListQuery from raw ``(key, value)`` query pairs."""
    query = ListQuery()
    filters: dict[str, list[str]] = defaultdict(list)
    for key, value in params:
        if key == "q":
            query.search = value
        elif key == "_sort":
            query.sort.extend(_split(value))
        elif key == "_order":
            query.order.extend(_split(value.lower()))
        elif key == "_page":
            query.page = _int_param(key, value)
        elif key == "_limit":
            query.limit = _int_param(key, value)
        elif key == "_start":
            query.start = _int_param(key, value)
        elif key == "_end":
            query.end = _int_param(key, value)
        elif key == "_embed":
            query.embed.extend(_split(value))
        elif key == "_expand":
            query.expand.extend(_split(value))
        elif not key.startswith("_"):
            filters[key].append(value)
    query.filters = dict(filters)
    return query


def get_path(record: dict, path: str) -> Any:
    current: Any = record
    for part in path.split("."):
        if isinstance(current, dict) and part in current:
            current = current[part]
        elif isinstance(current, list) and part.isdigit() and int(part) < len(current):
            current = current[int(part)]
        else:
            return _MISSING
    return current


def as_text(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return json.dumps(value)


def _as_number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _compare(value: Any, raw: str) -> int:
    left, right = _as_number(value), _as_number(raw)
    if left is not None and right is not None:
        return (left > right) - (left < right)
    text = as_text(value)
    return (text > raw) - (text < raw)


def _matches(record: dict, key: str, values: Sequence[str]) -> bool:
    operator = None
    path = key
    for suffix in OPERATOR_SUFFIXES:
        if key.endswith(suffix):
            operator = suffix
            path = key[: -len(suffix)]
            break

    value = get_path(record, path)
    if value is _MISSING:
        return operator == "_ne"

    if operator == "_ne":
        return all(as_text(value) != raw for raw in values)
    if operator == "_like":
        try:
            return any(
                re.search(raw, as_text(value), re.IGNORECASE) for raw in values
            )
        except re.error as exc:
            raise QueryError(f"Invalid pattern for '{key}'") from exc
    if operator == "_gte":
        return all(_compare(value, raw) >= 0 for raw in values)
    if operator == "_lte":
        return all(_compare(value, raw) <= 0 for raw in values)
    return any(as_text(value) == raw for raw in values)


def _contains_text(value: Any, needle: str) -> bool:
    if isinstance(value, dict):
        return any(_contains_text(item, needle) for item in value.values())
    if isinstance(value, list):
        return any(_contains_text(item, needle) for item in value)
    if value is None:
        return False
    return needle in as_text(value).lower()


def apply_filters(records: list[dict], query: ListQuery) -> list[dict]:
    result = records
    if query.search:
        needle = query.search.lower()
        result = [record for record in result if _contains_text(record, needle)]
    for key, values in query.filters.items():
        result = [record for record in result if _matches(record, key, values)]
    return result


def _sort_key(value: Any) -> tuple:
    if value is _MISSING or value is None:
        return (2, 0, "")
    number = _as_number(value) if not isinstance(value, str) else None
    if number is not None:
        return (0, number, "")
    return (1, 0, as_text(value))


def apply_sort(records: list[dict], query: ListQuery) -> list[dict]:
    result = list(records)
    # Stable sorts applied from the last key to the first give a multi-key order.
    for index in reversed(range(len(query.sort))):
        path = query.sort[index]
        order = query.order[index] if index < len(query.order) else "asc"
        if order not in ("asc", "desc"):
            raise QueryError("'_order' must be 'asc' or 'desc'")
        result.sort(
            key=lambda record: _sort_key(get_path(record, path)),
            reverse=order == "desc",
        )
    return result


def apply_slice(
    records: list[dict], query: ListQuery, default_page_size: int
) -> list[dict]:
    if query.page is not None:
        limit = query.limit or default_page_size
        if query.page < 1 or limit < 1:
            return []
        offset = (query.page - 1) * limit
        return records[offset : offset + limit]
    if query.end is not None or query.limit is not None:
        start = query.start or 0
        end = query.end if query.end is not None else start + query.limit
        return records[start:end]
    return records


def singular(name: str) -> str:
    if name.endswith("ies"):
        return name[:-3] + "y"
    if name.endswith("s"):
        return name[:-1]
    return name


def plural(name: str) -> str:
    if name.endswith("y") and name[-2:-1] not in ("a", "e", "i", "o", "u"):
        return name[:-1] + "ies"
    return name + "s"


def embed_children(
    record: dict, collection: str, child: str, children: list[dict]
) -> None:
    foreign_key = f"{singular(collection)}Id"
    record[child] = [
        item
        for item in children
        if as_text(item.get(foreign_key)) == as_text(record.get("id"))
    ]


def expand_parent(record: dict, parent: str, parents: list[dict]) -> None:
    foreign_key = f"{parent}Id"
    if foreign_key not in record:
        return
    target = as_text(record[foreign_key])
    for item in parents:
        if as_text(item.get("id")) == target:
            record[parent] = item
            return
