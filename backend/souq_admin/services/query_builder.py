# Overview: Declarative filter/sort/window specs and their translation into SQLAlchemy queries.

"""
Predicate query builder.

A listing command describes WHAT it wants as a QuerySpec; build_query turns
that into one SQLAlchemy query against one table (plus at most one eagerly
loaded relation).

Rules:
- Every filter is optional. None means "not supplied" and is a no-op;
  False and 0 are real values.
- Filters are AND-ed together. The single search filter is an OR across
  its 1-3 text fields.
- Search text is always a bound parameter wrapped as %term% (case-insensitive
  substring). '%' and '_' typed by the caller are NOT escaped, so they keep
  their LIKE meaning; command descriptions call the search a substring match.
- Pagination is a Window: offset and limit are one half-open range
  [start, start + size), never two unrelated clauses.
- Sorts come from a fixed per-listing menu (SortChoices) with an explicit
  default. Ties are broken by id in the same direction so windows are stable.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence

from sqlalchemy import or_
from sqlalchemy.orm import joinedload

from ..validation import ValidationError


DEFAULT_WINDOW_SIZE = 50


@dataclass(frozen=True)
class Search:
    term: str
    fields: tuple[str, ...]

    def __post_init__(self):
        if not 1 <= len(self.fields) <= 3:
            raise ValueError("search must target between 1 and 3 fields")


@dataclass(frozen=True)
class Range:
    field: str
    gte: Any = None
    lte: Any = None


@dataclass(frozen=True)
class SortOption:
    field: str
    descending: bool = False


class SortChoices:
    """Fixed, named menu of sort options for one listing."""

    def __init__(self, options: Mapping[str, SortOption], default: str):
        if default not in options:
            raise ValueError(f"default sort {default!r} is not one of the options")
        self._options = dict(options)
        self.default = default

    @property
    def names(self) -> list[str]:
        return list(self._options)

    def resolve(self, name: str | None) -> SortOption:
        if name is None:
            return self._options[self.default]
        try:
            return self._options[name]
        except KeyError:
            raise ValidationError(f"sort must be one of: {', '.join(self._options)}")


@dataclass(frozen=True)
class Window:
    """Half-open result window [start, start + size). size=None means unbounded."""
    start: int = 0
    size: int | None = None

    @classmethod
    def from_args(cls, limit: int | None, offset: int | None, *, default_size: int = DEFAULT_WINDOW_SIZE) -> "Window":
        if limit is not None and limit <= 0:
            raise ValidationError("limit must be > 0")
        if offset is not None and offset < 0:
            raise ValidationError("offset must be >= 0")

        if offset is not None:
            return cls(start=offset, size=limit or default_size)
        return cls(start=0, size=limit)


@dataclass(frozen=True)
class Include:
    """One level of eager-loaded related record, rendered as {field: value}."""
    relation: str
    fields: tuple[str, ...]


@dataclass(frozen=True)
class QuerySpec:
    table: str
    equals: Mapping[str, Any] = field(default_factory=dict)
    any_of: Mapping[str, Sequence[Any]] = field(default_factory=dict)
    search: Search | None = None
    ranges: tuple[Range, ...] = ()
    sort: SortOption | None = None
    window: Window = Window()
    include: Include | None = None


def _column(model, name: str):
    cols = model.__mapper__.columns
    if name not in cols:
        raise ValidationError(f"Unknown field for {model.__tablename__}: {name}")
    return getattr(model, name)


def apply_filters(query, model, spec: QuerySpec):
    """AND together every supplied filter; None values are skipped."""
    for name, value in spec.equals.items():
        if value is None:
            continue
        query = query.filter(_column(model, name) == value)

    for name, values in spec.any_of.items():
        if values is None:
            continue
        query = query.filter(_column(model, name).in_(list(values)))

    if spec.search is not None and spec.search.term:
        pattern = f"%{spec.search.term}%"
        query = query.filter(
            or_(*[_column(model, f).ilike(pattern) for f in spec.search.fields])
        )

    for rng in spec.ranges:
        col = _column(model, rng.field)
        if rng.gte is not None:
            query = query.filter(col >= rng.gte)
        if rng.lte is not None:
            query = query.filter(col <= rng.lte)

    return query


def build_query(session, model, spec: QuerySpec):
    """
    Translate a QuerySpec into a single SQLAlchemy Query.

    The window is applied last as one OFFSET/LIMIT pair so the result is
    exactly the rows in [start, start + size) of the sorted, filtered set.
    """
    query = apply_filters(session.query(model), model, spec)

    if spec.include is not None:
        if not hasattr(model, spec.include.relation):
            raise ValidationError(f"Unknown relation for {model.__tablename__}: {spec.include.relation}")
        query = query.options(joinedload(getattr(model, spec.include.relation)))

    if spec.sort is not None:
        col = _column(model, spec.sort.field)
        tiebreak = model.id
        if spec.sort.descending:
            query = query.order_by(col.desc(), tiebreak.desc())
        else:
            query = query.order_by(col.asc(), tiebreak.asc())

    if spec.window.start:
        query = query.offset(spec.window.start)
    if spec.window.size is not None:
        query = query.limit(spec.window.size)

    return query
