"""
Declarative view composition for list and detail queries.

A ``ViewPipeline`` describes, in order:

1. match      - SQL predicates restricting the base rows to a scope
2. lookup     - related rows attached by reference equality (``local_key`` == ``id``)
3. reshape    - each lookup collapsed into one optional sub-document
4. project    - every document restricted to an allow-list of fields
5. add_fields - computed scalar columns such as correlated counts

The pipeline only builds SQLAlchemy statements and reshapes result rows;
execution and windowing live in ``pagination``.
"""
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Union

from pydantic.alias_generators import to_snake
from sqlalchemy import Select, func, or_, select
from sqlalchemy.orm import aliased

from ..exceptions import ValidationError

# Credential material never leaves the store through a view
FORBIDDEN_FIELDS = frozenset({"password_hash", "refresh_token"})

PUBLIC_PROFILE_FIELDS = ("id", "username", "full_name", "avatar")

FieldSpec = Union[str, Tuple[str, str]]

_SEPARATOR = "__"
_PRESENCE = "_pk"


def public_profile(user) -> Optional[Dict[str, Any]]:
    """The public projection of a loaded User instance."""
    if user is None:
        return None
    return {name: getattr(user, name) for name in PUBLIC_PROFILE_FIELDS}


def parse_id(value: Any, noun: str) -> uuid.UUID:
    """Parse an identifier from a path or query parameter."""
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid {noun} ID")


def _normalize_fields(model, fields: Sequence[FieldSpec]) -> List[Tuple[str, str]]:
    normalized = []
    for entry in fields:
        column, alias = (entry, entry) if isinstance(entry, str) else entry
        if column in FORBIDDEN_FIELDS:
            raise ValueError(f"{model.__name__}.{column} is never selectable")
        if not hasattr(model, column):
            raise ValueError(f"{model.__name__} has no field {column!r}")
        normalized.append((column, alias))
    return normalized


@dataclass
class Lookup:
    """Attach the row of ``model`` whose id equals the parent's ``local_key``."""
    name: str
    model: Any
    local_key: str
    fields: Sequence[FieldSpec] = PUBLIC_PROFILE_FIELDS
    required: bool = False
    lookups: Sequence["Lookup"] = ()

    def __post_init__(self):
        self.fields = _normalize_fields(self.model, self.fields)
        for nested in self.lookups:
            if nested.lookups:
                raise ValueError("Lookups nest one level deep only")
            if nested.required:
                raise ValueError("Only top-level lookups can be required")


@dataclass
class AddField:
    """A computed column; ``convert`` post-processes the raw value."""
    name: str
    expression: Any
    convert: Optional[Callable[[Any], Any]] = None


@dataclass
class ViewPipeline:
    model: Any
    fields: Sequence[FieldSpec]
    sortable: Sequence[str] = ("created_at",)
    default_sort: str = "created_at"
    match: List[Any] = field(default_factory=list)
    lookups: List[Lookup] = field(default_factory=list)
    computed: List[AddField] = field(default_factory=list)

    def __post_init__(self):
        self.fields = _normalize_fields(self.model, self.fields)
        self.sort_by = self.default_sort
        self.sort_desc = True

    # -- stage builders -------------------------------------------------

    def where(self, *clauses) -> "ViewPipeline":
        self.match.extend(clauses)
        return self

    def search(self, query: Optional[str], columns: Sequence[str] = ("title", "description")) -> "ViewPipeline":
        """Case-insensitive substring match over ``columns``, ORed together."""
        if query is None or not str(query).strip():
            return self
        text = str(query).strip()
        predicates = [getattr(self.model, column).icontains(text, autoescape=True) for column in columns]
        return self.where(or_(*predicates))

    def lookup(self, lookup: Lookup) -> "ViewPipeline":
        self.lookups.append(lookup)
        return self

    def add_field(self, name: str, expression, convert: Optional[Callable[[Any], Any]] = None) -> "ViewPipeline":
        self.computed.append(AddField(name, expression, convert))
        return self

    def sort(self, sort_by: Optional[str] = None, sort_type: Optional[str] = None) -> "ViewPipeline":
        """
        Apply a caller-supplied ordering.

        Unrecognised keys fall back to the default sort field and
        unrecognised directions fall back to descending.
        """
        key = to_snake(sort_by.strip()) if sort_by else None
        self.sort_by = key if key in self.sortable else self.default_sort
        direction = (sort_type or "").strip().lower()
        self.sort_desc = direction != "asc"
        return self

    # -- statements -----------------------------------------------------

    def _joined(self, stmt: Select, required_only: bool = False) -> Tuple[Select, List[Any]]:
        columns = []
        for lookup in self.lookups:
            if required_only and not lookup.required:
                continue
            target = aliased(lookup.model, name=lookup.name)
            condition = getattr(self.model, lookup.local_key) == target.id
            stmt = stmt.join(target, condition) if lookup.required else stmt.outerjoin(target, condition)
            if required_only:
                continue

            columns.append(target.id.label(f"{lookup.name}{_SEPARATOR}{_PRESENCE}"))
            columns.extend(
                getattr(target, column).label(f"{lookup.name}{_SEPARATOR}{alias}")
                for column, alias in lookup.fields
            )
            for nested in lookup.lookups:
                prefix = f"{lookup.name}{_SEPARATOR}{nested.name}"
                inner = aliased(nested.model, name=f"{lookup.name}_{nested.name}")
                stmt = stmt.outerjoin(inner, getattr(target, nested.local_key) == inner.id)
                columns.append(inner.id.label(f"{prefix}{_SEPARATOR}{_PRESENCE}"))
                columns.extend(
                    getattr(inner, column).label(f"{prefix}{_SEPARATOR}{alias}")
                    for column, alias in nested.fields
                )
        return stmt, columns

    def statement(self) -> Select:
        """The ordered, unwindowed item query."""
        base_columns = [getattr(self.model, column).label(alias) for column, alias in self.fields]
        stmt = select(self.model.id.label(_PRESENCE)).select_from(self.model)
        stmt, lookup_columns = self._joined(stmt)
        computed_columns = [item.expression.label(item.name) for item in self.computed]
        stmt = stmt.add_columns(*base_columns, *lookup_columns, *computed_columns)
        if self.match:
            stmt = stmt.where(*self.match)

        order_column = getattr(self.model, self.sort_by)
        if self.sort_desc:
            stmt = stmt.order_by(order_column.desc(), self.model.id.desc())
        else:
            stmt = stmt.order_by(order_column.asc(), self.model.id.asc())
        return stmt

    def count_statement(self) -> Select:
        """Count rows surviving the match stage and any required lookups."""
        stmt = select(func.count(self.model.id)).select_from(self.model)
        stmt, _ = self._joined(stmt, required_only=True)
        if self.match:
            stmt = stmt.where(*self.match)
        return stmt

    # -- reshape --------------------------------------------------------

    @staticmethod
    def _sub_document(row, prefix: str, fields: Sequence[Tuple[str, str]]) -> Optional[Dict[str, Any]]:
        if row[f"{prefix}{_SEPARATOR}{_PRESENCE}"] is None:
            return None
        return {alias: row[f"{prefix}{_SEPARATOR}{alias}"] for _, alias in fields}

    def reshape(self, row) -> Dict[str, Any]:
        """Turn a flat result mapping into a nested response document."""
        document = {alias: row[alias] for _, alias in self.fields}
        for lookup in self.lookups:
            sub_document = self._sub_document(row, lookup.name, lookup.fields)
            if sub_document is not None:
                for nested in lookup.lookups:
                    prefix = f"{lookup.name}{_SEPARATOR}{nested.name}"
                    sub_document[nested.name] = self._sub_document(row, prefix, nested.fields)
            document[lookup.name] = sub_document
        for item in self.computed:
            value = row[item.name]
            document[item.name] = item.convert(value) if item.convert else value
        return document
