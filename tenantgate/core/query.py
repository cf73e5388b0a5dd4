"""
Typed query specifications for the hosted data API.

Every read the application issues is described by a frozen ``QuerySpec``
instead of an ad hoc chain of builder calls. Tenant-owned tables are read
through ``ScopedQuerySpec``, whose ``scope`` field is required, so filtering
by organization is part of the type rather than a call-site convention.

Usage:
    spec = ScopedQuerySpec(
        table="cross_organization_access",
        scope=OrganizationScope(
            organization_id=org_id, column="host_organization_id"
        ),
        filters=(Filter.eq("status", "active"),),
    )
    rows = await gateway.fetch(spec)
"""

import logging
from typing import Any, Literal, Optional

import httpx
from postgrest.exceptions import APIError
from postgrest.types import CountMethod
from pydantic import BaseModel, ConfigDict, Field, model_validator
from supabase import AsyncClient

logger = logging.getLogger(__name__)

FilterOp = Literal["eq", "neq", "in", "is"]

Row = dict[str, Any]


class Filter(BaseModel):
    """A single column predicate."""

    model_config = ConfigDict(frozen=True)

    column: str
    op: FilterOp = "eq"
    value: Any = None

    @classmethod
    def eq(cls, column: str, value: Any) -> "Filter":
        return cls(column=column, op="eq", value=value)

    @classmethod
    def neq(cls, column: str, value: Any) -> "Filter":
        return cls(column=column, op="neq", value=value)

    @classmethod
    def in_(cls, column: str, values: list[Any]) -> "Filter":
        return cls(column=column, op="in", value=tuple(values))

    @classmethod
    def is_null(cls, column: str) -> "Filter":
        return cls(column=column, op="is", value=None)


class Embed(BaseModel):
    """A joined parent row, rendered as a PostgREST resource embedding."""

    model_config = ConfigDict(frozen=True)

    table: str
    foreign_key: str = Field(description="Local column referencing table.id")
    columns: tuple[str, ...] = ("*",)
    alias: Optional[str] = None

    def render(self) -> str:
        prefix = f"{self.alias}:" if self.alias else ""
        return f"{prefix}{self.table}!{self.foreign_key}({','.join(self.columns)})"

    @property
    def key(self) -> str:
        """Name the embedded row appears under in the response."""
        return self.alias or self.table


class OrderBy(BaseModel):
    model_config = ConfigDict(frozen=True)

    column: str
    descending: bool = False


class OrganizationScope(BaseModel):
    """The tenant a query or write is confined to."""

    model_config = ConfigDict(frozen=True)

    organization_id: str = Field(min_length=1)
    column: str = "organization_id"

    def as_filter(self) -> Filter:
        return Filter.eq(self.column, self.organization_id)


class QuerySpec(BaseModel):
    """Table, projection, predicates, ordering and pagination of one read."""

    model_config = ConfigDict(frozen=True)

    table: str
    columns: tuple[str, ...] = ("*",)
    embeds: tuple[Embed, ...] = ()
    filters: tuple[Filter, ...] = ()
    order: Optional[OrderBy] = None
    limit: Optional[int] = Field(default=None, ge=1)
    offset: Optional[int] = Field(default=None, ge=0)

    @model_validator(mode="after")
    def _offset_needs_limit(self) -> "QuerySpec":
        # PostgREST pages with a closed range, so an offset alone has no bound
        if self.offset is not None and self.limit is None:
            raise ValueError("offset requires limit")
        return self

    def select_clause(self) -> str:
        parts = list(self.columns) + [embed.render() for embed in self.embeds]
        return ",".join(parts)

    def all_filters(self) -> tuple[Filter, ...]:
        return self.filters


class ScopedQuerySpec(QuerySpec):
    """A read of a tenant-owned table; the organization filter is mandatory."""

    scope: OrganizationScope

    def all_filters(self) -> tuple[Filter, ...]:
        return (self.scope.as_filter(),) + self.filters


def _apply_filters(builder: Any, filters: tuple[Filter, ...]) -> Any:
    for f in filters:
        if f.op == "eq":
            builder = builder.eq(f.column, f.value)
        elif f.op == "neq":
            builder = builder.neq(f.column, f.value)
        elif f.op == "in":
            builder = builder.in_(f.column, list(f.value))
        elif f.op == "is":
            builder = builder.is_(f.column, "null" if f.value is None else f.value)
    return builder


def _stamp_scope(values: Row, scope: Optional[OrganizationScope]) -> Row:
    if scope is None:
        return dict(values)
    existing = values.get(scope.column)
    if existing is not None and existing != scope.organization_id:
        raise ValueError(
            f"Row targets organization {existing} but scope is "
            f"{scope.organization_id}"
        )
    return {**values, scope.column: scope.organization_id}


class DataGateway:
    """
    Executes query specifications against the Supabase data API.

    Backend failures are logged and re-raised; callers decide whether a
    failure degrades to an empty result.
    """

    def __init__(self, client: AsyncClient):
        self.client = client

    async def fetch(self, spec: QuerySpec) -> list[Row]:
        """
        Run a read and return its rows.

        Args:
            spec: The query to run

        Returns:
            List of row dictionaries, embedded rows nested under their key

        Raises:
            APIError: If the data API rejects the query
            httpx.HTTPError: If the request fails in transit
        """
        builder = self.client.table(spec.table).select(spec.select_clause())
        builder = _apply_filters(builder, spec.all_filters())
        if spec.order:
            builder = builder.order(spec.order.column, desc=spec.order.descending)
        if spec.limit is not None:
            start = spec.offset or 0
            builder = builder.range(start, start + spec.limit - 1)

        try:
            response = await builder.execute()
        except (APIError, httpx.HTTPError) as e:
            logger.error(f"Query on {spec.table} failed: {e}")
            raise

        return list(response.data or [])

    async def count(self, spec: QuerySpec) -> int:
        """Exact row count for a query, without transferring rows."""
        builder = self.client.table(spec.table).select(
            "id", count=CountMethod.exact, head=True
        )
        builder = _apply_filters(builder, spec.all_filters())

        try:
            response = await builder.execute()
        except (APIError, httpx.HTTPError) as e:
            logger.error(f"Count on {spec.table} failed: {e}")
            raise

        return response.count or 0

    async def insert(
        self, table: str, values: Row, scope: Optional[OrganizationScope] = None
    ) -> Row:
        """
        Insert one row, stamping the scope's organization id when given.

        Raises:
            ValueError: If values name a different organization than scope
            APIError: If the data API rejects the write
        """
        row = _stamp_scope(values, scope)
        try:
            response = await self.client.table(table).insert(row).execute()
        except (APIError, httpx.HTTPError) as e:
            logger.error(f"Insert into {table} failed: {e}")
            raise

        data = response.data or []
        return data[0] if data else row

    async def update(
        self,
        table: str,
        row_id: str,
        values: Row,
        scope: Optional[OrganizationScope] = None,
    ) -> Optional[Row]:
        """Update one row by id; returns None when no row matched."""
        changes = _stamp_scope(values, scope) if scope else dict(values)
        builder = self.client.table(table).update(changes).eq("id", row_id)
        if scope:
            builder = builder.eq(scope.column, scope.organization_id)

        try:
            response = await builder.execute()
        except (APIError, httpx.HTTPError) as e:
            logger.error(f"Update of {table}/{row_id} failed: {e}")
            raise

        data = response.data or []
        return data[0] if data else None

    async def delete(
        self, table: str, row_id: str, scope: Optional[OrganizationScope] = None
    ) -> bool:
        """Delete one row by id; returns whether a row was removed."""
        builder = self.client.table(table).delete().eq("id", row_id)
        if scope:
            builder = builder.eq(scope.column, scope.organization_id)

        try:
            response = await builder.execute()
        except (APIError, httpx.HTTPError) as e:
            logger.error(f"Delete of {table}/{row_id} failed: {e}")
            raise

        return bool(response.data)
