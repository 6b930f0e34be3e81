"""asyncpg-backed query handle for the paginator."""

import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

from asyncpg import Pool

from ..pagination.conditions import CursorCondition
from ..pagination.query import Ordering, PageQuery
from .connection import get_db_pool


logger = logging.getLogger(__name__)


class SQLQuery(PageQuery):
    """SELECT over one table, compiled to SQL with ``$n`` placeholders.

    Filters are added with ``where`` using ``{}`` where a bound value goes,
    e.g. ``query.where("stage = {}", "lead")``. Table and column names are
    interpolated verbatim and must come from code, never from requests.
    """

    def __init__(
        self,
        table: str,
        columns: Sequence[str] = ("*",),
        pool: Optional[Pool] = None,
        conditions: Tuple[str, ...] = (),
        params: Tuple[Any, ...] = (),
        orderings: Tuple[Ordering, ...] = (),
        row_limit: Optional[int] = None,
    ):
        self.table = table
        self.columns = tuple(columns)
        self._pool = pool
        self._conditions = conditions
        self._params = params
        self._orderings = orderings
        self._limit = row_limit

    def _copy(self, **changes: Any) -> "SQLQuery":
        state = {
            "columns": self.columns,
            "pool": self._pool,
            "conditions": self._conditions,
            "params": self._params,
            "orderings": self._orderings,
            "row_limit": self._limit,
        }
        state.update(changes)
        return SQLQuery(self.table, **state)

    def where(self, template: str, *values: Any) -> "SQLQuery":
        """Return a query with an extra filter ANDed in."""
        placeholders = [f"${len(self._params) + i + 1}" for i in range(len(values))]
        return self._copy(
            conditions=self._conditions + (template.format(*placeholders),),
            params=self._params + values,
        )

    def with_condition(self, condition: CursorCondition) -> "SQLQuery":
        sql, values = condition.to_sql(len(self._params) + 1)
        return self._copy(
            conditions=self._conditions + (sql,),
            params=self._params + tuple(values),
        )

    def order_by(self, *orderings: Ordering) -> "SQLQuery":
        return self._copy(orderings=tuple(orderings))

    def limit(self, count: int) -> "SQLQuery":
        return self._copy(row_limit=count)

    def _where_clause(self) -> str:
        if not self._conditions:
            return ""
        return " WHERE " + " AND ".join(self._conditions)

    def to_sql(self) -> Tuple[str, List[Any]]:
        """Compile the SELECT statement.

        Returns:
            Tuple of (sql, parameters)
        """
        params = list(self._params)
        sql = f"SELECT {', '.join(self.columns)} FROM {self.table}{self._where_clause()}"

        if self._orderings:
            terms = [
                f"{column.name} {'DESC' if descending else 'ASC'}"
                for column, descending in self._orderings
            ]
            sql += " ORDER BY " + ", ".join(terms)

        if self._limit is not None:
            params.append(self._limit)
            sql += f" LIMIT ${len(params)}"

        return sql, params

    def to_count_sql(self) -> Tuple[str, List[Any]]:
        """Compile a COUNT(*) over the same filters."""
        return f"SELECT COUNT(*) FROM {self.table}{self._where_clause()}", list(self._params)

    async def _get_pool(self) -> Pool:
        return self._pool or await get_db_pool()

    async def fetch(self) -> List[Dict[str, Any]]:
        sql, params = self.to_sql()
        pool = await self._get_pool()
        logger.debug(f"Executing page query: {sql}")

        async with pool.acquire() as conn:
            rows = await conn.fetch(sql, *params)

        return [dict(row) for row in rows]

    async def count(self) -> int:
        sql, params = self.to_count_sql()
        pool = await self._get_pool()

        async with pool.acquire() as conn:
            count = await conn.fetchval(sql, *params)

        return count or 0
