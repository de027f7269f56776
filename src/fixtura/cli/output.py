"""Rich output formatting helpers."""

import dataclasses
import json
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel
from rich.table import Table


def to_plain(value: Any) -> dict[str, Any]:
    """Convert a built fixture into a plain dict for display.

    Args:
        value: A dict, pydantic model, dataclass or object with attributes.

    Returns:
        Field name to value mapping. Private attributes are skipped.
    """
    if isinstance(value, BaseModel):
        return value.model_dump()
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    if isinstance(value, Mapping):
        return dict(value)
    if hasattr(value, "__dict__"):
        return {k: v for k, v in vars(value).items() if not k.startswith("_")}
    return {"value": value}


def format_cell(value: Any) -> str:
    """Render one field value for a table cell."""
    if value is None:
        return "-"
    if isinstance(value, (Mapping, list, tuple)):
        return json.dumps(value, default=str)
    return str(value)


def create_fixture_table(title: str, rows: list[dict[str, Any]]) -> Table:
    """Create a table with one row per fixture.

    Args:
        title: Table title.
        rows: Plain fixture dicts. Columns are the union of their keys.

    Returns:
        Configured Rich Table.
    """
    columns: list[str] = []
    for row in rows:
        for key in row:
            if key not in columns:
                columns.append(key)

    table = Table(title=title)
    table.add_column("#", style="magenta")
    for column in columns:
        table.add_column(str(column), style="cyan" if column == "id" else None)
    for index, row in enumerate(rows, start=1):
        table.add_row(str(index), *(format_cell(row.get(c)) for c in columns))
    return table
