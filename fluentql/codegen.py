"""Generate a Python module of table and column name constants.

The generated module declares two classes, ``Tables`` and ``Columns``, whose
attributes are the upper-cased names mapped to the names as stored in the
database.  Referencing ``Columns.ENAME`` instead of ``"ename"`` turns a
renamed column into an ``AttributeError`` at import time of the caller.

Install the optional dependency before using :func:`generate_constants`::

    pip install "fluentql[sqlalchemy]"

Example::

    from sqlalchemy import create_engine
    from fluentql.codegen import generate_constants

    engine = create_engine("sqlite:///mydb.db")
    with open("db_constants.py", "w") as f:
        generate_constants(engine, f)
"""
from __future__ import annotations

import keyword
import logging
import re
from collections.abc import Iterable
from typing import TYPE_CHECKING, TextIO

if TYPE_CHECKING:
    from sqlalchemy import Engine

logger = logging.getLogger(__name__)

_NON_IDENTIFIER = re.compile(r"\W")


def constant_name(name: str) -> str:
    """Turn a database identifier into an upper-case Python constant name."""
    res = _NON_IDENTIFIER.sub("_", name).upper()
    if not res or res[0].isdigit() or keyword.iskeyword(res):
        res = "_" + res
    return res


def render_constants(tables: Iterable[str], columns: Iterable[str]) -> str:
    """Return the source of a constants module for ``tables`` and ``columns``.

    Names are de-duplicated and sorted.
    """
    lines = ['"""Table and column name constants.  Generated by fluentql.codegen; do not edit."""']
    for cls_name, names in (("Tables", tables), ("Columns", columns)):
        lines += ["", "", f"class {cls_name}:"]
        names = sorted(set(names))
        if not names:
            lines.append("    pass")
        for name in names:
            lines.append(f"    {constant_name(name)} = {name!r}")
    return "\n".join(lines) + "\n"


def generate_constants(
    engine: Engine,
    writer: TextIO,
    *,
    schema: str | None = None,
    include_tables: list[str] | None = None,
) -> None:
    """Reflect ``engine`` and write a constants module to ``writer``.

    Args:
        engine: A SQLAlchemy engine.
        writer: Text stream receiving the module source.
        schema: Optional database schema to reflect.
        include_tables: Optional allowlist of table names.

    Raises:
        ImportError: If ``sqlalchemy`` is not installed.
    """
    try:
        from sqlalchemy import MetaData
    except ImportError as exc:
        raise ImportError(
            "SQLAlchemy is required for generate_constants(). "
            'Install it with: pip install "fluentql[sqlalchemy]"'
        ) from exc

    metadata = MetaData()
    with engine.connect() as conn:
        metadata.reflect(bind=conn, only=include_tables, schema=schema)

    tables = [table.name for table in metadata.tables.values()]
    columns = [column.name for table in metadata.tables.values() for column in table.columns]
    logger.debug("Generating constants for %d tables, %d columns", len(tables), len(set(columns)))
    writer.write(render_constants(tables, columns))
