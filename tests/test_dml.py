"""Unit tests for INSERT, UPDATE, DELETE and MERGE builders."""

from __future__ import annotations

import datetime as dt

import pytest

from fluentql import BuilderUsageError, InsertBodyError, SqlType
from tests.fixtures import bind, bound_values


# ---------------------------------------------------------------------------
# UPDATE
# ---------------------------------------------------------------------------


def test_update_without_where(sql):
    q = sql.update("table1").set("a").value(1)
    assert q.get_sql() == "update table1 set\n    a = ?\n"
    assert "where" not in q.get_sql()


def test_update_with_where(sql):
    q = sql.update("table1").set("a").value(1).where(sql.condition("a").is_null())
    assert q.get_sql() == "update table1 set\n    a = ?\nwhere\n    a is NULL\n"


def test_update_binds_set_then_where(sql):
    q = (
        sql.update("emp")
        .set("sal").value(5000)
        .set("comm").raw("comm * 2")
        .set("job").value("MANAGER")
        .where("empno").eq().value(7566)
        .where("deptno").eq().value(20)
    )
    assert q.get_sql() == (
        "update emp set\n"
        "    sal = ?,\n"
        "    comm = comm * 2,\n"
        "    job = ?\n"
        "where\n"
        "    empno = ?\n"
        "    and deptno = ?\n"
    )
    assert bound_values(q) == [5000, "MANAGER", 7566, 20]


# ---------------------------------------------------------------------------
# DELETE
# ---------------------------------------------------------------------------


def test_delete(sql):
    assert sql.delete_from("table1").get_sql() == "delete from table1\n"


def test_delete_with_where(sql):
    q = sql.delete_from("table1").where(sql.condition("a").lte().raw("1+1"))
    assert q.get_sql() == "delete from table1\nwhere\n    a <= 1+1\n"


def test_delete_binds_where(sql):
    q = sql.delete_from("emp").where("job").in_(["CLERK", "SALESMAN"]).where("sal").lt().value(1000)
    assert q.get_sql() == "delete from emp\nwhere\n    job in (?, ?)\n    and sal < ?\n"
    assert bound_values(q) == ["CLERK", "SALESMAN", 1000]


# ---------------------------------------------------------------------------
# INSERT
# ---------------------------------------------------------------------------


def test_insert_values(sql):
    q = sql.insert_into("emp").set("ename").value("KING").set("job").value("PRESIDENT")
    assert q.get_sql() == "insert into emp (ename, job)\nvalues (?, ?)"
    assert bound_values(q) == ["KING", "PRESIDENT"]


def test_insert_values_builder(sql):
    q = sql.insert_into("dept")
    values = q.values()
    assert values.set("dname").value("SALES") is values
    assert q.values() is values
    values.set("loc").value(None)
    assert q.get_sql() == "insert into dept (dname, loc)\nvalues (?, ?)"
    assert bind(q).calls[1] == (2, None, SqlType.OTHER)


def test_insert_debug_values(debug_sql):
    q = debug_sql.insert_into("dept").set("deptno").value(50).set("dname").raw("upper('x')")
    assert q.get_sql() == "insert into dept (deptno, dname)\nvalues (?  /* 50 */, upper('x'))"


def test_insert_subquery(sql):
    q = sql.insert_into("emp2")
    q.subquery("ename", "job").select("ename", "job").from_("emp").where("deptno").eq().value(10)
    assert q.get_sql() == (
        "insert into emp2 (ename, job)\n"
        "select ename, job\n"
        "from emp\n"
        "where deptno = ?\n"
    )
    assert bound_values(q) == [10]


def test_insert_default_values(sql):
    assert sql.insert_into("audit").get_sql() == "insert into audit\ndefault values"


def test_insert_body_kinds_are_exclusive(sql):
    q = sql.insert_into("t")
    q.subquery("a")
    with pytest.raises(InsertBodyError):
        q.values()
    with pytest.raises(InsertBodyError):
        q.set("a")

    q = sql.insert_into("t")
    q.set("a").value(1)
    with pytest.raises(InsertBodyError) as exc_info:
        q.subquery("a")
    assert exc_info.value.existing == "values"


def test_insert_rejects_none_table(sql):
    with pytest.raises(BuilderUsageError):
        sql.insert_into(None)


# ---------------------------------------------------------------------------
# MERGE
# ---------------------------------------------------------------------------


def test_merge(sql):
    day = dt.date(2010, 3, 3)
    q = (
        sql.merge_into("table1")
        .on("a").value("2")
        .insert_or_update("b").value(3)
        .insert("c").value(day)
    )
    assert q.get_sql() == (
        "merge into table1 using dual on (\n"
        "    a = ?\n"
        ")\n"
        "when matched then update set\n"
        "    b = ?\n"
        "when not matched then insert (a, b, c) values (?, ?, ?)"
    )
    assert bound_values(q) == ["2", 3, "2", 3, day]


def test_merge_without_update_branch(sql):
    q = sql.merge_into("t").on("k1").value(1).on("k2").value(2).insert("v").value("x")
    assert q.get_sql() == (
        "merge into t using dual on (\n"
        "    (k1 = ? and k2 = ?)\n"
        ")\n"
        "when not matched then insert (k1, k2, v) values (?, ?, ?)"
    )
    assert bound_values(q) == [1, 2, 1, 2, "x"]


def test_merge_null_key_uses_is_null(sql):
    q = sql.merge_into("t").on("k").value(None).insert_or_update("v").value(1)
    sql_text = q.get_sql()
    assert "    k is NULL\n" in sql_text
    assert "insert (k, v) values (?, ?)" in sql_text
    ps = bind(q)
    assert ps.positions == [1, 2, 3]
    assert ps.values == [1, None, 1]
    assert ps.calls[1][2] == SqlType.OTHER


def test_statement_str_is_sql(sql):
    q = sql.delete_from("t")
    assert str(q) == q.get_sql()
