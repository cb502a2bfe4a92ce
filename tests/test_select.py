"""Unit tests for SelectBuilder rendering and binding."""

from __future__ import annotations

import pytest

from fluentql import BuilderUsageError, ClauseAlreadySetError, Placement, SelectClause, ValueKind
from tests.fixtures import bind, bound_values


def test_select_from(sql):
    assert sql.select("a", "b").from_("table1").get_sql() == "select a, b\nfrom table1\n"


def test_two_where_clauses(sql):
    q = sql.select("a", "b").from_("t1").where("a").gt().value(1).where("b").eq().value("x")
    assert q.get_sql() == "select a, b\nfrom t1\nwhere\n    a > ?\n    and b = ?\n"
    assert bound_values(q) == [1, "x"]


def test_single_where_stays_on_one_line(sql):
    q = sql.select("a", "b").from_("table1").where(sql.condition("a").gte().value(1))
    assert q.get_sql() == "select a, b\nfrom table1\nwhere a >= ?\n"


def test_where_subqueries_are_indented(sql):
    q = (
        sql.select("a", "b")
        .from_("table1")
        .where(sql.condition("a").in_subquery(sql.select("a").from_("table2")))
        .where(sql.condition("c").gt().all(sql.select("c").from_("table3")))
    )
    assert q.get_sql() == (
        "select a, b\n"
        "from table1\n"
        "where\n"
        "    a in (\n"
        "        select a\n"
        "        from table2\n"
        "    )\n"
        "    and c > all (\n"
        "        select c\n"
        "        from table3\n"
        "    )\n"
    )


def test_scalar_subquery(sql):
    q = sql.select("a", "b").from_("table1").where(sql.condition("a").eq().subquery(sql.select("1").from_("dual")))
    assert q.get_sql() == "select a, b\nfrom table1\nwhere a = (\n    select 1\n    from dual\n)\n"


def test_having_and_group_by(sql):
    q = (
        sql.select("job", "count(*)")
        .from_("emp")
        .group_by("job")
        .having(sql.condition("count(*)").gte().value(2))
        .order_by("job", "count(*) desc")
    )
    assert q.get_sql() == (
        "select job, count(*)\n"
        "from emp\n"
        "group by job\n"
        "having count(*) >= ?\n"
        "order by job, count(*) desc\n"
    )
    assert bound_values(q) == [2]


def test_with_clause(sql):
    q = (
        sql.with_("t").as_(sql.select("a").from_("table2"))
        .select("t.a, b")
        .from_("table1")
        .inner_join("t on table1.b = t.a")
    )
    assert q.get_sql() == (
        "with t as (\n"
        "    select a\n"
        "    from table2\n"
        ")\n"
        "select t.a, b\n"
        "from table1\n"
        "inner join t on table1.b = t.a\n"
    )


def test_with_clause_hands_back_owner_once(sql):
    q = sql.select("a")
    clause = q.with_("t")
    assert clause.as_(sql.select("1").from_("dual")) is q
    with pytest.raises(BuilderUsageError):
        clause.as_(sql.select("2").from_("dual"))


def test_with_clause_without_subquery_cannot_render(sql):
    q = sql.select("a").from_("t")
    q.with_("t")
    with pytest.raises(BuilderUsageError):
        q.get_sql()


def test_joins(sql):
    q = (
        sql.select("*")
        .from_("a")
        .left_join("b on a.id = b.id")
        .right_join("c on a.id = c.id")
        .full_join("d on a.id = d.id")
        .cross_join("e")
    )
    assert q.get_sql() == (
        "select *\n"
        "from a\n"
        "left join b on a.id = b.id\n"
        "right join c on a.id = c.id\n"
        "full join d on a.id = d.id\n"
        "cross join e\n"
    )


def test_select_distinct(sql):
    assert sql.select_distinct("job").from_("emp").get_sql() == "select distinct job\nfrom emp\n"


def test_select_literal(sql):
    q = sql.select().select_literal("it's", "label").select_literal("x").from_("dual")
    assert q.get_sql() == "select 'it''s' AS label, 'x'\nfrom dual\n"


def test_from_subquery(sql):
    q = sql.select("x.a").from_(sql.select("a").from_("t").where("b").eq().value(1), "x").where("x.a").gt().value(2)
    assert q.get_sql() == (
        "select x.a\n"
        "from (\n"
        "    select a\n"
        "    from t\n"
        "    where b = ?\n"
        ") x\n"
        "where x.a > ?\n"
    )
    assert bound_values(q) == [1, 2]


def test_from_twice_is_rejected(sql):
    q = sql.select("a").from_("t")
    with pytest.raises(ClauseAlreadySetError):
        q.from_("u")


def test_offset_and_fetch_first(sql):
    q = sql.select("a").from_("t").where("b").eq().value("x").order_by("a").offset(20).fetch_first(10)
    assert q.get_sql() == (
        "select a\n"
        "from t\n"
        "where b = ?\n"
        "order by a\n"
        "offset ? rows\n"
        "fetch first ? rows only\n"
    )
    assert bind(q).calls == [
        (1, "x", ValueKind.STRING),
        (2, 20, ValueKind.INTEGER),
        (3, 10, ValueKind.INTEGER),
    ]


def test_offset_and_fetch_first_are_set_once(sql):
    q = sql.select("a").from_("t").offset(1).fetch_first(1)
    with pytest.raises(ClauseAlreadySetError):
        q.offset(2)
    with pytest.raises(ClauseAlreadySetError):
        q.fetch_first(2)


@pytest.mark.parametrize("n", [-1, 1.5, True, "3"])
def test_offset_needs_a_count(sql, n):
    with pytest.raises(BuilderUsageError):
        sql.select("a").from_("t").offset(n)


def test_raw_placements(sql):
    q = (
        sql.select("1")
        .raw(Placement.BEFORE_KEYWORD, SelectClause.SELECT, "raw_before_select")
        .raw(Placement.AFTER_KEYWORD, SelectClause.SELECT, "raw_after_select")
        .raw(Placement.AFTER_KEYWORD, SelectClause.SELECT, "raw_after_select2")
        .raw(Placement.AFTER_EXPRESSION, SelectClause.SELECT, "raw_after_select_expr")
        .raw(Placement.BEFORE_KEYWORD, SelectClause.FROM, "raw_before_from")
        .from_("dual")
        .raw(Placement.AFTER_KEYWORD, SelectClause.FROM, "raw_after_from")
        .raw(Placement.AFTER_EXPRESSION, SelectClause.FROM, "raw_after_from_expr")
    )
    assert q.get_sql() == (
        "raw_before_select\n"
        "select raw_after_select raw_after_select2 1\n"
        "raw_after_select_expr\n"
        "raw_before_from\n"
        "from raw_after_from dual\n"
        "raw_after_from_expr\n"
    )


def test_raw_clause_binders_follow_render_order(sql):
    def binder(value):
        return lambda ps, seq: ps.set_value(seq.next(), value, ValueKind.INTEGER)

    q = (
        sql.select("a")
        .raw(Placement.AFTER_KEYWORD, SelectClause.SELECT, "/*+ first_rows(?) */", binder(1))
        .from_("t")
        .where("b").eq().value(2)
        .raw(Placement.AFTER_EXPRESSION, SelectClause.WHERE, "for update wait ?", binder(3))
    )
    assert q.get_sql() == (
        "select /*+ first_rows(?) */ a\n"
        "from t\n"
        "where b = ?\n"
        "for update wait ?\n"
    )
    assert bound_values(q) == [1, 2, 3]


def test_get_sql_is_idempotent(sql):
    q = sql.select("a").from_("t").where("b").eq_nullable().value(None).where("c").in_([1, 2])
    first = q.get_sql()
    assert q.get_sql() == first
    assert str(q) == first
    assert bind(q).calls == bind(q).calls


def test_empty_in_scenario(sql):
    q = sql.select("1").from_("dual").where("a").in_([], ValueKind.STRING)
    assert q.get_sql() == "select 1\nfrom dual\nwhere 1=0\n"
    assert bind(q).calls == []


def test_where_not(sql):
    q = sql.select("1").from_("dual").where(sql.not_(sql.condition("a").eq().value(1)))
    assert q.get_sql() == "select 1\nfrom dual\nwhere not (\n    a = ?\n)\n"


def test_where_rejects_none(sql):
    with pytest.raises(BuilderUsageError):
        sql.select("a").from_("t").where(None)


def test_debug_select(debug_sql):
    q = debug_sql.select("a").from_("t").where("b").eq().value("x")
    assert q.get_sql() == "select a\nfrom t\nwhere b = ?  /* x */\n"
