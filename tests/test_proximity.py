import pathlib
import random
import sys

# Ensure src package is on path
sys.path.append(str(pathlib.Path(__file__).resolve().parents[1] / "src"))

from seat_layout.layout import TableConfig, build_table
from seat_layout.models import GuestRef, ProximityRule, RectangleSides, RuleKind, TableShape
from seat_layout.proximity import detect_violations, summarize_violations, violations_by_table, violations_for_guest

GUESTS = {gid: GuestRef(id=gid, name=gid.upper()) for gid in ("g1", "g2", "g3", "g4", "g5")}


def together(a, b, rid="r"):
    return ProximityRule(id=rid, kind=RuleKind.SIT_TOGETHER, guest_a=a, guest_b=b)


def apart(a, b, rid="r"):
    return ProximityRule(id=rid, kind=RuleKind.SIT_APART, guest_a=a, guest_b=b)


def seat(table, position, guest_id):
    table.seat_at(position).assigned_guest_id = guest_id


def round_table(table_id="T1", count=8, number=1):
    return build_table(TableConfig(id=table_id, count=count), number)


def pairs(violations):
    return {(v.kind, v.pair) for v in violations}


def test_together_not_adjacent_reports_one_violation():
    table = round_table()
    seat(table, 0, "g1")
    seat(table, 4, "g2")
    violations = detect_violations([table], [together("g1", "g2")], GUESTS)
    assert len(violations) == 1
    v = violations[0]
    assert v.kind is RuleKind.SIT_TOGETHER
    assert (v.guest_a, v.guest_b) == ("g1", "g2")
    assert v.seat_ids == ("T1-seat-1", "T1-seat-5")
    assert "G1 and G2 should sit together" in v.reason


def test_rule_order_does_not_change_the_pair():
    table = round_table()
    seat(table, 0, "g2")
    seat(table, 4, "g1")
    forward = detect_violations([table], [together("g1", "g2")], GUESTS)
    backward = detect_violations([table], [together("g2", "g1")], GUESTS)
    both = detect_violations([table], [together("g1", "g2"), together("g2", "g1", "r2")], GUESTS)
    assert forward == backward == both
    assert len(both) == 1


def test_together_adjacent_is_satisfied():
    table = round_table()
    seat(table, 0, "g1")
    seat(table, 7, "g2")
    assert detect_violations([table], [together("g1", "g2")], GUESTS) == []


def test_together_at_different_tables():
    t1, t2 = round_table("T1"), round_table("T2", number=2)
    seat(t1, 0, "g1")
    seat(t2, 0, "g2")
    violations = detect_violations([t1, t2], [together("g1", "g2")], GUESTS)
    assert len(violations) == 1
    assert "different tables" in violations[0].reason


def test_apart_adjacent_reports_one_violation():
    table = round_table()
    seat(table, 2, "g3")
    seat(table, 3, "g4")
    violations = detect_violations([table], [apart("g4", "g3")], GUESTS)
    assert len(violations) == 1
    assert violations[0].kind is RuleKind.SIT_APART
    assert (violations[0].guest_a, violations[0].guest_b) == ("g3", "g4")
    assert violations[0].table_id == "T1"


def test_apart_across_a_rectangle_counts_opposite_seats():
    table = build_table(TableConfig(id="R", shape=TableShape.RECTANGLE,
                                    sides=RectangleSides(top=2, right=0, bottom=2, left=0)))
    seat(table, 0, "g1")
    seat(table, 3, "g2")
    assert len(detect_violations([table], [apart("g1", "g2")], GUESTS)) == 1


def test_unseated_guests_never_violate():
    table = round_table()
    seat(table, 0, "g1")
    rules = [together("g1", "g2"), apart("g1", "g3")]
    assert detect_violations([table], rules, GUESTS) == []


def test_guests_missing_from_registry_are_ignored():
    table = round_table()
    seat(table, 0, "g1")
    seat(table, 1, "stranger")
    assert detect_violations([table], [apart("g1", "stranger")], GUESTS) == []
    assert len(detect_violations([table], [apart("g1", "stranger")])) == 1


def test_every_partner_is_checked():
    table = round_table()
    seat(table, 0, "g1")
    seat(table, 1, "g2")
    seat(table, 7, "g3")
    seat(table, 4, "g4")
    seat(table, 5, "g5")
    rules = [together("g1", other, other) for other in ("g2", "g3", "g4", "g5")]
    violations = detect_violations([table], rules, GUESTS)
    assert {v.guest_b for v in violations} == {"g4", "g5"}


def test_self_rule_is_ignored():
    table = round_table()
    seat(table, 0, "g1")
    assert detect_violations([table], [apart("g1", "g1")], GUESTS) == []


def test_violations_do_not_depend_on_input_order():
    rng = random.Random(7)
    t1 = round_table("T1", 8, 1)
    t2 = build_table(TableConfig(id="T2", shape=TableShape.RECTANGLE,
                                 sides=RectangleSides(top=2, right=1, bottom=2, left=1)), 2)
    seat(t1, 0, "g1")
    seat(t1, 1, "g2")
    seat(t1, 5, "g3")
    seat(t2, 0, "g4")
    seat(t2, 4, "g5")
    rules = [together("g1", "g3", "a"), apart("g1", "g2", "b"), apart("g4", "g5", "c"), together("g5", "g2", "d")]
    expected = pairs(detect_violations([t1, t2], rules, GUESTS))
    assert len(expected) == 4

    for _ in range(10):
        tables = [t1.copy(), t2.copy()]
        for t in tables:
            rng.shuffle(t.seats)
        rng.shuffle(tables)
        shuffled_rules = list(rules)
        rng.shuffle(shuffled_rules)
        assert pairs(detect_violations(tables, shuffled_rules, GUESTS)) == expected


def test_summary_counts_per_table():
    t1, t2 = round_table("T1", 8, 1), round_table("T2", 6, 2)
    seat(t1, 0, "g1")
    seat(t1, 1, "g2")
    seat(t2, 0, "g3")
    t2.seat_at(0).locked = True
    violations = detect_violations([t1, t2], [apart("g1", "g2"), together("g3", "g1", "x")], GUESTS)
    stats = summarize_violations([t2, t1], violations)
    assert [s["table"] for s in stats] == ["T1", "T2"]
    assert stats[0]["seated"] == 2 and stats[0]["seats"] == 8
    assert stats[0]["sit_apart"] == 1
    assert stats[0]["sit_together"] == 1
    assert stats[1]["locked"] == 1 and stats[1]["total"] == 0


def test_filter_by_guest_and_by_table():
    t1, t2 = round_table("T1", 8, 1), round_table("T2", 6, 2)
    seat(t1, 0, "g1")
    seat(t1, 1, "g2")
    seat(t2, 0, "g3")
    seat(t2, 1, "g4")
    violations = detect_violations([t1, t2], [apart("g1", "g2"), apart("g4", "g3", "x")], GUESTS)
    assert [v.pair for v in violations_for_guest(violations, "g3")] == [frozenset(("g3", "g4"))]
    assert violations_for_guest(violations, "g5") == []
    by_table = violations_by_table(violations)
    assert sorted(by_table) == ["T1", "T2"]
    assert [(v.guest_a, v.guest_b) for v in by_table["T2"]] == [("g3", "g4")]
