import csv
import pathlib
import sys

# Ensure src package is on path
sys.path.append(str(pathlib.Path(__file__).resolve().parents[1] / "src"))

from seat_layout import cli, csv_loader
from seat_layout.coordinator import SeatAssignmentCoordinator, World
from seat_layout.models import RuleKind

DATA_DIR = pathlib.Path(__file__).parent / "data"


def test_full_flow():
    guests, rules, configs = csv_loader.load_all(
        DATA_DIR / "guests.csv", DATA_DIR / "rules.csv", DATA_DIR / "tables.csv"
    )
    coordinator = SeatAssignmentCoordinator(World(guests={g.id: g for g in guests}, rules=rules))
    for config in configs:
        assert coordinator.create_table(config).success

    # opposite numbering on the head table pairs seats across it
    head = coordinator.table("T2")
    assert [s.seat_number for s in head.seats] == [1, 3, 5, 7, 6, 4, 2, 8]

    for row in csv_loader.load_assignments(DATA_DIR / "assignments.csv"):
        seat = next(s for s in coordinator.table(row.table_id).seats if s.seat_number == row.seat_number)
        coordinator.assign(row.table_id, seat.id, row.guest_id)

    # every guest sits at most once
    seated = [s.assigned_guest_id for _, s in coordinator.world.seats() if s.assigned_guest_id]
    assert len(seated) == len(set(seated)) == 6

    violations = coordinator.violations
    assert [(v.kind, v.guest_a, v.guest_b) for v in violations] == [
        (RuleKind.SIT_APART, "g3", "g4"),
        (RuleKind.SIT_TOGETHER, "g5", "g6"),
    ]


def test_cli(tmp_path, capsys):
    out_seats = tmp_path / "out" / "seats.csv"
    out_report = tmp_path / "out" / "report.csv"
    code = cli.main([
        "--guests", str(DATA_DIR / "guests.csv"),
        "--rules", str(DATA_DIR / "rules.csv"),
        "--tables", str(DATA_DIR / "tables.csv"),
        "--assignments", str(DATA_DIR / "assignments.csv"),
        "--out-seats", str(out_seats),
        "--out-report", str(out_report),
    ])
    printed = capsys.readouterr().out.splitlines()

    # g6 (external) on a host-only seat
    rejected = [line for line in printed if line.startswith("[REJECTED]")]
    assert len(rejected) == 1
    assert rejected[0].startswith("[REJECTED] g6 -> T2#5")
    assert code == 1

    assert len([line for line in printed if line.startswith("[VIOLATION]")]) == 2
    reports = [line for line in printed if line.startswith("[REPORT]")]
    assert reports[0].startswith("[REPORT] T1 label=Table 1 seated=4/8 locked=1")
    assert "together=1" in reports[1]

    with out_seats.open(newline="") as f:
        rows = list(csv.DictReader(f))
    assert len(rows) == 16
    assert rows[0]["adjacent"] == "2|8"
    assert rows[3]["locked"] == "true"

    with out_report.open(newline="") as f:
        report = list(csv.DictReader(f))
    assert [r["kind"] for r in report] == ["sit-apart", "sit-together"]
    assert report[0]["seats"] == "T1-seat-3|T1-seat-4"


def test_cli_without_assignments(tmp_path, capsys):
    code = cli.main([
        "--guests", str(DATA_DIR / "guests.csv"),
        "--rules", str(DATA_DIR / "rules.csv"),
        "--tables", str(DATA_DIR / "tables.csv"),
    ])
    printed = capsys.readouterr().out
    assert code == 0
    assert "[VIOLATION]" not in printed
    assert "[REPORT] T2 label=Head Table seated=0/8" in printed
