"""Seat layout and proximity constraint engine."""
from .models import (
    AdjacencyKind,
    Direction,
    ErrorKind,
    GuestRef,
    OperationResult,
    OrderingPattern,
    ProximityRule,
    RectangleSides,
    RuleKind,
    Seat,
    SeatMode,
    Table,
    TableShape,
    Violation,
)
from .layout import ConfigurationInvalid, SeatLimits, TableConfig, build_table, validate_config
from .ordering import generate_ordering
from .modes import Alternating, Ratio, Repeating, Specific, Uniform, generate_modes, rescale_modes
from .adjacency import adjacency_graph, adjacent_positions_by_kind
from .proximity import detect_violations, violations_by_table, violations_for_guest
from .coordinator import SeatAssignmentCoordinator, World
from .csv_loader import (
    load_guests,
    load_rules,
    load_tables,
    load_assignments,
    load_all,
)

__all__ = [
    "AdjacencyKind",
    "Direction",
    "ErrorKind",
    "GuestRef",
    "OperationResult",
    "OrderingPattern",
    "ProximityRule",
    "RectangleSides",
    "RuleKind",
    "Seat",
    "SeatMode",
    "Table",
    "TableShape",
    "Violation",
    "ConfigurationInvalid",
    "SeatLimits",
    "TableConfig",
    "build_table",
    "validate_config",
    "generate_ordering",
    "Alternating",
    "Ratio",
    "Repeating",
    "Specific",
    "Uniform",
    "generate_modes",
    "rescale_modes",
    "adjacency_graph",
    "adjacent_positions_by_kind",
    "detect_violations",
    "violations_by_table",
    "violations_for_guest",
    "SeatAssignmentCoordinator",
    "World",
    "load_guests",
    "load_rules",
    "load_tables",
    "load_assignments",
    "load_all",
]
