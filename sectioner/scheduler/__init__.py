from .gate import ConstraintGate, Placement, can_place, can_swap, drop_family_name
from .pipeline import DistributionResult, distribute, validate_inputs
from .stats import calculate_stats

__all__ = [
    "ConstraintGate",
    "Placement",
    "can_place",
    "can_swap",
    "drop_family_name",
    "DistributionResult",
    "distribute",
    "validate_inputs",
    "calculate_stats",
]
