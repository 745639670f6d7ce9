# Re-export common types
from .diagnostics import OverrideReport, Relaxation
from .klass import ClassRecord
from .override import OverrideEntry, OverrideStudent
from .partition import Partition
from .stats import SectionStats
from .student import FEMALE, GENDERS, MALE, Student

__all__ = [
    "Student",
    "Partition",
    "SectionStats",
    "Relaxation",
    "OverrideReport",
    "OverrideEntry",
    "OverrideStudent",
    "ClassRecord",
    "MALE",
    "FEMALE",
    "GENDERS",
]
