from dataclasses import dataclass, field
from typing import List


@dataclass(frozen=True)
class Relaxation:
    """A student placed by occupancy alone because no section passed the gate."""

    student_id: str
    student_name: str
    stage: str  # seed, unranked
    section: int  # 1-based
    rule: str | None  # rule broken in the chosen section, if any


@dataclass
class OverrideReport:
    unmatched: List[str] = field(default_factory=list)  # "section:name:gender"
    backfilled: List[str] = field(default_factory=list)  # student ids
