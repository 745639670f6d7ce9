from dataclasses import dataclass, field
from typing import List


@dataclass(frozen=True)
class OverrideStudent:
    name: str
    gender: str
    previous_section: int | None = None


@dataclass
class OverrideEntry:
    section: int  # 1-based
    students: List[OverrideStudent] = field(default_factory=list)
