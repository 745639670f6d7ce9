from __future__ import annotations

import math
from typing import List

from ..models.partition import Partition
from ..models.stats import SectionStats
from ..models.student import FEMALE, Student


def round1(value: float) -> float:
    # Half-up to one decimal
    return math.floor(value * 10 + 0.5) / 10


def section_stats(index: int, students: List[Student]) -> SectionStats:
    ranks = [s.rank for s in students if s.is_ranked and not s.is_special_needs]
    if ranks:
        mean = sum(ranks) / len(ranks)
        avg_rank: float | None = round1(mean)
    else:
        mean = 0.0
        avg_rank = None
    if len(ranks) > 1:
        variance = sum((r - mean) ** 2 for r in ranks) / len(ranks)
        std_dev = round1(math.sqrt(variance))
    else:
        std_dev = 0.0
    return SectionStats(
        section=index + 1,
        total=len(students),
        male=sum(1 for s in students if s.is_male),
        female=sum(1 for s in students if s.gender == FEMALE),
        problem=sum(1 for s in students if s.is_problem),
        special=sum(1 for s in students if s.is_special_needs),
        avg_rank=avg_rank,
        std_dev=std_dev,
    )


def calculate_stats(partition: Partition) -> List[SectionStats]:
    return [section_stats(i, list(section)) for i, section in enumerate(partition.sections)]
