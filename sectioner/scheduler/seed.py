from __future__ import annotations

import logging
from collections import defaultdict
from typing import Callable, Dict, List, Tuple

from ..models.diagnostics import Relaxation
from ..models.partition import Partition
from ..models.student import FEMALE, Student
from .gate import ConstraintGate

logger = logging.getLogger(__name__)


def origin_section(student: Student) -> int:
    return student.origin_section


def split_roster(
    roster: List[Student],
    origin_section_of: Callable[[Student], int] = origin_section,
) -> Tuple[List[Student], Dict[int, List[Student]]]:
    """Defer special-needs students and group the rest by origin section.

    Origin groups come back sorted by label; a missing or zero label counts as 1.
    """
    special = [s for s in roster if s.is_special_needs]
    groups: Dict[int, List[Student]] = defaultdict(list)
    for s in roster:
        if s.is_special_needs:
            continue
        groups[origin_section_of(s) or 1].append(s)
    return special, dict(sorted(groups.items()))


def rank_order(students: List[Student]) -> List[Student]:
    # Stable: unranked keep their relative order behind every ranked student
    return sorted(students, key=lambda s: (not s.is_ranked, s.rank or 0))


def cohort_offsets(group_index: int, section_count: int) -> Tuple[int, int]:
    return group_index % section_count, (group_index + 1) % section_count


def circular_distance(a: int, b: int, n: int) -> int:
    d = abs(a - b)
    return min(d, n - d)


def _relax(
    student: Student,
    stage: str,
    target: int,
    partition: Partition,
    gate: ConstraintGate,
    relaxations: List[Relaxation],
    audit: List[str],
) -> None:
    rule = gate.can_place(student, target, partition).violated_rule
    relaxations.append(Relaxation(student.id, student.name, stage, target + 1, rule))
    audit.append(f"Relaxed {student.name} ({student.id}) -> section {target + 1} [{rule or 'none'}]")
    logger.warning(
        f"No section passes the gate for {student.name} ({student.id}); "
        f"placed in least-populated section {target + 1} (rule: {rule})"
    )


def place_cohort(
    partition: Partition,
    cohort: List[Student],
    offset: int,
    gate: ConstraintGate,
    relaxations: List[Relaxation],
    audit: List[str],
) -> None:
    n = len(partition)
    pending: List[Tuple[Student, int]] = []

    # Phase A: offset round-robin
    for i, student in enumerate(cohort):
        preferred = (offset + i) % n
        if gate.can_place(student, preferred, partition):
            partition.place(preferred, student)
            logger.debug(f"Seed {student.name} -> section {preferred + 1}")
        else:
            pending.append((student, preferred))

    # Phase B: emptiest allowed section, nearest to the preferred one
    for student, preferred in pending:
        allowed = gate.allowed_sections(student, partition)
        if allowed:
            target = min(
                allowed,
                key=lambda i: (len(partition.members(i)), circular_distance(i, preferred, n), i),
            )
            audit.append(
                f"Deferred {student.name} from section {preferred + 1} to section {target + 1}"
            )
        else:
            target = partition.least_populated()
            _relax(student, "seed", target, partition, gate, relaxations, audit)
        partition.place(target, student)


def seed_partition(
    partition: Partition,
    groups: Dict[int, List[Student]],
    gate: ConstraintGate,
    relaxations: List[Relaxation],
) -> Tuple[Partition, List[str]]:
    audit: List[str] = []
    n = len(partition)

    for g, (label, students) in enumerate(groups.items()):
        male_offset, female_offset = cohort_offsets(g, n)
        males = rank_order([s for s in students if s.is_male])
        females = rank_order([s for s in students if s.gender == FEMALE])
        place_cohort(partition, males, male_offset, gate, relaxations, audit)
        place_cohort(partition, females, female_offset, gate, relaxations, audit)
        audit.append(
            f"Seeded origin section {label}: {len(males)} M from section {male_offset + 1}, "
            f"{len(females)} F from section {female_offset + 1}"
        )

    # Unranked stragglers not reached by any cohort go to the emptiest section
    placed = partition.placed_ids()
    for students in groups.values():
        for student in students:
            if student.is_ranked or student.id in placed:
                continue
            target = partition.least_populated()
            if not gate.can_place(student, target, partition):
                _relax(student, "unranked", target, partition, gate, relaxations, audit)
            partition.place(target, student)
            placed.add(student.id)

    logger.info(f"Seeded {len(placed)} students into {n} sections: sizes {partition.sizes()}")
    return partition, audit
