from __future__ import annotations

import logging
from typing import Callable, List, Tuple

from ..models.diagnostics import OverrideReport
from ..models.override import OverrideEntry, OverrideStudent
from ..models.partition import Partition
from ..models.student import Student

logger = logging.getLogger(__name__)


def _matches(
    student: Student, wanted: OverrideStudent, origin_section_of: Callable[[Student], int]
) -> bool:
    if student.name != wanted.name or student.gender != wanted.gender:
        return False
    if wanted.previous_section:
        return origin_section_of(student) == wanted.previous_section
    return True


def merge_override(
    roster: List[Student],
    entries: List[OverrideEntry],
    section_count: int,
    origin_section_of: Callable[[Student], int] = lambda s: s.origin_section,
) -> Tuple[Partition, OverrideReport, List[str]]:
    """Rebuild a partition from a manually edited layout.

    Each override row claims the first unconsumed roster student with the same
    name and gender (and origin section, when given). Rows naming a section
    outside 1..section_count are ignored. Roster students nobody claimed are
    appended to the emptiest section so the roster is conserved.
    """
    partition = Partition.empty(section_count)
    report = OverrideReport()
    audit: List[str] = []
    used: set[str] = set()

    for entry in entries:
        idx = entry.section - 1
        if not 0 <= idx < section_count:
            logger.warning(f"Override names section {entry.section} outside 1..{section_count}")
            report.unmatched.extend(
                f"{entry.section}:{w.name}:{w.gender}" for w in entry.students
            )
            continue
        for wanted in entry.students:
            found = next(
                (s for s in roster if s.id not in used and _matches(s, wanted, origin_section_of)),
                None,
            )
            if found is None:
                report.unmatched.append(f"{entry.section}:{wanted.name}:{wanted.gender}")
                logger.warning(f"Override row {wanted.name}/{wanted.gender} matches no student")
                continue
            partition.place(idx, found)
            used.add(found.id)

    for student in roster:
        if student.id in used:
            continue
        target = partition.least_populated()
        partition.place(target, student)
        used.add(student.id)
        report.backfilled.append(student.id)
        audit.append(f"Override backfill {student.name} -> section {target + 1}")

    audit.append(
        f"Applied override: {len(roster) - len(report.backfilled)} placed, "
        f"{len(report.backfilled)} backfilled, {len(report.unmatched)} unmatched rows"
    )
    return partition, report, audit
