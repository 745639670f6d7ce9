from __future__ import annotations

from typing import Dict, List

from ..models.partition import Partition
from ..models.stats import SectionStats
from ..models.student import Student


def student_payload(s: Student) -> Dict[str, object]:
    return {
        "name": s.name,
        "gender": s.gender,
        "is_problem_student": s.is_problem,
        "is_special_class": s.is_special_needs,
        "group_name": s.group_id,
        "rank": s.rank,
        "previous_section": s.origin_section,
    }


def preview_payload(stats: List[SectionStats], partition: Partition) -> List[Dict[str, object]]:
    # Shape consumed by the drag-and-drop editor; round-trips into an override
    out: List[Dict[str, object]] = []
    for st, section in zip(stats, partition.sections):
        row = st.as_dict()
        row["students"] = [student_payload(s) for s in section]
        out.append(row)
    return out


def section_lists(partition: Partition) -> List[Dict[str, object]]:
    return [
        {"section": idx + 1, "students": [student_payload(s) for s in section]}
        for idx, section in enumerate(partition.sections)
    ]
