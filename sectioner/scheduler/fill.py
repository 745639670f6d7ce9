from __future__ import annotations

import logging
from typing import List, Tuple

from ..models.partition import Partition
from ..models.student import Student

logger = logging.getLogger(__name__)


def place_special_needs(
    partition: Partition, special: List[Student]
) -> Tuple[Partition, List[str]]:
    # Exempt from the gate: each goes to the emptiest section, first on ties
    audit: List[str] = []
    for student in special:
        target = partition.least_populated()
        partition.place(target, student)
        audit.append(f"Special-needs {student.name} -> section {target + 1}")
        logger.info(f"Special-needs {student.name} ({student.id}) -> section {target + 1}")
    return partition, audit
