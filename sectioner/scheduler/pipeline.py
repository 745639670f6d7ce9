from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, List

from ..errors import InputValidationError
from ..models.diagnostics import OverrideReport, Relaxation
from ..models.override import OverrideEntry
from ..models.partition import Partition
from ..models.stats import SectionStats
from ..models.student import GENDERS, Student
from ..settings import EngineSettings
from .fill import place_special_needs
from .gate import ConstraintGate, drop_family_name
from .override import merge_override
from .repair import repair_partition
from .seed import origin_section, seed_partition, split_roster
from .stats import calculate_stats

logger = logging.getLogger(__name__)


@dataclass
class DistributionResult:
    partition: Partition
    stats: List[SectionStats]
    relaxations: List[Relaxation] = field(default_factory=list)
    override_report: OverrideReport | None = None
    audit: List[str] = field(default_factory=list)

    @property
    def relaxed_ids(self) -> set[str]:
        return {r.student_id for r in self.relaxations}


def validate_inputs(roster: List[Student], target_section_count: int) -> None:
    if isinstance(target_section_count, bool) or not isinstance(target_section_count, int):
        raise InputValidationError(
            f"target section count must be an integer, got {target_section_count!r}"
        )
    if target_section_count < 2:
        raise InputValidationError(
            f"target section count must be at least 2, got {target_section_count}"
        )
    if not roster:
        raise InputValidationError("roster is empty")
    seen: set[str] = set()
    for s in roster:
        if s.gender not in GENDERS:
            raise InputValidationError(f"student {s.id} has gender {s.gender!r}, expected M or F")
        if s.id in seen:
            raise InputValidationError(f"duplicate student id {s.id!r}")
        seen.add(s.id)


def distribute(
    roster: List[Student],
    target_section_count: int,
    *,
    origin_section_of: Callable[[Student], int] = origin_section,
    override: List[OverrideEntry] | None = None,
    settings: EngineSettings | None = None,
    given_name_of: Callable[[str], str] = drop_family_name,
) -> DistributionResult:
    """Partition ``roster`` into ``target_section_count`` sections.

    Pipeline: split roster -> seed -> {count, gender, count} repair rounds ->
    special-needs placement -> statistics. A manual override, when given,
    replaces the computed partition outright and skips every gated stage.
    Deterministic for a given roster order.
    """
    validate_inputs(roster, target_section_count)
    settings = settings or EngineSettings()

    if override is not None:
        partition, report, audit = merge_override(
            roster, override, target_section_count, origin_section_of
        )
        logger.info(f"Override applied: sizes {partition.sizes()}")
        return DistributionResult(
            partition=partition,
            stats=calculate_stats(partition),
            override_report=report,
            audit=["Override:"] + audit,
        )

    gate = ConstraintGate(given_name_of)
    relaxations: List[Relaxation] = []
    partition = Partition.empty(target_section_count)

    special, groups = split_roster(roster, origin_section_of)
    partition, seed_audit = seed_partition(partition, groups, gate, relaxations)
    partition, repair_audit = repair_partition(partition, gate, settings)
    partition, fill_audit = place_special_needs(partition, special)

    if relaxations:
        logger.warning(f"{len(relaxations)} students placed with a relaxed constraint")
    logger.info(f"Distributed {len(roster)} students: sizes {partition.sizes()}")
    return DistributionResult(
        partition=partition,
        stats=calculate_stats(partition),
        relaxations=relaxations,
        audit=(
            ["Seeded placements:"]
            + seed_audit
            + ["", "Repairs:"]
            + repair_audit
            + ["", "Special-needs:"]
            + fill_audit
        ),
    )
