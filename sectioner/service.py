from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List

from .data.importer import parse_pasted_roster
from .data.store import RosterStore
from .errors import InputValidationError
from .models.override import OverrideEntry
from .render.payload import preview_payload, section_lists
from .scheduler.pipeline import DistributionResult, distribute
from .settings import EngineSettings

logger = logging.getLogger(__name__)


@dataclass
class ServiceResult:
    result: DistributionResult
    preview: bool
    new_class_id: int | None = None
    message: str = ""
    warnings: List[str] = field(default_factory=list)

    def as_dict(self) -> Dict[str, object]:
        out: Dict[str, object] = {
            "success": True,
            "stats": preview_payload(self.result.stats, self.result.partition),
            "message": self.message,
        }
        if self.new_class_id is not None:
            out["newClassId"] = self.new_class_id
            out["studentLists"] = section_lists(self.result.partition)
        if self.warnings:
            out["warnings"] = self.warnings
        return out


def _require_id(value: object, label: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise InputValidationError(f"{label} must be a positive integer, got {value!r}")
    return value


def _warnings(result: DistributionResult) -> List[str]:
    out = [
        f"relaxed {r.rule or 'none'}: {r.student_name} -> section {r.section}"
        for r in result.relaxations
    ]
    if result.override_report is not None:
        out += [f"override row unmatched: {u}" for u in result.override_report.unmatched]
        out += [f"override backfilled student {b}" for b in result.override_report.backfilled]
    return out


def distribute_class(
    store: RosterStore,
    class_id: int,
    section_count: int,
    *,
    preview: bool = True,
    override: List[OverrideEntry] | None = None,
    school_id: int | None = None,
    settings: EngineSettings | None = None,
) -> ServiceResult:
    """Run a distribution for a stored class; persist it unless previewing.

    A preview never writes and always shows the computed partition; the
    override is honoured on commit only.
    """
    _require_id(class_id, "classId")
    _require_id(section_count, "newSectionCount")

    store.fetch_class(class_id, school_id)
    roster = store.fetch_roster(class_id)
    if not roster:
        raise InputValidationError("No students found")

    result = distribute(
        roster,
        section_count,
        override=None if preview else override,
        settings=settings,
    )
    warnings = _warnings(result)
    for w in warnings:
        logger.warning(w)

    if preview:
        return ServiceResult(result, True, message="preview", warnings=warnings)

    new_id = store.commit_distribution(class_id, result.partition, school_id)
    return ServiceResult(
        result,
        False,
        new_class_id=new_id,
        message=f"Distributed into {section_count} sections",
        warnings=warnings,
    )


def import_section(
    store: RosterStore,
    class_id: int,
    section: int,
    text: str,
    settings: EngineSettings | None = None,
) -> int:
    _require_id(class_id, "classId")
    _require_id(section, "section")
    settings = settings or EngineSettings()
    students = parse_pasted_roster(text, origin_section=section, group_limit=settings.group_limit)
    return store.save_section(class_id, section, students)


def link(store: RosterStore, parent_class_id: int, child_class_id: int, school_id: int | None = None) -> None:
    _require_id(parent_class_id, "parentClassId")
    _require_id(child_class_id, "childClassId")
    store.link_classes(parent_class_id, child_class_id, school_id)
