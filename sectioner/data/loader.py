from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List

from ..errors import InputValidationError
from ..models.override import OverrideEntry, OverrideStudent
from ..models.student import Student
from .importer import parse_flag, parse_pasted_roster


def load_json(path: Path) -> Any:
    with path.open("r", encoding="utf-8") as f:
        return json.load(f)


def _optional_int(value: Any) -> int | None:
    if value is None or value == "":
        return None
    return int(value)


def _flag(value: Any, word: str) -> bool:
    # Text flags follow the paste rules, so "0" and "false" stay False
    if isinstance(value, str):
        return parse_flag(value, word)
    if value is None or isinstance(value, (bool, int)):
        return bool(value)
    raise TypeError(f"flag must be a bool, int or string, got {value!r}")


def student_from_dict(row: Dict[str, Any], position: int) -> Student:
    # Accepts the store's column names (group_name, section_number, ...)
    try:
        return Student(
            id=str(row.get("id", position)),
            name=str(row["name"]),
            gender=str(row.get("gender", "")).upper(),
            group_id=row.get("group_name") or row.get("group") or None,
            rank=_optional_int(row.get("rank")),
            is_problem=_flag(row.get("is_problem_student", row.get("is_problem")), "문제"),
            is_special_needs=_flag(
                row.get("is_special_class", row.get("is_special_needs")), "특수"
            ),
            origin_section=int(
                row.get("section_number") or row.get("origin_section") or row.get("section") or 1
            ),
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise InputValidationError(f"bad student record #{position}: {row!r}") from exc


def load_roster(path: Path, section: int = 1, group_limit: int = 10) -> List[Student]:
    """Read a roster from ``.json`` (list of records) or pasted-text ``.tsv``/``.txt``."""
    if path.suffix.lower() == ".json":
        data = load_json(path)
        if not isinstance(data, list):
            raise InputValidationError(f"{path}: expected a list of students")
        return [student_from_dict(row, i + 1) for i, row in enumerate(data)]
    text = path.read_text(encoding="utf-8")
    return parse_pasted_roster(text, origin_section=section, group_limit=group_limit)


def override_from_payload(payload: Any) -> List[OverrideEntry]:
    if not isinstance(payload, list):
        raise InputValidationError("override must be a list of {section, students} objects")
    entries: List[OverrideEntry] = []
    for item in payload:
        try:
            students = [
                OverrideStudent(
                    name=str(s["name"]),
                    gender=str(s["gender"]),
                    previous_section=_optional_int(s.get("previous_section")),
                )
                for s in item.get("students", [])
            ]
            entries.append(OverrideEntry(section=int(item["section"]), students=students))
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            raise InputValidationError(f"bad override entry: {item!r}") from exc
    return entries


def load_override(path: Path) -> List[OverrideEntry]:
    return override_from_payload(load_json(path))
