from __future__ import annotations

import json
from pathlib import Path

import pytest

from sectioner.data.loader import load_override, load_roster, override_from_payload
from sectioner.errors import InputValidationError


def test_load_json_roster_accepts_store_column_names(tmp_path: Path) -> None:
    path = tmp_path / "roster.json"
    rows = [
        {"id": 7, "name": "김하나", "gender": "f", "group_name": "그룹1", "rank": "3",
         "is_problem_student": 1, "is_special_class": 0, "section_number": 2},
        {"name": "이두리", "gender": "M"},
    ]
    path.write_text(json.dumps(rows, ensure_ascii=False), encoding="utf-8")
    a, b = load_roster(path)
    assert (a.id, a.gender, a.group_id, a.rank, a.is_problem, a.origin_section) == (
        "7", "F", "그룹1", 3, True, 2,
    )
    assert (b.id, b.rank, b.group_id, b.origin_section) == ("2", None, None, 1)


def test_load_tsv_roster_uses_given_section(tmp_path: Path) -> None:
    path = tmp_path / "paste.tsv"
    path.write_text("김하나\t여\tfalse\tfalse\t1\t1\n", encoding="utf-8")
    (s,) = load_roster(path, section=4)
    assert s.origin_section == 4
    assert s.group_id == "그룹1"


def test_bad_roster_payloads(tmp_path: Path) -> None:
    path = tmp_path / "roster.json"
    path.write_text(json.dumps({"name": "x"}), encoding="utf-8")
    with pytest.raises(InputValidationError):
        load_roster(path)
    path.write_text(json.dumps([{"gender": "M"}]), encoding="utf-8")
    with pytest.raises(InputValidationError):
        load_roster(path)


def test_load_override(tmp_path: Path) -> None:
    path = tmp_path / "override.json"
    payload = [{"section": 2, "students": [{"name": "김하나", "gender": "F", "previous_section": 1}]}]
    path.write_text(json.dumps(payload, ensure_ascii=False), encoding="utf-8")
    (entry,) = load_override(path)
    assert entry.section == 2
    assert entry.students[0].previous_section == 1


@pytest.mark.parametrize(
    "payload",
    [{"section": 1}, [{"students": []}], [{"section": "x", "students": []}], [{"section": 1, "students": [{}]}]],
)
def test_malformed_override_is_rejected(payload: object) -> None:
    with pytest.raises(InputValidationError):
        override_from_payload(payload)


def test_text_flags_follow_paste_rules(tmp_path: Path) -> None:
    path = tmp_path / "roster.json"
    rows = [
        {"name": "김하나", "gender": "F", "is_problem": "0", "is_special_needs": "false"},
        {"name": "이두리", "gender": "M", "is_problem": "문제", "is_special_needs": "true"},
        {"name": "박세찌", "gender": "M", "is_problem_student": True, "is_special_class": "1"},
    ]
    path.write_text(json.dumps(rows, ensure_ascii=False), encoding="utf-8")
    a, b, c = load_roster(path)
    assert (a.is_problem, a.is_special_needs) == (False, False)
    assert (b.is_problem, b.is_special_needs) == (True, True)
    assert (c.is_problem, c.is_special_needs) == (True, True)


def test_non_scalar_flag_is_rejected(tmp_path: Path) -> None:
    path = tmp_path / "roster.json"
    path.write_text(json.dumps([{"name": "김하나", "gender": "F", "is_problem": [1]}]), encoding="utf-8")
    with pytest.raises(InputValidationError):
        load_roster(path)
