from __future__ import annotations

import json
from pathlib import Path

from sectioner.models import Partition, Student
from sectioner.validate.checks import is_conserved, validate_partition
from sectioner.validate.report import format_validation_report, write_validation_report


def _s(sid: str, name: str, gender: str = "M", group: str | None = None, special: bool = False) -> Student:
    return Student(id=sid, name=name, gender=gender, group_id=group, is_special_needs=special)


def test_conservation_detects_missing_duplicated_unknown() -> None:
    a, b, c = _s("a", "김하나"), _s("b", "이두리"), _s("c", "박세찌")
    stranger = _s("z", "최넷")
    report = validate_partition([a, b, c], Partition.from_sections([[a, a], [stranger]]))
    assert report["conservation"] == {"missing": ["b", "c"], "duplicated": ["a"], "unknown": ["z"]}
    assert not is_conserved(report)


def test_violations_are_excused_for_exempt_and_special_students() -> None:
    a = _s("a", "김민수", group="G1")
    b = _s("b", "이민수")
    c = _s("c", "박철수", group="G1", special=True)
    d = _s("d", "최지우", "F", group="G2")
    e = _s("e", "정지우", "F", group="G2")
    p = Partition.from_sections([[a, b, c], [d, e]])
    report = validate_partition([a, b, c, d, e], p, exempt_ids={"b"})
    assert report["violations_by_rule"] == {
        "given_name": ["1:김민수/이민수"],
        "group": ["1:김민수/박철수", "2:최지우/정지우"],
    }
    assert report["unexplained_violations"] == ["group 2:최지우/정지우"]
    assert is_conserved(report)
    assert report["size_spread"] == 1
    assert report["gender_ratio_spread"] == 1.0


def test_report_formatting_and_writing(tmp_path: Path) -> None:
    a = _s("a", "김하나")
    report = validate_partition([a], Partition.from_sections([[a], []]))
    text = format_validation_report(report)
    assert "conservation: missing=0, duplicated=0, unknown=0" in text
    assert "size_spread: 1" in text
    path = write_validation_report(report, tmp_path / "out")
    assert json.loads(path.read_text(encoding="utf-8"))["section_sizes"] == [1, 0]
