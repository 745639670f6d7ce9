from __future__ import annotations

import re
from typing import List

from ..models.student import FEMALE, MALE, Student

COLUMNS = ["name", "gender", "problem", "special", "group", "rank"]
HEADER_NAMES = {"이름", "name"}

TEMPLATE = (
    "이름\t성별\t문제아\t특수반\t그룹\t등수\n"
    "홍길동\t남\tfalse\tfalse\t그룹1\t1\n"
    "김영희\t여\tfalse\ttrue\t그룹2\t2\n"
    "이철수\t남\ttrue\tfalse\t그룹1\t3"
)


def template_text() -> str:
    return TEMPLATE


def parse_gender(value: str) -> str:
    v = value.strip()
    if v.upper() == "F" or v in {"여", "여자"}:
        return FEMALE
    return MALE


def parse_flag(value: str, word: str) -> bool:
    v = value.strip()
    return v.lower() == "true" or v == "1" or v == word


def parse_group(value: str, group_limit: int = 10) -> str:
    v = value.strip()
    if re.fullmatch(r"\d+", v):
        v = f"그룹{v}"
    elif v:
        v = re.sub(r"\s", "", v)
    valid = {f"그룹{i}" for i in range(1, group_limit + 1)}
    return v if v in valid else ""


def parse_rank(value: str) -> int | None:
    digits = re.sub(r"\D", "", value)
    return int(digits) if digits else None


def parse_pasted_roster(
    text: str,
    origin_section: int = 1,
    group_limit: int = 10,
    id_prefix: str = "",
) -> List[Student]:
    """Turn spreadsheet rows pasted as tab-separated text into students.

    Columns: name, gender, problem, special, group, rank. Missing trailing
    columns take their empty value. Ids are positional (``<prefix><row>``)
    until the store assigns real ones.
    """
    students: List[Student] = []
    for row in text.splitlines():
        if not row.strip():
            continue
        cols = row.split("\t")
        cols += [""] * (len(COLUMNS) - len(cols))
        if not students and cols[0].strip().lower() in HEADER_NAMES:
            continue
        group = parse_group(cols[4], group_limit)
        students.append(
            Student(
                id=f"{id_prefix}{len(students) + 1}",
                name=cols[0].strip(),
                gender=parse_gender(cols[1]),
                group_id=group or None,
                rank=parse_rank(cols[5]),
                is_problem=parse_flag(cols[2], "문제"),
                is_special_needs=parse_flag(cols[3], "특수"),
                origin_section=origin_section,
            )
        )
    return students
