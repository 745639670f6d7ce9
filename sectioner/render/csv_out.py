from __future__ import annotations

from pathlib import Path
from typing import List

from ..models.partition import Partition

HEADER = "Section,Name,Gender,Problem,Special,Group,Rank,PreviousSection"


def _cell(value: object) -> str:
    text = "" if value is None else str(value)
    if any(ch in text for ch in ',"\n'):
        return '"' + text.replace('"', '""') + '"'
    return text


def csv_sections(partition: Partition) -> str:
    lines: List[str] = [HEADER]
    for idx, section in enumerate(partition.sections):
        for s in section:
            row = [
                idx + 1,
                s.name,
                s.gender,
                int(s.is_problem),
                int(s.is_special_needs),
                s.group_id,
                s.rank,
                s.origin_section,
            ]
            lines.append(",".join(_cell(v) for v in row))
    return "\n".join(lines) + "\n"


def write_csv_sections(text: str, outputs_dir: Path) -> Path:
    outputs_dir.mkdir(parents=True, exist_ok=True)
    path = outputs_dir / "sections.csv"
    with path.open("w", encoding="utf-8") as f:
        f.write(text)
    return path
