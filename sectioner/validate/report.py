from __future__ import annotations

import json
from pathlib import Path
from typing import Dict


def write_validation_report(report: Dict[str, object], outputs_dir: Path) -> Path:
    outputs_dir.mkdir(parents=True, exist_ok=True)
    path = outputs_dir / "validation.json"
    with path.open("w", encoding="utf-8") as f:
        json.dump(report, f, indent=2, ensure_ascii=False)
    return path


def format_validation_report(report: Dict[str, object]) -> str:
    lines: list[str] = []
    cons = report.get("conservation", {})
    if isinstance(cons, dict):
        lines.append(
            "conservation: "
            + ", ".join(f"{k}={len(cons.get(k, []))}" for k in ("missing", "duplicated", "unknown"))
        )
    violations = report.get("violations_by_rule", {})
    lines.append("violations_by_rule:")
    if isinstance(violations, dict):
        for k, v in violations.items():
            lines.append(f"  - {k}: {len(v)}")
    unexplained = report.get("unexplained_violations", [])
    lines.append(f"unexplained_violations: {len(unexplained)}")
    lines.append(f"section_sizes: {report.get('section_sizes')}")
    lines.append(f"size_spread: {report.get('size_spread')}")
    lines.append(f"gender_ratio_spread: {report.get('gender_ratio_spread')}")
    return "\n".join(lines)
