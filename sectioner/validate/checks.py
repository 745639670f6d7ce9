from __future__ import annotations

from collections import Counter, defaultdict
from typing import Callable, Dict, Iterable, List

from ..models.partition import Partition
from ..models.student import Student
from ..scheduler.gate import RULE_GIVEN_NAME, RULE_GROUP, drop_family_name
from ..scheduler.repair import male_ratios


def validate_partition(
    roster: List[Student],
    partition: Partition,
    exempt_ids: Iterable[str] = (),
    given_name_of: Callable[[str], str] = drop_family_name,
) -> Dict[str, object]:
    report: Dict[str, object] = {}

    # Conservation
    roster_ids = Counter(s.id for s in roster)
    placed_ids = Counter(s.id for s in partition.students())
    report["conservation"] = {
        "missing": sorted(i for i in roster_ids if i not in placed_ids),
        "duplicated": sorted(i for i, c in placed_ids.items() if c > 1),
        "unknown": sorted(i for i in placed_ids if i not in roster_ids),
    }

    # Hard constraints, pairwise per section
    exempt = set(exempt_ids)
    violations_by_rule: Dict[str, List[str]] = defaultdict(list)
    unexplained: List[str] = []
    for idx, section in enumerate(partition.sections):
        for i, a in enumerate(section):
            for b in section[i + 1 :]:
                rule = None
                if a.group_id and a.group_id == b.group_id:
                    rule = RULE_GROUP
                elif given_name_of(a.name) == given_name_of(b.name):
                    rule = RULE_GIVEN_NAME
                if rule is None:
                    continue
                label = f"{idx + 1}:{a.name}/{b.name}"
                violations_by_rule[rule].append(label)
                excused = (
                    a.is_special_needs
                    or b.is_special_needs
                    or a.id in exempt
                    or b.id in exempt
                )
                if not excused:
                    unexplained.append(f"{rule} {label}")
    report["violations_by_rule"] = dict(violations_by_rule)
    report["unexplained_violations"] = unexplained

    sizes = partition.sizes()
    report["section_sizes"] = sizes
    report["size_spread"] = max(sizes) - min(sizes) if sizes else 0
    ratios = male_ratios(partition)
    report["gender_ratio_spread"] = round(max(ratios) - min(ratios), 3) if ratios else 0.0
    return report


def is_conserved(report: Dict[str, object]) -> bool:
    cons = report.get("conservation", {})
    return isinstance(cons, dict) and not any(cons.get(k) for k in ("missing", "duplicated", "unknown"))
