from __future__ import annotations

import logging
from typing import List, Tuple

from ..models.partition import Partition
from ..models.student import FEMALE, MALE
from ..settings import EngineSettings
from .gate import ConstraintGate

logger = logging.getLogger(__name__)


def _first_swap(
    partition: Partition,
    src: int,
    dst: int,
    gate: ConstraintGate,
    src_gender: str | None = None,
    dst_gender: str | None = None,
) -> Tuple[int, int] | None:
    src_members = partition.members(src)
    dst_members = partition.members(dst)
    for i, a in enumerate(src_members):
        if src_gender is not None and a.gender != src_gender:
            continue
        for j, b in enumerate(dst_members):
            if dst_gender is not None and b.gender != dst_gender:
                continue
            if gate.can_swap(a, src, b, dst, partition):
                return i, j
    return None


def rebalance_counts(
    partition: Partition,
    gate: ConstraintGate,
    max_iterations: int = 50,
) -> Tuple[int, List[str]]:
    """Move or swap students until section sizes differ by at most one.

    Returns the number of changes made and an audit trail.
    """
    audit: List[str] = []
    changes = 0
    for _ in range(max_iterations):
        sizes = partition.sizes()
        if max(sizes) - min(sizes) <= 1:
            break
        max_idx = sizes.index(max(sizes))
        min_idx = sizes.index(min(sizes))
        if max_idx == min_idx:
            break

        moved = False
        members = partition.members(max_idx)
        for pos in range(len(members) - 1, -1, -1):
            if gate.can_place(members[pos], min_idx, partition):
                s = partition.move(max_idx, pos, min_idx)
                audit.append(f"Count: moved {s.name} {max_idx + 1} -> {min_idx + 1}")
                moved = True
                break

        if not moved:
            pair = _first_swap(partition, max_idx, min_idx, gate)
            if pair is not None:
                i, j = pair
                a, b = partition.members(max_idx)[i], partition.members(min_idx)[j]
                partition.swap(max_idx, i, min_idx, j)
                audit.append(f"Count: swapped {a.name} ({max_idx + 1}) <-> {b.name} ({min_idx + 1})")
                moved = True

        if not moved:
            logger.info(f"Count rebalance stuck at sizes {sizes}")
            break
        changes += 1
    return changes, audit


def male_ratios(partition: Partition) -> List[float]:
    out: List[float] = []
    for section in partition.sections:
        total = len(section)
        male = sum(1 for s in section if s.is_male)
        out.append(male / total if total > 0 else 0.0)
    return out


def rebalance_gender(
    partition: Partition,
    gate: ConstraintGate,
    max_iterations: int = 50,
    tolerance: float = 0.15,
) -> Tuple[int, List[str]]:
    audit: List[str] = []
    changes = 0
    for _ in range(max_iterations):
        ratios = male_ratios(partition)
        mean = sum(ratios) / len(ratios)
        if max(abs(r - mean) for r in ratios) < tolerance:
            break

        max_idx = 0
        min_idx = 0
        for i in range(1, len(ratios)):
            if ratios[i] > ratios[max_idx]:
                max_idx = i
            if ratios[i] < ratios[min_idx]:
                min_idx = i
        if max_idx == min_idx:
            break

        target = MALE if ratios[max_idx] > mean else FEMALE
        opposite = FEMALE if target == MALE else MALE

        moved = False
        members = partition.members(max_idx)
        for pos in range(len(members) - 1, -1, -1):
            s = members[pos]
            if s.gender == target and gate.can_place(s, min_idx, partition):
                partition.move(max_idx, pos, min_idx)
                audit.append(f"Gender: moved {s.name} {max_idx + 1} -> {min_idx + 1}")
                moved = True
                break

        if not moved:
            for other in (target, opposite):
                pair = _first_swap(partition, max_idx, min_idx, gate, target, other)
                if pair is None:
                    continue
                i, j = pair
                a, b = partition.members(max_idx)[i], partition.members(min_idx)[j]
                partition.swap(max_idx, i, min_idx, j)
                audit.append(
                    f"Gender: swapped {a.name} ({max_idx + 1}) <-> {b.name} ({min_idx + 1})"
                )
                moved = True
                break

        if not moved:
            logger.info(f"Gender rebalance stuck at ratios {[round(r, 2) for r in ratios]}")
            break
        changes += 1
    return changes, audit


def repair_partition(
    partition: Partition,
    gate: ConstraintGate,
    settings: EngineSettings | None = None,
) -> Tuple[Partition, List[str]]:
    settings = settings or EngineSettings()
    audit: List[str] = []
    for round_no in range(settings.rebalance_rounds):
        changed = 0
        for step in ("count", "gender", "count"):
            if step == "count":
                n, trail = rebalance_counts(partition, gate, settings.count_iterations)
            else:
                n, trail = rebalance_gender(
                    partition, gate, settings.gender_iterations, settings.gender_tolerance
                )
            changed += n
            audit.extend(trail)
        logger.info(f"Repair round {round_no + 1}: {changed} changes, sizes {partition.sizes()}")
        if changed == 0:
            # Nothing moved, so later rounds would see the same partition
            break
    return partition, audit
