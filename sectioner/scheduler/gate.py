from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable

from ..models.partition import Partition
from ..models.student import Student

RULE_GROUP = "group"
RULE_GIVEN_NAME = "given_name"


def drop_family_name(name: str) -> str:
    # Single-character family names only; multi-character family names are not detected.
    if len(name) <= 1:
        return name
    return name[1:]


@dataclass(frozen=True)
class Placement:
    allowed: bool
    violated_rule: str | None = None

    def __bool__(self) -> bool:
        return self.allowed


class ConstraintGate:
    """Hard-constraint predicate evaluated against a section's current members."""

    def __init__(self, given_name_of: Callable[[str], str] = drop_family_name):
        self.given_name_of = given_name_of

    def check(self, student: Student, members: Iterable[Student]) -> Placement:
        others = [m for m in members if m.id != student.id]
        if student.group_id:
            if any(m.group_id == student.group_id for m in others):
                return Placement(False, RULE_GROUP)
        given = self.given_name_of(student.name)
        if any(self.given_name_of(m.name) == given for m in others):
            return Placement(False, RULE_GIVEN_NAME)
        return Placement(True)

    def can_place(self, student: Student, idx: int, partition: Partition) -> Placement:
        return self.check(student, partition.members(idx))

    def can_swap(
        self,
        a: Student,
        sec_a: int,
        b: Student,
        sec_b: int,
        partition: Partition,
    ) -> bool:
        rest_a = [s for s in partition.members(sec_a) if s.id != a.id]
        rest_b = [s for s in partition.members(sec_b) if s.id != b.id]
        return bool(self.check(b, rest_a)) and bool(self.check(a, rest_b))

    def allowed_sections(self, student: Student, partition: Partition) -> list[int]:
        return [i for i in range(len(partition)) if self.can_place(student, i, partition)]


DEFAULT_GATE = ConstraintGate()


def can_place(student: Student, idx: int, partition: Partition) -> Placement:
    return DEFAULT_GATE.can_place(student, idx, partition)


def can_swap(a: Student, sec_a: int, b: Student, sec_b: int, partition: Partition) -> bool:
    return DEFAULT_GATE.can_swap(a, sec_a, b, sec_b, partition)
