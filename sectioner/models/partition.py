from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Iterator, List

from .student import Student


@dataclass
class Partition:
    """Owned arena of section buckets, indexed 0..N-1.

    A student lives in exactly one bucket; every mutation below moves the
    record rather than copying it.
    """

    sections: List[List[Student]] = field(default_factory=list)

    @classmethod
    def empty(cls, count: int) -> "Partition":
        return cls([[] for _ in range(count)])

    @classmethod
    def from_sections(cls, sections: Iterable[Iterable[Student]]) -> "Partition":
        return cls([list(s) for s in sections])

    def __len__(self) -> int:
        return len(self.sections)

    def members(self, idx: int) -> List[Student]:
        return self.sections[idx]

    def sizes(self) -> List[int]:
        return [len(s) for s in self.sections]

    def place(self, idx: int, student: Student) -> None:
        self.sections[idx].append(student)

    def move(self, src: int, pos: int, dst: int) -> Student:
        student = self.sections[src].pop(pos)
        self.sections[dst].append(student)
        return student

    def swap(self, a: int, i: int, b: int, j: int) -> None:
        # Exchange positions: each student takes the other's slot.
        sa, sb = self.sections[a], self.sections[b]
        sa[i], sb[j] = sb[j], sa[i]

    def least_populated(self) -> int:
        sizes = self.sizes()
        return sizes.index(min(sizes))

    def students(self) -> Iterator[Student]:
        for section in self.sections:
            yield from section

    def placed_ids(self) -> set[str]:
        return {s.id for s in self.students()}

    def section_of(self, student_id: str) -> int | None:
        for idx, section in enumerate(self.sections):
            if any(s.id == student_id for s in section):
                return idx
        return None

    def as_ids(self) -> List[List[str]]:
        return [[s.id for s in section] for section in self.sections]
