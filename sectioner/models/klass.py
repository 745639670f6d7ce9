from dataclasses import dataclass


@dataclass(frozen=True)
class ClassRecord:
    id: int
    grade: str
    section_count: int
    school_id: int | None = None
    is_distributed: bool = False
    parent_class_id: int | None = None
    child_class_id: int | None = None
