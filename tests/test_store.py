from __future__ import annotations

from pathlib import Path

import pytest

from sectioner.data.store import RosterStore
from sectioner.errors import CommitError, NotFoundError
from sectioner.models import Partition, Student


def _store(tmp_path: Path) -> RosterStore:
    store = RosterStore(tmp_path / "roster.db")
    store.init_schema()
    return store


def _s(name: str, gender: str = "M", rank: int | None = None, sid: str = "0") -> Student:
    return Student(id=sid, name=name, gender=gender, rank=rank)


def _count(store: RosterStore, table: str) -> int:
    conn = store.connect()
    try:
        return conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]
    finally:
        conn.close()


def test_fetch_roster_orders_by_section_gender_rank(tmp_path: Path) -> None:
    store = _store(tmp_path)
    cid = store.create_class("3", 2, school_id=1)
    store.save_section(cid, 2, [_s("박둘", rank=1)])
    store.save_section(
        cid, 1, [_s("김무", "F"), _s("이셋", rank=2), _s("최하나", rank=1), _s("정무순")]
    )
    roster = store.fetch_roster(cid)
    # unranked rows sort ahead of ranked ones within a gender
    assert [s.name for s in roster] == ["김무", "정무순", "최하나", "이셋", "박둘"]
    assert [s.origin_section for s in roster] == [1, 1, 1, 1, 2]
    assert len({s.id for s in roster}) == 5


def test_fetch_class_not_found(tmp_path: Path) -> None:
    store = _store(tmp_path)
    cid = store.create_class("3", 2, school_id=1)
    assert store.fetch_class(cid).grade == "3"
    with pytest.raises(NotFoundError):
        store.fetch_class(cid + 1)
    with pytest.raises(NotFoundError):
        store.fetch_class(cid, school_id=2)


def test_commit_creates_linked_generation(tmp_path: Path) -> None:
    store = _store(tmp_path)
    parent = store.create_class("3", 2, school_id=1)
    store.save_section(parent, 1, [_s("김하나"), _s("이두리", "F")])
    store.save_section(parent, 2, [_s("박세찌")])
    a, b, c = store.fetch_roster(parent)
    child = store.commit_distribution(parent, Partition.from_sections([[a, c], [b]]))

    child_rec = store.fetch_class(child)
    assert child_rec.parent_class_id == parent
    assert child_rec.is_distributed
    assert child_rec.section_count == 2
    assert store.fetch_class(parent).child_class_id == child
    # parent rows untouched
    assert len(store.list_students(parent)) == 3

    rows = store.list_students(child)
    assert [(r["name"], r["section_number"], r["previous_section"]) for r in rows] == [
        (a.name, 1, a.origin_section),
        (c.name, 1, c.origin_section),
        (b.name, 2, b.origin_section),
    ]


def test_save_section_keeps_previous_section(tmp_path: Path) -> None:
    store = _store(tmp_path)
    parent = store.create_class("3", 2)
    store.save_section(parent, 2, [_s("김하나")])
    child = store.commit_distribution(parent, Partition.from_sections([store.fetch_roster(parent), []]))
    store.save_section(child, 1, [_s("김하나"), _s("새학생", "F")])
    rows = store.list_students(child, section=1)
    assert [(r["name"], r["previous_section"]) for r in rows] == [("김하나", 2), ("새학생", None)]


def test_failed_commit_rolls_back(tmp_path: Path) -> None:
    store = _store(tmp_path)
    parent = store.create_class("3", 2)
    store.save_section(parent, 1, [_s("김하나")])
    good = store.fetch_roster(parent)[0]
    bad = Student(id="x", name="이두리", gender="X")
    classes_before = _count(store, "classes")
    students_before = _count(store, "students")

    with pytest.raises(CommitError):
        store.commit_distribution(parent, Partition.from_sections([[good], [bad]]))

    assert _count(store, "classes") == classes_before
    assert _count(store, "students") == students_before
    assert store.fetch_class(parent).child_class_id is None


def test_commit_for_missing_parent(tmp_path: Path) -> None:
    store = _store(tmp_path)
    with pytest.raises(NotFoundError):
        store.commit_distribution(99, Partition.empty(2))
    assert _count(store, "classes") == 0


def test_link_and_delete(tmp_path: Path) -> None:
    store = _store(tmp_path)
    parent = store.create_class("3", 2)
    child = store.create_class("3", 3)
    store.link_classes(parent, child)
    assert store.fetch_class(parent).child_class_id == child
    with pytest.raises(NotFoundError):
        store.link_classes(parent, child + 10)

    store.save_section(parent, 1, [_s("김하나")])
    (row,) = store.list_students(parent)
    store.delete_student(row["id"])
    assert store.list_students(parent) == []
