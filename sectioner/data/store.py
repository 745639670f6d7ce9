from __future__ import annotations

import logging
import sqlite3
import threading
from contextlib import closing, contextmanager
from pathlib import Path
from typing import Dict, Iterator, List

from ..errors import CommitError, NotFoundError
from ..models.klass import ClassRecord
from ..models.partition import Partition
from ..models.student import Student

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS classes (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    school_id INTEGER,
    grade TEXT NOT NULL,
    section_count INTEGER NOT NULL CHECK (section_count >= 1),
    is_distributed INTEGER NOT NULL DEFAULT 0,
    parent_class_id INTEGER REFERENCES classes(id),
    child_class_id INTEGER REFERENCES classes(id)
);
CREATE TABLE IF NOT EXISTS students (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    class_id INTEGER NOT NULL REFERENCES classes(id) ON DELETE CASCADE,
    section_number INTEGER NOT NULL,
    name TEXT NOT NULL,
    gender TEXT NOT NULL CHECK (gender IN ('M', 'F')),
    is_problem_student INTEGER NOT NULL DEFAULT 0,
    is_special_class INTEGER NOT NULL DEFAULT 0,
    group_name TEXT,
    rank INTEGER,
    previous_section INTEGER
);
CREATE INDEX IF NOT EXISTS idx_students_class ON students(class_id, section_number);
"""

INSERT_STUDENT = (
    "INSERT INTO students (class_id, section_number, name, gender, is_problem_student, "
    "is_special_class, group_name, rank, previous_section) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)"
)


def _class_from_row(row: sqlite3.Row) -> ClassRecord:
    return ClassRecord(
        id=row["id"],
        grade=row["grade"],
        section_count=row["section_count"],
        school_id=row["school_id"],
        is_distributed=bool(row["is_distributed"]),
        parent_class_id=row["parent_class_id"],
        child_class_id=row["child_class_id"],
    )


def _student_from_row(row: sqlite3.Row) -> Student:
    return Student(
        id=str(row["id"]),
        name=row["name"],
        gender=row["gender"],
        group_id=row["group_name"] or None,
        rank=row["rank"],
        is_problem=bool(row["is_problem_student"]),
        is_special_needs=bool(row["is_special_class"]),
        origin_section=row["section_number"],
    )


class RosterStore:
    """SQLite-backed store for classes and their students.

    Connections run in autocommit mode; multi-statement writes go through
    ``_transaction`` which takes SQLite's write lock up front.
    """

    def __init__(self, path: Path | str):
        self.path = str(path)
        self._locks: Dict[int, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.path, isolation_level=None)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    @contextmanager
    def _transaction(self, conn: sqlite3.Connection) -> Iterator[sqlite3.Connection]:
        conn.execute("BEGIN IMMEDIATE")
        try:
            yield conn
        except BaseException:
            conn.execute("ROLLBACK")
            raise
        conn.execute("COMMIT")

    def _class_lock(self, class_id: int) -> threading.Lock:
        with self._locks_guard:
            return self._locks.setdefault(class_id, threading.Lock())

    def init_schema(self) -> None:
        with closing(self.connect()) as conn:
            conn.executescript(SCHEMA)

    def create_class(self, grade: str, section_count: int, school_id: int | None = None) -> int:
        with closing(self.connect()) as conn:
            cur = conn.execute(
                "INSERT INTO classes (school_id, grade, section_count) VALUES (?, ?, ?)",
                (school_id, grade, section_count),
            )
            return int(cur.lastrowid)

    def _get_class(
        self, conn: sqlite3.Connection, class_id: int, school_id: int | None = None
    ) -> sqlite3.Row:
        if school_id is None:
            row = conn.execute("SELECT * FROM classes WHERE id = ?", (class_id,)).fetchone()
        else:
            row = conn.execute(
                "SELECT * FROM classes WHERE id = ? AND school_id = ?", (class_id, school_id)
            ).fetchone()
        if row is None:
            raise NotFoundError(f"Class with id {class_id} does not exist.")
        return row

    def fetch_class(self, class_id: int, school_id: int | None = None) -> ClassRecord:
        with closing(self.connect()) as conn:
            return _class_from_row(self._get_class(conn, class_id, school_id))

    def fetch_roster(self, class_id: int) -> List[Student]:
        with closing(self.connect()) as conn:
            rows = conn.execute(
                "SELECT * FROM students WHERE class_id = ? "
                "ORDER BY section_number, gender, rank, name, id",
                (class_id,),
            ).fetchall()
        return [_student_from_row(r) for r in rows]

    def list_students(self, class_id: int, section: int | None = None) -> List[dict]:
        with closing(self.connect()) as conn:
            if section is None:
                rows = conn.execute(
                    "SELECT * FROM students WHERE class_id = ? ORDER BY id", (class_id,)
                ).fetchall()
            else:
                rows = conn.execute(
                    "SELECT * FROM students WHERE class_id = ? AND section_number = ? ORDER BY id",
                    (class_id, section),
                ).fetchall()
        return [dict(r) for r in rows]

    def save_section(self, class_id: int, section: int, students: List[Student]) -> int:
        """Replace one section's students, keeping known previous sections.

        A student whose name and gender match an existing row of the section
        inherits that row's ``previous_section``.
        """
        with closing(self.connect()) as conn:
            self._get_class(conn, class_id)
            with self._transaction(conn):
                existing = conn.execute(
                    "SELECT name, gender, previous_section FROM students "
                    "WHERE class_id = ? AND section_number = ?",
                    (class_id, section),
                ).fetchall()
                previous = {f"{r['name']}_{r['gender']}": r["previous_section"] for r in existing}
                conn.execute(
                    "DELETE FROM students WHERE class_id = ? AND section_number = ?",
                    (class_id, section),
                )
                conn.executemany(
                    INSERT_STUDENT,
                    [
                        (
                            class_id,
                            section,
                            s.name,
                            s.gender,
                            int(s.is_problem),
                            int(s.is_special_needs),
                            s.group_id,
                            s.rank,
                            previous.get(f"{s.name}_{s.gender}"),
                        )
                        for s in students
                    ],
                )
        logger.info(f"Saved {len(students)} students into class {class_id} section {section}")
        return len(students)

    def delete_student(self, student_id: int) -> None:
        with closing(self.connect()) as conn:
            conn.execute("DELETE FROM students WHERE id = ?", (student_id,))

    def commit_distribution(
        self, parent_class_id: int, partition: Partition, school_id: int | None = None
    ) -> int:
        """Persist ``partition`` as a new class generation linked to its parent.

        The new class, all of its students and the parent's forward link are
        written in one transaction; on failure nothing is written.
        """
        with self._class_lock(parent_class_id), closing(self.connect()) as conn:
            try:
                with self._transaction(conn):
                    parent = self._get_class(conn, parent_class_id, school_id)
                    cur = conn.execute(
                        "INSERT INTO classes (school_id, grade, section_count, is_distributed, "
                        "parent_class_id) VALUES (?, ?, ?, 1, ?)",
                        (parent["school_id"], parent["grade"], len(partition), parent_class_id),
                    )
                    new_id = int(cur.lastrowid)
                    conn.executemany(
                        INSERT_STUDENT,
                        [
                            (
                                new_id,
                                idx + 1,
                                s.name,
                                s.gender,
                                int(s.is_problem),
                                int(s.is_special_needs),
                                s.group_id,
                                s.rank,
                                s.origin_section,
                            )
                            for idx, section in enumerate(partition.sections)
                            for s in section
                        ],
                    )
                    conn.execute(
                        "UPDATE classes SET child_class_id = ? WHERE id = ?",
                        (new_id, parent_class_id),
                    )
            except sqlite3.Error as exc:
                logger.error(f"Commit for class {parent_class_id} rolled back: {exc}")
                raise CommitError(f"Failed to commit distribution of class {parent_class_id}") from exc
        logger.info(f"Committed class {new_id} from parent {parent_class_id}")
        return new_id

    def link_classes(
        self, parent_class_id: int, child_class_id: int, school_id: int | None = None
    ) -> None:
        with closing(self.connect()) as conn:
            with self._transaction(conn):
                self._get_class(conn, parent_class_id, school_id)
                self._get_class(conn, child_class_id, school_id)
                conn.execute(
                    "UPDATE classes SET child_class_id = ? WHERE id = ?",
                    (child_class_id, parent_class_id),
                )
