from __future__ import annotations

from sectioner.models import Partition, SectionStats, Student
from sectioner.scheduler.stats import calculate_stats, round1, section_stats


def _s(sid: str, gender: str = "M", rank: int | None = None, **kw) -> Student:
    return Student(id=sid, name=f"S{sid}", gender=gender, rank=rank, **kw)


def test_round1_rounds_half_up() -> None:
    assert round1(0.25) == 0.3
    assert round1(5.25) == 5.3
    assert round1(2.34) == 2.3


def test_section_stats_uses_ranked_non_special_students_only() -> None:
    students = [
        _s("a", rank=1),
        _s("b", "F", rank=2, is_problem=True),
        _s("c", "F", rank=4),
        _s("d", rank=3, is_special_needs=True),
        _s("e", "F"),
    ]
    st = section_stats(0, students)
    assert st == SectionStats(
        section=1, total=5, male=2, female=3, problem=1, special=1, avg_rank=2.3, std_dev=1.2
    )


def test_empty_and_single_ranked_sections() -> None:
    assert section_stats(1, []).avg_rank is None
    assert section_stats(1, []).std_dev == 0.0
    single = section_stats(2, [_s("a", rank=7), _s("b")])
    assert single.section == 3
    assert single.avg_rank == 7.0
    assert single.std_dev == 0.0


def test_population_standard_deviation() -> None:
    st = section_stats(0, [_s("a", rank=2), _s("b", rank=4), _s("c", rank=4), _s("d", rank=6)])
    # mean 4, squared deviations 4+0+0+4 over 4
    assert st.avg_rank == 4.0
    assert st.std_dev == 1.4


def test_calculate_stats_is_repeatable() -> None:
    p = Partition.from_sections([[_s("a", rank=1), _s("b", "F", rank=5)], [_s("c", rank=2)]])
    first = calculate_stats(p)
    assert first == calculate_stats(p)
    assert [s.section for s in first] == [1, 2]
    assert first[0].as_dict()["avgRank"] == 3.0
