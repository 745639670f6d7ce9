from sectioner.models import Partition, Student
from sectioner.scheduler.gate import (
    RULE_GIVEN_NAME,
    RULE_GROUP,
    ConstraintGate,
    can_place,
    can_swap,
    drop_family_name,
)


def _s(sid: str, name: str, gender: str = "M", group: str | None = None) -> Student:
    return Student(id=sid, name=name, gender=gender, group_id=group)


def test_drop_family_name() -> None:
    assert drop_family_name("김민수") == "민수"
    assert drop_family_name("김") == "김"
    assert drop_family_name("") == ""


def test_group_rule_blocks_same_group() -> None:
    p = Partition.from_sections([[_s("a", "김하나", group="G1")], []])
    b = _s("b", "이두리", group="G1")
    check = can_place(b, 0, p)
    assert not check.allowed
    assert check.violated_rule == RULE_GROUP
    assert can_place(b, 1, p).allowed


def test_group_rule_is_checked_before_given_name() -> None:
    p = Partition.from_sections([[_s("a", "김민수", group="G1")], []])
    check = can_place(_s("b", "이민수", group="G1"), 0, p)
    assert check.violated_rule == RULE_GROUP


def test_given_name_rule_blocks_shared_given_name() -> None:
    p = Partition.from_sections([[_s("a", "김민수")], [_s("c", "박지훈")]])
    b = _s("b", "이민수", gender="F")
    check = can_place(b, 0, p)
    assert not check
    assert check.violated_rule == RULE_GIVEN_NAME
    assert can_place(b, 1, p)


def test_missing_or_empty_group_never_conflicts() -> None:
    p = Partition.from_sections([[_s("a", "김하나"), _s("c", "박세찌", group="")], []])
    assert can_place(_s("b", "이두리"), 0, p).allowed
    assert can_place(_s("d", "최네찌", group=""), 0, p).allowed


def test_student_already_in_section_does_not_block_itself() -> None:
    a = _s("a", "김하나", group="G1")
    p = Partition.from_sections([[a], []])
    assert can_place(a, 0, p).allowed


def test_can_swap_checks_both_sides_without_the_swapped_pair() -> None:
    a = _s("a", "김가나", group="G1")
    b = _s("b", "이다라", group="G1")
    d = _s("d", "박마바")
    p = Partition.from_sections([[a], [b, d]])
    # a replaces b in section 2, b replaces a in section 1
    assert can_swap(a, 0, b, 1, p)
    # a would meet b in section 2
    assert not can_swap(a, 0, d, 1, p)


def test_custom_given_name_strategy() -> None:
    kim = _s("a", "Kim Minsu")
    lee = _s("b", "Lee Minsu")
    p = Partition.from_sections([[kim], []])
    assert can_place(lee, 0, p).allowed
    gate = ConstraintGate(given_name_of=lambda n: n.split()[-1])
    assert gate.can_place(lee, 0, p).violated_rule == RULE_GIVEN_NAME


def test_allowed_sections_lists_passing_sections_in_order() -> None:
    p = Partition.from_sections(
        [[_s("a", "김하나", group="G1")], [], [_s("c", "박하나")]]
    )
    gate = ConstraintGate()
    assert gate.allowed_sections(_s("b", "이둘", group="G1"), p) == [1, 2]
    assert gate.allowed_sections(_s("d", "최하나"), p) == [1]
