from dataclasses import dataclass

MALE = "M"
FEMALE = "F"
GENDERS = (MALE, FEMALE)


@dataclass(frozen=True)
class Student:
    id: str
    name: str
    gender: str  # M or F
    group_id: str | None = None
    rank: int | None = None  # lower is better; None = unranked
    is_problem: bool = False
    is_special_needs: bool = False
    origin_section: int = 1

    @property
    def is_ranked(self) -> bool:
        return self.rank is not None

    @property
    def is_male(self) -> bool:
        return self.gender == MALE
