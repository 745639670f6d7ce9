from dataclasses import dataclass


@dataclass(frozen=True)
class SectionStats:
    section: int  # 1-based
    total: int
    male: int
    female: int
    problem: int
    special: int
    avg_rank: float | None
    std_dev: float

    def as_dict(self) -> dict:
        return {
            "section": self.section,
            "total": self.total,
            "male": self.male,
            "female": self.female,
            "problem": self.problem,
            "special": self.special,
            "avgRank": self.avg_rank,
            "stdDev": self.std_dev,
        }
