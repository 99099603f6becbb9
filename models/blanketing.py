"""Blanketing recommendation value objects."""

from dataclasses import dataclass

from models.taxonomy import BlanketWeight


@dataclass(frozen=True)
class BlanketingFactors:
    age: int
    weight: int
    coat: int
    weather: int

    @property
    def total(self) -> int:
        return self.age + self.weight + self.coat + self.weather

    def to_dict(self) -> dict:
        return {"age": self.age, "weight": self.weight, "coat": self.coat, "weather": self.weather}


@dataclass(frozen=True)
class BlanketingRecommendation:
    """Derived on every calculation; carries the factor breakdown for explainability."""

    blanket_needed: bool
    blanket_weight: BlanketWeight
    factors: BlanketingFactors

    @property
    def score(self) -> int:
        return self.factors.total

    def to_dict(self) -> dict:
        return {
            "blanket_needed": self.blanket_needed,
            "blanket_weight": self.blanket_weight.value,
            "score": self.score,
            "factors": self.factors.to_dict(),
        }
