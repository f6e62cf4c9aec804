from dataclasses import dataclass, field
from typing import List


@dataclass
class StageIssue:
    level: str
    message: str
    object_id: str = ""

    def to_dict(self) -> dict:
        return {"level": self.level, "message": self.message, "object_id": self.object_id}


@dataclass
class StageResult:
    is_valid: bool
    errors: List[StageIssue] = field(default_factory=list)

    @classmethod
    def success(cls):
        return cls(is_valid=True, errors=[])

    @classmethod
    def failure(cls, errors: List[StageIssue]):
        return cls(is_valid=False, errors=errors)
