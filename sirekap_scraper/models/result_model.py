from pydantic import BaseModel, Field, field_validator
from typing import Any, Dict, List, Optional

from sirekap_scraper.config import MAX_DEPTH


def empty_ancestors() -> List[Optional[str]]:
    return [None] * MAX_DEPTH


class ResultRecord(BaseModel):
    """
    One region's vote totals, flattened with the names of its ancestors.

    ancestor_names has one slot per level; slot ``level - 1`` holds the
    region's own name, lower slots hold the parents' names and higher slots
    stay None.
    """

    code: str
    level: int = Field(..., ge=1, le=MAX_DEPTH)
    region_id: Optional[int] = None
    ancestor_names: List[Optional[str]] = Field(default_factory=empty_ancestors)
    candidate1_total: int = 0
    candidate2_total: int = 0
    candidate3_total: int = 0
    percent_reported: Optional[float] = None
    in_progress: Optional[bool] = None

    @field_validator("ancestor_names")
    @classmethod
    def _five_slots(cls, v):
        if len(v) != MAX_DEPTH:
            raise ValueError(f"ancestor_names must have {MAX_DEPTH} slots, got {len(v)}")
        return v

    @property
    def name(self) -> Optional[str]:
        return self.name_at(self.level)

    def name_at(self, level: int) -> Optional[str]:
        return self.ancestor_names[level - 1]

    def to_document(self) -> Dict[str, Any]:
        """Mongo document keyed by region code; unset fields are left out."""
        doc: Dict[str, Any] = {
            "_id": self.code,
            "code": self.code,
            "level": self.level,
            "candidate1_total": self.candidate1_total,
            "candidate2_total": self.candidate2_total,
            "candidate3_total": self.candidate3_total,
        }
        if self.region_id is not None:
            doc["region_id"] = self.region_id
        for idx, ancestor in enumerate(self.ancestor_names, start=1):
            if ancestor is not None:
                doc[f"level{idx}_name"] = ancestor
        if self.percent_reported is not None:
            doc["percent_reported"] = self.percent_reported
        if self.in_progress is not None:
            doc["in_progress"] = self.in_progress
        return doc
