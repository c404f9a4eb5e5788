from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Dict, Optional


class Region(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., alias="nama", examples=["JAWA BARAT"])
    id: int
    code: str = Field(..., alias="kode", examples=["32"])
    level: int = Field(..., alias="tingkat", ge=1, le=5)


class Tally(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    # Candidate counts are keyed by candidate-pair id on the wire
    candidate1: Optional[int] = Field(default=None, alias="100025")
    candidate2: Optional[int] = Field(default=None, alias="100026")
    candidate3: Optional[int] = Field(default=None, alias="100027")
    reporting_unit_id: str = Field(default="", alias="psu")
    percent_reported: Optional[float] = Field(default=None, alias="persen")
    in_progress: Optional[bool] = Field(default=None, alias="status_progress")

    @field_validator("reporting_unit_id", mode="before")
    @classmethod
    def _none_psu(cls, v):
        return "" if v is None else v


class TallyTable(BaseModel):
    """Vote tallies for one parent node, keyed by child region code."""

    table: Dict[str, Tally] = Field(default_factory=dict)

    @field_validator("table", mode="before")
    @classmethod
    def _none_table(cls, v):
        return {} if v is None else v

    def get(self, code: str) -> Optional[Tally]:
        return self.table.get(code)

    def __contains__(self, code: str) -> bool:
        return code in self.table

    def __len__(self) -> int:
        return len(self.table)
