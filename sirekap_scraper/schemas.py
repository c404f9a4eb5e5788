from pydantic import BaseModel, ConfigDict
from typing import Dict, List, Optional, Union

from sirekap_scraper.models.result_model import ResultRecord


class RootLevel(BaseModel):
    """Anchor for the level 1 fetch, which has no parent."""

    model_config = ConfigDict(frozen=True)


class ChildLevel(BaseModel):
    """Anchor for levels 2-5: the parent record whose children are fetched."""

    model_config = ConfigDict(frozen=True)

    parent: ResultRecord


Anchor = Union[RootLevel, ChildLevel]


class NodeFailure(BaseModel):
    level: int
    parent_code: Optional[str] = None  # None for the root fetch
    url: Optional[str] = None
    error: str


class BatchFailure(BaseModel):
    label: str
    batch_index: int
    size: int
    error: str


class LevelReport(BaseModel):
    level: int
    parents: int
    records: int
    node_failures: List[NodeFailure] = []
    batch_failures: List[BatchFailure] = []


class RunSummary(BaseModel):
    levels: List[LevelReport] = []

    @property
    def node_failures(self) -> List[NodeFailure]:
        return [f for report in self.levels for f in report.node_failures]

    @property
    def batch_failures(self) -> List[BatchFailure]:
        return [f for report in self.levels for f in report.batch_failures]

    @property
    def ok(self) -> bool:
        return not self.node_failures and not self.batch_failures

    def records_per_level(self) -> Dict[int, int]:
        return {report.level: report.records for report in self.levels}
