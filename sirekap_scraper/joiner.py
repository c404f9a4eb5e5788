# sirekap_scraper/joiner.py
import logging
from typing import Iterable, List

from sirekap_scraper.models.region_model import Region, TallyTable
from sirekap_scraper.models.result_model import ResultRecord, empty_ancestors
from sirekap_scraper.schemas import Anchor, ChildLevel

logger = logging.getLogger(__name__)


def join_votes(
    regions: Iterable[Region], tallies: TallyTable, anchor: Anchor, level: int
) -> List[ResultRecord]:
    """
    Merge a region listing with its tally table, one record per region.

    A region without a tally entry has not reported yet and gets zero
    counts, as do unreported candidates within an entry. Output follows
    the order of ``regions``.
    """
    parent = anchor.parent if isinstance(anchor, ChildLevel) else None
    inherited = list(parent.ancestor_names) if parent is not None else empty_ancestors()

    results = []
    for region in regions:
        if parent is not None and not region.code.startswith(parent.code):
            logger.warning(
                f"Region {region.code} ({region.name}) is not under parent {parent.code}"
            )

        names = list(inherited)
        names[level - 1] = region.name
        for idx in range(level, len(names)):
            names[idx] = None

        tally = tallies.get(region.code)
        if tally is not None:
            record = ResultRecord(
                code=region.code,
                level=level,
                region_id=region.id,
                ancestor_names=names,
                candidate1_total=tally.candidate1 or 0,
                candidate2_total=tally.candidate2 or 0,
                candidate3_total=tally.candidate3 or 0,
                percent_reported=tally.percent_reported,
                in_progress=tally.in_progress,
            )
        else:
            record = ResultRecord(
                code=region.code,
                level=level,
                region_id=region.id,
                ancestor_names=names,
            )
        results.append(record)

    return results
