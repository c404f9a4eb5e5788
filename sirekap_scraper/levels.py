"""
Per-level addressing for the Sirekap object store.

Every level below the root is addressed by slicing its parent's code into
fixed-length prefixes, e.g. a level 4 fetch for parent ``317101`` lives at
``{base}/31/3171/317101.json``. The table below is the only place the
hierarchy depth and those prefix lengths are defined.
"""
from typing import Dict, List, NamedTuple, Tuple

from sirekap_scraper.config import MAX_DEPTH
from sirekap_scraper.schemas import Anchor, ChildLevel, RootLevel


class LevelSpec(NamedTuple):
    level: int
    prefix_lengths: Tuple[int, ...]

    @property
    def is_root(self) -> bool:
        return self.level == 1


LEVELS: Dict[int, LevelSpec] = {
    1: LevelSpec(1, ()),
    2: LevelSpec(2, ()),
    3: LevelSpec(3, (2,)),
    4: LevelSpec(4, (2, 4)),
    5: LevelSpec(5, (2, 4, 6)),
}

def level_spec(level: int) -> LevelSpec:
    try:
        return LEVELS[level]
    except KeyError:
        raise ValueError(f"Unknown level {level}; expected 1..{MAX_DEPTH}")


def path_segments(level: int, anchor: Anchor) -> List[str]:
    """Path segments below the base URL for one level's fetch."""
    entry = level_spec(level)

    if entry.is_root:
        if not isinstance(anchor, RootLevel):
            raise ValueError("Level 1 is fetched from the root, not from a parent")
        return []

    if not isinstance(anchor, ChildLevel):
        raise ValueError(f"Level {level} needs a parent record")

    code = anchor.parent.code
    if entry.prefix_lengths and len(code) < max(entry.prefix_lengths):
        raise ValueError(f"Parent code {code!r} is too short to address level {level}")

    return [code[:n] for n in entry.prefix_lengths] + [code]


def region_url(base_url: str, level: int, anchor: Anchor) -> str:
    segments = path_segments(level, anchor)
    base = base_url.rstrip("/")
    if not segments:
        # Root listing is published as "0.json"
        return f"{base}/0.json"
    return f"{base}/{'/'.join(segments)}.json"


def tally_url(base_url: str, level: int, anchor: Anchor) -> str:
    segments = path_segments(level, anchor)
    base = base_url.rstrip("/")
    if not segments:
        return f"{base}.json"
    return f"{base}/{'/'.join(segments)}.json"
