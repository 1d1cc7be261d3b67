"""Helpers to read zone reference data from a local CSV file.

Each non-empty line holds `city,local_name_of_city,province`. Lines
with fewer than three columns are skipped, and repeated
`(city, province)` pairs are kept only once so the result can be
inserted without tripping the zone unique constraint.
"""

import csv
from pathlib import Path
from typing import List

from ..models import Zone


def load_zones_csv(path: Path) -> List[Zone]:
    """Return unsaved `Zone` objects parsed from `path`."""
    zones = []
    seen = set()
    with path.open(encoding='utf-8', newline='') as fh:
        for row in csv.reader(fh):
            cells = [c.strip() for c in row]
            if len(cells) < 3 or not all(cells[:3]):
                continue
            city, local_name, province = cells[:3]
            if (city, province) in seen:
                continue
            seen.add((city, province))
            zones.append(Zone(city=city, local_name_of_city=local_name, province=province))
    return zones
