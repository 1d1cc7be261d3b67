"""CLI script to seed the zone table from a CSV file.
Usage: python scripts/import_zones.py [--csv PATH]
"""
import sys
import argparse
import pathlib
from typing import Optional
# Ensure `backend/` is on sys.path so `studygroup` imports work when running this script directly
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))
from sqlmodel import Session
from studygroup.config import settings
from studygroup.database import engine, create_db_and_tables
from studygroup import services


def main(csv_path: Optional[pathlib.Path] = None):
    """Create tables if needed and load zones from `csv_path`.

    Defaults to the configured `ZONES_CSV`. Zones are only loaded into
    an empty table; the result is printed to stdout.
    """
    csv_path = csv_path or settings.ZONES_CSV
    if not csv_path.exists():
        print(f'Zone file not found at {csv_path}')
        return
    create_db_and_tables()
    with Session(engine) as session:
        created = services.ZoneService(session).init_zone_data(csv_path)
    if created:
        print(f'Imported {created} zones from {csv_path}')
    else:
        print('Zone table already populated; nothing imported')


if __name__ == '__main__':
    parser = argparse.ArgumentParser()
    parser.add_argument('--csv', type=pathlib.Path, help='CSV file with city,local_name_of_city,province rows')
    args = parser.parse_args()
    main(csv_path=args.csv)
