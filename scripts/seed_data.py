#!/usr/bin/env python
"""
Seed script to populate the database with sample projects and units for local development.

Usage:
    python scripts/seed_data.py --projects 2 --units 10
"""

import argparse
import sys
from decimal import Decimal
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from estatecrm.config import Base, SessionLocal, engine  # noqa: E402
from estatecrm.models.models import Project, Unit  # noqa: E402

BASE_PRICE = Decimal("6500000")
PRICE_STEP = Decimal("250000")


def create_project_bundle(session, index: int, units: int) -> Project:
    project = Project(
        name=f"Sample Residency {index}",
        tenant_id="demo",
        location=f"Sector {10 + index}",
        status="Active",
    )
    session.add(project)
    session.flush()

    for offset in range(units):
        floor = offset // 4 + 1
        session.add(
            Unit(
                project_id=project.id,
                unit_no=f"{chr(64 + index)}-{floor}{offset % 4 + 1:02d}",
                price=BASE_PRICE + PRICE_STEP * offset,
                status="AVAILABLE",
                is_available=True,
            )
        )
    return project


def seed_database(projects: int, units: int) -> None:
    Base.metadata.create_all(bind=engine)
    with SessionLocal() as session:
        start_index = session.query(Project).count() + 1
        targets = max(projects, 0)
        for offset in range(targets):
            create_project_bundle(session, start_index + offset, max(units, 0))
        session.commit()
        print(f"Seed complete. Created {targets} project(s) with {units} unit(s) each.")


def main():
    parser = argparse.ArgumentParser(description="Seed the CRM database with sample inventory.")
    parser.add_argument("--projects", type=int, default=2, help="Number of projects to create")
    parser.add_argument("--units", type=int, default=8, help="Units per project")
    args = parser.parse_args()
    seed_database(args.projects, args.units)


if __name__ == "__main__":
    main()
