"""CLI script to create tables and seed subjects and tags for local use.
Usage: python scripts/seed_catalog.py [--subject NAME ...] [--tag NAME ...]

Subjects and tags are read-only for the API, so a fresh development
database needs them inserted out of band. Existing names are skipped.
"""
import sys
import argparse
import pathlib
from typing import List, Optional
# Ensure `backend/` is on sys.path so `questionbank` imports work when running this script directly
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))
from sqlmodel import Session, select
from questionbank.database import engine, create_db_and_tables
from questionbank import models

DEFAULT_SUBJECTS = ["Algorithms", "Data Structures", "Databases", "Operating Systems", "Networking"]
DEFAULT_TAGS = ["arrays", "sorting", "graphs", "sql", "recursion", "concurrency"]


def seed(session: Session, subjects: List[str], tags: List[str], inactive: Optional[List[str]] = None):
    """Insert missing subjects (Active unless listed in `inactive`) and tags.

    Returns a `(subjects_created, tags_created)` tuple.
    """
    inactive = set(inactive or [])
    existing_subjects = set(session.exec(select(models.Subject.name)).all())
    existing_tags = set(session.exec(select(models.Tag.name)).all())
    new_subjects = [n for n in subjects if n not in existing_subjects]
    new_tags = [n for n in tags if n not in existing_tags]
    for name in new_subjects:
        session.add(models.Subject(name=name, status="Inactive" if name in inactive else "Active"))
    for name in new_tags:
        session.add(models.Tag(name=name))
    session.commit()
    return len(new_subjects), len(new_tags)


def main(subjects: List[str], tags: List[str], inactive: List[str]):
    create_db_and_tables()
    with Session(engine) as session:
        created_subjects, created_tags = seed(session, subjects, tags, inactive)
    print(f'Created {created_subjects} subjects and {created_tags} tags')


if __name__ == '__main__':
    parser = argparse.ArgumentParser()
    parser.add_argument('--subject', action='append', help='Subject name to seed (repeatable)')
    parser.add_argument('--inactive', action='append', default=[], help='Subject name to seed as Inactive')
    parser.add_argument('--tag', action='append', help='Tag name to seed (repeatable)')
    args = parser.parse_args()
    main(args.subject or DEFAULT_SUBJECTS, args.tag or DEFAULT_TAGS, args.inactive)
