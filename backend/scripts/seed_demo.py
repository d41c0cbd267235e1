#!/usr/bin/env python
"""Idempotent demo seed: one agency, its staff, an engineer and a few jobs.

Usage:
    python backend/scripts/seed_demo.py               # seed normally
    python backend/scripts/seed_demo.py --dry-run     # run logic then rollback (no DB changes)
    python backend/scripts/seed_demo.py --show-roles  # print role -> permission codes

Passwords for every seeded user come from SEED_DEMO_PASSWORD (default ChangeMe123!).
"""
from __future__ import annotations
import os, sys, argparse, textwrap
from sqlalchemy import select, text

# Allow running from repo root
sys.path.append(os.path.abspath('backend'))

from fieldjobs import create_app, get_db  # type: ignore
from fieldjobs.constants.permissions import ROLE_PRESETS, permissions_for_role
from fieldjobs.models.authz import Agency, User, Base
from fieldjobs.models.job import Job

DEMO_AGENCY = 'Demo Cooling Services'
DEMO_USERS = [
    # (email, name, role)
    ('admin@demo.example.com', 'Demo Admin', 'admin'),
    ('manager@demo.example.com', 'Demo Manager', 'manager'),
    ('viewer@demo.example.com', 'Demo Viewer', 'viewer'),
    ('engineer@demo.example.com', 'Demo Engineer', 'engineer'),
]
DEMO_JOBS = [
    # (job_number, client, job_type, urgency)
    ('JOB-DEMO-0001', 'Sharma Residency', 'Repair', Job.URGENCY_URGENT),
    ('JOB-DEMO-0002', 'City Mall Chiller Plant', 'AMC', Job.URGENCY_SCHEDULED),
    ('JOB-DEMO-0003', 'Apollo Clinic', 'Emergency', Job.URGENCY_EMERGENCY),
]


def ensure_agency(session):
    agency = session.execute(select(Agency).where(Agency.name==DEMO_AGENCY)).scalar_one_or_none()
    if agency:
        return agency, 0
    agency = Agency(name=DEMO_AGENCY)
    session.add(agency); session.flush()
    return agency, 1


def ensure_users(session, agency):
    password = os.getenv('SEED_DEMO_PASSWORD', 'ChangeMe123!')
    created = 0
    for email, name, role in DEMO_USERS:
        if session.execute(select(User).where(User.email==email)).scalar_one_or_none():
            continue
        user = User(name=name, email=email, role=role, agency_id=agency.id, password_hash='')
        user.set_password(password)
        session.add(user)
        created += 1
    session.flush()
    return created


def ensure_jobs(session, agency):
    created = 0
    for number, client, job_type, urgency in DEMO_JOBS:
        if session.execute(select(Job).where(Job.job_number==number)).scalar_one_or_none():
            continue
        session.add(Job(job_number=number, client_name=client, job_type=job_type, urgency=urgency, agency_id=agency.id))
        created += 1
    return created


def print_role_summary():
    name_w = max(len(r) for r in ROLE_PRESETS)
    print(f"{'Role'.ljust(name_w)} | Count | Codes")
    print('-' * (name_w + 40))
    for role in ROLE_PRESETS:
        codes = permissions_for_role(role)
        print(f"{role.ljust(name_w)} | {str(len(codes)).rjust(5)} | {', '.join(codes)}")


def parse_args():
    p = argparse.ArgumentParser(
        description="Seed demo agency, users and jobs",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent("""Examples:\n  seed normally: seed_demo.py\n  dry run: seed_demo.py --dry-run\n  show roles: seed_demo.py --show-roles\n""")
    )
    p.add_argument('--show-roles', action='store_true', help='Print role permission codes after seeding')
    p.add_argument('--dry-run', action='store_true', help='Rollback after operations (no commit)')
    return p.parse_args()


def main():
    args = parse_args()
    app = create_app()
    with app.app_context():
        session = get_db()
        try:
            session.execute(text('SELECT 1 FROM jobs LIMIT 1'))
        except Exception:
            # Auto-create schema for bootstrap; in real env prefer alembic upgrade
            session.rollback()
            import fieldjobs.models.job_status_history  # noqa: F401
            Base.metadata.create_all(session.get_bind())
        try:
            agency, created_a = ensure_agency(session)
            created_u = ensure_users(session, agency)
            created_j = ensure_jobs(session, agency)
            if args.dry_run:
                session.rollback()
                print(f"[DRY-RUN] (rolled back) Agencies: {created_a}, Users: {created_u}, Jobs: {created_j}")
            else:
                session.commit()
                print(f"[DONE] Agencies created: {created_a}, Users created: {created_u}, Jobs created: {created_j}")
            if args.show_roles:
                print('\nRole Permission Summary:')
                print_role_summary()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

if __name__ == '__main__':
    main()
