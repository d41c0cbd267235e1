from __future__ import annotations
"""SQLAlchemy backed datastore for jobs and their status history.

The status engine only talks to this class, which keeps the engine free of
session handling and lets tests swap individual calls for failing ones.
"""
import logging
from typing import Any, Dict, List

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm.attributes import set_committed_value

from fieldjobs.errors import Conflict, DatastoreError, NotFound
from fieldjobs.models.job import Job
from fieldjobs.models.job_status_history import JobStatusHistory

logger = logging.getLogger(__name__)


class JobStore:
    def __init__(self, session):
        self.session = session

    def read_job(self, job_id: str) -> Job:
        try:
            stmt = select(Job).where(Job.id == job_id).execution_options(populate_existing=True)
            job = self.session.execute(stmt).scalar_one_or_none()
        except SQLAlchemyError as exc:
            logger.error('Error fetching job %s: %s', job_id, exc)
            raise DatastoreError('Failed to fetch job') from exc
        if job is None:
            raise NotFound('Job not found')
        return job

    def update_job(self, job: Job, fields: Dict[str, Any], expected_status: str) -> Job:
        """Write ``fields`` only if the row still holds ``expected_status``.

        A concurrent writer that moved the job first leaves zero matching rows,
        which is reported as ``Conflict`` with nothing written.
        """
        stmt = (
            update(Job)
            .where(Job.id == job.id, Job.status == expected_status)
            .values(**fields)
            .execution_options(synchronize_session=False)
        )
        try:
            result = self.session.execute(stmt)
            if result.rowcount != 1:
                self.session.rollback()
                raise Conflict(
                    'Job status changed while the update was in progress',
                    {'status': [f"Expected current status '{expected_status}'"]},
                )
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.error('Error updating job %s: %s', job.id, exc)
            raise DatastoreError('Failed to update job status') from exc
        # committed: the in-memory job must reflect the write even if the reload fails
        for key, value in fields.items():
            set_committed_value(job, key, value)
        try:
            self.session.refresh(job)
        except SQLAlchemyError as exc:
            logger.warning('Job %s updated but could not be reloaded: %s', job.id, exc)
        return job

    def append_history(self, entry: JobStatusHistory) -> JobStatusHistory:
        try:
            self.session.add(entry)
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            raise
        return entry

    def query_history(self, job_id: str, limit: int, offset: int = 0) -> List[JobStatusHistory]:
        stmt = (
            select(JobStatusHistory)
            .where(JobStatusHistory.job_id == job_id)
            .order_by(JobStatusHistory.created_at.desc())
            .offset(offset)
            .limit(limit)
        )
        return list(self.session.execute(stmt).scalars())

    def count_history(self, job_id: str) -> int:
        return self.session.query(JobStatusHistory).filter(JobStatusHistory.job_id == job_id).count()


__all__ = ['JobStore']
