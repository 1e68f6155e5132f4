"""
Insight job payload.
"""
from dataclasses import dataclass
from typing import Any, Dict

from infrastructure.job_queue import Job

INSIGHT_JOB_NAME = 'generate'


@dataclass(frozen=True)
class InsightJob:
    """Request to (re)compute the insight of one client over a date range."""
    client_id: str
    range_start: str  # YYYY-MM-DD
    range_end: str  # YYYY-MM-DD

    @property
    def job_id(self) -> str:
        """Deterministic id; the same logical request maps to the same job."""
        return f"insight_{self.client_id}_{self.range_start}_{self.range_end}"

    def to_payload(self) -> Dict[str, Any]:
        return {'clientId': self.client_id, 'from': self.range_start, 'to': self.range_end}

    @classmethod
    def from_job(cls, job: Job) -> 'InsightJob':
        payload = job.payload
        return cls(
            client_id=str(payload['clientId']),
            range_start=str(payload['from']),
            range_end=str(payload['to']),
        )
