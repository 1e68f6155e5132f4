# Insights package (async aggregation of check-ins)
from .jobs import InsightJob, INSIGHT_JOB_NAME
from .aggregation import InsightSignals, compute_signals, build_summary
from .worker import InsightWorker

__all__ = [
    'InsightJob',
    'INSIGHT_JOB_NAME',
    'InsightSignals',
    'compute_signals',
    'build_summary',
    'InsightWorker',
]
