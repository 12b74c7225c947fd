"""Job status state machine.

    queued -> processing -> translating -> completed
                                        -> error

Any non-terminal status may also move straight to ``error`` (pipeline
failure, stale-job sweep). ``completed`` and ``error`` are terminal.
"""

from transtrack.models.job import JobStatus

STATUS_SEQUENCE = (
    JobStatus.QUEUED,
    JobStatus.PROCESSING,
    JobStatus.TRANSLATING,
    JobStatus.COMPLETED,
)

NEXT_STATUS: dict[JobStatus, JobStatus] = {
    JobStatus.QUEUED: JobStatus.PROCESSING,
    JobStatus.PROCESSING: JobStatus.TRANSLATING,
    JobStatus.TRANSLATING: JobStatus.COMPLETED,
}


def allowed_transitions(current: JobStatus) -> frozenset[JobStatus]:
    """Statuses reachable from ``current`` in one step."""
    current = JobStatus(current)
    if current.is_terminal:
        return frozenset()
    return frozenset({NEXT_STATUS[current], JobStatus.ERROR})


def is_valid_transition(current: JobStatus, new: JobStatus) -> bool:
    return JobStatus(new) in allowed_transitions(current)


def is_valid_history(statuses: list[JobStatus]) -> bool:
    """True if ``statuses`` could have been observed for a single job."""
    if not statuses:
        return True
    if statuses[0] != JobStatus.QUEUED:
        return False
    return all(is_valid_transition(a, b) for a, b in zip(statuses, statuses[1:]))
