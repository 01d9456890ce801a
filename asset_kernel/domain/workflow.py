"""
Request and complaint state machines.

Responsibility:
    Declares the only legal status transitions for asset requests and
    asset complaints.  Services check these tables before persisting any
    transition and raise a ``ConflictError`` subclass on violation.

Architecture position:
    Kernel > Domain -- pure data, zero I/O.

Invariants enforced:
    - Requests move ``pending -> approved | rejected`` and
      ``approved -> fulfilled``.  ``rejected`` and ``fulfilled`` are
      terminal.
    - Complaints move ``open -> in_progress | resolved | closed``,
      ``in_progress -> resolved | closed`` and ``resolved -> closed``.
      ``closed`` is terminal.
    - Terminal states have no outgoing edges.
"""

from enum import Enum


class Priority(str, Enum):
    """Shared by requests and complaints."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class RequestStatus(str, Enum):
    """Asset request lifecycle states."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    FULFILLED = "fulfilled"


class ComplaintStatus(str, Enum):
    """Asset complaint lifecycle states."""

    OPEN = "open"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    CLOSED = "closed"


REQUEST_TRANSITIONS: dict[RequestStatus, frozenset[RequestStatus]] = {
    RequestStatus.PENDING: frozenset({
        RequestStatus.APPROVED,
        RequestStatus.REJECTED,
    }),
    RequestStatus.APPROVED: frozenset({
        RequestStatus.FULFILLED,
    }),
    RequestStatus.REJECTED: frozenset(),
    RequestStatus.FULFILLED: frozenset(),
}

TERMINAL_REQUEST_STATUSES: frozenset[RequestStatus] = frozenset({
    RequestStatus.REJECTED,
    RequestStatus.FULFILLED,
})

COMPLAINT_TRANSITIONS: dict[ComplaintStatus, frozenset[ComplaintStatus]] = {
    ComplaintStatus.OPEN: frozenset({
        ComplaintStatus.IN_PROGRESS,
        ComplaintStatus.RESOLVED,
        ComplaintStatus.CLOSED,
    }),
    ComplaintStatus.IN_PROGRESS: frozenset({
        ComplaintStatus.RESOLVED,
        ComplaintStatus.CLOSED,
    }),
    ComplaintStatus.RESOLVED: frozenset({
        ComplaintStatus.CLOSED,
    }),
    ComplaintStatus.CLOSED: frozenset(),
}

TERMINAL_COMPLAINT_STATUSES: frozenset[ComplaintStatus] = frozenset({
    ComplaintStatus.CLOSED,
})

# Complaints in these states must name who resolved them.
RESOLVED_COMPLAINT_STATUSES: frozenset[ComplaintStatus] = frozenset({
    ComplaintStatus.RESOLVED,
    ComplaintStatus.CLOSED,
})


def can_transition_request(current: RequestStatus, target: RequestStatus) -> bool:
    return RequestStatus(target) in REQUEST_TRANSITIONS[RequestStatus(current)]


def can_transition_complaint(current: ComplaintStatus, target: ComplaintStatus) -> bool:
    return ComplaintStatus(target) in COMPLAINT_TRANSITIONS[ComplaintStatus(current)]
