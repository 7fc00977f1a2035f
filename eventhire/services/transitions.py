# eventhire/services/transitions.py
"""
Status transition tables for orders and jobs.

Each table maps a current status to the statuses it may move to next.
Statuses absent from the keys are unknown; statuses mapping to an empty
set are terminal.
"""
from eventhire.core.errors import InvalidTransition

ORDER_PENDING = "pending"
ORDER_CONFIRMED = "confirmed"
ORDER_IN_PROGRESS = "in-progress"
ORDER_COMPLETED = "completed"
ORDER_CANCELLED = "cancelled"
ORDER_REFUNDED = "refunded"

ORDER_STATUSES = (
    ORDER_PENDING,
    ORDER_CONFIRMED,
    ORDER_IN_PROGRESS,
    ORDER_COMPLETED,
    ORDER_CANCELLED,
    ORDER_REFUNDED,
)

ORDER_TRANSITIONS = {
    ORDER_PENDING: frozenset({ORDER_CONFIRMED, ORDER_CANCELLED}),
    ORDER_CONFIRMED: frozenset({ORDER_IN_PROGRESS, ORDER_CANCELLED}),
    ORDER_IN_PROGRESS: frozenset({ORDER_COMPLETED, ORDER_CANCELLED}),
    ORDER_COMPLETED: frozenset(),
    ORDER_CANCELLED: frozenset(),
    ORDER_REFUNDED: frozenset(),
}

# admin override only, never reachable through ORDER_TRANSITIONS
REFUNDABLE_ORDER_STATUSES = frozenset({ORDER_CONFIRMED, ORDER_IN_PROGRESS, ORDER_COMPLETED, ORDER_CANCELLED})

JOB_PENDING = "pending"
JOB_ACCEPTED = "accepted"
JOB_DECLINED = "declined"
JOB_IN_PROGRESS = "in-progress"
JOB_COMPLETED = "completed"
JOB_CANCELLED = "cancelled"

JOB_STATUSES = (
    JOB_PENDING,
    JOB_ACCEPTED,
    JOB_DECLINED,
    JOB_IN_PROGRESS,
    JOB_COMPLETED,
    JOB_CANCELLED,
)

JOB_TRANSITIONS = {
    JOB_PENDING: frozenset({JOB_ACCEPTED, JOB_DECLINED}),
    JOB_ACCEPTED: frozenset({JOB_IN_PROGRESS, JOB_CANCELLED}),
    JOB_IN_PROGRESS: frozenset({JOB_COMPLETED}),
    JOB_DECLINED: frozenset(),
    JOB_COMPLETED: frozenset(),
    JOB_CANCELLED: frozenset(),
}


def allowed_next(table: dict, current: str) -> frozenset:
    return table.get(current, frozenset())


def is_terminal(table: dict, status: str) -> bool:
    return not allowed_next(table, status)


def check_transition(table: dict, entity: str, current: str, requested: str) -> None:
    if requested not in allowed_next(table, current):
        raise InvalidTransition(entity, current, requested)
