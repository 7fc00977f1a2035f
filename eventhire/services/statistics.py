# eventhire/services/statistics.py
"""Counter and aggregate helpers shared by the booking and rating engines."""
from sqlalchemy.orm import Session

COUNTER_FIELDS = ("total_transactions", "completed_transactions")


def increment_counter(db: Session, profile, field: str) -> None:
    """
    Add one to a profile counter with a single UPDATE ... SET col = col + 1.
    Runs inside the caller's transaction; nothing is committed here.
    """
    if field not in COUNTER_FIELDS:
        raise ValueError(f"Unknown counter: {field}")
    model = type(profile)
    column = getattr(model, field)
    db.query(model).filter(model.id == profile.id).update(
        {column: column + 1}, synchronize_session=False
    )
    db.expire(profile, [field])


def ceil_to_tenths(total: int, count: int) -> float:
    """
    Mean of integer scores rounded UP to one decimal place.

    4.5 -> 4.5, 4.333.. -> 4.4, 4.01 -> 4.1. Integer arithmetic keeps
    exact means (e.g. 4.3) from drifting up through float error.
    """
    if count <= 0:
        return 0.0
    tenths = -(-(total * 10) // count)
    return tenths / 10
