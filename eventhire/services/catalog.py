# eventhire/services/catalog.py
from sqlalchemy.orm import Session

from eventhire.core.errors import NotFound
from eventhire.db.models.reference import Category, Expertise, EventType


def _find_active(db: Session, model, entry_id: int, label: str):
    entry = db.query(model).filter(model.id == entry_id, model.is_active.is_(True)).first()
    if not entry:
        raise NotFound(f"Invalid {label}")
    return entry


def find_category(db: Session, category_id: int) -> Category:
    return _find_active(db, Category, category_id, "category")


def find_expertise(db: Session, expertise_id: int) -> Expertise:
    return _find_active(db, Expertise, expertise_id, "expertise")


def find_event_type(db: Session, event_type_id: int) -> EventType:
    return _find_active(db, EventType, event_type_id, "event type")


def find_categories(db: Session, category_ids) -> list:
    return [find_category(db, cid) for cid in dict.fromkeys(category_ids)]


def find_expertise_list(db: Session, expertise_ids) -> list:
    return [find_expertise(db, eid) for eid in dict.fromkeys(expertise_ids)]
