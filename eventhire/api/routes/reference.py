# eventhire/api/routes/reference.py
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List

from eventhire.db.base import get_db
from eventhire.db.models.reference import Category, Expertise, EventType
from eventhire.db.models.user import User
from eventhire.schemas.reference import (
    EventTypeCreate,
    EventTypeResponse,
    EventTypeUpdate,
    ReferenceCreate,
    ReferenceResponse,
    ReferenceUpdate,
)
from eventhire.core.security import require_admin
from eventhire.services.catalog import find_categories

router = APIRouter(prefix="/reference", tags=["reference"])

KINDS = {
    "categories": Category,
    "expertise": Expertise,
}


def _model_for(kind: str):
    model = KINDS.get(kind)
    if model is None:
        raise HTTPException(status_code=404, detail="Unknown reference type")
    return model


def _ensure_unique_name(db: Session, model, name: str, exclude_id: int = None):
    q = db.query(model).filter(model.name == name)
    if exclude_id is not None:
        q = q.filter(model.id != exclude_id)
    if q.first():
        raise HTTPException(status_code=400, detail=f"{name} already exists")


# --------------------------
# Event types
# --------------------------
@router.get("/event-types", response_model=List[EventTypeResponse])
def list_event_types(db: Session = Depends(get_db)):
    return db.query(EventType).filter(EventType.is_active.is_(True)).order_by(EventType.name).all()


@router.get("/event-types/{event_type_id}", response_model=EventTypeResponse)
def get_event_type(event_type_id: int, db: Session = Depends(get_db)):
    event_type = db.query(EventType).filter(EventType.id == event_type_id).first()
    if not event_type:
        raise HTTPException(status_code=404, detail="Event type not found")
    return event_type


@router.post("/event-types", response_model=EventTypeResponse, status_code=status.HTTP_201_CREATED)
def create_event_type(payload: EventTypeCreate, db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    _ensure_unique_name(db, EventType, payload.name)
    event_type = EventType(name=payload.name, description=payload.description, icon=payload.icon)
    event_type.suggested_categories = find_categories(db, payload.suggested_category_ids)
    db.add(event_type)
    db.commit()
    db.refresh(event_type)
    return event_type


@router.put("/event-types/{event_type_id}", response_model=EventTypeResponse)
def update_event_type(
    event_type_id: int,
    payload: EventTypeUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    event_type = db.query(EventType).filter(EventType.id == event_type_id).first()
    if not event_type:
        raise HTTPException(status_code=404, detail="Event type not found")

    data = payload.model_dump(exclude_unset=True)
    category_ids = data.pop("suggested_category_ids", None)
    if "name" in data:
        _ensure_unique_name(db, EventType, data["name"], exclude_id=event_type.id)
    for field, value in data.items():
        setattr(event_type, field, value)
    if category_ids is not None:
        event_type.suggested_categories = find_categories(db, category_ids)

    db.commit()
    db.refresh(event_type)
    return event_type


# --------------------------
# Categories / expertise
# --------------------------
@router.get("/{kind}", response_model=List[ReferenceResponse])
def list_entries(kind: str, db: Session = Depends(get_db)):
    model = _model_for(kind)
    return db.query(model).filter(model.is_active.is_(True)).order_by(model.name).all()


@router.get("/{kind}/{entry_id}", response_model=ReferenceResponse)
def get_entry(kind: str, entry_id: int, db: Session = Depends(get_db)):
    model = _model_for(kind)
    entry = db.query(model).filter(model.id == entry_id).first()
    if not entry:
        raise HTTPException(status_code=404, detail="Not found")
    return entry


@router.post("/{kind}", response_model=ReferenceResponse, status_code=status.HTTP_201_CREATED)
def create_entry(kind: str, payload: ReferenceCreate, db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    model = _model_for(kind)
    _ensure_unique_name(db, model, payload.name)
    entry = model(name=payload.name, description=payload.description, icon=payload.icon)
    db.add(entry)
    db.commit()
    db.refresh(entry)
    return entry


@router.put("/{kind}/{entry_id}", response_model=ReferenceResponse)
def update_entry(
    kind: str,
    entry_id: int,
    payload: ReferenceUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
):
    model = _model_for(kind)
    entry = db.query(model).filter(model.id == entry_id).first()
    if not entry:
        raise HTTPException(status_code=404, detail="Not found")

    data = payload.model_dump(exclude_unset=True)
    if "name" in data:
        _ensure_unique_name(db, model, data["name"], exclude_id=entry.id)
    for field, value in data.items():
        setattr(entry, field, value)
    db.commit()
    db.refresh(entry)
    return entry


# soft: entries stay referenced by existing profiles
@router.delete("/{kind}/{entry_id}", response_model=ReferenceResponse)
def deactivate_entry(kind: str, entry_id: int, db: Session = Depends(get_db), admin: User = Depends(require_admin)):
    model = _model_for(kind)
    entry = db.query(model).filter(model.id == entry_id).first()
    if not entry:
        raise HTTPException(status_code=404, detail="Not found")
    entry.is_active = False
    db.commit()
    db.refresh(entry)
    return entry
