# FILE: pharmaledger/services/lookup.py
from __future__ import annotations

from typing import Optional, Type, TypeVar

from sqlalchemy.orm import Session

from pharmaledger.services.errors import NotFoundError

T = TypeVar("T")


def get_or_404(db: Session, model: Type[T], obj_id: Optional[int], label: str, *, lock: bool = False) -> T:
    if obj_id is None:
        raise NotFoundError(f"{label} not found")
    if lock:
        obj = db.query(model).filter(model.id == obj_id).with_for_update().first()
    else:
        obj = db.get(model, obj_id)
    if not obj:
        raise NotFoundError(f"{label} not found")
    return obj
