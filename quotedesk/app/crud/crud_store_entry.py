"""CRUD operations for key-value store entries."""

from typing import Optional

from sqlalchemy.orm import Session

from quotedesk.app.models.store_entry import StoreEntry


class CRUDStoreEntry:
    def get(self, db: Session, *, key: str) -> Optional[StoreEntry]:
        return db.query(StoreEntry).filter(StoreEntry.key == key).first()

    def upsert(self, db: Session, *, key: str, value: str) -> StoreEntry:
        obj = self.get(db, key=key)
        if obj is None:
            obj = StoreEntry(key=key, value=value)
            db.add(obj)
        else:
            obj.value = value
        db.commit()
        db.refresh(obj)
        return obj

    def delete(self, db: Session, *, key: str) -> Optional[StoreEntry]:
        obj = self.get(db, key=key)
        if obj is None:
            return None
        db.delete(obj)
        db.commit()
        return obj


store_entry_crud = CRUDStoreEntry()
