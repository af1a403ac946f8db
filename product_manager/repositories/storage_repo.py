from typing import Optional

from sqlalchemy.orm import Session

from product_manager.models.storage_entry import StorageEntry


class StorageRepository:
    """
    Key-value access over ``storage_entries``, shaped like browser local
    storage: string keys, string values, missing keys read as ``None``.
    Each write commits immediately.
    """

    def __init__(self, db: Session):
        self.db = db

    def get_item(self, key: str) -> Optional[str]:
        entry = self.db.get(StorageEntry, key)
        if entry is None:
            return None
        return entry.value

    def set_item(self, key: str, value: str) -> StorageEntry:
        entry = self.db.get(StorageEntry, key)
        if entry:
            entry.value = value
        else:
            entry = StorageEntry(key=key, value=value)
            self.db.add(entry)
        self.db.commit()
        return entry

    def remove_item(self, key: str) -> bool:
        entry = self.db.get(StorageEntry, key)
        if not entry:
            return False
        self.db.delete(entry)
        self.db.commit()
        return True
