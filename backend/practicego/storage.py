from __future__ import annotations

from typing import Dict, Optional, Protocol

from sqlalchemy.orm import Session

from .models import KeyValueEntry


class KeyValueStore(Protocol):
	def get(self, key: str) -> Optional[str]: ...

	def set(self, key: str, value: str) -> None: ...


class InMemoryKeyValueStore:
	def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
		self.data: Dict[str, str] = dict(initial or {})

	def get(self, key: str) -> Optional[str]:
		return self.data.get(key)

	def set(self, key: str, value: str) -> None:
		self.data[key] = value


class SqlKeyValueStore:
	"""Key-value documents in the ``kv_entries`` table, scoped to one namespace."""

	def __init__(self, db: Session, namespace: str) -> None:
		self.db = db
		self.namespace = namespace

	def get(self, key: str) -> Optional[str]:
		row = self.db.get(KeyValueEntry, (self.namespace, key))
		return row.value if row is not None else None

	def set(self, key: str, value: str) -> None:
		row = self.db.get(KeyValueEntry, (self.namespace, key))
		if row is None:
			row = KeyValueEntry(namespace=self.namespace, key=key, value=value)
		else:
			row.value = value
		self.db.add(row)
		try:
			self.db.commit()
		except Exception:
			self.db.rollback()
			raise
