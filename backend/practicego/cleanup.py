from __future__ import annotations
from datetime import datetime, timedelta
from typing import Optional
from sqlalchemy import delete
from sqlalchemy.orm import Session

from .models import AuthSession
from .settings import settings


def purge_stale_sessions(db: Session, now: Optional[datetime] = None) -> int:
	# Only login sessions expire; progress and lesson documents are kept forever
	days = settings.session_retention_days
	if days <= 0:
		return 0
	threshold = (now or datetime.utcnow()) - timedelta(days=days)
	res = db.execute(delete(AuthSession).where(AuthSession.last_activity_at < threshold))
	db.commit()
	return res.rowcount or 0
