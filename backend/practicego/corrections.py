from __future__ import annotations

import json
import logging
import re
from typing import Dict, List, Optional, Tuple

from pydantic import TypeAdapter, ValidationError

from .progress.achievements import AchievementId
from .schemas import WordCorrection

logger = logging.getLogger(__name__)

WORD_WATCHER_THRESHOLD = 10

# Trailer the tutor persona appends after its visible reply
_TRAILER_RE = re.compile(r"<!--\s*CORRECTIONS:\s*(.*?)\s*-->", re.DOTALL)
_corrections_adapter = TypeAdapter(List[WordCorrection])


def parse_reply(text: str) -> Tuple[str, List[WordCorrection]]:
	"""Split a tutor reply into the text shown to the learner and its corrections."""
	match = _TRAILER_RE.search(text)
	if match is None:
		return text.strip(), []
	visible = (text[:match.start()] + text[match.end():]).strip()
	try:
		corrections = _corrections_adapter.validate_python(json.loads(match.group(1)))
	except (ValueError, ValidationError) as e:
		logger.warning("Failed to parse corrections trailer: %s", e)
		corrections = []
	return visible, corrections


class CorrectionTracker:
	"""Distinct corrected words seen in one chat, keyed by the learner's original word."""

	def __init__(self) -> None:
		self.words: Dict[str, WordCorrection] = {}

	def add(self, corrections: List[WordCorrection]) -> int:
		for c in corrections:
			self.words.setdefault(c.original, c)
		return len(self.words)

	@property
	def earned(self) -> Optional[AchievementId]:
		if len(self.words) >= WORD_WATCHER_THRESHOLD:
			return AchievementId.WORD_WATCHER
		return None
