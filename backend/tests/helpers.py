from datetime import datetime, timedelta, timezone

# Fixed non-UTC zone so day boundaries never depend on the machine running the tests
TZ = timezone(timedelta(hours=-5))
PROGRESS_KEY = "practicego_user_progress"


def at(year, month, day, hour=12, minute=0):
	return datetime(year, month, day, hour, minute, tzinfo=TZ)


class FakeClock:
	def __init__(self, now: datetime) -> None:
		self.now = now

	def __call__(self) -> datetime:
		return self.now

	def advance(self, **kwargs) -> None:
		self.now = self.now + timedelta(**kwargs)


class FakeGemini:
	"""Stands in for GeminiClient; answers are queued per method."""

	def __init__(self) -> None:
		self.json_answers = []
		self.text_answers = []
		self.chat_answers = []
		self.calls = []

	async def generate(self, prompt):
		self.calls.append(("generate", prompt))
		return self._next(self.text_answers)

	async def generate_json(self, prompt, schema):
		self.calls.append(("generate_json", prompt))
		return self._next(self.json_answers)

	async def generate_multimodal(self, parts, *, schema=None):
		self.calls.append(("generate_multimodal", parts))
		return self._next(self.text_answers)

	async def chat(self, history, *, system_instruction=None):
		self.calls.append(("chat", [dict(turn) for turn in history], system_instruction))
		return self._next(self.chat_answers)

	async def aclose(self):
		pass

	@staticmethod
	def _next(queue):
		if not queue:
			raise RuntimeError("model unavailable")
		answer = queue.pop(0)
		if isinstance(answer, Exception):
			raise answer
		return answer
