from __future__ import annotations
import json
import logging
import httpx
from typing import Any, Dict, List, Optional, Tuple
from .settings import settings

logger = logging.getLogger(__name__)

Messages = List[Dict[str, str]]


def _resolve_endpoint(model: str, base_url: Optional[str]) -> Tuple[str, bool]:
	"""Return (url, key_in_query) for the configured provider."""
	if base_url:
		return base_url, settings.gemini_provider != "vertex"
	if settings.gemini_provider == "vertex":
		region = settings.vertex_region
		project = settings.vertex_project or "placeholder-project"
		url = (
			f"https://{region}-aiplatform.googleapis.com/v1/projects/{project}"
			f"/locations/{region}/publishers/google/models/{model}:generateContent"
		)
		return url, False
	return f"https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent", True


def _json_config(schema: Dict[str, Any]) -> Dict[str, Any]:
	return {"responseMimeType": "application/json", "responseSchema": schema}


def _user_turn(parts: List[Dict[str, Any]]) -> Dict[str, Any]:
	return {"role": "user", "parts": parts}


class GeminiClient:
	"""Thin async wrapper over the Gemini generateContent REST call.

	Text requests fall back to OpenRouter when OPENROUTER_API_KEY is set and the
	primary call fails. Requests carrying documents never fall back.
	"""

	def __init__(self, api_key: Optional[str] = None, *, base_url: Optional[str] = None, model: Optional[str] = None) -> None:
		self.api_key = api_key or settings.gemini_api_key
		if not self.api_key:
			raise ValueError("GEMINI_API_KEY is not configured")
		self.model = model or settings.gemini_model
		self.base_url, self._auth_in_query = _resolve_endpoint(self.model, base_url)
		self._client = httpx.AsyncClient(timeout=30)
		self._fallback_client: Optional[httpx.AsyncClient] = None
		if settings.openrouter_api_key:
			self._fallback_client = httpx.AsyncClient(timeout=30)

	async def generate(self, prompt: str) -> str:
		payload = {"contents": [_user_turn([{"text": prompt}])]}
		return await self._post_payload(payload, fallback_messages=[{"role": "user", "content": prompt}])

	async def generate_json(self, prompt: str, schema: Dict[str, Any]) -> Any:
		"""Ask for a JSON answer constrained by ``schema`` and decode it."""
		payload = {"contents": [_user_turn([{"text": prompt}])], "generationConfig": _json_config(schema)}
		text = await self._post_payload(payload, fallback_messages=[{"role": "user", "content": prompt}])
		return json.loads(strip_code_fence(text))

	async def generate_multimodal(self, parts: List[Dict[str, Any]], *, schema: Optional[Dict[str, Any]] = None) -> str:
		payload: Dict[str, Any] = {"contents": [_user_turn(parts)]}
		if schema is not None:
			payload["generationConfig"] = _json_config(schema)
		return await self._post_payload(payload, fallback_messages=None)

	async def chat(self, history: List[Dict[str, str]], *, system_instruction: Optional[str] = None) -> str:
		"""One chat turn. ``history`` holds {"role": "user"|"model", "text": ...} items, newest last."""
		payload: Dict[str, Any] = {
			"contents": [{"role": turn["role"], "parts": [{"text": turn["text"]}]} for turn in history],
		}
		messages: Messages = []
		if system_instruction:
			payload["systemInstruction"] = {"parts": [{"text": system_instruction}]}
			messages.append({"role": "system", "content": system_instruction})
		for turn in history:
			messages.append({"role": "assistant" if turn["role"] == "model" else "user", "content": turn["text"]})
		return await self._post_payload(payload, fallback_messages=messages)

	async def _post_payload(self, payload: Dict[str, Any], *, fallback_messages: Optional[Messages]) -> str:
		try:
			return await self._post_primary(payload)
		except (httpx.HTTPError, RuntimeError) as err:
			if self._fallback_client is None or fallback_messages is None:
				raise
			logger.warning("Gemini call failed, trying OpenRouter: %s", err)
			return await self._post_fallback(fallback_messages, err)

	async def _post_primary(self, payload: Dict[str, Any]) -> str:
		params: Dict[str, str] = {}
		headers: Dict[str, str] = {}
		if self._auth_in_query:
			params["key"] = self.api_key
		else:
			headers["x-goog-api-key"] = self.api_key
		r = await self._client.post(self.base_url, params=params, headers=headers, json=payload)
		r.raise_for_status()
		try:
			return r.json()["candidates"][0]["content"]["parts"][0]["text"]
		except (ValueError, KeyError, IndexError, TypeError):
			raise RuntimeError(f"Unexpected Gemini response: {r.text[:500]}")

	async def _post_fallback(self, messages: Messages, primary_error: Exception) -> str:
		headers = {
			"Authorization": f"Bearer {settings.openrouter_api_key}",
			"Content-Type": "application/json",
			"HTTP-Referer": settings.openrouter_referer,
			"X-Title": settings.openrouter_title,
		}
		try:
			r = await self._fallback_client.post(
				settings.openrouter_base_url,
				headers={k: v for k, v in headers.items() if v},
				json={"model": settings.openrouter_model, "messages": messages},
			)
			r.raise_for_status()
			return r.json()["choices"][0]["message"]["content"]
		except Exception as fallback_err:
			raise RuntimeError(
				f"Gemini primary call failed ({primary_error}); fallback via OpenRouter also failed"
			) from fallback_err

	async def aclose(self) -> None:
		await self._client.aclose()
		if self._fallback_client is not None:
			await self._fallback_client.aclose()


def strip_code_fence(text: str) -> str:
	"""Remove a surrounding ```json fence some models add to JSON answers."""
	text = text.strip()
	if not text.startswith("```"):
		return text
	body = text.split("\n", 1)[1] if "\n" in text else ""
	body = body.rstrip()
	if body.endswith("```"):
		body = body[:-3]
	return body.strip()
