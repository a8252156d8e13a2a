"""
Chat-completions client for DeepSeek or any OpenAI-compatible endpoint.

Supports plain text replies and JSON replies through
``response_format={"type": "json_object"}``.
"""
import json
import re
import threading

import requests

import config
from logger import logger


class LLMError(RuntimeError):
    """The model could not be reached or returned an unusable reply."""


def parse_llm_json(text: str) -> dict:
    """Robust JSON parsing for model outputs. Returns {} on failure."""
    if not text:
        return {}
    text = text.strip()
    if text.startswith('```'):
        text = re.sub(r"^```[a-zA-Z]*\n", "", text)
        if text.endswith('```'):
            text = text[:-3]
    start = text.find('{')
    end = text.rfind('}')
    if start != -1 and end != -1 and end > start:
        candidate = text[start:end+1]
        try:
            parsed = json.loads(candidate)
            return parsed if isinstance(parsed, dict) else {}
        except json.JSONDecodeError:
            pass
    try:
        parsed = json.loads(text)
    except ValueError:
        return {}
    return parsed if isinstance(parsed, dict) else {}


class ChatClient:
    def __init__(self, api_key: str, url: str = config.DEEPSEEK_URL, model: str = config.DEEPSEEK_MODEL,
                 temperature: float = config.DS_TEMPERATURE, max_tokens: int = config.DS_MAX_TOKENS,
                 top_p: float = config.DS_TOP_P, timeout: int = config.DS_TIMEOUT):
        self.api_key = api_key
        self.url = url
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.top_p = top_p
        self.timeout = timeout

    @classmethod
    def from_config(cls) -> "ChatClient":
        return cls(api_key=config.DEEPSEEK_API_KEY)

    def complete(self, messages: list, json_mode: bool = False) -> str:
        """Send `messages` and return the assistant's reply text."""
        headers = {
            'Authorization': f'Bearer {self.api_key}',
            'Content-Type': 'application/json',
            'Accept': 'application/json',
        }
        payload = {
            'model': self.model,
            'messages': messages,
            'temperature': self.temperature,
            'max_tokens': self.max_tokens,
            'top_p': self.top_p,
        }
        if json_mode:
            payload['response_format'] = {'type': 'json_object'}

        logger.debug("Payload sent to %s: %s", self.url, json.dumps(payload, ensure_ascii=False))

        try:
            response = requests.post(self.url, headers=headers, json=payload, timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.HTTPError as e:
            logger.error(f"LLM API HTTP Error: {e}; body: {response.text[:500]}")
            raise LLMError(f"LLM API returned HTTP {response.status_code}") from e
        except requests.exceptions.RequestException as e:
            logger.error(f"LLM API request failed: {type(e).__name__}: {e}")
            raise LLMError("LLM API request failed") from e

        try:
            content = response.json()['choices'][0]['message']['content']
        except (ValueError, KeyError, IndexError, TypeError) as e:
            logger.error(f"LLM API Response Parsing Error: {type(e).__name__}: {e}")
            raise LLMError("Unexpected response format from the LLM API") from e

        if not isinstance(content, str):
            raise LLMError("LLM API returned no message content")
        return content

    def complete_json(self, messages: list) -> dict:
        """Like complete() but asks for a JSON object and parses it."""
        text = self.complete(messages, json_mode=True)
        data = parse_llm_json(text)
        if not data:
            logger.error(f"LLM reply is not a JSON object: {text[:200]!r}")
            raise LLMError("LLM reply is not a JSON object")
        return data


_default_client = None
_default_client_lock = threading.Lock()


def get_default_client() -> ChatClient:
    global _default_client
    if _default_client is None:
        with _default_client_lock:
            if _default_client is None:
                _default_client = ChatClient.from_config()
    return _default_client
