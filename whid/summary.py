"""AI summary client and non-blocking dispatch.

``SummaryClient`` performs one blocking ``generateContent`` request against
the Gemini REST API. ``SummaryDispatcher`` runs it on a daemon thread and
writes the outcome into the shared popup under its lock, so the input loop
never waits on the network.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from pathlib import Path

import requests

from .config import API_KEY_ENV_VAR, CONFIG_PATH
from .errors import AuthError, NetworkError, ProviderError, SummaryError
from .state import SummaryPopup

logger = logging.getLogger(__name__)

GEMINI_ENDPOINT = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"
REQUEST_TIMEOUT_SECONDS = 60.0
NO_SUMMARY_TEXT = "No summary received."
LOADING_TEXT = "Loading commit summary..."


class SummaryClient:
    """Blocking Gemini text-generation client."""

    def __init__(
        self,
        api_key: str,
        model: str,
        session: requests.Session | None = None,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.session = session
        self.timeout = timeout

    def summarize(self, prompt: str) -> str:
        """Return the model's answer for ``prompt``.

        Raises ``AuthError`` for rejected credentials, ``NetworkError`` when
        no response arrived, and ``ProviderError`` for any other failure.
        """
        url = GEMINI_ENDPOINT.format(model=self.model)
        payload = {"contents": [{"parts": [{"text": prompt}]}]}
        headers = {"x-goog-api-key": self.api_key, "Content-Type": "application/json"}
        post = self.session.post if self.session is not None else requests.post
        try:
            resp = post(url, json=payload, headers=headers, timeout=self.timeout)
        except requests.RequestException as exc:
            raise NetworkError(str(exc)) from exc

        if resp.status_code in {401, 403}:
            raise AuthError(f"HTTP {resp.status_code}: {resp.text[:200]}")
        if resp.status_code != 200:
            if "API_KEY_INVALID" in resp.text:
                raise AuthError(resp.text[:200])
            raise ProviderError(f"HTTP {resp.status_code}: {resp.text[:200]}")
        try:
            data = resp.json()
        except ValueError as exc:
            raise ProviderError(f"invalid JSON response: {exc}") from exc
        return extract_text(data)


def extract_text(data: object) -> str:
    """Pull ``candidates[0].content.parts[0].text`` out of a response body."""
    if not isinstance(data, dict):
        raise ProviderError("unexpected response shape")
    candidates = data.get("candidates") or []
    try:
        text = candidates[0]["content"]["parts"][0]["text"]
    except (IndexError, KeyError, TypeError):
        return NO_SUMMARY_TEXT
    if not isinstance(text, str) or not text.strip():
        return NO_SUMMARY_TEXT
    return text.strip()


def summary_error_text(exc: Exception, config_path: Path | None = None) -> str:
    """Popup text for a failed summary request."""
    if isinstance(exc, AuthError):
        path = CONFIG_PATH if config_path is None else config_path
        return (
            "Authentication with the AI provider failed.\n"
            "\n"
            f"Check gemini_api_key in {path}\n"
            f"or the {API_KEY_ENV_VAR} environment variable."
        )
    return f"Error: {exc}"


def _start_daemon_thread(target: Callable[[], None]) -> None:
    thread = threading.Thread(target=target, name="whid-summary", daemon=True)
    thread.start()


class SummaryDispatcher:
    """Schedule summary requests without blocking the caller.

    Requests are never cancelled; a later completion simply overwrites the
    popup text (last writer wins). The background thread only ever calls
    ``SummaryPopup.complete``.
    """

    def __init__(
        self,
        client_factory: Callable[[], SummaryClient],
        spawn: Callable[[Callable[[], None]], None] = _start_daemon_thread,
        config_path: Path | None = None,
    ) -> None:
        self._client_factory = client_factory
        self._spawn = spawn
        self._config_path = config_path

    def dispatch(self, popup: SummaryPopup, prompt: str) -> None:
        def work() -> None:
            try:
                text = self._client_factory().summarize(prompt)
                logger.info("summary request finished (%d chars)", len(text))
            except SummaryError as exc:
                logger.warning("summary request failed: %s", exc)
                text = summary_error_text(exc, self._config_path)
            except Exception as exc:  # the popup must always leave loading
                logger.exception("summary request crashed")
                text = summary_error_text(exc, self._config_path)
            popup.complete(text)

        logger.info("dispatching summary request (%d chars)", len(prompt))
        self._spawn(work)
