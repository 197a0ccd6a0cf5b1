"""Scribble classifier client.

A remote service decides whether the drawer is making a real attempt at the
target word or just scribbling, and may recommend a skip vote.

- ScribbleClassifier: ABC used by rooms
- HttpScribbleClassifier: JSON-over-HTTP implementation (requests)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

import requests

from .errors import ClassifierUnavailable


@dataclass(frozen=True)
class ScribbleVerdict:
    should_skip: bool
    reason: str


class ScribbleClassifier(ABC):
    @abstractmethod
    def analyze(self, drawing_history: str, target_word: str) -> ScribbleVerdict:
        """Classify a serialized stroke log. Raises ClassifierUnavailable."""


class HttpScribbleClassifier(ScribbleClassifier):
    def __init__(
        self,
        url: str,
        timeout_s: float = 10.0,
        token: str = "",
        session: requests.Session | None = None,
    ):
        self._url = url
        self._timeout_s = timeout_s
        self._session = session or requests.Session()
        if token:
            self._session.headers["Authorization"] = f"Bearer {token}"

    def analyze(self, drawing_history: str, target_word: str) -> ScribbleVerdict:
        try:
            response = self._session.post(
                self._url,
                json={"drawingHistory": drawing_history, "targetWord": target_word},
                timeout=self._timeout_s,
            )
            response.raise_for_status()
            data = response.json()
        except requests.RequestException as e:
            raise ClassifierUnavailable(f"request failed: {e}") from e
        except ValueError as e:
            raise ClassifierUnavailable(f"invalid JSON response: {e}") from e

        if not isinstance(data, dict):
            raise ClassifierUnavailable("unexpected response shape")

        should_skip = data.get("shouldInitiateSkipVote", data.get("shouldSkip"))
        if not isinstance(should_skip, bool):
            raise ClassifierUnavailable("response missing skip recommendation")

        reason = data.get("reason")
        return ScribbleVerdict(should_skip=should_skip, reason=reason if isinstance(reason, str) else "")


def build_classifier(url: str, timeout_s: float = 10.0, token: str = "") -> ScribbleClassifier | None:
    url = (url or "").strip()
    if not url:
        return None
    return HttpScribbleClassifier(url, timeout_s=timeout_s, token=token)
