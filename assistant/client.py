"""HTTP-Anbindung an den Completion-Dienst (generateContent).

Der Client ist ein ``Completion``-Callable für ``ChatSession``: er nimmt den
von ``build_payload`` gebauten Request-Body und gibt das Antwort-JSON zurück.
Ein Aufruf, kein Retry.
"""

import json
import logging
import os
import urllib.error
import urllib.parse
import urllib.request
from typing import Any, Optional

from assistant.prompt import AssistantError
from config.schema import AssistantConfig

logger = logging.getLogger(__name__)


class GeminiClient:
    """Schickt Chat-Verläufe an ``<api_base_url>/models/<model>:generateContent``."""

    def __init__(self, config: AssistantConfig, api_key: Optional[str] = None) -> None:
        self.api_key = api_key or os.environ.get(config.api_key_env)
        if not self.api_key:
            raise AssistantError(
                f"Kein API-Schlüssel: Umgebungsvariable {config.api_key_env} setzen."
            )
        self.base_url = config.api_base_url.rstrip("/")
        self.timeout_s = config.timeout_s

    def url_for(self, model: str) -> str:
        return (
            f"{self.base_url}/models/{urllib.parse.quote(model)}:generateContent"
            f"?key={urllib.parse.quote(self.api_key)}"
        )

    def __call__(self, payload: dict[str, Any]) -> dict[str, Any]:
        body = {"contents": payload["contents"]}
        req = urllib.request.Request(
            self.url_for(payload["model"]),
            data=json.dumps(body, ensure_ascii=False).encode("utf-8"),
            headers={"Content-Type": "application/json"},
            method="POST",
        )
        logger.debug("Completion-Anfrage: %d Nachrichten an %s",
                     len(body["contents"]), payload["model"])
        try:
            with urllib.request.urlopen(req, timeout=self.timeout_s) as resp:
                raw = resp.read().decode("utf-8")
        except urllib.error.HTTPError as e:
            detail = e.read().decode("utf-8", errors="replace")
            raise AssistantError(f"Dienst antwortete mit HTTP {e.code}: {detail}") from e
        except urllib.error.URLError as e:
            raise AssistantError(f"Dienst nicht erreichbar: {e.reason}") from e

        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise AssistantError("Antwort des Dienstes ist kein JSON.") from e
