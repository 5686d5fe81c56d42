from __future__ import annotations

import http.client
import json
import logging
import socket
from urllib.error import HTTPError, URLError
from urllib.parse import quote
from urllib.request import Request, urlopen

from pydantic import ValidationError

from sampleduct.schemas.sample import Sample
from sampleduct.sources.base import SampleSource, SourceTransportError, UnauthorizedError

logger = logging.getLogger(__name__)

_SAMPLES_PATH = "/v1/samples"


class RefocusClient(SampleSource):
    def __init__(
        self, source_id: str, base_url: str, token: str, timeout_seconds: float = 10.0
    ) -> None:
        super().__init__(source_id)
        self.base_url = base_url.rstrip("/")
        self._token = token
        self.timeout_seconds = timeout_seconds

    def _build_url(self, name: str) -> str:
        return f"{self.base_url}{_SAMPLES_PATH}/{quote(name, safe='')}"

    def get_sample(self, name: str) -> Sample | None:
        logger.debug("Loading sample %s from %s", name, self.source_id)
        request = Request(
            self._build_url(name),
            headers={"Authorization": self._token, "Accept": "application/json"},
        )
        try:
            with urlopen(request, timeout=self.timeout_seconds) as response:
                body = response.read().decode("utf-8")
            payload = json.loads(body)
        except HTTPError as exc:
            if exc.code in (401, 403):
                raise UnauthorizedError(
                    self.source_id, f"HTTP {exc.code} for sample {name}"
                ) from exc
            if exc.code == 404:
                return None
            raise SourceTransportError(
                self.source_id, f"HTTP {exc.code} for sample {name}"
            ) from exc
        except (
            URLError,
            json.JSONDecodeError,
            UnicodeDecodeError,
            http.client.HTTPException,
            TimeoutError,
            socket.timeout,
            OSError,
        ) as exc:
            raise SourceTransportError(
                self.source_id, f"could not load sample {name}: {exc}"
            ) from exc

        if not payload:
            return None
        if not isinstance(payload, dict):
            raise SourceTransportError(
                self.source_id, f"unexpected payload for sample {name}"
            )

        value = payload.get("value")
        try:
            return Sample(
                name=payload.get("name") or name,
                value="" if value is None else str(value),
                updated_at=payload.get("updatedAt") or "",
            )
        except ValidationError as exc:
            raise SourceTransportError(
                self.source_id, f"malformed sample {name}: {exc}"
            ) from exc
