"""Mock Store - Content-addressed response fixtures for offline testing.

Each fixture is keyed by independent MD5 digests of the request verb, full
URL and body, concatenated into the file name::

    <md5(verb)><md5(url)><md5(body)>.json

Recording overwrites the fixture for the same triple, so a key always holds
the most recent response. In the designated environment a side-car file
``<md5(url)><md5(body)>_req.json`` also keeps the raw request for inspection.
"""

from __future__ import annotations

import hashlib
import html
import json
import logging
from pathlib import Path
from typing import Any

from braintree_gateway.models import HttpResponse, MockRecord, MockRequestRecord

logger = logging.getLogger(__name__)

FIXTURE_SUFFIX = ".json"
REQUEST_SUFFIX = "_req.json"


def _md5(text: str) -> str:
    return hashlib.md5(text.encode("utf-8")).hexdigest()


class MockResponseStore:
    """Reads and writes response fixtures in a directory.

    Usage:
        store = MockResponseStore(Path("./mock_responses"))
        store.save("GET", url, None, response)
        store.load("GET", url, None)  # same status and body
    """

    def __init__(self, directory: Path) -> None:
        self._directory = directory

    @staticmethod
    def fixture_key(verb: str, url: str, body: str | None) -> str:
        return _md5(verb) + _md5(url) + _md5(body or "")

    @staticmethod
    def request_key(url: str, body: str | None) -> str:
        return _md5(url) + _md5(body or "")

    def fixture_path(self, verb: str, url: str, body: str | None) -> Path:
        return self._directory / (self.fixture_key(verb, url, body) + FIXTURE_SUFFIX)

    def request_path(self, url: str, body: str | None) -> Path:
        return self._directory / (self.request_key(url, body) + REQUEST_SUFFIX)

    def load(self, verb: str, url: str, body: str | None) -> HttpResponse:
        """Replay the fixture for a request.

        Returns:
            The recorded response, or a 404 with an empty body when no
            fixture exists. A miss is not an error.
        """
        path = self.fixture_path(verb, url, body)
        if not path.is_file():
            logger.debug("No mock fixture for %s %s (%s)", verb, url, path.name)
            return HttpResponse(status=404, body="")

        with open(path, encoding="utf-8") as f:
            record = MockRecord.model_validate(json.load(f))

        logger.debug("Replaying mock fixture %s for %s %s", path.name, verb, url)
        return HttpResponse(status=record.status, body=html.unescape(record.body))

    def save(
        self,
        verb: str,
        url: str,
        body: str | None,
        response: HttpResponse,
        save_request: bool = False,
    ) -> Path:
        """Record a response as the fixture for a request.

        Args:
            verb: HTTP method.
            url: Full request URL.
            body: Request body, or None.
            response: The real response to record.
            save_request: Also write the raw request side-car file.

        Returns:
            Path to the fixture file.
        """
        self._directory.mkdir(parents=True, exist_ok=True)

        record = MockRecord(status=response.status, body=html.escape(response.body, quote=True))
        path = self.fixture_path(verb, url, body)
        self._write_json(path, record.model_dump())

        if save_request:
            request_record = MockRequestRecord(url=url, body=body or "")
            self._write_json(self.request_path(url, body), request_record.model_dump())

        logger.debug("Recorded mock fixture %s for %s %s", path.name, verb, url)
        return path

    def _write_json(self, path: Path, data: Any) -> None:
        """Write data as JSON, via a temp file and rename."""
        temp_path = path.with_suffix(".tmp")
        with open(temp_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
            f.write("\n")
        temp_path.replace(path)
