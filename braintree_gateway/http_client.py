"""Http - Sends one authenticated XML request to the gateway per call.

The transport builds the request (URL, XML body, auth, fixed headers, TLS,
proxy, timeout), dispatches it over httpx or replays it from mock fixtures,
and turns the outcome into a decoded dict or a typed exception. It never
retries.

Status policy:
    GET, DELETE   200 succeeds, anything else raises.
    POST, PUT     200, 201, 400 and 422 decode; 400/422 carry validation
                  errors the caller reads from the decoded body.
"""

from __future__ import annotations

import logging
import ssl
from typing import Any

import httpx

from braintree_gateway import xml_codec
from braintree_gateway.ca_file import resolve_ca_file
from braintree_gateway.configuration import (
    MOCK_REQUEST_LOG_ENVIRONMENT,
    Configuration,
    CredentialMode,
)
from braintree_gateway.exceptions import (
    RequestError,
    RequestTimeoutError,
    SSLCertificateError,
    raise_for_status_code,
)
from braintree_gateway.mock_store import MockResponseStore
from braintree_gateway.models import HttpResponse
from braintree_gateway.version import API_VERSION, VERSION

logger = logging.getLogger(__name__)

USER_AGENT = f"Braintree Python Library {VERSION}"

# Statuses POST/PUT decode instead of raising
MUTATION_HANDLED_STATUSES = frozenset({200, 201, 400, 422})


def _caused_by_ssl(exc: BaseException) -> bool:
    """True if an ssl.SSLError appears anywhere in the exception chain."""
    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        if isinstance(current, ssl.SSLError):
            return True
        seen.add(id(current))
        current = current.__cause__ or current.__context__
    return False


class Http:
    """HTTP transport for gateway resources.

    Usage:
        http = Http(config)
        customer = http.get(config.merchant_path + "/customers/abc")
        result = http.post(config.merchant_path + "/customers", {"customer": {...}})

    Each call opens and closes its own httpx.Client.
    """

    def __init__(self, config: Configuration) -> None:
        self._config = config
        self._use_client_credentials = False
        # Resolved lazily; recomputing concurrently yields equivalent values
        self._ca_file: str | None = None
        self._ssl_context: ssl.SSLContext | None = None
        self._mock_store = MockResponseStore(config.mock_responses_dir)

    def use_client_credentials(self) -> None:
        """Authenticate every later request with the client id/secret pair."""
        self._use_client_credentials = True

    # -------------------------------------------------------------------------
    # Public operations
    # -------------------------------------------------------------------------

    def get(self, path: str) -> dict[str, Any]:
        response = self._do_request("GET", path)
        if response.status == 200:
            return xml_codec.decode(response.body)
        raise_for_status_code(response.status)

    def delete(self, path: str) -> bool:
        response = self._do_request("DELETE", path)
        if response.status == 200:
            return True
        raise_for_status_code(response.status)

    def post(self, path: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        response = self._do_request("POST", path, self._build_xml(params))
        if response.status in MUTATION_HANDLED_STATUSES:
            return xml_codec.decode(response.body)
        raise_for_status_code(response.status)

    def put(self, path: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        response = self._do_request("PUT", path, self._build_xml(params))
        if response.status in MUTATION_HANDLED_STATUSES:
            return xml_codec.decode(response.body)
        raise_for_status_code(response.status)

    # -------------------------------------------------------------------------
    # Request construction
    # -------------------------------------------------------------------------

    @staticmethod
    def _build_xml(params: dict[str, Any] | None) -> str | None:
        return xml_codec.encode(params) if params else None

    def _headers(self) -> dict[str, str]:
        return {
            "Accept": "application/xml",
            "Content-Type": "application/xml",
            "User-Agent": USER_AGENT,
            "X-ApiVersion": API_VERSION,
            "Accept-Encoding": "gzip",
        }

    def _authorization(self) -> tuple[httpx.BasicAuth | None, dict[str, str]]:
        """Pick the single auth mechanism for a request.

        Returns:
            ``(basic_auth, extra_headers)``; exactly one of the two is used.
        """
        config = self._config
        client_mode = config.credential_mode is CredentialMode.CLIENT_CREDENTIALS
        if self._use_client_credentials or client_mode:
            return httpx.BasicAuth(config.client_id or "", config.client_secret or ""), {}
        if config.is_access_token:
            return None, {"Authorization": f"Bearer {config.access_token}"}
        return httpx.BasicAuth(config.public_key or "", config.private_key or ""), {}

    def _get_ca_file(self) -> str:
        if self._ca_file is None:
            self._ca_file = resolve_ca_file(self._config.ca_file)
        return self._ca_file

    def _get_ssl_context(self) -> ssl.SSLContext:
        """Build, once per instance, a verifying SSL context from the resolved CA bundle.

        Raises:
            SSLCaFileNotFoundError: If a packed CA file cannot be staged.
            SSLCertificateError: If the CA bundle cannot be loaded.
        """
        if self._ssl_context is not None:
            return self._ssl_context

        ca_file = self._get_ca_file()
        try:
            context = ssl.create_default_context(cafile=ca_file)
        except (ssl.SSLError, OSError) as e:
            raise SSLCertificateError(f"Could not load CA file {ca_file}: {e}") from e
        context.verify_mode = ssl.CERT_REQUIRED
        context.check_hostname = True
        self._ssl_context = context
        return context

    def _build_client_kwargs(self) -> dict[str, Any]:
        """Build kwargs for httpx.Client including TLS and proxy configuration."""
        kwargs: dict[str, Any] = {"timeout": self._config.timeout}

        if self._config.ssl_on:
            kwargs["verify"] = self._get_ssl_context()

        if self._config.is_using_proxy:
            kwargs["proxy"] = self._config.proxy_url

        return kwargs

    # -------------------------------------------------------------------------
    # Dispatch
    # -------------------------------------------------------------------------

    def _do_request(self, verb: str, path: str, body: str | None = None) -> HttpResponse:
        url = self._config.base_url + path

        if self._config.use_mock_response:
            return self._mock_store.load(verb, url, body)

        response = self._do_url_request(verb, url, body)
        if self._config.save_mock_response:
            self._mock_store.save(
                verb,
                url,
                body,
                response,
                save_request=self._config.environment is MOCK_REQUEST_LOG_ENVIRONMENT,
            )
        return response

    def _do_url_request(self, verb: str, url: str, body: str | None = None) -> HttpResponse:
        """Send one request over the network.

        Raises:
            RequestTimeoutError: If the request timed out without a status.
            SSLCertificateError: If TLS is on and the handshake failed.
            RequestError: For any other transport failure.
        """
        headers = self._headers()
        auth, auth_headers = self._authorization()
        headers.update(auth_headers)
        client_kwargs = self._build_client_kwargs()

        try:
            with httpx.Client(**client_kwargs) as client:
                http_response = client.request(
                    method=verb,
                    url=url,
                    content=body,
                    headers=headers,
                    auth=auth,
                )
        except httpx.TimeoutException as e:
            raise RequestTimeoutError(f"{verb} {url} timed out: {e}") from e
        except httpx.RequestError as e:
            if self._config.ssl_on and _caused_by_ssl(e):
                raise SSLCertificateError(f"{verb} {url} TLS failure: {e}") from e
            raise RequestError(f"{verb} {url} request error: {e}") from e

        logger.debug("%s %s -> %s", verb, url, http_response.status_code)
        return HttpResponse(status=http_response.status_code, body=http_response.text)
