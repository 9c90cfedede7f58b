"""
registry_client.py

Responsibility: Isolate all direct container-registry API interaction.

This module must be the only place that:
- Constructs registry REST endpoints
- Sends HTTP requests to the registry
- Interprets registry API responses / error payloads

The syncer depends only on the `RegistryClient` protocol, so tests can pass a
fake and other registries can be added beside `DockerHubClient`.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol

import requests

from readme_sync import __version__
from readme_sync.errors import AuthError, UploadError

log = logging.getLogger(__name__)

DOCKERHUB_API_BASE = "https://hub.docker.com/v2"

# Limits enforced by Docker Hub on repository descriptions.
MAX_FULL_DESCRIPTION_BYTES = 25_000
MAX_SHORT_DESCRIPTION_CHARS = 100


class RegistryClient(Protocol):
    def authenticate(self, username: str, password: str) -> None: ...

    def update_description(
        self,
        repository: str,
        full_description: str,
        *,
        short_description: str | None = None,
    ) -> None: ...


def _error_message(r: requests.Response) -> Any:
    try:
        payload = r.json()
    except ValueError:
        return r.text
    if isinstance(payload, dict):
        return payload.get("message") or payload.get("detail") or payload
    return payload


class DockerHubClient:
    def __init__(self, api_base: str = DOCKERHUB_API_BASE, *, timeout: float = 30) -> None:
        self._api_base = api_base.rstrip("/")
        self._timeout = timeout
        self._token: str | None = None

    @property
    def authenticated(self) -> bool:
        return self._token is not None

    def _headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/json",
            "User-Agent": f"readme-sync/{__version__}",
        }
        if self._token:
            headers["Authorization"] = f"JWT {self._token}"
        return headers

    def _request(self, method: str, path: str, *, json_body: dict[str, Any] | None = None) -> requests.Response:
        url = f"{self._api_base}{path}"
        log.debug("%s %s", method, url)
        return requests.request(method, url, headers=self._headers(), json=json_body, timeout=self._timeout)

    def authenticate(self, username: str, password: str) -> None:
        """
        Exchange username/password (or a personal access token) for a JWT.
        """
        path = "/users/login/"
        try:
            r = self._request("POST", path, json_body={"username": username, "password": password})
        except requests.RequestException as e:
            raise AuthError(f"Registry login failed: {e}") from e

        if r.status_code in (401, 403):
            raise AuthError(f"Registry rejected credentials for {username!r}: {_error_message(r)}")
        if r.status_code >= 400:
            raise AuthError(f"Registry API error {r.status_code} POST {path}: {_error_message(r)}")

        try:
            token = r.json().get("token")
        except (ValueError, AttributeError):
            token = None
        if not token:
            raise AuthError("Registry login response did not contain a token.")
        self._token = str(token)
        log.info("Authenticated to registry as %s", username)

    def update_description(
        self,
        repository: str,
        full_description: str,
        *,
        short_description: str | None = None,
    ) -> None:
        """
        Overwrite the repository's full (and optionally short) description.

        The remote value is replaced wholesale; concurrent writers are not
        detected (last writer wins).
        """
        if not self._token:
            raise AuthError("Not authenticated; call authenticate() first.")

        size = len(full_description.encode("utf-8"))
        if size > MAX_FULL_DESCRIPTION_BYTES:
            raise UploadError(
                f"Full description is {size} bytes; the registry accepts at most {MAX_FULL_DESCRIPTION_BYTES}."
            )
        body: dict[str, Any] = {"full_description": full_description}
        if short_description is not None:
            if len(short_description) > MAX_SHORT_DESCRIPTION_CHARS:
                raise UploadError(
                    f"Short description is {len(short_description)} characters; "
                    f"the registry accepts at most {MAX_SHORT_DESCRIPTION_CHARS}."
                )
            body["description"] = short_description

        path = f"/repositories/{repository}/"
        try:
            r = self._request("PATCH", path, json_body=body)
        except requests.Timeout as e:
            raise UploadError(f"Timed out updating description of {repository} after {self._timeout}s") from e
        except requests.RequestException as e:
            raise UploadError(f"Failed updating description of {repository}: {e}") from e

        if r.status_code in (401, 403):
            raise AuthError(f"Registry refused update of {repository} ({r.status_code}): {_error_message(r)}")
        if r.status_code >= 400:
            raise UploadError(f"Registry API error {r.status_code} PATCH {path}: {_error_message(r)}")
        log.info("Updated description of %s (%d bytes)", repository, size)
