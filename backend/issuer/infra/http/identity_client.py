# issuer/infra/http/identity_client.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from urllib.parse import quote

import requests

from issuer.services._shared.errors import IdentityUnavailable
from issuer.services._shared.ports.identity import IdentityDirectory

log = logging.getLogger(__name__)


@dataclass(slots=True)
class HttpIdentityDirectory(IdentityDirectory):
    """
    Adapter for an external identity service speaking JSON over HTTP.

    - ``GET {base_url}/subjects/{id}`` answers 200 when the subject exists and
      404 when it does not.
    - ``POST {base_url}/credentials/verify`` with ``{"username", "password"}``
      answers ``{"valid": bool}``.

    :param base_url: Service root, without trailing slash.
    :param timeout: Per-request timeout in seconds.
    """

    base_url: str
    timeout: float = 2.0
    session: requests.Session = field(default_factory=requests.Session)

    def _url(self, path: str) -> str:
        return f"{self.base_url.rstrip('/')}/{path.lstrip('/')}"

    def exists(self, subject_id: str) -> bool:
        url = self._url(f"subjects/{quote(subject_id, safe='')}")
        try:
            resp = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as exc:
            raise IdentityUnavailable(f"Identity service unreachable: {exc}") from exc
        if resp.status_code == 404:
            return False
        if resp.ok:
            return True
        raise IdentityUnavailable(f"Identity service answered {resp.status_code} for subject lookup")

    def verify_credentials(self, subject_id: str, password: str) -> bool:
        try:
            resp = self.session.post(
                self._url("credentials/verify"),
                json={"username": subject_id, "password": password},
                timeout=self.timeout,
            )
            resp.raise_for_status()
            body = resp.json()
        except requests.RequestException as exc:
            raise IdentityUnavailable(f"Identity service credential check failed: {exc}") from exc
        except ValueError as exc:
            raise IdentityUnavailable("Identity service returned a non-JSON body") from exc
        valid = bool(body.get("valid")) if isinstance(body, dict) else False
        if not valid:
            log.info("identity.verify_credentials: rejected", extra={"subject": subject_id})
        return valid
