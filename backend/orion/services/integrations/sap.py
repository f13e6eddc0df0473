"""SAP HANA connection check.

Validates the connection parameters and probes well-known HTTP endpoints on
the HANA host. Credentials are not verified here; that needs the HANA
driver and happens when the first sync runs.
"""

import ipaddress
import logging
import re
import time
from dataclasses import dataclass
from urllib.parse import urlsplit

import httpx

from orion.schemas.onboarding import ConnectionTestResult, SAPConnectionConfig

logger = logging.getLogger(__name__)

DEFAULT_HANA_PORT = 30015

_SID_RE = re.compile(r"^[A-Z0-9]{3}$", re.IGNORECASE)
_CLIENT_RE = re.compile(r"^\d{3}$")


class InvalidHostError(ValueError):
    pass


@dataclass
class HanaHost:
    host: str
    port: int

    @property
    def is_internal(self) -> bool:
        try:
            return ipaddress.ip_address(self.host).is_private
        except ValueError:
            return False

    @property
    def url_host(self) -> str:
        # IPv6 literals need brackets inside a URL
        return f"[{self.host}]" if ":" in self.host else self.host

    def probe_urls(self) -> list[str]:
        return [
            f"https://{self.url_host}:{self.port}/sap/hana/xs/formLogin/logout.html",
            f"https://{self.url_host}:{self.port}/sap/bc/ping",
            # Instance HTTP port sits two below the SQL port
            f"http://{self.url_host}:{self.port - 2}/",
        ]


def parse_host(host_url: str, port: int | None = None) -> HanaHost:
    """Accept ``host:port`` or ``https://host:port``; the port defaults to 30015.

    IPv6 hosts are given in brackets, e.g. ``[fd00::1]:30015``.
    """
    text = host_url.strip()
    if "://" not in text:
        text = f"//{text}"
    try:
        parts = urlsplit(text)
        url_port = parts.port
    except ValueError as exc:
        raise InvalidHostError(str(exc)) from exc
    if not parts.hostname:
        raise InvalidHostError("missing host")
    host = parts.hostname
    if url_port is not None:
        resolved = url_port
    else:
        resolved = port or DEFAULT_HANA_PORT
    if not 1 <= resolved <= 65535:
        raise InvalidHostError("invalid port number")
    return HanaHost(host=host, port=resolved)


def _elapsed_ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)


async def _probe(client: httpx.AsyncClient, urls: list[str], timeout: float) -> str | None:
    """Return the first URL that answers below 500, if any."""
    for url in urls:
        try:
            resp = await client.head(url, timeout=timeout)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.debug("SAP probe %s failed: %s", url, exc)
            continue
        # 401/403 still prove the server is up
        if resp.status_code < 500:
            return url
    return None


async def check_connection(
    client: httpx.AsyncClient,
    config: SAPConnectionConfig,
    probe_timeout: float = 5.0,
) -> ConnectionTestResult:
    start = time.monotonic()

    try:
        target = parse_host(config.host_url, config.port)
    except InvalidHostError:
        return ConnectionTestResult(
            success=False,
            message="Invalid host URL format. Expected: hostname:port (e.g., 10.0.1.105:30015)",
            details={"responseTime": _elapsed_ms(start)},
        )

    if not _SID_RE.match(config.system_id):
        return ConnectionTestResult(
            success=False,
            message="Invalid System ID (SID). Must be exactly 3 alphanumeric characters.",
            details={"responseTime": _elapsed_ms(start)},
        )

    if not _CLIENT_RE.match(config.client):
        return ConnectionTestResult(
            success=False,
            message="Invalid client number. Must be exactly 3 digits (e.g., 100, 400).",
            details={"responseTime": _elapsed_ms(start)},
        )

    logger.info(
        "SAP test: probing %s:%d, SID %s, client %s",
        target.host, target.port, config.system_id, config.client,
    )
    reachable_url = await _probe(client, target.probe_urls(), probe_timeout)

    details = {
        "host": target.host,
        "port": target.port,
        "systemId": config.system_id,
        "client": config.client,
        "responseTime": _elapsed_ms(start),
    }

    if reachable_url is None:
        if target.is_internal:
            message = (
                f"SAP HANA server at {target.host}:{target.port} is not reachable from this "
                "location. This appears to be an internal IP - you may need to be on the "
                "corporate network or VPN."
            )
        else:
            message = (
                f"Unable to reach SAP HANA server at {target.host}:{target.port}. Please verify "
                "the host and port are correct and that the server is running."
            )
        return ConnectionTestResult(success=False, message=message, details=details)

    logger.info("SAP test: %s answered", reachable_url)
    return ConnectionTestResult(
        success=True,
        message=(
            f"SAP HANA server is reachable at {target.host}:{target.port}. "
            "Credentials will be validated when sync starts."
        ),
        details=details,
    )
