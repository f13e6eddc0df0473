"""Primavera P6 EPPM web services (SOAP).

Connection test: fetch the AuthenticationService WSDL, then send a Login
with a WS-Security UsernameToken. Project listing: ProjectService
ReadProjects with the same token.
"""

import html
import logging
import re
import time
import xml.etree.ElementTree as ET
from datetime import datetime, timezone

import httpx

from orion.schemas.onboarding import ConnectionTestResult, P6ConnectionConfig, P6Project

logger = logging.getLogger(__name__)

_WSSE_NS = "http://docs.oasis-open.org/wss/2004/01/oasis-200401-wss-wssecurity-secext-1.0.xsd"
_WSU_NS = "http://docs.oasis-open.org/wss/2004/01/oasis-200401-wss-wssecurity-utility-1.0.xsd"
_PASSWORD_TEXT = (
    "http://docs.oasis-open.org/wss/2004/01/"
    "oasis-200401-wss-username-token-profile-1.0#PasswordText"
)
AUTH_NS = "http://xmlns.oracle.com/Primavera/P6/WS/Authentication/V1"
PROJECT_NS = "http://xmlns.oracle.com/Primavera/P6/WS/Project/V1"

PROJECT_FIELDS = ("ObjectId", "Id", "Name", "Status", "StartDate", "FinishDate")

_FAULT_RE = re.compile(r"<faultstring[^>]*>([^<]+)</faultstring>", re.IGNORECASE)
_VERSION_RES = (
    re.compile(r"P6\s*([\d.]+)", re.IGNORECASE),
    re.compile(r"version[\"\s:]*([0-9.]+)", re.IGNORECASE),
)


class P6Error(Exception):
    """P6 could not be reached or rejected the request."""


def _elapsed_ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)


def _base_url(config: P6ConnectionConfig) -> str:
    return config.wsdl_base_url.rstrip("/")


def _security_header(username: str, password: str) -> str:
    created = datetime.now(timezone.utc).isoformat()
    return (
        "<soapenv:Header>"
        f'<wsse:Security xmlns:wsse="{_WSSE_NS}">'
        "<wsse:UsernameToken>"
        f"<wsse:Username>{html.escape(username)}</wsse:Username>"
        f'<wsse:Password Type="{_PASSWORD_TEXT}">{html.escape(password)}</wsse:Password>'
        f'<wsu:Created xmlns:wsu="{_WSU_NS}">{created}</wsu:Created>'
        "</wsse:UsernameToken>"
        "</wsse:Security>"
        "</soapenv:Header>"
    )


def _envelope(config: P6ConnectionConfig, namespace: str, body: str) -> str:
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        '<soapenv:Envelope xmlns:soapenv="http://schemas.xmlsoap.org/soap/envelope/" '
        f'xmlns:v1="{namespace}">'
        f"{_security_header(config.username, config.password)}"
        f"<soapenv:Body>{body}</soapenv:Body>"
        "</soapenv:Envelope>"
    )


def build_login_request(config: P6ConnectionConfig) -> str:
    body = (
        "<v1:Login>"
        f"<v1:DatabaseInstanceId>{html.escape(config.database_instance)}</v1:DatabaseInstanceId>"
        "</v1:Login>"
    )
    return _envelope(config, AUTH_NS, body)


def build_read_projects_request(config: P6ConnectionConfig) -> str:
    fields = "".join(f"<v1:Field>{name}</v1:Field>" for name in PROJECT_FIELDS)
    return _envelope(config, PROJECT_NS, f"<v1:ReadProjects>{fields}</v1:ReadProjects>")


def extract_fault(body: str) -> str | None:
    if "fault" not in body.lower():
        return None
    match = _FAULT_RE.search(body)
    return match.group(1).strip() if match else "Authentication failed"


def extract_server_version(wsdl: str) -> str | None:
    for pattern in _VERSION_RES:
        match = pattern.search(wsdl)
        if match:
            return match.group(1)
    return None


def _is_wsdl(content: str) -> bool:
    return "definitions" in content or "wsdl:" in content


async def _soap_post(client: httpx.AsyncClient, url: str, envelope: str) -> httpx.Response:
    return await client.post(
        url,
        content=envelope.encode("utf-8"),
        headers={"Content-Type": "text/xml;charset=UTF-8", "SOAPAction": '""'},
    )


async def check_connection(client: httpx.AsyncClient, config: P6ConnectionConfig) -> ConnectionTestResult:
    """Check WSDL reachability and credentials. Never raises for P6 failures."""
    start = time.monotonic()
    base_url = _base_url(config)

    try:
        logger.info("P6 test: fetching WSDL %s/AuthenticationService?wsdl", base_url)
        wsdl_resp = await client.get(
            f"{base_url}/AuthenticationService?wsdl",
            headers={"Accept": "text/xml, application/xml"},
        )
        if wsdl_resp.status_code >= 400:
            return ConnectionTestResult(
                success=False,
                message=f"P6 server unreachable: HTTP {wsdl_resp.status_code} {wsdl_resp.reason_phrase}",
                details={"responseTime": _elapsed_ms(start)},
            )

        wsdl = wsdl_resp.text
        if not _is_wsdl(wsdl):
            return ConnectionTestResult(
                success=False,
                message="Invalid response from P6 server - not a valid WSDL document",
                details={"responseTime": _elapsed_ms(start)},
            )

        logger.info("P6 test: authenticating user %s", config.username)
        login_resp = await _soap_post(
            client, f"{base_url}/AuthenticationService", build_login_request(config)
        )
    except httpx.InvalidURL as exc:
        logger.warning("P6 test: invalid URL %r: %s", base_url, exc)
        return ConnectionTestResult(
            success=False,
            message=f"Connection test failed: invalid P6 URL ({exc})",
            details={"responseTime": _elapsed_ms(start)},
        )
    except httpx.RequestError as exc:
        logger.warning("P6 test: network error for %s: %s", base_url, exc)
        return ConnectionTestResult(
            success=False,
            message="Network error: Unable to reach P6 server. Check URL and firewall settings.",
            details={"responseTime": _elapsed_ms(start)},
        )

    fault = extract_fault(login_resp.text)
    if fault:
        return ConnectionTestResult(
            success=False,
            message=f"P6 Authentication failed: {fault}",
            details={"databaseInstance": config.database_instance, "responseTime": _elapsed_ms(start)},
        )
    if login_resp.status_code >= 400:
        return ConnectionTestResult(
            success=False,
            message=(
                f"P6 Authentication failed: HTTP {login_resp.status_code} "
                f"{login_resp.reason_phrase}"
            ),
            details={"databaseInstance": config.database_instance, "responseTime": _elapsed_ms(start)},
        )

    details = {"databaseInstance": config.database_instance, "responseTime": _elapsed_ms(start)}
    version = extract_server_version(wsdl)
    if version:
        details["serverVersion"] = version
    return ConnectionTestResult(
        success=True,
        message="Successfully connected to P6 and authenticated",
        details=details,
    )


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def parse_projects(body: str) -> list[P6Project]:
    """Parse a ReadProjectsResponse into P6Project records."""
    try:
        root = ET.fromstring(body)
    except ET.ParseError as exc:
        raise P6Error(f"Malformed ReadProjects response: {exc}") from exc

    projects: list[P6Project] = []
    for element in root.iter():
        if _local_name(element.tag) != "Project":
            continue
        fields = {_local_name(child.tag): (child.text or "").strip() for child in element}
        if not fields.get("ObjectId", "").isdigit():
            logger.warning("Skipping P6 project without numeric ObjectId: %s", fields.get("Id"))
            continue
        projects.append(
            P6Project(
                project_id=int(fields["ObjectId"]),
                project_code=fields.get("Id", ""),
                project_name=fields.get("Name", ""),
                status=fields.get("Status") or None,
                start_date=fields.get("StartDate") or None,
                finish_date=fields.get("FinishDate") or None,
            )
        )
    return projects


def filter_projects(projects: list[P6Project], query: str | None) -> list[P6Project]:
    """Case-insensitive match on project name or code."""
    if not query or not query.strip():
        return projects
    needle = query.strip().lower()
    return [
        p for p in projects
        if needle in p.project_name.lower() or needle in p.project_code.lower()
    ]


async def list_projects(client: httpx.AsyncClient, config: P6ConnectionConfig) -> list[P6Project]:
    """Read every project visible to the configured P6 user."""
    url = f"{_base_url(config)}/ProjectService"
    try:
        resp = await _soap_post(client, url, build_read_projects_request(config))
    except httpx.InvalidURL as exc:
        raise P6Error(f"Invalid P6 URL: {exc}") from exc
    except httpx.RequestError as exc:
        raise P6Error(f"Unable to reach P6 server: {exc}") from exc

    fault = extract_fault(resp.text)
    if fault:
        raise P6Error(f"P6 rejected ReadProjects: {fault}")
    if resp.status_code >= 400:
        raise P6Error(f"P6 ReadProjects returned HTTP {resp.status_code}")

    projects = parse_projects(resp.text)
    logger.info("P6: read %d projects from %s", len(projects), url)
    return projects
