"""
Error classification for fetched pages
Maps transport failures, HTTP status codes and in-page error content
to a fixed taxonomy of error kinds
"""

import logging
import re
from enum import Enum
from typing import List, Optional, Tuple

import requests
from bs4 import BeautifulSoup, Comment

logger = logging.getLogger(__name__)

# ScraperAPI answers 499 when too many concurrent requests share a proxy
PROXY_SATURATION_STATUS = 499

CONTENT_SCAN_LIMIT = 5000


class ErrorKind(Enum):
    """Outcome categories for pages that cannot be processed"""
    # Page reachable but unusable
    NOT_FOUND = "not_found"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    AUTH_REQUIRED = "auth_required"
    SESSION_EXPIRED = "session_expired"
    SERVER_ERROR = "server_error"
    SERVICE_UNAVAILABLE = "service_unavailable"
    MAINTENANCE = "maintenance"
    JOB_CLOSED = "job_closed"
    RATE_LIMITED = "rate_limited"
    PROXY_RATE_LIMITED = "proxy_rate_limited"
    HTTP_ERROR = "http_error"

    # Page unreachable
    TRANSPORT_TIMEOUT = "transport_timeout"
    CONNECTION_REFUSED = "connection_refused"
    DNS_ERROR = "dns_error"
    TLS_ERROR = "tls_error"
    GENERIC_REQUEST_FAILURE = "generic_request_failure"


TRANSIENT_KINDS = {
    ErrorKind.TRANSPORT_TIMEOUT,
    ErrorKind.CONNECTION_REFUSED,
    ErrorKind.GENERIC_REQUEST_FAILURE,
    ErrorKind.RATE_LIMITED,
    ErrorKind.PROXY_RATE_LIMITED,
    ErrorKind.SERVER_ERROR,
    ErrorKind.SERVICE_UNAVAILABLE,
}

# Ordered content signatures: (kind, pattern, scope)
# scope 'title' only tests the <title> text, 'page' tests title plus body text.
# Single generic words are title-only so ordinary job text such as
# "not found in the catalog" is left alone. Maintenance is phrase-only
# because it shows up in job titles.
ERROR_SIGNATURES: List[Tuple[ErrorKind, str, str]] = [
    (ErrorKind.NOT_FOUND, r'page\s*not\s*found', 'page'),
    (ErrorKind.NOT_FOUND, r'404\s*error|error\s*404', 'page'),
    (ErrorKind.NOT_FOUND, r'not\s*found', 'title'),

    (ErrorKind.FORBIDDEN, r'access\s*denied', 'page'),
    (ErrorKind.FORBIDDEN, r'403\s*(?:error|forbidden)|error\s*403', 'page'),
    (ErrorKind.FORBIDDEN, r'forbidden', 'title'),

    (ErrorKind.UNAUTHORIZED, r'401\s*(?:error|unauthorized)|error\s*401', 'page'),
    (ErrorKind.UNAUTHORIZED, r'unauthorized', 'title'),

    (ErrorKind.AUTH_REQUIRED, r'(?:log|sign)\s*in\s*required', 'page'),
    (ErrorKind.AUTH_REQUIRED, r'authentication\s*required', 'page'),
    (ErrorKind.AUTH_REQUIRED, r'please\s+(?:log|sign)\s*in\s+to\s+continue', 'page'),
    (ErrorKind.AUTH_REQUIRED, r'you\s+must\s+(?:be\s+)?(?:log|sign)(?:ged)?\s*in', 'page'),

    (ErrorKind.SESSION_EXPIRED, r'session\s*(?:has\s*)?expired', 'page'),
    (ErrorKind.SESSION_EXPIRED, r'session\s+has\s+timed\s+out', 'page'),

    (ErrorKind.SERVER_ERROR, r'internal\s*server\s*error', 'page'),
    (ErrorKind.SERVER_ERROR, r'500\s*error|error\s*500', 'page'),

    (ErrorKind.SERVICE_UNAVAILABLE, r'service\s*unavailable', 'page'),
    (ErrorKind.SERVICE_UNAVAILABLE, r'503\s*error|error\s*503', 'page'),
    (ErrorKind.SERVICE_UNAVAILABLE, r'temporarily\s*unavailable', 'page'),

    (ErrorKind.MAINTENANCE, r'(?:under|down\s+for)\s+(?:scheduled\s+)?maintenance', 'page'),
    (ErrorKind.MAINTENANCE, r'maintenance\s+(?:mode|in\s+progress)', 'page'),
    (ErrorKind.MAINTENANCE, r'under\s*construction', 'page'),

    (ErrorKind.JOB_CLOSED, r'job\s*(?:has\s*been\s*)?(?:closed|filled|expired|removed)', 'page'),
    (ErrorKind.JOB_CLOSED, r'position\s*(?:is\s*|has\s*been\s*)?(?:no\s*longer\s*available|closed|filled)', 'page'),
    (ErrorKind.JOB_CLOSED, r'(?:this|job)\s*posting\s*(?:has\s*been\s*|has\s*)?(?:closed|removed|expired)', 'page'),
    (ErrorKind.JOB_CLOSED, r'no\s*longer\s*accepting\s*applications', 'page'),

    (ErrorKind.PROXY_RATE_LIMITED, r'multiple\s*users\s*connecting\s*from\s*your\s*ip', 'page'),

    (ErrorKind.RATE_LIMITED, r'rate\s*limit\s*exceeded|been\s+rate[\s-]*limited', 'page'),
    (ErrorKind.RATE_LIMITED, r'too\s*many\s*requests', 'page'),
]

_COMPILED_SIGNATURES = [
    (kind, re.compile(pattern, re.IGNORECASE), scope)
    for kind, pattern, scope in ERROR_SIGNATURES
]

_DNS_MARKERS = [
    'name or service not known', 'nodename nor servname', 'getaddrinfo failed',
    'failed to resolve', 'name resolution', 'nameresolutionerror', 'enotfound',
]
_REFUSED_MARKERS = ['connection refused', 'econnrefused', 'errno 111', 'actively refused']


def classify_status(status: Optional[int]) -> Optional[ErrorKind]:
    """Deterministic mapping for HTTP error statuses"""
    if status is None or status < 400:
        return None
    if status == 401:
        return ErrorKind.UNAUTHORIZED
    if status == 403:
        return ErrorKind.FORBIDDEN
    if status == 404:
        return ErrorKind.NOT_FOUND
    if status == 429:
        return ErrorKind.RATE_LIMITED
    if status == PROXY_SATURATION_STATUS:
        return ErrorKind.PROXY_RATE_LIMITED
    if status >= 500:
        return ErrorKind.SERVER_ERROR
    return ErrorKind.HTTP_ERROR


def _visible_text(soup: BeautifulSoup, limit: int) -> str:
    root = soup.body or soup
    parts = []
    size = 0
    for text in root.find_all(string=True):
        if isinstance(text, Comment) or text.parent.name in ('script', 'style', 'noscript'):
            continue
        chunk = text.strip()
        if not chunk:
            continue
        parts.append(chunk)
        size += len(chunk) + 1
        if size >= limit:
            break
    return ' '.join(parts)[:limit]


def classify_content(body: str, soup: Optional[BeautifulSoup] = None) -> Optional[ErrorKind]:
    """Scan the page title and the start of the body text for error signatures"""
    if not body and soup is None:
        return None
    if soup is None:
        soup = BeautifulSoup(body, 'html.parser')

    title_tag = soup.find('title')
    title = re.sub(r'\s+', ' ', title_tag.get_text()).strip() if title_tag else ''
    page_text = f"{title} {_visible_text(soup, CONTENT_SCAN_LIMIT)}"

    for kind, pattern, scope in _COMPILED_SIGNATURES:
        haystack = title if scope == 'title' else page_text
        if haystack and pattern.search(haystack):
            logger.debug(f"Content signature matched: {kind.value} ({pattern.pattern})")
            return kind

    return None


def classify(status: Optional[int], body: str, soup: Optional[BeautifulSoup] = None) -> Optional[ErrorKind]:
    """
    Classify a fetched page
    Status codes >= 400 decide on their own; otherwise the page content is scanned.
    Returns None when the page looks processable. Never raises.
    """
    try:
        kind = classify_status(status)
        if kind is not None:
            return kind
        return classify_content(body or '', soup)
    except Exception as e:
        # A malformed document must not take the page handler down with it
        logger.warning(f"Error classification failed, treating page as processable: {e}")
        return None


def classify_transport_error(error: Exception) -> ErrorKind:
    """Map a requests exception to a transport error kind"""
    # ConnectTimeout is both a Timeout and a ConnectionError
    if isinstance(error, requests.exceptions.Timeout):
        return ErrorKind.TRANSPORT_TIMEOUT

    if isinstance(error, requests.exceptions.SSLError):
        return ErrorKind.TLS_ERROR

    message = str(error).lower()
    if isinstance(error, requests.exceptions.ConnectionError):
        if any(marker in message for marker in _DNS_MARKERS):
            return ErrorKind.DNS_ERROR
        if any(marker in message for marker in _REFUSED_MARKERS):
            return ErrorKind.CONNECTION_REFUSED

    if 'certificate' in message or 'ssl' in message:
        return ErrorKind.TLS_ERROR

    return ErrorKind.GENERIC_REQUEST_FAILURE


def is_transient(kind: Optional[ErrorKind]) -> bool:
    """Whether a page failing with this kind is worth fetching again"""
    return kind in TRANSIENT_KINDS


def describe(kind: ErrorKind, status: Optional[int] = None, detail: Optional[str] = None) -> str:
    """Human-readable message for an error kind"""
    messages = {
        ErrorKind.NOT_FOUND: 'Page not found',
        ErrorKind.UNAUTHORIZED: 'Unauthorized',
        ErrorKind.FORBIDDEN: 'Access denied (forbidden)',
        ErrorKind.AUTH_REQUIRED: 'Page requires sign in',
        ErrorKind.SESSION_EXPIRED: 'Session expired',
        ErrorKind.SERVER_ERROR: 'Server error',
        ErrorKind.SERVICE_UNAVAILABLE: 'Service unavailable',
        ErrorKind.MAINTENANCE: 'Site under maintenance',
        ErrorKind.JOB_CLOSED: 'Job posting is closed or filled',
        ErrorKind.RATE_LIMITED: 'Rate limited - too many requests',
        ErrorKind.PROXY_RATE_LIMITED: 'Proxy rate limited - too many concurrent connections',
        ErrorKind.HTTP_ERROR: 'HTTP error',
        ErrorKind.TRANSPORT_TIMEOUT: 'Request timed out',
        ErrorKind.CONNECTION_REFUSED: 'Connection refused',
        ErrorKind.DNS_ERROR: 'DNS lookup failed',
        ErrorKind.TLS_ERROR: 'SSL/TLS error',
        ErrorKind.GENERIC_REQUEST_FAILURE: 'Request failed',
    }
    message = messages.get(kind, kind.value)
    if status is not None and status >= 400:
        message = f"{message} (HTTP {status})"
    elif status is not None:
        message = f"{message} (detected in page content)"
    if detail:
        message = f"{message}: {detail}"
    return message
