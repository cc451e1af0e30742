"""
Route classification for Avature career site URLs
Maps a URL to the page type that should handle it
"""

import re
from typing import Optional
from urllib.parse import urlparse

from .models import Label

# Detail pages carry an optional title slug followed by the numeric job id:
#   /careers/JobDetail/Senior-Analyst/12345
#   /careers/JobDetail/12345
JOB_DETAIL_PATTERN = re.compile(r'/JobDetail/(?:[^/?#]+/)?\d+(?:/|$)', re.IGNORECASE)
LISTING_PATTERN = re.compile(r'/SearchJobs', re.IGNORECASE)

JOB_ID_PATTERN = re.compile(r'/(\d+)(?=/|$)')


def classify(url: str) -> Optional[Label]:
    """Return the page label for a URL, or None when it matches neither shape"""
    path = urlparse(url).path

    # Detail first - a detail path never needs the listing handler
    if JOB_DETAIL_PATTERN.search(path):
        return Label.JOB_DETAIL
    if LISTING_PATTERN.search(path):
        return Label.LISTING
    return None


def start_label(url: str) -> Label:
    """Label for a user supplied start URL - anything unrecognised is treated as a listing"""
    return classify(url) or Label.LISTING


def extract_job_id(url: str) -> Optional[str]:
    """First numeric path segment of the URL"""
    match = JOB_ID_PATTERN.search(urlparse(url).path)
    return match.group(1) if match else None


def get_subdomain(url: str) -> str:
    """
    Tenant identifier for a career site URL
    bloomberg.avature.net -> bloomberg, example.com -> example.com
    """
    hostname = urlparse(url).hostname or ''
    parts = hostname.split('.')
    if len(parts) > 2:
        return parts[0]
    return hostname or 'unknown'


def is_valid_url(url: str) -> bool:
    try:
        parsed = urlparse(url)
        return parsed.scheme in ('http', 'https') and bool(parsed.netloc)
    except ValueError:
        return False
