"""
Data models for the Avature careers crawler
Page tasks, extracted job records and error evidence
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, Optional


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


class Label(Enum):
    """Page type a task is dispatched on"""
    LISTING = "listing"
    JOB_DETAIL = "job_detail"


@dataclass
class PageTask:
    """
    A URL waiting to be fetched and handled
    label is None when the page type is unknown
    hints carries preview values from the listing card that discovered the URL
    """
    url: str
    label: Optional[Label] = None
    hints: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class ExtractedJob:
    """Job posting record - one per detail page visited"""
    url: str
    job_id: Optional[str]
    subdomain: str
    ref_number: Optional[str] = None
    title: Optional[str] = None
    location: Optional[str] = None
    work_type: Optional[str] = None
    schedule: Optional[str] = None
    salary_min: Optional[str] = None
    salary_max: Optional[str] = None
    salary_period: Optional[str] = None
    salary_raw: Optional[str] = None
    employment_type: Optional[str] = None
    employment_classification: Optional[str] = None
    duration: Optional[str] = None
    department: Optional[str] = None
    category: Optional[str] = None
    entity: Optional[str] = None
    posted_date: Optional[str] = None
    description: Optional[str] = None
    qualifications: Optional[str] = None
    duties: Optional[str] = None
    full_content: Optional[str] = None
    apply_url: Optional[str] = None
    additional_fields: Optional[Dict[str, str]] = None
    scraped_at: str = field(default_factory=utc_now)


@dataclass(frozen=True)
class ErrorEvidence:
    """Snapshot of a page that could not be processed"""
    url: str
    error_kind: str
    message: str
    raw_content: str
    http_status: Optional[int] = None
    captured_at: str = field(default_factory=utc_now)
