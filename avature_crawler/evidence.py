"""
Evidence Recorder
Saves a readable snapshot of every page that could not be processed,
named after the tenant and the detected error kind, for later triage
"""

import hashlib
import html
import json
import logging
import re
import threading
from dataclasses import asdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from bs4 import BeautifulSoup

from .error_classifier import ErrorKind
from .models import ErrorEvidence
from .routes import get_subdomain

logger = logging.getLogger(__name__)

HEADER_RULE = '=' * 80


def placeholder_page(url: str, message: str) -> str:
    """Stand-in document for pages that never returned a body"""
    return (
        '<html><head><title>Request Failed</title></head><body>'
        '<h1>Request Failed</h1>'
        f'<p>URL: {html.escape(url)}</p>'
        f'<p>Error: {html.escape(message)}</p>'
        '</body></html>'
    )


def _comment_safe(value: str) -> str:
    return str(value).replace('--', '- -')


def render_evidence(evidence: ErrorEvidence) -> str:
    """HTML comment header with the error details followed by the pretty-printed page"""
    status = evidence.http_status if evidence.http_status is not None else 'N/A'
    header = '\n'.join([
        '<!--',
        HEADER_RULE,
        'ERROR SAMPLE',
        HEADER_RULE,
        f'URL: {_comment_safe(evidence.url)}',
        f'Error Type: {evidence.error_kind}',
        f'Error Message: {_comment_safe(evidence.message)}',
        f'HTTP Status: {status}',
        f'Captured At: {evidence.captured_at}',
        HEADER_RULE,
        '-->',
        '',
        '',
    ])

    try:
        body = BeautifulSoup(evidence.raw_content or '', 'html.parser').prettify()
    except Exception as e:
        logger.debug(f"Could not pretty-print evidence for {evidence.url}: {e}")
        body = evidence.raw_content or ''

    return header + body


class EvidenceRecorder:
    """
    Writes one evidence file per unrecoverable page
    Files land in <base_dir>/error/ and are listed in error/index.jsonl
    """

    def __init__(self, base_dir: str = "./samples", enabled: bool = True):
        self.base_dir = Path(base_dir)
        self.error_dir = self.base_dir / "error"
        self.enabled = enabled
        self.recorded = 0
        self._index_lock = threading.Lock()

    def build(self, url: str, kind: ErrorKind, message: str, raw_content: Optional[str],
              http_status: Optional[int] = None) -> ErrorEvidence:
        if not raw_content:
            raw_content = placeholder_page(url, message)
        return ErrorEvidence(
            url=url,
            error_kind=kind.value,
            message=message,
            raw_content=raw_content,
            http_status=http_status,
        )

    def evidence_path(self, evidence: ErrorEvidence) -> Path:
        subdomain = self._sanitize_filename(get_subdomain(evidence.url))
        timestamp = datetime.now(timezone.utc).strftime('%Y%m%d_%H%M%S_%f')
        url_hash = hashlib.sha1(evidence.url.encode('utf-8')).hexdigest()[:8]
        return self.error_dir / f"{subdomain}-{evidence.error_kind}-{timestamp}-{url_hash}.html"

    def save(self, evidence: ErrorEvidence) -> Optional[Path]:
        """Persist an evidence artifact; failures are logged, never raised"""
        if not self.enabled:
            return None

        try:
            self.error_dir.mkdir(parents=True, exist_ok=True)
            file_path = self.evidence_path(evidence)
            with open(file_path, 'w', encoding='utf-8') as f:
                f.write(render_evidence(evidence))
            self._append_index(evidence, file_path)
        except OSError as e:
            logger.warning(f"⚠️ Failed to save error sample for {evidence.url}: {e}")
            return None

        self.recorded += 1
        logger.info(f"✓ Saved error sample ({evidence.error_kind}) to {file_path}")
        return file_path

    def record(self, url: str, kind: ErrorKind, message: str, raw_content: Optional[str],
               http_status: Optional[int] = None) -> ErrorEvidence:
        evidence = self.build(url, kind, message, raw_content, http_status)
        self.save(evidence)
        return evidence

    def _append_index(self, evidence: ErrorEvidence, file_path: Path):
        entry = asdict(evidence)
        entry.pop('raw_content')
        entry['file'] = file_path.name
        with self._index_lock:
            with open(self.error_dir / "index.jsonl", 'a', encoding='utf-8') as f:
                f.write(json.dumps(entry, ensure_ascii=False) + '\n')

    def _sanitize_filename(self, filename: str) -> str:
        """Sanitize filename for safe file creation"""
        sanitized = re.sub(r'[<>:"/\\|?*\s]', '_', filename)
        sanitized = re.sub(r'_{2,}', '_', sanitized)
        sanitized = sanitized.strip('_')
        return sanitized if sanitized else 'unknown'
