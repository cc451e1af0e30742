"""
Output Manager for the careers crawler
Appends job records to a JSONL dataset as they are produced and
writes run statistics once the crawl finishes
"""

import json
import logging
import re
import threading
from dataclasses import asdict, fields
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional

from .models import ExtractedJob

logger = logging.getLogger(__name__)

# Fields reported in the extraction-rate breakdown
TRACKED_FIELDS = [
    f.name for f in fields(ExtractedJob)
    if f.name not in ('url', 'job_id', 'subdomain', 'scraped_at')
]


class OutputManager:
    """
    Manages all output of a crawl run
    job_details/<prefix>_<timestamp>.jsonl  - one line per job, appended as jobs arrive
    logs/crawl_stats_<prefix>_<timestamp>.json - run statistics
    """

    def __init__(self, output_dir: str = ".", output_prefix: str = "jobs", create_subdirs: bool = True):
        self.output_dir = Path(output_dir)
        self.timestamp = datetime.now(timezone.utc).strftime('%Y%m%d_%H%M%S')
        self.prefix = self._sanitize_filename(output_prefix)

        if create_subdirs:
            self.job_details_dir = self.output_dir / "job_details"
            self.logs_dir = self.output_dir / "logs"
        else:
            self.job_details_dir = self.output_dir
            self.logs_dir = self.output_dir

        for dir_path in [self.job_details_dir, self.logs_dir]:
            dir_path.mkdir(parents=True, exist_ok=True)

        self.dataset_file = self.job_details_dir / f"{self.prefix}_{self.timestamp}.jsonl"
        self.jobs_written = 0
        self._lock = threading.Lock()

        # Per-run counters for the statistics file
        self._field_counts: Dict[str, int] = {name: 0 for name in TRACKED_FIELDS}
        self._subdomain_counts: Dict[str, int] = {}

    def push_data(self, job: ExtractedJob):
        """Append one job record; a single locked write keeps lines whole"""
        line = json.dumps(asdict(job), ensure_ascii=False) + '\n'
        with self._lock:
            with open(self.dataset_file, 'a', encoding='utf-8') as f:
                f.write(line)
            self.jobs_written += 1
            for name in TRACKED_FIELDS:
                if getattr(job, name):
                    self._field_counts[name] += 1
            self._subdomain_counts[job.subdomain] = self._subdomain_counts.get(job.subdomain, 0) + 1

    def field_analysis(self) -> Dict[str, Dict]:
        """Extraction rate per field over the jobs written so far"""
        if self.jobs_written == 0:
            return {}
        return {
            name: {
                'extracted': count,
                'missing': self.jobs_written - count,
                'extraction_rate': round(count / self.jobs_written * 100, 1),
            }
            for name, count in self._field_counts.items()
        }

    def save_run_statistics(self, stats: Dict, settings: Optional[Dict] = None) -> Path:
        """Write the crawl statistics JSON and return its path"""
        stats_file = self.logs_dir / f"crawl_stats_{self.prefix}_{self.timestamp}.json"
        payload = {
            'crawl_metadata': {
                'timestamp': datetime.now(timezone.utc).isoformat(),
                'dataset_file': str(self.dataset_file) if self.jobs_written else None,
                'settings': settings or {},
            },
            'summary': {**stats, 'jobs_written': self.jobs_written},
            'field_analysis': self.field_analysis(),
            'subdomain_breakdown': dict(sorted(self._subdomain_counts.items(), key=lambda x: x[1], reverse=True)),
        }

        with open(stats_file, 'w', encoding='utf-8') as f:
            json.dump(payload, f, indent=2, ensure_ascii=False)

        logger.info(f"✓ Saved crawl statistics to {stats_file}")
        return stats_file

    def create_run_report(self, stats: Dict) -> str:
        """Human-readable summary of a finished crawl"""
        report_lines = [
            "=" * 60,
            "CRAWL REPORT",
            "=" * 60,
            f"Timestamp: {datetime.now(timezone.utc).strftime('%Y-%m-%d %H:%M:%S UTC')}",
            f"Duration: {stats.get('duration_seconds', 0):.1f} seconds",
            "",
            "SUMMARY:",
            f"  Pages processed: {stats.get('pages_processed', 0)}",
            f"  Jobs extracted: {self.jobs_written}",
            f"  Failed pages: {stats.get('pages_failed', 0)}",
            "",
        ]

        errors_by_kind: Dict[str, int] = stats.get('errors_by_kind', {})
        if errors_by_kind:
            report_lines.append("FAILURES BY KIND:")
            for kind, count in sorted(errors_by_kind.items(), key=lambda x: x[1], reverse=True):
                report_lines.append(f"  {kind}: {count}")
            report_lines.append("")

        weak_fields = self._weak_fields()
        if weak_fields:
            report_lines.append("FIELDS RARELY FOUND (<50%):")
            for name in weak_fields:
                report_lines.append(f"  • {name}")

        report_lines.append("=" * 60)
        return "\n".join(report_lines)

    def _weak_fields(self) -> List[str]:
        return [
            name for name, stats in self.field_analysis().items()
            if stats['extraction_rate'] < 50
        ]

    def _sanitize_filename(self, filename: str) -> str:
        """Sanitize filename for safe file creation"""
        # Remove invalid characters
        sanitized = re.sub(r'[<>:"/\\|?*]', '_', filename)
        # Remove multiple underscores
        sanitized = re.sub(r'_{2,}', '_', sanitized)
        # Trim and ensure not empty
        sanitized = sanitized.strip('_')
        return sanitized if sanitized else 'output'
