"""
Avature careers crawler engine
Fetches pages with a thread pool, classifies every response, records
evidence for unusable pages and routes the rest to the page handlers
"""

import logging
import time
from collections import deque
from concurrent.futures import FIRST_COMPLETED, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from typing import Callable, Deque, Dict, List, Optional, Set
from urllib.parse import urldefrag

import requests
from bs4 import BeautifulSoup

from .config import CrawlConfig, build_proxy_pool
from .error_classifier import (ErrorKind, classify, classify_status, classify_transport_error,
                               describe, is_transient)
from .evidence import EvidenceRecorder
from .field_extractor import clean_document
from .handlers import PageContext, Router, create_router
from .models import ErrorEvidence, ExtractedJob, PageTask
from .output_manager import OutputManager

logger = logging.getLogger(__name__)

MAX_BACKOFF_SECONDS = 10
PROXY_BANNER = 'multiple users connecting from your ip'

BROWSER_HEADERS = {
    'User-Agent': 'Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36',
    'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8',
    'Accept-Language': 'en-US,en;q=0.9',
    'Accept-Encoding': 'gzip, deflate',
    'Connection': 'keep-alive',
    'Upgrade-Insecure-Requests': '1',
}


@dataclass
class FetchResult:
    """What the engine got back for one URL - a response or a transport error"""
    url: str
    status: Optional[int] = None
    body: str = ''
    error: Optional[Exception] = None
    attempts: int = 1


@dataclass
class PageOutcome:
    task: PageTask
    enqueued: List[PageTask] = field(default_factory=list)
    records: List[ExtractedJob] = field(default_factory=list)
    evidence: Optional[ErrorEvidence] = None
    error_kind: Optional[ErrorKind] = None
    handler_failed: bool = False


def process_page(task: PageTask, result: FetchResult, router: Router,
                 recorder: EvidenceRecorder) -> PageOutcome:
    """
    Classify a fetched page and either record it as evidence or hand it to its handler
    Each call works on its own parsed and cleaned document
    """
    if result.error is not None:
        kind = classify_transport_error(result.error)
        message = describe(kind, detail=str(result.error))
        logger.warning(f"❌ {kind.value} for {task.url} after {result.attempts} attempt(s): {result.error}")
        evidence = recorder.record(task.url, kind, message, None, None)
        return PageOutcome(task=task, evidence=evidence, error_kind=kind)

    soup = BeautifulSoup(result.body or '', 'html.parser')
    kind = classify(result.status, result.body, soup)
    if kind is not None:
        message = describe(kind, result.status)
        logger.warning(f"❌ {kind.value} for {result.url} (HTTP {result.status})")
        evidence = recorder.record(result.url, kind, message, result.body, result.status)
        return PageOutcome(task=task, evidence=evidence, error_kind=kind)

    context = PageContext(
        task=task,
        url=result.url,
        status=result.status,
        body=result.body,
        soup=clean_document(soup),
    )
    try:
        router.dispatch(context)
    except Exception:
        logger.exception(f"Handler failed for {result.url}")
        return PageOutcome(task=task, handler_failed=True)

    return PageOutcome(task=task, enqueued=context.enqueued, records=context.records)


class CrawlEngine:
    """
    Minimal fetch engine: a request queue, a bounded worker pool and a retry budget
    The queue, the seen-URL set and the page budget belong to the coordinating thread;
    workers only fetch and process their own page
    """

    def __init__(self, config: CrawlConfig, router: Router = None, output: OutputManager = None,
                 recorder: EvidenceRecorder = None, session: requests.Session = None,
                 sleep: Callable[[float], None] = time.sleep):
        self.config = config
        self.router = router or create_router()
        self.output = output
        self.recorder = recorder or EvidenceRecorder(config.error_samples_path, config.save_error_samples)
        self.session = session or self._create_session()
        self.proxies = build_proxy_pool(config)
        self._sleep = sleep

        self.results: List[ExtractedJob] = []
        self.evidence: List[ErrorEvidence] = []
        self._pending: Deque[PageTask] = deque()
        self._seen: Set[str] = set()
        self.stats: Dict = {
            'pages_processed': 0,
            'pages_failed': 0,
            'handler_errors': 0,
            'jobs_extracted': 0,
            'tasks_enqueued': 0,
            'tasks_skipped_over_limit': 0,
            'errors_by_kind': {},
            'duration_seconds': 0.0,
        }

    def _create_session(self) -> requests.Session:
        session = requests.Session()
        session.headers.update(BROWSER_HEADERS)
        return session

    # ------------------------------------------------------------------
    # Fetching
    # ------------------------------------------------------------------

    def _backoff(self, attempt: int) -> float:
        return min(self.config.retry_backoff_base ** attempt, MAX_BACKOFF_SECONDS)

    def _needs_retry(self, status: int, body: str) -> bool:
        if is_transient(classify_status(status)):
            return True
        return status < 400 and PROXY_BANNER in (body or '')[:20000].lower()

    def fetch(self, task: PageTask) -> FetchResult:
        """GET a URL, retrying transient failures with capped exponential backoff"""
        max_retries = self.config.max_request_retries

        for attempt in range(max_retries + 1):
            if attempt > 0:
                delay = self._backoff(attempt)
                logger.debug(f"Retry {attempt}/{max_retries} for {task.url} after {delay}s")
                self._sleep(delay)

            try:
                resp = self.session.get(
                    task.url,
                    timeout=self.config.request_timeout,
                    proxies=self.proxies.next(),
                )
            except requests.exceptions.RequestException as e:
                kind = classify_transport_error(e)
                if is_transient(kind) and attempt < max_retries:
                    logger.debug(f"Attempt {attempt + 1} failed for {task.url}: {e}")
                    continue
                return FetchResult(url=task.url, error=e, attempts=attempt + 1)

            result = FetchResult(
                url=resp.url or task.url,
                status=resp.status_code,
                body=resp.text,
                attempts=attempt + 1,
            )
            if attempt < max_retries and self._needs_retry(result.status, result.body):
                logger.debug(f"Transient response {result.status} for {task.url}, retrying")
                continue
            return result

        # Unreachable: the final attempt always returns
        raise RuntimeError(f"Retry loop exited without a result for {task.url}")

    def _process(self, task: PageTask) -> PageOutcome:
        return process_page(task, self.fetch(task), self.router, self.recorder)

    # ------------------------------------------------------------------
    # Scheduling
    # ------------------------------------------------------------------

    def enqueue(self, task: PageTask) -> bool:
        """Queue a task unless its URL was already seen this run"""
        key = urldefrag(task.url)[0]
        if key in self._seen:
            return False
        self._seen.add(key)
        self._pending.append(task)
        self.stats['tasks_enqueued'] += 1
        return True

    def _collect(self, outcome: PageOutcome):
        self.stats['pages_processed'] += 1

        if outcome.error_kind is not None:
            self.stats['pages_failed'] += 1
            by_kind = self.stats['errors_by_kind']
            by_kind[outcome.error_kind.value] = by_kind.get(outcome.error_kind.value, 0) + 1
            if outcome.evidence is not None:
                self.evidence.append(outcome.evidence)
            return

        if outcome.handler_failed:
            self.stats['pages_failed'] += 1
            self.stats['handler_errors'] += 1
            return

        for record in outcome.records:
            if self.output is not None:
                self.output.push_data(record)
            else:
                self.results.append(record)
            self.stats['jobs_extracted'] += 1

        for task in outcome.enqueued:
            self.enqueue(task)

    def run(self, start_tasks: List[PageTask]) -> Dict:
        """Crawl until the queue is empty or the page budget is spent; returns run statistics"""
        start_time = time.time()
        for task in start_tasks:
            self.enqueue(task)

        max_pages = self.config.max_requests_per_crawl
        workers = self.config.max_concurrency
        started = 0
        logger.info(f"🚀 Starting crawl: {len(self._pending)} start URLs, {workers} workers, max {max_pages} pages")

        with ThreadPoolExecutor(max_workers=workers) as executor:
            in_flight = {}
            while self._pending or in_flight:
                while self._pending and len(in_flight) < workers and started < max_pages:
                    task = self._pending.popleft()
                    in_flight[executor.submit(self._process, task)] = task
                    started += 1

                if not in_flight:
                    break

                done, _ = wait(in_flight, return_when=FIRST_COMPLETED)
                for future in done:
                    task = in_flight.pop(future)
                    try:
                        outcome = future.result()
                    except Exception as e:
                        logger.error(f"Unexpected error processing {task.url}: {e}")
                        outcome = PageOutcome(task=task, handler_failed=True)
                    self._collect(outcome)

                processed = self.stats['pages_processed']
                if processed and processed % 25 == 0:
                    logger.info(
                        f"📊 Progress: {processed} pages | ✅ {self.stats['jobs_extracted']} jobs, "
                        f"❌ {self.stats['pages_failed']} failed | {len(self._pending)} queued"
                    )

        if self._pending:
            self.stats['tasks_skipped_over_limit'] = len(self._pending)
            logger.warning(f"⚠️ Page limit of {max_pages} reached, {len(self._pending)} queued URLs not crawled")

        self.stats['duration_seconds'] = round(time.time() - start_time, 2)
        logger.info(
            f"🎉 Crawl complete in {self.stats['duration_seconds']:.1f}s: "
            f"{self.stats['jobs_extracted']} jobs, {self.stats['pages_failed']} failed pages"
        )
        return self.stats
