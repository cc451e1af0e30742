"""
Page handlers for Avature career sites
Listing pages enqueue job detail pages and further listing pages,
detail pages produce one ExtractedJob, anything else gets a permissive link scan
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional
from urllib.parse import urldefrag, urljoin

from bs4 import BeautifulSoup, Tag

from .field_extractor import element_text, extract_job_fields
from .models import ExtractedJob, Label, PageTask
from .routes import classify, extract_job_id, get_subdomain

logger = logging.getLogger(__name__)

JOB_CARD_SELECTOR = '.section__content__results .article, .list .list-item, .list .list__item'
CARD_LINK_SELECTOR = '.article__header__text__title a, .list__item__text__title a'
CARD_TITLE_SELECTOR = '.article__header__text__title, .list__item__text__title'
CARD_SUBTITLE_SELECTOR = '.article__header__text__subtitle, .list__item__text__subtitle'
SUBTITLE_KEY_PREFIX = 'list-item-'

PAGINATION_SELECTOR = 'a[href*="jobOffset"], a[href*="SearchJobs"], a[href*="pageNumber"]'
PAGINATION_SKIP_TEXT = ('prev', '<<', 'back')

DETAIL_LINK_SELECTOR = 'a[href*="/JobDetail/"]'
LISTING_LINK_SELECTOR = 'a[href*="SearchJobs"]'

ADVERTISED_TOTAL = re.compile(r'of\s+(\d+)\s+results?', re.IGNORECASE)


@dataclass
class PageContext:
    """
    Everything a handler may look at or produce for one fetched page
    Enqueued tasks and records are collected here; the engine drains them
    """
    task: PageTask
    url: str
    status: Optional[int]
    body: str
    soup: BeautifulSoup
    enqueued: List[PageTask] = field(default_factory=list)
    records: List[ExtractedJob] = field(default_factory=list)

    def enqueue(self, url: str, label: Optional[Label], hints: Optional[Dict[str, str]] = None):
        self.enqueued.append(PageTask(url=url, label=label, hints=dict(hints or {})))

    def push_data(self, record: ExtractedJob):
        self.records.append(record)


Handler = Callable[[PageContext], None]


class Router:
    """Dispatches a page to the handler registered for its label"""

    def __init__(self):
        self._handlers: Dict[Label, Handler] = {}
        self._default_handler: Optional[Handler] = None

    def add_handler(self, label: Label, handler: Handler):
        self._handlers[label] = handler

    def add_default_handler(self, handler: Handler):
        self._default_handler = handler

    def resolve(self, task: PageTask, url: str) -> Optional[Handler]:
        label = task.label or classify(url)
        handler = self._handlers.get(label) if label else None
        return handler or self._default_handler

    def dispatch(self, context: PageContext):
        handler = self.resolve(context.task, context.url)
        if handler is None:
            logger.warning(f"No handler for {context.url}")
            return
        handler(context)


def absolute_url(page_url: str, href: Optional[str]) -> Optional[str]:
    """Resolve a link against the page, ignoring empty, anchor-only and script links"""
    if not href:
        return None
    href = href.strip()
    if not href or href.startswith('#') or href.lower().startswith('javascript:'):
        return None
    return urldefrag(urljoin(page_url, href))[0]


def card_hints(card: Tag) -> Dict[str, str]:
    """
    Preview values shown on a listing card
    Subtitle parts are keyed by their list-item-<key> class, unkeyed subtitles use 'default'
    """
    hints: Dict[str, str] = {}

    title = element_text(card.select_one(CARD_TITLE_SELECTOR))
    if title:
        hints['title'] = title

    for wrapper in card.select(CARD_SUBTITLE_SELECTOR):
        keyed = [
            el for el in wrapper.find_all(class_=True)
            if any(cls.startswith(SUBTITLE_KEY_PREFIX) for cls in el.get('class', []))
        ]
        if not keyed:
            text = element_text(wrapper)
            if text:
                hints['default'] = text
            continue

        for el in keyed:
            key = next(cls[len(SUBTITLE_KEY_PREFIX):] for cls in el['class']
                       if cls.startswith(SUBTITLE_KEY_PREFIX))
            text = element_text(el)
            if key and text:
                hints[key] = text

    return hints


def listing_handler(context: PageContext):
    soup = context.soup
    subdomain = get_subdomain(context.url)
    logger.info(f"📄 Processing listing page: {context.url}")

    total_match = ADVERTISED_TOTAL.search(element_text(soup.body or soup))
    if total_match:
        logger.info(f"Total jobs available for {subdomain}: {total_match.group(1)}")

    seen_jobs = set()
    for card in soup.select(JOB_CARD_SELECTOR):
        link = card.select_one(CARD_LINK_SELECTOR)
        job_url = absolute_url(context.url, link.get('href') if link else None)
        if not job_url or job_url in seen_jobs:
            continue
        seen_jobs.add(job_url)
        context.enqueue(job_url, Label.JOB_DETAIL, card_hints(card))

    # Tenants with custom templates still link detail pages, just without cards
    if not seen_jobs:
        for anchor in soup.select(DETAIL_LINK_SELECTOR):
            job_url = absolute_url(context.url, anchor.get('href'))
            if not job_url or job_url in seen_jobs:
                continue
            seen_jobs.add(job_url)
            context.enqueue(job_url, Label.JOB_DETAIL)

    logger.info(f"Found {len(seen_jobs)} job links on listing page ({subdomain})")

    current_url = urldefrag(context.url)[0]
    seen_pages = set()
    for anchor in soup.select(PAGINATION_SELECTOR):
        text = element_text(anchor).lower()
        if any(skip in text for skip in PAGINATION_SKIP_TEXT):
            continue

        page_url = absolute_url(context.url, anchor.get('href'))
        if not page_url or page_url == current_url or page_url in seen_pages or page_url in seen_jobs:
            continue
        seen_pages.add(page_url)
        context.enqueue(page_url, Label.LISTING)

    if seen_pages:
        logger.info(f"Found {len(seen_pages)} pagination links ({subdomain})")


def detail_handler(context: PageContext):
    url = context.url
    subdomain = get_subdomain(url)
    hints = context.task.hints or {}
    logger.debug(f"Processing job detail page: {url}")

    job_id = extract_job_id(url)
    fields = extract_job_fields(context.soup, url, hints, subdomain)

    ref_number = fields.pop('ref_number')
    if ref_number == job_id:
        ref_number = None

    additional = {key: value for key, value in hints.items() if key != 'title'}

    job = ExtractedJob(
        url=url,
        job_id=job_id,
        subdomain=subdomain,
        ref_number=ref_number,
        additional_fields=additional or None,
        **fields
    )
    context.push_data(job)

    logger.info(
        f"✓ Extracted job {job.job_id}: {job.title} "
        f"(description: {'yes' if job.description else 'no'}, salary: {'yes' if job.salary_raw else 'no'})"
    )


def default_handler(context: PageContext):
    logger.warning(f"Default handler - scanning for job links on {context.url}")

    for selector, label in ((DETAIL_LINK_SELECTOR, Label.JOB_DETAIL), (LISTING_LINK_SELECTOR, Label.LISTING)):
        found = []
        for anchor in context.soup.select(selector):
            link_url = absolute_url(context.url, anchor.get('href'))
            if link_url and link_url not in found:
                found.append(link_url)

        for link_url in found:
            context.enqueue(link_url, label)

        if found:
            logger.info(f"Found {len(found)} {label.value} links on unhandled page {context.url}")


def create_router() -> Router:
    router = Router()
    router.add_handler(Label.LISTING, listing_handler)
    router.add_handler(Label.JOB_DETAIL, detail_handler)
    router.add_default_handler(default_handler)
    return router
