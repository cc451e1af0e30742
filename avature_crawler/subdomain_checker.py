"""
Avature Subdomain Checker
Requests the job listing page of each tenant and reports whether it is
working, behind a login, blocked or gone, with the advertised job count
"""

import csv
import json
import logging
import re
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Callable, List, Optional

import requests
from bs4 import BeautifulSoup

from .config import ProxyPool, build_urls_from_subdomains
from .crawler import BROWSER_HEADERS, PROXY_BANNER
from .field_extractor import element_text, extract_total_jobs

logger = logging.getLogger(__name__)

WORKING = 'working'
AUTH_REQUIRED = 'auth_required'
NOT_WORKING = 'not_working'
BLOCKED = 'blocked'
ERROR = 'error'

STATUS_ICONS = {
    WORKING: '✓',
    AUTH_REQUIRED: '🔒',
    BLOCKED: '⊘',
    NOT_WORKING: '✗',
    ERROR: '?',
}

# Hosts on the platform that never serve a career site
EXCLUDE_PATTERNS = [re.compile(p) for p in [
    r'^www\.', r'^smtp', r'^mail\.', r'^docs\.', r'^api\.', r'^cdn', r'^analytics',
    r'^marketing\.', r'^sales\.', r'^training', r'^sandbox', r'^pentest',
    r'^uat[^a-z]', r'^qa[^a-z]', r'^staging', r'^demo', r'^test',
    r'integrations\.', r'clientcertificate', r'-sso\.', r'broadbeanjobexport',
    r'label-studio', r'rocketchat', r'^label-',
]]

LOGIN_FORM_SELECTOR = 'form[action*="login"], form[action*="Login"], form[action*="signin"], form[action*="auth"]'
AUTH_TITLE_KEYWORDS = ['login', 'sign in', 'authentication', 'access denied', 'sso', 'single sign-on']
AUTH_BODY_PHRASES = ['please log in', 'please sign in', 'enter your credentials', 'authentication required']


@dataclass
class SubdomainResult:
    subdomain: str
    listing_url: str
    status: str = ERROR
    total_jobs: Optional[int] = None
    status_code: Optional[int] = None
    error: Optional[str] = None


@dataclass
class Assessment:
    status: str
    total_jobs: Optional[int] = None
    error: Optional[str] = None
    retry: bool = False


def filter_subdomains(subdomains: List[str]) -> List[str]:
    """Drop infrastructure hosts (mail, api, staging, ...) from a subdomain list"""
    return [s for s in subdomains if not any(p.search(s.lower()) for p in EXCLUDE_PATTERNS)]


def assess_listing_page(status_code: int, html: str) -> Assessment:
    """Decide what a tenant's listing page response says about the tenant"""
    if status_code in (429, 499):
        return Assessment(BLOCKED, error=f"Rate limited (HTTP {status_code})", retry=True)
    if status_code == 404:
        return Assessment(NOT_WORKING, error='Page not found')
    if status_code in (401, 403):
        return Assessment(AUTH_REQUIRED, error='Access denied')
    if status_code >= 500:
        return Assessment(ERROR, error=f"Server error {status_code}")

    if PROXY_BANNER in (html or '').lower():
        return Assessment(BLOCKED, error='Proxy rate limited', retry=True)

    soup = BeautifulSoup(html or '', 'html.parser')
    page_title = element_text(soup.find('title')).lower()
    body_text = element_text(soup.body or soup)
    body_lower = body_text.lower()

    # Empty shells usually mean an internal portal behind SSO
    if len(body_text) < 50 and not page_title:
        return Assessment(AUTH_REQUIRED, error='Empty page (likely requires auth)')

    has_login_form = soup.select_one(LOGIN_FORM_SELECTOR) is not None
    has_password_field = soup.select_one('input[type="password"]') is not None
    has_auth_title = any(keyword in page_title for keyword in AUTH_TITLE_KEYWORDS)
    has_auth_body = (
        any(phrase in body_lower for phrase in AUTH_BODY_PHRASES)
        or ('username' in body_lower and 'password' in body_lower)
    )
    if has_login_form or has_password_field or has_auth_title or has_auth_body:
        return Assessment(AUTH_REQUIRED, error='Requires login')

    if ('page not found' in body_lower or 'page was not found' in body_lower
            or ('sorry' in body_lower and 'not exist' in body_lower)):
        return Assessment(NOT_WORKING, error='Page not found (in content)')

    has_job_links = soup.select_one('a[href*="/JobDetail/"]') is not None
    has_articles = soup.select_one('.article') is not None
    has_job_elements = soup.select_one('[class*="job"], [class*="position"]') is not None
    if has_job_links or has_articles or has_job_elements:
        return Assessment(WORKING, total_jobs=extract_total_jobs(soup))

    has_search = soup.select_one('form[action*="SearchJobs"], [class*="search"]') is not None
    if has_search or any(word in page_title for word in ('career', 'job', 'search')):
        # Career site exists but has no open jobs right now
        return Assessment(WORKING, total_jobs=0)

    return Assessment(NOT_WORKING, error='No job elements found')


class SubdomainChecker:
    """Checks tenants concurrently, retrying rate-limited requests and timeouts"""

    def __init__(self, max_workers: int = 5, timeout: int = 60, max_retries: int = 3,
                 retry_delay: float = 5.0, listing_path: str = '/careers/SearchJobs',
                 proxies: ProxyPool = None, session: requests.Session = None,
                 sleep: Callable[[float], None] = time.sleep):
        self.max_workers = max_workers
        self.timeout = timeout
        self.max_retries = max(1, max_retries)
        self.retry_delay = retry_delay
        self.listing_path = listing_path
        self.proxies = proxies or ProxyPool([])
        self._sleep = sleep

        if session is None:
            session = requests.Session()
            session.headers.update(BROWSER_HEADERS)
        self.session = session

    def check(self, subdomain: str) -> SubdomainResult:
        listing_url = build_urls_from_subdomains([subdomain], self.listing_path)[0]
        result = SubdomainResult(subdomain=subdomain, listing_url=listing_url)

        for attempt in range(1, self.max_retries + 1):
            try:
                resp = self.session.get(listing_url, timeout=self.timeout, proxies=self.proxies.next())
            except requests.exceptions.Timeout:
                if attempt < self.max_retries:
                    logger.info(f"    ↻ {subdomain} timeout, retry {attempt}/{self.max_retries}...")
                    self._sleep(self.retry_delay)
                    continue
                result.status = ERROR
                result.error = 'Timeout'
                return result
            except requests.exceptions.RequestException as e:
                result.status = ERROR
                result.error = str(e)
                return result

            result.status_code = resp.status_code
            assessment = assess_listing_page(resp.status_code, resp.text)

            if assessment.retry and attempt < self.max_retries:
                logger.info(f"    ↻ {subdomain} rate limited, retry {attempt}/{self.max_retries}...")
                self._sleep(self.retry_delay)
                continue

            result.status = assessment.status
            result.total_jobs = assessment.total_jobs
            result.error = assessment.error
            if assessment.retry:
                result.error = f"{assessment.error} after {self.max_retries} retries"
            return result

        return result

    def check_all(self, subdomains: List[str]) -> List[SubdomainResult]:
        """Check every subdomain; results come back in input order"""
        results: List[Optional[SubdomainResult]] = [None] * len(subdomains)
        total = len(subdomains)

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            future_to_index = {
                executor.submit(self.check, subdomain): index
                for index, subdomain in enumerate(subdomains)
            }

            for completed, future in enumerate(as_completed(future_to_index), 1):
                index = future_to_index[future]
                try:
                    result = future.result()
                except Exception as e:
                    subdomain = subdomains[index]
                    logger.error(f"Unexpected error checking {subdomain}: {e}")
                    result = SubdomainResult(
                        subdomain=subdomain,
                        listing_url=build_urls_from_subdomains([subdomain], self.listing_path)[0],
                        error=str(e),
                    )

                results[index] = result
                jobs = f" [{result.total_jobs} jobs]" if result.total_jobs is not None else ''
                logger.info(f"  [{completed}/{total}] {STATUS_ICONS.get(result.status, '?')} "
                            f"{result.subdomain} - {result.status}{jobs}")

        return results


def save_csv(results: List[SubdomainResult], file_path: str):
    columns = ['subdomain', 'listing_url', 'status', 'total_jobs', 'status_code', 'error']
    Path(file_path).parent.mkdir(parents=True, exist_ok=True)
    with open(file_path, 'w', encoding='utf-8', newline='') as f:
        writer = csv.DictWriter(f, fieldnames=columns)
        writer.writeheader()
        for result in results:
            row = asdict(result)
            writer.writerow({key: '' if row[key] is None else row[key] for key in columns})
    logger.info(f"✓ Saved {len(results)} results to {file_path}")


def save_working(results: List[SubdomainResult], file_path: str) -> int:
    """Write the working tenants (with at least one job) as a JSON list of subdomains"""
    working = [r.subdomain for r in results if r.status == WORKING and (r.total_jobs or 0) > 0]
    Path(file_path).parent.mkdir(parents=True, exist_ok=True)
    with open(file_path, 'w', encoding='utf-8') as f:
        json.dump(working, f, indent=2)
    logger.info(f"✓ Saved {len(working)} working subdomains to {file_path}")
    return len(working)
