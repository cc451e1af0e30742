"""
Crawl configuration
Reads the run input (JSON file and/or command-line values), validates it
and turns it into start tasks and proxy settings for the fetch engine
"""

import itertools
import json
import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Union

from .models import PageTask
from .routes import is_valid_url, start_label

logger = logging.getLogger(__name__)

SCRAPERAPI_PROXY_HOST = 'proxy-server.scraperapi.com:8001'
PROXY_TYPES = ('none', 'scraperapi', 'custom')

# Input file keys -> CrawlConfig attribute
INPUT_KEYS = {
    'startUrls': 'start_urls',
    'subdomains': 'subdomains',
    'subdomainPath': 'subdomain_path',
    'maxRequestsPerCrawl': 'max_requests_per_crawl',
    'maxConcurrency': 'max_concurrency',
    'maxRequestRetries': 'max_request_retries',
    'requestTimeoutSecs': 'request_timeout',
    'proxyType': 'proxy_type',
    'proxyUrls': 'proxy_urls',
    'scraperApiKey': 'scraper_api_key',
    'scraperApiCountry': 'scraper_api_country',
    'saveErrorSamples': 'save_error_samples',
    'errorSamplesPath': 'error_samples_path',
}


class ConfigError(ValueError):
    """Run input that makes crawling impossible"""


@dataclass
class CrawlConfig:
    start_urls: List[str] = field(default_factory=list)
    subdomains: List[str] = field(default_factory=list)
    subdomain_path: str = '/careers/SearchJobs'
    max_requests_per_crawl: int = 1000
    max_concurrency: int = 10
    max_request_retries: int = 3
    request_timeout: int = 60
    retry_backoff_base: float = 2.0
    proxy_type: str = 'none'
    proxy_urls: List[str] = field(default_factory=list)
    scraper_api_key: Optional[str] = None
    scraper_api_country: Optional[str] = None
    save_error_samples: bool = True
    error_samples_path: str = './samples'
    output_dir: str = '.'
    output_prefix: str = 'jobs'

    def validate(self):
        if not self.start_urls and not self.subdomains:
            raise ConfigError("No start URLs or subdomains provided")

        for name in ('max_requests_per_crawl', 'max_concurrency', 'request_timeout'):
            if getattr(self, name) < 1:
                raise ConfigError(f"{name} must be at least 1 (got {getattr(self, name)})")
        if self.max_request_retries < 0:
            raise ConfigError(f"max_request_retries cannot be negative (got {self.max_request_retries})")

        if self.proxy_type == 'apify':
            raise ConfigError("Apify proxy is only available on the Apify platform - use 'custom' with proxy URLs")
        if self.proxy_type not in PROXY_TYPES:
            raise ConfigError(f"Unknown proxy type '{self.proxy_type}' (expected one of {', '.join(PROXY_TYPES)})")
        if self.proxy_type == 'scraperapi' and not self.scraper_api_key:
            raise ConfigError("ScraperAPI proxy selected but no API key provided")
        if self.proxy_type == 'custom' and not self.proxy_urls:
            raise ConfigError("Custom proxy selected but no proxy URLs provided")

        invalid = [url for url in self.start_urls if not is_valid_url(url)]
        if invalid:
            raise ConfigError(f"Invalid start URL(s): {', '.join(invalid[:5])}")

    def settings_summary(self) -> Dict:
        """Settings worth recording next to the run output (no secrets)"""
        return {
            'max_requests_per_crawl': self.max_requests_per_crawl,
            'max_concurrency': self.max_concurrency,
            'max_request_retries': self.max_request_retries,
            'request_timeout': self.request_timeout,
            'proxy_type': self.proxy_type,
            'save_error_samples': self.save_error_samples,
            'error_samples_path': self.error_samples_path,
        }


def _normalize_start_urls(raw: List[Union[str, Dict]]) -> List[str]:
    # Accept plain strings and {"url": ...} request objects
    urls = []
    for item in raw or []:
        if isinstance(item, str):
            url = item.strip()
        elif isinstance(item, dict):
            url = str(item.get('url', '')).strip()
        else:
            url = ''
        if url:
            urls.append(url)
        else:
            logger.warning(f"Skipping start URL entry without a URL: {item!r}")
    return urls


def load_input(input_file: str) -> Dict:
    """Read a JSON run input file"""
    input_path = Path(input_file)
    if not input_path.is_file():
        raise ConfigError(f"Input file not found: {input_file}")

    try:
        with open(input_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Input file is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError("Input file must contain a JSON object")
    return data


def config_from_input(data: Dict, overrides: Optional[Dict] = None) -> CrawlConfig:
    """
    Build a CrawlConfig from input-file keys, then apply overrides
    Overrides use CrawlConfig attribute names; None values are ignored
    """
    values = {}
    for key, attr in INPUT_KEYS.items():
        if key in data and data[key] is not None:
            values[attr] = data[key]

    for attr, value in (overrides or {}).items():
        if value is not None:
            values[attr] = value

    values['start_urls'] = _normalize_start_urls(values.get('start_urls', []))
    values['subdomains'] = [s.strip() for s in values.get('subdomains', []) if s and s.strip()]

    try:
        config = CrawlConfig(**values)
        for name in ('max_requests_per_crawl', 'max_concurrency', 'max_request_retries', 'request_timeout'):
            setattr(config, name, int(getattr(config, name)))
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid configuration value: {e}") from e

    config.validate()
    return config


def build_urls_from_subdomains(subdomains: List[str], path: str = '/careers/SearchJobs') -> List[str]:
    """
    bloomberg.avature.net -> https://bloomberg.avature.net/careers/SearchJobs
    Protocols and trailing slashes on the input are ignored
    """
    if not path.startswith('/'):
        path = f"/{path}"

    urls = []
    for subdomain in subdomains:
        domain = subdomain.strip()
        for prefix in ('https://', 'http://'):
            if domain.lower().startswith(prefix):
                domain = domain[len(prefix):]
        domain = domain.rstrip('/')
        if domain:
            urls.append(f"https://{domain}{path}")
    return urls


def build_start_tasks(config: CrawlConfig) -> List[PageTask]:
    """Start URLs plus subdomain listing URLs, deduplicated, in input order"""
    urls = list(config.start_urls) + build_urls_from_subdomains(config.subdomains, config.subdomain_path)

    tasks = []
    seen = set()
    for url in urls:
        if url in seen:
            continue
        seen.add(url)
        tasks.append(PageTask(url=url, label=start_label(url)))

    logger.info(
        f"Prepared {len(tasks)} start URLs "
        f"({len(config.start_urls)} direct, {len(config.subdomains)} from subdomains)"
    )
    return tasks


def scraperapi_proxy_url(api_key: str, country: Optional[str] = None) -> str:
    username = 'scraperapi'
    if country:
        username += f".country_code={country.lower()}"
    return f"http://{username}:{api_key}@{SCRAPERAPI_PROXY_HOST}"


class ProxyPool:
    """Round-robin over the configured proxies; empty when proxying is off"""

    def __init__(self, proxy_urls: List[str]):
        self.proxy_urls = list(proxy_urls)
        self._cycle = itertools.cycle(self.proxy_urls) if self.proxy_urls else None
        self._lock = threading.Lock()

    def next(self) -> Optional[Dict[str, str]]:
        """requests-style proxies mapping, or None"""
        if self._cycle is None:
            return None
        with self._lock:
            proxy = next(self._cycle)
        return {'http': proxy, 'https': proxy}

    def __bool__(self):
        return bool(self.proxy_urls)


def build_proxy_pool(config: CrawlConfig) -> ProxyPool:
    if config.proxy_type == 'scraperapi':
        logger.info(f"Using ScraperAPI proxy{' (country: ' + config.scraper_api_country + ')' if config.scraper_api_country else ''}")
        return ProxyPool([scraperapi_proxy_url(config.scraper_api_key, config.scraper_api_country)])
    if config.proxy_type == 'custom':
        logger.info(f"Using {len(config.proxy_urls)} custom proxies")
        return ProxyPool(config.proxy_urls)
    logger.info("No proxy configured")
    return ProxyPool([])
