#!/usr/bin/env python3
"""
Avature Careers Crawler CLI
Crawls Avature career sites from start URLs or tenant subdomains and
writes one JSON record per job posting
"""

import argparse
import json
import logging
import os
import sys
import time
from pathlib import Path
from typing import List

from avature_crawler.config import ConfigError, build_start_tasks, config_from_input, load_input
from avature_crawler.crawler import CrawlEngine
from avature_crawler.evidence import EvidenceRecorder
from avature_crawler.output_manager import OutputManager


def setup_logging(verbose: bool = False, log_file: str = None):
    """Setup logging configuration"""
    log_level = logging.DEBUG if verbose else logging.INFO

    # Create formatters
    console_formatter = logging.Formatter('%(asctime)s - %(levelname)s - %(message)s')
    file_formatter = logging.Formatter('%(asctime)s - %(name)s - %(threadName)s - %(levelname)s - %(message)s')

    # Setup root logger
    logger = logging.getLogger()
    logger.setLevel(log_level)

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(console_formatter)
    logger.addHandler(console_handler)

    # File handler if specified
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(file_formatter)
        logger.addHandler(file_handler)

    # Suppress noisy third-party loggers
    logging.getLogger('urllib3').setLevel(logging.WARNING)
    logging.getLogger('requests').setLevel(logging.WARNING)


def read_subdomains_file(file_path: str) -> List[str]:
    """Subdomains from a JSON array or a text file with one per line"""
    path = Path(file_path)
    if not path.is_file():
        raise ConfigError(f"Subdomains file not found: {file_path}")

    content = path.read_text(encoding='utf-8').strip()
    if content.startswith('['):
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Subdomains file is not valid JSON: {e}") from e
        return [str(item).strip() for item in data if str(item).strip()]

    return [
        line.strip() for line in content.splitlines()
        if line.strip() and not line.strip().startswith('#')
    ]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Crawl job postings from Avature career sites',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Crawl one tenant by subdomain
  python crawl_jobs.py --subdomain bloomberg.avature.net

  # Crawl from a run input file (startUrls, subdomains, proxy settings, ...)
  python crawl_jobs.py --input input.json --output-dir results

  # Crawl many tenants through ScraperAPI
  python crawl_jobs.py --subdomains-file subdomains.json --proxy scraperapi --scraperapi-key KEY

  # Small test run with verbose logging
  python crawl_jobs.py --start-url https://uclahealth.avature.net/careers/SearchJobs --max-pages 20 --verbose

Run input file keys:
  startUrls, subdomains, subdomainPath, maxRequestsPerCrawl, maxConcurrency,
  maxRequestRetries, requestTimeoutSecs, proxyType, proxyUrls, scraperApiKey,
  scraperApiCountry, saveErrorSamples, errorSamplesPath
        """
    )

    # Start input
    parser.add_argument('--input', '-i',
                        help='JSON run input file')
    parser.add_argument('--start-url', action='append', dest='start_urls',
                        help='Start URL (listing or job detail page); repeatable')
    parser.add_argument('--subdomain', action='append', dest='subdomains',
                        help='Tenant domain such as bloomberg.avature.net; repeatable')
    parser.add_argument('--subdomains-file',
                        help='File with tenant domains (JSON array or one per line)')
    parser.add_argument('--subdomain-path',
                        help='Listing path appended to subdomains (default: /careers/SearchJobs)')

    # Crawl configuration
    parser.add_argument('--max-pages', type=int, dest='max_requests_per_crawl',
                        help='Maximum pages to fetch (default: 1000)')
    parser.add_argument('--max-concurrency', type=int,
                        help='Maximum concurrent requests (default: 10)')
    parser.add_argument('--max-retries', type=int, dest='max_request_retries',
                        help='Retries per page on transient failures (default: 3)')
    parser.add_argument('--timeout', type=int, dest='request_timeout',
                        help='Request timeout in seconds (default: 60)')

    # Proxy configuration
    parser.add_argument('--proxy', choices=['none', 'scraperapi', 'custom'], dest='proxy_type',
                        help='Proxy mode (default: none)')
    parser.add_argument('--proxy-url', action='append', dest='proxy_urls',
                        help='Proxy URL for --proxy custom; repeatable')
    parser.add_argument('--scraperapi-key', dest='scraper_api_key',
                        default=os.environ.get('SCRAPERAPI_KEY'),
                        help='ScraperAPI key (default: $SCRAPERAPI_KEY)')
    parser.add_argument('--scraperapi-country', dest='scraper_api_country',
                        help='ScraperAPI country code, e.g. us')

    # Output configuration
    parser.add_argument('--output', '-o', default='jobs',
                        help='Output file prefix (default: jobs)')
    parser.add_argument('--output-dir', default='.',
                        help='Output directory (default: current directory)')
    parser.add_argument('--samples-dir', dest='error_samples_path',
                        help='Directory for error samples (default: ./samples)')
    parser.add_argument('--no-error-samples', action='store_true',
                        help='Do not save HTML samples of failed pages')

    # Logging options
    parser.add_argument('--verbose', '-v', action='store_true',
                        help='Enable verbose logging')
    parser.add_argument('--log-file',
                        help='Save detailed logs to file')

    return parser


def main(argv: List[str] = None):
    parser = build_parser()
    args = parser.parse_args(argv)

    # Setup logging
    setup_logging(args.verbose, args.log_file)
    logger = logging.getLogger(__name__)

    print("🚀 Avature Careers Crawler")
    print("=" * 50)

    try:
        data = load_input(args.input) if args.input else {}

        subdomains = list(args.subdomains or [])
        if args.subdomains_file:
            subdomains.extend(read_subdomains_file(args.subdomains_file))

        overrides = {
            'start_urls': args.start_urls,
            'subdomains': subdomains or None,
            'subdomain_path': args.subdomain_path,
            'max_requests_per_crawl': args.max_requests_per_crawl,
            'max_concurrency': args.max_concurrency,
            'max_request_retries': args.max_request_retries,
            'request_timeout': args.request_timeout,
            'proxy_type': args.proxy_type,
            'proxy_urls': args.proxy_urls,
            'scraper_api_key': args.scraper_api_key,
            'scraper_api_country': args.scraper_api_country,
            'save_error_samples': False if args.no_error_samples else None,
            'error_samples_path': args.error_samples_path,
            'output_dir': args.output_dir,
            'output_prefix': args.output,
        }
        config = config_from_input(data, overrides)
    except ConfigError as e:
        print(f"❌ Configuration error: {e}")
        return 1

    print(f"\n⚙️  Crawl Configuration:")
    print(f"   Max pages: {config.max_requests_per_crawl}")
    print(f"   Concurrency: {config.max_concurrency}")
    print(f"   Retries: {config.max_request_retries}")
    print(f"   Timeout: {config.request_timeout}s")
    print(f"   Proxy: {config.proxy_type}")
    print(f"   Error samples: {config.error_samples_path if config.save_error_samples else 'disabled'}")

    try:
        start_time = time.time()
        output_manager = OutputManager(config.output_dir, config.output_prefix)
        recorder = EvidenceRecorder(config.error_samples_path, config.save_error_samples)
        engine = CrawlEngine(config, output=output_manager, recorder=recorder)

        start_tasks = build_start_tasks(config)
        print(f"\n🔍 Crawling from {len(start_tasks)} start URLs...")

        stats = engine.run(start_tasks)

        print(f"\n💾 Saving results...")
        stats_file = output_manager.save_run_statistics(stats, config.settings_summary())

        print(f"\n" + output_manager.create_run_report(stats))

        print(f"\n📄 Generated Files:")
        if output_manager.jobs_written:
            print(f"   job_details: {output_manager.dataset_file}")
        print(f"   statistics: {stats_file}")
        if recorder.recorded:
            print(f"   error_samples: {recorder.error_dir} ({recorder.recorded} files)")

        total_time = time.time() - start_time
        print(f"\n✅ Crawl completed in {total_time:.1f} seconds")

        # Return appropriate exit code
        processed = stats['pages_processed']
        failure_rate = stats['pages_failed'] / processed if processed else 1.0
        if failure_rate > 0.5:
            print(f"⚠️  Warning: high failure rate ({failure_rate:.1%})")
            return 2
        elif stats['pages_failed']:
            print(f"⚠️  Completed with {stats['pages_failed']} failed pages")
            return 0
        else:
            print(f"🎉 All {processed} pages processed successfully!")
            return 0

    except KeyboardInterrupt:
        print(f"\n❌ Crawl interrupted by user")
        return 130

    except Exception as e:
        logger.exception("Unexpected error during crawl")
        print(f"\n❌ Crawl failed: {e}")
        return 1


if __name__ == '__main__':
    sys.exit(main())
