#!/usr/bin/env python3
"""
Avature Subdomain Checker CLI
Checks which Avature tenants have a reachable job listing page
"""

import argparse
import os
import sys
from collections import Counter

from avature_crawler.config import ConfigError, ProxyPool, scraperapi_proxy_url
from avature_crawler.subdomain_checker import (SubdomainChecker, filter_subdomains, save_csv,
                                               save_working)
from crawl_jobs import read_subdomains_file, setup_logging


def main(argv=None):
    parser = argparse.ArgumentParser(
        description='Check which Avature subdomains have valid job listings',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Check a list of tenants
  python check_subdomains.py --input avature-subdomains.json

  # Check the first 20 through ScraperAPI
  python check_subdomains.py --input subdomains.txt --limit 20 --scraperapi-key KEY
        """
    )
    parser.add_argument('--input', '-i', required=True,
                        help='Subdomains file (JSON array or one per line)')
    parser.add_argument('--csv', default='output/subdomain-check.csv',
                        help='CSV report path (default: output/subdomain-check.csv)')
    parser.add_argument('--valid-json', default='output/avature-subdomains-valid.json',
                        help='Working subdomains output (default: output/avature-subdomains-valid.json)')
    parser.add_argument('--path', default='/careers/SearchJobs',
                        help='Listing path to check (default: /careers/SearchJobs)')
    parser.add_argument('--max-workers', type=int, default=5,
                        help='Concurrent checks (default: 5)')
    parser.add_argument('--timeout', type=int, default=60,
                        help='Request timeout in seconds (default: 60)')
    parser.add_argument('--max-retries', type=int, default=3,
                        help='Attempts per subdomain on rate limits/timeouts (default: 3)')
    parser.add_argument('--limit', type=int,
                        help='Only check the first N subdomains (for testing)')
    parser.add_argument('--scraperapi-key', default=os.environ.get('SCRAPERAPI_KEY'),
                        help='Route requests through ScraperAPI (default: $SCRAPERAPI_KEY)')
    parser.add_argument('--verbose', '-v', action='store_true',
                        help='Enable verbose logging')
    args = parser.parse_args(argv)

    setup_logging(args.verbose)

    print("═" * 60)
    print("  AVATURE SUBDOMAIN CHECKER")
    print("═" * 60)

    try:
        all_subdomains = read_subdomains_file(args.input)
    except ConfigError as e:
        print(f"❌ {e}")
        return 1

    subdomains = filter_subdomains(all_subdomains)
    print(f"\nLoaded {len(all_subdomains)} subdomains, {len(subdomains)} after filtering")
    if args.limit:
        subdomains = subdomains[:args.limit]
        print(f"🔢 Limited to first {args.limit} subdomains")

    proxies = ProxyPool([scraperapi_proxy_url(args.scraperapi_key)] if args.scraperapi_key else [])
    checker = SubdomainChecker(
        max_workers=args.max_workers,
        timeout=args.timeout,
        max_retries=args.max_retries,
        listing_path=args.path,
        proxies=proxies,
    )

    try:
        results = checker.check_all(subdomains)
    except KeyboardInterrupt:
        print(f"\n❌ Check interrupted by user")
        return 130

    save_csv(results, args.csv)
    working = save_working(results, args.valid_json)

    counts = Counter(result.status for result in results)
    total_jobs = sum(result.total_jobs or 0 for result in results)
    print(f"\n📊 Summary:")
    for status, count in counts.most_common():
        print(f"   {status}: {count}")
    print(f"   Working with jobs: {working}")
    print(f"   Total jobs advertised: {total_jobs}")
    print(f"\n📄 Generated Files:")
    print(f"   csv: {args.csv}")
    print(f"   valid: {args.valid_json}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
