import csv
import json

import requests

from avature_crawler.subdomain_checker import (AUTH_REQUIRED, BLOCKED, ERROR, NOT_WORKING, WORKING,
                                               SubdomainChecker, assess_listing_page, filter_subdomains,
                                               save_csv, save_working)
from crawl_jobs import read_subdomains_file


class FakeResponse:
    def __init__(self, status_code, text):
        self.status_code = status_code
        self.text = text


class ScriptedSession:
    """Returns (or raises) the scripted responses in order, repeating the last one"""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = 0

    def get(self, url, timeout=None, proxies=None):
        self.calls += 1
        response = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(response, Exception):
            raise response
        return FakeResponse(*response)


def test_filter_subdomains():
    subdomains = ["www.acme.com", "acme.avature.net", "staging-acme.avature.net", "mail.acme.com",
                  "acme-sso.avature.net", "beta.avature.net"]

    assert filter_subdomains(subdomains) == ["acme.avature.net", "beta.avature.net"]


class TestAssessListingPage:
    def test_status_codes(self):
        assert assess_listing_page(499, "").status == BLOCKED
        assert assess_listing_page(499, "").retry
        assert assess_listing_page(404, "").status == NOT_WORKING
        assert assess_listing_page(403, "").status == AUTH_REQUIRED
        assert assess_listing_page(502, "").status == ERROR

    def test_proxy_banner_is_blocked(self):
        assessment = assess_listing_page(200, "<p>There are multiple users connecting from your IP</p>")
        assert assessment.status == BLOCKED
        assert assessment.retry

    def test_listing_with_jobs(self, listing_html):
        assessment = assess_listing_page(200, listing_html)

        assert assessment.status == WORKING
        assert assessment.total_jobs == 3

    def test_login_page(self):
        html = (
            "<html><head><title>Acme Portal</title></head><body>"
            '<form action="/portal/login"><input type="text" name="user"><input type="password"></form>'
            "</body></html>"
        )
        assert assess_listing_page(200, html).status == AUTH_REQUIRED

    def test_empty_shell_needs_auth(self):
        assert assess_listing_page(200, "<html><body></body></html>").status == AUTH_REQUIRED

    def test_search_page_without_jobs(self):
        html = (
            "<html><head><title>Search Jobs - Acme</title></head><body>"
            '<form action="/careers/SearchJobs"><input type="text" name="keyword"></form>'
            "<p>There are currently no open positions. Check back soon.</p></body></html>"
        )
        assessment = assess_listing_page(200, html)

        assert assessment.status == WORKING
        assert assessment.total_jobs == 0

    def test_not_found_content(self):
        html = "<html><head><title>Acme</title></head><body><h1>Sorry, this page was not found</h1></body></html>"
        assert assess_listing_page(200, html).status == NOT_WORKING


class TestSubdomainChecker:
    def test_rate_limit_is_retried(self, listing_html):
        session = ScriptedSession((499, ""), (200, listing_html))
        checker = SubdomainChecker(session=session, sleep=lambda delay: None)

        result = checker.check("acme.avature.net")

        assert session.calls == 2
        assert result.status == WORKING
        assert result.total_jobs == 3
        assert result.listing_url == "https://acme.avature.net/careers/SearchJobs"

    def test_timeouts_exhaust_retries(self):
        session = ScriptedSession(requests.exceptions.ReadTimeout("read timed out"))
        checker = SubdomainChecker(max_retries=2, session=session, sleep=lambda delay: None)

        result = checker.check("acme.avature.net")

        assert session.calls == 2
        assert result.status == ERROR
        assert result.error == "Timeout"

    def test_zero_retries_still_sends_one_request(self, listing_html):
        session = ScriptedSession((200, listing_html))
        checker = SubdomainChecker(max_retries=0, session=session, sleep=lambda delay: None)

        result = checker.check("acme.avature.net")

        assert session.calls == 1
        assert result.status == WORKING
        assert result.total_jobs == 3

    def test_check_all_keeps_input_order(self, listing_html):
        session = ScriptedSession((200, listing_html))
        checker = SubdomainChecker(max_workers=3, session=session, sleep=lambda delay: None)

        results = checker.check_all(["a.avature.net", "b.avature.net", "c.avature.net"])

        assert [r.subdomain for r in results] == ["a.avature.net", "b.avature.net", "c.avature.net"]


def test_reports(tmp_path):
    checker = SubdomainChecker(session=ScriptedSession((404, "")), sleep=lambda delay: None)
    working = checker.check("acme.avature.net")
    working.status, working.total_jobs = WORKING, 12
    results = [working, checker.check("gone.avature.net")]

    csv_path = tmp_path / "reports" / "check.csv"
    save_csv(results, str(csv_path))
    with open(csv_path, encoding="utf-8") as f:
        rows = list(csv.DictReader(f))
    assert rows[0]["status"] == WORKING
    assert rows[1]["status"] == NOT_WORKING
    assert rows[1]["total_jobs"] == ""

    valid_path = tmp_path / "reports" / "valid.json"
    assert save_working(results, str(valid_path)) == 1
    assert json.loads(valid_path.read_text()) == ["acme.avature.net"]


def test_read_subdomains_file(tmp_path):
    json_file = tmp_path / "subdomains.json"
    json_file.write_text('["acme.avature.net", " beta.avature.net "]')
    text_file = tmp_path / "subdomains.txt"
    text_file.write_text("# tenants\nacme.avature.net\n\nbeta.avature.net\n")

    assert read_subdomains_file(str(json_file)) == ["acme.avature.net", "beta.avature.net"]
    assert read_subdomains_file(str(text_file)) == ["acme.avature.net", "beta.avature.net"]
