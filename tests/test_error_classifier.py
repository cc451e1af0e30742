import pytest
import requests

from avature_crawler.error_classifier import (ErrorKind, classify, classify_content, classify_status,
                                              classify_transport_error, describe, is_transient)


def page(title="Acme Careers", body=""):
    return f"<html><head><title>{title}</title></head><body>{body}</body></html>"


@pytest.mark.parametrize(
    "status, kind",
    [
        (401, ErrorKind.UNAUTHORIZED),
        (403, ErrorKind.FORBIDDEN),
        (404, ErrorKind.NOT_FOUND),
        (429, ErrorKind.RATE_LIMITED),
        (499, ErrorKind.PROXY_RATE_LIMITED),
        (500, ErrorKind.SERVER_ERROR),
        (503, ErrorKind.SERVER_ERROR),
        (418, ErrorKind.HTTP_ERROR),
    ],
)
def test_status_codes(status, kind):
    assert classify_status(status) == kind
    assert classify(status, page(body="<p>Everything looks normal here</p>")) == kind


def test_healthy_page_is_processable(detail_html):
    assert classify(200, detail_html) is None


def test_status_wins_over_content():
    assert classify(404, page(body="<p>Please sign in to continue</p>")) == ErrorKind.NOT_FOUND


def test_sign_in_prompt_is_auth_required():
    assert classify(200, page(body="<p>Please sign in to continue</p>")) == ErrorKind.AUTH_REQUIRED


def test_first_matching_signature_wins():
    body = "<h1>Access Denied</h1><p>Page not found</p>"
    assert classify(200, page(body=body)) == ErrorKind.NOT_FOUND


@pytest.mark.parametrize(
    "html, kind",
    [
        (page(body="<p>Your session has expired.</p>"), ErrorKind.SESSION_EXPIRED),
        (page(body="<p>The site is down for scheduled maintenance.</p>"), ErrorKind.MAINTENANCE),
        (page(body="<p>This position has been filled.</p>"), ErrorKind.JOB_CLOSED),
        (page(body="<p>We are no longer accepting applications.</p>"), ErrorKind.JOB_CLOSED),
        (page(body="<p>There are multiple users connecting from your IP</p>"), ErrorKind.PROXY_RATE_LIMITED),
        (page(body="<p>Too many requests, slow down</p>"), ErrorKind.RATE_LIMITED),
        (page(title="403 Forbidden"), ErrorKind.FORBIDDEN),
        (page(title="Not Found"), ErrorKind.NOT_FOUND),
    ],
)
def test_content_signatures(html, kind):
    assert classify(200, html) == kind


def test_generic_words_in_job_text_are_not_errors():
    body = (
        "<h1>Maintenance Technician</h1>"
        "<p>Perform scheduled maintenance on forklifts. Parts not found in the catalog are ordered.</p>"
    )
    assert classify(200, page(title="Maintenance Technician - 4411 - Acme", body=body)) is None


def test_script_text_is_not_scanned():
    body = '<script>var messages = {"missing": "Page not found"};</script><p>Open roles</p>'
    assert classify_content(page(body=body)) is None


def test_signature_beyond_scan_window_is_ignored():
    filler = "<p>" + "operations " * 600 + "</p>"
    assert classify(200, page(body=filler + "<p>Page not found</p>")) is None


def test_classify_never_raises():
    assert classify(200, None) is None
    assert classify(200, "<<<not html") is None


@pytest.mark.parametrize(
    "error, kind",
    [
        (requests.exceptions.ReadTimeout("read timed out"), ErrorKind.TRANSPORT_TIMEOUT),
        (requests.exceptions.ConnectTimeout("connect timed out"), ErrorKind.TRANSPORT_TIMEOUT),
        (requests.exceptions.SSLError("certificate verify failed"), ErrorKind.TLS_ERROR),
        (requests.exceptions.ConnectionError("Failed to resolve 'x.avature.net' (Name or service not known)"),
         ErrorKind.DNS_ERROR),
        (requests.exceptions.ConnectionError("[Errno 111] Connection refused"), ErrorKind.CONNECTION_REFUSED),
        (requests.exceptions.ConnectionError("Connection aborted"), ErrorKind.GENERIC_REQUEST_FAILURE),
        (requests.exceptions.TooManyRedirects("Exceeded 30 redirects"), ErrorKind.GENERIC_REQUEST_FAILURE),
    ],
)
def test_transport_errors(error, kind):
    assert classify_transport_error(error) == kind


def test_transient_kinds():
    assert is_transient(ErrorKind.TRANSPORT_TIMEOUT)
    assert is_transient(ErrorKind.RATE_LIMITED)
    assert is_transient(ErrorKind.PROXY_RATE_LIMITED)
    assert is_transient(ErrorKind.SERVER_ERROR)
    assert not is_transient(ErrorKind.NOT_FOUND)
    assert not is_transient(ErrorKind.DNS_ERROR)
    assert not is_transient(None)


def test_describe():
    assert describe(ErrorKind.NOT_FOUND, 404) == "Page not found (HTTP 404)"
    assert describe(ErrorKind.AUTH_REQUIRED, 200) == "Page requires sign in (detected in page content)"
    assert describe(ErrorKind.TRANSPORT_TIMEOUT, detail="read timed out") == "Request timed out: read timed out"
