import pytest

from avature_crawler.normalizers import parse_date, parse_salary


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("2026-02-02", "2026-02-02"),
        ("2026-02-02T09:30:00Z", "2026-02-02T09:30:00Z"),
        ("10/28/2025", "2025-10-28"),
        ("2/3/2026", "2026-02-03"),
        ("02-Feb-2026", "2026-02-02"),
        ("Tuesday, October 28, 2025", "2025-10-28"),
        ("Posted March 5, 2026", "2026-03-05"),
    ],
)
def test_parse_date_known_formats(raw, expected):
    assert parse_date(raw) == expected


def test_parse_date_passes_unknown_text_through():
    assert parse_date("Posted last week") == "Posted last week"
    assert parse_date("12-Foo-2026") == "12-Foo-2026"


def test_parse_date_empty_is_none():
    assert parse_date(None) is None
    assert parse_date("") is None


def test_parse_date_is_idempotent():
    once = parse_date("02-Feb-2026")
    assert parse_date(once) == once


def test_parse_salary_hourly_range():
    salary = parse_salary("$45.50 - $60.00 per hour")

    assert (salary.min, salary.max, salary.period) == ("45.50", "60.00", "hourly")
    assert salary.raw == "$45.50 - $60.00 per hour"


def test_parse_salary_strips_thousands_separators():
    salary = parse_salary("$120,000 to $150,000 annually")

    assert (salary.min, salary.max, salary.period) == ("120000", "150000", "yearly")


def test_parse_salary_orders_reversed_range():
    salary = parse_salary("$90,000 – $70,000 per year")

    assert salary.min == "70000"
    assert salary.max == "90000"


def test_parse_salary_single_value_sets_both_bounds():
    salary = parse_salary("USD 5,000 per month")

    assert salary.min == salary.max == "5000"
    assert salary.period == "monthly"


def test_parse_salary_without_numbers_keeps_raw():
    salary = parse_salary("Competitive, paid weekly")

    assert salary.min is None and salary.max is None
    assert salary.period == "weekly"
    assert salary.raw == "Competitive, paid weekly"


def test_parse_salary_empty():
    salary = parse_salary(None)

    assert (salary.min, salary.max, salary.period, salary.raw) == (None, None, None, None)
