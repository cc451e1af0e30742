"""
Date and salary normalizers
Convert the free-text values tenants display into structured values
"""

import re
from dataclasses import dataclass
from typing import Optional

MONTH_ABBREVIATIONS = {
    'jan': '01', 'feb': '02', 'mar': '03', 'apr': '04', 'may': '05', 'jun': '06',
    'jul': '07', 'aug': '08', 'sep': '09', 'oct': '10', 'nov': '11', 'dec': '12',
}

MONTH_NAMES = {
    'january': '01', 'february': '02', 'march': '03', 'april': '04',
    'may': '05', 'june': '06', 'july': '07', 'august': '08',
    'september': '09', 'october': '10', 'november': '11', 'december': '12',
}

ISO_DATE = re.compile(r'^\d{4}-\d{2}-\d{2}')
MONTH_DAY_YEAR = re.compile(r'(\d{1,2})/(\d{1,2})/(\d{4})')      # 10/28/2025
DAY_MON_YEAR = re.compile(r'(\d{1,2})-([A-Za-z]{3})-(\d{4})')     # 02-Feb-2026
FULL_MONTH_DATE = re.compile(r'([A-Za-z]+)\s+(\d{1,2}),?\s+(\d{4})')  # Tuesday, October 28, 2025

# Checked in order, first keyword found decides the period
SALARY_PERIODS = [
    (re.compile(r'hour|\bhr\b', re.IGNORECASE), 'hourly'),
    (re.compile(r'year|annual', re.IGNORECASE), 'yearly'),
    (re.compile(r'month', re.IGNORECASE), 'monthly'),
    (re.compile(r'week', re.IGNORECASE), 'weekly'),
]

_AMOUNT = r'(\d[\d,]*(?:\.\d+)?)'
SALARY_RANGE = re.compile(
    r'\$?\s*' + _AMOUNT + r'\s*(?:-|–|—|to)\s*\$?\s*' + _AMOUNT, re.IGNORECASE
)
SALARY_DOLLAR_VALUE = re.compile(r'\$\s*' + _AMOUNT)
SALARY_VALUE = re.compile(_AMOUNT)


@dataclass(frozen=True)
class SalaryInfo:
    min: Optional[str]
    max: Optional[str]
    period: Optional[str]
    raw: Optional[str]


def parse_date(date_str: Optional[str]) -> Optional[str]:
    """
    Normalize a posted date to YYYY-MM-DD
    Returns the input unchanged when no known format matches
    """
    if not date_str:
        return None

    if ISO_DATE.match(date_str):
        return date_str

    match = MONTH_DAY_YEAR.search(date_str)
    if match:
        month, day, year = match.groups()
        return f"{year}-{month.zfill(2)}-{day.zfill(2)}"

    match = DAY_MON_YEAR.search(date_str)
    if match:
        day, month_abbr, year = match.groups()
        month = MONTH_ABBREVIATIONS.get(month_abbr.lower())
        if month:
            return f"{year}-{month}-{day.zfill(2)}"

    match = FULL_MONTH_DATE.search(date_str)
    if match:
        month_name, day, year = match.groups()
        month = MONTH_NAMES.get(month_name.lower())
        if month:
            return f"{year}-{month}-{day.zfill(2)}"

    return date_str


def _clean_amount(value: str) -> str:
    return value.replace(',', '')


def parse_salary(salary_str: Optional[str]) -> SalaryInfo:
    """Split a compensation string into min, max and pay period"""
    if not salary_str:
        return SalaryInfo(None, None, None, None)

    period = None
    for pattern, name in SALARY_PERIODS:
        if pattern.search(salary_str):
            period = name
            break

    match = SALARY_RANGE.search(salary_str)
    if match:
        low, high = _clean_amount(match.group(1)), _clean_amount(match.group(2))
        if float(low) > float(high):
            low, high = high, low
        return SalaryInfo(low, high, period, salary_str)

    match = SALARY_DOLLAR_VALUE.search(salary_str) or SALARY_VALUE.search(salary_str)
    if match:
        value = _clean_amount(match.group(1))
        return SalaryInfo(value, value, period, salary_str)

    return SalaryInfo(None, None, period, salary_str)
