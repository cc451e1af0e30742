"""
Avature Job Field Extractor
Recovers job fields from detail pages whose markup, labels and layout
differ from tenant to tenant.

Every field is resolved by an ordered chain of strategies. A strategy takes
the cleaned document and the hints carried from the listing page and returns
a value or None; the first non-None value wins. Label wording lives in the
tables below so a new tenant usually needs a new row, not new code.
"""

import logging
import re
from typing import Callable, Dict, List, Optional, Sequence, Tuple, Union
from urllib.parse import unquote, urljoin

from bs4 import BeautifulSoup, NavigableString, Tag

from .normalizers import parse_date, parse_salary

logger = logging.getLogger(__name__)

Hints = Dict[str, str]
Strategy = Callable[[BeautifulSoup, Hints], Optional[str]]

HIDDEN_SELECTOR = '.visibility--hidden--visually'
SCRIPT_LEAK_MARKER = 'twigConfig'

BLOCK_TAGS = {
    'address', 'article', 'aside', 'blockquote', 'dd', 'details', 'div', 'dl', 'dt',
    'fieldset', 'figure', 'footer', 'form', 'h1', 'h2', 'h3', 'h4', 'h5', 'h6',
    'header', 'li', 'main', 'nav', 'ol', 'p', 'pre', 'section', 'summary', 'table',
    'td', 'th', 'tr', 'ul',
}

LABEL_VALUE_CAP = 500
SIBLING_VALUE_CAP = 200
TITLE_CAP = 200

# Ordered synonym table - the first label that yields a value wins
LABEL_SYNONYMS: Dict[str, List[str]] = {
    'location': ['work location', 'location', 'job location', 'city', 'office location'],
    'work_type': ['work type', 'remote', 'workplace type', 'work arrangement', 'location type'],
    'schedule': ['work schedule', 'schedule', 'shift', 'hours', 'working hours'],
    'salary': ['salary range', 'salary', 'compensation', 'pay range', 'base pay rate',
               'pay rate', 'base pay', 'hourly rate', 'annual salary'],
    'employment_type': ['employment type', 'job type', 'position type', 'full/part time',
                        'full time/part time', 'type'],
    'employment_classification': ['employment classification', 'classification',
                                  'flsa status', 'exempt status'],
    'duration': ['duration', 'contract length', 'term', 'assignment length'],
    'department': ['department', 'business area', 'division', 'team', 'group', 'organization'],
    'category': ['category', 'job family', 'job category', 'function', 'area'],
    'entity': ['entity', 'company', 'subsidiary', 'business unit', 'legal entity'],
    'posted': ['posted date', 'posted', 'date posted', 'posting date', 'published'],
    'ref': ['job #', 'job number', 'requisition', 'req id', 'position id', 'opening id',
            'ref', 'ref #'],
}

# Generic one-word synonyms that only count when they are the whole label,
# otherwise "area" claims "Business Area" and "type" claims "Work Type"
WHOLE_LABEL_ONLY = {'type', 'area', 'term', 'team', 'group', 'function', 'company', 'remote',
                    'hours', 'shift'}

# Labels searched in the free text when no structured pair exists
TEXT_FALLBACK_LABELS: Dict[str, List[str]] = {
    'location': ['Location'],
    'department': ['Business Area', 'Department'],
    'ref': ['Ref #', 'Ref#', 'Reference'],
}

PATTERN_FALLBACKS: Dict[str, re.Pattern] = {
    'posted': re.compile(r'posted[:\s]+(\d{1,2}[-/][A-Za-z0-9]{2,3}[-/]\d{2,4})', re.IGNORECASE),
    'ref': re.compile(r'(?:job\s*#|ref\s*#|requisition[:\s]*#?)\s*(\d+)', re.IGNORECASE),
}

# Listing card subtitle keys (list-item-<key>) that pre-fill a field, besides the field's own name
HINT_KEYS: Dict[str, List[str]] = {
    'title': ['title'],
    'location': ['location', 'locationBuiltIn'],
    'employment_type': ['workingTime'],
    'duration': ['contractType'],
    'department': ['department'],
    'entity': ['legalEntity'],
    'ref': ['ref'],
}

# Labels that end a free-text value
FREE_TEXT_STOP_LABELS = ['Location', 'Business Area', 'Ref', 'Posted', 'Salary', 'Department']

# Text that means a sibling block is another label, not a value
SIBLING_REJECT_MARKERS = ['location', 'business area', 'ref #']

# Site branding that shows up where a job title is expected
COMPANY_NAME_PATTERNS = [
    re.compile(r'^bloomberg$', re.IGNORECASE),
    re.compile(r'^ucla\s*health$', re.IGNORECASE),
    re.compile(r'^unifi$', re.IGNORECASE),
    re.compile(r'^avature$', re.IGNORECASE),
]

TITLE_HEADING_SELECTORS = [
    'main h1',
    'article h1',
    '[class*="job"] h1',
    '[class*="detail"] h1',
    '#content h1',
    '.content h1',
]

PAGE_TITLE_WITH_ID = re.compile(r'^(.+?)\s*[-|]\s*\d+\s*[-|]')   # Title - 12345 - Company
PAGE_TITLE_SIMPLE = re.compile(r'^(.+?)\s*[-|]\s*[A-Z]')          # Title - Company
URL_TITLE_SLUG = re.compile(r'/JobDetail/([^/?#]+)/\d+', re.IGNORECASE)

# Heading keywords per section bucket, checked in this order
SECTION_KEYWORDS: List[Tuple[str, Tuple[str, ...]]] = [
    ('duties', ('primary dut', 'duties', 'duty', 'responsibilit', 'what you')),
    ('qualifications', ('qualification', 'requirement', 'skills', 'experience')),
    ('description', ('description', 'overview', 'summary', 'about the role',
                     'about this role', 'about the job', 'about the position', 'about')),
]
SECTION_CONTAINER_SELECTOR = 'section, [class*="section"], [class*="collapsible"], details, [role="region"]'
SECTION_HEADING_SELECTOR = 'h2, h3, h4, summary, [class*="header"], [class*="title"]'
SECTION_MIN_LENGTH = 20
SECTION_NOISE = 'Press space or enter'

MAIN_CONTENT_SELECTOR = 'main, article, [role="main"], #content, .content'
MAIN_CONTENT_FALLBACK_MIN = 100

APPLY_SELECTORS = [
    'a[href*="ApplicationMethods"]',
    'a[href*="Apply"]',
    'a[href*="apply"]',
]

TOTAL_JOBS_PATTERNS = [
    re.compile(r'there\s+are\s+(\d+)\s+jobs?\s+matching', re.IGNORECASE),
    re.compile(r'(\d+)\s+jobs?\s+matching', re.IGNORECASE),
    re.compile(r'showing\s+\d+\s*[-–]\s*\d+\s+of\s+(\d+)', re.IGNORECASE),
    re.compile(r'of\s+(\d+)\s+results?', re.IGNORECASE),
    re.compile(r'(\d+)\s+results?(?!\s*found)', re.IGNORECASE),
    re.compile(r'(\d+)\s+jobs?\s+found', re.IGNORECASE),
    re.compile(r'found\s+(\d+)\s+jobs?', re.IGNORECASE),
    re.compile(r'(\d+)\s+open\s+positions?', re.IGNORECASE),
    re.compile(r'(\d+)\s+opportunit(?:y|ies)', re.IGNORECASE),
]
JOB_DETAIL_LINK_ID = re.compile(r'/JobDetail/(?:[^/?#]+/)?(\d+)', re.IGNORECASE)


# --------------------------------------------------------------------------
# Document helpers
# --------------------------------------------------------------------------

def clean_document(document: Union[str, BeautifulSoup]) -> BeautifulSoup:
    """
    Return a new document without scripts, styles and visually hidden elements
    The input is never modified
    """
    cleaned = BeautifulSoup(str(document), 'html.parser')
    for tag in cleaned.find_all(['script', 'style', 'noscript']):
        tag.decompose()
    for tag in cleaned.select(HIDDEN_SELECTOR):
        tag.decompose()
    return cleaned


def _block_text(element: Tag) -> str:
    # One line per block element; inline tags stay on their line
    lines: List[str] = []
    current: List[str] = []
    current_block = None

    def flush():
        line = re.sub(r'\s+', ' ', ''.join(current)).strip()
        if line:
            lines.append(line)
        current.clear()

    for node in element.descendants:
        if isinstance(node, Tag):
            if node.name == 'br':
                flush()
            continue
        if type(node) is not NavigableString:
            continue
        block = element
        for parent in node.parents:
            if parent is element or parent.name in BLOCK_TAGS:
                block = parent
                break
        if block is not current_block:
            flush()
            current_block = block
        current.append(str(node))
    flush()
    return '\n'.join(lines)


def element_text(element: Optional[Tag], separator: str = ' ') -> str:
    """
    Visible text of an element with whitespace collapsed
    With separator '\\n' the text keeps one line per block element
    """
    if element is None:
        return ''
    if separator == '\n':
        return _block_text(element)
    return re.sub(r'\s+', ' ', element.get_text(separator)).strip()


def _accept(value: Optional[str], cap: int) -> Optional[str]:
    if not value:
        return None
    value = value.strip()
    if not value or len(value) >= cap or SCRIPT_LEAK_MARKER in value:
        return None
    return value


def _label_pattern(label: str) -> re.Pattern:
    # Word boundaries keep "ref" from matching "preferred"
    return re.compile(r'(?<!\w)' + re.escape(label.lower()) + r's?(?!\w)')


def _strip_label_punctuation(text: str) -> str:
    return re.sub(r'[:#]', '', text).strip().lower()


def label_matches(text: str, label: str) -> bool:
    """Whether a label element's text contains the lookup label"""
    if not text or not label:
        return False
    lower_label = label.lower()
    if lower_label in WHOLE_LABEL_ONLY:
        return _strip_label_punctuation(text) in (lower_label, f"{lower_label}s")
    return bool(_label_pattern(label).search(text.lower()))


# --------------------------------------------------------------------------
# Label/value pair methods, tried in order for every label
# --------------------------------------------------------------------------

def _from_field_blocks(soup: BeautifulSoup, label: str) -> Optional[str]:
    """<div class="article__content__view__field"> label/value pairs"""
    for field in soup.select('.article__content__view__field'):
        label_el = field.select_one('.article__content__view__field__label')
        value_el = field.select_one('.article__content__view__field__value')
        if not label_el or not value_el:
            continue

        field_label = element_text(label_el)
        bare_label = _strip_label_punctuation(field_label)
        if label_matches(field_label, label) or (bare_label and label_matches(label, bare_label)):
            value = _accept(element_text(value_el), LABEL_VALUE_CAP)
            if value:
                return value
    return None


def _text_after(node: Tag) -> str:
    parts = []
    for sibling in node.next_siblings:
        if isinstance(sibling, Tag):
            if sibling.name in ('strong', 'b', 'br') or sibling.find(['strong', 'b']):
                break
            parts.append(sibling.get_text(' '))
        else:
            parts.append(str(sibling))
    return re.sub(r'\s+', ' ', ''.join(parts)).strip()


def _from_emphasized_label(soup: BeautifulSoup, label: str) -> Optional[str]:
    """<p><strong>Location:</strong> New York</p>"""
    for strong in soup.find_all(['strong', 'b']):
        if not label_matches(element_text(strong), label):
            continue

        # The value may sit next to the <strong> or next to its wrapper
        node = strong
        for _ in range(2):
            remainder = re.sub(r'^[:\-–|•\s]+', '', _text_after(node)).strip()
            if remainder:
                value = _accept(remainder, LABEL_VALUE_CAP)
                if value:
                    return value
                break
            parent = node.parent
            if parent is None or parent.name not in ('p', 'div', 'span', 'li'):
                break
            node = parent
    return None


def _from_definition_list(soup: BeautifulSoup, label: str) -> Optional[str]:
    for dt in soup.find_all('dt'):
        if not label_matches(element_text(dt), label):
            continue
        dd = dt.find_next_sibling()
        if dd is not None and dd.name == 'dd':
            value = _accept(element_text(dd), LABEL_VALUE_CAP)
            if value:
                return value
    return None


def _from_table_rows(soup: BeautifulSoup, label: str) -> Optional[str]:
    for row in soup.find_all('tr'):
        th = row.find('th')
        td = row.find('td')
        if th and td and label_matches(element_text(th), label):
            value = _accept(element_text(td), LABEL_VALUE_CAP)
            if value:
                return value
    return None


def _from_sibling_blocks(soup: BeautifulSoup, label: str) -> Optional[str]:
    """<div>Location</div><div>New York</div>"""
    lower_label = label.lower()
    for block in soup.find_all(['div', 'span']):
        text = element_text(block).lower()
        if text != lower_label and text != f"{lower_label}:":
            continue

        sibling = block.find_next_sibling()
        if sibling is None or sibling.name not in ('div', 'span'):
            continue

        value = _accept(element_text(sibling), SIBLING_VALUE_CAP)
        if value and not any(marker in value.lower() for marker in SIBLING_REJECT_MARKERS):
            return value
    return None


LABEL_VALUE_METHODS = [
    _from_field_blocks,
    _from_emphasized_label,
    _from_definition_list,
    _from_table_rows,
    _from_sibling_blocks,
]


def get_field_by_labels(soup: BeautifulSoup, labels: Sequence[str]) -> Optional[str]:
    """First label-adjacent value for any of the labels, in label order"""
    for label in labels:
        for method in LABEL_VALUE_METHODS:
            value = method(soup, label)
            if value:
                return value
    return None


def get_field_from_text(soup: BeautifulSoup, labels: Sequence[str]) -> Optional[str]:
    """
    "Label: value" in the visible text, up to the next known label or line end
    Best effort - tenants that add labels outside FREE_TEXT_STOP_LABELS can bleed
    """
    root = soup.body or soup
    text = element_text(root, '\n')
    stops = '|'.join(re.escape(stop) for stop in FREE_TEXT_STOP_LABELS)

    for label in labels:
        pattern = re.compile(
            r'(?<!\w)' + re.escape(label) + r'[:\s]*([^\n]{3,100}?)(?=\s*\b(?:' + stops + r')\b|[ \t]*$)',
            re.IGNORECASE | re.MULTILINE,
        )
        match = pattern.search(text)
        if match:
            value = _accept(match.group(1), SIBLING_VALUE_CAP)
            if value:
                return value
    return None


def get_text_by_pattern(soup: BeautifulSoup, pattern: re.Pattern) -> Optional[str]:
    """Regex over the main content text, falling back to the whole body"""
    regions = soup.select('main, article, #content, .content, [role="main"]')
    text = ' '.join(element_text(region) for region in regions)
    if not text:
        text = element_text(soup.body or soup)

    match = pattern.search(text)
    if not match:
        return None
    value = match.group(1) if match.groups() else match.group(0)
    return value.strip() if value else None


# --------------------------------------------------------------------------
# Strategy chains
# --------------------------------------------------------------------------

def first_of(strategies: Sequence[Strategy], soup: BeautifulSoup, hints: Hints) -> Optional[str]:
    for strategy in strategies:
        value = strategy(soup, hints)
        if value:
            return value
    return None


def from_hint(keys: Sequence[str], transform: Callable[[str], str] = None) -> Strategy:
    def strategy(soup: BeautifulSoup, hints: Hints) -> Optional[str]:
        for key in keys:
            value = (hints or {}).get(key)
            if value and value.strip():
                value = value.strip()
                return transform(value) if transform else value
        return None
    return strategy


def by_labels(labels: Sequence[str]) -> Strategy:
    return lambda soup, hints: get_field_by_labels(soup, labels)


def by_free_text(labels: Sequence[str]) -> Strategy:
    return lambda soup, hints: get_field_from_text(soup, labels)


def by_pattern(pattern: re.Pattern) -> Strategy:
    return lambda soup, hints: get_text_by_pattern(soup, pattern)


def strip_ref_prefix(value: str) -> str:
    """'Ref # 12345' -> '12345'"""
    return re.sub(r'^\s*ref\s*#?\s*[:\-]?\s*', '', value, flags=re.IGNORECASE).strip() or value


HINT_TRANSFORMS: Dict[str, Callable[[str], str]] = {
    'ref': strip_ref_prefix,
}


def build_field_chain(field: str) -> List[Strategy]:
    """hint -> label/value pairs -> free text -> field specific pattern"""
    hint_keys = [field] + [key for key in HINT_KEYS.get(field, []) if key != field]
    chain: List[Strategy] = [from_hint(hint_keys, HINT_TRANSFORMS.get(field))]
    if field in LABEL_SYNONYMS:
        chain.append(by_labels(LABEL_SYNONYMS[field]))
    if field in TEXT_FALLBACK_LABELS:
        chain.append(by_free_text(TEXT_FALLBACK_LABELS[field]))
    if field in PATTERN_FALLBACKS:
        chain.append(by_pattern(PATTERN_FALLBACKS[field]))
    return chain


FIELD_CHAINS: Dict[str, List[Strategy]] = {
    field: build_field_chain(field) for field in LABEL_SYNONYMS
}


def extract_field(field: str, soup: BeautifulSoup, hints: Optional[Hints] = None) -> Optional[str]:
    return first_of(FIELD_CHAINS[field], soup, hints or {})


# --------------------------------------------------------------------------
# Title
# --------------------------------------------------------------------------

def is_company_name(text: str, subdomain: Optional[str] = None) -> bool:
    """Whether a title candidate is really the tenant's branding"""
    stripped = text.strip()
    if any(pattern.match(stripped) for pattern in COMPANY_NAME_PATTERNS):
        return True
    if subdomain:
        squashed = re.sub(r'\s+', '', stripped.lower())
        return squashed == re.sub(r'[\s\-_]+', '', subdomain.lower())
    return False


def _heading_title(text: str) -> Optional[str]:
    lower = text.lower()
    if 'home page' in lower or 'careers' in lower:
        return None
    if not 5 < len(text) < TITLE_CAP:
        return None
    return text


def title_chain(url: str, subdomain: Optional[str] = None) -> List[Strategy]:
    def from_og_title(soup: BeautifulSoup, hints: Hints) -> Optional[str]:
        meta = soup.find('meta', attrs={'property': 'og:title'})
        content = (meta.get('content') or '').strip() if meta else ''
        if 5 < len(content) < TITLE_CAP:
            return content
        return None

    def from_page_title(soup: BeautifulSoup, hints: Hints) -> Optional[str]:
        page_title = element_text(soup.find('title'))
        if not page_title:
            return None
        match = PAGE_TITLE_WITH_ID.match(page_title)
        if match and len(match.group(1).strip()) > 5:
            return match.group(1).strip()
        match = PAGE_TITLE_SIMPLE.match(page_title)
        if match and 5 < len(match.group(1).strip()) < 150:
            return match.group(1).strip()
        return None

    def from_title_field(soup: BeautifulSoup, hints: Hints) -> Optional[str]:
        value = element_text(soup.select_one(
            '.article__content__view__field__value--font .article__content__view__field__value'))
        if 5 < len(value) < TITLE_CAP:
            return value
        return None

    def from_headings(soup: BeautifulSoup, hints: Hints) -> Optional[str]:
        for selector in TITLE_HEADING_SELECTORS:
            heading = soup.select_one(selector)
            if heading is None:
                continue
            candidate = _heading_title(element_text(heading))
            if candidate and not is_company_name(candidate, subdomain):
                return candidate

        for heading in soup.find_all('h1'):
            if 'sr-only' in (heading.get('class') or []):
                continue
            if heading.find_parent(['header', 'nav']) is not None:
                continue
            candidate = _heading_title(element_text(heading))
            if candidate and not is_company_name(candidate, subdomain):
                return candidate
        return None

    def from_url_slug(soup: BeautifulSoup, hints: Hints) -> Optional[str]:
        match = URL_TITLE_SLUG.search(url)
        if not match:
            return None
        return unquote(match.group(1)).replace('-', ' ').strip() or None

    def not_branding(strategy: Strategy) -> Strategy:
        def guarded(soup: BeautifulSoup, hints: Hints) -> Optional[str]:
            value = strategy(soup, hints)
            if value and is_company_name(value, subdomain):
                logger.debug(f"Rejected company name as title: {value}")
                return None
            return value
        return guarded

    strategies = [
        from_hint(HINT_KEYS['title']),
        from_og_title,
        from_page_title,
        from_title_field,
        from_headings,
        from_url_slug,
    ]
    return [not_branding(strategy) for strategy in strategies]


def extract_title(soup: BeautifulSoup, url: str, hints: Optional[Hints] = None,
                  subdomain: Optional[str] = None) -> Optional[str]:
    return first_of(title_chain(url, subdomain), soup, hints or {})


# --------------------------------------------------------------------------
# Sections, apply link and page level values
# --------------------------------------------------------------------------

def classify_heading(heading: str) -> Optional[str]:
    lower = heading.lower()
    for bucket, keywords in SECTION_KEYWORDS:
        if any(keyword in lower for keyword in keywords):
            return bucket
    return None


def _content_after_heading(heading: Tag) -> str:
    parts = []
    for sibling in heading.next_siblings:
        if not isinstance(sibling, Tag):
            continue
        if sibling.name in ('h1', 'h2', 'h3'):
            break
        text = element_text(sibling, '\n')
        if text and SECTION_NOISE not in text:
            parts.append(text)
    return '\n'.join(parts)


def _section_body(section: Tag) -> str:
    blocks = [
        block for block in section.select('p, ul, ol')
        if block.find_parent(['p', 'ul', 'ol']) is None
    ]
    return '\n'.join(filter(None, (element_text(block, '\n') for block in blocks)))


def main_content(soup: BeautifulSoup) -> Optional[str]:
    region = soup.select_one(MAIN_CONTENT_SELECTOR)
    text = element_text(region, '\n')
    return text or None


def extract_sections(soup: BeautifulSoup) -> Dict[str, Optional[str]]:
    """
    Description, qualifications and duties from headed sections
    Returns a dict with those three keys, missing sections as None
    """
    description: Optional[str] = None
    qualifications: List[str] = []
    duties: List[str] = []

    # Pass 1: <h3> headings followed by content blocks
    for heading in soup.find_all('h3'):
        bucket = classify_heading(element_text(heading))
        if bucket is None:
            continue
        content = _content_after_heading(heading)
        if len(content) < SECTION_MIN_LENGTH:
            continue

        if bucket == 'duties':
            duties.append(content)
        elif bucket == 'qualifications':
            qualifications.append(content)
        elif description is None or len(content) > len(description):
            description = content

    # Pass 2: generic sectioning elements for tenants without <h3> structure
    for section in soup.select(SECTION_CONTAINER_SELECTOR):
        bucket = classify_heading(element_text(section.select_one(SECTION_HEADING_SELECTOR)))
        if bucket is None:
            continue
        content = _section_body(section)
        if len(content) < SECTION_MIN_LENGTH:
            continue

        if bucket == 'description':
            if description is None or len(content) > len(description):
                description = content
        elif bucket == 'qualifications' and not qualifications:
            qualifications.append(content)
        elif bucket == 'duties' and not duties:
            duties.append(content)

    if description is None and not qualifications and not duties:
        fallback = main_content(soup)
        if fallback and len(fallback) > MAIN_CONTENT_FALLBACK_MIN:
            description = fallback

    return {
        'description': description,
        'qualifications': '\n'.join(qualifications) or None,
        'duties': '\n'.join(duties) or None,
    }


def _usable_href(href: Optional[str]) -> bool:
    if not href:
        return False
    href = href.strip()
    return bool(href) and not href.startswith('#') and not href.lower().startswith('javascript:')


def extract_apply_url(soup: BeautifulSoup, page_url: str) -> Optional[str]:
    """First apply-like link, resolved against the page URL"""
    candidates: List[Tag] = []
    for selector in APPLY_SELECTORS:
        candidates.extend(soup.select(selector))
    candidates.extend(a for a in soup.find_all('a') if 'apply' in element_text(a).lower())
    candidates.extend(soup.select('a.button--primary'))

    for anchor in candidates:
        href = anchor.get('href')
        if _usable_href(href):
            return urljoin(page_url, href.strip())
    return None


def extract_total_jobs(soup: BeautifulSoup) -> Optional[int]:
    """Advertised number of jobs on a listing page, or the count of unique job links"""
    text = element_text(soup.body or soup)
    for pattern in TOTAL_JOBS_PATTERNS:
        match = pattern.search(text)
        if match:
            count = int(match.group(1))
            if count > 0:
                return count

    job_ids = set()
    for anchor in soup.select('a[href*="/JobDetail/"]'):
        match = JOB_DETAIL_LINK_ID.search(anchor.get('href', ''))
        if match:
            job_ids.add(match.group(1))
    return len(job_ids) or None


# --------------------------------------------------------------------------
# Detail page
# --------------------------------------------------------------------------

def extract_job_fields(soup: BeautifulSoup, url: str, hints: Optional[Hints] = None,
                       subdomain: Optional[str] = None) -> Dict[str, Optional[str]]:
    """
    Run every field chain over a cleaned detail page
    Returns raw and normalized values keyed by ExtractedJob field name
    """
    hints = hints or {}
    salary = parse_salary(extract_field('salary', soup, hints))

    fields = {
        'title': extract_title(soup, url, hints, subdomain),
        'location': extract_field('location', soup, hints),
        'work_type': extract_field('work_type', soup, hints),
        'schedule': extract_field('schedule', soup, hints),
        'salary_min': salary.min,
        'salary_max': salary.max,
        'salary_period': salary.period,
        'salary_raw': salary.raw,
        'employment_type': extract_field('employment_type', soup, hints),
        'employment_classification': extract_field('employment_classification', soup, hints),
        'duration': extract_field('duration', soup, hints),
        'department': extract_field('department', soup, hints),
        'category': extract_field('category', soup, hints),
        'entity': extract_field('entity', soup, hints),
        'posted_date': parse_date(extract_field('posted', soup, hints)),
        'ref_number': extract_field('ref', soup, hints),
        'apply_url': extract_apply_url(soup, url),
        'full_content': main_content(soup),
    }
    fields.update(extract_sections(soup))
    return fields
