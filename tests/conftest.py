import os
import sys

import pytest

# Ensure repo root is importable for avature_crawler and the CLI modules
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))


LISTING_URL = "https://acme.avature.net/careers/SearchJobs"
DETAIL_URL = "https://acme.avature.net/careers/JobDetail/Senior-Data-Analyst/12345"

LISTING_HTML = """
<html>
<head><title>Search Jobs - Acme</title></head>
<body>
<main>
  <p class="list-controls__text">Showing 1-3 of 3 results</p>
  <div class="section__content__results">
    <article class="article article--result">
      <div class="article__header__text">
        <h3 class="article__header__text__title">
          <a href="/careers/JobDetail/Data-Analyst/101">Data Analyst</a>
        </h3>
        <div class="article__header__text__subtitle">
          <span class="list-item-location">New York</span>
          <span class="list-item-ref">Ref # 5001</span>
        </div>
      </div>
    </article>
    <article class="article article--result">
      <div class="article__header__text">
        <h3 class="article__header__text__title">
          <a href="https://acme.avature.net/careers/JobDetail/Engineer/102">Engineer</a>
        </h3>
        <div class="article__header__text__subtitle">Full time</div>
      </div>
    </article>
    <article class="article article--result">
      <div class="article__header__text">
        <h3 class="article__header__text__title">
          <a href="JobDetail/Designer/103">Designer</a>
        </h3>
      </div>
    </article>
    <article class="article article--result">
      <div class="article__header__text">
        <h3 class="article__header__text__title">
          <a href="/careers/JobDetail/Data-Analyst/101">Data Analyst</a>
        </h3>
      </div>
    </article>
  </div>
  <div class="paginationLinks">
    <a href="/careers/SearchJobs?jobOffset=0">&lt;&lt; Previous</a>
    <a href="/careers/SearchJobs">1</a>
    <a href="/careers/SearchJobs?jobOffset=10">2</a>
    <a href="/careers/SearchJobs?jobOffset=10">Next &gt;&gt;</a>
  </div>
</main>
</body>
</html>
"""

DETAIL_HTML = """
<html>
<head>
  <title>Senior Data Analyst - 12345 - Acme Corp</title>
  <meta property="og:title" content="Senior Data Analyst">
</head>
<body>
<header><h1>Acme Careers</h1></header>
<main>
  <div class="article__content__view__field">
    <div class="article__content__view__field__label">Work Location</div>
    <div class="article__content__view__field__value">New York, NY</div>
  </div>
  <div class="article__content__view__field">
    <div class="article__content__view__field__label">Business Area</div>
    <div class="article__content__view__field__value">Engineering</div>
  </div>
  <p><strong>Salary Range:</strong> $45.50 - $60.00 per hour</p>
  <dl><dt>Posted Date</dt><dd>02-Feb-2026</dd></dl>
  <table><tr><th>Employment Type</th><td>Full time</td></tr></table>
  <p><strong>Ref #:</strong> 98765</p>
  <a class="button button--primary" href="/careers/ApplicationMethods?jobId=12345">Apply Now</a>
  <div id="job-sections">
    <h3>Job Description</h3>
    <p>You will turn raw operational data into reports that guide planning decisions.</p>
    <h3>Qualifications</h3>
    <ul><li>Three years of SQL experience</li><li>Comfort with Python notebooks</li></ul>
    <h3>Primary Duties</h3>
    <p>Build weekly dashboards and review data quality with each business team.</p>
  </div>
</main>
<script>var twigConfig = {"location": "Hidden City"};</script>
</body>
</html>
"""

NO_JOBS_HTML = """
<html>
<head><title>Search Jobs - Acme</title></head>
<body><main><p>There are currently no open positions. Check back soon.</p></main></body>
</html>
"""


@pytest.fixture
def listing_html():
    return LISTING_HTML


@pytest.fixture
def detail_html():
    return DETAIL_HTML


@pytest.fixture
def no_jobs_html():
    return NO_JOBS_HTML
