from bs4 import BeautifulSoup

from avature_crawler.field_extractor import (clean_document, element_text, extract_apply_url,
                                             extract_field, extract_job_fields, extract_sections,
                                             extract_title, extract_total_jobs, get_field_by_labels,
                                             get_field_from_text, is_company_name, label_matches,
                                             strip_ref_prefix)

DETAIL_URL = "https://acme.avature.net/careers/JobDetail/Senior-Data-Analyst/12345"


def soup_of(html):
    return clean_document(BeautifulSoup(html, "html.parser"))


class TestDocumentHelpers:
    def test_clean_document_leaves_input_untouched(self, detail_html):
        original = BeautifulSoup(detail_html, "html.parser")
        cleaned = clean_document(original)

        assert cleaned.find("script") is None
        assert original.find("script") is not None

    def test_clean_document_drops_visually_hidden(self):
        cleaned = soup_of('<div><span class="visibility--hidden--visually">Skip</span>Visible</div>')
        assert element_text(cleaned) == "Visible"

    def test_block_text_keeps_inline_tags_on_one_line(self):
        soup = soup_of("<div><p>Work in <b>Austin</b>, TX</p><p>Second line</p></div>")
        assert element_text(soup.div, "\n") == "Work in Austin, TX\nSecond line"

    def test_label_matching_uses_word_boundaries(self):
        assert label_matches("Ref #:", "ref")
        assert label_matches("Locations", "location")
        assert not label_matches("Preferred Qualifications", "ref")
        assert not label_matches("Business Area", "area")
        assert label_matches("Area:", "area")


class TestLabelValuePairs:
    def test_field_blocks(self, detail_html):
        soup = soup_of(detail_html)
        assert get_field_by_labels(soup, ["work location"]) == "New York, NY"
        assert get_field_by_labels(soup, ["business area"]) == "Engineering"

    def test_emphasized_label(self, detail_html):
        soup = soup_of(detail_html)
        assert get_field_by_labels(soup, ["salary range"]) == "$45.50 - $60.00 per hour"

    def test_emphasized_label_inside_wrapper(self):
        soup = soup_of("<div><p><strong>Schedule:</strong></p> Monday to Friday</div>")
        assert get_field_by_labels(soup, ["schedule"]) == "Monday to Friday"

    def test_definition_list_and_table(self, detail_html):
        soup = soup_of(detail_html)
        assert get_field_by_labels(soup, ["posted date"]) == "02-Feb-2026"
        assert get_field_by_labels(soup, ["employment type"]) == "Full time"

    def test_sibling_blocks(self):
        soup = soup_of("<div><div>Department</div><div>Radiology</div></div>")
        assert get_field_by_labels(soup, ["department"]) == "Radiology"

    def test_sibling_value_that_is_another_label_is_rejected(self):
        soup = soup_of("<div><div>Department</div><div>Location</div></div>")
        assert get_field_by_labels(soup, ["department"]) is None

    def test_script_leak_values_are_rejected(self):
        soup = BeautifulSoup("<p><strong>Location:</strong> twigConfig.location</p>", "html.parser")
        assert get_field_by_labels(soup, ["location"]) is None

    def test_free_text_stops_at_next_label(self):
        soup = soup_of('<div class="job-info">Location: Austin, TX Business Area: Finance</div>')
        assert get_field_from_text(soup, ["Location"]) == "Austin, TX"
        assert get_field_from_text(soup, ["Business Area"]) == "Finance"

    def test_free_text_per_line(self):
        soup = soup_of('<div class="job-info">Location: Austin, TX<br>Ref # 777</div>')
        assert extract_field("location", soup) == "Austin, TX"
        assert extract_field("ref", soup) == "777"


class TestFieldChains:
    def test_hint_wins_over_page(self, detail_html):
        soup = soup_of(detail_html)
        assert extract_field("location", soup, {"location": "Remote - US"}) == "Remote - US"
        assert extract_field("location", soup) == "New York, NY"

    def test_ref_hint_prefix_is_stripped(self):
        assert strip_ref_prefix("Ref # 5001") == "5001"
        assert strip_ref_prefix("R-5001") == "R-5001"
        assert extract_field("ref", soup_of("<p>Nothing</p>"), {"ref": "Ref # 5001"}) == "5001"

    def test_posted_date_pattern_fallback(self):
        soup = soup_of("<main><p>Posted: 10/28/2025 by the hiring team</p></main>")
        assert extract_field("posted", soup) == "10/28/2025"

    def test_hint_keyed_by_field_name_wins(self):
        soup = soup_of(
            "<main><p><strong>Category:</strong> Engineering</p>"
            "<p><strong>Schedule:</strong> Days</p></main>"
        )
        assert extract_field("category", soup) == "Engineering"
        assert extract_field("category", soup, {"category": "Finance"}) == "Finance"
        assert extract_field("schedule", soup, {"schedule": "Nights"}) == "Nights"
        assert extract_field("salary", soup, {"salary": "$45.50 - $60.00 per hour"}) == "$45.50 - $60.00 per hour"

    def test_unrelated_labels_do_not_bleed(self):
        soup = soup_of("<p><strong>Preferred Qualifications:</strong> Python</p>")
        assert extract_field("ref", soup) is None


class TestTitle:
    def test_og_title(self, detail_html):
        assert extract_title(soup_of(detail_html), DETAIL_URL) == "Senior Data Analyst"

    def test_page_title_with_job_id(self):
        soup = soup_of("<html><head><title>Registered Nurse - 3345 - UCLA Health</title></head></html>")
        assert extract_title(soup, "https://uclahealth.avature.net/careers/JobDetail/3345") == "Registered Nurse"

    def test_company_name_is_never_the_title(self):
        html = (
            '<html><head><title>Bloomberg</title><meta property="og:title" content="Bloomberg"></head>'
            "<body><main><h1>Bloomberg</h1></main></body></html>"
        )
        url = "https://bloomberg.avature.net/careers/JobDetail/Software-Engineer/4242"

        assert extract_title(soup_of(html), url, subdomain="bloomberg") == "Software Engineer"
        assert extract_title(soup_of(html), url, {"title": "Bloomberg"}, "bloomberg") == "Software Engineer"

    def test_subdomain_counts_as_company_name(self):
        assert is_company_name("Acme", "acme")
        assert is_company_name("UCLA Health")
        assert not is_company_name("Acme Analyst", "acme")

    def test_header_heading_is_skipped(self):
        html = "<body><header><h1>Welcome to Acme</h1></header><div><h1>Payroll Specialist</h1></div></body>"
        assert extract_title(soup_of(html), "https://acme.avature.net/careers/JobDetail/9") == "Payroll Specialist"


class TestSections:
    def test_h3_sections(self, detail_html):
        sections = extract_sections(soup_of(detail_html))

        assert sections["description"].startswith("You will turn raw operational data")
        assert sections["qualifications"] == "Three years of SQL experience\nComfort with Python notebooks"
        assert sections["duties"].startswith("Build weekly dashboards")

    def test_section_containers(self):
        html = (
            "<main><section><h2>About the role</h2>"
            "<p>Lead the nursing team on the night shift at the downtown clinic.</p></section></main>"
        )
        sections = extract_sections(soup_of(html))

        assert sections["description"] == "Lead the nursing team on the night shift at the downtown clinic."
        assert sections["qualifications"] is None

    def test_about_heading_next_to_qualifications(self):
        html = (
            "<main><section><h2>About this opportunity</h2>"
            "<p>Lead the nursing team on the night shift at the downtown clinic.</p></section>"
            "<section><h2>Qualifications</h2>"
            "<p>Registered nurse license and two years of acute care experience.</p></section></main>"
        )
        sections = extract_sections(soup_of(html))

        assert sections["description"] == "Lead the nursing team on the night shift at the downtown clinic."
        assert sections["qualifications"] == "Registered nurse license and two years of acute care experience."

    def test_main_content_fallback(self):
        text = "Join a small team building scheduling tools for clinics across the region. " * 3
        sections = extract_sections(soup_of(f"<main><p>{text}</p></main>"))

        assert sections["description"] == text.strip()


class TestPageValues:
    def test_apply_url_is_absolute(self, detail_html):
        assert extract_apply_url(soup_of(detail_html), DETAIL_URL) == \
            "https://acme.avature.net/careers/ApplicationMethods?jobId=12345"

    def test_apply_url_skips_script_links(self):
        html = '<a href="javascript:void(0)">Apply</a><a href="/apply/9">Apply now</a>'
        assert extract_apply_url(soup_of(html), DETAIL_URL) == "https://acme.avature.net/apply/9"

    def test_total_jobs_from_text(self, listing_html):
        assert extract_total_jobs(soup_of(listing_html)) == 3

    def test_total_jobs_from_links(self):
        html = (
            '<a href="/careers/JobDetail/A/1">A</a><a href="/careers/JobDetail/A/1">A</a>'
            '<a href="/careers/JobDetail/2">B</a>'
        )
        assert extract_total_jobs(soup_of(html)) == 2


def test_extract_job_fields(detail_html):
    fields = extract_job_fields(soup_of(detail_html), DETAIL_URL, subdomain="acme")

    assert fields["title"] == "Senior Data Analyst"
    assert fields["location"] == "New York, NY"
    assert fields["department"] == "Engineering"
    assert fields["category"] is None
    assert fields["employment_type"] == "Full time"
    assert fields["posted_date"] == "2026-02-02"
    assert fields["ref_number"] == "98765"
    assert (fields["salary_min"], fields["salary_max"], fields["salary_period"]) == ("45.50", "60.00", "hourly")
    assert fields["salary_raw"] == "$45.50 - $60.00 per hour"
    assert fields["apply_url"].endswith("/careers/ApplicationMethods?jobId=12345")
    assert "twigConfig" not in fields["full_content"]
    assert "Hidden City" not in (fields["location"] or "")
