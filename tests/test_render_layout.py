import sys
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from app.render.layout import (  # noqa: E402
    LineContext,
    LineKind,
    Pending,
    advance,
    classify,
    classify_document,
    is_date_line,
    normalize_header,
    split_entry,
)

DOCUMENT = """JANE DOE

jane@example.com | 555-123-4567 | LinkedIn||URLS:LinkedIn::https://linkedin.com/in/jane

PROFESSIONAL SUMMARY

Data analyst with five years of experience — focused on finance.

WORK EXPERIENCE

Data Analyst — Jan 2020 – Present
ACME CORP
• Built dashboards — cut reporting time in half

Staff Analyst
Globex
Mar 2017 - Dec 2019

EDUCATION

B.S. in Computer Science — 2013 – 2017
Stanford University

SKILLS

• Programming: Python

LINKS

LinkedIn: linkedin.com/in/jane"""


class ClassifyDocumentTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.kinds = {line: kind for line, kind in classify_document(DOCUMENT) if line}

    def test_header_block(self):
        self.assertIs(self.kinds["JANE DOE"], LineKind.NAME)
        self.assertIs(
            self.kinds["jane@example.com | 555-123-4567 | LinkedIn||URLS:LinkedIn::https://linkedin.com/in/jane"],
            LineKind.CONTACT,
        )

    def test_section_headers(self):
        for header in ("PROFESSIONAL SUMMARY", "WORK EXPERIENCE", "EDUCATION", "SKILLS", "LINKS"):
            self.assertIs(self.kinds[header], LineKind.SECTION_HEADER)

    def test_summary_dash_stays_paragraph(self):
        self.assertIs(
            self.kinds["Data analyst with five years of experience — focused on finance."],
            LineKind.PARAGRAPH,
        )

    def test_experience_lines(self):
        self.assertIs(self.kinds["Data Analyst — Jan 2020 – Present"], LineKind.ENTRY)
        self.assertIs(self.kinds["ACME CORP"], LineKind.ORGANIZATION)
        self.assertIs(self.kinds["• Built dashboards — cut reporting time in half"], LineKind.BULLET)
        self.assertIs(self.kinds["Staff Analyst"], LineKind.ORGANIZATION)
        self.assertIs(self.kinds["Mar 2017 - Dec 2019"], LineKind.DATE)

    def test_education_lines(self):
        self.assertIs(self.kinds["B.S. in Computer Science — 2013 – 2017"], LineKind.ENTRY)
        self.assertIs(self.kinds["Stanford University"], LineKind.ORGANIZATION)

    def test_skills_and_links(self):
        self.assertIs(self.kinds["• Programming: Python"], LineKind.BULLET)
        self.assertIs(self.kinds["LinkedIn: linkedin.com/in/jane"], LineKind.CONTACT)


class ClassifyRuleTests(unittest.TestCase):
    def test_blank_line(self):
        self.assertIs(classify("   ", LineContext()), LineKind.BLANK)

    def test_first_line_that_looks_like_contact_is_not_a_name(self):
        self.assertIs(classify("jane@example.com", LineContext()), LineKind.CONTACT)

    def test_long_digit_runs_are_not_names(self):
        self.assertIsNot(classify("Call 5551234567 today", LineContext()), LineKind.NAME)

    def test_pipes_inside_experience_are_not_contact(self):
        ctx = LineContext(section="WORK EXPERIENCE", seen_content=True)
        self.assertIs(classify("| Acme Corp | 2020 - 2021 |", ctx), LineKind.TABLE_ROW)

    def test_bare_date_range_is_a_date_not_an_entry(self):
        ctx = LineContext(section="EDUCATION", seen_content=True)
        self.assertIs(classify("2014–2018", ctx), LineKind.DATE)

    def test_markdown_headers(self):
        self.assertEqual(normalize_header("## Education"), "EDUCATION")
        self.assertEqual(normalize_header("## work experience"), "WORK EXPERIENCE")
        self.assertIsNone(normalize_header("## Hobbies"))
        ctx = LineContext(seen_content=True)
        self.assertIs(classify("## Experience", ctx), LineKind.SECTION_HEADER)

    def test_paragraph_outside_entries(self):
        ctx = LineContext(section="SKILLS", seen_content=True, after_break=True)
        self.assertIs(classify("Python, SQL, Docker", ctx), LineKind.PARAGRAPH)


class AdvanceTests(unittest.TestCase):
    def test_dated_entry_sets_pending_for_section(self):
        ctx = LineContext(section="WORK EXPERIENCE", seen_content=True)
        line = "Engineer — 2019 – 2021"
        after = advance(ctx, line, classify(line, ctx))
        self.assertIs(after.pending, Pending.EXPECTING_COMPANY_DATE)

        ctx = LineContext(section="EDUCATION", seen_content=True)
        line = "B.Sc — 2014 – 2018"
        after = advance(ctx, line, classify(line, ctx))
        self.assertIs(after.pending, Pending.EXPECTING_UNIVERSITY_DATE)

    def test_undated_entry_clears_pending(self):
        ctx = LineContext(section="WORK EXPERIENCE", seen_content=True, pending=Pending.EXPECTING_COMPANY_DATE)
        after = advance(ctx, "Engineer — Platform team", LineKind.ENTRY)
        self.assertIs(after.pending, Pending.IDLE)

    def test_organization_consumes_pending(self):
        ctx = LineContext(section="WORK EXPERIENCE", seen_content=True, pending=Pending.EXPECTING_COMPANY_DATE)
        self.assertIs(classify("Initech", ctx), LineKind.ORGANIZATION)
        self.assertIs(advance(ctx, "Initech", LineKind.ORGANIZATION).pending, Pending.IDLE)

    def test_section_header_resets_state(self):
        ctx = LineContext(section="WORK EXPERIENCE", seen_content=True, pending=Pending.EXPECTING_COMPANY_DATE)
        after = advance(ctx, "EDUCATION", LineKind.SECTION_HEADER)
        self.assertEqual(after.section, "EDUCATION")
        self.assertIs(after.pending, Pending.IDLE)
        self.assertTrue(after.after_break)

    def test_blank_marks_break(self):
        self.assertTrue(advance(LineContext(seen_content=True), "", LineKind.BLANK).after_break)


class HelperTests(unittest.TestCase):
    def test_is_date_line(self):
        self.assertTrue(is_date_line("Jan 2020 – Present"))
        self.assertTrue(is_date_line("Berlin | 2019"))
        self.assertFalse(is_date_line("| Acme | 2019 |"))
        self.assertFalse(is_date_line("Senior Engineer"))

    def test_split_entry(self):
        self.assertEqual(split_entry("Engineer — 2019 – 2021"), ("Engineer", "2019 – 2021"))
        self.assertIsNone(split_entry("Engineer"))
        self.assertIsNone(split_entry("— 2019"))


if __name__ == "__main__":
    unittest.main()
