import sys
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from app.normalize.normalize_resume import parse_resume  # noqa: E402
from app.schemas.normalized import Contact, Education, Experience, Project, Resume, SkillSet  # noqa: E402
from app.services.formatter import (  # noqa: E402
    SECTION_ORDER,
    format_contact_line,
    format_resume,
    link_url,
)


def _resume() -> Resume:
    return Resume(
        name="JANE DOE",
        contact=Contact(email="jane@example.com", phone="555-123-4567", linkedin="linkedin.com/in/jane"),
        summary="Data analyst with five years of experience turning finance data into decisions.",
        experience=[
            Experience(
                title="Data Analyst",
                company="Acme Corp",
                start_date="Jan 2020",
                end_date="Present",
                bullets=["Built dashboards for finance", "ok"],
            ),
            Experience(),
            Experience(title="Technical Skills", company="Python, SQL"),
        ],
        education=[
            Education(degree="B.S. in Computer Science", university="Stanford University", years="2013 - 2017"),
            Education(degree="B.S. in Computer Science", university="Stanford University", years="2013 - 2017"),
            Education(),
        ],
        skills=SkillSet(programming=["Python"], databases=["SQL"]),
        achievements=[f"Achievement number {index}" for index in range(6)],
        projects=[
            Project(title="Forecaster", description="Revenue model", tech_stack="Python, Pandas"),
            Project(),
        ],
        certifications=["AWS Certified Cloud Practitioner"],
    )


class FormatterTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.document = format_resume(_resume())
        cls.lines = cls.document.split("\n")

    def test_name_and_contact_lead_the_document(self):
        self.assertEqual(self.lines[0], "JANE DOE")
        self.assertEqual(self.lines[1], "")
        self.assertEqual(
            self.lines[2],
            "jane@example.com | 555-123-4567 | LinkedIn||URLS:LinkedIn::https://linkedin.com/in/jane",
        )

    def test_sections_follow_fixed_order(self):
        present = [line for line in self.lines if line in SECTION_ORDER]
        self.assertEqual(present, [header for header in SECTION_ORDER if header in present])
        self.assertEqual(
            present,
            [
                "PROFESSIONAL SUMMARY",
                "WORK EXPERIENCE",
                "PROJECTS",
                "EDUCATION",
                "SKILLS",
                "ACHIEVEMENTS",
                "CERTIFICATIONS",
                "LINKS",
            ],
        )

    def test_experience_block_shape(self):
        start = self.lines.index("Data Analyst — Jan 2020 – Present")
        self.assertEqual(self.lines[start + 1], "ACME CORP")
        self.assertEqual(self.lines[start + 2], "• Built dashboards for finance")
        self.assertNotIn("• ok", self.lines)

    def test_placeholder_entries_are_skipped(self):
        self.assertNotIn("Position", self.document)
        self.assertNotIn("COMPANY", self.lines)
        self.assertNotIn("Technical Skills", self.document)
        self.assertNotIn("Project Title", self.document)
        self.assertNotIn("Degree", self.lines)

    def test_education_is_deduplicated(self):
        self.assertEqual(self.lines.count("B.S. in Computer Science — 2013 – 2017"), 1)
        self.assertEqual(self.lines.count("Stanford University"), 1)

    def test_project_lines(self):
        start = self.lines.index("Forecaster")
        self.assertEqual(self.lines[start + 1], "• Revenue model")
        self.assertEqual(self.lines[start + 2], "• Tech Stack: Python, Pandas")

    def test_skills_and_achievements(self):
        self.assertIn("• Programming: Python", self.lines)
        self.assertIn("• Databases: SQL", self.lines)
        achievements = [line for line in self.lines if line.startswith("• Achievement number")]
        self.assertEqual(len(achievements), 4)

    def test_links_section(self):
        self.assertEqual(self.lines[-1], "LinkedIn: linkedin.com/in/jane")

    def test_no_runs_of_blank_lines(self):
        self.assertNotIn("\n\n\n", self.document)
        self.assertEqual(self.document, self.document.strip())

    def test_empty_sections_are_omitted(self):
        document = format_resume(Resume(name="JOHN ROE", summary="Short summary for the record."))
        self.assertEqual(document, "JOHN ROE\n\nPROFESSIONAL SUMMARY\n\nShort summary for the record.")


class ContactLineTests(unittest.TestCase):
    def test_link_url_adds_scheme_once(self):
        self.assertEqual(link_url("github.com/jane"), "https://github.com/jane")
        self.assertEqual(link_url("http://jane.dev"), "http://jane.dev")
        self.assertEqual(link_url("  "), "")

    def test_contact_line_without_links(self):
        self.assertEqual(format_contact_line(Contact(email="a@b.co")), "a@b.co")
        self.assertEqual(format_contact_line(Contact()), "")

    def test_contact_line_lists_every_link_label(self):
        line = format_contact_line(Contact(portfolio="jane.dev", github="github.com/jane"))
        self.assertEqual(
            line,
            "Portfolio | GitHub||URLS:Portfolio::https://jane.dev||GitHub::https://github.com/jane",
        )


class RoundTripTests(unittest.TestCase):
    def test_reparsing_keeps_entry_counts(self):
        original = _resume()
        reparsed = parse_resume(format_resume(original))
        self.assertEqual(reparsed.name, original.name)
        self.assertEqual(reparsed.contact.email, original.contact.email)
        self.assertEqual(reparsed.contact.linkedin, original.contact.linkedin)
        self.assertEqual(len(reparsed.experience), 1)
        self.assertEqual(reparsed.experience[0].title, "Data Analyst")
        self.assertEqual(len(reparsed.education), 1)
        self.assertEqual(reparsed.education[0].university, "Stanford University")
        self.assertEqual(reparsed.certifications, original.certifications)
        self.assertIn("Python", reparsed.skills.programming)

    def test_reparsing_keeps_section_order_and_cardinality(self):
        original = _full_resume()
        document = format_resume(original)
        reparsed = parse_resume(document)

        self.assertEqual(len(reparsed.experience), 3)
        self.assertEqual(
            [entry.title for entry in reparsed.experience],
            ["Senior Data Analyst", "Data Analyst", "Junior Analyst"],
        )
        self.assertEqual(len(reparsed.education), 2)
        self.assertEqual(len(reparsed.projects), 2)
        self.assertEqual(len(reparsed.achievements), len(original.achievements))
        self.assertEqual(reparsed.certifications, original.certifications)

        self.assertEqual(_headers(document), list(SECTION_ORDER))
        self.assertEqual(_headers(format_resume(reparsed)), list(SECTION_ORDER))

    def test_quantified_bullets_are_also_read_as_achievements(self):
        original = _full_resume()
        original.experience[0].bullets.append("Reduced reporting time by 30%")
        reparsed = parse_resume(format_resume(original))
        self.assertEqual(len(reparsed.experience), 3)
        self.assertEqual(len(reparsed.achievements), len(original.achievements) + 1)
        self.assertEqual(reparsed.achievements[-1], "Reduced reporting time by 30%")


def _headers(document: str) -> list[str]:
    return [line for line in document.split("\n") if line in SECTION_ORDER]


def _full_resume() -> Resume:
    return Resume(
        name="JANE DOE",
        contact=Contact(email="jane@example.com", linkedin="linkedin.com/in/jane"),
        summary="Data analyst with five years of experience turning finance data into decisions.",
        experience=[
            Experience(
                title="Senior Data Analyst",
                company="Acme Corp",
                start_date="Jan 2020",
                end_date="Present",
                bullets=["Built dashboards for finance teams"],
            ),
            Experience(
                title="Data Analyst",
                company="Globex Inc",
                start_date="2017",
                end_date="2019",
                bullets=["Maintained weekly revenue reports"],
            ),
            Experience(
                title="Junior Analyst",
                company="Initech",
                start_date="2015",
                end_date="2017",
                bullets=["Cleaned ledger exports every month"],
            ),
        ],
        education=[
            Education(degree="B.S. in Computer Science", university="Stanford University", years="2013 - 2017"),
            Education(degree="M.S. in Statistics", university="Columbia University", years="2017 - 2019"),
        ],
        skills=SkillSet(programming=["Python"], databases=["SQL"]),
        achievements=["Won the regional analytics award", "Mentored four junior analysts"],
        projects=[
            Project(title="Forecaster", description="Revenue forecasting model", tech_stack="Python, Pandas"),
            Project(title="Ledger Sync", description="Nightly ledger reconciliation job", tech_stack="SQL, Airflow"),
        ],
        certifications=["AWS Certified Cloud Practitioner"],
    )


if __name__ == "__main__":
    unittest.main()
