import sys
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from app.normalize.extractors import (  # noqa: E402
    ExtractionContext,
    extract_contact,
    extract_name,
    parse_experience_block,
    run_strategies,
)
from app.normalize.normalize_resume import minimal_resume, parse_resume  # noqa: E402
from app.schemas.normalized import Resume  # noqa: E402
from app.schemas.normalized.resume import PLACEHOLDER_NAME, PLACEHOLDER_SUMMARY  # noqa: E402

SAMPLE_RESUME = """Jane Doe
jane.doe@example.com | (555) 123-4567 | linkedin.com/in/janedoe | github.com/janedoe

Professional Summary
Data analyst with 5 years of experience building dashboards and reports for finance teams across three regions.

Work Experience
Senior Data Analyst
Acme Corp
Jan 2020 - Present
• Built dashboards in PowerBI for the finance team
• Increased sales by 25% at Acme Corp

Data Analyst
Globex Inc
2017 - 2019
- Helped with monthly reports for leadership

Education
B.S. in Computer Science, Stanford University, 2013 - 2017

Skills
Python, SQL, Tableau, Docker, AWS

Projects
Sales Forecaster
Forecasting tool for quarterly revenue planning
Developed the ETL pipeline and model training
Tech Stack: Python, Pandas

Certifications
• AWS Certified Cloud Practitioner
"""


class ResumeExtractionTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.resume = parse_resume(SAMPLE_RESUME)

    def test_name_is_upper_cased(self):
        self.assertEqual(self.resume.name, "JANE DOE")

    def test_contact_fields(self):
        contact = self.resume.contact
        self.assertEqual(contact.email, "jane.doe@example.com")
        self.assertEqual(contact.phone, "(555) 123-4567")
        self.assertEqual(contact.linkedin, "linkedin.com/in/janedoe")
        self.assertEqual(contact.github, "github.com/janedoe")
        self.assertEqual(contact.portfolio, "")

    def test_summary_comes_from_section(self):
        self.assertTrue(self.resume.summary.startswith("Data analyst with 5 years"))
        self.assertLessEqual(len(self.resume.summary), 500)

    def test_experience_blocks(self):
        self.assertEqual(len(self.resume.experience), 2)
        first, second = self.resume.experience
        self.assertEqual(first.title, "Senior Data Analyst")
        self.assertEqual(first.company, "Acme Corp")
        self.assertEqual((first.start_date, first.end_date), ("Jan 2020", "Present"))
        self.assertEqual(
            first.bullets,
            ["Built dashboards in PowerBI for the finance team", "Increased sales by 25% at Acme Corp"],
        )
        self.assertEqual(second.title, "Data Analyst")
        self.assertEqual(second.company, "Globex Inc")
        self.assertEqual((second.start_date, second.end_date), ("2017", "2019"))
        self.assertEqual(second.bullets, ["Helped with monthly reports for leadership"])

    def test_education_entry(self):
        self.assertEqual(len(self.resume.education), 1)
        entry = self.resume.education[0]
        self.assertEqual(entry.degree, "B.S. in Computer Science")
        self.assertEqual(entry.university, "Stanford University")
        self.assertEqual(entry.years, "2013 - 2017")

    def test_skills_are_canonical_and_categorized(self):
        skills = self.resume.skills
        self.assertIn("Python", skills.programming)
        self.assertIn("Docker", skills.tools)
        self.assertIn("SQL", skills.databases)
        self.assertIn("AWS", skills.cloud)
        self.assertIn("Power BI", skills.others)
        self.assertEqual(skills.programming.count("Python"), 1)

    def test_quantified_achievement_is_picked_up(self):
        self.assertIn("Increased sales by 25%", self.resume.achievements)

    def test_project_fields(self):
        self.assertEqual(len(self.resume.projects), 1)
        project = self.resume.projects[0]
        self.assertEqual(project.title, "Sales Forecaster")
        self.assertEqual(project.description, "Forecasting tool for quarterly revenue planning")
        self.assertEqual(project.contribution, "Developed the ETL pipeline and model training")
        self.assertEqual(project.tech_stack, "Python, Pandas")

    def test_certifications(self):
        self.assertEqual(self.resume.certifications, ["AWS Certified Cloud Practitioner"])


class ExperienceBlockTests(unittest.TestCase):
    def test_education_block_is_not_a_job(self):
        block = "Bachelor of Science in Biology\nState College\nGPA 3.8"
        self.assertIsNone(parse_experience_block(block))

    def test_single_line_block_is_rejected(self):
        self.assertIsNone(parse_experience_block("Software Engineer at Initech"))

    def test_education_lines_inside_experience_stay_out(self):
        text = (
            "Experience\n"
            "Bachelor of Science in Biology\n"
            "State College\n"
            "GPA 3.8\n\n"
            "Backend Engineer\n"
            "Initech\n"
            "2019 - 2021\n"
            "• Maintained billing services for enterprise customers\n"
        )
        resume = parse_resume(text)
        self.assertEqual([entry.title for entry in resume.experience], ["Backend Engineer"])
        for entry in resume.experience:
            self.assertNotIn("Bachelor", entry.title)
            self.assertNotIn("Bachelor", entry.company)
            self.assertNotIn("GPA", entry.company)

    def test_missing_dates_use_placeholders(self):
        entry = parse_experience_block("Support Specialist\nHelpdesk Co\n• Answered customer tickets daily")
        self.assertIsNotNone(entry)
        self.assertEqual(entry.start_date, "Start Date")
        self.assertEqual(entry.end_date, "End Date")

    def test_programmer_is_a_job_title(self):
        entry = parse_experience_block("Programmer\nAcme\n• Wrote invoicing scripts in COBOL")
        self.assertEqual((entry.title, entry.company), ("Programmer", "Acme"))


class PlaceholderTests(unittest.TestCase):
    def test_unstructured_text_yields_default_record(self):
        junk = "- - - - - - - - - - - - - - - - - - - - - - - - - - - - - - - -\n\n. . . . . . . ."
        self.assertEqual(parse_resume(junk), Resume())

    def test_parse_is_idempotent_on_placeholders(self):
        junk = "~~~ ~~~ ~~~ ~~~ ~~~ ~~~ ~~~ ~~~ ~~~ ~~~ ~~~ ~~~ ~~~ ~~~ ~~~ ~~~"
        self.assertEqual(parse_resume(junk), parse_resume(junk))

    def test_empty_text_yields_placeholders(self):
        resume = parse_resume("")
        self.assertEqual(resume.name, PLACEHOLDER_NAME)
        self.assertEqual(resume.summary, PLACEHOLDER_SUMMARY)
        self.assertEqual(resume.experience, [])

    def test_minimal_resume_uses_first_line(self):
        resume = minimal_resume("john smith\nsome other text")
        self.assertEqual(resume.name, "JOHN SMITH")
        self.assertTrue(resume.summary.startswith("john smith"))


class BoundedOutputTests(unittest.TestCase):
    def test_lists_are_capped(self):
        jobs = "\n\n".join(
            f"Software Engineer {index}\nCompany {index}\n2010 - 2011\n• Shipped feature number {index}"
            for index in range(15)
        )
        certifications = "\n".join(f"• Cloud Certified Level {index}" for index in range(8))
        text = f"Experience\n{jobs}\n\nCertifications\n{certifications}\n"
        resume = parse_resume(text)
        self.assertEqual(len(resume.experience), 10)
        self.assertLessEqual(len(resume.certifications), 5)
        self.assertLessEqual(len(resume.education), 5)
        self.assertLessEqual(len(resume.projects), 5)
        self.assertLessEqual(len(resume.achievements), 10)

    def test_long_lines_are_cut_for_summary(self):
        text = "Profile\n" + ("word " * 400)
        self.assertLessEqual(len(parse_resume(text).summary), 500)


class StrategyTests(unittest.TestCase):
    def test_failing_strategy_falls_through(self):
        def broken(ctx):
            raise ValueError("boom")

        def working(ctx):
            return "value"

        ctx = ExtractionContext.from_text("text")
        self.assertEqual(run_strategies("field", (broken, working), ctx, "default"), "value")
        self.assertEqual(run_strategies("field", (broken,), ctx, "default"), "default")

    def test_name_and_contact_helpers(self):
        ctx = ExtractionContext.from_text("Email: someone@example.org\nMary Ann Smith\nPortfolio: mary.dev")
        self.assertEqual(extract_name(ctx), "MARY ANN SMITH")
        contact = extract_contact(ctx)
        self.assertEqual(contact.email, "someone@example.org")
        self.assertEqual(contact.portfolio, "mary.dev")

    def test_bare_library_names_are_not_portfolios(self):
        ctx = ExtractionContext.from_text("jane@x.com\nSkills\nC#, ASP.NET, SQL Server, Socket.io")
        self.assertEqual(extract_contact(ctx).portfolio, "")

    def test_portfolio_domain_needs_www_or_scheme(self):
        ctx = ExtractionContext.from_text("jane@x.com | www.janedoe.io\nSkills: Socket.io")
        self.assertEqual(extract_contact(ctx).portfolio, "www.janedoe.io")
        ctx = ExtractionContext.from_text("jane@x.com | https://github.com/jane | https://jane.dev/work")
        self.assertEqual(extract_contact(ctx).portfolio, "https://jane.dev/work")


if __name__ == "__main__":
    unittest.main()
