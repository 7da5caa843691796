import sys
import unittest
from dataclasses import replace
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import httpx  # noqa: E402
from openai import APIConnectionError, AuthenticationError  # noqa: E402

from app.core.config import settings  # noqa: E402
from app.schemas.normalized import Experience, Resume  # noqa: E402
from app.services import resume_llm  # noqa: E402

JOB_DESCRIPTION = "We are hiring a Python Developer with SQL and Docker experience."
LLM_DOCUMENT = (
    "# JANE DOE\n\n"
    "**PROFESSIONAL SUMMARY**\n\n"
    "Python Developer with six years of experience building SQL-backed services and Docker tooling.\n\n"
    "WORK EXPERIENCE\n\n"
    "Backend Engineer — 2019 – Present\n"
    "INITECH\n"
    "• Developed billing services in Python"
)
_REQUEST = httpx.Request("POST", "https://router.huggingface.co/v1/chat/completions")


def _completion(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


def _resume() -> Resume:
    return Resume(
        name="JANE DOE",
        summary="Backend engineer focused on billing systems.",
        experience=[Experience(title="Backend Engineer", company="Initech", bullets=["Built billing services"])],
    )


class ResumeLlmTests(unittest.TestCase):
    def setUp(self):
        enabled = replace(settings, llm_enabled=True, hf_token="hf_test_token", llm_max_retries=2)
        self.settings_patch = patch.object(resume_llm, "settings", enabled)
        self.settings_patch.start()
        self.sleep_patch = patch.object(resume_llm.time, "sleep")
        self.sleep = self.sleep_patch.start()
        self.client = MagicMock()
        self.client_patch = patch.object(resume_llm, "_client", return_value=self.client)
        self.client_patch.start()

    def tearDown(self):
        self.client_patch.stop()
        self.sleep_patch.stop()
        self.settings_patch.stop()

    def test_success_returns_cleaned_document(self):
        self.client.chat.completions.create.return_value = _completion(LLM_DOCUMENT)
        document = resume_llm.transform_with_llm(_resume(), JOB_DESCRIPTION)
        self.assertIsNotNone(document)
        self.assertTrue(document.startswith("JANE DOE"))
        self.assertNotIn("**", document)
        self.assertIn("PROFESSIONAL SUMMARY", document)
        self.assertEqual(self.client.chat.completions.create.call_count, 1)

    def test_prompt_carries_resume_and_job_description(self):
        self.client.chat.completions.create.return_value = _completion(LLM_DOCUMENT)
        resume_llm.transform_with_llm(_resume(), JOB_DESCRIPTION)
        kwargs = self.client.chat.completions.create.call_args.kwargs
        prompt = kwargs["messages"][0]["content"]
        self.assertIn("NAME: JANE DOE", prompt)
        self.assertIn("Backend Engineer — Initech", prompt)
        self.assertIn(JOB_DESCRIPTION, prompt)
        self.assertEqual(kwargs["model"], resume_llm.settings.llm_model)

    def test_authentication_error_is_not_retried(self):
        self.client.chat.completions.create.side_effect = AuthenticationError(
            "invalid token",
            response=httpx.Response(401, request=_REQUEST),
            body=None,
        )
        self.assertIsNone(resume_llm.transform_with_llm(_resume(), JOB_DESCRIPTION))
        self.assertEqual(self.client.chat.completions.create.call_count, 1)
        self.sleep.assert_not_called()

    def test_network_errors_are_retried_with_backoff(self):
        self.client.chat.completions.create.side_effect = [
            APIConnectionError(request=_REQUEST),
            APIConnectionError(request=_REQUEST),
            _completion(LLM_DOCUMENT),
        ]
        document = resume_llm.transform_with_llm(_resume(), JOB_DESCRIPTION)
        self.assertIsNotNone(document)
        self.assertEqual(self.client.chat.completions.create.call_count, 3)
        self.assertEqual([call.args[0] for call in self.sleep.call_args_list], [1.0, 2.0])

    def test_network_errors_exhaust_retries(self):
        self.client.chat.completions.create.side_effect = APIConnectionError(request=_REQUEST)
        self.assertIsNone(resume_llm.transform_with_llm(_resume(), JOB_DESCRIPTION))
        self.assertEqual(self.client.chat.completions.create.call_count, 3)

    def test_short_response_is_rejected(self):
        self.client.chat.completions.create.return_value = _completion("```\nJANE DOE\n```\nToo short.")
        self.assertIsNone(resume_llm.transform_with_llm(_resume(), JOB_DESCRIPTION))

    def test_empty_choices_are_rejected(self):
        self.client.chat.completions.create.return_value = SimpleNamespace(choices=[])
        self.assertIsNone(resume_llm.transform_with_llm(_resume(), JOB_DESCRIPTION))

    def test_unexpected_errors_fall_back(self):
        self.client.chat.completions.create.side_effect = KeyError("choices")
        self.assertIsNone(resume_llm.transform_with_llm(_resume(), JOB_DESCRIPTION))

    def test_short_job_description_skips_the_call(self):
        self.assertIsNone(resume_llm.transform_with_llm(_resume(), "too short"))
        self.client.chat.completions.create.assert_not_called()


class ResumeLlmConfigTests(unittest.TestCase):
    def test_disabled_without_usable_token(self):
        for token in (None, "", "your_hf_token_here", "changeme"):
            with patch.object(resume_llm, "settings", replace(settings, llm_enabled=True, hf_token=token)):
                self.assertFalse(resume_llm.resume_llm_enabled())
                self.assertIsNone(resume_llm.transform_with_llm(_resume(), JOB_DESCRIPTION))

    def test_disabled_by_flag(self):
        with patch.object(resume_llm, "settings", replace(settings, llm_enabled=False, hf_token="hf_real")):
            self.assertFalse(resume_llm.resume_llm_enabled())

    def test_long_job_description_is_cut_in_prompt(self):
        prompt = resume_llm.build_prompt(_resume(), "x" * 20_000)
        self.assertIn("x" * 15_000 + "...", prompt)
        self.assertNotIn("x" * 15_001, prompt)

    def test_clean_response_strips_markdown(self):
        cleaned = resume_llm.clean_response(LLM_DOCUMENT)
        self.assertTrue(cleaned.startswith("JANE DOE"))
        self.assertIn("\nPROFESSIONAL SUMMARY\n", cleaned)

    def test_clean_response_raises_with_code(self):
        with self.assertRaises(resume_llm.LLMAdapterError) as raised:
            resume_llm.clean_response("tiny")
        self.assertEqual(raised.exception.code, "llm_short_response")


if __name__ == "__main__":
    unittest.main()
