"""
Test the resume section parser, size/format helpers and record constructors.

Run with: python -m pytest jobscout/tests/test_resume.py -v
"""

import uuid
import logging
from datetime import datetime, timezone

from jobscout.core.resume import (
    parse_resume_sections, validate_resume_size, format_resume_size,
    get_resume_format, create_resume, create_resume_with_sections
)
from jobscout.core.schemas import ResumeFormat

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(message)s')
logger = logging.getLogger(__name__)


SAMPLE_RESUME = """# Jane Doe
jane@example.com

## Professional Summary
Backend engineer with 8 years of experience building data platforms.

## Work Experience
Acme Corp - Senior Engineer (2019 - present)
- Led migration of the billing system

## Technical Skills
Python, SQL, Kafka

## Education
BS Computer Science, State University
"""


def fixed_clock():
    return datetime(2024, 5, 1, 12, 30, 0, tzinfo=timezone.utc)


# ============================================================================
# Section Parsing
# ============================================================================

def test_markdown_headings():
    sections = parse_resume_sections("# Summary\nBuilt things.\n# Experience\nDid things.")

    assert sections.summary == "Built things."
    assert sections.experience == "Did things."
    assert sections.skills is None
    assert sections.education is None


def test_label_headings():
    sections = parse_resume_sections("Skills: Go, Rust\nEducation: BS CS")

    assert sections.skills == "Go, Rust"
    assert sections.education == "BS CS"
    assert sections.summary is None
    assert sections.experience is None


def test_summary_synonym():
    sections = parse_resume_sections("# Objective\nGrow.\n")

    assert sections.summary == "Grow."
    assert sections.present() == ["summary"]


def test_full_resume():
    sections = parse_resume_sections(SAMPLE_RESUME)
    logger.info(f"Sections found: {sections.present()}")

    assert sections.summary == "Backend engineer with 8 years of experience building data platforms."
    assert sections.experience.startswith("Acme Corp - Senior Engineer")
    assert sections.experience.endswith("Led migration of the billing system")
    assert sections.skills == "Python, SQL, Kafka"
    assert sections.education == "BS Computer Science, State University"

    # Every section is a verbatim slice of the input
    for name in sections.present():
        assert getattr(sections, name) in SAMPLE_RESUME


def test_no_headings():
    sections = parse_resume_sections("Jane Doe\nPython developer in Berlin\n")

    assert sections.present() == []
    assert sections.dict(exclude_none=True) == {}


def test_empty_content():
    assert parse_resume_sections("").present() == []


def test_heading_without_body_is_blank_not_missing():
    sections = parse_resume_sections("## Skills\n## Education\nMSc Physics")

    assert sections.skills == ""
    assert sections.education == "MSc Physics"
    assert "skills" in sections.dict(exclude_none=True)


def test_case_insensitive():
    sections = parse_resume_sections("## WORK EXPERIENCE\nAcme\n\nEDUCATION:\nMIT")

    assert sections.experience == "Acme"
    assert sections.education == "MIT"


def test_whole_synonyms_only():
    sections = parse_resume_sections("# Aboutness\nnot a summary\n# Profiles\nstill not one")

    assert sections.summary is None


def test_markdown_recognizer_wins_over_label():
    content = "Summary: short version\n\n## Summary\nLong version."
    sections = parse_resume_sections(content)

    assert sections.summary == "Long version."


def test_first_occurrence_used():
    sections = parse_resume_sections("# Skills\nPython\n# Skills\nRust")

    assert sections.skills == "Python"


def test_section_ends_at_any_heading():
    content = "# Experience\nAcme Corp\n## Volunteering\nFood bank\n"
    sections = parse_resume_sections(content)

    # Unknown headings still close the previous section
    assert sections.experience == "Acme Corp"


def test_label_on_heading_line_is_not_a_new_section():
    sections = parse_resume_sections("Skills: Python: expert\nEducation: BS")

    assert sections.skills == "Python: expert"


def test_bare_carriage_return_line_endings():
    content = "# Summary\rBuilt things.\r# Experience\rDid things."
    sections = parse_resume_sections(content)

    assert sections.summary == "Built things."
    assert sections.experience == "Did things."


def test_windows_line_endings():
    content = "Summary:\r\nBackend engineer.\r\n\r\nSkills:\r\nGo, SQL\r\n"
    sections = parse_resume_sections(content)

    assert sections.summary == "Backend engineer."
    assert sections.skills == "Go, SQL"
    assert sections.summary in content


def test_non_ascii_label_does_not_end_section():
    content = "Skills:\nPython\nCompétences: Java\n\nEducation:\nBSc"
    sections = parse_resume_sections(content)

    assert sections.skills == "Python\nCompétences: Java"
    assert sections.education == "BSc"


def test_parse_is_stable_on_reassembled_output():
    first = parse_resume_sections(SAMPLE_RESUME)

    rebuilt = "\n".join(
        f"## {name.title()}\n{getattr(first, name)}" for name in first.present()
    )
    second = parse_resume_sections(rebuilt)

    assert second == first


# ============================================================================
# Size & Format
# ============================================================================

def test_validate_resume_size_limit():
    assert validate_resume_size("a" * 51200) is True
    assert validate_resume_size("a" * 51201) is False
    assert validate_resume_size("") is True


def test_validate_resume_size_counts_bytes():
    # 3 bytes per character in UTF-8
    assert validate_resume_size("€" * 17066) is True
    assert validate_resume_size("€" * 17067) is False


def test_validate_resume_size_custom_limit():
    assert validate_resume_size("abcd", max_size_bytes=4) is True
    assert validate_resume_size("abcde", max_size_bytes=4) is False


def test_format_resume_size():
    assert format_resume_size("a" * 1023) == "1023 B"
    assert format_resume_size("a" * 1024) == "1.0 KB"
    assert format_resume_size("é" * 600) == "1.2 KB"
    assert format_resume_size("") == "0 B"


def test_get_resume_format():
    assert get_resume_format("resume.MD") == ResumeFormat.MARKDOWN
    assert get_resume_format("resume.markdown") == ResumeFormat.MARKDOWN
    assert get_resume_format("resume.v2.md") == ResumeFormat.MARKDOWN
    assert get_resume_format("resume.pdf") == ResumeFormat.TEXT
    assert get_resume_format("resume.txt") == ResumeFormat.TEXT
    assert get_resume_format("resume") == ResumeFormat.TEXT
    assert get_resume_format("md") == ResumeFormat.TEXT


# ============================================================================
# Record Construction
# ============================================================================

def test_create_resume_with_injected_id_and_clock():
    resume = create_resume(
        "Backend CV", "# Skills\nPython", ResumeFormat.MARKDOWN,
        id_factory=lambda: "resume-1", clock=fixed_clock
    )

    assert resume.id == "resume-1"
    assert resume.name == "Backend CV"
    assert resume.content == "# Skills\nPython"
    assert resume.format == ResumeFormat.MARKDOWN
    assert resume.uploaded_at == "2024-05-01T12:30:00.000Z"
    assert resume.sections is None


def test_create_resume_defaults():
    resume = create_resume("CV", "text", "text")

    uuid.UUID(resume.id)
    assert resume.format == ResumeFormat.TEXT
    assert resume.uploaded_at.endswith("Z")


def test_create_resume_with_sections():
    resume = create_resume_with_sections(
        "CV", SAMPLE_RESUME, ResumeFormat.MARKDOWN, clock=fixed_clock
    )

    assert resume.sections == parse_resume_sections(SAMPLE_RESUME)
    assert resume.sections.skills == "Python, SQL, Kafka"

    # Sections are a snapshot; editing content does not re-parse
    resume.content = "# Skills\nRust"
    assert resume.sections.skills == "Python, SQL, Kafka"
