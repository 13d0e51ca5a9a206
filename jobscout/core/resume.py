"""
Resume helpers.

- Section parser: splits free-text resumes (markdown or plain text) into
  summary / experience / skills / education by recognizing headings
- Size and format helpers used at upload time
- Record constructors that stamp an id and upload timestamp

Everything here is pure: no I/O, no shared state.
"""

import re
import logging
from typing import Dict, Optional, Tuple

from jobscout.core.config import get_settings
from jobscout.core.schemas import Resume, ResumeFormat, ResumeSections
from jobscout.core.utils import Clock, IdFactory, byte_length, iso_timestamp, new_id

logger = logging.getLogger(__name__)

MARKDOWN_EXTENSIONS = {"md", "markdown"}


# ============================================================================
# Section Parsing
# ============================================================================

# Parse order matters only for readability of the result; each section is
# resolved against the whole document on its own.
SECTION_SYNONYMS: Dict[str, Tuple[str, ...]] = {
    "summary": ("summary", "professional summary", "objective", "about", "profile"),
    "experience": ("experience", "work experience", "employment", "professional experience"),
    "skills": ("skills", "technical skills", "core competencies", "expertise"),
    "education": ("education", "academic", "qualifications"),
}

# Word characters are ASCII only: "Compétences:" is not a heading
WORD = "[A-Za-z0-9_]"

# "## Anything" or "Word:" at the start of a line ends the current section
NEXT_HEADING = re.compile(rf"^#+\s*{WORD}+|^{WORD}+:", re.MULTILINE)

# Bare CR and the Unicode line/paragraph separators also start a new line.
# Each maps to a single "\n" so offsets into the original text stay valid.
LINE_BREAKS = str.maketrans({"\r": "\n", "\u2028": "\n", "\u2029": "\n"})


def _heading_patterns(synonyms: Tuple[str, ...]) -> Tuple[re.Pattern, ...]:
    """Markdown heading first, then plain "Label:" heading."""
    labels = "|".join(re.escape(s) for s in synonyms)
    flags = re.IGNORECASE | re.MULTILINE
    return (
        re.compile(rf"^#+\s*({labels})(?!{WORD})", flags),
        re.compile(rf"^({labels}):", flags),
    )


SECTION_PATTERNS: Dict[str, Tuple[re.Pattern, ...]] = {
    name: _heading_patterns(synonyms) for name, synonyms in SECTION_SYNONYMS.items()
}


def _extract_section(patterns: Tuple[re.Pattern, ...], text: str, lines: str) -> Optional[str]:
    """Body under the first heading matched by ``patterns``, or None.

    ``lines`` is ``text`` with every line break turned into "\\n"; matching
    runs on it, the body is cut from ``text``.
    """
    for pattern in patterns:
        match = pattern.search(lines)
        if not match:
            continue

        start = match.end()
        next_heading = NEXT_HEADING.search(lines, start)
        end = next_heading.start() if next_heading else len(lines)

        return text[start:end].strip()

    return None


def parse_resume_sections(content: str) -> ResumeSections:
    """
    Parse resume content into its main sections.

    Looks for common section headers, either as markdown headings
    (``## Experience``) or as labels (``Skills:``), and takes everything up
    to the next heading of any kind. Works the same for markdown and plain
    text resumes.

    Args:
        content: Raw resume text

    Returns:
        ResumeSections with a field set for every heading found. Sections
        without a heading stay None; a heading with nothing under it gives "".
    """
    lines = content.translate(LINE_BREAKS)
    found = {
        name: _extract_section(patterns, content, lines)
        for name, patterns in SECTION_PATTERNS.items()
    }
    sections = ResumeSections(**found)
    logger.debug(f"Parsed resume sections: {sections.present()}")
    return sections


# ============================================================================
# Size & Format
# ============================================================================

def validate_resume_size(content: str, max_size_bytes: Optional[int] = None) -> bool:
    """Check resume content fits the upload limit (50KB by default)."""
    limit = max_size_bytes if max_size_bytes is not None else get_settings().resume.max_size_bytes
    return byte_length(content) <= limit


def format_resume_size(content: str) -> str:
    """Human readable size, e.g. "512 B" or "1.5 KB"."""
    size = byte_length(content)

    if size < 1024:
        return f"{size} B"

    return f"{size / 1024:.1f} KB"


def get_resume_format(filename: str) -> ResumeFormat:
    """Infer the resume format from a file name's extension."""
    _, dot, extension = filename.rpartition(".")

    if dot and extension.lower() in MARKDOWN_EXTENSIONS:
        return ResumeFormat.MARKDOWN

    return ResumeFormat.TEXT


# ============================================================================
# Record Construction
# ============================================================================

def create_resume(
    name: str,
    content: str,
    format: ResumeFormat,
    id_factory: Optional[IdFactory] = None,
    clock: Optional[Clock] = None
) -> Resume:
    """
    Create a new Resume with a generated id and upload timestamp.

    Args:
        name: Display name
        content: Resume text (kept verbatim)
        format: Markdown or plain text
        id_factory: Returns a fresh unique id. Defaults to uuid4.
        clock: Returns the current time. Defaults to UTC now.
    """
    return Resume(
        id=(id_factory or new_id)(),
        name=name,
        content=content,
        uploaded_at=iso_timestamp(clock),
        format=ResumeFormat(format),
    )


def create_resume_with_sections(
    name: str,
    content: str,
    format: ResumeFormat,
    id_factory: Optional[IdFactory] = None,
    clock: Optional[Clock] = None
) -> Resume:
    """Create a Resume and parse its sections once.

    Sections are not kept in sync with later content changes; callers that
    edit ``content`` must re-parse.
    """
    resume = create_resume(name, content, format, id_factory=id_factory, clock=clock)
    resume.sections = parse_resume_sections(content)
    return resume
