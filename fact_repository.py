"""
The candidate's facts: the current résumé record plus built-in defaults.

The defaults let the candidate answer before any résumé is uploaded and fill
in whatever the parser could not find.
"""

from __future__ import annotations

import re
import threading
from dataclasses import dataclass
from typing import Optional, Tuple

from resume_models import EducationEntry, ExperienceEntry, ResumeRecord
from section_parser import first_match

DEFAULT_SKILLS: Tuple[str, ...] = (
    "JavaScript",
    "TypeScript",
    "React",
    "Node.js",
    "Python",
    "SQL",
    "Git",
    "Problem Solving",
    "Team Collaboration",
)

DEFAULT_EXPERIENCE: Tuple[ExperienceEntry, ...] = (
    ExperienceEntry(
        role="Software Developer",
        company="Tech Solutions Inc.",
        duration="2021-Present",
        achievements=(
            "Built and maintained customer-facing web applications with React and Node.js",
            "Cut page load times by 40% through code splitting and caching",
            "Mentored two junior developers through code reviews and pairing",
        ),
    ),
    ExperienceEntry(
        role="Junior Developer",
        company="Digital Agency LLC",
        duration="2019-2021",
        achievements=(
            "Delivered responsive websites for more than a dozen clients",
            "Introduced automated testing to the front-end build",
        ),
    ),
)

DEFAULT_EDUCATION: Tuple[EducationEntry, ...] = (
    EducationEntry(
        degree="Bachelor of Science in Computer Science",
        school="State University",
        year="2015-2019",
    ),
)


@dataclass(frozen=True)
class ResumeDetails:
    """Facts pulled from the raw résumé text for the answer prompt."""
    name: str
    location: str
    institution: str
    personal_background: str
    projects: Tuple[str, ...] = ()
    certifications: Tuple[str, ...] = ()


DEFAULT_DETAILS = ResumeDetails(
    name="Alex Johnson",
    location="San Francisco, CA",
    institution="State University",
    personal_background=(
        "I grew up in a close family that valued curiosity and hard work, "
        "and they are still the people who keep me grounded."
    ),
)

NAME_LINE_RE = re.compile(r"^[ \t]*([A-Z][a-z]+(?:[ \t]+[A-Z][a-z]+){1,2})[ \t]*$", re.M)
# a "City, ST" line of its own, or one field of a delimited contact line
CITY_STATE_RE = re.compile(
    r"(?:^|[|•·])[ \t]*([A-Z][a-zA-Z]+(?:[ \t][A-Z][a-zA-Z]+)*,[ \t]*[A-Z]{2})[ \t]*(?=$|[|•·])", re.M
)
INSTITUTION_RE = re.compile(
    r"((?:[A-Z][\w.&'\-]*[ \t]+)*(?:University|College|Institute|School)"
    r"(?:[ \t]+of(?:[ \t]+[A-Z][\w.&'\-]*)+)?)"
)
BACKGROUND_RE = re.compile(r"([^.\n]*\b(?:family|hobbies|interests|volunteer\w*)\b[^.\n]*\.?)", re.I)
PROJECT_LINE_RE = re.compile(r"^[ \t]*([^,\n]+),[^\n]*[ \t]Link[ \t]*$", re.M)
CERTIFICATION_LINE_RE = re.compile(r"^[ \t]*([^,\n]*\bCertifi(?:ed|cate|cation)\b[^,\n]*)", re.M)


# secondary scans: each takes the record and returns a value or None
def _record_name(record: ResumeRecord) -> Optional[str]:
    return record.personal_info.name


def _scan_name(record: ResumeRecord) -> Optional[str]:
    m = NAME_LINE_RE.search(record.raw_text)
    return m.group(1) if m else None


def _record_location(record: ResumeRecord) -> Optional[str]:
    return record.personal_info.location


def _scan_location(record: ResumeRecord) -> Optional[str]:
    m = CITY_STATE_RE.search(record.raw_text)
    return m.group(1) if m else None


def _record_institution(record: ResumeRecord) -> Optional[str]:
    return next((e.school for e in record.education if e.school), None)


def _scan_institution(record: ResumeRecord) -> Optional[str]:
    m = INSTITUTION_RE.search(record.raw_text)
    return m.group(1).strip() if m else None


def _scan_background(record: ResumeRecord) -> Optional[str]:
    m = BACKGROUND_RE.search(record.raw_text)
    return m.group(1).strip() if m else None


def _record_projects(record: ResumeRecord) -> Tuple[str, ...]:
    summaries = []
    for project in record.projects:
        if not project.name:
            continue
        if project.technologies:
            summaries.append(f"{project.name} ({', '.join(project.technologies)})")
        else:
            summaries.append(project.name)
    return tuple(summaries)


def _scan_projects(record: ResumeRecord) -> Tuple[str, ...]:
    return tuple(m.strip() for m in PROJECT_LINE_RE.findall(record.raw_text))


def _record_certifications(record: ResumeRecord) -> Tuple[str, ...]:
    return record.certifications


def _scan_certifications(record: ResumeRecord) -> Tuple[str, ...]:
    return tuple(m.strip() for m in CERTIFICATION_LINE_RE.findall(record.raw_text))


class FactRepository:
    """Owns the single current ResumeRecord; replacing it is an atomic swap."""

    def __init__(self, record: Optional[ResumeRecord] = None):
        self._lock = threading.Lock()
        self._record = record

    @property
    def record(self) -> Optional[ResumeRecord]:
        with self._lock:
            return self._record

    def replace(self, record: Optional[ResumeRecord]) -> None:
        with self._lock:
            self._record = record

    def skills_or_fallback(self) -> Tuple[str, ...]:
        record = self.record
        return record.skills if record and record.skills else DEFAULT_SKILLS

    def experience_or_fallback(self) -> Tuple[ExperienceEntry, ...]:
        record = self.record
        return record.experience if record and record.experience else DEFAULT_EXPERIENCE

    def education_or_fallback(self) -> Tuple[EducationEntry, ...]:
        record = self.record
        return record.education if record and record.education else DEFAULT_EDUCATION

    def resume_details(self) -> ResumeDetails:
        record = self.record
        if record is None:
            return DEFAULT_DETAILS
        return ResumeDetails(
            name=first_match((_record_name, _scan_name), record, DEFAULT_DETAILS.name),
            location=first_match((_record_location, _scan_location), record, DEFAULT_DETAILS.location),
            institution=first_match(
                (_record_institution, _scan_institution), record, DEFAULT_DETAILS.institution
            ),
            personal_background=first_match(
                (_scan_background,), record, DEFAULT_DETAILS.personal_background
            ),
            projects=first_match((_record_projects, _scan_projects), record, ()),
            certifications=first_match((_record_certifications, _scan_certifications), record, ()),
        )
