"""
Rule-based résumé parser.

Raw résumé text is cut into sections by header aliases; each section body is
then handed to a chain of small extractors. Every extractor is a pure function
and the first one that produces something wins, so a résumé that does not
follow the expected conventions yields an emptier record instead of an error.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from resume_models import (
    EducationEntry,
    ExperienceEntry,
    PersonalInfo,
    ProjectEntry,
    ResumeRecord,
)

logger = logging.getLogger(__name__)

SECTION_ALIASES: Dict[str, Tuple[str, ...]] = {
    "skills": ("skills", "technical skills", "core competencies", "key skills"),
    "education": ("education", "academic background", "educational background"),
    "experience": (
        "experience",
        "professional experience",
        "work experience",
        "employment history",
        "work history",
    ),
    "projects": ("projects", "personal projects", "academic projects", "key projects"),
    "certifications": (
        "certifications",
        "certificates",
        "licenses & certifications",
        "licenses and certifications",
    ),
    "summary": ("summary", "professional summary", "profile", "objective", "about me"),
    "references": ("references",),
}

# blank line, then a line of capitals only ("LEADERSHIP", "VOLUNTEER WORK")
CAPS_HEADING_RE = re.compile(r"\n[ \t]*\n[ \t]*[A-Z][A-Z&/ \-]{3,}[ \t]*:?[ \t]*(?=\n|$)")

BULLET_RE = re.compile(r"^\s*[•\-\*▪◦●‣]\s*")
SKILL_CATEGORY_RE = re.compile(r"^([A-Za-z][A-Za-z0-9 &/+\-]{0,40}):\s*(.*)$")
SKILL_SPLIT_RE = re.compile(r"[,|•·;]")
PART_SPLIT_RE = re.compile(r"\s*[|,@•·]\s*|\s+at\s+|\s+[-–—]\s+")
EMPTY_PARENS_RE = re.compile(r"\(\s*\)")

DEGREE_RE = re.compile(
    r"\b(?:bachelor|master|ph\.?\s?d|doctorate|mba|b\.?s|m\.?s|b\.?a|m\.?a)(?:'s|s)?\.?(?![A-Za-z])",
    re.I,
)
DEGREE_SHAPE_RE = re.compile(
    r"^(?P<degree>[^,()\n]+?),\s*(?P<school>[^,()\n]+?)\s*\(\s*GPA:?\s*(?P<gpa>\d+(?:\.\d+)?)\s*\)",
    re.I,
)
SCHOOL_RE = re.compile(r"\b(?:university|college|school|institute|academy)\b", re.I)
# ", MA" closing a line or field is a state, not a degree
STATE_SUFFIX_RE = re.compile(r",[ \t]*[A-Z]{2}(?=[ \t]*(?:$|[|,•·(]))")
STATE_RE = re.compile(r"[A-Z]{2}")
GPA_RE = re.compile(r"\bGPA\s*[:\-]?\s*(\d+(?:\.\d+)?)(?:\s*/\s*\d+(?:\.\d+)?)?", re.I)

_MONTH = r"(?:jan|feb|mar|apr|may|jun|jul|aug|sep|oct|nov|dec)[a-z]*\.?"
_DATE = rf"(?:{_MONTH}\s+)?(?:19|20)\d{{2}}(?!\d)"
DATE_RANGE_RE = re.compile(
    rf"\b{_DATE}(?:\s*(?:-|–|—|to)\s*(?:{_DATE}|(?:present|current|now)\b))?",
    re.I,
)
COMPANY_RE = re.compile(r"\b(?:inc\.?|corp\.?|ltd\.?|llc|company|corporation)(?![A-Za-z])", re.I)

PROJECT_HEAD_RE = re.compile(r"^[ \t]*(?P<name>[^,\n]+?),[ \t]*(?P<duration>[^\n]*?)[ \t]+Link[ \t]*$")
PROJECT_SPLIT_RE = re.compile(r"\n(?=[ \t]*[^,\n]+,[^\n]*[ \t]Link[ \t]*$)", re.M)
TECH_LINE_RE = re.compile(r"^\s*(?:technologies|tech stack|tools|built with)\s*:\s*(.+)$", re.I | re.M)

KNOWN_TECHNOLOGIES = (
    "Python", "JavaScript", "TypeScript", "React", "Angular", "Vue", "Node.js",
    "Express", "Django", "Flask", "FastAPI", "Spring", "Java", "Kotlin", "Swift",
    "C++", "C#", ".NET", "Rust", "SQL", "PostgreSQL", "MySQL", "MongoDB", "Redis",
    "Firebase", "GraphQL", "Docker", "Kubernetes", "AWS", "Azure", "GCP",
    "TensorFlow", "PyTorch", "Pandas", "NumPy", "scikit-learn", "HTML", "CSS",
    "Tailwind", "Next.js", "Git", "Linux",
)

CONTACT_RE = re.compile(
    r"(?P<phone>\+?\(?\d[\d \t().\-]{8,}\d)[ \t]*[|•·◇♦◆/,][ \t]*"
    r"(?P<email>[\w.+\-]+@[\w\-]+(?:\.[\w\-]+)+)"
)
EMAIL_RE = re.compile(r"[\w.+\-]+@[\w\-]+(?:\.[\w\-]+)+")
PHONE_RE = re.compile(r"\+?\(?\d[\d \t().\-]{8,}\d")
NAME_RE = re.compile(r"\A\s*([A-Z][a-zA-Z'.\-]*(?:[ \t]+[A-Z][a-zA-Z'.\-]*){0,2})")
LOCATION_RE = re.compile(r"[◇♦◆][ \t]*([^◇♦◆\n]+?)[ \t]*[◇♦◆]")
LINKEDIN_URL_RE = re.compile(r"linkedin\.com/in/([A-Za-z0-9_\-]+)", re.I)
LINKEDIN_WORD_RE = re.compile(r"\bLinkedIn\b")

Strategy = Callable[[Any], Any]


def first_match(strategies: Iterable[Strategy], source: Any, default=None):
    """Return the first truthy result of ``strategies`` applied to ``source``."""
    for strategy in strategies:
        value = strategy(source)
        if value:
            return value
    return default


# ───────────────────────────────────────── sections ──
def _header_re(aliases: Iterable[str]) -> re.Pattern:
    ordered = sorted({a.lower() for a in aliases}, key=len, reverse=True)
    names = "|".join(re.escape(a).replace(r"\ ", r"[ \t]+") for a in ordered)
    return re.compile(rf"^[ \t]*(?:{names})\b", re.I | re.M)


def find_section(text: str, aliases: Sequence[str]) -> Optional[str]:
    """Body of the section headed by one of ``aliases``, or None when absent."""
    header = _header_re(aliases).search(text)
    if not header:
        return None

    start = header.end()
    own = {a.lower() for a in aliases}
    others = [a for names in SECTION_ALIASES.values() for a in names if a.lower() not in own]

    end = len(text)
    nxt = _header_re(others).search(text, start)
    if nxt:
        end = nxt.start()
    caps = CAPS_HEADING_RE.search(text, start)
    if caps and caps.start() < end:
        end = caps.start()

    body = text[start:end].strip()
    return body.lstrip(":").strip()


def _lines(body: str) -> List[str]:
    return [ln.strip() for ln in body.splitlines() if ln.strip()]


def _strip_bullet(line: str) -> str:
    return BULLET_RE.sub("", line).strip()


def _clean_part(text: str) -> str:
    return text.strip(" \t,|-–—:;")


class _Draft:
    """Mutable entry under construction during a line scan."""

    def __init__(self):
        self.fields: Dict[str, str] = {}
        self.notes: List[str] = []
        self.items: List[str] = []

    def has(self, key: str) -> bool:
        return bool(self.fields.get(key))

    def set_once(self, key: str, value: str) -> bool:
        if value and not self.has(key):
            self.fields[key] = value
            return True
        return False

    def empty(self) -> bool:
        return not (self.fields or self.notes or self.items)

    def description(self) -> Optional[str]:
        return " ".join(self.notes) or None


# ───────────────────────────────────────── skills ──
def extract_skills(body: Optional[str]) -> Tuple[str, ...]:
    if not body:
        return ()
    skills = []
    for line in _lines(body):
        line = _strip_bullet(line)
        category = SKILL_CATEGORY_RE.match(line)
        if category:
            line = category.group(2)
        for token in SKILL_SPLIT_RE.split(line):
            token = _strip_bullet(token)
            if token:
                skills.append(token)
    return tuple(skills)


# ───────────────────────────────────────── education ──
def _structured_education(body: str) -> Tuple[EducationEntry, ...]:
    entries: List[EducationEntry] = []
    draft = _Draft()

    def flush():
        nonlocal draft
        if not draft.empty():
            entries.append(EducationEntry(
                degree=draft.fields.get("degree"),
                school=draft.fields.get("school"),
                year=draft.fields.get("year"),
                gpa=draft.fields.get("gpa"),
                description=draft.description(),
            ))
        draft = _Draft()

    for line in _lines(body):
        shaped = DEGREE_SHAPE_RE.search(line)
        if shaped:
            flush()
            draft.fields.update(
                degree=shaped.group("degree").strip(),
                school=shaped.group("school").strip(),
                gpa=shaped.group("gpa"),
            )
            year = DATE_RANGE_RE.search(line, shaped.end())
            if year:
                draft.fields["year"] = year.group(0)
            continue

        year = DATE_RANGE_RE.search(line)
        gpa = GPA_RE.search(line)
        rest = line
        if gpa:
            rest = rest.replace(gpa.group(0), " ")
        if year:
            rest = rest.replace(year.group(0), " ")
        rest = EMPTY_PARENS_RE.sub(" ", rest)

        if DEGREE_RE.search(STATE_SUFFIX_RE.sub("", line)):
            if draft.has("degree") or (year and draft.has("year")):
                flush()
            parts = [p for p in (_clean_part(p) for p in PART_SPLIT_RE.split(rest)) if p]
            for i, part in enumerate(parts):
                is_state = i > 0 and STATE_RE.fullmatch(part)
                if DEGREE_RE.search(part) and not is_state and draft.set_once("degree", part):
                    continue
                if SCHOOL_RE.search(part) and draft.set_once("school", part):
                    continue
                draft.notes.append(part)
        elif year:
            if draft.has("year"):
                flush()
            remainder = _clean_part(rest)
            if remainder and not (SCHOOL_RE.search(remainder) and draft.set_once("school", remainder)):
                draft.notes.append(remainder)
        else:
            remainder = _clean_part(rest)
            if SCHOOL_RE.search(remainder) and not draft.has("school"):
                school = next(p for p in PART_SPLIT_RE.split(remainder) if SCHOOL_RE.search(p))
                draft.set_once("school", _clean_part(school))
            elif remainder:
                draft.notes.append(_strip_bullet(remainder))

        if year:
            draft.set_once("year", year.group(0))
        if gpa:
            draft.set_once("gpa", gpa.group(1))

    flush()
    if not any(e.degree or e.year for e in entries):
        return ()
    return tuple(entries)


def _education_per_line(body: str) -> Tuple[EducationEntry, ...]:
    return tuple(EducationEntry(degree=line) for line in _lines(body))


def extract_education(body: Optional[str]) -> Tuple[EducationEntry, ...]:
    if not body:
        return ()
    return first_match((_structured_education, _education_per_line), body, ())


# ───────────────────────────────────────── experience ──
def _structured_experience(body: str) -> Tuple[ExperienceEntry, ...]:
    entries: List[ExperienceEntry] = []
    draft = _Draft()

    def flush():
        nonlocal draft
        if not draft.empty():
            entries.append(ExperienceEntry(
                role=draft.fields.get("role"),
                company=draft.fields.get("company"),
                duration=draft.fields.get("duration"),
                achievements=tuple(draft.items),
                description=draft.description(),
            ))
        draft = _Draft()

    def classify(part: str):
        if COMPANY_RE.search(part) and draft.set_once("company", part):
            return
        if len(part) < 50 and draft.set_once("role", part):
            return
        draft.notes.append(part)

    for line in _lines(body):
        if BULLET_RE.match(line):
            item = _strip_bullet(line)
            if item:
                draft.items.append(item)
            continue

        date = DATE_RANGE_RE.search(line)
        if date:
            if draft.has("duration"):
                flush()
            draft.fields["duration"] = date.group(0)
            remainder = line[:date.start()] + " | " + line[date.end():]
            for part in filter(None, (_clean_part(p) for p in PART_SPLIT_RE.split(remainder))):
                classify(part)
            continue

        # a short heading after bullets opens the next job
        if draft.items and (len(line) < 50 or COMPANY_RE.search(line)):
            flush()
        classify(line)

    flush()
    if not any(e.duration for e in entries):
        return ()
    return tuple(entries)


def _experience_per_line(body: str) -> Tuple[ExperienceEntry, ...]:
    return tuple(ExperienceEntry(description=line) for line in _lines(body))


def extract_experience(body: Optional[str]) -> Tuple[ExperienceEntry, ...]:
    if not body:
        return ()
    return first_match((_structured_experience, _experience_per_line), body, ())


# ───────────────────────────────────────── projects ──
def _listed_technologies(chunk: str) -> Tuple[str, ...]:
    listed = TECH_LINE_RE.search(chunk)
    if not listed:
        return ()
    return tuple(t.strip() for t in SKILL_SPLIT_RE.split(listed.group(1)) if t.strip())


def _known_technologies(chunk: str) -> Tuple[str, ...]:
    lowered = chunk.lower()
    return tuple(t for t in KNOWN_TECHNOLOGIES if t.lower() in lowered)


def _project(chunk: str) -> Optional[ProjectEntry]:
    lines = _lines(chunk)
    if not lines:
        return None

    head = PROJECT_HEAD_RE.match(lines[0])
    if head:
        name = head.group("name").strip()
        duration = head.group("duration").strip() or None
        link = "Link"
    else:
        first = _strip_bullet(lines[0])
        date = DATE_RANGE_RE.search(first)
        duration = date.group(0) if date else None
        name = _clean_part(first.replace(duration, " ")) if duration else first
        link = None

    bullets, other = [], []
    for line in lines[1:]:
        if TECH_LINE_RE.match(line):
            continue
        if BULLET_RE.match(line):
            bullets.append(_strip_bullet(line).rstrip("."))
        else:
            other.append(line)
    description = ". ".join(b for b in bullets if b) or " ".join(other)

    return ProjectEntry(
        name=name,
        description=description,
        technologies=first_match((_listed_technologies, _known_technologies), chunk, ()),
        duration=duration,
        link=link,
    )


def extract_projects(body: Optional[str]) -> Tuple[ProjectEntry, ...]:
    if not body:
        return ()
    projects = (_project(chunk) for chunk in PROJECT_SPLIT_RE.split(body))
    return tuple(p for p in projects if p is not None)


# ───────────────────────────────────────── certifications ──
def extract_certifications(body: Optional[str]) -> Tuple[str, ...]:
    if not body:
        return ()
    names = (_strip_bullet(line).split(",", 1)[0].strip() for line in _lines(body))
    return tuple(n for n in names if n)


# ───────────────────────────────────────── personal info ──
_HEADER_WORDS = {a for names in SECTION_ALIASES.values() for a in names}


def _leading_name(text: str) -> Optional[str]:
    m = NAME_RE.match(text)
    if not m:
        return None
    name = m.group(1).strip()
    lowered = name.lower()
    if any(lowered.startswith(h) for h in _HEADER_WORDS):
        return None
    return name


def _digits(value: str) -> int:
    return sum(ch.isdigit() for ch in value)


def _joint_contact(text: str) -> Optional[re.Match]:
    for m in CONTACT_RE.finditer(text):
        if _digits(m.group("phone")) >= 10:
            return m
    return None


def _joint_email(text: str) -> Optional[str]:
    m = _joint_contact(text)
    return m.group("email") if m else None


def _joint_phone(text: str) -> Optional[str]:
    m = _joint_contact(text)
    return m.group("phone").strip() if m else None


def _any_email(text: str) -> Optional[str]:
    m = EMAIL_RE.search(text)
    return m.group(0) if m else None


def _any_phone(text: str) -> Optional[str]:
    for m in PHONE_RE.finditer(text):
        if _digits(m.group(0)) >= 10:
            return m.group(0).strip()
    return None


def _diamond_location(text: str) -> Optional[str]:
    m = LOCATION_RE.search(text)
    return m.group(1).strip() if m else None


def _linkedin_url(text: str) -> Optional[str]:
    m = LINKEDIN_URL_RE.search(text)
    return m.group(1) if m else None


def _linkedin_word(text: str) -> Optional[str]:
    return "LinkedIn" if LINKEDIN_WORD_RE.search(text) else None


def extract_personal_info(text: str, summary: Optional[str] = None) -> PersonalInfo:
    return PersonalInfo(
        name=first_match((_leading_name,), text),
        email=first_match((_joint_email, _any_email), text),
        phone=first_match((_joint_phone, _any_phone), text),
        location=first_match((_diamond_location,), text),
        summary=" ".join(summary.split()) if summary else None,
        linkedin_handle=first_match((_linkedin_url, _linkedin_word), text),
    )


# ───────────────────────────────────────── entry point ──
def parse(text: str) -> ResumeRecord:
    """Parse raw résumé text into a ResumeRecord. Never raises on odd input."""
    text = text or ""
    sections = {
        name: find_section(text, aliases)
        for name, aliases in SECTION_ALIASES.items()
        if name != "references"
    }
    logger.debug(
        "Sections found: %s", ", ".join(n for n, body in sections.items() if body is not None) or "none"
    )
    return ResumeRecord(
        raw_text=text,
        personal_info=extract_personal_info(text, sections["summary"]),
        skills=extract_skills(sections["skills"]),
        education=extract_education(sections["education"]),
        experience=extract_experience(sections["experience"]),
        projects=extract_projects(sections["projects"]),
        certifications=extract_certifications(sections["certifications"]),
    )
