"""
What the candidate knows and how it talks.

Builds the fact block handed to the generation model, reshapes the model's
reply into spoken-style paragraphs, and holds the canned answers used when
the model cannot be reached.
"""

from __future__ import annotations

import re
from typing import List

from fact_repository import FactRepository, ResumeDetails

READY_MESSAGE = (
    "I'm ready to answer your questions. Go ahead and ask me anything about "
    "my experience, skills, or background."
)

PROJECT_QUESTION_RE = re.compile(
    r"\bprojects?\b|\bwhat\s+(?:have|did)\s+you\s+(?:made|make|built|build|developed|develop|created|create)\b",
    re.I,
)
SENTENCE_END_RE = re.compile(r"(?<=[.!?])\s+")

STRENGTHS_ANSWER = (
    "I'd say my biggest strength is that I'm a persistent problem solver. When "
    "something breaks I like to dig in until I understand the root cause, not "
    "just the symptom. I'm also a clear communicator, so I can explain technical "
    "trade-offs to teammates and stakeholders who aren't deep in the code."
)

WEAKNESS_ANSWER = (
    "Honestly, I sometimes spend too long polishing details before sharing my "
    "work. I've been improving on that by setting myself checkpoints and getting "
    "feedback earlier, which has made me faster and has improved the final result too."
)

CHALLENGE_ANSWER = (
    "One of the hardest situations I've faced was a release where a critical "
    "feature started failing just days before launch. I broke the problem down, "
    "reproduced it in isolation, and worked with the team to ship a fix on time. "
    "It taught me to stay calm under pressure and to communicate early when risks show up."
)

GENERIC_ANSWER = (
    "That's a good question. My approach is usually to break a problem into "
    "smaller pieces, figure out what really matters to the people involved, and "
    "then work through it step by step. I like collaborating with the team along "
    "the way, because the best solutions usually come from combining perspectives."
)

BIO_TEMPLATE = (
    "Sure! I'm {name}, based in {location}. I studied at {institution}, and since "
    "then I've been building software and growing my skills in areas like {skills}. "
    "I enjoy solving real problems for users and working closely with my team."
)


def is_project_question(question: str) -> bool:
    return bool(PROJECT_QUESTION_RE.search(question or ""))


def _experience_lines(repository: FactRepository) -> List[str]:
    lines = []
    for job in repository.experience_or_fallback():
        head = job.role or job.description or "Role"
        if job.company:
            head += f" at {job.company}"
        if job.duration:
            head += f" ({job.duration})"
        lines.append(f"- {head}")
        for achievement in job.achievements:
            lines.append(f"  • {achievement}")
    return lines


def _education_lines(repository: FactRepository) -> List[str]:
    lines = []
    for entry in repository.education_or_fallback():
        parts = [p for p in (entry.degree, entry.school) if p]
        line = ", ".join(parts) or (entry.description or "")
        if entry.year:
            line += f" ({entry.year})"
        if entry.gpa:
            line += f", GPA {entry.gpa}"
        lines.append(f"- {line}")
    return lines


def _project_list(repository: FactRepository, details: ResumeDetails) -> List[str]:
    record = repository.record
    projects = record.projects if record else ()
    if not projects:
        return [f"{i}. {summary}" for i, summary in enumerate(details.projects, 1)]

    lines = []
    for i, project in enumerate(projects, 1):
        line = f"{i}. {project.name or 'Untitled project'}"
        if project.description:
            line += f": {project.description}"
        if project.technologies:
            line += f" (Technologies: {', '.join(project.technologies)})"
        lines.append(line)
    return lines


def build_context(repository: FactRepository, question: str) -> str:
    """Fact block describing the candidate, tailored to ``question``."""
    details = repository.resume_details()
    sections = [
        "Skills: " + ", ".join(repository.skills_or_fallback()),
        "Experience:\n" + "\n".join(_experience_lines(repository)),
        "Education:\n" + "\n".join(_education_lines(repository)),
        "\n".join([
            "Extracted resume details:",
            f"- Name: {details.name}",
            f"- Location: {details.location}",
            f"- Education institution: {details.institution}",
            f"- Personal background: {details.personal_background}",
            "- Projects: " + ("; ".join(details.projects) or "none listed"),
            "- Certifications: " + ("; ".join(details.certifications) or "none listed"),
        ]),
    ]

    if is_project_question(question):
        projects = _project_list(repository, details)
        if projects:
            sections.append(
                "Projects on the resume (discuss ONLY these, do not invent others):\n"
                + "\n".join(projects)
            )
        else:
            sections.append(
                "No projects are listed on the resume. Do not invent any; talk about "
                "work from the experience section instead."
            )

    return "\n\n".join(sections)


def format_paragraphs(text: str) -> str:
    """Break a single long block into paragraphs of two sentences."""
    text = text.strip()
    if "\n\n" in text or len(text) <= 100:
        return text

    sentences = [s for s in SENTENCE_END_RE.split(text) if s]
    pieces = []
    for i, sentence in enumerate(sentences, 1):
        pieces.append(sentence)
        if i < len(sentences):
            pieces.append("\n\n" if i % 2 == 0 else " ")
    return "".join(pieces)


def fallback_answer(question: str, details: ResumeDetails, skills=()) -> str:
    """Canned answer picked by keywords in ``question``."""
    lowered = (question or "").lower()
    if "yourself" in lowered or "introduce" in lowered:
        return BIO_TEMPLATE.format(
            name=details.name,
            location=details.location,
            institution=details.institution,
            skills=", ".join(list(skills)[:3]) or "software development",
        )
    if "strength" in lowered:
        return STRENGTHS_ANSWER
    if "weakness" in lowered or "improve" in lowered:
        return WEAKNESS_ANSWER
    if "challenge" in lowered or "difficult" in lowered:
        return CHALLENGE_ANSWER
    return GENERIC_ANSWER
