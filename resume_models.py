"""
Structured résumé record produced by the section parser.

Every field is optional: an empty value means the heuristics did not find it.
Records are frozen once parsed.
"""

from __future__ import annotations

from dataclasses import dataclass, field, asdict
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True)
class PersonalInfo:
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    location: Optional[str] = None
    summary: Optional[str] = None
    linkedin_handle: Optional[str] = None


@dataclass(frozen=True)
class EducationEntry:
    degree: Optional[str] = None
    school: Optional[str] = None
    year: Optional[str] = None
    gpa: Optional[str] = None
    description: Optional[str] = None


@dataclass(frozen=True)
class ExperienceEntry:
    role: Optional[str] = None
    company: Optional[str] = None
    duration: Optional[str] = None
    achievements: Tuple[str, ...] = ()
    description: Optional[str] = None

    @property
    def title(self) -> Optional[str]:
        return self.role


@dataclass(frozen=True)
class ProjectEntry:
    name: str = ""
    description: str = ""
    technologies: Tuple[str, ...] = ()
    duration: Optional[str] = None
    link: Optional[str] = None


@dataclass(frozen=True)
class ResumeRecord:
    raw_text: str = ""
    personal_info: PersonalInfo = field(default_factory=PersonalInfo)
    skills: Tuple[str, ...] = ()
    education: Tuple[EducationEntry, ...] = ()
    experience: Tuple[ExperienceEntry, ...] = ()
    projects: Tuple[ProjectEntry, ...] = ()
    certifications: Tuple[str, ...] = ()

    def is_empty(self) -> bool:
        """True when no section produced any entity."""
        return not (
            self.skills or self.education or self.experience
            or self.projects or self.certifications
        )

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data.pop("raw_text")
        return data
