from fact_repository import (
    DEFAULT_DETAILS,
    DEFAULT_EDUCATION,
    DEFAULT_EXPERIENCE,
    DEFAULT_SKILLS,
    FactRepository,
)
from resume_models import ResumeRecord
from section_parser import parse


def test_defaults_without_a_resume():
    repo = FactRepository()
    assert repo.record is None
    assert repo.skills_or_fallback() == DEFAULT_SKILLS
    assert repo.experience_or_fallback() == DEFAULT_EXPERIENCE
    assert repo.education_or_fallback() == DEFAULT_EDUCATION
    assert repo.resume_details() == DEFAULT_DETAILS


def test_default_profile_contents():
    assert DEFAULT_EXPERIENCE[0].company == "Tech Solutions Inc."
    assert DEFAULT_EXPERIENCE[0].duration == "2021-Present"
    assert DEFAULT_EXPERIENCE[1].company == "Digital Agency LLC"
    assert DEFAULT_EDUCATION[0].school == "State University"
    assert DEFAULT_DETAILS.name == "Alex Johnson"


def test_empty_sections_fall_back_individually():
    repo = FactRepository(parse("SKILLS\nPython, SQL\n"))
    assert repo.skills_or_fallback() == ("Python", "SQL")
    assert repo.experience_or_fallback() == DEFAULT_EXPERIENCE
    assert repo.education_or_fallback() == DEFAULT_EDUCATION


def test_replace_swaps_the_whole_record():
    repo = FactRepository(parse("SKILLS\nPython\n"))
    repo.replace(parse("SKILLS\nRust\n"))
    assert repo.skills_or_fallback() == ("Rust",)
    repo.replace(None)
    assert repo.skills_or_fallback() == DEFAULT_SKILLS


def test_resume_details_from_raw_text():
    record = parse(
        "Maria Lopez\n"
        "Austin, TX\n"
        "EDUCATION\n"
        "BS Computer Science, University of Texas at Austin, 2019\n"
        "I volunteer at a coding club for kids.\n"
    )
    details = FactRepository(record).resume_details()
    assert details.name == "Maria Lopez"
    assert details.location == "Austin, TX"
    assert details.institution == "University of Texas"
    assert details.personal_background == "I volunteer at a coding club for kids."
    assert details.projects == ()
    assert details.certifications == ()


def test_resume_details_fill_gaps_from_defaults():
    details = FactRepository(ResumeRecord(raw_text="nothing useful here")).resume_details()
    assert details.name == DEFAULT_DETAILS.name
    assert details.location == DEFAULT_DETAILS.location
    assert details.institution == DEFAULT_DETAILS.institution
    assert details.personal_background == DEFAULT_DETAILS.personal_background


def test_project_and_certification_summaries():
    record = parse(
        "PROJECTS\n"
        "Chat App, 2022 Link\n"
        "- Real-time chat using Node.js and Redis\n"
        "\n"
        "CERTIFICATIONS\n"
        "AWS Certified Developer, Amazon\n"
    )
    details = FactRepository(record).resume_details()
    assert details.projects == ("Chat App (Node.js, Redis)",)
    assert details.certifications == ("AWS Certified Developer",)


def test_raw_text_scans_when_sections_are_missing():
    record = ResumeRecord(
        raw_text="Weather Bot, 2021 Link\nGoogle Certified Associate Cloud Engineer, 2022\n"
    )
    details = FactRepository(record).resume_details()
    assert details.projects == ("Weather Bot",)
    assert details.certifications == ("Google Certified Associate Cloud Engineer",)


def test_skill_pairs_are_not_taken_as_a_location():
    record = parse("SKILLS\nPython, Docker, CI, Linux\nReact, UI, Figma\n")
    assert FactRepository(record).resume_details().location == DEFAULT_DETAILS.location


def test_location_field_on_a_contact_line():
    record = ResumeRecord(raw_text="Sam Lee\nsam@example.com | Denver, CO | (555) 010-2030\n")
    assert FactRepository(record).resume_details().location == "Denver, CO"
