from candidate_context import (
    CHALLENGE_ANSWER,
    GENERIC_ANSWER,
    STRENGTHS_ANSWER,
    WEAKNESS_ANSWER,
    build_context,
    fallback_answer,
    format_paragraphs,
    is_project_question,
)
from fact_repository import DEFAULT_DETAILS, FactRepository
from section_parser import parse


def test_short_or_already_split_text_is_untouched():
    assert format_paragraphs("  Short answer. Really.  ") == "Short answer. Really."
    text = "First paragraph that is long enough to matter here.\n\nSecond paragraph follows it."
    assert format_paragraphs(text) == text


def test_long_text_is_split_every_two_sentences():
    text = (
        "I started coding in high school. I loved it right away. "
        "Later I studied computer science. Then I joined a startup! "
        "Was it hard? Sometimes."
    )
    assert format_paragraphs(text) == (
        "I started coding in high school. I loved it right away.\n\n"
        "Later I studied computer science. Then I joined a startup!\n\n"
        "Was it hard? Sometimes."
    )


def test_project_question_detection():
    assert is_project_question("Tell me about a project you're proud of")
    assert is_project_question("What PROJECTS have you worked on?")
    assert is_project_question("What have you built recently?")
    assert not is_project_question("Where did you go to school?")
    assert not is_project_question("")


def test_context_uses_defaults_without_a_resume():
    context = build_context(FactRepository(), "Tell me about yourself")
    assert "Skills: JavaScript, TypeScript" in context
    assert "Software Developer at Tech Solutions Inc. (2021-Present)" in context
    assert "State University" in context
    assert f"- Name: {DEFAULT_DETAILS.name}" in context
    assert "Projects on the resume" not in context


def test_context_lists_only_resume_projects_for_project_questions():
    repo = FactRepository(parse(
        "SKILLS\nPython\n\n"
        "PROJECTS\n"
        "Chat App, 2022 Link\n"
        "- Real-time chat using Node.js and Redis\n"
    ))
    context = build_context(repo, "What projects have you worked on?")
    assert "Skills: Python" in context
    assert "Projects on the resume (discuss ONLY these, do not invent others):" in context
    assert "1. Chat App: Real-time chat using Node.js and Redis (Technologies: Node.js, Redis)" in context


def test_context_says_when_no_projects_are_listed():
    context = build_context(FactRepository(parse("SKILLS\nPython\n")), "Any side projects?")
    assert "No projects are listed on the resume." in context


def test_fallback_answers_pick_by_keyword():
    assert fallback_answer("What is your greatest strength?", DEFAULT_DETAILS) == STRENGTHS_ANSWER
    assert fallback_answer("What's your biggest weakness?", DEFAULT_DETAILS) == WEAKNESS_ANSWER
    assert fallback_answer("What would you improve about yourself?", DEFAULT_DETAILS) != WEAKNESS_ANSWER
    assert fallback_answer("Describe a difficult situation", DEFAULT_DETAILS) == CHALLENGE_ANSWER
    assert fallback_answer("Why should we hire you?", DEFAULT_DETAILS) == GENERIC_ANSWER


def test_bio_fallback_uses_the_details():
    answer = fallback_answer("Tell me about yourself", DEFAULT_DETAILS, ("Python", "SQL", "Git", "Docker"))
    assert "Alex Johnson" in answer
    assert "San Francisco, CA" in answer
    assert "State University" in answer
    assert "Python, SQL, Git" in answer
    assert "Docker" not in answer


def test_fallback_is_deterministic():
    first = fallback_answer("What is your weakness?", DEFAULT_DETAILS)
    assert all(fallback_answer("What is your weakness?", DEFAULT_DETAILS) == first for _ in range(5))
