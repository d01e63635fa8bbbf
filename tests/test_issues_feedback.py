# tests/test_issues_feedback.py
from urllib.parse import parse_qs, urlparse

import pytest

from feedback import Feedback
from issues import COMMON_ISSUES, issue_question


def test_issue_question():
    assert issue_question("Layer Shifting") == "I'm having layer shifting, how can I fix it?"


def test_catalogue():
    assert len(COMMON_ISSUES) == 8


def test_empty_feedback():
    assert Feedback().is_empty()
    assert Feedback(text="   ").is_empty()
    assert not Feedback(rating=4).is_empty()


def test_feedback_text_placeholders():
    assert Feedback(text="Great tips").to_text() == (
        "Rating: Not provided\nFeedback: Great tips\nUser Email: Not provided"
    )


def test_invalid_rating():
    with pytest.raises(ValueError):
        Feedback(rating=7)


def test_mailto_link():
    feedback = Feedback(rating=5, text="Fixed my warping & stringing", email="me@example.com")
    link = feedback.mailto_link("support@example.com")

    parsed = urlparse(link)
    query = parse_qs(parsed.query)
    assert parsed.scheme == "mailto"
    assert parsed.path == "support@example.com"
    assert query["subject"] == ["3D Print Debugger Feedback"]
    assert query["body"] == [feedback.to_text()]
