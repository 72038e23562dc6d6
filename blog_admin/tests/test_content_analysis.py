"""Tests for draft readability and SEO scoring."""

import pytest

from blog_admin.services.content_analysis import (
    analyze,
    content_length_score,
    count_syllables,
    heading_score,
    keyword_density_score,
    meta_description_score,
    readability_grade,
    title_quality_score,
    title_rating,
    title_score,
)


@pytest.mark.parametrize(
    ("word", "syllables"),
    [("the", 1), ("reading", 2), ("table", 2), ("makes", 1), ("yesterday", 3)],
)
def test_count_syllables(word, syllables):
    assert count_syllables(word) == syllables


@pytest.mark.parametrize(
    ("flesch", "grade"),
    [(95, "Excellent"), (85, "Easy"), (65, "Standard"), (45, "Difficult"), (10, "Very Difficult")],
)
def test_readability_grade(flesch, grade):
    assert readability_grade(flesch) == grade


def test_length_bands():
    assert title_score(55) == 100
    assert title_score(45) == 80
    assert title_score(10) == 20
    assert title_rating(55) == "Excellent"
    assert title_rating(85) == "Poor"
    assert meta_description_score(155) == 100
    assert meta_description_score(0) == 20
    assert content_length_score(850) == 100
    assert content_length_score(50) == 20


def test_keyword_density_score():
    text = "python " * 2 + "word " * 98
    assert keyword_density_score(text, "Python") == 100
    assert keyword_density_score(text, "rust") == 0
    assert keyword_density_score(text, "") == 0


def test_keyword_with_regex_characters():
    assert keyword_density_score("c++ is fast", "c++") > 0


def test_heading_score_caps_at_100():
    assert heading_score("<h1>a</h1><h2>b</h2><h3>c</h3>") == 100
    assert heading_score("<h2>b</h2>") == 40
    assert heading_score("<p>none</p>") == 0


def test_title_quality_score():
    assert title_quality_score("") == 0
    assert title_quality_score("Short") == 0
    assert title_quality_score("10 Ways To Write Better Python Code!") == 80
    assert title_quality_score("10 Ways To Write Much Better Python Code Today!") == 100


def test_analyze_small_draft():
    analysis = analyze(
        "Learn Python",
        "<h2>Intro</h2><p>Python is great. It is simple!</p>",
        focus_keywords="python",
    )

    assert analysis.stats.word_count == 7
    assert analysis.stats.sentence_count == 2
    assert analysis.stats.paragraph_count == 1
    assert analysis.stats.read_time == 1

    checks = {c.name: c for c in analysis.seo.checks}
    assert len(checks) == 10
    assert sum(c.weight for c in checks.values()) == 100
    assert checks["Focus keywords in title"].passed is True
    assert checks["Focus keywords in content"].passed is True
    assert checks["Has proper heading structure"].passed is True
    assert checks["Featured image set"].passed is False
    assert analysis.seo.title_rating == "Poor"


def test_analyze_empty_draft():
    analysis = analyze("", "")

    assert analysis.stats.word_count == 0
    assert analysis.stats.sentence_count == 1
    assert analysis.stats.read_time == 1
    assert analysis.readability.flesch_score == 207
    assert analysis.readability.grade == "Excellent"
    assert analysis.readability.grade_level == 1
    assert analysis.seo.score == 6
