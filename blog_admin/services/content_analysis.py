"""Draft scoring: text statistics, Flesch readability and a weighted SEO checklist.

All scores are heuristics over word, sentence and syllable counts; the bands
match the ones the editor has always shown.
"""

import math
import re

from blog_admin.models.analysis import (
    ContentAnalysis,
    ContentStats,
    Readability,
    SeoCheck,
    SeoReport,
)
from blog_admin.services.markdown import WORDS_PER_MINUTE, plain_text

_SENTENCE_SPLIT_RE = re.compile(r"[.!?]+")
_PARAGRAPH_RE = re.compile(r"<p\b", re.IGNORECASE)
_SILENT_ENDING_RE = re.compile(r"(?:[^laeiouy]es|ed|[^laeiouy]e)$")
_VOWEL_GROUP_RE = re.compile(r"[aeiouy]{1,2}")

READABILITY_GRADES = (
    (30, "Very Difficult"),
    (50, "Difficult"),
    (60, "Fairly Difficult"),
    (70, "Standard"),
    (80, "Fairly Easy"),
    (90, "Easy"),
)


def _round(value: float) -> int:
    """Round half up, so 2.5 -> 3 like the editor's display."""
    return math.floor(value + 0.5)


def count_syllables(word: str) -> int:
    word = word.lower()
    if len(word) <= 3:
        return 1
    word = _SILENT_ENDING_RE.sub("", word)
    word = re.sub(r"^y", "", word)
    return len(_VOWEL_GROUP_RE.findall(word)) or 1


def readability_grade(flesch: float) -> str:
    for upper, label in READABILITY_GRADES:
        if flesch < upper:
            return label
    return "Excellent"


def _split_keywords(keywords: str) -> list[str]:
    return [k.strip().lower() for k in keywords.split(",") if k.strip()]


def keywords_in_text(text: str, keywords: str) -> bool:
    haystack = text.lower()
    return any(k in haystack for k in _split_keywords(keywords))


def title_score(length: int) -> int:
    if 50 <= length <= 60:
        return 100
    if 40 <= length <= 70:
        return 80
    if 30 <= length <= 80:
        return 60
    if length >= 20:
        return 40
    return 20


def title_rating(length: int) -> str:
    if 50 <= length <= 60:
        return "Excellent"
    if 40 <= length <= 70:
        return "Good"
    if 30 <= length <= 80:
        return "Fair"
    return "Poor"


def meta_description_score(length: int) -> int:
    if 150 <= length <= 160:
        return 100
    if 120 <= length <= 180:
        return 80
    if 100 <= length <= 200:
        return 60
    if length >= 50:
        return 40
    return 20


def keyword_density_score(text: str, keywords: str) -> int:
    """Score keyword density; 1-3% of words is ideal."""
    keyword_list = _split_keywords(keywords)
    if not keyword_list or not text:
        return 0
    haystack = text.lower()
    total_words = len(haystack.split()) or 1
    hits = sum(len(re.findall(re.escape(k), haystack)) for k in keyword_list)
    density = hits / total_words * 100
    if 1 <= density <= 3:
        return 100
    if 0.5 <= density <= 4:
        return 80
    if 0 < density <= 5:
        return 60
    return 40 if hits else 0


def content_length_score(words: int) -> int:
    for threshold, score in ((800, 100), (500, 90), (300, 80), (200, 60), (100, 40)):
        if words >= threshold:
            return score
    return 20


def heading_score(content_html: str) -> int:
    lowered = content_html.lower()
    score = 0
    if "<h1" in lowered:
        score += 40
    if "<h2" in lowered:
        score += 40
    if "<h3" in lowered:
        score += 20
    return min(score, 100)


def title_quality_score(title: str) -> int:
    if not title:
        return 0
    score = 0
    if len(title) >= 20:
        score += 30
    if len(title) >= 40:
        score += 20
    if "?" in title or "!" in title:
        score += 10
    if re.search(r"\d", title):
        score += 15
    if len(title.split(" ")) >= 4:
        score += 25
    return min(score, 100)


def meta_quality_score(meta: str) -> int:
    if not meta:
        return 0
    score = 0
    if len(meta) >= 100:
        score += 40
    if any(word in meta for word in ("learn", "discover", "guide")):
        score += 20
    if "?" in meta or "!" in meta:
        score += 10
    if len(meta.split(" ")) >= 15:
        score += 30
    return min(score, 100)


def _seo_checks(
    title: str,
    text: str,
    content_html: str,
    meta: str,
    keywords: str,
    featured_image: str | None,
    words: int,
) -> list[SeoCheck]:
    has_headings = any(tag in content_html.lower() for tag in ("<h1", "<h2", "<h3"))
    has_links = "<a " in content_html or "href=" in content_html
    kw_in_title = bool(keywords) and keywords_in_text(title, keywords)
    kw_in_content = bool(keywords) and keywords_in_text(text, keywords)
    return [
        SeoCheck(
            name="Title length (50-60 chars optimal)",
            passed=50 <= len(title) <= 60,
            weight=10,
            score=title_score(len(title)),
        ),
        SeoCheck(
            name="Meta description (150-160 chars optimal)",
            passed=150 <= len(meta) <= 160,
            weight=10,
            score=meta_description_score(len(meta)),
        ),
        SeoCheck(
            name="Focus keywords in title",
            passed=kw_in_title,
            weight=15,
            score=100 if kw_in_title else 0,
        ),
        SeoCheck(
            name="Focus keywords in content",
            passed=kw_in_content,
            weight=15,
            score=keyword_density_score(text, keywords) if keywords else 0,
        ),
        SeoCheck(
            name="Content length (300+ words)",
            passed=words >= 300,
            weight=10,
            score=content_length_score(words),
        ),
        SeoCheck(
            name="Has proper heading structure",
            passed=has_headings,
            weight=10,
            score=heading_score(content_html),
        ),
        SeoCheck(
            name="Featured image set",
            passed=bool(featured_image),
            weight=8,
            score=100 if featured_image else 0,
        ),
        SeoCheck(
            name="Internal/External links present",
            passed=has_links,
            weight=5,
            score=100 if has_links else 0,
        ),
        SeoCheck(
            name="Title is unique and descriptive",
            passed=len(title) > 20,
            weight=7,
            score=title_quality_score(title),
        ),
        SeoCheck(
            name="Meta description is descriptive",
            passed=len(meta) > 50,
            weight=10,
            score=meta_quality_score(meta),
        ),
    ]


def analyze(
    title: str,
    content_html: str,
    meta_description: str = "",
    focus_keywords: str = "",
    featured_image: str | None = None,
) -> ContentAnalysis:
    """Score a draft the way the editor's analytics panel does."""
    text = plain_text(content_html)
    words = text.split()
    word_count = len(words)
    sentences = [s for s in _SENTENCE_SPLIT_RE.split(text) if s.strip()]
    sentence_count = len(sentences) or 1

    stats = ContentStats(
        word_count=word_count,
        char_count=len(text),
        read_time=max(1, math.ceil(word_count / WORDS_PER_MINUTE)),
        sentence_count=sentence_count,
        paragraph_count=max(1, len(_PARAGRAPH_RE.findall(content_html))),
        avg_words_per_sentence=_round(word_count / sentence_count),
    )

    syllables = sum(count_syllables(w) for w in words)
    avg_sentence_length = word_count / len(sentences) if sentences else 0.0
    avg_syllables = syllables / word_count if word_count else 0.0
    flesch = 206.835 - 1.015 * avg_sentence_length - 84.6 * avg_syllables
    grade_level = _round(0.39 * avg_sentence_length + 11.8 * avg_syllables - 15.59)

    readability = Readability(
        flesch_score=_round(flesch),
        grade=readability_grade(flesch),
        grade_level=max(1, min(16, grade_level)),
        avg_sentence_length=_round(avg_sentence_length),
    )

    checks = _seo_checks(
        title,
        text,
        content_html,
        meta_description,
        focus_keywords,
        featured_image,
        word_count,
    )
    total_weight = sum(c.weight for c in checks)
    weighted = sum(c.score * c.weight for c in checks)
    seo = SeoReport(
        score=_round(weighted / total_weight),
        title_rating=title_rating(len(title)),
        checks=checks,
    )

    return ContentAnalysis(stats=stats, readability=readability, seo=seo)
