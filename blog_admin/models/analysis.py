"""Content analysis models (text stats, readability, SEO checks)."""

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = {"alias_generator": to_camel, "populate_by_name": True}


class AnalyzeRequest(_CamelModel):
    """Draft fields the editor sends for live scoring."""

    title: str = ""
    content: str = ""
    meta_description: str = ""
    focus_keywords: str = ""
    featured_image: str | None = None


class ContentStats(_CamelModel):
    word_count: int
    char_count: int
    read_time: int
    sentence_count: int
    paragraph_count: int
    avg_words_per_sentence: int


class Readability(_CamelModel):
    flesch_score: int
    grade: str
    grade_level: int
    avg_sentence_length: int


class SeoCheck(_CamelModel):
    name: str
    passed: bool
    weight: int
    score: int


class SeoReport(_CamelModel):
    score: int
    title_rating: str
    checks: list[SeoCheck]


class ContentAnalysis(_CamelModel):
    stats: ContentStats
    readability: Readability
    seo: SeoReport


class AnalysisResponse(_CamelModel):
    success: bool = True
    analysis: ContentAnalysis
