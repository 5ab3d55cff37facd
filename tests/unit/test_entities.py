"""Tests for anchor entity extraction."""

from moment_engine.text.entities import anchor_entities, extract_entities


def test_extracts_camel_caps_and_capitalized_words():
    assert extract_entities("Show HN: OpenAI ships GPT-5 for Postgres users") == ["openai", "gpt-5", "postgres"]


def test_sentence_initial_word_is_not_an_entity():
    assert extract_entities("Apple ships a thing") == []
    assert extract_entities("The new iPhone from Apple") == ["iphone", "apple"]


def test_stopwords_dropped():
    assert extract_entities("Trending on Reddit today") == []


def test_non_string():
    assert extract_entities(None) == []


def test_anchor_entities_ranked_by_frequency():
    texts = ["OpenAI ships", "Big news: OpenAI and Postgres", "Postgres wins", None]
    assert anchor_entities(texts) == ["openai", "postgres"]
    assert anchor_entities(texts, limit=1) == ["openai"]
