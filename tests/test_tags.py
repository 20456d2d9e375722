"""Tests for tag normalization and the JSON/overlap helpers."""

from profile_matching.matching.tags import (
    MAX_TAG_CHARS,
    MAX_TAGS,
    coerce_tag_list,
    ensure_tags_shape,
    normalize_tag_list,
    overlap,
    parse_json,
)
from profile_matching.matching.types import TagSet

MESSY_INPUTS = [
    ["  Machine   Learning ", "machine learning", "AI", "ai", ""],
    ["one two three four", "a" * 41, "ok"],
    [f"Tag {i}" for i in range(30)],
    ["data\tscience\n", "Data Science", 42, 3.5],
    "not a list",
    None,
    {"title": ["x"]},
]


class TestNormalizeTagList:
    """Tests for normalize_tag_list."""

    def test_non_list_input_yields_empty(self):
        """Test that strings, None and dicts produce no tags."""
        assert normalize_tag_list("founder") == []
        assert normalize_tag_list(None) == []
        assert normalize_tag_list({"a": 1}) == []

    def test_lowercases_trims_and_collapses_whitespace(self):
        """Test canonical phrase cleaning."""
        assert normalize_tag_list(["  Machine   Learning ", "data\tscience\n"]) == [
            "machine learning",
            "data science",
        ]

    def test_deduplicates_preserving_first_occurrence(self):
        """Test that duplicates after cleaning are dropped, order kept."""
        assert normalize_tag_list(["AI", "Rust", "ai", " rust "]) == ["ai", "rust"]

    def test_drops_empty_and_long_phrases(self):
        """Test the word and character limits."""
        result = normalize_tag_list(
            ["", "   ", "one two three four", "one two three", "a" * 41, "b" * 40]
        )
        assert result == ["one two three", "b" * MAX_TAG_CHARS]

    def test_caps_at_twelve_entries(self):
        """Test that only the first 12 survivors are kept."""
        result = normalize_tag_list([f"tag{i}" for i in range(20)])
        assert result == [f"tag{i}" for i in range(MAX_TAGS)]

    def test_cap_applies_after_filtering(self):
        """Test that dropped phrases do not use up slots."""
        raw = ["one two three four"] * 5 + [f"tag{i}" for i in range(12)]
        assert len(normalize_tag_list(raw)) == 12

    def test_stringifies_non_string_elements(self):
        """Test that numbers are kept as their string form."""
        assert normalize_tag_list([42, 3.5, "X"]) == ["42", "3.5", "x"]

    def test_output_invariants_hold_for_messy_input(self):
        """Test bounds, uniqueness and idempotence across a range of inputs."""
        for raw in MESSY_INPUTS:
            result = normalize_tag_list(raw)
            assert len(result) <= MAX_TAGS
            assert len(result) == len(set(result))
            for phrase in result:
                assert phrase == phrase.lower().strip()
                assert len(phrase) <= MAX_TAG_CHARS
                assert 1 <= len(phrase.split(" ")) <= 3
            assert normalize_tag_list(result) == result


class TestEnsureTagsShape:
    """Tests for ensure_tags_shape."""

    def test_fills_missing_slots(self):
        """Test that missing keys default to empty lists."""
        tags = ensure_tags_shape({"title": ["CEO", "ceo"]})
        assert tags == TagSet(title=["ceo"], company=[], looking_for=[], offering=[])

    def test_non_mapping_input_is_empty(self):
        """Test that garbage input degrades to an empty TagSet."""
        assert ensure_tags_shape(None) == TagSet()
        assert ensure_tags_shape(["title"]) == TagSet()

    def test_malformed_slot_is_empty(self):
        """Test that a non-list slot value becomes empty."""
        tags = ensure_tags_shape({"offering": "python", "looking_for": ["Funding"]})
        assert tags.offering == []
        assert tags.looking_for == ["funding"]

    def test_to_dict_uses_slot_names(self):
        """Test the serialized shape."""
        tags = ensure_tags_shape({"company": ["Acme"]})
        assert tags.to_dict() == {
            "title": [],
            "company": ["acme"],
            "looking_for": [],
            "offering": [],
        }


class TestHelpers:
    """Tests for parse_json, coerce_tag_list and overlap."""

    def test_parse_json_defaults(self):
        """Test that None and bad JSON return the default."""
        assert parse_json(None, []) == []
        assert parse_json("{not json", []) == []
        assert parse_json(None) is None

    def test_parse_json_decodes_and_passes_lists(self):
        """Test that JSON text is decoded and lists pass through."""
        assert parse_json('["a", "b"]', []) == ["a", "b"]
        assert parse_json(["x"], []) == ["x"]

    def test_coerce_tag_list(self):
        """Test reading stored tag columns of various shapes."""
        assert coerce_tag_list(["ai", None, "ml"]) == ["ai", "ml"]
        assert coerce_tag_list('["funding"]') == ["funding"]
        assert coerce_tag_list('{"a": 1}') == []
        assert coerce_tag_list(None) == []

    def test_overlap_keeps_first_order_and_dedupes(self):
        """Test overlap order and uniqueness."""
        assert overlap(["a", "b", "a", "c"], ["c", "a"]) == ["a", "c"]
        assert overlap([], ["a"]) == []
        assert overlap(["a"], []) == []
