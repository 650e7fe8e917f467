"""
Unit tests for title and slug utilities.

Test Naming Convention (BDD):
- test_<behavior>_<expected_result>
"""
import pytest

from podbridge.utils.title_utils import (
    PLACEHOLDER_SLUG,
    SLUG_MAX_LENGTH,
    derive_slug,
    sanitize_title,
)


class TestDeriveSlug:
    """Test derive_slug()."""

    @pytest.mark.parametrize(
        "title, expected",
        [
            ("My Show", "my-show"),
            ("The Daily Show!", "the-daily-show"),
            ("  Leading and trailing  ", "leading-and-trailing"),
            ("Tabs\tand\nnewlines", "tabs-and-newlines"),
            ("a -- b", "a-b"),
            ("Café Crème", "caf-crme"),
            ("-dashes-", "dashes"),
            ("Hello, World: Part 2", "hello-world-part-2"),
        ],
    )
    def test_slug_rules(self, title, expected):
        assert derive_slug(title) == expected

    @pytest.mark.parametrize("title", [None, "", "   ", "!!!", "日本語"])
    def test_empty_result_yields_placeholder(self, title):
        """Given: A title that reduces to nothing
        When: Deriving a slug
        Then: The placeholder slug is returned
        """
        assert derive_slug(title) == PLACEHOLDER_SLUG

    def test_truncated_to_max_length(self):
        slug = derive_slug("word " * 30)

        assert len(slug) <= SLUG_MAX_LENGTH
        assert not slug.endswith("-")

    def test_cut_does_not_leave_trailing_hyphen(self):
        """Given: A title whose 50th character is a hyphen
        When: Deriving a slug
        Then: The dangling hyphen is trimmed
        """
        title = "a" * 49 + " b"

        assert derive_slug(title) == "a" * 49

    def test_deterministic(self):
        assert derive_slug("Same Title") == derive_slug("Same Title")

    def test_output_alphabet(self):
        slug = derive_slug("Mixed CASE & symbols #1 (live)")

        assert set(slug) <= set("abcdefghijklmnopqrstuvwxyz0123456789-")


class TestSanitizeTitle:
    """Test sanitize_title()."""

    def test_collapses_whitespace(self):
        assert sanitize_title("  My\n  Show\r\n ") == "My Show"

    def test_empty_input(self):
        assert sanitize_title(None) == ""
        assert sanitize_title("") == ""

    def test_long_title_truncated_with_ellipsis(self):
        result = sanitize_title("x" * 300)

        assert len(result) == 255
        assert result.endswith("...")

    def test_custom_max_length(self):
        assert sanitize_title("abcdefghij", max_length=6) == "abc..."
