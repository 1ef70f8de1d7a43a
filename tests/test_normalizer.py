#!/usr/bin/env python3

"""
Unit tests for refanging of defanged report text
"""

from intelforge.modules.normalizer import normalize, refang_dots, refang_schemes, strip_zero_width


class TestRefangSchemes:
    """Test hxxp/hxxps scheme rewriting."""

    def test_lowercase_schemes(self) -> None:
        """hxxp and hxxps become http and https."""
        assert refang_schemes("hxxp://a.com hxxps://b.com") == "http://a.com https://b.com"

    def test_mixed_case_schemes(self) -> None:
        """Scheme rewriting ignores case of the obfuscated prefix."""
        assert refang_schemes("HXXP://a.com hXxPs://b.com") == "http://a.com https://b.com"

    def test_scheme_inside_word_untouched(self) -> None:
        """Only word-bounded prefixes are rewritten."""
        assert refang_schemes("xhxxpy") == "xhxxpy"


class TestRefangDots:
    """Test bracketed dot rewriting."""

    def test_all_bracket_styles(self) -> None:
        """Every supported dot obfuscation becomes a literal dot."""
        text = "a[.]b a(.)b a{.}b a[dot]b a(dot)b a{dot}b"

        assert refang_dots(text) == "a.b a.b a.b a.b a.b a.b"

    def test_inner_spaces_and_case(self) -> None:
        """Inner spaces and upper-case DOT are accepted."""
        assert refang_dots("evil[ . ]com evil( DOT )com") == "evil.com evil.com"

    def test_plain_brackets_untouched(self) -> None:
        """Brackets that hold something else are kept."""
        assert refang_dots("[x] (y) {z}") == "[x] (y) {z}"


class TestNormalize:
    """Test the full normalization pipeline."""

    def test_empty_text(self) -> None:
        """Empty input gives empty output."""
        assert normalize("") == ""

    def test_zero_width_characters_removed(self) -> None:
        """Zero-width spaces, joiners and byte-order marks disappear."""
        text = "ev\u200bil.c\u200com\u200d\ufeff"

        assert strip_zero_width(text) == "evil.com"
        assert normalize(text) == "evil.com"

    def test_full_defanged_indicator(self) -> None:
        """A defanged URL is rewritten into its canonical form."""
        assert normalize("hxxps://malicious[.]com/path") == "https://malicious.com/path"

    def test_other_text_preserved(self) -> None:
        """Casing and whitespace outside of obfuscations are kept."""
        text = "Report  Title\n\tSee HXXP://Evil[.]Com/Path"

        assert normalize(text) == "Report  Title\n\tSee http://Evil.Com/Path"

    def test_idempotent(self) -> None:
        """Normalizing twice changes nothing further."""
        text = "hxxp://bad[.]example (dot) 10[.]0[.]0[.]1"

        assert normalize(normalize(text)) == normalize(text)
