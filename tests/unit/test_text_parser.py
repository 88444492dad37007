"""Unit tests for the search string tokenizer."""

from __future__ import annotations

from search_api.text.parser import tokenize


class TestTokenize:
    def test_empty(self) -> None:
        assert tokenize("") == []

    def test_words(self) -> None:
        assert tokenize("dark psy") == ["dark", "psy"]

    def test_prefixes_kept(self) -> None:
        assert tokenize("+les -toto") == ["+les", "-toto"]

    def test_phrase_quotes_stripped(self) -> None:
        assert tokenize('"allons bon"') == ["allons bon"]

    def test_prefixed_phrase(self) -> None:
        assert tokenize('-"allons bon" +"la vie"') == ["-allons bon", "+la vie"]

    def test_meta_key_keeps_colon(self) -> None:
        assert tokenize('define:"salut poulette"') == ["define:", "salut poulette"]

    def test_meta_key_with_word(self) -> None:
        assert tokenize("city:Paris") == ["city:", "Paris"]

    def test_full_example(self) -> None:
        tokens = tokenize('bonjour +les +amis -toto -"allons bon" define:"salut poulette"')
        assert tokens == [
            "bonjour",
            "+les",
            "+amis",
            "-toto",
            "-allons bon",
            "define:",
            "salut poulette",
        ]

    def test_punctuation_skipped(self) -> None:
        assert tokenize("(hello), world!") == ["hello", "world"]

    def test_inner_punctuation_kept(self) -> None:
        assert tokenize("jean-pierre o'neil") == ["jean-pierre", "o'neil"]

    def test_unterminated_quote(self) -> None:
        assert tokenize('"open phrase') == ["open", "phrase"]

    def test_numbers(self) -> None:
        assert tokenize("1984 +42") == ["1984", "+42"]

    def test_only_noise(self) -> None:
        assert tokenize("!!! ...") == []
