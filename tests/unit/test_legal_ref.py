"""
Legal Reference Tests
======================

Parsing of pasal/ayat citations from questions and matching them
against chunk text.
"""

from __future__ import annotations

import pytest

from groundrag.retrieve.legal_ref import extract_reference, matches
from groundrag.schemas.chunk import LegalRef


@pytest.mark.unit
class TestExtractReference:

    def test_article_and_clause(self):
        assert extract_reference("apa isi pasal 28 ayat 1") == LegalRef(article="28", clause="1")

    def test_clause_in_parentheses(self):
        assert extract_reference("Bunyi Pasal 29 ayat (2)?") == LegalRef(article="29", clause="2")

    def test_article_letter(self):
        assert extract_reference("jelaskan pasal 28a") == LegalRef(article="28a", clause=None)

    def test_article_letter_with_space(self):
        ref = extract_reference("pasal 28 a tentang apa")
        assert ref.article == "28a"

    def test_following_word_is_not_a_letter(self):
        ref = extract_reference("pasal 28 tentang apa")
        assert ref.article == "28"
        assert ref.clause is None

    def test_clause_only(self):
        assert extract_reference("apa isi ayat (3)") == LegalRef(article=None, clause="3")

    def test_case_insensitive(self):
        assert extract_reference("PASAL 33 AYAT 4") == LegalRef(article="33", clause="4")

    def test_first_citation_wins(self):
        ref = extract_reference("bandingkan pasal 27 dan pasal 28")
        assert ref.article == "27"

    @pytest.mark.parametrize("question", [
        "apa itu pancasila",
        "pasal28 berbunyi",
        "",
    ])
    def test_no_reference(self, question):
        assert extract_reference(question) is None


@pytest.mark.unit
class TestMatches:

    TEXT = "pasal 28 ayat (1) menyatakan setiap orang berhak atas pengakuan"

    def test_article_and_clause(self):
        assert matches(self.TEXT, LegalRef(article="28", clause="1"))

    def test_clause_without_parentheses(self):
        assert matches("pasal 28 ayat 1 menyatakan", LegalRef(article="28", clause="1"))

    def test_wrong_clause(self):
        assert not matches(self.TEXT, LegalRef(article="28", clause="2"))

    def test_wrong_article(self):
        assert not matches(self.TEXT, LegalRef(article="29", clause="1"))

    def test_spaced_article_letter(self):
        assert matches("pasal 28 a berbunyi", LegalRef(article="28a"))
        assert matches("pasal 28a berbunyi", LegalRef(article="28a"))

    def test_clause_only(self):
        assert matches(self.TEXT, LegalRef(clause="1"))

    def test_empty_reference_is_satisfied(self):
        assert matches(self.TEXT, LegalRef())

    def test_no_reference_never_matches(self):
        assert not matches(self.TEXT, None)
