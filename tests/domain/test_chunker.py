"""Unit tests for sentence-aware chunking."""
from __future__ import annotations

import random
import unittest

from speech_synth.domain.text.chunker import chunk_text, max_chunk_length, split_sentences


class TestSplitSentences(unittest.TestCase):
    """Test cases for split_sentences."""

    def test_splits_on_terminal_punctuation(self):
        """Test splitting after . ! and ?"""
        self.assertEqual(
            split_sentences("One. Two! Three? Four"),
            ["One.", "Two!", "Three?", "Four"],
        )

    def test_title_abbreviations_do_not_end_sentences(self):
        """Test that listed abbreviations are not sentence ends."""
        self.assertEqual(
            split_sentences("Mr. Smith met Dr. Jones on Main St. today. They talked."),
            ["Mr. Smith met Dr. Jones on Main St. today.", "They talked."],
        )

    def test_single_initials_do_not_end_sentences(self):
        """Test that capital initials are not sentence ends."""
        self.assertEqual(
            split_sentences("J. R. R. Tolkien wrote books. Many of them."),
            ["J. R. R. Tolkien wrote books.", "Many of them."],
        )

    def test_unlisted_abbreviation_splits(self):
        """Test that abbreviations outside the fixed list still split."""
        self.assertEqual(split_sentences("See approx. ten."), ["See approx.", "ten."])


class TestChunkText(unittest.TestCase):
    """Test cases for chunk_text."""

    def test_language_budgets(self):
        """Test the per-language character budget."""
        self.assertEqual(max_chunk_length("ko"), 120)
        self.assertEqual(max_chunk_length("en"), 300)
        self.assertEqual(max_chunk_length("fr"), 300)

    def test_short_text_is_one_chunk(self):
        """Test that text under budget stays whole."""
        self.assertEqual(chunk_text("Hello there. How are you?", 300), ["Hello there. How are you?"])

    def test_greedy_packing(self):
        """Test that sentences are packed until the budget overflows."""
        self.assertEqual(
            chunk_text("One two. Three four. Five.", 12),
            ["One two.", "Three four.", "Five."],
        )
        self.assertEqual(
            chunk_text("One two. Three four. Five.", 20),
            ["One two. Three four.", "Five."],
        )

    def test_oversized_sentence_is_not_split(self):
        """Test that a sentence longer than the budget forms its own chunk."""
        long_sentence = "x" * 50 + "."
        self.assertEqual(
            chunk_text(f"Short. {long_sentence} Tail.", 20),
            ["Short.", long_sentence, "Tail."],
        )

    def test_paragraphs_are_never_merged(self):
        """Test that blank lines always start a new chunk."""
        self.assertEqual(
            chunk_text("First para.\n\n  \nSecond para.", 300),
            ["First para.", "Second para."],
        )

    def test_empty_text_falls_back_to_input(self):
        """Test that degenerate input is returned as a single chunk."""
        self.assertEqual(chunk_text("   ", 300), ["   "])
        self.assertEqual(chunk_text("", 300), [""])

    def test_chunks_reconstruct_sentences_within_budget(self):
        """Test that chunks keep every sentence once, in order, within budget."""
        rng = random.Random(7)
        words = ["alpha", "beta", "gamma", "delta"]

        for _ in range(50):
            paragraphs = []
            for _ in range(rng.randint(1, 3)):
                sentences = []
                for _ in range(rng.randint(1, 8)):
                    body = " ".join(rng.choice(words) for _ in range(rng.randint(1, 12)))
                    sentences.append(body.capitalize() + rng.choice(".!?"))
                paragraphs.append(sentences)

            text = "\n\n".join(" ".join(s) for s in paragraphs)
            budget = rng.choice([20, 40, 120, 300])
            chunks = chunk_text(text, budget)

            expected = [s for sentences in paragraphs for s in sentences]
            self.assertEqual(" ".join(chunks), " ".join(expected))
            for chunk in chunks:
                if len(chunk) > budget:
                    self.assertEqual(split_sentences(chunk), [chunk])


if __name__ == "__main__":
    unittest.main()
