import os
import sys
import unittest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "..", ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from dailyjournal.backend.app.sentiment_engine import (
    InvalidInputError,
    Mood,
    MoodClassifier,
    MoodKeywords,
    QuoteTag,
    classify,
    quote_tag_for,
)


class ClassifierTests(unittest.TestCase):
    def test_happy_entry(self):
        result = classify("I feel happy and grateful today")
        self.assertEqual(result.mood, Mood.HAPPY)
        self.assertFalse(result.is_crisis)
        self.assertGreater(result.confidence, 0)
        self.assertLessEqual(result.confidence, 1)

    def test_confidence_uses_word_count(self):
        text = "one two three four five six seven eight nine ten eleven twelve thirteen fourteen fifteen sixteen seventeen eighteen nineteen sad"
        result = classify(text)
        self.assertEqual(result.mood, Mood.SAD)
        self.assertAlmostEqual(result.confidence, 0.5)

    def test_crisis_short_circuits_other_keywords(self):
        result = classify("I was so happy and excited but honestly I want to die")
        self.assertEqual(result.mood, Mood.CRISIS)
        self.assertEqual(result.confidence, 0.9)
        self.assertTrue(result.is_crisis)

    def test_crisis_match_ignores_case_and_word_boundaries(self):
        self.assertTrue(classify("Feeling HOPELESS").is_crisis)
        self.assertTrue(classify("thoughtsofsuicideagain").is_crisis)
        self.assertTrue(classify("I CAN'T GO ON like this").is_crisis)

    def test_no_keywords_is_neutral(self):
        result = classify("Went to the store and bought some bread.")
        self.assertEqual(result.mood, Mood.NEUTRAL)
        self.assertEqual(result.confidence, 0.5)
        self.assertFalse(result.is_crisis)

    def test_whole_word_matching(self):
        result = classify("The sadness of the lovely afternoon")
        self.assertEqual(result.mood, Mood.NEUTRAL)

    def test_highest_category_wins(self):
        result = classify("worried and nervous but a little happy")
        self.assertEqual(result.mood, Mood.ANXIOUS)

    def test_tie_prefers_declared_priority(self):
        self.assertEqual(classify("happy but sad").mood, Mood.HAPPY)
        self.assertEqual(classify("sad and worried").mood, Mood.SAD)
        self.assertEqual(classify("worried yet proud").mood, Mood.HAPPY)

    def test_repeated_keyword_counts_each_occurrence(self):
        result = classify("sad sad sad happy")
        self.assertEqual(result.mood, Mood.SAD)
        self.assertEqual(result.confidence, 1.0)

    def test_confidence_capped(self):
        result = classify("Happy!")
        self.assertEqual(result.confidence, 1.0)

    def test_empty_text_rejected(self):
        with self.assertRaises(InvalidInputError):
            classify("")
        with self.assertRaises(InvalidInputError):
            classify("   \n\t ")

    def test_non_text_rejected(self):
        with self.assertRaises(InvalidInputError):
            classify(None)
        with self.assertRaises(InvalidInputError):
            classify(b"happy")

    def test_unencodable_text_rejected(self):
        with self.assertRaises(InvalidInputError):
            classify("I feel happy \ud800")

    def test_custom_keyword_tables(self):
        keywords = MoodKeywords(
            crisis=("danger zone",),
            categories=((Mood.ANXIOUS, ("jittery",)), (Mood.HAPPY, ("sunny",))),
        )
        classifier = MoodClassifier(keywords=keywords)
        self.assertEqual(classifier.classify("jittery and sunny").mood, Mood.ANXIOUS)
        self.assertTrue(classifier.classify("in the Danger Zone").is_crisis)
        self.assertEqual(classifier.classify("I want to die").mood, Mood.NEUTRAL)

    def test_keyword_tables_cannot_score_crisis(self):
        with self.assertRaises(ValueError):
            MoodKeywords(categories=((Mood.CRISIS, ("bad",)),))

    def test_crisis_flag_matches_mood(self):
        samples = [
            "I feel happy",
            "so lonely and empty",
            "panic panic",
            "nothing much",
            "better off dead",
        ]
        for sample in samples:
            result = classify(sample)
            self.assertEqual(result.is_crisis, result.mood == Mood.CRISIS)
            self.assertGreaterEqual(result.confidence, 0)
            self.assertLessEqual(result.confidence, 1)


class QuoteTagTests(unittest.TestCase):
    def test_mapping_is_total(self):
        expected = {
            Mood.HAPPY: QuoteTag.HAPPY,
            Mood.SAD: QuoteTag.SAD,
            Mood.CRISIS: QuoteTag.SAD,
            Mood.ANXIOUS: QuoteTag.ANXIOUS,
            Mood.NEUTRAL: QuoteTag.GENERAL,
        }
        for mood in Mood:
            self.assertEqual(quote_tag_for(mood), expected[mood])

    def test_accepts_stored_strings(self):
        self.assertEqual(quote_tag_for("crisis"), QuoteTag.SAD)

    def test_unknown_mood_rejected(self):
        with self.assertRaises(InvalidInputError):
            quote_tag_for("elated")


if __name__ == "__main__":
    unittest.main()
