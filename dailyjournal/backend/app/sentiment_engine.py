from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Pattern, Tuple, Union


class Mood(str, Enum):
    HAPPY = "happy"
    SAD = "sad"
    ANXIOUS = "anxious"
    CRISIS = "crisis"
    NEUTRAL = "neutral"


class QuoteTag(str, Enum):
    HAPPY = "happy"
    SAD = "sad"
    ANXIOUS = "anxious"
    GENERAL = "general"


class InvalidInputError(ValueError):
    pass


CRISIS_CONFIDENCE = 0.9
NEUTRAL_CONFIDENCE = 0.5

CRISIS_KEYWORDS = (
    "suicide",
    "kill myself",
    "end it all",
    "want to die",
    "no point",
    "hopeless",
    "worthless",
    "better off dead",
    "can't go on",
    "give up",
    "end my life",
)

# Declaration order is the tie-break priority.
MOOD_KEYWORDS = (
    (Mood.HAPPY, (
        "happy", "joy", "excited", "grateful", "blessed", "amazing", "wonderful", "great",
        "fantastic", "love", "celebration", "success", "achievement", "proud", "smile", "laugh",
    )),
    (Mood.SAD, (
        "sad", "depressed", "down", "upset", "disappointed", "heartbroken", "crying", "tears",
        "lonely", "empty", "loss", "grief", "miss", "hurt", "pain",
    )),
    (Mood.ANXIOUS, (
        "anxious", "worried", "nervous", "stress", "panic", "overwhelmed", "scared", "fear",
        "tension", "restless", "uncertain", "doubt", "pressure", "worry",
    )),
)


@dataclass(frozen=True)
class MoodKeywords:
    """Keyword tables for the classifier.

    ``categories`` is an ordered tuple of ``(mood, keywords)`` pairs; when two
    categories score the same, the one declared first wins.
    """

    crisis: Tuple[str, ...] = CRISIS_KEYWORDS
    categories: Tuple[Tuple[Mood, Tuple[str, ...]], ...] = MOOD_KEYWORDS

    def __post_init__(self) -> None:
        for mood, _keywords in self.categories:
            if mood in (Mood.CRISIS, Mood.NEUTRAL):
                raise ValueError(f"{mood.value} cannot be scored by keywords")


DEFAULT_KEYWORDS = MoodKeywords()


@dataclass(frozen=True)
class ClassificationResult:
    mood: Mood
    confidence: float
    is_crisis: bool

    def to_dict(self) -> dict:
        return {
            "mood": self.mood.value,
            "confidence": self.confidence,
            "is_crisis": self.is_crisis,
        }


def _compile_word_patterns(keywords: Tuple[str, ...]) -> Tuple[Pattern[str], ...]:
    return tuple(re.compile(rf"\b{re.escape(keyword.lower())}\b") for keyword in keywords)


@dataclass(frozen=True)
class MoodClassifier:
    keywords: MoodKeywords = DEFAULT_KEYWORDS
    _patterns: Tuple[Tuple[Mood, Tuple[Pattern[str], ...]], ...] = field(
        init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        patterns = tuple(
            (mood, _compile_word_patterns(words)) for mood, words in self.keywords.categories
        )
        object.__setattr__(self, "_patterns", patterns)

    def classify(self, text: str) -> ClassificationResult:
        if not isinstance(text, str):
            raise InvalidInputError(f"Journal text must be a string, got {type(text).__name__}")
        if not text.strip():
            raise InvalidInputError("Journal text cannot be empty")
        try:
            text.encode("utf-8")
        except UnicodeEncodeError as exc:
            raise InvalidInputError("Journal text is not valid text") from exc

        lowered = text.lower()
        if self.is_crisis_text(lowered):
            return ClassificationResult(mood=Mood.CRISIS, confidence=CRISIS_CONFIDENCE, is_crisis=True)

        scores = self.score(lowered)
        best_mood = None
        best_score = 0
        for mood, score in scores.items():
            if score > best_score:
                best_mood = mood
                best_score = score
        if best_mood is None:
            return ClassificationResult(mood=Mood.NEUTRAL, confidence=NEUTRAL_CONFIDENCE, is_crisis=False)

        word_count = len(lowered.split())
        confidence = min(best_score / word_count * 10, 1.0)
        return ClassificationResult(mood=best_mood, confidence=confidence, is_crisis=False)

    def is_crisis_text(self, lowered: str) -> bool:
        return any(keyword.lower() in lowered for keyword in self.keywords.crisis)

    def score(self, lowered: str) -> Dict[Mood, int]:
        # dict keeps declaration order, which classify relies on for ties
        return {
            mood: sum(len(pattern.findall(lowered)) for pattern in patterns)
            for mood, patterns in self._patterns
        }


_default_classifier = MoodClassifier()


def classify(text: str) -> ClassificationResult:
    return _default_classifier.classify(text)


QUOTE_TAG_BY_MOOD = {
    Mood.HAPPY: QuoteTag.HAPPY,
    Mood.SAD: QuoteTag.SAD,
    Mood.CRISIS: QuoteTag.SAD,
    Mood.ANXIOUS: QuoteTag.ANXIOUS,
    Mood.NEUTRAL: QuoteTag.GENERAL,
}


def quote_tag_for(mood: Union[Mood, str]) -> QuoteTag:
    try:
        return QUOTE_TAG_BY_MOOD[Mood(mood)]
    except ValueError as exc:
        raise InvalidInputError(f"Unknown mood: {mood!r}") from exc
