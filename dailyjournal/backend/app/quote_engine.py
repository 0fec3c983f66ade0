from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol, Sequence, TypeVar

from .sentiment_engine import QuoteTag

T = TypeVar("T")


class RandomSource(Protocol):
    def choice(self, seq: Sequence[T]) -> T:
        ...


@dataclass(frozen=True)
class Quote:
    id: int
    text: str
    tag: QuoteTag
    author: Optional[str] = None


def select_quote(candidates: Sequence[Quote], rng: RandomSource) -> Optional[Quote]:
    """Pick one quote uniformly at random with the caller's ``rng``.

    An empty candidate list is a normal outcome (the entry simply has no quote)
    and returns ``None``.
    """
    if not candidates:
        return None
    return rng.choice(list(candidates))


SEED_QUOTES = [
    {"text": "Gratitude turns what we have into enough, and more.", "author": "Melody Beattie", "tag": "happy"},
    {"text": "The best time to plant a tree was 20 years ago. The second best time is now.", "author": "Chinese Proverb", "tag": "happy"},
    {"text": "Happiness is not something ready made. It comes from your own actions.", "author": "Dalai Lama", "tag": "happy"},
    {"text": "Joy is not in things; it is in us.", "author": "Richard Wagner", "tag": "happy"},
    {"text": "The secret of being happy is accepting where you are in life and making the most out of everyday.", "author": "Unknown", "tag": "happy"},
    {"text": "Happiness is a choice, not a result. Nothing will make you happy until you choose to be happy.", "author": "Ralph Marston", "tag": "happy"},
    {"text": "Count your age by friends, not years. Count your life by smiles, not tears.", "author": "John Lennon", "tag": "happy"},
    {"text": "The happiest people don't have the best of everything, they just make the best of everything.", "author": "Unknown", "tag": "happy"},
    {"text": "Every moment is a fresh beginning.", "author": "T.S. Eliot", "tag": "sad"},
    {"text": "The wound is the place where the Light enters you.", "author": "Rumi", "tag": "sad"},
    {"text": "What lies behind us and what lies before us are tiny matters compared to what lies within us.", "author": "Ralph Waldo Emerson", "tag": "sad"},
    {"text": "The darkest nights produce the brightest stars.", "author": "John Green", "tag": "sad"},
    {"text": "Sometimes you need to sit lonely on the floor in a quiet room in order to hear your own voice and not let it get drowned out by others.", "author": "Charlotte Eriksson", "tag": "sad"},
    {"text": "Pain is inevitable. Suffering is optional.", "author": "Haruki Murakami", "tag": "sad"},
    {"text": "The sun will rise and we will try again.", "author": "Twenty One Pilots", "tag": "sad"},
    {"text": "You are allowed to feel messed up and inside out. It doesn't mean you're defective - it just means you're human.", "author": "David Mitchell", "tag": "sad"},
    {"text": "This too shall pass. It might pass like a kidney stone, but it will pass.", "author": "Unknown", "tag": "sad"},
    {"text": "You have been assigned this mountain to show others it can be moved.", "author": "Mel Robbins", "tag": "anxious"},
    {"text": "Anxiety is the dizziness of freedom.", "author": "Søren Kierkegaard", "tag": "anxious"},
    {"text": "Nothing can harm you as much as your own thoughts unguarded.", "author": "Buddha", "tag": "anxious"},
    {"text": "You are braver than you believe, stronger than you seem, and smarter than you think.", "author": "A.A. Milne", "tag": "anxious"},
    {"text": "Breathe in peace, breathe out stress.", "author": "Unknown", "tag": "anxious"},
    {"text": "Worry does not empty tomorrow of its sorrow, it empties today of its strength.", "author": "Corrie ten Boom", "tag": "anxious"},
    {"text": "You can't control everything. Sometimes you just need to relax and have faith that things will work out.", "author": "Kody Keplinger", "tag": "anxious"},
    {"text": "Take deep breaths and remember: you've survived 100% of your bad days so far.", "author": "Unknown", "tag": "anxious"},
    {"text": "Anxiety is not your enemy. It's your body's way of telling you to slow down and pay attention.", "author": "Unknown", "tag": "anxious"},
    {"text": "Progress, not perfection.", "author": "Anonymous", "tag": "general"},
    {"text": "You are braver than you believe, stronger than you seem, and smarter than you think.", "author": "A.A. Milne", "tag": "general"},
    {"text": "The only way out is through.", "author": "Robert Frost", "tag": "general"},
    {"text": "Be yourself; everyone else is already taken.", "author": "Oscar Wilde", "tag": "general"},
    {"text": "Life is 10% what happens to you and 90% how you react to it.", "author": "Charles R. Swindoll", "tag": "general"},
    {"text": "The journey of a thousand miles begins with one step.", "author": "Lao Tzu", "tag": "general"},
    {"text": "What doesn't kill you makes you stronger.", "author": "Friedrich Nietzsche", "tag": "general"},
    {"text": "Yesterday is history, tomorrow is a mystery, today is a gift of God, which is why we call it the present.", "author": "Bill Keane", "tag": "general"},
    {"text": "It is during our darkest moments that we must focus to see the light.", "author": "Aristotle", "tag": "general"},
    {"text": "Believe you can and you're halfway there.", "author": "Theodore Roosevelt", "tag": "general"},
]
