import math

from contentcheck.settings import settings


def calculate_reading_time(text: str, words_per_minute: int | None = None) -> str:
    words = text.split()
    wpm = words_per_minute or settings.WORDS_PER_MINUTE
    minutes = math.ceil(len(words) / wpm) or 1
    return f"{minutes} min"
