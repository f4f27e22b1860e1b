from __future__ import annotations

import random
from typing import Sequence


DEFAULT_WORDS_AR: list[str] = [
    "قطة", "كلب", "شمس", "قمر", "بيت", "سيارة", "شجرة", "طائر", "سمكة", "زهرة",
    "كتاب", "قلم", "مدرسة", "مستشفى", "طعام", "ماء", "نار", "جبل", "بحر", "صحراء",
    "عين", "أنف", "فم", "يد", "قدم", "رأس", "قلب", "دماغ", "ساعة", "هاتف",
    "حاسوب", "تلفزيون", "باب", "نافذة", "طاولة", "كرسي", "سرير", "مطبخ", "حمام", "حديقة",
]


def pick_word(
    words: Sequence[str] | None = None,
    rng: random.Random | None = None,
    exclude: str | None = None,
) -> str:
    pool = list(words or DEFAULT_WORDS_AR)
    # Never hand the same word to two consecutive turns.
    if exclude is not None and len(pool) > 1:
        pool = [w for w in pool if w != exclude] or pool
    return (rng or random).choice(pool)


def normalize_guess(text: str) -> str:
    return (text or "").strip().lower()
