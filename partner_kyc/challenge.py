# partner_kyc/challenge.py
from __future__ import annotations
import random
import secrets

import fitz

from .utils import CHALLENGE_ALPHABET, CHALLENGE_LENGTH

IMAGE_WIDTH: int = 180
IMAGE_HEIGHT: int = 50


def generate_challenge_code(length: int = CHALLENGE_LENGTH) -> str:
    return ''.join(secrets.choice(CHALLENGE_ALPHABET) for _ in range(length))

def verify_challenge(expected: str | None, provided: str | None) -> bool:
    """Exact, case-sensitive match. Without a bound code nothing verifies."""
    if not expected or provided is None:
        return False
    return secrets.compare_digest(expected.encode('utf-8'), provided.encode('utf-8'))

def _random_color(rng: random.Random) -> tuple[float, float, float]:
    return (rng.random(), rng.random(), rng.random())

def render_challenge_png(code: str, seed: int | None = None) -> bytes:
    """
    Draws the code onto a noisy 180x50 canvas (dots, lines, each character
    slightly rotated) and returns PNG bytes for an <img> tag.
    """
    rng = random.Random(seed)
    doc = fitz.open()
    try:
        page = doc.new_page(width=IMAGE_WIDTH, height=IMAGE_HEIGHT)
        page.draw_rect(page.rect, color=None, fill=(0.953, 0.957, 0.965))

        for _ in range(50):
            center = fitz.Point(rng.uniform(0, IMAGE_WIDTH), rng.uniform(0, IMAGE_HEIGHT))
            color = _random_color(rng)
            page.draw_circle(center, 1, color=color, fill=color)
        for _ in range(4):
            start = fitz.Point(rng.uniform(0, IMAGE_WIDTH), rng.uniform(0, IMAGE_HEIGHT))
            end = fitz.Point(rng.uniform(0, IMAGE_WIDTH), rng.uniform(0, IMAGE_HEIGHT))
            page.draw_line(start, end, color=_random_color(rng), width=1)

        for i, char in enumerate(code):
            origin = fitz.Point(20 + i * 25, 33)
            tilt = fitz.Matrix(rng.uniform(-12, 12))
            page.insert_text(origin, char, fontname='hebo', fontsize=24,
                             color=(0.294, 0.333, 0.388), morph=(origin, tilt))

        pix = page.get_pixmap(matrix=fitz.Matrix(2, 2))
        return pix.tobytes('png')
    finally:
        doc.close()
