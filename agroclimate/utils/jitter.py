"""
Seeded, reproducible jitter for the rule-based simulations.

The forecaster and predictor add small bounded noise so that consecutive
months are not perfectly flat. The noise is drawn from a numpy Generator
whose seed is derived from the call inputs, so identical inputs always
produce identical output.
"""
import hashlib
import numpy as np


def seed_from(*parts: object) -> int:
    """
    Derive a stable 64-bit seed from arbitrary key parts.

    Python's built-in hash() is salted per process, so a digest is used instead.

    Args:
        *parts: Values identifying the draw (location, date, index, ...)

    Returns:
        Non-negative integer seed
    """
    key = "|".join(str(part) for part in parts).encode("utf-8")
    digest = hashlib.sha256(key).digest()
    return int.from_bytes(digest[:8], "big")


def seeded_rng(*parts: object) -> np.random.Generator:
    """Create a numpy Generator seeded from the given key parts."""
    return np.random.default_rng(seed_from(*parts))


def bounded_noise(rng: np.random.Generator, low: float, high: float) -> float:
    """Draw a single uniform value in [low, high)."""
    return float(rng.uniform(low, high))
