"""Tier password generation and strength rating."""

from __future__ import annotations

import re
import secrets
import string
from enum import Enum

from .types import AccessTier

LOWERCASE = string.ascii_lowercase
UPPERCASE = string.ascii_uppercase
DIGITS = string.digits
SYMBOLS = "!@#$%^&*()_+-=[]{}|;:,.<>?"

# Generated password length per tier; higher tiers get longer secrets.
GENERATED_LENGTHS: dict[AccessTier, int] = {
    AccessTier.ELEVATED1: 8,
    AccessTier.ELEVATED2: 10,
    AccessTier.ELEVATED3: 14,
}

_SYMBOL_RE = re.compile(r"[!@#$%^&*()_+\-=\[\]{}|;:,.<>?]")


class CredentialStrength(Enum):
    EMPTY = "empty"
    VERY_WEAK = "very_weak"
    WEAK = "weak"
    MEDIUM = "medium"
    STRONG = "strong"
    VERY_STRONG = "very_strong"


def generate_credential(length: int = 12) -> str:
    """Generate a random password with every character class present.

    Raises:
        ValueError: If ``length`` is below 4
    """
    if length < 4:
        raise ValueError("length must be at least 4")
    alphabet = LOWERCASE + UPPERCASE + DIGITS + SYMBOLS
    chars = [
        secrets.choice(LOWERCASE),
        secrets.choice(UPPERCASE),
        secrets.choice(DIGITS),
        secrets.choice(SYMBOLS),
    ]
    chars.extend(secrets.choice(alphabet) for _ in range(length - 4))
    secrets.SystemRandom().shuffle(chars)
    return "".join(chars)


def generate_for_tier(tier: AccessTier) -> str:
    """Generate a password sized for ``tier``."""
    try:
        return generate_credential(GENERATED_LENGTHS[tier])
    except KeyError:
        raise ValueError("BASE tier has no credential") from None


def credential_strength(value: str | None) -> CredentialStrength:
    """Rate a password by length and number of character classes used."""
    if not value:
        return CredentialStrength.EMPTY

    classes = sum(
        [
            bool(re.search(r"[a-z]", value)),
            bool(re.search(r"[A-Z]", value)),
            bool(re.search(r"\d", value)),
            bool(_SYMBOL_RE.search(value)),
        ]
    )
    length = len(value)
    if length < 6:
        return CredentialStrength.VERY_WEAK
    if length < 8 or classes < 2:
        return CredentialStrength.WEAK
    if length < 10 or classes < 3:
        return CredentialStrength.MEDIUM
    if length < 12 or classes < 4:
        return CredentialStrength.STRONG
    return CredentialStrength.VERY_STRONG
