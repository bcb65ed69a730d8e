"""
Temporary Password Generator

Temporary passwords are issued on approval and handed to the student by the
administrator. Look-alike characters (I, O, l, 0, 1) are left out.
"""

import secrets

UPPERCASE = "ABCDEFGHJKLMNPQRSTUVWXYZ"
LOWERCASE = "abcdefghijkmnopqrstuvwxyz"
DIGITS = "23456789"
SYMBOLS = "@#$%!?"

CHARACTER_CLASSES = (UPPERCASE, LOWERCASE, DIGITS, SYMBOLS)
ALL_CHARACTERS = "".join(CHARACTER_CLASSES)

TEMPORARY_PASSWORD_LENGTH = 10

_random = secrets.SystemRandom()


def generate_temporary_password(length: int = TEMPORARY_PASSWORD_LENGTH) -> str:
    """
    Generate a temporary password with at least one character of each class.

    The guaranteed characters are shuffled in with the rest so their
    positions are not predictable.
    """
    if length < len(CHARACTER_CLASSES):
        raise ValueError(f"length must be at least {len(CHARACTER_CLASSES)}")

    chars = [secrets.choice(pool) for pool in CHARACTER_CLASSES]
    chars.extend(secrets.choice(ALL_CHARACTERS) for _ in range(length - len(chars)))
    _random.shuffle(chars)
    return "".join(chars)
