import secrets
from typing import Protocol

URL_SAFE_CHARS = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz"
BASE = len(URL_SAFE_CHARS)
DEFAULT_LENGTH = 6


def encode(number: int, base: int = BASE) -> str:
    """Encode an integer to a given base string."""

    if number == 0:
        return URL_SAFE_CHARS[0]

    encoding = ""
    while number:
        number, remainder = divmod(number, base)
        encoding = URL_SAFE_CHARS[remainder] + encoding
    return encoding


class SlugGenerator(Protocol):
    def generate(self) -> str: ...


class RandomSlugGenerator:
    """Draw fixed-length base62 ids from the OS CSPRNG."""

    def __init__(self, length: int = DEFAULT_LENGTH):
        if length < 1:
            raise ValueError(f"Slug length must be positive, got {length}")
        self.length = length
        self.space = BASE**length

    def generate(self) -> str:
        encoded = encode(secrets.randbelow(self.space))
        return encoded.rjust(self.length, URL_SAFE_CHARS[0])
