"""Deterministic element generation for a pair of element names.

Rule of thumb:
- The result depends only on the canonical pair key and the tables below.
- Changing any table (or its order) changes the result of every pair that
  has not been discovered yet, so the tables are append-never.
"""

from dataclasses import dataclass

from craft_server.domain.pair_key import canonicalize


@dataclass(frozen=True)
class GeneratedElement:
    name: str
    emoji: str


ADJECTIVES = [
    "Burning", "Frozen", "Bright", "Dark", "Soft", "Sharp", "Hot", "Cold",
    "Wet", "Dry", "Light", "Heavy", "Smooth", "Rough", "Sweet", "Bitter",
    "Shimmering", "Ancient", "New", "Wild", "Calm", "Fierce", "Gentle", "Mighty",
    "Tiny", "Giant", "Sparkling", "Dim", "Clear", "Murky", "Pure", "Mixed",
]

NOUNS = [
    "Storm", "Mist", "Crystal", "Dust", "Powder", "Essence", "Force", "Wave",
    "Particle", "Cloud", "Spark", "Breeze", "Glow", "Surge", "Swirl", "Current",
    "Burst", "Bloom", "Garden", "Peak", "Canyon", "Meadow", "Forest", "Ocean",
    "River", "Mountain", "Valley", "Flame", "Frost", "Thunder", "Lightning",
    "Rainbow", "Prism", "Echo", "Pulse", "Tide", "Whirlwind", "Ember", "Ash",
]

NOUN_TO_EMOJI = {
    "Storm": "⛈️",
    "Mist": "💨",
    "Crystal": "💎",
    "Dust": "🌪️",
    "Powder": "💫",
    "Essence": "✨",
    "Force": "⚡",
    "Wave": "🌊",
    "Particle": "💫",
    "Cloud": "☁️",
    "Spark": "✨",
    "Breeze": "💨",
    "Glow": "✨",
    "Surge": "🌊",
    "Swirl": "🌀",
    "Current": "🌊",
    "Burst": "✨",
    "Bloom": "🌸",
    "Garden": "🌳",
    "Peak": "🏔️",
    "Canyon": "⛰️",
    "Meadow": "🌾",
    "Forest": "🌲",
    "Ocean": "🌊",
    "River": "🌊",
    "Mountain": "🏔️",
    "Valley": "🏜️",
    "Flame": "🔥",
    "Frost": "❄️",
    "Thunder": "⛈️",
    "Lightning": "⚡",
    "Rainbow": "🌈",
    "Prism": "🌈",
    "Echo": "🔊",
    "Pulse": "💫",
    "Tide": "🌊",
    "Whirlwind": "🌀",
    "Ember": "🔥",
    "Ash": "🟫",
}

DEFAULT_EMOJI = NOUN_TO_EMOJI["Crystal"]

# Keyed by canonical pair key, so each entry covers both orders.
MAGIC_COMBINATIONS = {
    "fire_water": GeneratedElement("Steam", "💨"),
    "earth_fire": GeneratedElement("Lava", "🌋"),
    "earth_water": GeneratedElement("Mud", "🟫"),
    "fire_wind": GeneratedElement("Smoke", "💨"),
    "earth_wind": GeneratedElement("Dust", "🌪️"),
    "water_wind": GeneratedElement("Wave", "🌊"),
}

_UINT32_MASK = 0xFFFFFFFF


def _code_unit(char: str) -> int:
    """First UTF-16 code unit of a character (high surrogate for astral chars)."""
    code_point = ord(char)
    if code_point > 0xFFFF:
        return 0xD800 + ((code_point - 0x10000) >> 10)
    return code_point


def pair_hash(key: str) -> int:
    """32-bit signed polynomial rolling hash: h = h * 31 + code.

    Wraps with two's-complement semantics at every step.

    Args:
        key (str): Canonical pair key

    Returns:
        int: Hash in [-2**31, 2**31 - 1]
    """
    value = 0
    for char in key:
        value = (value * 31 + _code_unit(char)) & _UINT32_MASK
    if value & 0x80000000:
        value -= 0x100000000
    return value


def element_from_hash(hash_value: int) -> GeneratedElement:
    """Pick adjective, noun and emoji for a hash value.

    abs(-2**31) is 2**31 here; the shifted indices stay in range because
    Python ints do not overflow.
    """
    magnitude = abs(hash_value)
    adjective = ADJECTIVES[magnitude % len(ADJECTIVES)]
    noun = NOUNS[(magnitude >> 8) % len(NOUNS)]
    emoji = NOUN_TO_EMOJI.get(noun, DEFAULT_EMOJI)
    return GeneratedElement(name=f"{adjective} {noun}", emoji=emoji)


def generate(name1: str, name2: str) -> GeneratedElement:
    """Generate the result of combining two elements.

    Magic combinations take precedence over the hash fallback.

    Args:
        name1 (str): First element name
        name2 (str): Second element name

    Returns:
        GeneratedElement: Name and emoji of the result, the same for either order
    """
    key = canonicalize(name1, name2)
    magic = MAGIC_COMBINATIONS.get(key)
    if magic is not None:
        return magic
    return element_from_hash(pair_hash(key))
