"""Color argument parsing: ``#rrggbb`` hex codes or Apple crayon names."""

from __future__ import annotations

import re

HEX_COLOR = re.compile(r"^#[0-9A-Fa-f]{6}$")

# The classic Mac OS crayon picker palette.
APPLE_CRAYON_COLORS: dict[str, str] = {
    "licorice": "#000000",
    "lead": "#1e1e1e",
    "tungsten": "#3a3a3a",
    "iron": "#545453",
    "steel": "#6e6e6e",
    "tin": "#878687",
    "nickel": "#888787",
    "aluminum": "#a09fa0",
    "magnesium": "#b8b8b8",
    "silver": "#d0d0d0",
    "mercury": "#e8e8e8",
    "snow": "#ffffff",
    "cayenne": "#891100",
    "mocha": "#894800",
    "asparagus": "#888501",
    "fern": "#458401",
    "clover": "#028401",
    "moss": "#018448",
    "teal": "#008688",
    "ocean": "#004a88",
    "midnight": "#001888",
    "eggplant": "#491a88",
    "plum": "#891e88",
    "maroon": "#891648",
    "maraschino": "#ff2101",
    "tangerine": "#ff8802",
    "lemon": "#fffa03",
    "lime": "#83f902",
    "spring": "#05f802",
    "sea foam": "#03f987",
    "turquoise": "#00fdff",
    "aqua": "#008cff",
    "blueberry": "#002eff",
    "grape": "#8931ff",
    "magenta": "#ff39ff",
    "strawberry": "#ff2987",
    "salmon": "#ff726e",
    "cantaloupe": "#ffce6e",
    "banana": "#fffb6d",
    "honeydew": "#cefa6e",
    "flora": "#68f96e",
    "spindrift": "#68fbd0",
    "ice": "#68fdff",
    "sky": "#6acfff",
    "orchid": "#6e76ff",
    "lavender": "#d278ff",
    "bubblegum": "#ff7aff",
    "carnation": "#ff7fd3",
}

_ALIASES = {"seafoam": "sea foam", "sea-foam": "sea foam"}

COLOR_NAMES = ", ".join(APPLE_CRAYON_COLORS)


def normalize_color(value: str) -> str | None:
    """Return a lower-case ``#rrggbb`` for *value*, or ``None`` if unrecognised."""
    if not isinstance(value, str):
        return None
    if HEX_COLOR.match(value):
        return value.lower()
    name = value.strip().lower()
    name = _ALIASES.get(name, name)
    return APPLE_CRAYON_COLORS.get(name)


def describe_color(value: str, hex_color: str) -> str:
    """Human-readable form used in tool confirmations: ``maraschino (#ff2101)``."""
    if HEX_COLOR.match(value):
        return hex_color
    return f"{value} ({hex_color})"
