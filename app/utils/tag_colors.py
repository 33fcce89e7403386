"""
Tag color palette - fixed colors that read well on light and dark themes.

Each entry carries a 12% opacity rgba background and a hex text color.
"""
from typing import Dict, Tuple

TAG_PALETTE = [
    {'bg': 'rgba(100, 116, 139, 0.12)', 'text': '#64748B', 'label': 'Slate'},
    {'bg': 'rgba(220, 38, 38, 0.12)', 'text': '#DC2626', 'label': 'Red'},
    {'bg': 'rgba(234, 88, 12, 0.12)', 'text': '#EA580C', 'label': 'Orange'},
    {'bg': 'rgba(217, 119, 6, 0.12)', 'text': '#D97706', 'label': 'Amber'},
    {'bg': 'rgba(5, 150, 105, 0.12)', 'text': '#059669', 'label': 'Green'},
    {'bg': 'rgba(13, 148, 136, 0.12)', 'text': '#0D9488', 'label': 'Teal'},
    {'bg': 'rgba(37, 99, 235, 0.12)', 'text': '#2563EB', 'label': 'Blue'},
    {'bg': 'rgba(99, 102, 241, 0.12)', 'text': '#6366F1', 'label': 'Indigo'},
    {'bg': 'rgba(124, 58, 237, 0.12)', 'text': '#7C3AED', 'label': 'Purple'},
    {'bg': 'rgba(236, 72, 153, 0.12)', 'text': '#EC4899', 'label': 'Pink'},
    {'bg': 'rgba(244, 63, 94, 0.12)', 'text': '#F43F5E', 'label': 'Rose'},
    {'bg': 'rgba(20, 184, 166, 0.12)', 'text': '#14B8A6', 'label': 'Cyan'},
]


def hex_to_rgb(hex_color: str) -> Tuple[int, int, int]:
    """'#7C3AED' -> (124, 58, 237). Raises ValueError on malformed input."""
    value = hex_color.strip().lstrip('#')
    if len(value) != 6:
        raise ValueError(f"Invalid hex color: {hex_color!r}")
    return int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16)


def is_in_palette(hex_color: str) -> bool:
    lowered = hex_color.lower()
    return any(entry['text'].lower() == lowered for entry in TAG_PALETTE)


def nearest_palette_color(hex_color: str) -> str:
    """Palette text color closest to hex_color by RGB distance."""
    try:
        r, g, b = hex_to_rgb(hex_color)
    except ValueError:
        return TAG_PALETTE[0]['text']

    def distance(entry):
        pr, pg, pb = hex_to_rgb(entry['text'])
        return (pr - r) ** 2 + (pg - g) ** 2 + (pb - b) ** 2

    return min(TAG_PALETTE, key=distance)['text']


def get_tag_color(hex_color: str) -> Dict[str, str]:
    """
    Background/text pair for a tag color.

    Palette colors return their fixed entry; anything else gets an rgba
    background computed from the hex at 12% opacity.
    """
    for entry in TAG_PALETTE:
        if entry['text'].lower() == hex_color.lower():
            return {'bg': entry['bg'], 'text': entry['text']}
    r, g, b = hex_to_rgb(hex_color)
    return {'bg': f'rgba({r}, {g}, {b}, 0.12)', 'text': hex_color}
