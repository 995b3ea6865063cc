"""Colour constants and small conversion helpers.

All channel arithmetic happens on plain Python ints or int32 numpy arrays so
that differences such as (0 - 200) never wrap the way uint8 would.
"""

import numpy as np

QUANT_STEP = 24  # bucket width per channel
DISTINCT_THRESHOLD = 60  # min Manhattan distance between picked colours
ALPHA_THRESHOLD = 128  # pixels below this alpha are background
SAMPLE_SIZE = 64  # working buffer is SAMPLE_SIZE x SAMPLE_SIZE

PAD_COLOUR: tuple[int, int, int] = (20, 20, 20)
FALLBACK_PALETTE: tuple[str, ...] = ('#1a1a1a', '#2a2a2a', '#3a3a3a', '#000000')


def clamp_channel(value: int) -> int:
    return min(255, max(0, int(value)))


def rgb_to_hex(r: int, g: int, b: int) -> str:
    """Encode as lowercase #rrggbb, clamping each channel to [0, 255]."""
    return '#' + ''.join(f'{clamp_channel(c):02x}' for c in (r, g, b))


def hex_to_rgb(hex_str: str) -> tuple[int, int, int]:
    """Decode #rrggbb or #rgb. Malformed input decodes to black."""
    h = hex_str.strip().lstrip('#')
    if len(h) == 3:
        h = ''.join(c * 2 for c in h)
    if len(h) != 6:
        return (0, 0, 0)
    try:
        return (int(h[0:2], 16), int(h[2:4], 16), int(h[4:6], 16))
    except ValueError:
        return (0, 0, 0)


def quantize(channels: np.ndarray) -> np.ndarray:
    """Snap each value to the nearest multiple of QUANT_STEP, halves rounding up.

    Top-of-range values can land above 255 (255 -> 264).
    """
    return (np.floor(channels.astype(np.float64) / QUANT_STEP + 0.5) * QUANT_STEP).astype(np.int32)


def manhattan_distance(a: tuple[int, int, int], b: tuple[int, int, int]) -> int:
    return abs(int(a[0]) - int(b[0])) + abs(int(a[1]) - int(b[1])) + abs(int(a[2]) - int(b[2]))
