"""Show the ranked quantized colour buckets behind a palette.

Samples the image at 64x64, skips pixels with alpha below 128 and counts
pixels per quantized bucket (each channel snapped to a multiple of 24).

Output: top 10 buckets with pixel counts and percentage of opaque pixels.
Useful for seeing why a colour was, or was not, picked by `palette`.

Example:
    uv run palette-tool buckets ./tmp cover.png
"""

from palette_tool.core.extractor import count_buckets, sample_pixels
from palette_tool.core.image import PillowSampler
from palette_tool.core.palette import rgb_to_hex
from palette_tool.core.types import AccessFault, ImageSource, Report, Technique

technique = Technique(
    name='buckets',
    help='Ranked quantized colour buckets with pixel counts (top 10).',
)

TOP_N = 10


@technique.run
def run(image: ImageSource, report: Report, args) -> None:
    try:
        pixels = sample_pixels(image, PillowSampler())
    except AccessFault as e:
        report.add('buckets', {'error': str(e)})
        return

    candidates = count_buckets(pixels)
    total = sum(c.count for c in candidates)
    top = [
        {
            'hex': rgb_to_hex(c.r, c.g, c.b),
            'rgb': [c.r, c.g, c.b],
            'count': c.count,
            'pct': round(c.count / total * 100, 1),
        }
        for c in candidates[:TOP_N]
    ]
    report.add('buckets', {'top': top, 'buckets': len(candidates), 'opaque_pixels': total})
