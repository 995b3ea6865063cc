"""Extract the dominant palette of an image.

Samples the image at 64x64, quantizes colours to steps of 24, ranks
buckets by pixel count and keeps the most frequent buckets that are at
least 60 apart (Manhattan RGB distance). Pads with #141414 when the image
has fewer distinct colours than requested.

If the image cannot be read the fixed fallback palette is reported and
the reason is shown alongside it.

Example:
    uv run palette-tool palette ./tmp cover.png -n 5
"""

from palette_tool.core.extractor import extract_sync
from palette_tool.core.types import ImageSource, Report, Technique

technique = Technique(
    name='palette',
    help='Extract N dominant, mutually distinct colours as #rrggbb.',
)


@technique.run
def run(image: ImageSource, report: Report, args) -> None:
    result = extract_sync(image, report.max_colours, load_timeout=getattr(args, 'load_timeout', None))
    data: dict = {'colours': result.colours, 'fallback': result.fallback}
    if result.fallback:
        data['reason'] = result.reason
    report.add('palette', data)
