"""Render the palette as a PNG swatch strip.

One square per colour, left to right in palette order. Reuses the
`palette` result if that technique already ran, otherwise extracts.
Saves to <tmp_dir>/<image stem>_palette.png.

Example:
    uv run palette-tool swatch ./tmp cover.png -n 6
"""

import os

from PIL import Image, ImageDraw

from palette_tool.core.extractor import extract_sync
from palette_tool.core.palette import hex_to_rgb
from palette_tool.core.types import ImageSource, Report, Technique

technique = Technique(
    name='swatch',
    help='Save the palette as a PNG strip in tmp_dir.',
)

SWATCH_SIZE = 64


def render_swatch(colours: list[str], size: int = SWATCH_SIZE) -> Image.Image:
    strip = Image.new('RGB', (size * len(colours), size))
    draw = ImageDraw.Draw(strip)
    for i, colour in enumerate(colours):
        draw.rectangle((i * size, 0, (i + 1) * size - 1, size - 1), fill=hex_to_rgb(colour))
    return strip


@technique.run
def run(image: ImageSource, report: Report, args) -> None:
    colours = report.techniques.get('palette', {}).get('colours')
    if colours is None:
        colours = extract_sync(image, report.max_colours, load_timeout=getattr(args, 'load_timeout', None)).colours

    os.makedirs(args.tmp_dir, exist_ok=True)
    stem = os.path.splitext(os.path.basename(image.src))[0] or 'image'
    path = os.path.join(args.tmp_dir, f'{stem}_palette.png')
    render_swatch(colours).save(path)
    report.add('swatch', {'file': path, 'colours': len(colours)})
