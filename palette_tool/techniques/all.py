"""Run every technique, combine into a single report.

Runs palette first so swatch can reuse its colours, then the rest in
name order.

Example:
    uv run palette-tool all ./tmp cover.png
    uv run palette-tool all ./tmp cover.png -n 6 --json
"""

from palette_tool.core.types import ImageSource, Report, Technique

technique = Technique(
    name='all',
    help='Run every technique. Combine into a single report.',
)


@technique.run
def run(image: ImageSource, report: Report, args) -> None:
    from palette_tool.registry import all_techniques

    techniques = all_techniques()
    order = ['palette'] + sorted(n for n in techniques if n not in ('all', 'palette'))
    for name in order:
        techniques[name].execute(image, report, args)
