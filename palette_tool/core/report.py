"""Report builder — text and JSON output for palette-tool results."""

import json
from typing import Any

from palette_tool.core.types import Report


def format_text(report: Report) -> str:
    """Format report as human-readable text."""
    lines = []
    dim = f'{report.image_width}×{report.image_height}'
    lines.append(f'palette-tool: {report.image_path} ({dim})')
    lines.append('')

    for tech_name, tech_data in report.techniques.items():
        lines.append(f'── {tech_name}')
        if tech_name == 'palette' and 'colours' in tech_data:
            lines.append(f'  colours: {" ".join(tech_data["colours"])}')
            if tech_data.get('fallback'):
                lines.append(f'  fallback: {tech_data.get("reason")}')
        elif tech_name == 'buckets' and 'top' in tech_data:
            for b in tech_data['top']:
                lines.append(f'  {b["hex"]}  {b["count"]:>5}  {b["pct"]:.1f}%')
            lines.append(f'  opaque pixels: {tech_data.get("opaque_pixels", 0)}')
        elif tech_name == 'swatch' and 'file' in tech_data:
            lines.append(f'  saved: {tech_data["file"]}')
        else:
            for k, v in tech_data.items():
                lines.append(f'  {tech_name}.{k}: {v}')
        lines.append('')

    return '\n'.join(lines).rstrip('\n')


def format_json(report: Report) -> str:
    """Format report as JSON."""
    obj: dict[str, Any] = {
        'image': report.image_path,
        'dimensions': {'width': report.image_width, 'height': report.image_height},
        'max_colours': report.max_colours,
        'techniques': report.techniques,
    }
    return json.dumps(obj, indent=2)
