"""Tests for palette_tool.core.report and the technique registry."""

import json

import pytest
from palette_tool.core.report import format_json, format_text
from palette_tool.core.types import Report
from palette_tool.registry import discover, get


def _report() -> Report:
    report = Report(image_path='cover.png', image_width=320, image_height=200, max_colours=2)
    report.add('palette', {'colours': ['#c03030', '#141414'], 'fallback': False})
    return report


class TestFormatText:
    def test_header(self):
        assert format_text(_report()).splitlines()[0] == 'palette-tool: cover.png (320×200)'

    def test_palette_line(self):
        assert '  colours: #c03030 #141414' in format_text(_report())

    def test_fallback_reason_shown(self):
        report = Report(image_path='x.png')
        report.add('palette', {'colours': ['#1a1a1a'], 'fallback': True, 'reason': 'load-failed'})
        assert '  fallback: load-failed' in format_text(report)

    def test_buckets_lines(self):
        report = _report()
        report.add(
            'buckets',
            {'top': [{'hex': '#c03030', 'rgb': [192, 48, 48], 'count': 4096, 'pct': 100.0}], 'opaque_pixels': 4096},
        )
        text = format_text(report)
        assert '  #c03030   4096  100.0%' in text
        assert '  opaque pixels: 4096' in text

    def test_generic_fallback(self):
        report = Report()
        report.add('buckets', {'error': 'denied'})
        assert '  buckets.error: denied' in format_text(report)


class TestFormatJson:
    def test_structure(self):
        parsed = json.loads(format_json(_report()))
        assert parsed['image'] == 'cover.png'
        assert parsed['max_colours'] == 2
        assert parsed['techniques']['palette']['colours'] == ['#c03030', '#141414']


class TestRegistry:
    def test_discovers_all_techniques(self):
        assert set(discover()) == {'all', 'buckets', 'palette', 'swatch'}

    def test_unknown_technique(self):
        with pytest.raises(KeyError, match='Unknown technique'):
            get('census')
