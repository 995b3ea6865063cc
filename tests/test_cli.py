"""CLI tests: run palette-tool main() against small generated images."""

import json
import sys
from pathlib import Path

import pytest
from loguru import logger
from palette_tool.__main__ import main
from PIL import Image


@pytest.fixture(autouse=True)
def _isolated(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    # .git stops the .env walk-up at tmp_path
    (tmp_path / '.git').mkdir()
    monkeypatch.chdir(tmp_path)
    for name in ('PALETTE_MAX_COLOURS', 'PALETTE_LOG_LEVEL', 'PALETTE_LOAD_TIMEOUT'):
        monkeypatch.delenv(name, raising=False)
    yield
    # main() points loguru at the captured stderr; drop that sink
    logger.remove()


@pytest.fixture
def red_png(tmp_path: Path) -> Path:
    path = tmp_path / 'red.png'
    Image.new('RGB', (80, 60), (200, 50, 50)).save(path)
    return path


def _run(monkeypatch: pytest.MonkeyPatch, *argv: str) -> None:
    monkeypatch.setattr(sys, 'argv', ['palette-tool', *argv])
    main()


class TestPaletteCommand:
    def test_text_output(self, red_png: Path, tmp_path: Path, monkeypatch, capsys) -> None:
        _run(monkeypatch, 'palette', str(tmp_path / 'out'), str(red_png))
        out = capsys.readouterr().out
        assert '(80×60)' in out
        assert 'colours: #c03030 #141414 #141414 #141414' in out

    def test_json_output(self, red_png: Path, tmp_path: Path, monkeypatch, capsys) -> None:
        _run(monkeypatch, 'palette', str(tmp_path / 'out'), str(red_png), '-n', '2', '--json')
        parsed = json.loads(capsys.readouterr().out)
        assert parsed['max_colours'] == 2
        assert parsed['dimensions'] == {'width': 80, 'height': 60}
        assert parsed['techniques']['palette'] == {'colours': ['#c03030', '#141414'], 'fallback': False}

    def test_env_sets_default_size(self, red_png: Path, tmp_path: Path, monkeypatch, capsys) -> None:
        monkeypatch.setenv('PALETTE_MAX_COLOURS', '1')
        _run(monkeypatch, 'palette', str(tmp_path / 'out'), str(red_png), '-j')
        parsed = json.loads(capsys.readouterr().out)
        assert parsed['techniques']['palette']['colours'] == ['#c03030']

    def test_undecodable_image_falls_back(self, tmp_path: Path, monkeypatch, capsys) -> None:
        bad = tmp_path / 'bad.png'
        bad.write_bytes(b'nope')
        _run(monkeypatch, 'palette', str(tmp_path / 'out'), str(bad), '-j')
        data = json.loads(capsys.readouterr().out)['techniques']['palette']
        assert data['colours'] == ['#1a1a1a', '#2a2a2a', '#3a3a3a', '#000000']
        assert data['reason'] == 'load-failed'


class TestOtherCommands:
    def test_buckets(self, red_png: Path, tmp_path: Path, monkeypatch, capsys) -> None:
        _run(monkeypatch, 'buckets', str(tmp_path / 'out'), str(red_png), '-j')
        data = json.loads(capsys.readouterr().out)['techniques']['buckets']
        assert data['buckets'] == 1
        assert data['top'] == [{'hex': '#c03030', 'rgb': [192, 48, 48], 'count': 4096, 'pct': 100.0}]

    def test_all_writes_swatch(self, red_png: Path, tmp_path: Path, monkeypatch, capsys) -> None:
        out_dir = tmp_path / 'out'
        _run(monkeypatch, 'all', str(out_dir), str(red_png), '-n', '3', '-j')
        techniques = json.loads(capsys.readouterr().out)['techniques']
        assert set(techniques) == {'palette', 'buckets', 'swatch'}
        swatch = Image.open(out_dir / 'red_palette.png')
        assert swatch.size == (192, 64)
        assert swatch.convert('RGB').getpixel((10, 10)) == (192, 48, 48)
        assert swatch.convert('RGB').getpixel((100, 10)) == (20, 20, 20)

    def test_help_for_technique(self, monkeypatch, capsys) -> None:
        _run(monkeypatch, 'help', 'buckets')
        assert 'quantized colour buckets' in capsys.readouterr().out

    def test_help_lists_techniques(self, monkeypatch, capsys) -> None:
        _run(monkeypatch, 'help')
        out = capsys.readouterr().out
        for name in ('all', 'buckets', 'palette', 'swatch'):
            assert name in out


class TestErrors:
    def test_missing_image(self, tmp_path: Path, monkeypatch, capsys) -> None:
        with pytest.raises(SystemExit) as exc:
            _run(monkeypatch, 'palette', str(tmp_path), str(tmp_path / 'nope.png'))
        assert exc.value.code == 1
        assert 'image not found' in capsys.readouterr().err

    def test_zero_colours_rejected(self, red_png: Path, tmp_path: Path, monkeypatch) -> None:
        with pytest.raises(SystemExit) as exc:
            _run(monkeypatch, 'palette', str(tmp_path), str(red_png), '-n', '0')
        assert exc.value.code == 2

    def test_bad_setting(self, red_png: Path, tmp_path: Path, monkeypatch, capsys) -> None:
        monkeypatch.setenv('PALETTE_LOG_LEVEL', 'LOUD')
        with pytest.raises(SystemExit) as exc:
            _run(monkeypatch, 'palette', str(tmp_path), str(red_png))
        assert exc.value.code == 1
        assert 'PALETTE_LOG_LEVEL' in capsys.readouterr().err

    def test_unknown_help_topic(self, monkeypatch, capsys) -> None:
        with pytest.raises(SystemExit):
            _run(monkeypatch, 'help', 'kmeans')
        assert 'Unknown technique' in capsys.readouterr().err
