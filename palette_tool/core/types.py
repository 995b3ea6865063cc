"""Shared types for palette-tool: candidates, capabilities, Technique, Report."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Protocol

import numpy as np


class AccessFault(Exception):
    """Pixel data could not be read from an image (restricted or undecodable)."""


class InvalidArgument(ValueError):
    """An extraction argument is outside its accepted range."""


@dataclass
class ColourCandidate:
    """A quantized colour bucket and the number of pixels that fell into it."""

    r: int
    g: int
    b: int
    count: int = 0

    @property
    def rgb(self) -> tuple[int, int, int]:
        return (self.r, self.g, self.b)


@dataclass
class PaletteResult:
    """Palette plus the diagnostics gathered while computing it."""

    colours: list[str]
    candidates: list[ColourCandidate] = field(default_factory=list)
    opaque_pixels: int = 0
    fallback: bool = False
    reason: str | None = None  # why the fallback was used


class ImageSource(Protocol):
    """Capabilities the extractor needs from a loadable image."""

    src: str

    @property
    def complete(self) -> bool: ...

    @property
    def failed(self) -> bool: ...

    def on_load(self, callback: Callable[[], None]) -> None: ...

    def on_error(self, callback: Callable[[], None]) -> None: ...

    def off_load(self, callback: Callable[[], None]) -> None: ...

    def off_error(self, callback: Callable[[], None]) -> None: ...


class PixelSampler(Protocol):
    """Renders an image into a (height, width, 4) uint8 RGBA buffer.

    Raises AccessFault when pixel access is not possible.
    """

    def sample(self, image: ImageSource, width: int, height: int) -> np.ndarray: ...


class Technique:
    """A self-registering CLI technique.

    Usage in a technique module:

        technique = Technique(name='palette', help='Extract a palette')

        @technique.run
        def run(image, report, args):
            ...
    """

    def __init__(self, name: str, help: str = ''):
        self.name = name
        self.help = help
        self._run_fn: Callable | None = None

    def run(self, fn: Callable) -> Callable:
        """Decorator to register the run function."""
        self._run_fn = fn
        return fn

    def execute(self, image: ImageSource, report: Report, args: Any) -> None:
        """Execute the technique's run function."""
        if self._run_fn is None:
            raise RuntimeError(f'Technique {self.name} has no run function')
        self._run_fn(image, report, args)


@dataclass
class Report:
    """Accumulates technique results for text/JSON output."""

    image_path: str = ''
    image_width: int = 0
    image_height: int = 0
    max_colours: int = 4
    techniques: dict[str, dict[str, Any]] = field(default_factory=dict)

    def add(self, technique_name: str, data: dict[str, Any]) -> None:
        """Add (or replace) results for a technique."""
        self.techniques[technique_name] = data
