"""Loadable image handle and the default Pillow pixel sampler.

ImageHandle behaves like a browser image element: it has a source locator,
a `complete` flag, and fires exactly one of its load / error notifications
once decoding finishes. Callbacks registered after the outcome is known are
not called; check `complete` and `failed` first. `off_load` / `off_error`
withdraw a callback that is no longer wanted.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable

import numpy as np
from loguru import logger
from PIL import Image

from palette_tool.core.types import AccessFault


class ImageHandle:
    """An image that may or may not be decoded yet."""

    def __init__(self, src: str = ''):
        self.src = src
        self.image: Image.Image | None = None
        self.error: Exception | None = None
        self._complete = False
        self._load_callbacks: list[Callable[[], None]] = []
        self._error_callbacks: list[Callable[[], None]] = []

    @classmethod
    def from_image(cls, image: Image.Image, src: str = '<memory>') -> ImageHandle:
        """Wrap an already-decoded PIL image."""
        handle = cls(src)
        handle.image = image
        handle._complete = True
        return handle

    @classmethod
    def open(cls, path: str) -> ImageHandle:
        """Create a handle for `path` and decode it immediately."""
        handle = cls(path)
        handle.load_sync()
        return handle

    @property
    def complete(self) -> bool:
        return self._complete

    @property
    def failed(self) -> bool:
        return self._complete and self.image is None

    @property
    def width(self) -> int:
        return self.image.width if self.image is not None else 0

    @property
    def height(self) -> int:
        return self.image.height if self.image is not None else 0

    def on_load(self, callback: Callable[[], None]) -> None:
        self._load_callbacks.append(callback)

    def on_error(self, callback: Callable[[], None]) -> None:
        self._error_callbacks.append(callback)

    def off_load(self, callback: Callable[[], None]) -> None:
        if callback in self._load_callbacks:
            self._load_callbacks.remove(callback)

    def off_error(self, callback: Callable[[], None]) -> None:
        if callback in self._error_callbacks:
            self._error_callbacks.remove(callback)

    def _decode(self) -> Image.Image:
        img = Image.open(self.src)
        img.load()
        return img

    def _finish(self, image: Image.Image | None, error: Exception | None) -> None:
        if self._complete:
            return
        self.image = image
        self.error = error
        self._complete = True
        callbacks = self._error_callbacks if image is None else self._load_callbacks
        self._load_callbacks = []
        self._error_callbacks = []
        for cb in callbacks:
            cb()

    def load_sync(self) -> None:
        """Decode on the calling thread, then fire load or error."""
        if self._complete:
            return
        try:
            image = self._decode()
        except (OSError, ValueError, Image.DecompressionBombError) as e:
            logger.debug('Failed to load {}: {}', self.src, e)
            self._finish(None, e)
            return
        self._finish(image, None)

    async def load(self) -> None:
        """Decode on a worker thread; notifications fire on the loop thread."""
        if self._complete:
            return
        try:
            image = await asyncio.to_thread(self._decode)
        except (OSError, ValueError, Image.DecompressionBombError) as e:
            logger.debug('Failed to load {}: {}', self.src, e)
            self._finish(None, e)
            return
        self._finish(image, None)


class PillowSampler:
    """Downsample an ImageHandle into an RGBA buffer with Pillow."""

    def __init__(self, resample: Image.Resampling = Image.Resampling.BILINEAR):
        self.resample = resample

    def sample(self, image: ImageHandle, width: int, height: int) -> np.ndarray:
        pil = getattr(image, 'image', None)
        if pil is None:
            raise AccessFault(f'no decoded pixels for {image.src!r}')
        try:
            rgba = pil.convert('RGBA').resize((width, height), self.resample)
        except (OSError, ValueError) as e:
            raise AccessFault(f'cannot read pixels of {image.src!r}: {e}') from e
        return np.asarray(rgba, dtype=np.uint8).reshape(height, width, 4)
