"""Dominant palette extraction.

Samples the image into a 64x64 RGBA buffer, drops pixels with alpha below
128, snaps every channel to the nearest multiple of 24 and counts pixels per
bucket. Buckets are ranked by count (ties broken by bucket key, ascending)
and picked greedily: a bucket is kept only if its Manhattan RGB distance to
every bucket already kept is at least 60. Short palettes are padded with
#141414.

The public coroutine `extract` never raises for image problems. A missing
source, a failed load, restricted pixel access or any other fault yields the
fixed fallback palette instead. Only a bad `max_colours` raises.

Example:
    handle = ImageHandle('cover.png')
    pending = asyncio.ensure_future(extract(handle, 4))
    await handle.load()
    colours = await pending  # ['#c03030', '#141414', ...]
"""

import asyncio

import numpy as np
from loguru import logger

from palette_tool.core.image import PillowSampler
from palette_tool.core.palette import (
    ALPHA_THRESHOLD,
    DISTINCT_THRESHOLD,
    FALLBACK_PALETTE,
    PAD_COLOUR,
    SAMPLE_SIZE,
    manhattan_distance,
    quantize,
    rgb_to_hex,
)
from palette_tool.core.types import (
    AccessFault,
    ColourCandidate,
    ImageSource,
    InvalidArgument,
    PaletteResult,
    PixelSampler,
)

DEFAULT_MAX_COLOURS = 4


def _check_max_colours(max_colours) -> None:
    if isinstance(max_colours, bool) or not isinstance(max_colours, int):
        raise InvalidArgument(f'max_colours must be an int, got {type(max_colours).__name__}')
    if max_colours < 1:
        raise InvalidArgument(f'max_colours must be >= 1, got {max_colours}')


def fallback_palette(max_colours: int = DEFAULT_MAX_COLOURS) -> list[str]:
    """The fallback palette truncated, or padded with #141414, to max_colours."""
    colours = list(FALLBACK_PALETTE[:max_colours])
    while len(colours) < max_colours:
        colours.append(rgb_to_hex(*PAD_COLOUR))
    return colours


def count_buckets(pixels: np.ndarray) -> list[ColourCandidate]:
    """Quantize opaque RGBA pixels and rank buckets by frequency."""
    flat = pixels.reshape(-1, 4)
    opaque = flat[flat[:, 3] >= ALPHA_THRESHOLD]
    if len(opaque) == 0:
        return []

    buckets = quantize(opaque[:, :3])
    # np.unique returns keys in ascending lexical order, which the stable
    # sort below keeps as the tie-break.
    keys, counts = np.unique(buckets, axis=0, return_counts=True)
    order = np.argsort(-counts, kind='stable')
    return [
        ColourCandidate(int(keys[i][0]), int(keys[i][1]), int(keys[i][2]), int(counts[i]))
        for i in order
    ]


def select_distinct(candidates: list[ColourCandidate], max_colours: int) -> list[tuple[int, int, int]]:
    """Greedily keep candidates at least DISTINCT_THRESHOLD from every kept one."""
    picked: list[tuple[int, int, int]] = []
    for cand in candidates:
        if len(picked) >= max_colours:
            break
        if all(manhattan_distance(cand.rgb, existing) >= DISTINCT_THRESHOLD for existing in picked):
            picked.append(cand.rgb)
    return picked


def pad_colours(colours: list[tuple[int, int, int]], max_colours: int) -> list[tuple[int, int, int]]:
    padded = list(colours)
    while len(padded) < max_colours:
        padded.append(PAD_COLOUR)
    return padded


def sample_pixels(image_source: ImageSource, sampler: PixelSampler) -> np.ndarray:
    """Render the image into the SAMPLE_SIZE x SAMPLE_SIZE working buffer."""
    buf = np.asarray(sampler.sample(image_source, SAMPLE_SIZE, SAMPLE_SIZE), dtype=np.uint8)
    return buf.reshape(SAMPLE_SIZE, SAMPLE_SIZE, 4)


async def _wait_loaded(image_source: ImageSource, timeout: float | None) -> str | None:
    """Suspend until the image loads. Returns a fallback reason, or None when loaded."""
    if image_source.complete:
        return 'load-failed' if image_source.failed else None

    loop = asyncio.get_running_loop()
    done: asyncio.Future[bool] = loop.create_future()

    def _settle(ok: bool) -> None:
        if not done.done():
            done.set_result(ok)

    def _notify(ok: bool) -> None:
        # The loop may be gone if the caller already gave up on a timeout.
        if not loop.is_closed():
            loop.call_soon_threadsafe(_settle, ok)

    def on_loaded() -> None:
        _notify(True)

    def on_failed() -> None:
        _notify(False)

    image_source.on_load(on_loaded)
    image_source.on_error(on_failed)
    # The load may have finished on another thread before the callbacks were
    # registered, in which case they will never fire.
    if image_source.complete:
        _settle(not image_source.failed)

    try:
        ok = await asyncio.wait_for(done, timeout) if timeout is not None else await done
    except asyncio.TimeoutError:
        logger.warning('Image {} did not load within {}s', image_source.src, timeout)
        return 'load-timeout'
    finally:
        image_source.off_load(on_loaded)
        image_source.off_error(on_failed)
    return None if ok else 'load-failed'


def _fallback(max_colours: int, reason: str) -> PaletteResult:
    return PaletteResult(colours=fallback_palette(max_colours), fallback=True, reason=reason)


def _compute(image_source: ImageSource, max_colours: int, sampler: PixelSampler) -> PaletteResult:
    try:
        pixels = sample_pixels(image_source, sampler)
    except AccessFault as e:
        logger.warning('Could not sample pixels from {}: {}', image_source.src, e)
        return _fallback(max_colours, 'access-fault')

    candidates = count_buckets(pixels)
    picked = pad_colours(select_distinct(candidates, max_colours), max_colours)
    return PaletteResult(
        colours=[rgb_to_hex(*rgb) for rgb in picked],
        candidates=candidates,
        opaque_pixels=sum(c.count for c in candidates),
    )


async def extract_detailed(
    image_source: ImageSource | None,
    max_colours: int = DEFAULT_MAX_COLOURS,
    *,
    sampler: PixelSampler | None = None,
    load_timeout: float | None = None,
) -> PaletteResult:
    """Run the extraction pipeline and keep its diagnostics."""
    _check_max_colours(max_colours)

    if image_source is None or not getattr(image_source, 'src', ''):
        return _fallback(max_colours, 'no-source')

    reason = await _wait_loaded(image_source, load_timeout)
    if reason is not None:
        return _fallback(max_colours, reason)

    try:
        return _compute(image_source, max_colours, sampler or PillowSampler())
    except Exception:
        logger.exception('Colour extraction failed for {}', image_source.src)
        return _fallback(max_colours, 'error')


async def extract(
    image_source: ImageSource | None,
    max_colours: int = DEFAULT_MAX_COLOURS,
    *,
    sampler: PixelSampler | None = None,
    load_timeout: float | None = None,
) -> list[str]:
    """Return exactly max_colours '#rrggbb' strings for image_source."""
    result = await extract_detailed(image_source, max_colours, sampler=sampler, load_timeout=load_timeout)
    return result.colours


def extract_sync(
    image_source: ImageSource | None,
    max_colours: int = DEFAULT_MAX_COLOURS,
    *,
    sampler: PixelSampler | None = None,
    load_timeout: float | None = None,
) -> PaletteResult:
    """Blocking wrapper around extract_detailed for code without a running loop."""
    return asyncio.run(extract_detailed(image_source, max_colours, sampler=sampler, load_timeout=load_timeout))
