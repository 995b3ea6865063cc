"""Auto-discovery of technique modules.

Every .py file in this package that defines a `technique` object is
auto-registered by palette_tool.registry.discover().

The explicit imports below ensure frozen binaries include these modules.
Without them, pkgutil.iter_modules cannot find the technique files at runtime.
"""

# Hidden imports — keep this list in sync with technique modules
import palette_tool.techniques.all as _all  # noqa: F401
import palette_tool.techniques.buckets as _buckets  # noqa: F401
import palette_tool.techniques.palette as _palette  # noqa: F401
import palette_tool.techniques.swatch as _swatch  # noqa: F401
