"""palette_tool.core — Foundation layer.

Contains the colour constants, type definitions, image handle, extractor,
settings and report builder. This module has NO dependencies on
palette_tool.techniques or palette_tool.registry.
Only stdlib, numpy, PIL and loguru are allowed here.
"""
