"""Conversion module turning uploaded clips into round video notes.

Validates declared metadata, downloads the source, crops and re-encodes it
with FFmpeg inside a per-request scratch workspace.
"""
