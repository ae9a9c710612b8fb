"""Pisada - static footprint photo analysis (load distribution, arch type, rearfoot alignment)."""

__version__ = "0.1.0"
