"""Radar station core: referee serial protocol, camera-to-field mapping and detection post-processing."""

__version__ = "0.1.0"