"""Entity-component-system core for a small real-time 3D engine over a pluggable graphics device."""

__version__ = "0.1.0"