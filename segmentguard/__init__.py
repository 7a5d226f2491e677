"""segmentguard — schema-driven validation of HTTP request segments."""

__version__ = "1.0.0"
