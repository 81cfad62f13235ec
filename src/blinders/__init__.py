"""blinders -- Focus lock engine.

Confines attention to one application by pinning its front window into a
fixed viewport and covering the rest of the primary display with opaque,
always-on-top regions for a timed or open-ended session. Every session is
torn down fail-safe: coverage is never left stranded and the system
preference toggled for the session is always put back.
"""

__version__ = "0.1.0"
