"""
Implementation details for built-in step executors.

These are *not* part of the public API; hosts should go through
`encoder_stage.executors` and let the registry pick a backend.
"""

__all__ = []
