"""Grouped test fixtures, a filtering test runner, attribute restoration and a guarded allocator."""

__version__ = "0.1.0"
__all__ = ["memory", "options", "outcome", "pointers", "runner"]