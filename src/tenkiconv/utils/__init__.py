"""tenkiconv utilities module."""

from tenkiconv.utils.files import atomic_write_bytes

__all__ = ["atomic_write_bytes"]
