"""4 KiB memory map with the built-in font."""

from .memory import Memory, MemoryRegion, FONTSET
