from occspec import core, io, scripts

__all__ = ["core", "io", "scripts"]
