from repolens.api.v1 import notebooks, selection, structure

__all__ = [
    "structure",
    "selection",
    "notebooks",
]
