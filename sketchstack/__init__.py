"""SketchStack: natural-language architecture descriptions to draw.io and Excalidraw diagrams."""

__version__ = "0.1.0"
