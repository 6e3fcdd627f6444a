"""
WS_Libs - Wrap Studio raster core

Pixel-level engine of the Wrap Studio vehicle-wrap designer, organized
into sub-packages:

- ImageEditingLib: Template segmentation, text fill, bucket fill, color adjustment, image I/O
- PatternLib: Procedural pattern generators and the preset registry
- CompositionLib: Layer stack, export and undo history
- NodesLib: Node executors wrapping each operation for pipelines
"""

__version__ = "0.1.0"
