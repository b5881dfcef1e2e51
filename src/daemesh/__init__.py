"""COLLADA (DAE) import and export for indexed triangle meshes."""

__version__ = "0.1.0"
