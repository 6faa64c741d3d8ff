"""Repository code generator for annotated record declarations."""
__version__ = "0.1.0"
