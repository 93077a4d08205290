"""Code generation back ends that emit XSM machine assembly for SPL and ExpL trees."""

__version__ = "0.1.0"
__all__ = ["expl", "spl"]