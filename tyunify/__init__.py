"""Hash-consed type store, constraint unification and type cleanup for a small functional language."""

__version__ = "0.1.0"
__all__ = ["check", "printing", "types", "unify", "util"]