"""Datasets bundled with metareg."""
from .metadat import bcg

__all__ = ["bcg"]
