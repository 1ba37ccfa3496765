# Routes module
from . import robot

__all__ = ["robot"]
