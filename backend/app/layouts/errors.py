"""
Errors raised by the layout engine.

Everything the engine raises to its caller derives from ``LayoutError``.
Degenerate geometry and vertices without finite-distance neighbours are not
errors: they are recovered from locally and counted in ``LayoutDiagnostics``.
"""
from typing import Any, Dict, List, Optional


class LayoutError(Exception):
    """Base class for recoverable layout failures."""

    def to_dict(self) -> Dict[str, Any]:
        return {"message": str(self)}


class MalformedGraphDescription(LayoutError, ValueError):
    """The graph text could not be parsed."""

    def __init__(self, message: str, token: Optional[str] = None, position: Optional[int] = None):
        super().__init__(message)
        self.token = token
        self.position = position

    def to_dict(self) -> Dict[str, Any]:
        return {"message": str(self), "token": self.token, "position": self.position}


class LayoutParameterError(LayoutError, ValueError):
    """Layout parameters were rejected before any computation started."""

    def __init__(self, message: str, errors: Optional[List[Dict[str, Any]]] = None):
        super().__init__(message)
        self.errors = errors or []

    def to_dict(self) -> Dict[str, Any]:
        return {"message": str(self), "errors": self.errors}
