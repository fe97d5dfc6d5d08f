from .base import Base

# import models so create_all can discover mappers
from .settings import DrawSettings  # noqa: F401
from .result_export import ResultExport  # noqa: F401

__all__ = [
    "Base",
    "DrawSettings",
    "ResultExport",
]
