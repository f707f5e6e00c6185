from .base import EngineRenderedPage, FragmentExtractionEngine
from .pypdfium2_engine import Pypdfium2Engine

__all__ = ["EngineRenderedPage", "FragmentExtractionEngine", "Pypdfium2Engine"]
