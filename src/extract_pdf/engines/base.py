from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from contracts.fragments import FragmentPage


@dataclass(frozen=True, slots=True)
class EngineRenderedPage:
    page_num: int  # 1-indexed
    image_file: Path  # absolute output file path
    width_px: int
    height_px: int


class FragmentExtractionEngine(ABC):
    """
    Document decoder abstraction.

    Engines must:
    - Emit per-page text fragments in a stable, roughly reading-order sequence
    - Emit a viewport whose pixel width is authoritative for margin computation
    - Be deterministic for a given input+params
    - Perform NO OCR, layout inference, or content filtering
    """

    @abstractmethod
    def backend_id(self) -> str:
        raise NotImplementedError

    def backend_version(self) -> str | None:
        return None

    @abstractmethod
    def get_page_count(self, *, pdf_file: Path) -> int:
        raise NotImplementedError

    @abstractmethod
    def extract_pages(self, *, pdf_file: Path, pages: list[int], scale: float) -> list[FragmentPage]:
        """
        Return one FragmentPage per requested page, in the same order as `pages`.
        """

        raise NotImplementedError

    @abstractmethod
    def render_pages(
        self,
        *,
        pdf_file: Path,
        out_dir: Path,
        pages: list[int],
        scale: float,
    ) -> tuple[list[EngineRenderedPage], dict[str, Any]]:
        """
        Return:
        - list of rendered pages (in the same order as `pages`)
        - render params fragment (backend info/version/etc) to be merged into the manifest
        """

        raise NotImplementedError
