"""Crop extraction: cut a padded, downscaled JPEG of one region out of an image."""

from __future__ import annotations

import asyncio
import logging
import tempfile
import uuid
from pathlib import Path
from typing import Optional, Tuple

from PIL import Image

from ..core.types import BoundingBox
from ..utils.config import RefinementConfig

logger = logging.getLogger(__name__)


def padded_region(
    box: BoundingBox, size: Tuple[int, int], padding_ratio: float = 0.05
) -> Tuple[int, int, int, int]:
    """Expand ``box`` by ``padding_ratio`` of its longer side, clamped to the image."""
    width, height = size
    pad = max(box.w, box.h) * padding_ratio
    left = max(0, int(box.x - pad))
    top = max(0, int(box.y - pad))
    right = min(width, int(round(box.x + box.w + pad)))
    bottom = min(height, int(round(box.y + box.h + pad)))
    if right <= left or bottom <= top:
        raise ValueError(f"Bounding box {box} lies outside image of size {size}")
    return left, top, right, bottom


def crop_to_file(
    uri: str | Path,
    box: BoundingBox,
    padding_ratio: float = 0.05,
    max_side: int = 512,
    quality: int = 70,
    out_dir: str | Path | None = None,
) -> str:
    """Crop ``box`` out of the image at ``uri`` and save it as a JPEG.

    The crop keeps a small margin around the box, is downscaled so its long
    side is at most ``max_side`` pixels and lands in ``out_dir`` (a fresh
    temporary directory when not given). Returns the path of the new file.
    """
    target_dir = Path(out_dir) if out_dir is not None else Path(tempfile.mkdtemp(prefix="pantry_crops_"))
    target_dir.mkdir(parents=True, exist_ok=True)

    with Image.open(uri) as image:
        region = padded_region(box, image.size, padding_ratio)
        crop = image.convert("RGB").crop(region)
    crop.thumbnail((max_side, max_side))

    path = target_dir / f"{Path(str(uri)).stem}_{uuid.uuid4().hex[:8]}.jpg"
    crop.save(path, format="JPEG", quality=int(quality))
    logger.debug("Saved crop %s of %s -> %s (%dx%d)", region, uri, path, *crop.size)
    return str(path)


class ImageCropper:
    """Async crop collaborator built from refinement settings.

    Without an ``out_dir`` the cropper writes into a temporary directory it
    owns; ``close()`` (or leaving a ``with`` block) removes it with every
    crop inside.
    """

    def __init__(
        self,
        padding_ratio: float = 0.05,
        max_side: int = 512,
        quality: int = 70,
        out_dir: str | Path | None = None,
    ) -> None:
        self.padding_ratio = float(padding_ratio)
        self.max_side = int(max_side)
        self.quality = int(quality)
        self.out_dir: Optional[Path] = Path(out_dir) if out_dir is not None else None
        self._owned_dir: Optional[tempfile.TemporaryDirectory] = None

    @classmethod
    def from_config(cls, config: RefinementConfig) -> "ImageCropper":
        return cls(
            padding_ratio=config.padding_ratio,
            max_side=config.max_side,
            quality=config.jpeg_quality,
        )

    def __enter__(self) -> "ImageCropper":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _target_dir(self) -> Path:
        if self.out_dir is None:
            self._owned_dir = tempfile.TemporaryDirectory(prefix="pantry_crops_")
            self.out_dir = Path(self._owned_dir.name)
        return self.out_dir

    def close(self) -> None:
        if self._owned_dir is not None:
            logger.debug("Removing crop directory %s", self.out_dir)
            self._owned_dir.cleanup()
            self._owned_dir = None
            self.out_dir = None

    async def crop(self, uri: str, box: BoundingBox) -> str:
        return await asyncio.to_thread(
            crop_to_file,
            uri,
            box,
            self.padding_ratio,
            self.max_side,
            self.quality,
            self._target_dir(),
        )


__all__ = ["ImageCropper", "crop_to_file", "padded_region"]
