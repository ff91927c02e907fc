from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Sequence, Tuple

from PIL import Image, UnidentifiedImageError

from logging_utils import get_logger

from .utils import asset_stem

logger = get_logger(__name__)


@dataclass(frozen=True)
class SpriteAsset:
    key: str
    path: Path
    size: Tuple[int, int]


def _read_image_size(image_path: Path) -> Tuple[int, int]:
    with Image.open(image_path) as img:
        return img.size


class SpriteAssetResolver:
    """Locate character sprites on disk by sprite key.

    A missing or unreadable file is not an error; the sprite is simply left out
    of the rendered slide.
    """

    def __init__(self, image_dir: Path, extensions: Sequence[str] = (".png", ".jpg", ".jpeg")) -> None:
        self.image_dir = image_dir
        self.extensions = tuple(extensions)
        self._cache: Dict[str, Optional[SpriteAsset]] = {}

    def resolve(self, sprite_key: str) -> Optional[SpriteAsset]:
        if sprite_key in self._cache:
            return self._cache[sprite_key]
        asset = self._lookup(sprite_key)
        self._cache[sprite_key] = asset
        return asset

    def _lookup(self, sprite_key: str) -> Optional[SpriteAsset]:
        stem = asset_stem(sprite_key)
        for ext in self.extensions:
            candidate = self.image_dir / f"{stem}{ext}"
            if not candidate.exists():
                continue
            try:
                size = _read_image_size(candidate)
            except (OSError, UnidentifiedImageError) as exc:
                logger.warning("Ignoring unreadable sprite %s: %s", candidate, exc)
                continue
            logger.debug("Sprite %r -> %s (%dx%d)", sprite_key, candidate.name, size[0], size[1])
            return SpriteAsset(key=sprite_key, path=candidate, size=size)
        logger.debug("No sprite image for %r in %s", sprite_key, self.image_dir)
        return None

    def resolved(self) -> Dict[str, SpriteAsset]:
        return {key: asset for key, asset in self._cache.items() if asset is not None}
