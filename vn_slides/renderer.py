from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

from logging_utils import get_logger

from .assets import SpriteAssetResolver
from .models import DialogueBody, MenuBody, Slide, StageSnapshot, slide_anchor
from .utils import escape_latex, hex_to_rgb

logger = get_logger(__name__)

COLUMN_WIDTH = r"0.19\textwidth"


@dataclass(frozen=True)
class RendererConfig:
    theme: str = "default"
    next_button: str = "Next"
    title: str = "Visual Novel"
    author: Optional[str] = None


class BeamerRenderer:
    """Expand a resolved slide list into a LaTeX Beamer document."""

    def __init__(self, cfg: RendererConfig, assets: Optional[SpriteAssetResolver] = None) -> None:
        self.cfg = cfg
        self.assets = assets

    def render(self, slides: Sequence[Slide], *, base_dir: Optional[Path] = None) -> str:
        parts: List[str] = [self._preamble(), self._title_frame()]
        for slide in slides:
            parts.append(self._frame(slide, base_dir=base_dir, total=len(slides)))
        parts.append("\\end{document}\n")
        logger.debug("Rendered %d frames", len(slides))
        return "\n".join(parts)

    def _preamble(self) -> str:
        lines = [
            "\\documentclass{beamer}",
            f"\\usetheme{{{self.cfg.theme}}}",
            "\\usepackage[utf8]{inputenc}",
            "\\usepackage{graphicx}",
            f"\\title{{{escape_latex(self.cfg.title)}}}",
        ]
        if self.cfg.author:
            lines.append(f"\\author{{{escape_latex(self.cfg.author)}}}")
        lines.extend(["\\date{}", "", "\\begin{document}", ""])
        return "\n".join(lines)

    def _title_frame(self) -> str:
        return "\\begin{frame}\n\\titlepage\n\\end{frame}\n"

    def _frame(self, slide: Slide, *, base_dir: Optional[Path], total: int) -> str:
        body = slide.body
        lines = [f"\\begin{{frame}}{{{self._speaker_title(body.speaker_name, body.speaker_color)}}}"]
        lines.append(f"\\hypertarget{{{slide.anchor}}}{{}}")
        for label in slide.labels:
            lines.append(f"\\hypertarget{{{label}}}{{}}")

        if slide.stage is not None:
            lines.extend(self._stage_row(slide.stage, base_dir=base_dir))

        if isinstance(body, MenuBody):
            lines.extend(self._menu_lines(body))
        elif isinstance(body, DialogueBody):
            lines.append(escape_latex(body.text))

        navigation = self._navigation(slide, total)
        if navigation:
            lines.append("")
            lines.append(navigation)
        lines.append("\\end{frame}\n")
        return "\n".join(lines)

    @staticmethod
    def _speaker_title(name: str, color: Optional[str]) -> str:
        if not name:
            return ""
        escaped = escape_latex(name)
        rgb = hex_to_rgb(color)
        if rgb is None:
            return escaped
        return f"\\textcolor[RGB]{{{rgb[0]},{rgb[1]},{rgb[2]}}}{{{escaped}}}"

    def _stage_row(self, stage: StageSnapshot, *, base_dir: Optional[Path]) -> List[str]:
        if self.assets is None:
            return []
        images: List[Optional[str]] = []
        for sprite_key in stage:
            asset = self.assets.resolve(sprite_key) if sprite_key else None
            images.append(self._image_path(asset.path, base_dir) if asset else None)
        if not any(images):
            return []

        lines = ["\\begin{columns}[T]"]
        for image in images:
            lines.append(f"\\begin{{column}}{{{COLUMN_WIDTH}}}")
            if image:
                lines.append(f"\\includegraphics[width=\\linewidth]{{{image}}}")
            lines.append("\\end{column}")
        lines.append("\\end{columns}")
        return lines

    @staticmethod
    def _image_path(path: Path, base_dir: Optional[Path]) -> str:
        if base_dir is not None:
            try:
                return Path(os.path.relpath(path, base_dir)).as_posix()
            except ValueError:
                pass
        return path.as_posix()

    @staticmethod
    def _menu_lines(body: MenuBody) -> List[str]:
        lines: List[str] = []
        if body.prompt:
            lines.append(escape_latex(body.prompt))
        lines.append("\\begin{itemize}")
        for option in body.choices:
            text = escape_latex(option.text)
            if option.target:
                lines.append(f"\\item \\hyperlink{{{option.target}}}{{{text}}}")
            else:
                lines.append(f"\\item {text}")
        lines.append("\\end{itemize}")
        return lines

    def _navigation(self, slide: Slide, total: int) -> Optional[str]:
        if slide.jump_target:
            target = slide.jump_target
        elif slide.falls_through and slide.index + 1 < total:
            target = slide_anchor(slide.index + 1)
        else:
            return None
        return f"\\hfill\\hyperlink{{{target}}}{{\\beamergotobutton{{{escape_latex(self.cfg.next_button)}}}}}"
