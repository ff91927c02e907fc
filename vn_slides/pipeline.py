from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from logging_utils import get_logger

from config_loader import AppConfig

from .assets import SpriteAssetResolver
from .models import MenuBody, Slide
from .renderer import BeamerRenderer, RendererConfig
from .script_loader import ScriptDocument, load_script
from .traversal import build_slides

logger = get_logger(__name__)


@dataclass
class PipelineResult:
    script: ScriptDocument
    slides: List[Slide]
    output_path: Path
    plan_path: Path


class SlidePipeline:
    """High-level orchestration: script file -> slides -> Beamer document."""

    def __init__(self, config: AppConfig) -> None:
        self.config = config
        self.assets = SpriteAssetResolver(config.image_dir, config.image_extensions)

    def run(
        self,
        script_path: Path | str,
        *,
        output_path: Optional[Path | str] = None,
        entry_label: Optional[str] = None,
        title: Optional[str] = None,
    ) -> PipelineResult:
        script = load_script(script_path)
        slides = build_slides(
            script.lines,
            script.registry,
            entry_label=entry_label or self.config.entry_label,
            allow_entry_fallback=self.config.allow_entry_fallback,
        )

        if output_path is not None:
            tex_path = Path(output_path).expanduser().resolve()
        else:
            tex_path = self.config.output_dir / f"{script.source_path.stem}.tex"
        tex_path.parent.mkdir(parents=True, exist_ok=True)

        renderer = BeamerRenderer(
            RendererConfig(
                theme=self.config.beamer_theme,
                title=title or self.config.deck_title or script.source_path.stem,
                author=self.config.deck_author,
            ),
            assets=self.assets,
        )
        tex_path.write_text(renderer.render(slides, base_dir=tex_path.parent), encoding="utf-8")

        plan_path = tex_path.parent / "plan.json"
        self._write_plan(plan_path, script, slides, tex_path)

        logger.info("Slide deck complete: %s (%d slides)", tex_path, len(slides))
        return PipelineResult(script=script, slides=slides, output_path=tex_path, plan_path=plan_path)

    def _write_plan(
        self,
        path: Path,
        script: ScriptDocument,
        slides: Sequence[Slide],
        tex_path: Path,
    ) -> None:
        sprites = self.assets.resolved()
        payload: Dict[str, object] = {
            "script": script.source_path.name,
            "document": tex_path.name,
            "logical_lines": len(script.lines),
            "skipped_lines": [
                {"line": skipped.line_number, "text": skipped.text} for skipped in script.skipped
            ],
            "sprites": {
                key: {"path": asset.path.name, "width": asset.size[0], "height": asset.size[1]}
                for key, asset in sorted(sprites.items())
            },
            "slides": [self._slide_entry(slide) for slide in slides],
        }
        path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")

    @staticmethod
    def _slide_entry(slide: Slide) -> Dict[str, object]:
        entry: Dict[str, object] = {
            "index": slide.index,
            "source_index": slide.source_index,
            "labels": list(slide.labels),
            "speaker": slide.speaker_name,
            "jump": slide.jump_target,
            "terminal": slide.is_terminal,
            "stage": list(slide.stage) if slide.stage is not None else None,
        }
        body = slide.body
        if isinstance(body, MenuBody):
            entry["prompt"] = body.prompt
            entry["choices"] = [{"text": option.text, "target": option.target} for option in body.choices]
        else:
            entry["text"] = body.text
        return entry
