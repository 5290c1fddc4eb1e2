# compiler/writer.py
from __future__ import annotations
import logging
from pathlib import Path
from typing import List, Mapping

logger = logging.getLogger(__name__)


def write_artifacts(artifacts: Mapping[str, str], out_dir: Path) -> List[Path]:
    """Write every artifact under out_dir; unchanged files are left untouched."""
    written: List[Path] = []
    for rel, text in artifacts.items():
        target = out_dir / rel
        if target.is_file() and target.read_text(encoding="utf-8") == text:
            continue
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(text, encoding="utf-8")
        written.append(target)
    logger.info("Wrote %d of %d artifacts under %s", len(written), len(artifacts), out_dir)
    return written
