# compiler/drift.py
from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Mapping

from emitters.template import GENERATED_NOTICE


@dataclass
class ArtifactDiff:
    missing: List[str] = field(default_factory=list)
    changed: List[str] = field(default_factory=list)
    stale: List[str] = field(default_factory=list)

    @property
    def has_changes(self) -> bool:
        return bool(self.missing or self.changed or self.stale)

    def format_plan(self) -> str:
        lines: List[str] = []
        for title, paths in (
            ("Missing artifacts:", self.missing),
            ("Out-of-date artifacts:", self.changed),
            ("Stale generated files:", self.stale),
        ):
            if paths:
                lines.append(title)
                lines.extend(f"  - {p}" for p in sorted(paths))
        return "\n".join(lines) if lines else "Generated code is up to date."


def diff_artifacts(artifacts: Mapping[str, str], out_dir: Path, package_dir: str) -> ArtifactDiff:
    """
    Compare freshly compiled artifacts with what is on disk:
      - artifacts with no file yet
      - files whose text differs
      - generated files under the package that the compiler no longer produces
    Hand-written files (no generated notice) are never reported as stale.
    """
    diff = ArtifactDiff()
    for rel, text in artifacts.items():
        target = out_dir / rel
        if not target.is_file():
            diff.missing.append(rel)
        elif target.read_text(encoding="utf-8") != text:
            diff.changed.append(rel)

    root = out_dir / package_dir
    if root.is_dir():
        for path in sorted(root.rglob("*.py")):
            rel = path.relative_to(out_dir).as_posix()
            if rel in artifacts:
                continue
            if GENERATED_NOTICE in path.read_text(encoding="utf-8"):
                diff.stale.append(rel)
    return diff
