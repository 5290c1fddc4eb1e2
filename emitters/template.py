# emitters/template.py
"""Text helpers shared by the emitters. Output must be byte-stable across runs."""
from __future__ import annotations
import json
from typing import Any, Dict, Iterable, List, Mapping, Set

GENERATED_NOTICE = "This file is auto-generated. Do not edit manually."


def file_header(description: str) -> str:
    return f'"""\n{description}\n\n{GENERATED_NOTICE}\n"""\n'


class ImportSet:
    """Collects `from module import name` pairs per section (stdlib, third-party, local)."""

    SECTIONS = ("stdlib", "third_party", "local")

    def __init__(self) -> None:
        self._sections: Dict[str, Dict[str, Set[str]]] = {s: {} for s in self.SECTIONS}

    def add(self, section: str, module: str, *names: str) -> None:
        """No names means a plain `import module`."""
        bucket = self._sections[section].setdefault(module, set())
        bucket.update(names)

    def render(self) -> str:
        blocks: List[str] = []
        for section in self.SECTIONS:
            modules = self._sections[section]
            if not modules:
                continue
            ordered = sorted(modules.items(), key=lambda kv: _module_sort_key(kv[0]))
            lines = [f"import {module}" for module, names in ordered if not names]
            lines += [
                f"from {module} import {', '.join(sorted(names))}"
                for module, names in ordered if names
            ]
            blocks.append("\n".join(lines))
        return "\n\n".join(blocks) + ("\n" if blocks else "")


def _module_sort_key(module: str):
    # absolute before relative, deeper relative imports first like isort
    dots = len(module) - len(module.lstrip("."))
    return (0 if dots == 0 else 1, -dots, module)


def render_all(names: Iterable[str]) -> str:
    items = list(names)
    if not items:
        return "__all__: list = []\n"
    body = "".join(f'    "{n}",\n' for n in items)
    return f"__all__ = [\n{body}]\n"


def py_literal(value: Any) -> str:
    """Deterministic Python source for JSON-ish values."""
    if value is None:
        return "None"
    if isinstance(value, bool):
        return "True" if value else "False"
    if isinstance(value, (int, float)):
        return repr(value)
    if isinstance(value, str):
        return json.dumps(value, ensure_ascii=False)
    if isinstance(value, Mapping):
        inner = ", ".join(f"{py_literal(k)}: {py_literal(v)}" for k, v in value.items())
        return "{" + inner + "}"
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(py_literal(v) for v in value) + "]"
    raise TypeError(f"cannot render {type(value).__name__} as a literal")


def join_blocks(*blocks: str) -> str:
    """Join non-empty blocks with two blank lines, ending with a single newline."""
    parts = [b.strip("\n") for b in blocks if b and b.strip()]
    return "\n\n\n".join(parts) + "\n"
