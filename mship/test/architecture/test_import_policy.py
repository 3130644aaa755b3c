from __future__ import annotations

import ast
from pathlib import Path


def _package_root() -> Path:
    return Path(__file__).resolve().parents[2]


def _source_files() -> list[Path]:
    root = _package_root()
    files: list[Path] = []
    for path in sorted(root.rglob("*.py")):
        rel = path.relative_to(root)
        if rel.parts[0] == "test" or "__pycache__" in rel.parts:
            continue
        files.append(path)
    return files


def _imported_modules(tree: ast.AST) -> list[tuple[str, int]]:
    found: list[tuple[str, int]] = []
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            found.extend((alias.name, node.lineno) for alias in node.names)
        elif isinstance(node, ast.ImportFrom) and node.module and not node.level:
            found.append((node.module, node.lineno))
    return found


def _parse(path: Path) -> ast.AST:
    return ast.parse(path.read_text(encoding="utf-8"), filename=str(path))


def _offenders(top_level: str, allowed: set[str]) -> list[str]:
    root = _package_root()
    offenders: list[str] = []
    for path in _source_files():
        rel = path.relative_to(root).as_posix()
        if rel in allowed or any(rel.startswith(prefix) for prefix in allowed if prefix.endswith("/")):
            continue
        for module, line in _imported_modules(_parse(path)):
            if module == top_level or module.startswith(top_level + "."):
                offenders.append(f"{rel}:{line}: imports '{module}'")
    return offenders


def test_rich_is_only_imported_by_console() -> None:
    offenders = _offenders("rich", {"output/console.py"})
    assert not offenders, "Direct rich usage:\n" + "\n".join(offenders)


def test_typer_stays_in_cli_layer() -> None:
    offenders = _offenders("typer", {"cli/"})
    assert not offenders, "typer outside cli/:\n" + "\n".join(offenders)


def test_subprocess_is_only_called_from_process_module() -> None:
    root = _package_root()
    offenders: list[str] = []
    for path in _source_files():
        rel = path.relative_to(root).as_posix()
        if rel == "platform/process.py":
            continue
        for node in ast.walk(_parse(path)):
            if not isinstance(node, ast.Call) or not isinstance(node.func, ast.Attribute):
                continue
            func = node.func
            if isinstance(func.value, ast.Name) and func.value.id == "subprocess":
                offenders.append(f"{rel}:{node.lineno}: subprocess.{func.attr}")

    assert not offenders, "Subprocess policy violations:\n" + "\n".join(offenders)
