from __future__ import annotations

import ast
from pathlib import Path

ROOT = Path(__file__).resolve().parents[3]
PACKAGE = ROOT / "backoffice"


def _iter_python_files(base: Path) -> list[Path]:
    return sorted(
        file
        for file in base.rglob("*.py")
        if "__pycache__" not in file.parts and ".venv" not in file.parts
    )


def _imports_for(file_path: Path) -> list[tuple[str, int]]:
    tree = ast.parse(file_path.read_text(encoding="utf-8"), filename=str(file_path))
    imports: list[tuple[str, int]] = []
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            for alias in node.names:
                imports.append((alias.name, node.lineno))
        elif isinstance(node, ast.ImportFrom):
            module = node.module or ""
            if node.level > 0:
                module = f"{'.' * node.level}{module}"
            imports.append((module, node.lineno))
    return imports


def test_feature_services_and_clients_do_not_import_api_modules() -> None:
    violations: list[str] = []
    for file_path in _iter_python_files(PACKAGE / "features"):
        if file_path.name == "api.py":
            continue
        for module, lineno in _imports_for(file_path):
            if module.startswith("backoffice.") and "api" in module.split("backoffice.", 1)[1].split("."):
                violations.append(f"{file_path}:{lineno} imports '{module}'")
            if module.startswith(".api"):
                violations.append(f"{file_path}:{lineno} imports '{module}'")
    assert not violations, "Feature modules cannot import API modules:\n" + "\n".join(violations)


def test_media_feature_does_not_depend_on_web_framework_or_other_features() -> None:
    violations: list[str] = []
    for file_path in _iter_python_files(PACKAGE / "features" / "media"):
        for module, lineno in _imports_for(file_path):
            if module == "fastapi" or module.startswith("fastapi."):
                violations.append(f"{file_path}:{lineno} imports '{module}'")
            if module.startswith("backoffice.features.") and not module.startswith("backoffice.features.media"):
                violations.append(f"{file_path}:{lineno} imports '{module}'")
    assert not violations, "Media modules must stay framework independent:\n" + "\n".join(violations)
