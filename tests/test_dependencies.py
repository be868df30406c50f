"""Declared dependencies match what the package imports."""

import ast
import importlib
import re
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).parent.parent
SRC = ROOT / "src" / "mapskin"

# Distribution name on the index -> import name
RUNTIME_DISTRIBUTIONS = {
    "click": "click",
    "rich": "rich",
    "loguru": "loguru",
    "pydantic": "pydantic",
    "PyYAML": "yaml",
    "requests": "requests",
}


def declared_distributions():
    text = (ROOT / "pyproject.toml").read_text(encoding="utf-8")
    block = re.search(r"^dependencies = \[(.*?)^\]", text, re.MULTILINE | re.DOTALL)
    assert block, "pyproject.toml has no dependencies list"
    return {re.split(r"[<>=!~\[ ]", spec, maxsplit=1)[0] for spec in re.findall(r'"([^"]+)"', block.group(1))}


def imported_top_level_modules():
    modules = set()
    for path in SRC.rglob("*.py"):
        tree = ast.parse(path.read_text(encoding="utf-8"), filename=str(path))
        for node in ast.walk(tree):
            if isinstance(node, ast.Import):
                modules.update(alias.name.split(".")[0] for alias in node.names)
            elif isinstance(node, ast.ImportFrom) and node.level == 0 and node.module:
                modules.add(node.module.split(".")[0])
    return modules


def test_pyproject_declares_runtime_stack():
    assert declared_distributions() == set(RUNTIME_DISTRIBUTIONS)


@pytest.mark.parametrize("module", sorted(RUNTIME_DISTRIBUTIONS.values()))
def test_runtime_dependency_importable(module):
    importlib.import_module(module)


def test_every_third_party_import_is_declared():
    stdlib = getattr(sys, "stdlib_module_names", None)
    if stdlib is None:
        pytest.skip("sys.stdlib_module_names needs Python 3.10+")

    third_party = imported_top_level_modules() - set(stdlib) - {"mapskin"}
    assert third_party == set(RUNTIME_DISTRIBUTIONS.values())
