"""
Architecture compliance tests for hexagonal architecture.

These tests enforce that the core stays independent of the browser, output
and CLI layers:
1. Core modules never import adapters or the CLI
2. Playwright is only referenced by the core through the ports module
3. Adapters implement the ports the core depends on
"""

import ast
from pathlib import Path
from typing import List

import pytest

PACKAGE_ROOT = Path(__file__).parent.parent.parent / "bookmarks_extractor"
CORE = PACKAGE_ROOT / "core"


def imported_modules(py_file: Path) -> List[str]:
    """Absolute-looking names of every module a file imports"""
    tree = ast.parse(py_file.read_text(encoding="utf-8"))
    names = []
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            names.extend(alias.name for alias in node.names)
        elif isinstance(node, ast.ImportFrom):
            prefix = "." * node.level
            names.append(f"{prefix}{node.module or ''}")
    return names


@pytest.mark.architecture
class TestDependencyDirection:
    """Test that dependencies point inward toward the domain core."""

    def test_core_modules_dont_import_outer_layers(self):
        violations = []
        for py_file in CORE.glob("*.py"):
            for name in imported_modules(py_file):
                stripped = name.lstrip(".")
                leaves_core = name.startswith("..") or stripped.startswith("bookmarks_extractor.")
                if leaves_core and ("adapters" in stripped or "cli" in stripped):
                    violations.append(f"{py_file.name} imports {name}")

        assert violations == [], "Core modules importing outer layers:\n" + "\n".join(violations)

    def test_only_ports_reference_playwright(self):
        offenders = [
            py_file.name
            for py_file in CORE.glob("*.py")
            if py_file.name != "ports.py"
            and any(name.startswith("playwright") for name in imported_modules(py_file))
        ]

        assert offenders == []


@pytest.mark.architecture
class TestPortImplementations:
    """Adapters expose every operation of the ports they implement."""

    @pytest.mark.parametrize("port_name, adapter_path, adapter_name", [
        ("LoginPageManagerPort", "bookmarks_extractor.adapters.browser.page_manager", "PageManager"),
        ("BookmarksSessionPort", "bookmarks_extractor.adapters.browser.bookmarks_page_manager", "BookmarksPageManager"),
        ("TweetSourcePort", "bookmarks_extractor.adapters.extractors.tweets", "TweetExtractor"),
        ("ExporterPort", "bookmarks_extractor.adapters.output.json", "JSONExporter"),
        ("ExporterPort", "bookmarks_extractor.adapters.output.std_out", "StdOutExporter"),
    ])
    def test_adapter_implements_port(self, port_name, adapter_path, adapter_name):
        import importlib

        from bookmarks_extractor.core import ports

        port = getattr(ports, port_name)
        adapter = getattr(importlib.import_module(adapter_path), adapter_name)

        operations = [
            name for name, value in vars(port).items()
            if not name.startswith("_") and (callable(value) or isinstance(value, property))
        ]
        missing = [name for name in operations if not hasattr(adapter, name)]

        assert operations
        assert missing == [], f"{adapter_name} is missing {missing}"
