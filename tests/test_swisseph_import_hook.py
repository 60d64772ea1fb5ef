from __future__ import annotations

import importlib.util
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
HOOK_PATH = ROOT / "tools" / "hooks" / "check_swisseph_imports.py"


@pytest.fixture(scope="module")
def hook():
    spec = importlib.util.spec_from_file_location("check_swisseph_imports", HOOK_PATH)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_engine_module_importing_swisseph_fails(hook, tmp_path, capsys):
    bad = tmp_path / "yoga_helper.py"
    bad.write_text("import swisseph as swe\n", encoding="utf-8")

    assert hook.main([str(bad)]) == 1
    assert "yoga_helper.py" in capsys.readouterr().out


def test_mentions_in_text_are_ignored(hook, tmp_path):
    ok = tmp_path / "notes.py"
    ok.write_text('"""We never import swisseph here."""\n', encoding="utf-8")
    assert hook.main([str(ok)]) == 0


def test_ephemeris_layer_is_approved(hook):
    assert hook.is_approved(Path("src/astrostorm/ephemeris/swe_backend.py"))
    assert not hook.is_approved(Path("src/astrostorm/modules/yogas/engine.py"))


def test_package_tree_is_clean(hook):
    files = [str(p) for p in (ROOT / "src" / "astrostorm").rglob("*.py")]
    assert files
    assert hook.main(files) == 0
