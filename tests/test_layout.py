from pathlib import Path

import core.config
import modules.invite_tracker.cog
import utils.cooldowns

ROOT = Path(__file__).resolve().parent.parent


def test_packages_resolve_to_project_tree():
    for module in (core.config, modules.invite_tracker.cog, utils.cooldowns):
        assert ROOT in Path(module.__file__).resolve().parents


def test_source_dirs_are_namespace_packages():
    for name in ("core", "modules", "utils"):
        assert not list((ROOT / name).rglob("__init__.py"))
