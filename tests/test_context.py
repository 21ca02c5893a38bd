"""
Tests for ProjectContext construction.
"""

from pathlib import Path

import pytest
from pydantic import ValidationError

from siteflow.core.context import build_context, refresh_settings
from siteflow.core.models import EnvironmentTier


class TestBuildContext:
    def test_dev_project(self, dev_root: Path, make_ctx):
        ctx = make_ctx(dev_root)
        assert ctx.tier is EnvironmentTier.DEV
        assert ctx.project_name == "example"
        assert ctx.family_name == "dev1"
        assert ctx.root == dev_root.resolve()
        assert ctx.settings_path == dev_root.resolve() / ".env"

    def test_shared_settings_layered_under_local(self, configured_root: Path, make_ctx):
        (configured_root / ".env").write_text('PROJECT_NAME="example"\nDB_USER="local"\n')
        ctx = make_ctx(configured_root)
        assert ctx.settings["DB_USER"] == "local"
        assert ctx.settings["DB_PASSWORD"] == "s3cret"
        assert ctx.setting("PROJECT_NAME") == "example"

    def test_prod_project_name_from_settings(self, prod_root: Path, make_ctx):
        ctx = make_ctx(prod_root, hostname="prod01")
        assert ctx.tier is EnvironmentTier.PROD
        assert ctx.project_name == "example"

    def test_prod_project_name_from_path(self, prod_root: Path, make_ctx):
        (prod_root / ".env").write_text('ENV="prod"\n')
        assert make_ctx(prod_root).project_name == "acme"

    def test_unknown_directory(self, tmp_path: Path, config):
        ctx = build_context(config, cwd=tmp_path, hostname="h")
        assert ctx.tier is EnvironmentTier.UNKNOWN
        assert ctx.project_name == ""

    def test_symlinked_project_dir(self, dev_root: Path, tmp_path: Path, make_ctx):
        link = tmp_path / "shortcut"
        link.symlink_to(dev_root)
        ctx = make_ctx(link)
        assert ctx.tier is EnvironmentTier.DEV
        assert ctx.project_name == "example"


class TestSnapshots:
    def test_context_is_immutable(self, dev_root: Path, make_ctx):
        ctx = make_ctx(dev_root)
        with pytest.raises(ValidationError):
            ctx.project_name = "other"

    def test_refresh_sees_new_settings(self, configured_root: Path, make_ctx):
        ctx = make_ctx(configured_root)
        (configured_root / ".env").write_text('PROJECT_NAME="example"\nENV="dev"\n')
        fresh = refresh_settings(ctx)
        assert fresh.setting("ENV") == "dev"
        assert ctx.setting("ENV") == ""
