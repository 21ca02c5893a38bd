"""
Tests for the go-live promotion.
"""

from datetime import datetime
from pathlib import Path

import pytest

from siteflow.core.models import FailureKind
from siteflow.core.persistence.settings_file import read_settings
from siteflow.core.use_cases.go_live import go_live

ANSWERS = [
    "prod01.example.net",   # PROD_HOST
    "acme",                 # PROD_USER
    "www.example.com",      # PROD_DOMAIN
    "acme_db",              # PROD_DB_NAME
    "acme_user",            # PROD_DB_USER
    "pa$$ word",            # PROD_DB_PASSWORD
    "",                     # PROD_DB_HOST → localhost
]
NOW = datetime(2026, 10, 18, 12, 0, 0)
ROOT = "/user/home/acme/public_html"


@pytest.fixture
def accepting(scripted):
    return scripted(answers=list(ANSWERS), confirmations=[True])


class TestGoLiveSuccess:
    def test_remote_sequence(self, installed_root: Path, make_ctx, adapters, accepting):
        run = go_live(make_ctx(installed_root), adapters.registry, accepting, now=NOW)

        assert run.ok, run.failure
        assert adapters.ssh.called_names == [
            "remove placeholder files",
            "register known hosts",
            "add PATH to .bashrc",
            "git clone",
            "composer install",
            "mirror untracked files",
            "upload settings file",
            "upload database dump",
            "import database",
            "remote drush cache:rebuild",
            "remote drush config:set system.performance css.preprocess 1 -y",
            "remote drush config:set system.performance js.preprocess 1 -y",
            "remote drush config:set system.logging error_level hide -y",
        ]
        assert run.messages[-1] == "www.example.com is live on acme@prod01.example.net."

    def test_local_steps_come_first(self, installed_root: Path, make_ctx, adapters, accepting):
        go_live(make_ctx(installed_root), adapters.registry, accepting, now=NOW)
        order = adapters.order
        assert order[:6] == [
            "drush cron",
            "drush cache:rebuild",
            "git fetch",
            "git status",
            "drush config:export",
            "git push",
        ]
        assert order.index("drush sql:dump") < order.index("upload database dump")
        assert order.index("upload settings file") < order.index("drush sql:dump")

    def test_commit_message(self, installed_root: Path, make_ctx, adapters, accepting):
        go_live(make_ctx(installed_root), adapters.registry, accepting, now=NOW)
        export = next(c for c in adapters.shell.call_log if c.action.name == "drush config:export")
        assert export.action.params["argv"][-1] == "--message=Go-live of www.example.com on 2026-10-18 12:00:00"

    def test_settings_persisted_and_staging_removed(self, installed_root: Path, make_ctx, adapters, accepting):
        go_live(make_ctx(installed_root), adapters.registry, accepting, now=NOW)

        local = read_settings(installed_root / ".env")
        assert local["PROD_HOST"] == "prod01.example.net"
        assert local["PROD_DB_PASSWORD"] == "pa$$ word"
        assert local["PROD_DB_HOST"] == "localhost"
        assert local["DB_NAME"] == "dev1_example"
        assert not (installed_root / ".env.prod").exists()

    def test_staging_file_shown_before_confirmation(self, installed_root: Path, make_ctx, adapters, accepting):
        go_live(make_ctx(installed_root), adapters.registry, accepting, now=NOW)

        title, text = next(s for s in accepting.shown if ".env.prod" in s[0])
        assert 'ENV="prod"' in text
        assert 'DB_NAME="acme_db"' in text
        assert 'DB_PASSWORD="pa$$ word"' in text
        assert 'PROJECT_NAME="example"' in text

    def test_remote_scripts(self, installed_root: Path, make_ctx, adapters, accepting):
        go_live(make_ctx(installed_root), adapters.registry, accepting, now=NOW)
        calls = {c.action.name: c.action.params for c in adapters.ssh.call_log}

        assert calls["git clone"]["target"] == "acme@prod01.example.net"
        assert calls["git clone"]["script"] == (
            f"cd {ROOT} && git clone git@bitbucket.org:webtourismus/example.git ."
        )
        assert calls["remove placeholder files"]["script"] == (
            f"cd {ROOT} && rm -rf -- index.html index.php cgi-bin"
        )
        assert calls["import database"]["script"] == (
            f"cd {ROOT} && gunzip -c go-live-dump.sql.gz | ./vendor/bin/drush sql:cli"
            " && rm -f go-live-dump.sql.gz"
        )
        assert calls["add PATH to .bashrc"]["script"].startswith("grep -qxF -- ")
        assert calls["upload settings file"]["dest"] == f"{ROOT}/.env"

        mirror = calls["mirror untracked files"]
        assert mirror["source"] == f"{installed_root.resolve()}/"
        assert mirror["dest"] == f"{ROOT}/"
        assert ".git" in mirror["excludes"]
        assert ".env" in mirror["excludes"]
        assert ".env.prod" in mirror["excludes"]

    def test_post_checklist(self, installed_root: Path, make_ctx, adapters, accepting):
        go_live(make_ctx(installed_root), adapters.registry, accepting, now=NOW)
        title, text = next(s for s in accepting.shown if s[0] == "Still to do by hand")
        assert f"{ROOT}/web" in text
        assert "www.example.com" in text


class TestGoLiveParameters:
    def test_invalid_answers_are_asked_again(self, installed_root: Path, make_ctx, adapters, scripted):
        answers = ["not a host!", *ANSWERS[:2], "https://www.example.com", *ANSWERS[2:]]
        operator = scripted(answers=answers, confirmations=[False])

        go_live(make_ctx(installed_root), adapters.registry, operator, now=NOW)

        assert operator.rejected == ["not a host!", "https://www.example.com"]
        assert read_settings(installed_root / ".env")["PROD_DOMAIN"] == "www.example.com"

    def test_stored_values_are_defaults(self, installed_root: Path, make_ctx, adapters, scripted):
        with (installed_root / ".env").open("a") as f:
            f.write('PROD_HOST="prod02.example.net"\nPROD_USER="acme"\nPROD_DOMAIN="example.com"\n'
                    'PROD_DB_NAME="a"\nPROD_DB_USER="b"\nPROD_DB_PASSWORD="c"\nPROD_DB_HOST="db01"\n')
        operator = scripted(answers=[""] * 7, confirmations=[True])

        run = go_live(make_ctx(installed_root), adapters.registry, operator, now=NOW)

        assert run.ok, run.failure
        assert adapters.ssh.call_log[0].action.params["target"] == "acme@prod02.example.net"


class TestGoLiveAborts:
    def test_declined_confirmation(self, installed_root: Path, make_ctx, adapters, scripted):
        operator = scripted(answers=list(ANSWERS), confirmations=[False])

        run = go_live(make_ctx(installed_root), adapters.registry, operator, now=NOW)

        assert run.failure.kind is FailureKind.USER_ABORT
        assert run.failure.exit_code == 4
        assert adapters.ssh.call_count == 0
        assert adapters.shell.call_count == 0
        assert adapters.git.call_count == 0
        assert not (installed_root / ".env.prod").exists()
        # parameters were stored before the confirmation
        assert read_settings(installed_root / ".env")["PROD_USER"] == "acme"

    def test_dev_only(self, prod_root: Path, make_ctx, adapters, operator):
        run = go_live(make_ctx(prod_root), adapters.registry, operator)
        assert run.failure.kind is FailureKind.PRECONDITION
        assert operator.asked == []

    def test_behind_stops_before_remote(self, installed_root: Path, make_ctx, adapters, accepting):
        adapters.git.set_output("git status", "Your branch is behind 'origin/master' by 1 commit.")
        run = go_live(make_ctx(installed_root), adapters.registry, accepting, now=NOW)

        assert run.failure.kind is FailureKind.DRIFT
        assert adapters.ssh.call_count == 0
        assert run.completed[-1] == "drush cache:rebuild"

    def test_remote_failure_records_progress(self, installed_root: Path, make_ctx, adapters, accepting):
        adapters.ssh.set_failure("git clone", "ssh exited with code 128")

        run = go_live(make_ctx(installed_root), adapters.registry, accepting, now=NOW)

        assert run.failure.kind is FailureKind.REMOTE
        assert run.failure.exit_code == 5
        assert run.failure.step == "git clone"
        assert run.status == "failed"
        assert "add PATH to .bashrc" in run.completed
        assert "composer install" not in run.completed
        assert run.steps[run.current_index] == "git clone"
        assert adapters.ssh.called_names[-1] == "git clone"

    def test_leftover_staging_file_is_named(self, installed_root: Path, make_ctx, adapters, accepting):
        adapters.git.set_output("git status", "Your branch is behind 'origin/master' by 1 commit.")
        run = go_live(make_ctx(installed_root), adapters.registry, accepting, now=NOW)

        staging = installed_root / ".env.prod"
        assert staging.is_file()
        assert any(".env.prod" in m and "password" in m for m in run.messages)

    def test_no_staging_note_once_removed(self, installed_root: Path, make_ctx, adapters, accepting):
        adapters.ssh.set_failure("import database", "ssh exited with code 1")
        run = go_live(make_ctx(installed_root), adapters.registry, accepting, now=NOW)

        assert run.failure.step == "import database"
        assert not (installed_root / ".env.prod").exists()
        assert not any(".env.prod" in m for m in run.messages)
