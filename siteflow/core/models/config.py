"""
Configuration model — loaded from siteflow.yml.

Every value has a default matching the hosting layout siteflow was built
for, so a project without a siteflow.yml still works. Paths are relative
to the project root unless stated otherwise.
"""

from __future__ import annotations

import re

from pydantic import BaseModel, Field, field_validator

# Dev: /var/www/vhosts/<family>.webtourismus.at/<project>.<family>.webtourismus.at
DEFAULT_DEV_PATTERN = (
    r"^/var/www/vhosts/(?P<family_host>(?P<family>[a-z0-9\-_]+)\.webtourismus\.at)"
    r"/(?P<project>[a-z0-9\-_]+)\.(?P=family_host)/?$"
)

# Prod: /user/home/<account>/public_html
DEFAULT_PROD_PATTERN = r"^/user/home/(?P<project>[a-z0-9\-_]+)/public_html/?$"


class TierRule(BaseModel):
    """How to recognize one environment tier.

    A tier matches when any path pattern matches AND, if ``hostnames``
    is non-empty, the local hostname is listed.
    """

    path_patterns: list[str] = Field(default_factory=list)
    hostnames: list[str] = Field(default_factory=list)

    @field_validator("path_patterns")
    @classmethod
    def _compile_patterns(cls, patterns: list[str]) -> list[str]:
        for pattern in patterns:
            try:
                re.compile(pattern)
            except re.error as e:
                raise ValueError(f"invalid path pattern {pattern!r}: {e}") from e
        return patterns


class ToolPaths(BaseModel):
    """Executables, relative to the project root where they live in the repo."""

    drush: str = "./vendor/bin/drush"
    composer: str = "./composer.phar"
    git: str = "git"
    ssh: str = "ssh"
    scp: str = "scp"
    rsync: str = "rsync"
    ssh_keyscan: str = "ssh-keyscan"


class GitSettings(BaseModel):
    remote: str = "origin"
    branch: str = "master"
    url_template: str = "git@bitbucket.org:webtourismus/{project}.git"
    known_hosts: list[str] = Field(default_factory=lambda: ["bitbucket.org"])


class InstallSettings(BaseModel):
    account_name: str = "entwicklung"
    account_mail: str = "entwicklung@webtourismus.at"
    locale: str = "de"
    translations: list[str] = Field(
        default_factory=lambda: [
            "modules/contrib/ebr/translations/ebr.de.po",
            "modules/contrib/gin_custom/translations/gin_custom.de.po",
            "modules/contrib/seasonal_paragraphs/translations/seasonal_paragraphs.de.po",
            "modules/custom/backend/translations/backend.de.po",
        ]
    )
    # Optional external command that merges the starterkit package
    # manifest into composer.json before an update.
    manifest_merge_command: list[str] = Field(default_factory=list)


class GoLiveSettings(BaseModel):
    remote_root_template: str = "/user/home/{user}/public_html"
    settings_template: str = ""            # empty = copy the local settings file
    staging_file: str = ".env.prod"
    dump_file: str = ".siteflow/go-live-dump.sql"     # drush appends .gz
    placeholder_files: list[str] = Field(
        default_factory=lambda: ["index.html", "index.php", "cgi-bin"]
    )
    path_line: str = 'export PATH="$HOME/bin:$HOME/public_html/vendor/bin:$PATH"'
    rsync_excludes: list[str] = Field(
        default_factory=lambda: [
            ".git",
            ".siteflow",
            "vendor",
            "web/core",
            "web/modules/contrib",
            "web/themes/contrib",
            "web/profiles/contrib",
            "web/libraries",
        ]
    )
    # drush argument lists run remotely after the database sync
    production_settings: list[list[str]] = Field(
        default_factory=lambda: [
            ["config:set", "system.performance", "css.preprocess", "1", "-y"],
            ["config:set", "system.performance", "js.preprocess", "1", "-y"],
            ["config:set", "system.logging", "error_level", "hide", "-y"],
        ]
    )
    preflight_checklist: list[str] = Field(
        default_factory=lambda: [
            "The prod account exists and your SSH key is authorized for it.",
            "The prod account has read access to the git repository (deploy key).",
            "DNS for the public domain points to the prod host, or will shortly.",
            "The prod database and its user exist.",
            "A backup of anything already on the prod account has been taken.",
        ]
    )
    post_checklist: list[str] = Field(
        default_factory=lambda: [
            "Point the web server document root of {domain} to {root}/web.",
            "Issue a TLS certificate for {domain} and enable HTTPS redirects.",
            "Register the Drupal cron job on {host}.",
        ]
    )
    optional_followups: list[str] = Field(
        default_factory=lambda: [
            "Submit the sitemap of https://{domain} to search engines.",
            "Remove the dev robots/noindex settings if any were configured manually.",
        ]
    )


class SiteflowConfig(BaseModel):
    """Root configuration."""

    dev: TierRule = Field(default_factory=lambda: TierRule(path_patterns=[DEFAULT_DEV_PATTERN]))
    prod: TierRule = Field(default_factory=lambda: TierRule(path_patterns=[DEFAULT_PROD_PATTERN]))

    settings_file: str = ".env"
    shared_settings_file: str = "../.env"
    scaffold_files: list[str] = Field(
        default_factory=lambda: [
            "private/scaffold/default.settings.php.append",
            "../.env",
        ]
    )
    site_dir: str = "web/sites/default"
    site_settings: str = "web/sites/default/settings.php"
    default_site_settings: str = "web/sites/default/default.settings.php"
    files_dir: str = "web/sites/default/files"
    config_sync_dir: str = "config/sync"
    audit_file: str = ".siteflow/audit.ndjson"

    tools: ToolPaths = Field(default_factory=ToolPaths)
    git: GitSettings = Field(default_factory=GitSettings)
    install: InstallSettings = Field(default_factory=InstallSettings)
    go_live: GoLiveSettings = Field(default_factory=GoLiveSettings)
