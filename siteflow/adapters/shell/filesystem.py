"""
Filesystem adapter — local file operations as auditable steps.

Provides a receipt-returning interface for the few file operations the
workflows perform themselves instead of shelling out.
"""

from __future__ import annotations

import logging
import os
import shutil
import stat
from pathlib import Path

from siteflow.adapters.base import Adapter, ExecutionContext
from siteflow.core.models.action import Receipt
from siteflow.core.persistence.settings_file import write_settings

logger = logging.getLogger(__name__)


class FilesystemAdapter(Adapter):
    """File and directory operations with receipts.

    Action params:
        operation (str): One of 'copy', 'remove', 'make_writable', 'write_settings'.
        path (str): Target path (relative to the project root or absolute).
        source (str): Source path (for 'copy').
        values (dict[str, str]): Settings to write (for 'write_settings').
    """

    _OPERATIONS = {"copy", "remove", "make_writable", "write_settings"}

    @property
    def name(self) -> str:
        return "filesystem"

    def is_available(self) -> bool:
        return True

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        params = context.action.params
        operation = params.get("operation", "")
        if operation not in self._OPERATIONS:
            return False, f"Unknown operation '{operation}'. Valid: {', '.join(sorted(self._OPERATIONS))}"
        if not params.get("path"):
            return False, "Missing required param: 'path'"
        if operation == "copy" and not params.get("source"):
            return False, "Missing required param: 'source' for copy"
        if operation == "write_settings" and not isinstance(params.get("values"), dict):
            return False, "Missing required param: 'values' for write_settings"
        return True, ""

    def _resolve(self, context: ExecutionContext, raw: str) -> Path:
        target = Path(raw)
        if not target.is_absolute():
            target = Path(context.working_dir) / target
        return target

    def execute(self, context: ExecutionContext) -> Receipt:
        params = context.action.params
        operation = params["operation"]
        target = self._resolve(context, params["path"])

        try:
            if operation == "copy":
                source = self._resolve(context, params["source"])
                shutil.copyfile(source, target)
                output = f"Copied {source} → {target}"
            elif operation == "remove":
                if target.is_dir():
                    shutil.rmtree(target)
                else:
                    target.unlink(missing_ok=True)
                output = f"Removed {target}"
            elif operation == "make_writable":
                count = _make_user_writable(target)
                output = f"Made {count} path(s) under {target} user-writable"
            else:
                write_settings(target, params["values"])
                output = f"Wrote {len(params['values'])} setting(s) to {target}"
        except OSError as e:
            return Receipt.failure(
                adapter=self.name,
                action_id=context.action.id,
                error=f"{operation} failed for {target}: {e}",
            )

        logger.debug(output)
        return Receipt.success(adapter=self.name, action_id=context.action.id, output=output)


def _make_user_writable(root: Path) -> int:
    """Equivalent of ``chmod -R u+w``."""
    count = 0
    paths = [root]
    if root.is_dir():
        for dirpath, dirnames, filenames in os.walk(root):
            paths.extend(Path(dirpath) / n for n in dirnames + filenames)
    for p in paths:
        if p.is_symlink():
            continue
        mode = p.stat().st_mode
        p.chmod(mode | stat.S_IWUSR)
        count += 1
    return count
