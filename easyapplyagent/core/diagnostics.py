"""
诊断截图：步骤前后 / 失败路径保存页面截图。

截图只用于排查，任何失败都只记日志，不影响业务结果。
"""

from __future__ import annotations

import re
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

LogFn = Callable[[str, str], None]

# captured 只保留最近的截图路径
CAPTURED_LIMIT = 200


def _slug(label: str) -> str:
    slug = re.sub(r"[^a-zA-Z0-9]+", "_", label or "").strip("_").lower()
    return slug[:60] or "page"


class DiagnosticCapture:
    def __init__(
        self,
        directory: str | Path = "storage/screenshots",
        *,
        enabled: bool = True,
        capture_steps: bool = True,
        log_fn: Optional[LogFn] = None,
    ) -> None:
        self.directory = Path(directory).expanduser()
        self.enabled = enabled
        self.capture_steps = capture_steps
        self._log = log_fn or (lambda msg, level="info": None)
        self.captured: list[Path] = []

    def capture(self, page, label: str, *, failure: bool = False) -> Optional[Path]:
        """
        保存当前页面截图。

        Args:
            page: Playwright Page 对象
            label: 截图用途，会写进文件名
            failure: 失败路径的截图在 capture_steps=False 时也会保存

        Returns:
            截图文件路径，未启用或失败返回 None
        """
        if not self.enabled:
            return None
        if not failure and not self.capture_steps:
            return None
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
            filepath = self.directory / f"{_slug(label)}_{timestamp}.png"
            page.screenshot(path=str(filepath), full_page=False)
            self.captured.append(filepath)
            if len(self.captured) > CAPTURED_LIMIT:
                del self.captured[:-CAPTURED_LIMIT]
            return filepath
        except Exception as e:
            self._log(f"⚠ 截图保存失败 ({label}): {e}", "warn")
            return None
