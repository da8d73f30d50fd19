"""
表单字段值缓存（key=value 文本文件）。

- 读取失败按"没有缓存"处理，且之后不覆盖原文件；写入失败只记日志，不阻断流程
- set() 立即落盘，目录不存在时自动创建
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

LogFn = Callable[[str, str], None]

HEADER = "# Easy Apply user info"


def parse_properties(text: str) -> dict[str, str]:
    values: dict[str, str] = {}
    for raw in (text or "").splitlines():
        line = raw.strip()
        if not line or line.startswith("#") or line.startswith("!"):
            continue
        key, sep, value = line.partition("=")
        if not sep:
            continue
        key = key.strip()
        if key:
            values[key] = value.strip()
    return values


def render_properties(values: dict[str, str]) -> str:
    lines = [HEADER, f"# {datetime.now().isoformat(timespec='seconds')}"]
    lines.extend(f"{key}={values[key]}" for key in sorted(values))
    return "\n".join(lines) + "\n"


class PropertiesValueStore:
    def __init__(self, path: str | Path, *, log_fn: Optional[LogFn] = None) -> None:
        self.path = Path(path).expanduser()
        self._log = log_fn or (lambda msg, level="info": None)
        # 读取失败后不再写回原文件
        self.load_failed = False
        self._values = self._load()

    def _load(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            values = parse_properties(self.path.read_text(encoding="utf-8"))
            self._log(f"✓ 已加载 {len(values)} 个已保存字段: {self.path}")
            return values
        except Exception as e:
            self._log(f"⚠ 读取字段缓存失败，按空缓存处理: {e}", "warn")
            self.load_failed = True
            return {}

    def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value
        self.save()

    def save(self) -> None:
        if self.load_failed:
            self._log(f"⚠ 字段缓存文件无法读取，本次不写回: {self.path}", "warn")
            return
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(render_properties(self._values), encoding="utf-8")
        except Exception as e:
            self._log(f"⚠ 保存字段缓存失败: {e}", "warn")

    def as_dict(self) -> dict[str, str]:
        return dict(self._values)
