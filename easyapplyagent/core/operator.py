"""
操作员交互通道：缺少字段值时在终端询问。

FieldResolver 只依赖 ask / choose 两个方法，测试中可用脚本化的替身。
"""

from __future__ import annotations

from typing import Callable, Optional, Protocol


class Operator(Protocol):
    def ask(self, label: str) -> str: ...

    def choose(self, label: str, options: list[str]) -> Optional[int]: ...


class ConsoleOperator:
    def __init__(
        self,
        input_fn: Callable[[str], str] = input,
        print_fn: Callable[[str], None] = print,
    ) -> None:
        self._input = input_fn
        self._print = print_fn

    def ask(self, label: str) -> str:
        try:
            return self._input(f"Please enter your {label}: ").strip()
        except EOFError:
            return ""

    def choose(self, label: str, options: list[str]) -> Optional[int]:
        """
        列出选项让操作员按编号选择。

        Returns:
            选中的选项下标；输入无效返回 None（调用方不会自动选默认值）
        """
        self._print(f"Select your {label}:")
        for i, option in enumerate(options, start=1):
            self._print(f"  {i}. {option}")
        try:
            raw = self._input("Enter number: ").strip()
        except EOFError:
            return None
        if not raw.isdigit():
            return None
        index = int(raw) - 1
        if 0 <= index < len(options):
            return index
        return None
