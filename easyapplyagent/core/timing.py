"""
人类节奏时序模型

职责：
- 每个会话抽取一次基础打字速度（baseline）
- 按字符类别 / 重复键 / 抖动 / 连打 计算单键延迟
- 邮箱输入的 @ 与域名点号后的额外停顿、偶发的回看停顿
- 各类固定停顿（字段之间、点击之后等）

所有时长单位为毫秒，且都有下限；随机源可注入，便于测试分布。
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Literal

PauseKind = Literal[
    "between_fields",
    "after_click",
    "review_pause",
    "after_at",
    "after_domain_dot",
]

HOME_ROW = "asdfjkl;"
PUNCTUATION = ".,!?-_()"
DIGITS = "0123456789"
SHIFTED = "~!@#$%^&*()_+{}|:\"<>?"
# 句末标点与 @ 之后人会停一下
LINGER_AFTER = ".!?@"

KEYSTROKE_FLOOR_MS = 50
KEYSTROKE_CEILING_MS = 1100


@dataclass(frozen=True)
class TimingConfig:
    baseline_min_ms: int = 70
    baseline_span_ms: int = 150
    burst_probability: float = 0.15
    review_probability: float = 0.05
    bulk_ms_per_char: int = 300
    bulk_jitter_ms: int = 1000


PAUSE_RANGES: dict[str, tuple[int, int]] = {
    "between_fields": (500, 1500),
    "after_click": (1000, 2000),
    "review_pause": (500, 2000),
    "after_at": (300, 800),
    "after_domain_dot": (100, 300),
}


def char_class(char: str) -> str:
    """字符类别：home_row / punctuation / digit / shifted / plain。"""
    if char in HOME_ROW:
        return "home_row"
    if char in PUNCTUATION:
        return "punctuation"
    if char in DIGITS:
        return "digit"
    if char in SHIFTED:
        return "shifted"
    return "plain"


class TimingModel:
    def __init__(
        self,
        rng: random.Random | None = None,
        config: TimingConfig | None = None,
    ) -> None:
        self.rng = rng or random.Random()
        self.config = config or TimingConfig()
        # 有人打字快有人慢：每个会话只抽一次
        self.baseline = self.config.baseline_min_ms + int(
            self.rng.random() * self.config.baseline_span_ms
        )

    def _span(self, lo: int, width: int) -> int:
        return lo + int(self.rng.random() * width)

    def between(self, lo_ms: int, hi_ms: int) -> int:
        """[lo, hi) 之间的随机等待。"""
        if hi_ms <= lo_ms:
            return max(lo_ms, 1)
        return self.rng.randrange(lo_ms, hi_ms)

    def keystroke_delay(
        self,
        char: str,
        previous_char: str | None = None,
        baseline: int | None = None,
    ) -> int:
        delay = float(self.baseline if baseline is None else baseline)

        kind = char_class(char)
        if kind == "home_row":
            delay -= self._span(10, 40)
        elif kind == "punctuation":
            delay += self._span(50, 100)
        elif kind == "digit":
            delay += self._span(30, 70)
        elif kind == "shifted":
            delay += self._span(80, 120)

        if previous_char is not None and previous_char == char:
            delay -= self._span(20, 30)

        # ±30% 自然波动
        delay = max(KEYSTROKE_FLOOR_MS, delay * (0.7 + self.rng.random() * 0.6))

        if self.rng.random() < self.config.burst_probability:
            delay = max(KEYSTROKE_FLOOR_MS, delay / 2)

        if char in LINGER_AFTER:
            delay += self._span(200, 300)

        return int(min(KEYSTROKE_CEILING_MS, max(KEYSTROKE_FLOOR_MS, delay)))

    def pause(self, kind: PauseKind) -> int:
        lo, hi = PAUSE_RANGES[kind]
        return self.between(lo, hi)

    def extra_pauses(self, text: str, index: int) -> list[int]:
        """
        第 index 个字符敲完后的额外停顿（不含单键延迟本身）。

        - @ 之后（不是最后一个字符时）
        - 邮箱域名部分的点号之后
        - 小概率回看停顿
        """
        char = text[index]
        pauses: list[int] = []
        if char == "@" and index < len(text) - 1:
            pauses.append(self.pause("after_at"))
        at_pos = text.find("@")
        if char == "." and at_pos != -1 and index > at_pos:
            pauses.append(self.pause("after_domain_dot"))
        if self.rng.random() < self.config.review_probability:
            pauses.append(self.pause("review_pause"))
        return pauses

    def keystroke_schedule(self, text: str) -> list[int]:
        """逐字符输入时每个字符之后应等待的总时长。"""
        schedule: list[int] = []
        previous: str | None = None
        for i, char in enumerate(text):
            wait = self.keystroke_delay(char, previous)
            wait += sum(self.extra_pauses(text, i))
            schedule.append(wait)
            previous = char
        return schedule

    def bulk_typing_estimate(self, text: str) -> int:
        """整段输入后"假装在打字"的等待时长：约 40 WPM。"""
        return len(text) * self.config.bulk_ms_per_char + int(
            self.rng.random() * self.config.bulk_jitter_ms
        )
