"""
鼠标轨迹模拟

职责：
- 把鼠标"走"到目标元素：围绕中心点的几次随机落点，再精确落到中心
- 鼠标 API 不可用 / 元素没有 bounding box 时，退化为平滑滚动到视口中央
- 记录移动轨迹，便于排查与测试
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Optional

from .timing import TimingModel

LogFn = Callable[[str, str], None]

INTERMEDIATE_MOVES = 3
CENTER_JITTER_PX = 5
OFFSET_PX = 20
# 轨迹只保留最近的若干步
TRAIL_LIMIT = 200


@dataclass
class PointerMove:
    x: float
    y: float
    pause_ms: int
    kind: str  # "approach" | "final" | "scroll_fallback"


@dataclass
class PointerSimulator:
    timing: TimingModel
    log_fn: Optional[LogFn] = None
    trail: list[PointerMove] = field(default_factory=list)

    def _log(self, msg: str, level: str = "info") -> None:
        if self.log_fn:
            self.log_fn(msg, level)

    def move_to(self, element, page) -> bool:
        """
        模拟人类把鼠标移到元素上。

        Returns:
            True 表示走了真实鼠标轨迹，False 表示使用了滚动兜底。
        """
        try:
            box = element.bounding_box()
            if not box:
                raise ValueError("element has no bounding box")
            rng = self.timing.rng
            cx = box["x"] + box["width"] / 2 + rng.uniform(-CENTER_JITTER_PX, CENTER_JITTER_PX)
            cy = box["y"] + box["height"] / 2 + rng.uniform(-CENTER_JITTER_PX, CENTER_JITTER_PX)

            for _ in range(INTERMEDIATE_MOVES):
                x = cx + rng.uniform(-OFFSET_PX, OFFSET_PX)
                y = cy + rng.uniform(-OFFSET_PX, OFFSET_PX)
                pause = self.timing.between(50, 150)
                page.mouse.move(x, y)
                self._record(PointerMove(x, y, pause, "approach"))
                page.wait_for_timeout(pause)

            final_x = box["x"] + box["width"] / 2
            final_y = box["y"] + box["height"] / 2
            pause = self.timing.between(200, 500)
            page.mouse.move(final_x, final_y)
            self._record(PointerMove(final_x, final_y, pause, "final"))
            page.wait_for_timeout(pause)
            return True
        except Exception as e:
            self._log(f"⚠ 鼠标轨迹失败，改用滚动定位: {e}", "warn")
            return self._scroll_fallback(element, page)

    def _record(self, move: PointerMove) -> None:
        self.trail.append(move)
        if len(self.trail) > TRAIL_LIMIT:
            del self.trail[:-TRAIL_LIMIT]

    def _scroll_fallback(self, element, page) -> bool:
        pause = self.timing.between(300, 700)
        try:
            element.evaluate(
                "(el) => el.scrollIntoView({behavior: 'smooth', block: 'center'})"
            )
        except Exception as e:
            self._log(f"⚠ scrollIntoView 失败: {e}", "warn")
        self._record(PointerMove(0.0, 0.0, pause, "scroll_fallback"))
        page.wait_for_timeout(pause)
        return False
