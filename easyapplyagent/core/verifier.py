"""
输入后验读取

职责：
- 通用输入框取值（input_value 失败时退回脚本读取）
- 下拉框选项列表 / 当前选中项读取
"""

from __future__ import annotations

OPTIONS_SCRIPT = "(el) => Array.from(el.options || []).map((o) => (o.text || '').trim())"
SELECTED_SCRIPT = """
(el) => {
  const o = el.options && el.selectedIndex >= 0 ? el.options[el.selectedIndex] : null;
  return o ? (o.text || '').trim() : '';
}
"""


def get_input_value(locator) -> str:
    """尽力获取输入框当前值。"""
    try:
        return locator.input_value(timeout=500)
    except Exception:
        try:
            return locator.evaluate("(el) => el.value || el.textContent || ''")
        except Exception:
            return ""


def get_option_texts(locator) -> list[str]:
    """下拉框全部选项的可见文本（按页面顺序）。"""
    try:
        texts = locator.evaluate(OPTIONS_SCRIPT)
    except Exception:
        return []
    return [str(t) for t in (texts or [])]


def get_selected_option_text(locator) -> str:
    try:
        return str(locator.evaluate(SELECTED_SCRIPT) or "")
    except Exception:
        return ""


PLACEHOLDER_OPTIONS = frozenset({"", "--", "Select a country/region", "Select an option"})


def is_placeholder_option(text: str | None) -> bool:
    """未选择状态：空、"--" 或 LinkedIn 的占位文案。"""
    return (text or "").strip() in PLACEHOLDER_OPTIONS
