"""
职位过滤 URL 拼装：把 FilterConfig 翻译成 LinkedIn 搜索参数。

未识别的取值按各参数的默认值处理，不报错。
"""

from __future__ import annotations

from ..config import FilterConfig

REMOTE_CODES = {"onsite": "1", "remote": "2", "hybrid": "3"}
DATE_POSTED_CODES = {"day": "r86400", "week": "r604800", "month": "r2592000"}
EXPERIENCE_CODES = {
    "internship": "1",
    "entry_level": "2",
    "associate": "3",
    "mid_senior_level": "4",
    "director": "5",
}
JOB_TYPE_CODES = {
    "full_time": "F",
    "part_time": "P",
    "contract": "C",
    "temporary": "T",
    "volunteer": "V",
}

DEFAULT_REMOTE = "2"
DEFAULT_DATE_POSTED = "r604800"
DEFAULT_EXPERIENCE = "2,3,4"
DEFAULT_JOB_TYPE = "F"

PRESERVED_PARAMS = ("keywords=", "location=", "geoId=", "position=")
SORT_SUFFIX = "sortBy=R"


def compile_filter_params(filters: FilterConfig, current_url: str = "") -> list[str]:
    """过滤参数 + 当前 URL 中需要保留的搜索参数，排序后返回。"""
    params: list[str] = []
    if filters.easy_apply:
        params.append("f_AL=true")
    if filters.remote:
        params.append(
            "f_WT=" + REMOTE_CODES.get(filters.remote.strip().lower(), DEFAULT_REMOTE)
        )
    if filters.sort_by:
        params.append(
            "f_TPR="
            + DATE_POSTED_CODES.get(filters.sort_by.strip().lower(), DEFAULT_DATE_POSTED)
        )
    if filters.exp_level:
        params.append(
            "f_E="
            + EXPERIENCE_CODES.get(filters.exp_level.strip().lower(), DEFAULT_EXPERIENCE)
        )
    if filters.job_type:
        params.append(
            "f_JT="
            + JOB_TYPE_CODES.get(filters.job_type.strip().lower(), DEFAULT_JOB_TYPE)
        )

    _, _, query = (current_url or "").partition("?")
    if query:
        params.extend(p for p in query.split("&") if p.startswith(PRESERVED_PARAMS))

    return sorted(params)


def build_filtered_url(current_url: str, filters: FilterConfig) -> str:
    base, _, _ = (current_url or "").partition("?")
    params = compile_filter_params(filters, current_url)
    params.append(SORT_SUFFIX)
    return f"{base}?{'&'.join(params)}"
