"""
LinkedIn 页面目标元素目录。

每个 Target 是一组按优先级排列的探针；页面改版时只需要在这里增减探针。
"""

from __future__ import annotations

from .locator import AttributeProbe, StructuralProbe, Target, TextProbe

# ---- 登录 ----

LOGIN_EMAIL = Target(
    name="Email or phone",
    probes=(
        StructuralProbe("#username"),
        AttributeProbe("autocomplete", "username", tag="input", mode="equals"),
        AttributeProbe("name", "session_key", tag="input", mode="equals"),
    ),
    fallback_scan=False,
)

LOGIN_PASSWORD = Target(
    name="Password",
    probes=(
        StructuralProbe("#password"),
        StructuralProbe("input[type='password']"),
        AttributeProbe("name", "session_password", tag="input", mode="equals"),
    ),
    fallback_scan=False,
)

LOGIN_SUBMIT = Target(
    name="Sign in",
    probes=(
        StructuralProbe("//button[@type='submit']"),
        AttributeProbe("data-litms-control-urn", "login-submit", tag="button"),
        TextProbe("Sign in", tag="button"),
    ),
    require_enabled=True,
)

# ---- 职位导航 / 搜索 ----

JOBS_NAV = Target(
    name="Jobs",
    probes=(
        StructuralProbe("//a[@href='/jobs/' and contains(@data-link-to, 'jobs')]"),
        StructuralProbe("//a[contains(@href, '/jobs/') and contains(., 'Jobs')]"),
        StructuralProbe("//span[text()='Jobs']/ancestor::a"),
        StructuralProbe("//li[contains(@class, 'nav')]/a[contains(@href, '/jobs')]"),
        StructuralProbe("//nav//a[contains(@href, '/jobs')]"),
    ),
    fallback_scan=False,
)

SHOW_ALL = Target(
    name="Show all",
    probes=(
        StructuralProbe(
            "//div[contains(., 'Top job picks for you')]//a[contains(., 'Show all')]"
        ),
        AttributeProbe("aria-label", "Show all jobs", tag="a"),
        StructuralProbe("//a[contains(., 'Show all') and contains(., '→')]"),
        StructuralProbe("//a[normalize-space()='Show all']"),
        TextProbe("Show all", tag="a"),
        TextProbe("Show all", tag="button"),
        StructuralProbe("//span[contains(text(), 'Show all')]/parent::button"),
        StructuralProbe(
            "button.show-all-button, button.jobs-show-all-button, "
            "button.jobs-s-see-more-button, a.show-all-link, a.jobs-show-all-link"
        ),
        StructuralProbe("[data-control-name='show_more_jobs'], [data-control-name='all_jobs']"),
        AttributeProbe("aria-label", "See more jobs", tag="*", mode="equals"),
        StructuralProbe("//button[contains(text(), 'See more') or contains(text(), 'Show more')]"),
        StructuralProbe("//a[contains(text(), 'See more') or contains(text(), 'Show more')]"),
    ),
    scroll_retries=5,
    text_hints=("show all", "see more", "show more"),
)

SEARCH_ROLE = Target(
    name="Search by title",
    probes=(
        AttributeProbe("id", "jobs-search-box-keyword-id", tag="input"),
        AttributeProbe("aria-label", "Search by title", tag="input"),
        AttributeProbe("aria-label", "job title", tag="input"),
        AttributeProbe("placeholder", "job title", tag="input"),
        AttributeProbe("placeholder", "Search by title", tag="input"),
        StructuralProbe(
            "(//div[contains(@class, 'jobs-search-box')]"
            "//*[contains(@class, 'jobs-search-box__text-input')])[1]"
        ),
        StructuralProbe("(//form[contains(@class, 'jobs-search-box')]//input[@type='text'])[1]"),
    ),
    fallback_scan=False,
)

SEARCH_LOCATION = Target(
    name="Location",
    probes=(
        AttributeProbe("id", "jobs-search-box-location-id", tag="input"),
        AttributeProbe("aria-label", "location", tag="input", ignore_case=True),
        AttributeProbe("placeholder", "location", tag="input", ignore_case=True),
        StructuralProbe(
            "(//div[contains(@class, 'jobs-search-box')]"
            "//*[contains(@class, 'jobs-search-box__text-input')])[2]"
        ),
        StructuralProbe("(//form[contains(@class, 'jobs-search-box')]//input[@type='text'])[2]"),
    ),
    fallback_scan=False,
)

SEARCH_BUTTON = Target(
    name="Search",
    probes=(
        AttributeProbe("class", "jobs-search-box__submit-button", tag="button"),
        AttributeProbe("class", "jobs-search-box__submit", tag="button"),
        AttributeProbe("aria-label", "Search", tag="button"),
        StructuralProbe("//form[contains(@class, 'jobs-search-box')]//button[contains(@type, 'submit')]"),
        StructuralProbe("//form[contains(@class, 'jobs-search-box')]//button[contains(., 'Search')]"),
    ),
    require_enabled=True,
    fallback_scan=False,
)

FIRST_JOB = Target(
    name="first job card",
    probes=(
        StructuralProbe(".job-card-container"),
        StructuralProbe(".jobs-search-results__list-item"),
        StructuralProbe("//li[contains(@class, 'jobs-search-results__list-item')]"),
    ),
    scroll_retries=2,
    fallback_scan=False,
)

EASY_APPLY = Target(
    name="Easy Apply",
    probes=(
        StructuralProbe(".jobs-apply-button"),
        AttributeProbe(
            "data-control-name", "jobdetails_topcard_inapply", tag="button", mode="equals"
        ),
        StructuralProbe(
            "//div[contains(@class, 'jobs-unified-top-card')]//button[contains(., 'Easy Apply')]"
        ),
        StructuralProbe(
            "//div[contains(@class, 'jobs-details-top-card')]//button[contains(., 'Easy Apply')]"
        ),
        TextProbe("Easy Apply", tag="button"),
        StructuralProbe("//span[text()='Easy Apply']/ancestor::button"),
    ),
    require_enabled=True,
    text_hints=("easy apply", "apply"),
)

# ---- Easy Apply 弹窗：联系方式 ----

CONTACT_MODAL = Target(
    name="Contact info",
    probes=(
        StructuralProbe("//h3[contains(text(), 'Contact info')]"),
        StructuralProbe("//div[contains(@class, 'jobs-easy-apply-modal')]"),
        StructuralProbe("//div[contains(@aria-labelledby, 'jobs-easy-apply')]"),
        StructuralProbe("//div[contains(@role, 'dialog')][.//h3]"),
        StructuralProbe("div.artdeco-modal__content"),
    ),
    fallback_scan=False,
)

PHONE_COUNTRY = Target(
    name="Phone country code",
    probes=(
        StructuralProbe("//label[contains(text(), 'Phone country code')]/..//select"),
        StructuralProbe("//span[contains(text(), 'country code')]/..//select"),
        AttributeProbe("id", "phoneCountry", tag="select"),
        AttributeProbe("aria-label", "country code", tag="select"),
    ),
    fallback_scan=False,
)

EMAIL_SELECT = Target(
    name="Email address",
    probes=(
        StructuralProbe("//label[contains(text(), 'Email')]/..//select"),
        StructuralProbe("//span[contains(text(), 'Email address')]/..//select"),
        AttributeProbe("id", "email", tag="select"),
        AttributeProbe("aria-label", "email", tag="select"),
    ),
    fallback_scan=False,
)

NEXT_BUTTON = Target(
    name="Next",
    probes=(
        StructuralProbe("//button[contains(., 'Next')]"),
        StructuralProbe("//button[contains(., 'Continue')]"),
        StructuralProbe("//button[contains(., 'Review')]"),
        StructuralProbe("//button[contains(., 'Submit')]"),
        AttributeProbe("aria-label", "Continue to next step", tag="button"),
        StructuralProbe("button.artdeco-button--primary"),
    ),
    require_enabled=True,
    text_hints=("next", "continue", "review"),
)


def labeled_input(label: str) -> Target:
    """按字段标签找输入框（First name / Last name / Location 等）。"""
    compact = label.lower().replace(" ", "")
    return Target(
        name=label,
        probes=(
            StructuralProbe(f"//label[contains(text(), '{label}')]/..//input"),
            StructuralProbe(f"//label[contains(text(), '{label}')]/following-sibling::div//input"),
            StructuralProbe(f"//label[contains(text(), '{label}')]/following::input"),
            StructuralProbe(f"//span[contains(text(), '{label}')]/..//input"),
            AttributeProbe("id", compact, tag="input", ignore_case=True),
            AttributeProbe("aria-label", label, tag="input"),
        ),
        fallback_scan=False,
    )
