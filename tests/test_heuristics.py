from easyapplyagent.core.heuristics import (
    assess_credentials,
    detect_verification_prompt,
    is_logged_in,
    url_indicates_logged_in,
)

SIGN_IN_URL = "https://www.linkedin.com/checkpoint/lg/sign-in-another-account"


def test_invalid_credentials_text_marker():
    result = assess_credentials(
        "Wrong password. Try again or sign in with a one-time link.",
        "https://www.linkedin.com/uas/login-submit",
    )
    assert result.invalid is True
    assert result.reason == "invalid_text_marker"


def test_sign_in_redirect_needs_error_element():
    with_error = assess_credentials("Sign in", SIGN_IN_URL, error_element_count=2)
    without_error = assess_credentials("Sign in", SIGN_IN_URL, error_element_count=0)

    assert with_error.invalid is True
    assert with_error.reason == "sign_in_redirect_with_error"
    assert without_error.invalid is False
    assert without_error.evidence["sign_in_redirect"] is True


def test_error_element_alone_is_not_invalid():
    result = assess_credentials(
        "Welcome back", "https://www.linkedin.com/feed/", error_element_count=3
    )
    assert result.invalid is False
    assert result.reason == "no_invalid_signal"


def test_verification_prompt_detection():
    assert detect_verification_prompt("Let's do a quick security Verification")
    assert detect_verification_prompt("Open the LinkedIn app on your phone to confirm")
    assert not detect_verification_prompt("Start a post")
    assert not detect_verification_prompt("")


def test_logged_in_url_markers():
    assert url_indicates_logged_in("https://www.linkedin.com/feed/")
    assert url_indicates_logged_in("https://www.linkedin.com/jobs/search/?keywords=qa")
    assert not url_indicates_logged_in(SIGN_IN_URL)
    assert not url_indicates_logged_in("")


def test_logged_in_by_landmark():
    assert is_logged_in(SIGN_IN_URL, landmark_count=1)
    assert not is_logged_in(SIGN_IN_URL, landmark_count=0)
