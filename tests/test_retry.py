"""
Tests for the retry policy, end to end through the stub backend.
"""

import asyncio

import pytest

from page_capture.capture.request import resolve_request
from page_capture.capture.result import CaptureResult, FailureKind
from page_capture.capture.retry import RetryCoordinator, RetryState
from page_capture.capture.session import capture_once
from page_capture.errors import BackendUnavailable, RateLimited
from stubs import StubProvider, no_sleep


def capture_with_retry(provider, settings, **params):
    request = resolve_request(params, default_url=settings.default_url, selectors=settings.selectors)
    coordinator = RetryCoordinator()
    result = asyncio.run(coordinator.run(
        request,
        lambda: capture_once(provider, request, settings, sleep=no_sleep),
    ))
    return result, coordinator


def test_overload_on_acquire_is_not_retried(settings):
    """Backend overload surfaces as rate limited after a single attempt."""
    provider = StubProvider(acquire_errors=[RateLimited("Unable to create new browser: code: 429")])

    result, coordinator = capture_with_retry(provider, settings, mode="full")

    assert not result.ok
    assert result.failure.kind is FailureKind.RATE_LIMITED
    assert result.attempts == 1
    assert provider.acquisitions == 1
    assert coordinator.state is RetryState.FAILED


def test_rate_limit_text_on_acquire_is_not_retried(settings):
    provider = StubProvider(acquire_errors=[BackendUnavailable("Too many requests")])

    result, _ = capture_with_retry(provider, settings, mode="full")

    assert result.failure.kind is FailureKind.RATE_LIMITED
    assert provider.acquisitions == 1


def test_transient_retried_once_then_surfaced(settings):
    provider = StubProvider(navigate_errors=[
        RuntimeError("Navigating frame was detached"),
        RuntimeError("Execution context was destroyed"),
        RuntimeError("never reached"),
    ])

    result, coordinator = capture_with_retry(provider, settings, mode="full", url="https://spa.test/")

    assert not result.ok
    assert result.failure.kind is FailureKind.TRANSIENT
    assert "Execution context was destroyed" in result.failure.detail
    assert result.failure.request.url == "https://spa.test/"
    assert result.attempts == 2
    assert provider.acquisitions == 2
    assert provider.releases == 2
    assert coordinator.transitions == [
        RetryState.IDLE,
        RetryState.ATTEMPTING,
        RetryState.RETRYING,
        RetryState.ATTEMPTING,
        RetryState.FAILED,
    ]


def test_transient_then_success_uses_fresh_session(settings):
    provider = StubProvider(
        present={"#a"},
        navigate_errors=[RuntimeError("Navigating frame was detached")],
    )

    result, coordinator = capture_with_retry(provider, settings, mode="region")

    assert result.ok
    assert result.selector == "#a"
    assert result.attempts == 2
    assert len(provider.sessions) == 2
    assert provider.releases == 2
    assert coordinator.state is RetryState.SUCCEEDED


def test_transient_then_fatal_surfaces_fatal(settings):
    provider = StubProvider(navigate_errors=[
        RuntimeError("Target closed"),
        RuntimeError("net::ERR_NAME_NOT_RESOLVED"),
    ])

    result, _ = capture_with_retry(provider, settings, mode="full")

    assert result.failure.kind is FailureKind.FATAL
    assert result.attempts == 2


def test_fatal_not_retried(settings):
    provider = StubProvider(navigate_errors=[ValueError("Cannot navigate to invalid URL")])

    result, _ = capture_with_retry(provider, settings, mode="full", url="notaurl")

    assert result.failure.kind is FailureKind.FATAL
    assert result.attempts == 1
    assert provider.acquisitions == 1
    assert provider.releases == 1


def test_unexpected_fault_during_capture_released_and_fatal(settings):
    provider = StubProvider(capture_error=RuntimeError("renderer crashed unexpectedly"))

    result, _ = capture_with_retry(provider, settings, mode="full")

    assert result.failure.kind is FailureKind.FATAL
    assert provider.releases == 1


def test_soft_failure_is_not_retried(settings):
    provider = StubProvider(present=set())

    result, _ = capture_with_retry(provider, settings, mode="region")

    assert result.soft_failure
    assert result.attempts == 1
    assert provider.acquisitions == 1


def test_success_not_retried(settings):
    provider = StubProvider()

    result, coordinator = capture_with_retry(provider, settings, mode="full")

    assert result.ok
    assert result.attempts == 1
    assert coordinator.transitions == [RetryState.IDLE, RetryState.ATTEMPTING, RetryState.SUCCEEDED]


def test_result_holds_exactly_one_outcome(settings):
    request = resolve_request({}, default_url=settings.default_url, selectors=settings.selectors)

    failed = CaptureResult.failed(request, FailureKind.FATAL, "boom")

    assert failed.image is None
    assert failed.failure.detail == "boom"
    with pytest.raises(ValueError):
        CaptureResult(request=request)
    with pytest.raises(ValueError):
        CaptureResult(request=request, image=b"png", failure=failed.failure)


def test_url_text_does_not_drive_classification(settings):
    """A target address containing 429 still retries a frame detach."""
    provider = StubProvider(navigate_errors=[RuntimeError("Navigating frame was detached")])

    result, coordinator = capture_with_retry(provider, settings, mode="full", url="https://shop.test/orders/429")

    assert result.ok
    assert result.attempts == 2
    assert provider.acquisitions == 2
    assert coordinator.state is RetryState.SUCCEEDED


def test_dns_failure_on_quota_host_is_fatal(settings):
    provider = StubProvider(navigate_errors=[RuntimeError("net::ERR_NAME_NOT_RESOLVED")])

    result, _ = capture_with_retry(provider, settings, mode="full", url="https://quota.example.test/")

    assert result.failure.kind is FailureKind.FATAL
    assert "quota.example.test" in result.failure.detail
    assert result.attempts == 1
