"""Tests for transient notifications."""

from agency_manager.toasts import ToastCenter, ToastLevel


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def test_show_defaults_to_info() -> None:
    """Test the default toast level."""
    center = ToastCenter()
    toast = center.show("Working offline")
    assert toast.level is ToastLevel.INFO
    assert center.active == [toast]


def test_toasts_expire_after_ttl() -> None:
    """Test that toasts disappear once older than the TTL."""
    clock = FakeClock()
    center = ToastCenter(ttl=5.0, clock=clock)

    first = center.show("Profile updated", ToastLevel.SUCCESS)
    clock.now = 3.0
    second = center.show("Brand deleted", ToastLevel.SUCCESS)

    clock.now = 4.9
    assert center.active == [first, second]

    clock.now = 5.0
    assert center.active == [second]

    clock.now = 8.0
    assert center.active == []


def test_dismiss() -> None:
    """Test dismissing one toast leaves the others."""
    center = ToastCenter()
    first = center.show("one")
    second = center.show("two")

    center.dismiss(first.id)

    assert center.active == [second]


def test_subscribe_and_unsubscribe() -> None:
    """Test that listeners receive toasts until they unsubscribe."""
    center = ToastCenter()
    received = []
    unsubscribe = center.subscribe(received.append)

    center.show("Upload not available offline", ToastLevel.ERROR)
    unsubscribe()
    center.show("ignored")

    assert [t.message for t in received] == ["Upload not available offline"]
    assert received[0].level is ToastLevel.ERROR
    unsubscribe()
