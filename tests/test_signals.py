from __future__ import annotations

import pytest

from desknotify.errors import MalformedSignalError, ProtocolError
from desknotify.protocol.signals import (
    ActionInvoked,
    CloseReason,
    NotificationClosed,
    decode_signal,
)


def test_decode_notification_closed() -> None:
    assert decode_signal("NotificationClosed", [5, 2]) == NotificationClosed(5, CloseReason.DISMISSED)
    assert decode_signal("NotificationClosed", [5, 1]).reason is CloseReason.EXPIRED
    assert decode_signal("NotificationClosed", [5, 3]).reason is CloseReason.CLOSED


@pytest.mark.parametrize("reason", [0, 4, 5, 99])
def test_out_of_range_reasons_are_undefined(reason: int) -> None:
    assert decode_signal("NotificationClosed", [5, reason]) == NotificationClosed(5, CloseReason.UNDEFINED)


def test_decode_action_invoked() -> None:
    signal = decode_signal("ActionInvoked", [9, "default"])
    assert signal == ActionInvoked(9, "default")
    assert signal.notification_id == 9


def test_unknown_member_is_unrecognized() -> None:
    assert decode_signal("Foo", [1]) is None
    assert decode_signal("ActivationToken", [1, "token"]) is None


@pytest.mark.parametrize(
    "member,args",
    [
        ("NotificationClosed", []),
        ("NotificationClosed", [5]),
        ("NotificationClosed", ["5", 1]),
        ("NotificationClosed", [5, "dismissed"]),
        ("ActionInvoked", [5]),
        ("ActionInvoked", [5, 3]),
        ("ActionInvoked", [True, "x"]),
    ],
)
def test_malformed_arguments_raise(member: str, args: list) -> None:
    with pytest.raises(MalformedSignalError) as excinfo:
        decode_signal(member, args)
    assert isinstance(excinfo.value, ProtocolError)
    assert excinfo.value.member == member


def test_variants_are_distinct() -> None:
    assert NotificationClosed(1, CloseReason.CLOSED) != ActionInvoked(1, "closed")
