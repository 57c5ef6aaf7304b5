from __future__ import annotations

from desknotify.protocol.capabilities import CAPABILITY_NAMES, Capability, parse_capabilities


def test_known_names_map_to_capabilities() -> None:
    assert parse_capabilities(["actions", "sound", "body-markup"]) == {
        Capability.ACTIONS,
        Capability.SOUND,
        Capability.BODY_MARKUP,
    }


def test_parse_is_order_independent_and_collapses_duplicates() -> None:
    forward = parse_capabilities(["actions", "sound", "body-markup"])
    backward = parse_capabilities(["body-markup", "sound", "actions", "sound"])
    assert forward == backward


def test_unknown_names_are_skipped() -> None:
    assert parse_capabilities(["unknown-x"]) == set()
    assert parse_capabilities(["x-gnome-icon-buttons", "body"]) == {Capability.BODY}


def test_table_covers_every_capability_in_declaration_order() -> None:
    assert CAPABILITY_NAMES == (
        "action-icons",
        "actions",
        "body",
        "body-hyperlinks",
        "body-images",
        "body-markup",
        "icon-multi",
        "icon-static",
        "persistence",
        "sound",
    )
    assert [c.wire_name for c in Capability] == list(CAPABILITY_NAMES)
    assert parse_capabilities(CAPABILITY_NAMES) == set(Capability)
