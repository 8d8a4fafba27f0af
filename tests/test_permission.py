import logging

from presentbuddy.core.permission import PermissionEvent, PermissionState, PermissionStateMachine


def test_permission_request_then_grant():
    sm = PermissionStateMachine()
    assert sm.state == PermissionState.UNKNOWN

    sm.transition(PermissionEvent.REQUEST)
    assert sm.state == PermissionState.PENDING

    sm.observe(True)
    assert sm.state == PermissionState.GRANTED


def test_permission_request_then_deny():
    sm = PermissionStateMachine()
    sm.transition(PermissionEvent.REQUEST)
    sm.observe(False)
    assert sm.state == PermissionState.DENIED


def test_permission_revoked_after_grant():
    sm = PermissionStateMachine()
    sm.observe(True)
    sm.observe(False)
    assert sm.state == PermissionState.DENIED

    sm.transition(PermissionEvent.REQUEST)
    assert sm.state == PermissionState.PENDING


def test_request_while_granted_is_ignored():
    sm = PermissionStateMachine()
    sm.observe(True)
    sm.transition(PermissionEvent.REQUEST)
    assert sm.state == PermissionState.GRANTED


def test_ignored_event_is_logged(caplog):
    sm = PermissionStateMachine()
    sm.observe(True)

    with caplog.at_level(logging.DEBUG, logger="presentbuddy.core.permission"):
        sm.transition(PermissionEvent.REQUEST)

    assert sm.state == PermissionState.GRANTED
    assert any("Ignored permission event" in r.getMessage() for r in caplog.records)
