from smartsplit.logging import APP_NAME, _resolve_level, add_app_context


def test_add_app_context_tags_events():
    event = add_app_context(None, "info", {"event": "calculated"})
    assert event == {"event": "calculated", "app": APP_NAME}


def test_add_app_context_keeps_explicit_app():
    event = add_app_context(None, "info", {"event": "calculated", "app": "other"})
    assert event["app"] == "other"


def test_resolve_level_falls_back_to_info():
    assert _resolve_level("debug") == 10
    assert _resolve_level("nonsense") == 20
