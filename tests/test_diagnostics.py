"""Tests for the diagnostics collector."""

import logging

from hazelroute import Router
from hazelroute.core.diagnostics import GENERAL, MIDDLEWARE, Diagnostics


def test_empty_collector():
    diagnostics = Diagnostics()
    assert not diagnostics.has_errors()
    assert diagnostics.errors() == ()
    assert diagnostics.render() == []
    assert diagnostics.to_html() is None
    assert len(diagnostics) == 0


def test_general_entries_come_before_middleware_entries():
    diagnostics = Diagnostics()
    diagnostics.record("first general")
    diagnostics.record("first middleware", MIDDLEWARE)
    diagnostics.record("second general", GENERAL)
    assert diagnostics.errors() == ("first general", "second general", "first middleware")
    assert [d.channel for d in diagnostics] == [GENERAL, GENERAL, MIDDLEWARE]


def test_render_escapes_messages():
    diagnostics = Diagnostics()
    diagnostics.record("Route '<script>' not found.")
    assert diagnostics.render() == ["Route &#x27;&lt;script&gt;&#x27; not found."]
    assert diagnostics.to_html() == (
        "<h2>Errors:</h2><ul><li>Route &#x27;&lt;script&gt;&#x27; not found.</li></ul>"
    )


def test_records_are_logged(caplog):
    diagnostics = Diagnostics()
    with caplog.at_level(logging.WARNING, logger="hazelroute"):
        diagnostics.record("Middleware 'auth' not found.", MIDDLEWARE)
    assert "Middleware 'auth' not found." in caplog.text


def test_router_display_errors():
    router = Router()
    assert router.display_errors() is None
    router.load_routes([{"action": print}])
    router.register("/", print, middleware=["ghost"])
    router.run("GET", "/")
    html = router.display_errors()
    assert html.startswith("<h2>Errors:</h2><ul>")
    assert html.index("uri") < html.index("ghost")
    assert router.has_errors()
