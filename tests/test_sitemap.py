"""Tests for sitemap generation and the sitemap route."""

import pytest

from hazelroute import Router, XmlDocument
from hazelroute.core.sitemap import SITEMAP_NAMESPACE, SitemapConfig


def page():
    return "page"


def build_router(domain="http://example.com"):
    router = Router()
    router.create_sitemap("/sitemap.xml", domain)
    return router


def test_only_flagged_get_routes_are_listed():
    router = build_router()
    router.load_routes(
        [
            {"uri": "/", "action": page, "sitemap": True},
            {"uri": "/hello", "action": page, "sitemap": False},
        ]
    )
    xml = router.sitemap()
    assert xml.count("<url>") == 1
    assert "<url><loc>http://example.com/</loc></url>" in xml


def test_full_document_shape():
    router = build_router()
    router.route("/", page, sitemap=True).route("/mellow", page, sitemap=True)
    assert router.sitemap() == (
        '<?xml version="1.0" encoding="UTF-8"?>'
        f'<urlset xmlns="{SITEMAP_NAMESPACE}">'
        "<url><loc>http://example.com/</loc></url>"
        "<url><loc>http://example.com/mellow</loc></url>"
        "</urlset>"
    )


def test_non_get_routes_are_ignored():
    router = build_router()
    router.register("/submit", page, method="POST", attributes={"sitemap": True})
    assert "<url>" not in router.sitemap()


def test_table_order_is_kept():
    router = build_router()
    for uri in ("/zeta", "/alpha", "/mid"):
        router.route(uri, page, sitemap=True)
    xml = router.sitemap()
    assert xml.index("/zeta") < xml.index("/alpha") < xml.index("/mid")


def test_single_separator_between_domain_and_path():
    router = build_router("http://example.com/")
    router.route("about", page, sitemap=True)
    router.route("/team", page, sitemap=True)
    xml = router.sitemap()
    assert "<loc>http://example.com/about</loc>" in xml
    assert "<loc>http://example.com/team</loc>" in xml
    assert router.sitemap_config.domain == "http://example.com"


def test_locations_are_escaped():
    router = build_router()
    router.route("/terms&conditions", page, sitemap=True)
    assert "<loc>http://example.com/terms&amp;conditions</loc>" in router.sitemap()


def test_generation_is_idempotent():
    router = build_router()
    router.load_routes("demo_routes")
    assert router.sitemap() == router.sitemap()


def test_set_sitemap_toggles_inclusion():
    router = build_router()
    router.load_routes("demo_routes")
    assert "/hello" not in router.sitemap()
    router.set_sitemap("/hello", True)
    router.set_sitemap("/mellow", False)
    xml = router.sitemap()
    assert "http://example.com/hello" in xml
    assert "http://example.com/mellow" not in xml


def test_sitemap_route_serves_xml_document():
    router = build_router()
    router.route("/", page, sitemap=True)
    result = router.run("GET", "/sitemap.xml")
    assert result.found
    assert isinstance(result.value, XmlDocument)
    assert result.value.content_type == "application/xml; charset=utf-8"
    assert result.value.body == router.sitemap()
    assert "sitemap.xml" not in result.value.body


def test_sitemap_requires_configuration():
    with pytest.raises(RuntimeError):
        Router().sitemap()


@pytest.mark.parametrize("domain", ["", "   ", None])
def test_sitemap_requires_domain(domain):
    with pytest.raises(ValueError):
        SitemapConfig(uri="/sitemap.xml", domain=domain)
    with pytest.raises(ValueError):
        Router().create_sitemap("/sitemap.xml", domain)
