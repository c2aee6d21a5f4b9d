"""Tests for route registration, bulk loading and controllers."""

import pytest

from hazelroute import BaseRouter, RegistrationError, ResolutionError, Router, route
from hazelroute.core.diagnostics import MIDDLEWARE

import demo_routes


def home():
    return "home"


def other():
    return "other"


def test_register_returns_route_with_defaults():
    router = Router()
    result = router.register("/about", home, method="get", middleware=["auth"])
    assert result.ok and result
    assert result.error is None
    created = result.route
    assert created.method == "GET"
    assert created.uri == "/about"
    assert created.name == "GET /about"
    assert created.middleware == ["auth"]
    assert created.attributes == {"sitemap": False}
    assert created.sitemap is False
    assert router.routes() == (created,)


def test_register_attributes_override_defaults():
    router = Router()
    created = router.register(
        "/about", home, attributes={"sitemap": True, "visibility": "live", "priority": 3}
    ).route
    assert created.sitemap is True
    assert created.visibility == "live"
    assert created.attributes["priority"] == 3


def test_last_registration_wins_for_same_method_and_pattern():
    router = Router()
    router.register("/about", home, attributes={"sitemap": True, "visibility": "live"})
    router.register("/about", other, attributes={"visibility": "staging"})
    routes = router.routes("GET")
    assert len(routes) == 1
    assert routes[0].handler is other
    assert routes[0].attributes == {"sitemap": False, "visibility": "staging"}


def test_same_pattern_with_other_placeholder_name_replaces_route():
    router = Router()
    router.register("/user/{id}", home)
    router.register("/user/{name}", other)
    assert [r.uri for r in router.routes("GET")] == ["/user/{name}"]


def test_replacement_keeps_original_position():
    router = Router()
    router.route("/a", home).route("/b", home).route("/a", other)
    assert [r.uri for r in router.routes("GET")] == ["/a", "/b"]
    assert router.routes("GET")[0].handler is other


def test_same_uri_on_different_methods_are_distinct():
    router = Router()
    router.register("/items", home)
    router.register("/items", other, method="POST")
    assert router.table.methods() == ("GET", "POST")
    assert len(router.table) == 2
    assert ("POST", "/items") in router.table


def test_non_callable_action_is_recorded():
    router = Router()
    result = router.register("/broken", "not callable")
    assert not result.ok
    assert result.error == "The action provided is not callable."
    assert router.errors == ("The action provided is not callable.",)
    assert len(router.table) == 0


def test_unresolved_member_is_recorded_and_route_skipped():
    router = Router()
    result = router.register("/", (demo_routes.DemoController, "missing"))
    assert not result.ok
    assert router.errors == ("Method missing does not exist in class DemoController.",)
    assert router.routes() == ()


def test_bad_pattern_is_recorded():
    router = Router()
    assert not router.register("/files/(x)/{id}", home)
    assert router.has_errors()
    assert router.routes() == ()


def test_strict_router_raises_and_records():
    router = Router(strict=True)
    with pytest.raises(ResolutionError):
        router.register("/", (demo_routes.DemoController, "missing"))
    with pytest.raises(RegistrationError):
        router.route("/x", None)
    assert len(router.errors) == 2


def test_load_routes_applies_defaults_and_attributes():
    router = Router()
    added = router.load_routes(
        [
            {"uri": "/", "action": home, "sitemap": True, "visibility": "live"},
            {"uri": "/submit", "action": other, "method": "post", "middleware": ["csrf"]},
        ]
    )
    assert added == 2
    index = router.table.get("GET", "/")
    assert index.attributes == {"sitemap": True, "visibility": "live"}
    assert index.middleware == []
    submit = router.table.get("POST", "/submit")
    assert submit.middleware == ["csrf"]
    assert submit.sitemap is False
    assert not router.has_errors()


@pytest.mark.parametrize(
    "entry, message",
    [
        ({"action": home}, 'The route does not contain a "uri" key.'),
        ({"uri": "/lost"}, 'The route does not contain an "action" key.'),
    ],
)
def test_load_routes_drops_incomplete_entries(entry, message):
    router = Router()
    assert router.load_routes([entry]) == 0
    assert len(router.table) == 0
    assert router.errors == (message,)


def test_load_routes_from_module_path():
    router = Router()
    assert router.load_routes("demo_routes") == 3
    assert [r.uri for r in router.routes("GET")] == ["/", "/hello", "/mellow"]
    assert router.table.get("GET", "/hello").visibility == "staging"
    assert router.run("GET", "/hello").value == "hello"


def test_load_routes_missing_module_is_recorded():
    router = Router()
    assert router.load_routes("hazelroute_missing_routes") == 0
    assert router.errors[0].startswith("Cannot import route source")


class BrokenOwner:
    def __init__(self, config=None):
        raise RuntimeError("config required")

    def show(self):
        return "never"


def test_load_routes_continues_after_unbuildable_owner():
    router = Router()
    added = router.load_routes(
        [
            {"uri": "/bad", "action": (BrokenOwner, "show")},
            {"uri": "/good", "action": home},
        ]
    )
    assert added == 1
    assert [r.uri for r in router.routes()] == ["/good"]
    assert len(router.errors) == 1
    assert "Class BrokenOwner cannot be instantiated" in router.errors[0]


def test_relative_import_path_is_recorded():
    router = Router()
    assert not router.register("/", ("..pkg:Thing", "show"))
    assert router.errors[0].startswith("Cannot import '..pkg'")


def test_route_module_failing_on_import_is_recorded():
    router = Router()
    assert router.load_routes("broken_routes") == 0
    assert "route table unavailable" in router.errors[0]


def test_single_middleware_name_is_not_split():
    seen = []
    router = Router()
    router.middleware("auth", lambda route: seen.append(route.uri))
    router.load_routes([{"uri": "/", "action": home, "middleware": "auth"}])
    assert router.table.get("GET", "/").middleware == ["auth"]
    router.run("GET", "/")
    assert seen == ["/"]
    assert not router.has_errors()


def test_load_routes_treats_none_method_and_middleware_as_missing():
    router = Router()
    router.load_routes([{"uri": "/", "action": home, "method": None, "middleware": None}])
    index = router.table.get("GET", "/")
    assert index is not None
    assert index.middleware == []
    assert router.table.methods() == ("GET",)


def test_load_routes_keeps_insertion_order_across_calls():
    router = Router()
    router.load_routes([{"uri": "/user/{id}", "action": home}])
    router.load_routes([{"uri": "/user/active", "action": other}])
    assert [r.uri for r in router.routes("GET")] == ["/user/{id}", "/user/active"]


def test_set_sitemap_updates_first_matching_uri():
    router = Router()
    router.register("/feed", home, method="POST")
    router.register("/feed", other)
    assert router.set_sitemap("/feed", True) is True
    assert router.table.get("POST", "/feed").sitemap is True
    assert router.table.get("GET", "/feed").sitemap is False


def test_set_sitemap_unknown_uri_is_recorded():
    router = Router()
    router.register("/user/{id}", home)
    assert router.set_sitemap("/user/42", True) is False
    assert router.errors == ("Route '/user/42' not found.",)


def test_middleware_resolution_failure_goes_to_middleware_channel():
    router = Router()
    router.middleware("auth", (demo_routes.DemoController, "nope"))
    router.middleware("bad", 12)
    messages = [d.message for d in router.diagnostics.entries(MIDDLEWARE)]
    assert len(messages) == 2
    assert "Method nope does not exist" in messages[0]
    assert messages[1] == "Middleware 'bad' is not callable."


class Pages:
    def __init__(self):
        self.visits = 0

    @route("/", sitemap=True)
    def index(self):
        self.visits += 1
        return "index"

    @route("/contact", method="POST", middleware=["csrf"])
    @route("/contact")
    def contact(self):
        return "contact"

    @route("/health", visibility="internal")
    @staticmethod
    def health():
        return "ok"

    def helper(self):
        return "not routed"


class MorePages(Pages):
    @route("/", sitemap=False)
    def index(self):
        return "override"

    def contact(self):
        return "hidden"


def test_add_controller_registers_marked_methods():
    router = Router()
    router.add_controller(Pages)
    assert [r.name for r in router.routes()] == [
        "GET /",
        "GET /contact",
        "GET /health",
        "POST /contact",
    ]
    assert router.table.get("GET", "/").sitemap is True
    assert router.table.get("POST", "/contact").middleware == ["csrf"]
    assert router.table.get("GET", "/health").visibility == "internal"
    assert router.run("GET", "/health").value == "ok"


def test_add_controller_instance_shares_state():
    pages = Pages()
    router = BaseRouter()
    router.add_controller(pages)
    router.run("GET", "/")
    router.run("GET", "/")
    assert pages.visits == 2


def test_add_controller_honours_subclass_overrides():
    router = Router()
    router.add_controller(MorePages)
    assert [r.name for r in router.routes()] == ["GET /", "GET /health"]
    assert router.run("GET", "/").value == "override"
    assert router.table.get("GET", "/").sitemap is False


def test_route_marker_accepts_single_middleware_name():
    class Admin:
        @route("/admin", middleware="auth")
        def index(self):
            return "admin"

    router = Router()
    router.add_controller(Admin)
    assert router.table.get("GET", "/admin").middleware == ["auth"]
