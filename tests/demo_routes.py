"""Declarative route source imported by path in the tests."""


class DemoController:
    created = 0

    def __init__(self):
        DemoController.created += 1

    def index(self):
        return "index"

    def hello(self):
        return "hello"

    def mellow(self):
        return "mellow"

    @staticmethod
    def ping():
        return "pong"


ROUTES = [
    {
        "uri": "/",
        "action": (DemoController, "index"),
        "method": "GET",
        "middleware": [],
        "sitemap": True,
        "visibility": "live",
    },
    {
        "uri": "/hello",
        "action": ("demo_routes:DemoController", "hello"),
        "sitemap": False,
        "visibility": "staging",
    },
    {
        "uri": "/mellow",
        "action": (DemoController, "mellow"),
        "sitemap": True,
        "visibility": "live",
    },
]
