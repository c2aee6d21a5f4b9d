"""Sitemap document generation from the GET routes of a table."""

from __future__ import annotations

import html
from dataclasses import dataclass
from typing import List

from .table import RouteTable

__all__ = [
    "SitemapConfig",
    "XmlDocument",
    "generate_sitemap",
    "SITEMAP_NAMESPACE",
    "XML_CONTENT_TYPE",
]

SITEMAP_NAMESPACE = "http://www.sitemaps.org/schemas/sitemap/0.9"
XML_CONTENT_TYPE = "application/xml; charset=utf-8"


@dataclass(frozen=True)
class SitemapConfig:
    uri: str
    domain: str

    def __post_init__(self) -> None:
        domain = (self.domain or "").strip()
        if not domain:
            raise ValueError("Sitemap requires a domain")
        if not self.uri:
            raise ValueError("Sitemap requires a uri")
        if domain.endswith("/"):
            domain = domain[:-1]
        object.__setattr__(self, "domain", domain)

    def url_for(self, uri: str) -> str:
        return f"{self.domain}/{uri.lstrip('/')}"


@dataclass(frozen=True)
class XmlDocument:
    """Body plus content type returned by the sitemap route handler."""

    body: str
    content_type: str = XML_CONTENT_TYPE

    def __str__(self) -> str:
        return self.body


def generate_sitemap(table: RouteTable, config: SitemapConfig) -> str:
    """Render every GET route flagged ``sitemap`` as a ``<url>`` entry, in table order."""
    parts: List[str] = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        f'<urlset xmlns="{SITEMAP_NAMESPACE}">',
    ]
    for route in table.routes("GET"):
        if route.sitemap:
            loc = html.escape(config.url_for(route.uri))
            parts.append(f"<url><loc>{loc}</loc></url>")
    parts.append("</urlset>")
    return "".join(parts)
