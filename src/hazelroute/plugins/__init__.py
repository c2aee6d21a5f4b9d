"""Plugin package initialiser.

Kept free of concrete plugin imports; the ``logging`` and ``pydantic`` plugins
register themselves when ``hazelroute`` is imported.
"""

__all__: list[str] = []
