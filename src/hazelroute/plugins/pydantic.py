"""Pydantic validation plugin (source of truth).

Captured URI segments always arrive as strings. This plugin lets handlers
declare the types they want and converts the segments before the call.

Behaviour
---------
- ``on_register(router, route)``:
    * resolves type hints of the handler via ``get_type_hints``; unresolvable
      hints or no parameter hints leave the route untouched;
    * drops the ``return`` hint; a hint naming a parameter absent from the
      signature raises ``ValueError``;
    * builds ``<handler>_Model`` with ``create_model`` (parameters with a
      default keep it, others are required);
    * stores ``{"model", "hints", "signature"}`` in the plugin's per-route
      ``locals`` bucket on the router.
- ``wrap_handler(router, route, call_next)``:
    * passthrough when no model exists;
    * otherwise binds the positional segments to the signature, validates the
      annotated ones, merges them back with the rest and calls the handler
      with keyword arguments;
    * a failure raises ``ValidationError`` titled
      ``"Validation error in <route.name>"``;
    * ``disabled`` config (router-level or per route) is checked on each call.
- ``route_metadata`` publishes ``model`` and ``hints`` for ``members()``.

Registration
------------
Registers itself as ``"pydantic"`` at import.
"""

from __future__ import annotations

import inspect
from typing import Any, Callable, Dict, get_type_hints

from pydantic import ValidationError, create_model

from hazelroute.core.router import Router
from hazelroute.core.table import Route
from hazelroute.plugins._base_plugin import BasePlugin


class PydanticPlugin(BasePlugin):
    """Validate and convert captured segments using handler type hints."""

    plugin_code = "pydantic"
    plugin_description = "Validates handler inputs using Pydantic type hints"

    def configure(self, disabled: bool = False):
        """Configure pydantic plugin options; storage is handled by the wrapper."""
        pass

    def on_register(self, router: Router, route: Route) -> None:
        self._locals(route, create=True).pop("model", None)
        func = route.handler
        try:
            hints = get_type_hints(func)
        except Exception:
            # hints that cannot be resolved mean no model
            return
        hints.pop("return", None)
        if not hints:
            return

        try:
            sig = inspect.signature(func)
        except (TypeError, ValueError):
            return
        fields = {}
        for param_name, hint in hints.items():
            param = sig.parameters.get(param_name)
            if param is None:
                raise ValueError(
                    f"Handler '{getattr(func, '__name__', func)}' has type hint for "
                    f"'{param_name}' which is not in the function signature"
                )
            if param.default is inspect.Parameter.empty:
                fields[param_name] = (hint, ...)
            else:
                fields[param_name] = (hint, param.default)

        model_name = f"{getattr(func, '__name__', 'handler')}_Model"
        model = create_model(model_name, **fields)  # type: ignore[call-overload]
        self._locals(route, create=True)["model"] = {
            "model": model,
            "hints": hints,
            "signature": sig,
        }

    def wrap_handler(self, router: Router, route: Route, call_next: Callable):
        """Validate annotated parameters with the cached model before calling."""
        meta = self._locals(route).get("model")
        if not meta:
            return call_next

        sig = meta["signature"]
        hints = meta["hints"]
        model = meta["model"]

        def wrapper(*args, **kwargs):
            if self.configuration(route.name).get("disabled"):
                return call_next(*args, **kwargs)

            bound = sig.bind(*args, **kwargs)
            bound.apply_defaults()
            to_validate = {k: v for k, v in bound.arguments.items() if k in hints}
            other_args = {k: v for k, v in bound.arguments.items() if k not in hints}
            try:
                validated = model(**to_validate)
            except ValidationError as exc:
                raise ValidationError.from_exception_data(
                    title=f"Validation error in {route.name}",
                    line_errors=exc.errors(),
                ) from exc

            final_args = dict(other_args)
            for key, value in validated:
                final_args[key] = value
            return call_next(**final_args)

        return wrapper

    def get_model(self, route: Route):
        """Return the Pydantic model for ``route`` unless disabled or absent."""
        if self.configuration(route.name).get("disabled"):
            return None
        meta = self._locals(route).get("model")
        return meta["model"] if meta else None

    def route_metadata(self, router: Any, route: Route) -> Dict[str, Any]:
        meta = self._locals(route).get("model")
        if not meta:
            return {}
        return {"model": meta["model"], "hints": meta["hints"]}

    def _locals(self, route: Route, create: bool = False) -> Dict[str, Any]:
        bucket = self._get_store().setdefault(self.name, {})
        if create:
            entry = bucket.setdefault(route.name, {"config": {}, "locals": {}})
            return entry.setdefault("locals", {})
        return bucket.get(route.name, {}).get("locals", {})


Router.register_plugin(PydanticPlugin)
