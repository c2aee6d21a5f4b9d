"""Handler resolution policy (source of truth).

``resolve(reference)`` turns a declarative handler reference into a callable.
It is used for route actions and middleware alike and never records anything
itself: failures raise :class:`ResolutionError` and the router decides whether
to record or re-raise.

Accepted references
-------------------
- a callable: returned unchanged.
- ``(owner, member_name)`` pair:

  * ``owner`` is a class. The member is looked up with
    ``inspect.getattr_static`` so descriptors are seen as declared:

    - missing member → ``ResolutionError("Method m does not exist in class C.")``
    - ``staticmethod`` / ``classmethod`` / any other shared attribute → bound
      through ``getattr(owner, member)`` without creating an instance
    - plain function (instance method) → a new instance is built with no
      arguments and the member is bound to it. A constructor that requires
      arguments or raises while building the instance fails with
      ``ResolutionError``.

  * ``owner`` is an import path (``"pkg.mod:Class"`` or ``"pkg.mod.Class"``):
    imported via ``importlib`` then treated as a class. Import failures become
    ``ResolutionError``.

  * any other object: bound attribute lookup on that instance.

- anything else: returned unchanged; callers check ``callable()`` afterwards.

Each call resolves once; no cache is kept, so registering the same
``(Class, "method")`` twice creates two owner instances.
"""

from __future__ import annotations

import importlib
import inspect
from typing import Any, Callable, Tuple

from .errors import ResolutionError

__all__ = ["resolve", "is_member_reference", "import_owner"]


def is_member_reference(reference: Any) -> bool:
    """True for ``(owner, "member")`` pairs."""
    return (
        isinstance(reference, (tuple, list))
        and len(reference) == 2
        and isinstance(reference[1], str)
    )


def resolve(reference: Any) -> Any:
    if callable(reference) and not isinstance(reference, (tuple, list)):
        return reference
    if not is_member_reference(reference):
        return reference
    owner, member = reference
    if isinstance(owner, str):
        owner = import_owner(owner)
    if inspect.isclass(owner):
        return _bind_class_member(owner, member)
    try:
        return getattr(owner, member)
    except AttributeError:
        raise ResolutionError(
            f"Method {member} does not exist in {type(owner).__name__} instance."
        ) from None


def import_owner(path: str) -> Any:
    """Import ``"pkg.mod:Class"`` or ``"pkg.mod.Class"`` and return the object."""
    module_name, attr_path = _split_import_path(path)
    try:
        target: Any = importlib.import_module(module_name)
    except Exception as exc:
        raise ResolutionError(f"Cannot import '{module_name}' for '{path}': {exc}") from exc
    for attr in attr_path.split("."):
        try:
            target = getattr(target, attr)
        except AttributeError:
            raise ResolutionError(f"Class {path} does not exist.") from None
    return target


def _split_import_path(path: str) -> Tuple[str, str]:
    path = path.strip()
    if ":" in path:
        module_name, attr_path = path.split(":", 1)
    elif "." in path:
        module_name, attr_path = path.rsplit(".", 1)
    else:
        raise ResolutionError(f"Class {path} does not exist.")
    if not module_name or not attr_path:
        raise ResolutionError(f"Class {path} does not exist.")
    return module_name, attr_path


def _bind_class_member(owner: type, member: str) -> Callable:
    try:
        raw = inspect.getattr_static(owner, member)
    except AttributeError:
        raise ResolutionError(
            f"Method {member} does not exist in class {owner.__name__}."
        ) from None
    if not inspect.isfunction(raw):
        # static/class methods and other shared attributes need no instance
        return getattr(owner, member)
    try:
        instance = owner()
    except Exception as exc:
        raise ResolutionError(
            f"Class {owner.__name__} cannot be instantiated without arguments: {exc}"
        ) from exc
    return getattr(instance, member)
