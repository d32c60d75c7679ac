"""
Interface-to-implementation bindings.

Generated provider modules register their ``BINDINGS`` here; in
``attribute`` binding mode implementations register themselves with the
``@bind(Interface)`` decorator instead.

    container = Container()
    container.bind(UserRepositoryInterface, UserEloquentRepository)
    service = container.make(UserServiceInterface, session=session)

``make`` autowires constructor parameters whose annotation is itself bound,
and takes everything else from keyword overrides or parameter defaults.
"""

import inspect
import logging
import typing
from collections.abc import Callable
from typing import Any

from repository_pattern.common.exceptions import BindingResolutionError


logger = logging.getLogger(__name__)


class Container:
    def __init__(self) -> None:
        self._bindings: dict[Any, tuple[Any, bool]] = {}
        self._instances: dict[Any, Any] = {}

    def bind(self, abstract: Any, concrete: Any = None, shared: bool = False) -> None:
        """Bind ``abstract`` to a class or a ``factory(container, **overrides)`` callable."""
        self._instances.pop(abstract, None)
        self._bindings[abstract] = (concrete or abstract, shared)
        logger.debug(f"Bound {_name(abstract)} -> {_name(concrete or abstract)} (shared={shared})")

    def singleton(self, abstract: Any, concrete: Any = None) -> None:
        self.bind(abstract, concrete, shared=True)

    def instance(self, abstract: Any, obj: Any) -> Any:
        self._instances[abstract] = obj
        return obj

    def bound(self, abstract: Any) -> bool:
        return abstract in self._bindings or abstract in self._instances

    def make(self, abstract: Any, **overrides: Any) -> Any:
        if abstract in self._instances:
            return self._instances[abstract]

        concrete, shared = self._bindings.get(abstract, (abstract, False))

        if isinstance(concrete, type):
            obj = self.build(concrete, **overrides)
        elif callable(concrete):
            obj = concrete(self, **overrides)
        else:
            raise BindingResolutionError(f"Target {_name(abstract)} is not instantiable.")

        if shared:
            self._instances[abstract] = obj
        return obj

    def build(self, concrete: type, **overrides: Any) -> Any:
        if inspect.isabstract(concrete):
            raise BindingResolutionError(f"Target {_name(concrete)} is abstract and has no binding.")

        try:
            hints = typing.get_type_hints(concrete.__init__)
        except (NameError, TypeError):
            hints = {}

        kwargs: dict[str, Any] = {}
        parameters = list(inspect.signature(concrete.__init__).parameters.values())[1:]
        for param in parameters:
            if param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
                continue
            if param.name in overrides:
                kwargs[param.name] = overrides[param.name]
                continue

            annotation = hints.get(param.name, param.annotation)
            if self.bound(annotation):
                kwargs[param.name] = self.make(annotation, **overrides)
            elif param.default is not param.empty:
                continue
            else:
                raise BindingResolutionError(
                    f"Unresolvable dependency [{param.name}] in class {_name(concrete)}"
                )

        return concrete(**kwargs)

    def flush(self) -> None:
        self._bindings.clear()
        self._instances.clear()


default_container = Container()


def bind(interface: Any, container: Container | None = None, shared: bool = False) -> Callable[[type], type]:
    """Class decorator: register the decorated class as the implementation of ``interface``."""

    def decorator(cls: type) -> type:
        (container or default_container).bind(interface, cls, shared=shared)
        return cls

    return decorator


def _name(obj: Any) -> str:
    return getattr(obj, "__name__", repr(obj))
