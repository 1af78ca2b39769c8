"""Suite resolvers - turn an opaque identifier into a runnable suite.

The core only knows the SuiteResolver protocol. SuiteRegistry is populated
by the host program; ImportResolver loads "package.module:Name" identifiers
for the command line.
"""

import importlib
import inspect
from typing import Any, Callable, Optional, Protocol

from loguru import logger

from ..errors import (
    AccessDeniedError,
    DependencyMissingError,
    InstantiationFailedError,
    InstantiationNotPermittedError,
    SuiteNotFoundError,
)
from ..messages import message
from ..tree.suite import Suite

SuiteFactory = Callable[[], Suite]


class SuiteResolver(Protocol):
    def resolve(self, identifier: str) -> Suite:
        """Return a fresh runnable suite for identifier.

        Raises:
            ResolutionError: A subclass naming why resolution failed.
        """
        ...


def instantiate(identifier: str, factory: Any) -> Suite:
    """Call a suite factory, translating failures into resolution errors."""
    if inspect.isclass(factory) and inspect.isabstract(factory):
        raise InstantiationNotPermittedError(
            message("cannotInstantiateSuite", f"{identifier} is abstract"), identifier
        )
    if not callable(factory):
        raise InstantiationNotPermittedError(
            message("cannotInstantiateSuite", f"{identifier} is not callable"), identifier
        )

    try:
        suite = factory()
    except TypeError as e:
        # Most often a constructor that requires arguments.
        raise InstantiationNotPermittedError(
            message("cannotInstantiateSuite", e), identifier
        ) from e
    except PermissionError as e:
        raise AccessDeniedError(message("securityWhenRerunning", e), identifier) from e
    except ImportError as e:
        raise DependencyMissingError(message("cannotLoadDependency", e), identifier) from e
    except Exception as e:
        raise InstantiationFailedError(
            message("cannotInstantiateSuite", f"{type(e).__name__}: {e}"), identifier
        ) from e

    if not isinstance(suite, Suite):
        raise InstantiationNotPermittedError(
            message("cannotInstantiateSuite", f"{identifier} did not produce a Suite"),
            identifier,
        )
    return suite


class SuiteRegistry:
    """Resolver backed by a mapping of identifiers to suite factories."""

    def __init__(self):
        self._factories: dict[str, SuiteFactory] = {}

    def register(self, identifier: Optional[str] = None, factory: Optional[SuiteFactory] = None):
        """Register a factory under identifier.

        Usable as a class decorator; the identifier then defaults to the
        class's suite id ("module:QualName").
        """
        def add(fn: SuiteFactory) -> SuiteFactory:
            key = identifier or f"{fn.__module__}:{fn.__qualname__}"
            self._factories[key] = fn
            return fn

        if factory is not None:
            return add(factory)
        return add

    def unregister(self, identifier: str) -> None:
        self._factories.pop(identifier, None)

    @property
    def identifiers(self) -> list[str]:
        return sorted(self._factories)

    def resolve(self, identifier: str) -> Suite:
        factory = self._factories.get(identifier)
        if factory is None:
            raise SuiteNotFoundError(message("cannotLoadSuite", identifier), identifier)
        return instantiate(identifier, factory)

    def __contains__(self, identifier: str) -> bool:
        return identifier in self._factories

    def __len__(self) -> int:
        return len(self._factories)


class ImportResolver:
    """Resolves "pkg.module:Name" (or "pkg.module.Name") by importing it.

    Name may be a dotted path inside the module. It may refer to a Suite
    subclass or factory (called with no arguments) or to a Suite instance.
    """

    def resolve(self, identifier: str) -> Suite:
        module_name, attr_path = _split_identifier(identifier)
        logger.debug("Importing {} for {}", module_name, identifier)

        try:
            module = importlib.import_module(module_name)
        except ModuleNotFoundError as e:
            if e.name and (module_name == e.name or module_name.startswith(e.name + ".")):
                raise SuiteNotFoundError(message("cannotLoadSuite", identifier), identifier) from e
            raise DependencyMissingError(message("cannotLoadDependency", e), identifier) from e
        except ImportError as e:
            raise DependencyMissingError(message("cannotLoadDependency", e), identifier) from e
        except PermissionError as e:
            raise AccessDeniedError(message("securityWhenRerunning", e), identifier) from e

        target: Any = module
        for part in attr_path.split("."):
            target = getattr(target, part, None)
            if target is None:
                raise SuiteNotFoundError(message("cannotLoadSuite", identifier), identifier)

        if isinstance(target, Suite):
            return target
        if inspect.isclass(target) and not issubclass(target, Suite):
            raise InstantiationNotPermittedError(
                message("cannotInstantiateSuite", f"{identifier} is not a Suite"), identifier
            )
        return instantiate(identifier, target)


def _split_identifier(identifier: str) -> tuple[str, str]:
    if ":" in identifier:
        module_name, _, attr_path = identifier.partition(":")
    else:
        module_name, _, attr_path = identifier.rpartition(".")

    if not module_name or not attr_path:
        raise SuiteNotFoundError(message("cannotLoadSuite", identifier), identifier)
    return module_name, attr_path
