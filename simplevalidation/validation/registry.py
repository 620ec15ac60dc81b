"""Checker registry - factory pattern for constraint checkers.

Maps the leading name of an instruction to a zero-argument factory that
builds a fresh checker. Reads and writes are guarded by a lock so that
registration can safely race with validation; ``freeze`` closes the
registration phase for applications that want a fixed set of checkers.
"""
from __future__ import annotations

import threading
from typing import Mapping

from simplevalidation.errors import AppError, AppErrorException, Result, Ok, not_registered, registry_frozen, reserved_name
from simplevalidation.logging import registry_logger

from .checkers import BUILTIN_CHECKERS, Checker, CheckerFactory
from .instruction import SKIP_MARKERS, STRUCT_NAME

log = registry_logger()

RESERVED_NAMES = frozenset({STRUCT_NAME, *SKIP_MARKERS})


class CheckerRegistry:
    """Process-wide name -> factory mapping. Entries are never removed."""

    def __init__(self, factories: Mapping[str, CheckerFactory] | None = None):
        self._lock = threading.RLock()
        self._factories: dict[str, CheckerFactory] = {}
        self._frozen = False
        for name, factory in (BUILTIN_CHECKERS if factories is None else factories).items():
            self.register(name, factory)

    def register(self, name: str, factory: CheckerFactory) -> None:
        """Insert or overwrite a checker factory.

        Raises AppErrorException when the registry is frozen or the name is
        reserved by the instruction grammar ("struct", "-", "").
        """
        if name in RESERVED_NAMES:
            raise AppErrorException(reserved_name(name, origin="registry").unwrap_err())
        with self._lock:
            if self._frozen:
                raise AppErrorException(registry_frozen(name, origin="registry").unwrap_err())
            replaced = name in self._factories
            self._factories[name] = factory
        log.debug("checker_registered", checker=name, replaced=replaced)

    def resolve(self, name: str, field: str | None = None) -> Result[Checker, AppError]:
        """Build a fresh checker for ``name``; Err when the name is unknown."""
        with self._lock:
            factory = self._factories.get(name)
        if factory is None:
            return not_registered(name, field=field, origin="registry")
        return Ok(factory())

    def freeze(self) -> None:
        with self._lock:
            self._frozen = True
        log.debug("registry_frozen", checkers=len(self._factories))

    @property
    def frozen(self) -> bool:
        return self._frozen

    def names(self) -> list[str]:
        with self._lock:
            return sorted(self._factories)

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._factories


_DEFAULT_REGISTRY: CheckerRegistry | None = None
_DEFAULT_LOCK = threading.Lock()


def get_default_registry() -> CheckerRegistry:
    """The shared registry used by the module-level validation functions."""
    global _DEFAULT_REGISTRY
    with _DEFAULT_LOCK:
        if _DEFAULT_REGISTRY is None:
            from simplevalidation.config import get_settings

            _DEFAULT_REGISTRY = CheckerRegistry()
            if get_settings().FREEZE_REGISTRY:
                _DEFAULT_REGISTRY.freeze()
        return _DEFAULT_REGISTRY


def register_checker(name: str, factory: CheckerFactory) -> None:
    """Register a custom checker on the default registry."""
    get_default_registry().register(name, factory)
