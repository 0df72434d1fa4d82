"""A registry of named encoder constructors."""

from __future__ import annotations

import threading
from typing import Any, Callable, Mapping

EncoderConstructor = Callable[[Any], Any]


class NoEncoderNameError(ValueError):
    """Raised when an encoder name is empty."""

    def __init__(self) -> None:
        super().__init__("no encoder name specified")


class EncoderRegistry:
    """Maps encoder names to constructors that take an encoder config."""

    def __init__(self, constructors: Mapping[str, EncoderConstructor] | None = None) -> None:
        self._lock = threading.RLock()
        self._constructors: dict[str, EncoderConstructor] = {}
        for name, constructor in (constructors or {}).items():
            self.register(name, constructor)

    def register(self, name: str, constructor: EncoderConstructor) -> None:
        """Register a constructor; a name may only be registered once."""
        with self._lock:
            if not name:
                raise NoEncoderNameError()
            if name in self._constructors:
                raise ValueError(f'encoder already registered for name "{name}"')
            self._constructors[name] = constructor

    def new(self, name: str, encoder_config: Any) -> Any:
        """Build the encoder registered under ``name`` from ``encoder_config``."""
        if getattr(encoder_config, "time_key", "") and getattr(
            encoder_config, "encode_time", None
        ) is None:
            raise ValueError("missing EncodeTime in EncoderConfig")
        with self._lock:
            if not name:
                raise NoEncoderNameError()
            try:
                constructor = self._constructors[name]
            except KeyError:
                raise ValueError(f'no encoder registered for name "{name}"') from None
            return constructor(encoder_config)

    def names(self) -> tuple[str, ...]:
        """Return the registered names, sorted."""
        with self._lock:
            return tuple(sorted(self._constructors))


_default_registry = EncoderRegistry()


def register_encoder(name: str, constructor: EncoderConstructor) -> None:
    """Register a constructor in the process-wide registry."""
    _default_registry.register(name, constructor)


def new_encoder(name: str, encoder_config: Any) -> Any:
    """Build an encoder from the process-wide registry."""
    return _default_registry.new(name, encoder_config)