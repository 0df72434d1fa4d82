"""Fields that carry errors, alone or in arrays."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Optional

from .field import Field, FieldType, skip


def error(err: Optional[BaseException]) -> Field:
    """Store an error under the key ``"error"``."""
    return named_error("error", err)


def named_error(key: str, err: Optional[BaseException]) -> Field:
    """Store an error under ``key``; ``None`` gives a field that encodes to nothing."""
    if err is None:
        return skip()
    return Field(key=key, type=FieldType.ERROR, interface=err)


@dataclass(frozen=True)
class _ErrorElement:
    """Presents one error as an object with an ``"error"`` attribute."""

    error: BaseException

    def marshal_log_object(self, enc: Any) -> None:
        enc.add_string("error", str(self.error))


@dataclass(frozen=True, init=False)
class ErrorArray:
    """A sequence of errors that marshals as an array of error objects.

    ``None`` entries are left out of the output.
    """

    errors: tuple[Optional[BaseException], ...]

    def __init__(self, errors: Iterable[Optional[BaseException]] = ()) -> None:
        object.__setattr__(self, "errors", tuple(errors))

    def marshal_log_array(self, arr: Any) -> None:
        """Append each non-``None`` error to ``arr`` as an object."""
        for err in self.errors:
            if err is not None:
                arr.append_object(_ErrorElement(err))