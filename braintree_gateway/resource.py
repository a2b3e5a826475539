"""Resource data objects built from decoded gateway responses."""

from __future__ import annotations

from typing import Any, Mapping, Self


class Resource:
    """Read-only wrapper over a decoded attribute mapping.

    Attributes are exposed as Python attributes; the mapping is stored as
    given, without validation or derived fields.
    """

    def __init__(self, attributes: Mapping[str, Any]) -> None:
        object.__setattr__(self, "_attributes", dict(attributes))

    @classmethod
    def factory(cls, attributes: Mapping[str, Any]) -> Self:
        return cls(attributes)

    @property
    def attributes(self) -> dict[str, Any]:
        return dict(self._attributes)

    def __getattr__(self, name: str) -> Any:
        # Only called for names not found normally
        try:
            return self.__dict__["_attributes"][name]
        except KeyError:
            raise AttributeError(
                f"{type(self).__name__!r} object has no attribute {name!r}"
            ) from None

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"{type(self).__name__} is read-only")

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._attributes == other._attributes

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        attributes = ", ".join(f"{key}={value!r}" for key, value in self._attributes.items())
        return f"{type(self).__name__}[{attributes}]"

    __str__ = __repr__


class AccessToken(Resource):
    """An OAuth access token issued by the gateway."""
