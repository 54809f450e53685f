# tests/factories/__init__.py

from .factories import (
    DEFAULT_PAGE,
    BaselineFactory,
    FakeResponse,
    FakeSession,
    ParameterInfoFactory,
    PostParameterFactory,
)

__all__ = [
    "DEFAULT_PAGE",
    "BaselineFactory",
    "FakeResponse",
    "FakeSession",
    "ParameterInfoFactory",
    "PostParameterFactory",
]
