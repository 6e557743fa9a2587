from __future__ import annotations

from keycode_registry.domain.errors import ConfigurationError, ParseError, PatternMismatchError, RegistryError


def test_error_hierarchy() -> None:
    assert issubclass(ConfigurationError, RegistryError)
    assert issubclass(ParseError, RegistryError)
    assert issubclass(PatternMismatchError, RegistryError)
    for exception in (ConfigurationError(""), ParseError(""), PatternMismatchError("")):
        assert isinstance(exception, RegistryError)
