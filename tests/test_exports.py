"""The top-level package re-exports the public API."""

import securestate


def test_public_api_is_importable():
    for name in securestate.__all__:
        assert hasattr(securestate, name), name


def test_version():
    assert securestate.__version__ == "1.0.0"
