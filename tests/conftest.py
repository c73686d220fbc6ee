"""Shared fixtures for the MindBot test suite."""

import os

import pytest
from fastapi.testclient import TestClient

# Keep a developer's ~/.mindbot/config.json and backend URL out of the tests
os.environ["MINDBOT_CONFIG"] = os.path.join(os.path.dirname(__file__), "_no_such_override.json")
os.environ.pop("MINDBOT_BACKEND_URL", None)


# ---------------------------------------------------------------------------
# All singleton classes that have a .reset() classmethod.
# Auto-reset between test modules prevents leaked state across tests.
# ---------------------------------------------------------------------------

_SINGLETON_CLASSES = [
    "mindbot.intelligence.catalog.Catalog",
    "mindbot.backend.RemoteBackend",
]


def _reset_all_singletons():
    """Reset every singleton that has been imported, and the config cache."""
    import importlib
    from mindbot.config.loader import reset_config
    reset_config()
    for path in _SINGLETON_CLASSES:
        module_path, class_name = path.rsplit(".", 1)
        try:
            mod = importlib.import_module(module_path)
            cls = getattr(mod, class_name, None)
            if cls is not None and hasattr(cls, "reset"):
                cls.reset()
        except (ImportError, AttributeError):
            pass


@pytest.fixture(autouse=True, scope="module")
def _reset_singletons_between_modules():
    """Auto-reset all singletons at the start of every test module."""
    _reset_all_singletons()
    yield
    _reset_all_singletons()


@pytest.fixture(scope="module")
def client():
    """FastAPI TestClient backed by the MindBot app."""
    from mindbot.api import app
    return TestClient(app)


# ---------------------------------------------------------------------------
# Catalog builders
# ---------------------------------------------------------------------------

def build_catalog(intents: list[dict], faq: list[dict] | None = None, **overrides):
    """Small isolated catalog. Keyword overrides replace top-level config keys.

    Pass thresholds={...} to change scoring or assembly constants.
    """
    from mindbot.intelligence.catalog import Catalog
    cfg = {
        "intents": intents,
        "faq": faq or [],
        "crisis": {"keywords": ["kill myself", "suicide"], "message": "Please call emergency services."},
        "synonyms": {},
        "thresholds": {},
    }
    cfg.update(overrides)
    return Catalog.from_config(cfg)


def default_catalog_with(**overrides):
    """The shipped catalog with some top-level keys replaced.

    thresholds={...} is merged over the shipped thresholds; any other key
    replaces the shipped table outright (synonyms={} disables paraphrasing).
    """
    from mindbot.config.loader import _load_defaults
    from mindbot.intelligence.catalog import Catalog
    cfg = _load_defaults()
    for key, value in overrides.items():
        if key == "thresholds":
            cfg[key] = {**cfg.get(key, {}), **value}
        else:
            cfg[key] = value
    return Catalog.from_config(cfg)


# Catalog order is part of the fixture: "sleep" comes before "anxiety", so an
# exact tie between them resolves to "sleep".
TIE_INTENTS = [
    {"key": "sleep", "tags": ["sleep"], "cores": ["rest well"]},
    {"key": "anxiety", "tags": ["anxious"], "cores": ["breathe slow"]},
    {"key": "default", "tags": ["hello"], "cores": ["tell me more"]},
]


@pytest.fixture
def tie_catalog():
    return build_catalog(TIE_INTENTS)


@pytest.fixture
def reversed_tie_catalog():
    return build_catalog([TIE_INTENTS[1], TIE_INTENTS[0], TIE_INTENTS[2]])
