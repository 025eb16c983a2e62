import logging

import pytest

from engine.core.services import ServiceRegistry


class Jukebox:
    pass


def test_provide_and_get():
    services = ServiceRegistry()
    jukebox = Jukebox()

    assert services.provide(Jukebox, jukebox) is jukebox
    assert services.get(Jukebox) is jukebox
    assert Jukebox in services


def test_first_instance_wins(caplog):
    services = ServiceRegistry()
    first, second = Jukebox(), Jukebox()
    services.provide(Jukebox, first)

    with caplog.at_level(logging.ERROR):
        kept = services.provide(Jukebox, second)

    assert kept is first
    assert services.get(Jukebox) is first
    assert "Multiple instances of Jukebox" in caplog.text


def test_same_instance_twice_is_quiet(caplog):
    services = ServiceRegistry()
    jukebox = Jukebox()
    services.provide(Jukebox, jukebox)

    with caplog.at_level(logging.ERROR):
        services.provide(Jukebox, jukebox)

    assert caplog.records == []


def test_require_missing():
    with pytest.raises(KeyError):
        ServiceRegistry().require(Jukebox)


def test_remove_allows_new_instance():
    services = ServiceRegistry()
    services.provide(Jukebox, Jukebox())
    services.remove(Jukebox)

    replacement = Jukebox()
    assert services.provide(Jukebox, replacement) is replacement
    assert services.require(Jukebox) is replacement
