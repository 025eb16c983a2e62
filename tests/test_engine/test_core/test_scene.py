from types import SimpleNamespace

import pytest

from engine.core.events import EngineEvent, EventBus
from engine.core.scene import Scene, SceneManager


class RecordingScene(Scene):
    def __init__(self, game, label="scene"):
        super().__init__(game)
        self.label = label
        self.log = game.log
        self.updates = 0

    def recreate(self):
        return type(self)(self.game, self.label)

    def on_enter(self):
        super().on_enter()
        self.log.append((self.label, "enter"))

    def on_exit(self):
        super().on_exit()
        self.log.append((self.label, "exit"))

    def on_destroy(self):
        self.log.append((self.label, "destroy"))

    def update(self, dt):
        self.updates += 1

    def render(self, alpha):
        self.log.append((self.label, "render"))


@pytest.fixture
def game():
    return SimpleNamespace(log=[], event_bus=EventBus())


@pytest.fixture
def manager(game):
    return SceneManager(game)


def test_operations_applied_on_update(manager, game):
    scene = RecordingScene(game, "title")
    manager.push(scene)
    assert manager.is_empty

    manager.update(0.1)

    assert manager.current is scene
    assert scene.is_active
    assert scene.updates == 1


def test_pop_destroys_and_uncovers(manager, game):
    bottom, top = RecordingScene(game, "bottom"), RecordingScene(game, "top")
    manager.push(bottom)
    manager.push(top)
    manager.update(0.1)
    game.log.clear()

    manager.pop()
    manager.update(0.1)

    assert game.log == [("top", "exit"), ("top", "destroy"), ("bottom", "enter")]
    assert manager.current is bottom


def test_switch_replaces(manager, game):
    manager.push(RecordingScene(game, "a"))
    manager.update(0.1)

    replacement = RecordingScene(game, "b")
    manager.switch(replacement)
    manager.update(0.1)

    assert manager.current is replacement
    assert ("a", "destroy") in game.log


def test_reload_creates_fresh_instance(manager, game):
    events = []
    game.event_bus.subscribe(EngineEvent.SCENE_RELOADED, lambda e: events.append(e["scene_name"]), weak=False)
    original = RecordingScene(game, "novel")
    manager.push(original)
    manager.update(0.1)
    game.log.clear()

    manager.reload()
    manager.update(0.1)

    fresh = manager.current
    assert fresh is not original
    assert isinstance(fresh, RecordingScene)
    assert fresh.label == "novel"
    assert game.log == [("novel", "exit"), ("novel", "destroy"), ("novel", "enter")]
    assert events == ["RecordingScene"]


def test_reload_empty_stack(manager):
    manager.reload()
    manager.update(0.1)
    assert manager.is_empty


def test_clear(manager, game):
    manager.push(RecordingScene(game, "a"))
    manager.push(RecordingScene(game, "b"))
    manager.update(0.1)

    manager.clear()
    manager.update(0.1)

    assert manager.is_empty
    assert ("a", "destroy") in game.log and ("b", "destroy") in game.log


def test_only_top_opaque_scene_renders(manager, game):
    manager.push(RecordingScene(game, "a"))
    manager.push(RecordingScene(game, "b"))
    manager.update(0.1)
    game.log.clear()

    manager.render(0.0)

    assert game.log == [("b", "render")]


def test_default_recreate_uses_game():
    class Plain(Scene):
        def update(self, dt):
            pass

        def render(self, alpha):
            pass

    game = SimpleNamespace()
    scene = Plain(game)
    fresh = scene.recreate()

    assert type(fresh) is Plain
    assert fresh.game is game
