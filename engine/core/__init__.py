"""
Core engine module.

Exports:
- Game, GameConfig: Main game class and configuration
- Scene, SceneManager: Scene management
- Scheduler, Task, Wait: Cooperative tasks
- ServiceRegistry: Shared services per game
- EventBus, Event, EngineEvent, AudioEvent, NovelEvent: Event system
- Action: Input actions
"""

from engine.core.game import Game, GameConfig
from engine.core.scene import Scene, SceneManager
from engine.core.scheduler import Scheduler, Task, Wait
from engine.core.services import ServiceRegistry
from engine.core.events import EventBus, Event, EngineEvent, AudioEvent, NovelEvent
from engine.core.actions import Action

__all__ = [
    # Game
    "Game",
    "GameConfig",
    # Scene
    "Scene",
    "SceneManager",
    # Tasks
    "Scheduler",
    "Task",
    "Wait",
    # Services
    "ServiceRegistry",
    # Events
    "EventBus",
    "Event",
    "EngineEvent",
    "AudioEvent",
    "NovelEvent",
    # Input
    "Action",
]
