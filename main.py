"""
Run the visual novel.

Usage:
    python main.py [config.json]
"""

import logging
import sys

from engine.core.game import Game
from novel.config import NovelConfig
from novel.scene import NovelScene


def main():
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = NovelConfig.load(sys.argv[1]) if len(sys.argv) > 1 else NovelConfig()

    game = Game(config.game_config())
    game.scene_manager.push(NovelScene(game, config))
    game.run()


if __name__ == "__main__":
    main()
