"""
JSON story runtime - a Story Source over a node graph.

Format:

```
{
  "id": "prologue",
  "start": "intro",
  "nodes": [
    {
      "id": "intro",
      "lines": [
        {"text": "The wind howls.", "tags": ["speaker: NONE", "splash: snowfield"]},
        {"text": "Cold, isn't it?", "tags": ["speaker: Aria", "expression: Aria_shiver"]}
      ],
      "choices": [
        {"text": "Head inside", "next": "cabin"},
        {"text": "Keep walking", "next": "ridge"}
      ]
    },
    {"id": "cabin", "lines": [{"text": "Warmth at last."}], "next": "END"}
  ]
}
```

A node's lines are emitted in order. After the last line the node's
choices are offered; without choices the story flows into ``next``.
A missing ``next`` or ``"END"`` finishes the story.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Optional

import jsonschema

from novel.story.source import Choice, StorySource


logger = logging.getLogger(__name__)

END = "END"

STORY_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["nodes"],
    "properties": {
        "id": {"type": "string"},
        "start": {"type": "string", "minLength": 1},
        "nodes": {
            "type": "array",
            "minItems": 1,
            "items": {
                "type": "object",
                "required": ["id"],
                "properties": {
                    "id": {"type": "string", "minLength": 1},
                    "lines": {
                        "type": "array",
                        "items": {
                            "type": "object",
                            "required": ["text"],
                            "properties": {
                                "text": {"type": "string"},
                                "tags": {"type": "array", "items": {"type": "string"}},
                            },
                            "additionalProperties": False,
                        },
                    },
                    "choices": {
                        "type": "array",
                        "items": {
                            "type": "object",
                            "required": ["text", "next"],
                            "properties": {
                                "text": {"type": "string"},
                                "next": {"type": "string", "minLength": 1},
                            },
                            "additionalProperties": False,
                        },
                    },
                    "next": {"type": ["string", "null"]},
                },
                "additionalProperties": False,
            },
        },
    },
}


class StoryFormatError(ValueError):
    """Story content is not valid JSON or does not describe a valid graph."""


class JsonStory(StorySource):
    """
    Story Source over the JSON node graph.

    Usage:
        story = JsonStory(Path("story.json").read_text())
        while story.can_continue:
            print(story.continue_(), story.current_tags)
    """

    def __init__(self, content: str | dict[str, Any]):
        data = self._decode(content)
        self.id: str = data.get("id", "story")
        self._nodes: dict[str, dict[str, Any]] = {}

        for node in data["nodes"]:
            if node["id"] in self._nodes:
                raise StoryFormatError(f"Duplicate node id: {node['id']}")
            self._nodes[node["id"]] = node

        self._check_targets()

        self.start_node: str = data.get("start") or data["nodes"][0]["id"]
        if self.start_node not in self._nodes:
            raise StoryFormatError(f"Start node not found: {self.start_node}")

        self._node: Optional[dict[str, Any]] = None
        self._line_index = 0
        self._tags: list[str] = []
        self._goto(self.start_node)

    @classmethod
    def from_file(cls, path: str | Path) -> JsonStory:
        path = Path(path)
        with open(path, 'r', encoding='utf-8') as f:
            story = cls(f.read())
        logger.info("Loaded story '%s' from %s (%d nodes)", story.id, path, len(story._nodes))
        return story

    @staticmethod
    def _decode(content: str | dict[str, Any]) -> dict[str, Any]:
        if isinstance(content, str):
            try:
                content = json.loads(content)
            except json.JSONDecodeError as e:
                raise StoryFormatError(f"Story is not valid JSON: {e}") from e

        try:
            jsonschema.validate(instance=content, schema=STORY_SCHEMA)
        except jsonschema.ValidationError as e:
            raise StoryFormatError(f"Invalid story: {e.message}") from e

        return content

    def _check_targets(self) -> None:
        for node in self._nodes.values():
            targets = [choice["next"] for choice in node.get("choices", [])]
            if node.get("next"):
                targets.append(node["next"])
            for target in targets:
                if target != END and target not in self._nodes:
                    raise StoryFormatError(f"Node '{node['id']}' points to unknown node '{target}'")

    # Story Source

    @property
    def can_continue(self) -> bool:
        return self._node is not None and self._line_index < len(self._node.get("lines", []))

    def continue_(self) -> str:
        if not self.can_continue:
            raise RuntimeError("Story cannot continue: at a choice point or finished")

        line = self._node["lines"][self._line_index]
        self._line_index += 1
        self._tags = list(line.get("tags", []))
        self._flow()
        return line["text"]

    @property
    def current_tags(self) -> list[str]:
        return list(self._tags)

    @property
    def current_choices(self) -> list[Choice]:
        if self._node is None or self.can_continue:
            return []
        return [
            Choice(text=choice["text"], index=i)
            for i, choice in enumerate(self._node.get("choices", []))
        ]

    def choose_choice_index(self, index: int) -> None:
        choices = self._node.get("choices", []) if self._node is not None and not self.can_continue else []
        if not 0 <= index < len(choices):
            raise IndexError(f"Choice index {index} out of range (0..{len(choices) - 1})")

        self._tags = []
        self._goto(choices[index]["next"])

    # Introspection

    @property
    def current_node(self) -> Optional[str]:
        """Id of the node the story is positioned in, None once finished."""
        return self._node["id"] if self._node is not None else None

    @property
    def has_ended(self) -> bool:
        return self._node is None

    # Navigation

    def _goto(self, node_id: str) -> None:
        if node_id == END:
            self._node = None
        else:
            self._node = self._nodes[node_id]
        self._line_index = 0
        self._flow()

    def _flow(self) -> None:
        """Follow ``next`` links past exhausted nodes that offer no choices."""
        for _ in range(len(self._nodes) + 1):
            node = self._node
            if node is None or self.can_continue or node.get("choices"):
                return

            target = node.get("next")
            if not target or target == END:
                self._node = None
                return

            self._node = self._nodes[target]
            self._line_index = 0

        logger.error("Story '%s' loops through nodes without lines; ending it", self.id)
        self._node = None
