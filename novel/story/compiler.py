"""
Story script compiler - converts text scripts to the JSON story graph.

Supports a small ink-like text format:

```
// Comments start with two slashes
=== intro
# speaker: NONE
# splash: snowfield
The wind howls across the ridge.
Cold, isn't it? # speaker: Aria # expression: Aria_shiver
* Head inside -> cabin
* Keep walking -> ridge

=== cabin
Warmth at last.
-> END
```

- ``=== name`` starts a node (text before the first header goes into
  a node called ``start``)
- every other non-empty line is one line of dialogue
- ``# key: value`` lines tag the next dialogue line; tags may also
  trail a dialogue line
- ``* text -> target`` adds a choice
- ``-> target`` sets where the node continues (``END`` finishes)
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional


logger = logging.getLogger(__name__)


class ScriptSyntaxError(ValueError):
    """A script line could not be compiled."""

    def __init__(self, message: str, line_number: int):
        super().__init__(f"line {line_number}: {message}")
        self.line_number = line_number


@dataclass
class ScriptLine:
    text: str
    tags: list[str] = field(default_factory=list)


@dataclass
class ScriptChoice:
    text: str
    next_node: str


@dataclass
class ScriptNode:
    id: str
    lines: list[ScriptLine] = field(default_factory=list)
    choices: list[ScriptChoice] = field(default_factory=list)
    next_node: Optional[str] = None


@dataclass
class CompiledScript:
    id: str
    nodes: list[ScriptNode] = field(default_factory=list)
    start_node: str = "start"


class ScriptCompiler:
    """
    Compiles story scripts from the text format.
    """

    NODE_PATTERN = re.compile(r'^={2,}\s*(\w+)\s*=*\s*$')
    CHOICE_PATTERN = re.compile(r'^\*\s*(.+?)\s*->\s*(\w+)\s*$')
    DIVERT_PATTERN = re.compile(r'^->\s*(\w+)\s*$')
    TAG_LINE_PATTERN = re.compile(r'^#\s*(.*)$')

    def compile_file(self, path: str | Path) -> CompiledScript:
        """Compile a script file."""
        path = Path(path)
        with open(path, 'r', encoding='utf-8') as f:
            content = f.read()

        script = self.compile_string(content)
        script.id = path.stem
        return script

    def compile_string(self, content: str) -> CompiledScript:
        """Compile a script string."""
        script = CompiledScript(id="compiled")
        current: Optional[ScriptNode] = None
        pending_tags: list[str] = []

        for line_number, raw in enumerate(content.split('\n'), start=1):
            line = raw.strip()

            if not line or line.startswith('//'):
                continue

            match = self.NODE_PATTERN.match(line)
            if match:
                self._drop_dangling(current, pending_tags)
                pending_tags = []
                current = ScriptNode(id=match.group(1))
                script.nodes.append(current)
                continue

            if current is None:
                current = ScriptNode(id="start")
                script.nodes.append(current)

            match = self.TAG_LINE_PATTERN.match(line)
            if match:
                pending_tags.extend(self._split_tags(match.group(1)))
                continue

            match = self.CHOICE_PATTERN.match(line)
            if match:
                current.choices.append(ScriptChoice(text=match.group(1), next_node=match.group(2)))
                continue

            match = self.DIVERT_PATTERN.match(line)
            if match:
                if current.next_node is not None:
                    raise ScriptSyntaxError(f"node '{current.id}' already continues to '{current.next_node}'", line_number)
                current.next_node = match.group(1)
                continue

            if current.choices:
                raise ScriptSyntaxError(f"dialogue after choices in node '{current.id}'", line_number)

            text, _, trailing = line.partition('#')
            current.lines.append(ScriptLine(
                text=text.strip(),
                tags=pending_tags + self._split_tags(trailing),
            ))
            pending_tags = []

        self._drop_dangling(current, pending_tags)

        seen = set()
        for node in script.nodes:
            if node.id in seen:
                raise ScriptSyntaxError(f"duplicate node '{node.id}'", 0)
            seen.add(node.id)

        if script.nodes:
            script.start_node = script.nodes[0].id

        return script

    @staticmethod
    def _split_tags(text: str) -> list[str]:
        return [tag.strip() for tag in text.split('#') if tag.strip()]

    @staticmethod
    def _drop_dangling(node: Optional[ScriptNode], tags: list[str]) -> None:
        if node is not None and tags:
            logger.warning("Tags %s at the end of node '%s' have no line to attach to", tags, node.id)

    def to_json(self, script: CompiledScript) -> dict:
        """Convert a compiled script to the JSON story format."""
        return {
            'id': script.id,
            'start': script.start_node,
            'nodes': [
                {
                    'id': node.id,
                    'lines': [
                        {'text': line.text, 'tags': line.tags}
                        for line in node.lines
                    ],
                    'choices': [
                        {'text': choice.text, 'next': choice.next_node}
                        for choice in node.choices
                    ],
                    'next': node.next_node,
                }
                for node in script.nodes
            ],
        }

    def save_json(self, script: CompiledScript, path: str | Path) -> None:
        path = Path(path)
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(self.to_json(script), f, indent=2)


def compile_script_file(input_path: str | Path, output_path: Optional[str | Path] = None) -> Path:
    """
    Compile a story script to JSON.

    Args:
        input_path: Path to the script file
        output_path: Path to output .json file (default: same name with .json)

    Returns:
        The path written
    """
    input_path = Path(input_path)
    output_path = Path(output_path) if output_path else input_path.with_suffix('.json')

    compiler = ScriptCompiler()
    script = compiler.compile_file(input_path)
    compiler.save_json(script, output_path)
    logger.info("Compiled %s -> %s", input_path, output_path)
    return output_path


def load_script(path: str | Path) -> str:
    """
    Read a story file as JSON story content.

    ``.json`` files are returned as-is; anything else is compiled from
    the text format first.
    """
    path = Path(path)
    if path.suffix.lower() == '.json':
        return path.read_text(encoding='utf-8')

    compiler = ScriptCompiler()
    return json.dumps(compiler.to_json(compiler.compile_file(path)))
