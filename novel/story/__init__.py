"""
Story module - the branching script the dialogue driver walks through.

Provides:
- StorySource: the contract the driver consumes
- JsonStory: a Story Source over a JSON node graph
- ScriptCompiler: text script to JSON graph compiler
"""

from novel.story.source import StorySource, Choice
from novel.story.json_story import JsonStory, StoryFormatError, STORY_SCHEMA, END
from novel.story.compiler import (
    ScriptCompiler,
    ScriptSyntaxError,
    compile_script_file,
    load_script,
)

__all__ = [
    "StorySource",
    "Choice",
    "JsonStory",
    "StoryFormatError",
    "STORY_SCHEMA",
    "END",
    "ScriptCompiler",
    "ScriptSyntaxError",
    "compile_script_file",
    "load_script",
]
