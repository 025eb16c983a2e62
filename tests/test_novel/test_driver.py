import logging

import pytest

from conftest import FakeStory
from engine.core.actions import Action
from engine.core.events import NovelEvent
from engine.input.handler import InputEvent
from novel.driver import DialogueDriver
from novel.reveal import CHAR_INTERVAL, TEXT_SCROLL_CUE
from novel.session import ChoiceOption, DialogueState


def make_driver(scheduler, event_bus, audio, images, presentation, story, on_end=None):
    return DialogueDriver(
        scheduler, event_bus, audio, images, presentation,
        on_end=on_end,
        story_factory=lambda script: story,
    )


def finish_reveal(scheduler):
    scheduler.update(10.0)


def confirm(event_bus):
    event_bus.publish(InputEvent.ACTION_PRESSED, action=Action.CONFIRM)


@pytest.fixture
def two_lines():
    return FakeStory([("First line.", []), ("Second line.", [])])


@pytest.fixture
def branching():
    return FakeStory(
        [("Which way?", ["speaker: Aria"])],
        choices=["Cabin", "Ridge"],
        branches={
            0: [("Warmth at last.", [])],
            1: [("The storm closes in.", [])],
        },
    )


def test_start_dialogue_reveals_first_line(scheduler, event_bus, audio, images, presentation, two_lines):
    driver = make_driver(scheduler, event_bus, audio, images, presentation, two_lines)

    driver.start_dialogue("script")

    assert driver.active
    assert driver.state == DialogueState.REVEALING
    assert driver.session.current_line == "First line."
    assert driver.session.is_revealing
    assert presentation.line == "First line."
    assert audio.calls[0] == ("switch_theme", "")


def test_line_tags_dispatched(scheduler, event_bus, audio, images, presentation, branching):
    driver = make_driver(scheduler, event_bus, audio, images, presentation, branching)
    driver.start_dialogue("script")

    assert presentation.speaker_name == "Aria:"


def test_awaiting_advance_after_reveal(scheduler, event_bus, audio, images, presentation, two_lines):
    driver = make_driver(scheduler, event_bus, audio, images, presentation, two_lines)
    driver.start_dialogue("script")

    finish_reveal(scheduler)

    assert driver.state == DialogueState.AWAITING_ADVANCE
    assert driver.session.revealed_count == len("First line.")
    assert audio.count("play", TEXT_SCROLL_CUE) == len("First line.")


def test_continue_story_while_revealing_is_noop(scheduler, event_bus, audio, images, presentation, two_lines):
    driver = make_driver(scheduler, event_bus, audio, images, presentation, two_lines)
    driver.start_dialogue("script")
    scheduler.update(CHAR_INTERVAL)
    count = driver.session.revealed_count

    driver.continue_story()

    assert driver.session.current_line == "First line."
    assert driver.session.revealed_count == count
    assert two_lines.continue_calls == 1


def test_advance_while_revealing_skips(scheduler, event_bus, audio, images, presentation, two_lines):
    driver = make_driver(scheduler, event_bus, audio, images, presentation, two_lines)
    driver.start_dialogue("script")

    confirm(event_bus)
    assert driver.session.skip_requested

    scheduler.update(CHAR_INTERVAL)
    assert driver.session.revealed_count == len("First line.")
    assert driver.state == DialogueState.AWAITING_ADVANCE
    assert audio.count("play", TEXT_SCROLL_CUE) == 1
    assert two_lines.continue_calls == 1


def test_end_to_end_two_lines(scheduler, event_bus, audio, images, presentation, two_lines):
    ends = []
    driver = make_driver(scheduler, event_bus, audio, images, presentation, two_lines, on_end=lambda: ends.append(1))

    driver.start_dialogue("script")
    finish_reveal(scheduler)
    assert driver.session.current_line == "First line."

    confirm(event_bus)
    assert driver.session.current_line == "Second line."
    assert driver.state == DialogueState.REVEALING
    finish_reveal(scheduler)

    confirm(event_bus)
    assert not two_lines.can_continue
    assert driver.state == DialogueState.ENDED
    assert not driver.active
    assert ends == [1]

    # Advance after the end does nothing and the reload is not signalled again
    confirm(event_bus)
    driver.continue_story()
    assert ends == [1]


def test_input_handler_removed_after_end(scheduler, event_bus, audio, images, presentation):
    story = FakeStory([("Only line.", [])])
    driver = make_driver(scheduler, event_bus, audio, images, presentation, story)

    driver.start_dialogue("script")
    assert event_bus.is_subscribed(InputEvent.ACTION_PRESSED, driver._on_action)

    finish_reveal(scheduler)
    confirm(event_bus)

    assert not event_bus.is_subscribed(InputEvent.ACTION_PRESSED, driver._on_action)


def test_choices_shown_after_reveal(scheduler, event_bus, audio, images, presentation, branching):
    driver = make_driver(scheduler, event_bus, audio, images, presentation, branching)
    driver.start_dialogue("script")
    assert presentation.choices == []

    finish_reveal(scheduler)

    assert driver.state == DialogueState.AWAITING_CHOICE
    assert driver.session.pending_choices == [ChoiceOption("Cabin", 0), ChoiceOption("Ridge", 1)]
    assert presentation.choices == driver.session.pending_choices


def test_first_choice_focused_after_one_tick(scheduler, event_bus, audio, images, presentation, branching):
    driver = make_driver(scheduler, event_bus, audio, images, presentation, branching)
    driver.start_dialogue("script")
    finish_reveal(scheduler)

    assert presentation.focused is None
    assert presentation.focus_history == [None]

    scheduler.update(0.0)
    assert presentation.focused == 0
    assert presentation.focus_history == [None, 0]


def test_advance_with_pending_choices_does_nothing(scheduler, event_bus, audio, images, presentation, branching):
    driver = make_driver(scheduler, event_bus, audio, images, presentation, branching)
    driver.start_dialogue("script")
    finish_reveal(scheduler)

    confirm(event_bus)

    assert driver.state == DialogueState.AWAITING_CHOICE
    assert branching.chosen == []
    assert branching.continue_calls == 1


def test_make_choice_continues_branch(scheduler, event_bus, audio, images, presentation, branching):
    made = []
    event_bus.subscribe(NovelEvent.CHOICE_MADE, lambda e: made.append(e["index"]), weak=False)
    driver = make_driver(scheduler, event_bus, audio, images, presentation, branching)
    driver.start_dialogue("script")
    finish_reveal(scheduler)

    driver.make_choice(1)

    assert branching.chosen == [1]
    assert made == [1]
    assert driver.session.current_line == "The storm closes in."
    assert driver.state == DialogueState.REVEALING
    assert presentation.choices == []
    assert driver.session.pending_choices == []


def test_make_choice_while_revealing_ignored(scheduler, event_bus, audio, images, presentation, branching):
    driver = make_driver(scheduler, event_bus, audio, images, presentation, branching)
    driver.start_dialogue("script")
    position = branching.position

    driver.make_choice(0)

    assert branching.position == position
    assert branching.chosen == []
    assert driver.session.current_line == "Which way?"


def test_make_choice_out_of_range_reported(scheduler, event_bus, audio, images, presentation, branching, caplog):
    driver = make_driver(scheduler, event_bus, audio, images, presentation, branching)
    driver.start_dialogue("script")
    finish_reveal(scheduler)

    with caplog.at_level(logging.ERROR, logger="novel.driver"):
        driver.make_choice(5)

    assert branching.chosen == []
    assert driver.state == DialogueState.AWAITING_CHOICE
    assert any(r.levelno == logging.ERROR for r in caplog.records)


def test_too_many_choices_truncated(scheduler, event_bus, audio, images, presentation, caplog):
    story = FakeStory([("Pick one.", [])], choices=["A", "B", "C", "D", "E"])
    presentation.slots = 3
    driver = make_driver(scheduler, event_bus, audio, images, presentation, story)
    driver.start_dialogue("script")

    with caplog.at_level(logging.ERROR, logger="novel.driver"):
        finish_reveal(scheduler)

    assert [c.display_text for c in driver.session.pending_choices] == ["A", "B", "C"]
    assert len(presentation.choices) == 3
    assert any("5 choices" in r.getMessage() for r in caplog.records)


def test_choice_confirm_does_not_skip_new_line(scheduler, event_bus, audio, images, presentation, branching):
    driver = make_driver(scheduler, event_bus, audio, images, presentation, branching)
    driver.start_dialogue("script")
    finish_reveal(scheduler)
    scheduler.update(0.0)

    # A view handler at default priority selects the focused choice
    def select(event):
        if event.get("action") == Action.CONFIRM:
            driver.make_choice(presentation.focused)

    event_bus.subscribe(InputEvent.ACTION_PRESSED, select, weak=False)
    confirm(event_bus)

    assert driver.session.current_line == "Warmth at last."
    assert driver.session.is_revealing
    assert not driver.session.skip_requested


def test_events_published(scheduler, event_bus, audio, images, presentation, branching):
    seen = []
    for event_type in NovelEvent:
        event_bus.subscribe(event_type, lambda e: seen.append(e.type), weak=False)

    driver = make_driver(scheduler, event_bus, audio, images, presentation, branching)
    driver.start_dialogue("script")
    finish_reveal(scheduler)
    driver.make_choice(0)
    finish_reveal(scheduler)
    driver.on_advance_signal()

    assert seen == [
        NovelEvent.DIALOGUE_STARTED,
        NovelEvent.LINE_STARTED,
        NovelEvent.LINE_REVEALED,
        NovelEvent.CHOICES_SHOWN,
        NovelEvent.CHOICE_MADE,
        NovelEvent.LINE_STARTED,
        NovelEvent.LINE_REVEALED,
        NovelEvent.DIALOGUE_ENDED,
    ]


def test_signals_ignored_before_start(scheduler, event_bus, audio, images, presentation, two_lines):
    driver = make_driver(scheduler, event_bus, audio, images, presentation, two_lines)

    driver.on_advance_signal()
    driver.make_choice(0)
    driver.continue_story()

    assert driver.state == DialogueState.IDLE
    assert two_lines.continue_calls == 0


def test_second_start_ignored(scheduler, event_bus, audio, images, presentation, two_lines, caplog):
    driver = make_driver(scheduler, event_bus, audio, images, presentation, two_lines)
    driver.start_dialogue("script")

    with caplog.at_level(logging.ERROR, logger="novel.driver"):
        driver.start_dialogue("script")

    assert two_lines.continue_calls == 1
    assert any(r.levelno == logging.ERROR for r in caplog.records)


def test_empty_story_ends_immediately(scheduler, event_bus, audio, images, presentation):
    ends = []
    driver = make_driver(scheduler, event_bus, audio, images, presentation, FakeStory([]), on_end=lambda: ends.append(1))

    driver.start_dialogue("script")

    assert ends == [1]
    assert driver.state == DialogueState.ENDED


def test_shutdown_stops_reveal_and_input(scheduler, event_bus, audio, images, presentation, two_lines):
    ends = []
    driver = make_driver(scheduler, event_bus, audio, images, presentation, two_lines, on_end=lambda: ends.append(1))
    driver.start_dialogue("script")
    count = driver.session.revealed_count

    driver.shutdown()
    scheduler.update(10.0)
    confirm(event_bus)

    assert driver.session.revealed_count == count
    assert not driver.active
    assert not event_bus.is_subscribed(InputEvent.ACTION_PRESSED, driver._on_action)
    assert ends == []


def test_default_factory_reads_json_story(scheduler, event_bus, audio, images, presentation):
    content = {
        "nodes": [
            {"id": "intro", "lines": [{"text": "Hi.", "tags": ["speaker: Aria"]}], "next": "END"},
        ],
    }
    driver = DialogueDriver(scheduler, event_bus, audio, images, presentation)

    driver.start_dialogue(content)
    finish_reveal(scheduler)

    assert driver.session.current_line == "Hi."
    assert presentation.speaker_name == "Aria:"
    assert driver.state == DialogueState.AWAITING_ADVANCE


@pytest.fixture
def hub_story():
    return {
        "start": "hub",
        "nodes": [
            {
                "id": "hub",
                "choices": [
                    {"text": "Cabin", "next": "cabin"},
                    {"text": "Back", "next": "hub"},
                ],
            },
            {"id": "cabin", "lines": [{"text": "Done."}], "next": "END"},
        ],
    }


def test_start_on_choice_only_node_presents_choices(scheduler, event_bus, audio, images, presentation, hub_story):
    driver = DialogueDriver(scheduler, event_bus, audio, images, presentation)

    driver.start_dialogue(hub_story)
    scheduler.update(1 / 60)

    assert driver.active
    assert driver.state == DialogueState.AWAITING_CHOICE
    assert driver.session.pending_choices == [ChoiceOption("Cabin", 0), ChoiceOption("Back", 1)]
    assert [choice.display_text for choice in presentation.choices] == ["Cabin", "Back"]
    assert presentation.focused == 0

    driver.make_choice(0)

    assert driver.session.current_line == "Done."
    assert driver.state == DialogueState.REVEALING


def test_choice_into_choice_only_node_presents_choices(scheduler, event_bus, audio, images, presentation, hub_story):
    driver = DialogueDriver(scheduler, event_bus, audio, images, presentation)
    driver.start_dialogue(hub_story)
    scheduler.update(1 / 60)

    driver.make_choice(1)
    scheduler.update(1 / 60)

    assert driver.state == DialogueState.AWAITING_CHOICE
    assert len(driver.session.pending_choices) == 2
    assert presentation.focused == 0


def test_advance_at_choice_only_node_keeps_choices(scheduler, event_bus, audio, images, presentation, hub_story, caplog):
    driver = DialogueDriver(scheduler, event_bus, audio, images, presentation)
    driver.start_dialogue(hub_story)

    with caplog.at_level(logging.ERROR, logger="novel.driver"):
        driver.on_advance_signal()
        driver.continue_story()

    assert driver.state == DialogueState.AWAITING_CHOICE
    assert len(driver.session.pending_choices) == 2
    assert not caplog.records


def test_shutdown_resets_state(scheduler, event_bus, audio, images, presentation, two_lines):
    driver = make_driver(scheduler, event_bus, audio, images, presentation, two_lines)
    driver.start_dialogue("script")
    assert driver.state == DialogueState.REVEALING

    driver.shutdown()

    assert driver.state == DialogueState.IDLE
    assert not driver.session.is_revealing
    assert not driver.session.skip_requested
