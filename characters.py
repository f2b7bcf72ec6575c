"""
Characters and prompt templates for flavor text.

Each bot reply is "spoken" by a randomly picked character. The prompt
builders below describe the event (task created, progress updated, reminder
posted...) and embed the character's persona so the text generator answers
in that voice.
"""

import random
from dataclasses import dataclass
from typing import List, Optional


@dataclass(frozen=True)
class Character:
    name: str
    persona: str
    image_url: str


CHARACTERS: List[Character] = [
    Character(
        name="Charlemagne",
        persona=(
            "You are Charlemagne, a cheerful and chivalrous paladin king. "
            "You speak with bright confidence, praise effort generously and "
            "call the user your trusted companion."
        ),
        image_url="https://pbs.twimg.com/media/G0o9u8laUAAdyk8?format=jpg",
    ),
    Character(
        name="Heisuke Todo",
        persona=(
            "You are Heisuke Todo, a young and energetic swordsman of the Shinsengumi. "
            "You are friendly and a little impulsive, you cheer people on like a "
            "sparring partner and keep things short and lively."
        ),
        image_url="https://pbs.twimg.com/media/G4GrJSIWoAAjeeK?format=jpg",
    ),
]

LINE_RULES = "Reply with a single line of dialogue in character, at most two sentences, no quotation marks."


def random_character(rng: Optional[random.Random] = None) -> Character:
    """Pick a character uniformly at random."""
    return (rng or random).choice(CHARACTERS)


def task_create(task_name: str, genre: str, deadline: Optional[str], persona: str) -> str:
    return (
        f"{persona}\n"
        f"A new task \"{task_name}\" was just created in the \"{genre}\" genre "
        f"with deadline {deadline or 'not set'}. Encourage the user to get started.\n"
        f"{LINE_RULES}"
    )


def task_update_progress(task_name: str, old_progress: int, new_progress: int, persona: str) -> str:
    return (
        f"{persona}\n"
        f"The task \"{task_name}\" moved from {old_progress}% to {new_progress}% progress. "
        f"React to the change and cheer the user on.\n"
        f"{LINE_RULES}"
    )


def subtask_create(subtask_name: str, parent_task_name: str, persona: str) -> str:
    return (
        f"{persona}\n"
        f"A subtask \"{subtask_name}\" was added to the task \"{parent_task_name}\". "
        f"Comment on breaking work into smaller steps.\n"
        f"{LINE_RULES}"
    )


def subtask_update_progress(
    subtask_name: str,
    parent_task_name: str,
    new_progress: int,
    persona: str,
    old_main_progress: int,
    new_main_progress: int,
    old_subtask_progress: int
) -> str:
    return (
        f"{persona}\n"
        f"The subtask \"{subtask_name}\" moved from {old_subtask_progress}% to {new_progress}%. "
        f"Its parent task \"{parent_task_name}\" moved from {old_main_progress}% to {new_main_progress}%. "
        f"React to both changes.\n"
        f"{LINE_RULES}"
    )


def weekly_notification(persona: Optional[str] = None) -> str:
    return (
        f"{persona or ''}\n"
        "It is the start of a new week. Give the team a short pep talk about their weekly recurring tasks.\n"
        f"{LINE_RULES}"
    ).lstrip()


def monthly_notification(persona: Optional[str] = None) -> str:
    return (
        f"{persona or ''}\n"
        "A new month has begun. Remind the team about their monthly recurring tasks.\n"
        f"{LINE_RULES}"
    ).lstrip()


def deadline_notification(time_left: str, persona: Optional[str] = None) -> str:
    return (
        f"{persona or ''}\n"
        f"Some tasks are due in {time_left}. Warn the team and urge them to keep pace.\n"
        f"{LINE_RULES}"
    ).lstrip()


def announce_notification(persona: Optional[str] = None) -> str:
    return (
        f"{persona or ''}\n"
        "Introduce this week's featured announcements to the whole server.\n"
        f"{LINE_RULES}"
    ).lstrip()
