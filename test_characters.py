"""Tests for characters and prompt templates."""

import random
import unittest

import characters


class CharacterTests(unittest.TestCase):
    def test_random_character_comes_from_roster(self) -> None:
        rng = random.Random(7)
        picks = {characters.random_character(rng).name for _ in range(50)}
        self.assertEqual(picks, {c.name for c in characters.CHARACTERS})

    def test_task_prompts_carry_persona_and_details(self) -> None:
        persona = characters.CHARACTERS[1].persona
        prompt = characters.task_create("Report", "Work", None, persona)
        self.assertTrue(prompt.startswith(persona))
        self.assertIn('"Report"', prompt)
        self.assertIn("deadline not set", prompt)

        prompt = characters.subtask_update_progress("Report-draft", "Report", 80, persona, 20, 45, 30)
        self.assertIn("from 30% to 80%", prompt)
        self.assertIn("from 20% to 45%", prompt)

    def test_notification_prompts_without_persona(self) -> None:
        prompt = characters.deadline_notification("2 weeks")
        self.assertTrue(prompt.startswith("Some tasks are due in 2 weeks"))
        self.assertIn(characters.LINE_RULES, characters.weekly_notification())
        self.assertIn(characters.LINE_RULES, characters.announce_notification("persona"))


if __name__ == "__main__":
    unittest.main()
