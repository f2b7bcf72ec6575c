"""
The /task slash command group.

Every subcommand follows the same flow:
1. Defer the reply
2. Ask a random character for a line of flavor text
3. Read/modify the Google Sheet
4. Re-sort the sheet by deadline after any change
5. Reply with an embed
"""

import logging
from typing import List, Optional

import discord
from discord import app_commands

import characters
from sheets_manager import MAIN, SUB, GoogleSheetsManager
from text_generator import TextGenerator

logger = logging.getLogger(__name__)

NOT_SET = "Not set"
MAX_CHOICES = 25
EMBED_DESCRIPTION_LIMIT = 4096

COLOR_CREATED = discord.Color(0x00FF00)
COLOR_UPDATED = discord.Color(0x65BBE9)
COLOR_LIST = discord.Color(0xADD8E6)
COLOR_DETAILS = discord.Color(0xFFFFFF)


def filter_choices(values: List[str], current: str) -> List[app_commands.Choice[str]]:
    """Prefix-match autocomplete values, capped at Discord's 25-choice limit."""
    return [
        app_commands.Choice(name=value[:100], value=value[:100])
        for value in values
        if value.startswith(current)
    ][:MAX_CHOICES]


def _character_embed(
    character: characters.Character,
    line: str,
    title: str,
    color: discord.Color,
    footer: str
) -> discord.Embed:
    embed = discord.Embed(
        title=title,
        description=line or None,
        color=color,
        timestamp=discord.utils.utcnow()
    )
    embed.set_author(name=character.name)
    embed.set_image(url=character.image_url)
    embed.set_footer(text=footer)
    return embed


async def _send_error(interaction: discord.Interaction, message: str):
    if interaction.response.is_done():
        await interaction.followup.send(message, ephemeral=True)
    else:
        await interaction.response.send_message(message, ephemeral=True)


class TaskCommands(app_commands.Group):
    """Task management commands backed by Google Sheets."""

    def __init__(self, sheets_manager: GoogleSheetsManager, text_generator: TextGenerator):
        super().__init__(name="task", description="Task management commands")
        self.sheets_manager = sheets_manager
        self.text_generator = text_generator

    async def _character_line(self, prompt_builder, *args):
        """Pick a character and generate its line for the given prompt builder."""
        character = characters.random_character()
        line = await self.text_generator.generate_character_line(
            prompt_builder(*args, character.persona)
        )
        return character, line

    @app_commands.command(name="create", description="Create a new task")
    @app_commands.describe(
        name="Task name",
        genre="Task genre (e.g. Work, School)",
        deadline="Deadline (YYYY-MM-DD)",
        recurrent="Repeat setting"
    )
    @app_commands.choices(recurrent=[
        app_commands.Choice(name="Weekly", value="weekly"),
        app_commands.Choice(name="Monthly", value="monthly"),
    ])
    async def create(
        self,
        interaction: discord.Interaction,
        name: str,
        genre: str,
        deadline: Optional[str] = None,
        recurrent: Optional[app_commands.Choice[str]] = None
    ):
        """Create a main task."""
        try:
            await interaction.response.defer()

            character, line = await self._character_line(characters.task_create, name, genre, deadline)
            created = self.sheets_manager.create_task(
                name,
                genre,
                deadline,
                recurrent.value if recurrent else None,
                str(interaction.user.id)
            )
            if not created:
                await interaction.followup.send(f'❌ Task "{name}" could not be created.', ephemeral=True)
                return
            self.sheets_manager.sort_tasks_by_deadline()

            embed = _character_embed(character, line, name, COLOR_CREATED, "New task created!")
            embed.add_field(name="Genre", value=genre, inline=True)
            embed.add_field(name="Deadline", value=deadline or NOT_SET, inline=True)
            embed.add_field(name="Created by", value=interaction.user.mention, inline=True)
            if recurrent:
                embed.add_field(name="Repeats", value=recurrent.name, inline=True)

            await interaction.followup.send(embed=embed)

        except ValueError as e:
            await _send_error(interaction, f'❌ Validation Error: {str(e)}')
        except Exception as e:
            logger.error(f"Error creating task: {e}")
            await _send_error(interaction, '❌ An error occurred while processing the command.')

    @app_commands.command(name="update_progress", description="Update a task's progress")
    @app_commands.describe(task_name="Task to update", progress="New progress (0-100)")
    async def update_progress(
        self,
        interaction: discord.Interaction,
        task_name: str,
        progress: app_commands.Range[int, 0, 100]
    ):
        """Set a main task's progress directly."""
        try:
            await interaction.response.defer()

            old_task = self.sheets_manager.get_task_by_name(task_name, MAIN)
            if old_task is None:
                await interaction.followup.send(f'❌ Task "{task_name}" not found.', ephemeral=True)
                return

            character, line = await self._character_line(
                characters.task_update_progress, task_name, old_task["progress"], progress
            )
            if not self.sheets_manager.update_task_progress(task_name, progress):
                await interaction.followup.send(f'❌ Task "{task_name}" could not be updated.', ephemeral=True)
                return
            self.sheets_manager.sort_tasks_by_deadline()

            embed = _character_embed(
                character, line, f"{task_name} progress updated!", COLOR_UPDATED, "Progress update"
            )
            embed.add_field(name="Previous", value=f"{old_task['progress']}%", inline=True)
            embed.add_field(name="Now", value=f"{progress}%", inline=True)
            embed.add_field(name="Deadline", value=old_task["deadline"] or NOT_SET, inline=False)
            if progress >= 100:
                embed.add_field(name="Status", value="✅ Completed and moved to Done_tasks", inline=False)

            await interaction.followup.send(embed=embed)

        except Exception as e:
            logger.error(f"Error updating task progress: {e}")
            await _send_error(interaction, '❌ An error occurred while processing the command.')

    @app_commands.command(name="add_subtask", description="Add a subtask to an existing task")
    @app_commands.describe(
        parent_task_name="Main task to add the subtask to",
        subtask_name="Subtask name",
        deadline="Subtask deadline (YYYY-MM-DD)"
    )
    async def add_subtask(
        self,
        interaction: discord.Interaction,
        parent_task_name: str,
        subtask_name: str,
        deadline: Optional[str] = None
    ):
        """Add a subtask; the stored name is "<parent>-<subtask>"."""
        try:
            await interaction.response.defer()

            full_name = f"{parent_task_name}-{subtask_name}"
            character, line = await self._character_line(characters.subtask_create, full_name, parent_task_name)

            created = self.sheets_manager.add_subtask(
                parent_task_name, subtask_name, deadline, str(interaction.user.id)
            )
            if created is None:
                await interaction.followup.send(f'❌ Task "{parent_task_name}" not found.', ephemeral=True)
                return
            self.sheets_manager.sort_tasks_by_deadline()

            embed = _character_embed(character, line, created, COLOR_CREATED, "New subtask created!")
            embed.add_field(name="Main task", value=parent_task_name, inline=True)
            embed.add_field(name="Deadline", value=deadline or NOT_SET, inline=True)
            embed.add_field(name="Created by", value=interaction.user.mention, inline=True)

            await interaction.followup.send(embed=embed)

        except ValueError as e:
            await _send_error(interaction, f'❌ Validation Error: {str(e)}')
        except Exception as e:
            logger.error(f"Error adding subtask: {e}")
            await _send_error(interaction, '❌ An error occurred while processing the command.')

    @app_commands.command(name="update_subtask_progress", description="Update a subtask's progress")
    @app_commands.describe(subtask_name="Subtask to update", progress="New progress (0-100)")
    async def update_subtask_progress(
        self,
        interaction: discord.Interaction,
        subtask_name: str,
        progress: app_commands.Range[int, 0, 100]
    ):
        """Set a subtask's progress; the parent task is recalculated."""
        try:
            await interaction.response.defer()

            old_subtask = self.sheets_manager.get_task_by_name(subtask_name, SUB)
            if old_subtask is None:
                await interaction.followup.send(f'❌ Subtask "{subtask_name}" not found.', ephemeral=True)
                return

            parent_name = old_subtask["parent_task"]
            parent_before = self.sheets_manager.get_task_by_name(parent_name, MAIN) if parent_name else None
            old_main, new_main = self.sheets_manager.calculate_main_task_progress(
                parent_name, subtask_name, progress
            )
            old_progress = old_subtask["progress"]

            character = characters.random_character()
            line = await self.text_generator.generate_character_line(
                characters.subtask_update_progress(
                    subtask_name, parent_name, progress, character.persona,
                    old_main, new_main, old_progress
                )
            )

            self.sheets_manager.update_subtask_progress(subtask_name, progress)
            self.sheets_manager.sort_tasks_by_deadline()

            main_after = self.sheets_manager.get_task_by_name(parent_name, MAIN) if parent_before is not None else None
            if main_after is not None:
                parent_value = f"{main_after['name']} ({main_after['progress']}%)"
            elif parent_before is not None and new_main >= 100:
                parent_value = f"{parent_name} (100%, moved to Done_tasks)"
            else:
                parent_value = f"{parent_name or NOT_SET} (not found)"

            embed = _character_embed(
                character, line, f"{subtask_name} progress updated!", COLOR_UPDATED, "Subtask progress update"
            )
            embed.add_field(name="Previous", value=f"{old_progress}%", inline=True)
            embed.add_field(name="Now", value=f"{progress}%", inline=True)
            embed.add_field(name="Deadline", value=old_subtask["deadline"] or NOT_SET, inline=False)
            embed.add_field(name="Parent task", value=parent_value, inline=False)

            await interaction.followup.send(embed=embed)

        except Exception as e:
            logger.error(f"Error updating subtask progress: {e}")
            await _send_error(interaction, '❌ An error occurred while processing the command.')

    @app_commands.command(name="list_by_genre", description="List the tasks in a genre")
    @app_commands.describe(genre="Genre to list")
    async def list_by_genre(self, interaction: discord.Interaction, genre: str):
        try:
            await interaction.response.defer()

            tasks = self.sheets_manager.get_tasks_by_genre(genre)
            if tasks:
                parents = self.sheets_manager.get_parent_task_names()
                lines = []
                for task in tasks:
                    marker = " :signal_strength:" if task["name"] in parents else ""
                    lines.append(
                        f"- {task['name']}{marker} "
                        f"(Progress: {task['progress']}%, Deadline: {task['deadline'] or NOT_SET})"
                    )
                description = "\n".join(lines)
            else:
                description = "No matching tasks."

            if len(description) > EMBED_DESCRIPTION_LIMIT:
                description = description[:EMBED_DESCRIPTION_LIMIT - 3] + "..."

            embed = discord.Embed(
                title=f"Tasks in {genre}",
                description=description,
                color=COLOR_LIST,
                timestamp=discord.utils.utcnow()
            )
            embed.set_footer(text="Task list")
            await interaction.followup.send(embed=embed)

        except Exception as e:
            logger.error(f"Error listing tasks by genre: {e}")
            await _send_error(interaction, '❌ An error occurred while processing the command.')

    @app_commands.command(name="show_details", description="Show a task and its subtasks")
    @app_commands.describe(task_name="Task to show")
    async def show_details(self, interaction: discord.Interaction, task_name: str):
        try:
            await interaction.response.defer()

            details = self.sheets_manager.get_task_details(task_name)
            if details is None:
                await interaction.followup.send(f'❌ Task "{task_name}" not found.')
                return

            if details["subtasks"]:
                lines = ["**Subtasks**"]
                lines += [
                    f"- {sub['name']} (Progress: {sub['progress']}%, Deadline: {sub['deadline'] or NOT_SET})"
                    for sub in details["subtasks"]
                ]
                description = "\n".join(lines)
            else:
                description = "No subtasks."

            embed = discord.Embed(
                title=details["name"],
                description=description[:EMBED_DESCRIPTION_LIMIT],
                color=COLOR_DETAILS,
                timestamp=discord.utils.utcnow()
            )
            embed.add_field(name="Genre", value=details["genre"] or NOT_SET, inline=True)
            embed.add_field(name="Deadline", value=details["deadline"] or NOT_SET, inline=True)
            embed.add_field(name="Overall progress", value=f"{details['progress']}%", inline=True)
            embed.add_field(name="Created by", value=f"<@{details['user_id']}>", inline=True)
            embed.set_footer(text="Task details")

            await interaction.followup.send(embed=embed)

        except Exception as e:
            logger.error(f"Error showing task details: {e}")
            await _send_error(interaction, '❌ An error occurred while processing the command.')

    # Autocomplete

    async def _genre_choices(self, current: str) -> List[app_commands.Choice[str]]:
        try:
            return filter_choices(self.sheets_manager.get_all_genres(), current)
        except Exception as e:
            logger.error(f"Autocomplete error: {e}")
            return []

    async def _main_task_choices(self, current: str) -> List[app_commands.Choice[str]]:
        try:
            return filter_choices(self.sheets_manager.get_all_main_task_names(), current)
        except Exception as e:
            logger.error(f"Autocomplete error: {e}")
            return []

    @create.autocomplete("genre")
    async def create_genre_autocomplete(self, interaction: discord.Interaction, current: str):
        return await self._genre_choices(current)

    @list_by_genre.autocomplete("genre")
    async def list_genre_autocomplete(self, interaction: discord.Interaction, current: str):
        return await self._genre_choices(current)

    @update_progress.autocomplete("task_name")
    async def update_task_name_autocomplete(self, interaction: discord.Interaction, current: str):
        return await self._main_task_choices(current)

    @show_details.autocomplete("task_name")
    async def details_task_name_autocomplete(self, interaction: discord.Interaction, current: str):
        return await self._main_task_choices(current)

    @add_subtask.autocomplete("parent_task_name")
    async def parent_task_name_autocomplete(self, interaction: discord.Interaction, current: str):
        return await self._main_task_choices(current)

    @update_subtask_progress.autocomplete("subtask_name")
    async def subtask_name_autocomplete(self, interaction: discord.Interaction, current: str):
        try:
            return filter_choices(self.sheets_manager.get_all_subtask_names(), current)
        except Exception as e:
            logger.error(f"Autocomplete error: {e}")
            return []
