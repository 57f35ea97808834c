import discord
from discord import app_commands
from discord.ext import commands
import logging
import os
from typing import Literal, Optional

from .config_manager import ConfigManager
from .dashboard import compute_dashboard_stats, most_viewed, product_display_name, recent_messages
from .data_manager import DataManager
from .editing_session import EditorState, QuizEditingSession
from .errors import (
    NoQuizSelectedError,
    QuizAdminError,
    QuizNotFoundError,
    StoreError,
    ValidationError,
)
from .image_ingestion import get_image_src
from .localized_text import is_rtl, localize, normalize_locale
from .models import Quiz
from .quiz_controller import QuizAdminController

logger = logging.getLogger(__name__)

Locale = Literal["en", "ar"]

COLOR_OK = 0x00ff00
COLOR_INFO = 0x6699ff
COLOR_WARN = 0xffaa00
COLOR_ERROR = 0xff0000
COLOR_QUIZ = 0xf43f5e


class ConfirmDeleteView(discord.ui.View):
    """Two-button confirmation prompt restricted to the requesting admin."""

    def __init__(self, user_id: int, timeout: float = 30):
        super().__init__(timeout=timeout)
        self.user_id = user_id
        self.value: Optional[bool] = None

    async def interaction_check(self, interaction: discord.Interaction) -> bool:
        return interaction.user.id == self.user_id

    @discord.ui.button(label="Delete", style=discord.ButtonStyle.danger)
    async def confirm(self, interaction: discord.Interaction, button: discord.ui.Button):
        self.value = True
        await interaction.response.edit_message(content="Deleting quiz...", view=None)
        self.stop()

    @discord.ui.button(label="Cancel", style=discord.ButtonStyle.secondary)
    async def cancel(self, interaction: discord.Interaction, button: discord.ui.Button):
        self.value = False
        await interaction.response.edit_message(content="Deletion cancelled.", view=None)
        self.stop()


class QuizAdminBot(commands.Bot):
    """Discord bot exposing the storefront quiz admin as slash commands"""

    def __init__(self, config=None):
        intents = discord.Intents.none()
        intents.guilds = True  # Required for slash commands

        command_prefix = '!'
        if config and 'bot' in config:
            command_prefix = config['bot'].get('command_prefix', '!')

        super().__init__(
            command_prefix=command_prefix,
            intents=intents,
            help_command=None
        )

        self.app_config = config or {}

        self.data_manager: Optional[DataManager] = None
        self.config_manager: Optional[ConfigManager] = None
        self.quiz_controller: Optional[QuizAdminController] = None

    async def setup_hook(self):
        """Called when the bot is starting up"""
        try:
            logger.info("Setting up bot components...")

            self.config_manager = ConfigManager()
            if self.app_config:
                self.apply_configuration()

            self.data_manager = DataManager(self.config_manager.get_data_directory())
            self.load_store()

            self.quiz_controller = QuizAdminController(self.data_manager, self.config_manager)

            self.setup_commands()

            logger.info("Bot setup completed successfully")

        except Exception as e:
            logger.error(f"Error during bot setup: {e}")
            raise

    def apply_configuration(self):
        """Apply the admin section of the configuration file."""
        rejected = self.config_manager.apply_config(self.app_config.get('admin', {}))
        for message in rejected:
            logger.warning(f"Configuration value rejected: {message}")
        logger.info("Configuration applied")

    def load_store(self):
        if not self.data_manager.load():
            logger.error(f"Store failed to load: {self.data_manager.get_load_errors()}")
            return
        summary = self.data_manager.get_loading_summary()
        logger.info(
            f"Loaded {summary['total_quizzes']} quizzes from {summary['data_directory']}"
        )

    def setup_commands(self):
        """Register all slash commands"""

        @self.tree.command(name="help", description="Display available admin commands")
        async def help_command(interaction: discord.Interaction):
            await self.handle_help(interaction)

        @self.tree.command(name="dashboard", description="Show store statistics")
        async def dashboard_command(interaction: discord.Interaction):
            await self.handle_dashboard(interaction)

        @self.tree.command(name="language", description="Set the language used to display quiz content")
        async def language_command(interaction: discord.Interaction, locale: Locale):
            await self.handle_language(interaction, locale)

        # Quiz list
        @self.tree.command(name="quizzes", description="List all quizzes")
        async def quizzes_command(interaction: discord.Interaction):
            await self.handle_quizzes(interaction)

        @self.tree.command(name="quiz_select", description="Select a quiz for editing (unsaved edits are discarded)")
        async def quiz_select_command(interaction: discord.Interaction, quiz_id: str):
            await self.handle_quiz_select(interaction, quiz_id)

        @self.tree.command(name="quiz_create", description="Create a new quiz and start editing it")
        async def quiz_create_command(interaction: discord.Interaction):
            await self.handle_quiz_create(interaction)

        @self.tree.command(name="quiz_show", description="Show the quiz you are editing")
        async def quiz_show_command(interaction: discord.Interaction):
            await self.handle_quiz_show(interaction)

        @self.tree.command(name="quiz_title", description="Set the quiz title in one language")
        async def quiz_title_command(interaction: discord.Interaction, locale: Locale, text: str):
            await self.handle_quiz_title(interaction, locale, text)

        @self.tree.command(name="quiz_description", description="Set the quiz description in one language")
        async def quiz_description_command(interaction: discord.Interaction, locale: Locale, text: str):
            await self.handle_quiz_description(interaction, locale, text)

        @self.tree.command(name="quiz_activate", description="Turn the active toggle on or off")
        async def quiz_activate_command(interaction: discord.Interaction, enabled: bool):
            await self.handle_quiz_activate(interaction, enabled)

        @self.tree.command(name="quiz_save", description="Save the quiz you are editing")
        async def quiz_save_command(interaction: discord.Interaction):
            await self.handle_quiz_save(interaction)

        @self.tree.command(name="quiz_delete", description="Delete the quiz you are editing")
        async def quiz_delete_command(interaction: discord.Interaction):
            await self.handle_quiz_delete(interaction)

        # Questions
        @self.tree.command(name="question_add", description="Add a question to the quiz")
        async def question_add_command(interaction: discord.Interaction):
            await self.handle_question_add(interaction)

        @self.tree.command(name="question_remove", description="Remove a question from the quiz")
        async def question_remove_command(interaction: discord.Interaction, question_id: str):
            await self.handle_question_remove(interaction, question_id)

        @self.tree.command(name="question_text", description="Set a question's text in one language")
        async def question_text_command(interaction: discord.Interaction, question_id: str,
                                        locale: Locale, text: str):
            await self.handle_question_text(interaction, question_id, locale, text)

        @self.tree.command(name="question_answer", description="Set a question's correct answer in one language")
        async def question_answer_command(interaction: discord.Interaction, question_id: str,
                                          locale: Locale, text: str):
            await self.handle_question_answer(interaction, question_id, locale, text)

        @self.tree.command(name="question_wrong", description="Set one of the three wrong answers")
        async def question_wrong_command(interaction: discord.Interaction, question_id: str,
                                         slot: app_commands.Range[int, 1, 3], locale: Locale, text: str):
            await self.handle_question_wrong(interaction, question_id, slot, locale, text)

        @self.tree.command(name="question_image", description="Upload a picture for a question")
        async def question_image_command(interaction: discord.Interaction, question_id: str,
                                         image: discord.Attachment):
            await self.handle_question_image(interaction, question_id, image)

        @self.tree.command(name="question_clear_image", description="Remove a question's picture")
        async def question_clear_image_command(interaction: discord.Interaction, question_id: str):
            await self.handle_question_clear_image(interaction, question_id)

        # Results
        @self.tree.command(name="results", description="Show recent quiz results")
        async def results_command(interaction: discord.Interaction):
            await self.handle_results(interaction)

        @self.tree.command(name="results_clear", description="Delete all quiz results")
        async def results_clear_command(interaction: discord.Interaction):
            await self.handle_results_clear(interaction)

        logger.info("Slash commands registered successfully")

    async def on_ready(self):
        """Called when the bot has successfully connected to Discord"""
        logger.info(f"Bot is ready! Logged in as {self.user}")
        logger.info(f"Bot is in {len(self.guilds)} guilds")
        try:
            synced = await self.tree.sync()
            logger.info(f"Synced {len(synced)} slash commands")
        except discord.HTTPException as e:
            logger.error(f"Failed to sync slash commands: {e}")

    async def on_error(self, event, *args, **kwargs):
        """Handle general bot errors"""
        logger.error(f"An error occurred in event {event}", exc_info=True)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _session(self, interaction: discord.Interaction) -> QuizEditingSession:
        return self.quiz_controller.get_session(interaction.user.id)

    def _require_draft(self, interaction: discord.Interaction) -> Quiz:
        draft = self._session(interaction).editing_quiz
        if draft is None:
            raise NoQuizSelectedError("No quiz is selected for editing")
        return draft

    async def handle_admin_error(self, interaction: discord.Interaction, error: QuizAdminError, operation: str):
        """Map admin errors onto user-facing embeds"""
        if isinstance(error, NoQuizSelectedError):
            await self.send_warning_response(
                interaction,
                "Select a quiz with `/quiz_select` or create one with `/quiz_create` first.",
                "⚠️ No Quiz Selected"
            )
        elif isinstance(error, QuizNotFoundError):
            await self.send_error_response(
                interaction,
                f"Quiz `{error.quiz_id}` no longer exists. Use `/quizzes` to see the current list.",
                "❌ Quiz Not Found"
            )
        elif isinstance(error, ValidationError):
            await self.send_error_response(interaction, str(error), "❌ Invalid Input")
        elif isinstance(error, StoreError):
            logger.error(f"Store failure during {operation}: {error}")
            await self.send_error_response(
                interaction,
                f"The change could not be saved: {error}",
                "❌ Store Error"
            )
        else:
            logger.error(f"Unexpected admin error during {operation}: {error}")
            await self.send_error_response(interaction, "An unexpected error occurred. Please try again.")

    def build_quiz_embed(self, session: QuizEditingSession) -> discord.Embed:
        draft = session.editing_quiz
        locale = session.locale
        status = {
            EditorState.DIRTY: "✏️ Unsaved changes",
            EditorState.SAVED: "✅ Saved!",
        }.get(session.state, "")

        embed = discord.Embed(
            title=localize(draft.title, locale) or "(untitled)",
            description=localize(draft.description, locale),
            color=COLOR_QUIZ
        )
        embed.add_field(name="ID", value=f"`{draft.id}`", inline=True)
        embed.add_field(name="Status", value="🟢 Active" if draft.is_active else "⚪ Inactive", inline=True)
        if status:
            embed.add_field(name="Draft", value=status, inline=True)

        if not draft.questions:
            embed.add_field(name="Questions (0)", value="No questions yet. Use `/question_add`.", inline=False)
        for index, question in enumerate(draft.questions[:20], start=1):
            wrong = " / ".join(localize(w, locale) or "-" for w in question.wrong_answers)
            picture = "🖼️ " if question.image else ""
            src = get_image_src(question.image)
            # Embeds can only show hosted images, not inline data URIs.
            if src.startswith("http") and embed.thumbnail.url is None:
                embed.set_thumbnail(url=src)
            lines = [f"`{question.id}`", f"✅ {localize(question.correct_answer, locale) or '-'}"]
            if session.expanded_questions.get(question.id):
                lines.append(f"❌ {wrong}")
            embed.add_field(
                name=f"{picture}Question {index}: {localize(question.question_text, locale)}"[:256],
                value="\n".join(lines)[:1024],
                inline=False
            )
        if len(draft.questions) > 20:
            embed.set_footer(text=f"... and {len(draft.questions) - 20} more questions")
        return embed

    # ------------------------------------------------------------------
    # Command handlers
    # ------------------------------------------------------------------

    async def handle_help(self, interaction: discord.Interaction):
        """Handle /help command"""
        embed = discord.Embed(
            title="🌸 Quiz Admin Commands",
            description="Create and manage flower quizzes for visitors",
            color=COLOR_OK
        )
        embed.add_field(
            name="📋 Quizzes",
            value=(
                "`/quizzes` - List all quizzes\n"
                "`/quiz_select <id>` - Edit a quiz (unsaved edits are discarded)\n"
                "`/quiz_create` - Create a new quiz\n"
                "`/quiz_show` - Show the quiz you are editing\n"
                "`/quiz_title`, `/quiz_description` - Edit text per language\n"
                "`/quiz_activate` - Toggle the active quiz\n"
                "`/quiz_save` - Save your changes\n"
                "`/quiz_delete` - Delete the quiz"
            ),
            inline=False
        )
        embed.add_field(
            name="❓ Questions",
            value=(
                "`/question_add`, `/question_remove`\n"
                "`/question_text`, `/question_answer`, `/question_wrong`\n"
                "`/question_image`, `/question_clear_image`"
            ),
            inline=False
        )
        embed.add_field(
            name="📊 Other",
            value="`/dashboard`, `/results`, `/results_clear`, `/language`",
            inline=False
        )
        embed.add_field(
            name="⚙️ Current Settings",
            value=f"```\n{self.config_manager.get_settings_summary()}\n```",
            inline=False
        )
        await interaction.response.send_message(embed=embed, ephemeral=True)

    async def handle_dashboard(self, interaction: discord.Interaction):
        """Handle /dashboard command"""
        locale = self._session(interaction).locale
        products = self.data_manager.products
        messages = self.data_manager.contact_messages
        stats = compute_dashboard_stats(products, messages)

        embed = discord.Embed(title="📊 Dashboard", color=COLOR_INFO)
        embed.add_field(name="Total Products", value=str(stats.total_products), inline=True)
        embed.add_field(name="Available", value=str(stats.available_products), inline=True)
        embed.add_field(name="Categories", value=str(stats.categories), inline=True)
        embed.add_field(name="New Messages", value=str(stats.new_messages), inline=True)

        top = most_viewed(products)
        if top:
            embed.add_field(
                name="Most Viewed",
                value="\n".join(f"{i}. {product_display_name(p, locale)}" for i, p in enumerate(top, start=1)),
                inline=False
            )
        recent = recent_messages(messages)
        embed.add_field(
            name="Recent Messages",
            value="\n".join(f"**{m.name}**: {m.message[:80]}" for m in recent) or "No messages yet",
            inline=False
        )
        await interaction.response.send_message(embed=embed, ephemeral=True)

    async def handle_language(self, interaction: discord.Interaction, locale: str):
        locale = normalize_locale(locale)
        self._session(interaction).locale = locale
        direction = "right-to-left" if is_rtl(locale) else "left-to-right"
        await self.send_info_response(
            interaction, f"Quiz content will be shown in `{locale}` ({direction}).", "🌐 Language"
        )

    async def handle_quizzes(self, interaction: discord.Interaction):
        """Handle /quizzes command"""
        session = self._session(interaction)
        quizzes = self.quiz_controller.list_quizzes()
        if not quizzes:
            await self.send_info_response(interaction, "No quizzes yet. Use `/quiz_create` to add one.", "📋 Quiz List")
            return

        lines = []
        for quiz in quizzes[:25]:
            marker = "▶️" if quiz.id == session.selected_quiz_id else "•"
            active = " 🟢 Active" if quiz.is_active else ""
            lines.append(
                f"{marker} **{localize(quiz.title, session.locale)}** `{quiz.id}` "
                f"({len(quiz.questions)} questions){active}"
            )
        if len(quizzes) > 25:
            lines.append(f"... and {len(quizzes) - 25} more")

        embed = discord.Embed(title="📋 Quiz List", description="\n".join(lines), color=COLOR_QUIZ)
        await interaction.response.send_message(embed=embed, ephemeral=True)

    async def handle_quiz_select(self, interaction: discord.Interaction, quiz_id: str):
        session = self._session(interaction)
        had_edits = session.is_dirty
        try:
            session.select(quiz_id)
        except QuizAdminError as e:
            await self.handle_admin_error(interaction, e, "quiz_select")
            return
        embed = self.build_quiz_embed(session)
        content = "⚠️ Your unsaved edits to the previous quiz were discarded." if had_edits else None
        await interaction.response.send_message(content=content, embed=embed, ephemeral=True)

    async def handle_quiz_create(self, interaction: discord.Interaction):
        try:
            await self.quiz_controller.create_quiz(interaction.user.id)
        except QuizAdminError as e:
            await self.handle_admin_error(interaction, e, "quiz_create")
            return
        embed = self.build_quiz_embed(self._session(interaction))
        await interaction.response.send_message(content="✅ Quiz created", embed=embed, ephemeral=True)

    async def handle_quiz_show(self, interaction: discord.Interaction):
        session = self._session(interaction)
        if session.editing_quiz is None:
            await self.send_info_response(
                interaction, "Select a quiz to edit or create a new one.", "📋 No Quiz Selected"
            )
            return
        await interaction.response.send_message(embed=self.build_quiz_embed(session), ephemeral=True)

    async def handle_quiz_title(self, interaction: discord.Interaction, locale: str, text: str):
        await self._edit(interaction, "quiz_title", lambda s: s.set_title(locale, text), "Title updated")

    async def handle_quiz_description(self, interaction: discord.Interaction, locale: str, text: str):
        await self._edit(interaction, "quiz_description", lambda s: s.set_description(locale, text),
                         "Description updated")

    async def handle_quiz_activate(self, interaction: discord.Interaction, enabled: bool):
        """Handle /quiz_activate command"""
        try:
            draft = await self.quiz_controller.set_active(interaction.user.id, enabled)
        except QuizAdminError as e:
            await self.handle_admin_error(interaction, e, "quiz_activate")
            return
        if enabled:
            message = (f"**{localize(draft.title, self._session(interaction).locale)}** is now the active quiz. "
                       "Any other active quiz was deactivated.")
        else:
            message = "Active flag cleared on your draft. Use `/quiz_save` to store it."
        await self.send_info_response(interaction, message, "🟢 Activation" if enabled else "⚪ Activation")

    async def handle_quiz_save(self, interaction: discord.Interaction):
        try:
            await self.quiz_controller.commit(interaction.user.id)
        except QuizAdminError as e:
            await self.handle_admin_error(interaction, e, "quiz_save")
            return
        embed = self.build_quiz_embed(self._session(interaction))
        await interaction.response.send_message(content="✅ Saved!", embed=embed, ephemeral=True)

    async def handle_quiz_delete(self, interaction: discord.Interaction):
        """Handle /quiz_delete command with a confirmation prompt"""
        try:
            draft = self._require_draft(interaction)
        except QuizAdminError as e:
            await self.handle_admin_error(interaction, e, "quiz_delete")
            return

        async def confirm() -> bool:
            view = ConfirmDeleteView(interaction.user.id)
            await interaction.response.send_message(
                f"Are you sure you want to delete **{localize(draft.title, 'en')}**? This cannot be undone.",
                view=view,
                ephemeral=True
            )
            await view.wait()
            return view.value is True

        try:
            deleted = await self.quiz_controller.delete_quiz(interaction.user.id, draft.id, confirm)
        except QuizAdminError as e:
            await self.handle_admin_error(interaction, e, "quiz_delete")
            return
        if deleted:
            await self.send_info_response(interaction, "The quiz was deleted.", "🗑️ Quiz Deleted")

    async def handle_question_add(self, interaction: discord.Interaction):
        try:
            question_id = self._session(interaction).add_question()
        except QuizAdminError as e:
            await self.handle_admin_error(interaction, e, "question_add")
            return
        await self.send_info_response(interaction, f"Question `{question_id}` added.", "➕ Question Added")

    async def handle_question_remove(self, interaction: discord.Interaction, question_id: str):
        await self._edit(interaction, "question_remove", lambda s: s.remove_question(question_id),
                         "Question removed", question_id=question_id)

    async def handle_question_text(self, interaction: discord.Interaction, question_id: str,
                                   locale: str, text: str):
        await self._edit(interaction, "question_text",
                         lambda s: s.set_question_text(question_id, locale, text),
                         "Question text updated", question_id=question_id)

    async def handle_question_answer(self, interaction: discord.Interaction, question_id: str,
                                     locale: str, text: str):
        await self._edit(interaction, "question_answer",
                         lambda s: s.set_correct_answer(question_id, locale, text),
                         "Correct answer updated", question_id=question_id)

    async def handle_question_wrong(self, interaction: discord.Interaction, question_id: str,
                                    slot: int, locale: str, text: str):
        await self._edit(interaction, "question_wrong",
                         lambda s: s.set_wrong_answer(question_id, slot - 1, locale, text),
                         f"Wrong answer {slot} updated", question_id=question_id)

    async def handle_question_clear_image(self, interaction: discord.Interaction, question_id: str):
        await self._edit(interaction, "question_clear_image", lambda s: s.clear_image(question_id),
                         "Image removed", question_id=question_id)

    async def handle_question_image(self, interaction: discord.Interaction, question_id: str,
                                    image: discord.Attachment):
        """Handle /question_image command"""
        session = self._session(interaction)
        try:
            draft = self._require_draft(interaction)
        except QuizAdminError as e:
            await self.handle_admin_error(interaction, e, "question_image")
            return
        if draft.find_question(question_id) is None:
            await self.send_error_response(interaction, f"Question `{question_id}` not found.", "❌ Unknown Question")
            return
        if image.content_type and not image.content_type.startswith("image/"):
            await self.send_error_response(interaction, "Please attach an image file.", "❌ Not an Image")
            return

        await interaction.response.defer(ephemeral=True, thinking=True)
        try:
            data = await image.read()
        except discord.HTTPException as e:
            logger.error(f"Failed to download attachment {image.filename}: {e}")
            await self.send_error_response(interaction, "Could not download the attachment.", "❌ Upload Failed")
            return

        if await session.upload_image(question_id, data):
            question = session.editing_quiz.find_question(question_id)
            size_kb = len(question.image) / 1024
            await self.send_info_response(
                interaction, f"Image compressed to {size_kb:.0f} KB. Use `/quiz_save` to store it.", "🖼️ Image Updated"
            )
        else:
            await self.send_warning_response(
                interaction, "The image could not be used; the previous image was kept.", "⚠️ Image Not Updated"
            )

    async def handle_results(self, interaction: discord.Interaction):
        """Handle /results command"""
        results = self.quiz_controller.get_quiz_results()
        total = self.quiz_controller.get_result_count()
        embed = discord.Embed(title=f"🏆 Results ({total})", color=COLOR_INFO)
        if not results:
            embed.description = "No results yet"
        else:
            embed.description = "\n".join(
                f"**{r.score}/{r.total_questions}** - {r.date.strftime('%Y-%m-%d')}" for r in results
            )
        await interaction.response.send_message(embed=embed, ephemeral=True)

    async def handle_results_clear(self, interaction: discord.Interaction):
        try:
            count = await self.quiz_controller.clear_results()
        except QuizAdminError as e:
            await self.handle_admin_error(interaction, e, "results_clear")
            return
        await self.send_info_response(interaction, f"Cleared {count} results.", "🗑️ Results Cleared")

    async def _edit(self, interaction: discord.Interaction, operation: str, action, message: str,
                    question_id: Optional[str] = None):
        """Apply a draft edit and report the outcome"""
        session = self._session(interaction)
        try:
            if question_id is not None and self._require_draft(interaction).find_question(question_id) is None:
                await self.send_error_response(
                    interaction, f"Question `{question_id}` not found.", "❌ Unknown Question"
                )
                return
            action(session)
        except QuizAdminError as e:
            await self.handle_admin_error(interaction, e, operation)
            return
        await self.send_info_response(interaction, f"{message}. Use `/quiz_save` to store your changes.", "✏️ Draft Updated")

    async def send_error_response(self, interaction: discord.Interaction, message: str, title: str = "❌ Error"):
        """Send formatted error response to user"""
        await self._send_embed(interaction, title, message, COLOR_ERROR,
                               footer="If this error persists, try using /help for available commands")

    async def send_info_response(self, interaction: discord.Interaction, message: str, title: str = "ℹ️ Information"):
        """Send formatted info response to user"""
        await self._send_embed(interaction, title, message, COLOR_INFO)

    async def send_warning_response(self, interaction: discord.Interaction, message: str, title: str = "⚠️ Warning"):
        """Send formatted warning response to user"""
        await self._send_embed(interaction, title, message, COLOR_WARN)

    async def _send_embed(self, interaction: discord.Interaction, title: str, message: str, color: int,
                          footer: Optional[str] = None):
        embed = discord.Embed(title=title, description=message, color=color)
        if footer:
            embed.set_footer(text=footer)
        try:
            if interaction.response.is_done():
                await interaction.followup.send(embed=embed, ephemeral=True)
            else:
                await interaction.response.send_message(embed=embed, ephemeral=True)
        except discord.HTTPException as e:
            logger.error(f"Failed to send embed: {e}")
            # Fallback to simple message
            try:
                if interaction.response.is_done():
                    await interaction.followup.send(f"{title}: {message}", ephemeral=True)
                else:
                    await interaction.response.send_message(f"{title}: {message}", ephemeral=True)
            except discord.HTTPException:
                logger.error("Failed to send fallback message")


async def run_bot(token=None, config=None):
    """Run the bot with proper error handling"""
    if not token:
        token = os.getenv('DISCORD_BOT_TOKEN')

    if not token:
        logger.error("No Discord bot token provided")
        return

    bot = QuizAdminBot(config)

    try:
        logger.info("Starting quiz admin bot...")
        await bot.start(token)
    except discord.LoginFailure:
        logger.error("Invalid bot token provided")
    except discord.HTTPException as e:
        logger.error(f"HTTP error occurred: {e}")
    finally:
        if not bot.is_closed():
            await bot.close()
