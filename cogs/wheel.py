# cogs/wheel.py
import asyncio
import logging
from typing import Optional, Sequence

import discord
from discord import app_commands
from discord.ext import commands

from core.constants import SPIN_SECONDS, SPIN_WINDOW_END, SPIN_WINDOW_START
from core.daily_rollover import local_now
from core.db import db_init_spin_records
from core.guild_scope import guild_scoped
from core.render import (
    MAX_UPLOAD_BYTES,
    PAD_SECONDS,
    TAIL_SECONDS,
    WHEEL_SIZE,
    render_resting_png,
    render_spin_gif,
    render_wheel_png,
)
from core.restaurants import Restaurant, details_text, map_url
from core.roulette.animation import WheelAnimationController
from core.roulette.eligibility import EligibilityGate, LockState, Unlocked, is_unlocked
from core.roulette.errors import InvalidState, Locked
from core.roulette.records import DbSpinRecordStore
from core.roulette.session import SpinSession

PANEL_TIMEOUT = 600.0
COLOR_READY = 0x2b6cb0
COLOR_LOCKED = 0x718096

logger = logging.getLogger(__name__)


def lock_line(state: LockState) -> str:
    if is_unlocked(state):
        return f"✅ {state.message}"
    ts = int(state.until.timestamp())
    return f"🔒 {state.message}\nUnlocks <t:{ts}:R> (<t:{ts}:t>)"


class DiscordPresenter:
    """
    Turns SpinSession events into edits of one roulette panel message.
    Session callbacks are synchronous; Discord calls are scheduled on the loop.
    """
    def __init__(self, author_id: int, channel: Optional[discord.abc.Messageable] = None):
        self.author_id = author_id
        self.channel = channel
        self.message: Optional[discord.Message] = None
        self.view: Optional["RouletteView"] = None
        self.items: tuple[str, ...] = ()
        self.state: LockState = Unlocked()
        self.winner: Optional[Restaurant] = None
        self.discount_code: Optional[str] = None
        self.spinning = False
        self.interaction: Optional[discord.Interaction] = None  # button press being answered
        self.pending_restaurants: Optional[Sequence[Restaurant]] = None  # reload held back during a reveal
        self._shown = asyncio.Event()
        self._shown_at = 0.0
        self._tasks: set[asyncio.Task] = set()

    def _schedule(self, coro) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            coro.close()
            return
        task = loop.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    # ---- Presenter protocol ----
    def display_wheel(self, items: Sequence[str]) -> None:
        self.items = tuple(items)
        self._schedule(self.refresh_panel())

    def display_winner(self, restaurant: Restaurant) -> None:
        self.winner = restaurant
        self.discount_code = None
        self._schedule(self._show_result())

    def display_spin_locked(self, state: LockState) -> None:
        self.state = state
        if not self.spinning:
            self._schedule(self.refresh_panel())

    def display_discount_code(self, code: str) -> None:
        self.discount_code = code

    def open_external_map(self, latitude: float, longitude: float, name: str) -> None:
        url = map_url(latitude, longitude, name)
        view = discord.ui.View()
        view.add_item(discord.ui.Button(label=f"Open {name} in Maps", url=url))
        self._schedule(self._reply(f"🗺️ **{name}**\n{url}", view=view, ephemeral=True))

    def share_text(self, text: str) -> None:
        self._schedule(self._reply(text, ephemeral=False))

    # ---- spin lifecycle ----
    def begin_spin(self) -> None:
        self.spinning = True
        self.winner = None
        self.discount_code = None
        self._shown.clear()

    def mark_animation_shown(self) -> None:
        self._shown_at = asyncio.get_running_loop().time()
        self._shown.set()

    def panel_embed(self) -> discord.Embed:
        if self.spinning:
            embed = discord.Embed(title="🎡 Spinning…", description="Good luck!", color=COLOR_READY)
            embed.set_image(url="attachment://spin.gif")
            return embed

        color = COLOR_READY if is_unlocked(self.state) else COLOR_LOCKED
        if self.winner is not None:
            desc = details_text(self.winner)
            if self.discount_code:
                desc += f"\n\n🎟️ Discount code: **{self.discount_code}**"
            embed = discord.Embed(title=f"🎉 {self.winner.name}", description=desc, color=color)
        elif not self.items:
            embed = discord.Embed(
                title="🌙 Midnight Snack Roulette",
                description="⚠️ No restaurants are available right now, so the wheel is disabled.",
                color=COLOR_LOCKED,
            )
        else:
            embed = discord.Embed(
                title="🌙 Midnight Snack Roulette",
                description="What should I eat for a late-night snack? Press **SPIN!**",
                color=color,
            )
        embed.add_field(name="Status", value=lock_line(self.state), inline=False)
        embed.set_image(url="attachment://wheel.png")
        return embed

    async def refresh_panel(self) -> None:
        if self.message is None:
            return
        if self.view is not None:
            self.view.sync()
        try:
            await self.message.edit(embed=self.panel_embed(), view=self.view)
        except discord.HTTPException:
            logger.warning("Could not refresh roulette panel for user_id=%s", self.author_id, exc_info=True)

    async def _show_result(self) -> None:
        # hold the result until the GIF has played out (mid-tail, no replay flash)
        try:
            await asyncio.wait_for(self._shown.wait(), timeout=30)
        except asyncio.TimeoutError:
            pass
        loop = asyncio.get_running_loop()
        remaining = PAD_SECONDS + SPIN_SECONDS + TAIL_SECONDS * 0.5 - (loop.time() - self._shown_at)
        if self._shown.is_set() and remaining > 0:
            await asyncio.sleep(remaining)

        self.spinning = False
        if self.view is not None:
            self.view.sync()
        session = self.view.session if self.view is not None else None
        if session is None:
            return
        if self.message is not None and session.outcome is not None:
            await self._post_result(session)
        pending, self.pending_restaurants = self.pending_restaurants, None
        if pending is not None:
            session.set_restaurants(pending)

    async def _post_result(self, session: SpinSession) -> None:
        try:
            # the outcome indexes the wheel as it was spun, not a reloaded one
            items = session.handle.items if session.handle is not None else session.items
            png = await asyncio.to_thread(render_resting_png, items, session.outcome, WHEEL_SIZE)
            await self.message.edit(
                embed=self.panel_embed(),
                attachments=[discord.File(png, filename="wheel.png")],
                view=self.view,
            )
        except discord.HTTPException:
            logger.warning("Could not post roulette result for user_id=%s", self.author_id, exc_info=True)

    async def _reply(self, content: str, *, view: Optional[discord.ui.View] = None, ephemeral: bool = True) -> None:
        interaction, self.interaction = self.interaction, None
        kwargs = {"content": content}
        if view is not None:
            kwargs["view"] = view
        try:
            if interaction is not None:
                if interaction.response.is_done():
                    await interaction.followup.send(ephemeral=ephemeral, **kwargs)
                else:
                    await interaction.response.send_message(ephemeral=ephemeral, **kwargs)
            elif self.channel is not None:
                await self.channel.send(**kwargs)
        except discord.HTTPException:
            logger.warning("Could not send roulette reply", exc_info=True)


class RouletteView(discord.ui.View):
    def __init__(self, cog: "Roulette", session: SpinSession, presenter: DiscordPresenter):
        super().__init__(timeout=PANEL_TIMEOUT)
        self.cog = cog
        self.session = session
        self.presenter = presenter
        presenter.view = self
        self.sync()

    async def interaction_check(self, interaction: discord.Interaction) -> bool:
        if interaction.user.id != self.presenter.author_id:
            await interaction.response.send_message("Only the original user can spin this wheel.", ephemeral=True)
            return False
        return True

    def sync(self) -> None:
        """Enable/disable buttons from the session's current state."""
        busy = self.presenter.spinning or self.session.controller.is_spinning
        self.spin_button.disabled = busy or not self.session.can_spin
        self.spin_button.label = "Spin Again" if self.presenter.winner is not None else "SPIN!"
        if not self.session.restaurants:
            self.spin_button.label = "No restaurants"
        elif not is_unlocked(self.session.state):
            self.spin_button.label = "Locked"
        has_winner = self.presenter.winner is not None and not busy
        self.navigate_button.disabled = not has_winner
        self.share_button.disabled = not has_winner

    def close(self) -> None:
        self.session.stop()
        self.stop()

    async def on_timeout(self):
        self.session.stop()
        for child in self.children:
            child.disabled = True
        if self.presenter.message is not None:
            try:
                await self.presenter.message.edit(view=self)
            except discord.HTTPException:
                pass
        self.cog.forget(self)

    @discord.ui.button(label="SPIN!", style=discord.ButtonStyle.primary, emoji="🎡")
    async def spin_button(self, interaction: discord.Interaction, button: discord.ui.Button):
        try:
            self.session.request_spin(local_now())
        except Locked as e:
            await interaction.response.send_message(lock_line(e.state), ephemeral=True)
            return
        except InvalidState as e:
            await interaction.response.send_message(f"❌ {e}", ephemeral=True)
            return

        handle = self.session.handle
        self.presenter.begin_spin()
        self.sync()
        await interaction.response.edit_message(embed=self.presenter.panel_embed(), view=self)

        try:
            gif_buf = await asyncio.to_thread(
                render_spin_gif,
                handle.items,
                handle.start_angle,
                handle.end_angle,
                size=WHEEL_SIZE,
                duration_sec=SPIN_SECONDS,
            )
            if gif_buf.getbuffer().nbytes > MAX_UPLOAD_BYTES:
                raise RuntimeError("gif-too-large")
            await interaction.edit_original_response(
                embed=self.presenter.panel_embed(),
                attachments=[discord.File(gif_buf, filename="spin.gif")],
                view=self,
            )
        except Exception:
            # the result still arrives when the wheel settles; it just isn't animated
            logger.warning("Spin rendering failed; showing static result", exc_info=True)
        finally:
            self.presenter.mark_animation_shown()

    @discord.ui.button(label="Navigate", style=discord.ButtonStyle.secondary, emoji="🗺️")
    async def navigate_button(self, interaction: discord.Interaction, button: discord.ui.Button):
        self.presenter.interaction = interaction
        self.session.open_map()

    @discord.ui.button(label="Share", style=discord.ButtonStyle.secondary, emoji="📣")
    async def share_button(self, interaction: discord.Interaction, button: discord.ui.Button):
        self.presenter.interaction = interaction
        self.session.share()


# ---------------- Cog ----------------
class Roulette(commands.Cog):
    def __init__(self, bot: commands.Bot):
        self.bot = bot
        self.state = bot.state
        self.panels: dict[int, RouletteView] = {}

    async def cog_load(self):
        db_init_spin_records(self.state)

    async def cog_unload(self):
        for view in list(self.panels.values()):
            view.close()
        self.panels.clear()

    def gate_for(self, user_id: int) -> EligibilityGate:
        return EligibilityGate(
            DbSpinRecordStore(self.state, user_id),
            start_hour=SPIN_WINDOW_START,
            end_hour=SPIN_WINDOW_END,
        )

    def forget(self, view: RouletteView) -> None:
        if self.panels.get(view.presenter.author_id) is view:
            self.panels.pop(view.presenter.author_id, None)

    def refresh_restaurants(self) -> int:
        """Push a reloaded dataset to every open panel; mid-spin panels take it after the reveal."""
        touched = 0
        for view in self.panels.values():
            if view.presenter.spinning or view.session.controller.is_spinning:
                view.presenter.pending_restaurants = self.state.restaurants
            else:
                view.session.set_restaurants(self.state.restaurants)
            touched += 1
        return touched

    @app_commands.command(name="roulette", description="Spin the Midnight Snack Roulette (once per day).")
    @guild_scoped
    async def roulette(self, interaction: discord.Interaction):
        old = self.panels.pop(interaction.user.id, None)
        if old is not None:
            old.close()

        presenter = DiscordPresenter(interaction.user.id, interaction.channel)
        session = SpinSession(
            self.state.restaurants,
            self.gate_for(interaction.user.id),
            presenter,
            controller=WheelAnimationController(duration=SPIN_SECONDS),
        )
        view = RouletteView(self, session, presenter)
        session.start()
        view.sync()

        idle_png = await asyncio.to_thread(render_wheel_png, session.items, 0.0, WHEEL_SIZE)
        await interaction.response.send_message(
            embed=presenter.panel_embed(),
            file=discord.File(idle_png, filename="wheel.png"),
            view=view,
        )
        presenter.message = await interaction.original_response()
        self.panels[interaction.user.id] = view

    @app_commands.command(name="spin_status", description="When can I spin the roulette again?")
    @guild_scoped
    async def spin_status(self, interaction: discord.Interaction):
        gate = self.gate_for(interaction.user.id)
        state = gate.check(local_now())
        await interaction.response.send_message(
            f"{lock_line(state)}\nSpin window: **{gate.window_label}**",
            ephemeral=True,
        )

    @app_commands.command(name="spin_reset", description="(Admin) Clear a user's daily spin record")
    @guild_scoped
    @app_commands.default_permissions(administrator=True)
    @app_commands.checks.has_permissions(administrator=True)
    @app_commands.describe(member="User to reset (defaults to you)")
    async def spin_reset(self, interaction: discord.Interaction, member: Optional[discord.Member] = None):
        target = member or interaction.user
        view = self.panels.get(target.id)
        if view is not None:
            view.session.reset()
        else:
            self.gate_for(target.id).reset()
        logger.info("Spin record reset for user_id=%s by %s", target.id, interaction.user.id)
        await interaction.response.send_message(
            f"✅ Spin record cleared for {target.mention}.",
            ephemeral=True,
        )


async def setup(bot: commands.Bot):
    await bot.add_cog(Roulette(bot))
