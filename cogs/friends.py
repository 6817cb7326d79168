# cogs/friends.py
"""Simulated friends roster and the rotating "what friends are eating" status."""

import logging

import discord
from discord import app_commands
from discord.ext import commands

from core.constants import FRIENDS, FRIEND_STATUSES
from core.guild_scope import guild_scoped
from core.roulette.ticker import StatusTicker

logger = logging.getLogger(__name__)


def roster_lines() -> list[str]:
    return [f"{'🟢' if f.is_online else '⚫'} {f.avatar} {f.name}" for f in FRIENDS]


class InviteSelect(discord.ui.Select):
    def __init__(self):
        options = [
            discord.SelectOption(
                label=f.name,
                value=f.id,
                description="online" if f.is_online else "offline",
            )
            for f in FRIENDS
        ]
        super().__init__(placeholder="Invite a friend to your late-night snack…", options=options)

    async def callback(self, interaction: discord.Interaction):
        friend = next((f for f in FRIENDS if f.id == self.values[0]), None)
        if friend is None:
            await interaction.response.send_message("That friend wandered off.", ephemeral=True)
            return
        # no delivery backend; the invite is only acknowledged
        logger.info("Invitation sent to %s by user_id=%s", friend.name, interaction.user.id)
        await interaction.response.send_message(f"📨 Invitation sent to **{friend.name}**!", ephemeral=True)


class FriendsView(discord.ui.View):
    def __init__(self):
        super().__init__(timeout=120)
        self.add_item(InviteSelect())


class Friends(commands.Cog):
    def __init__(self, bot: commands.Bot):
        self.bot = bot
        self.ticker = StatusTicker(FRIEND_STATUSES, self._set_status)

    async def cog_load(self):
        self.ticker.start()

    async def cog_unload(self):
        self.ticker.stop()

    async def _set_status(self, message: str):
        await self.bot.change_presence(activity=discord.CustomActivity(name=message))

    @app_commands.command(name="friends", description="See who's up for a midnight snack")
    @guild_scoped
    async def friends(self, interaction: discord.Interaction):
        embed = discord.Embed(title="🌙 Friends", description="\n".join(roster_lines()), color=0x2b6cb0)
        current = self.ticker.current()
        if current:
            embed.set_footer(text=f"💬 {current}")
        await interaction.response.send_message(embed=embed, view=FriendsView(), ephemeral=True)


async def setup(bot: commands.Bot):
    await bot.add_cog(Friends(bot))
