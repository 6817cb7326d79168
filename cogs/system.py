import discord
from discord.ext import commands
from discord import app_commands
from core.guild_scope import guild_scoped
from core.restaurants import load_restaurants

class System(commands.Cog):
    def __init__(self, bot: commands.Bot):
        self.bot = bot

    @app_commands.command(name="ping", description="Bot up?")
    @guild_scoped
    async def ping(self, interaction: discord.Interaction):
        await interaction.response.send_message("Pong!", ephemeral=True)

    @app_commands.command(name="reload_restaurants", description="Reload the restaurant list from disk")
    @guild_scoped
    @app_commands.default_permissions(administrator=True)
    @app_commands.checks.has_permissions(administrator=True)
    async def reload_restaurants(self, interaction: discord.Interaction):
        restaurants = load_restaurants(self.bot.state)
        roulette = self.bot.get_cog("Roulette")
        touched = roulette.refresh_restaurants() if roulette else 0
        if not restaurants:
            await interaction.response.send_message(
                f"Reload failed, wheel disabled: {self.bot.state.data_error}", ephemeral=True
            )
            return
        await interaction.response.send_message(
            f"Loaded {len(restaurants)} restaurants ({touched} open wheel(s) updated).", ephemeral=True
        )

async def setup(bot: commands.Bot):
    await bot.add_cog(System(bot))
