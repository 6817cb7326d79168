# core/guild_scope.py
import os

import discord
from discord import app_commands

# Set guild ID for development; unset means commands are global
GUILD_ID = int(os.getenv("GUILD_ID", "0") or 0)
GUILD = discord.Object(id=GUILD_ID) if GUILD_ID else None


def guild_scoped(func):
    """Pin a slash command to the dev guild when GUILD_ID is set; leave it global otherwise."""
    if GUILD is None:
        return func
    return app_commands.guilds(GUILD)(func)
