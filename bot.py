# bot.py
import os
import logging
import discord
from discord.ext import commands
from dotenv import load_dotenv
from pathlib import Path

from core.state import AppState
from core.db import db_init_spin_records
from core.restaurants import load_restaurants

load_dotenv()
TOKEN    = os.getenv("DISCORD_TOKEN")
GUILD_ID = int(os.getenv("GUILD_ID", "0") or 0)
DEV_FORCE_CLEAN = os.getenv("DEV_FORCE_CLEAN", "0") == "1"

BASE_DIR  = Path(__file__).resolve().parent
DB_PATH   = os.getenv("DB_PATH", "roulette.sqlite3")
RESTAURANTS_PATH = os.getenv("RESTAURANTS_PATH", "data/restaurants.json")

# make relative paths project-relative
if not os.path.isabs(DB_PATH):
    DB_PATH = str((BASE_DIR / DB_PATH).resolve())
if not os.path.isabs(RESTAURANTS_PATH):
    RESTAURANTS_PATH = str((BASE_DIR / RESTAURANTS_PATH).resolve())

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO"),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

# Use default intents (message_content not needed for slash cmds, but default avoids warnings)
intents = discord.Intents.default()
bot = commands.Bot(command_prefix="!", intents=intents)
tree = bot.tree

bot.state = AppState(db_path=DB_PATH, restaurants_path=RESTAURANTS_PATH)

COGS = ["cogs.system", "cogs.wheel", "cogs.friends"]

_started = False

@bot.event
async def on_ready():
    global _started
    if _started:
        # on_ready fires again after reconnects
        return
    _started = True

    # 1) Core init
    db_init_spin_records(bot.state)
    load_restaurants(bot.state)
    if bot.state.data_error:
        print("[data] restaurants unavailable, wheel disabled:", bot.state.data_error)

    # 2) Load cogs BEFORE syncing
    for ext in COGS:
        try:
            await bot.load_extension(ext)
            print(f"[cogs] loaded {ext}")
        except Exception as e:
            print(f"[cogs] FAILED {ext}: {e}")

    # 3) (Optional during dev) clear any stale commands, then guild-sync
    if DEV_FORCE_CLEAN:
        try:
            print("[sync] clearing GLOBAL commands…")
            tree.clear_commands(guild=None)
            await tree.sync(guild=None)
            print("[sync] GLOBAL cleared")
        except Exception as e:
            print("[sync] global clear failed:", e)

    # 4) Final sync to your dev guild for instant availability
    if GUILD_ID:
        await tree.sync(guild=discord.Object(id=GUILD_ID))
        cmds = await tree.fetch_commands(guild=discord.Object(id=GUILD_ID))
        print("[sync] guild commands:", [c.name for c in cmds], "count:", len(cmds))
    else:
        await tree.sync()
        print("Slash commands globally synced (may take a while)")

    print(f"Logged in as {bot.user} (ID: {bot.user.id})")

if __name__ == "__main__":
    if not TOKEN:
        raise SystemExit("DISCORD_TOKEN missing in .env")
    bot.run(TOKEN, log_handler=None)
