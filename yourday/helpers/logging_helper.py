from datetime import datetime, timezone
from typing import Optional, List, Tuple
import discord
from redbot.core import commands

# Ordered by severity. CATALOG sits above INFO so catalog gaps reach the log channel.
LOG_LEVELS = ("DEBUG", "INFO", "CATALOG", "WARNING", "ERROR", "CRITICAL")

DISCORD_MESSAGE_LIMIT = 2000
CHUNK_SIZE = 1900


def _timestamp() -> str:
    return datetime.now(timezone.utc).strftime('%Y-%m-%d %H:%M:%S UTC')


def _severity(level: str) -> int:
    try:
        return LOG_LEVELS.index(level.upper())
    except ValueError:
        return LOG_LEVELS.index("INFO")


class LoggingHelper:
    """
    Console and Discord log output for the cog.

    Everything is printed to the console. Messages at or above `discord_min_level` are also posted
    to the log channel once one is configured; before the bot is ready they are queued instead.
    """

    def __init__(self, bot: Optional[commands.Bot], log_channel_id: Optional[int] = None,
                 discord_min_level: str = "INFO"):
        self.bot = bot
        self.log_channel_id = log_channel_id
        self.discord_min_level = discord_min_level.upper()
        self._init_log_queue: List[Tuple[str, str]] = []

    def set_log_channel(self, channel_id: Optional[int]):
        self.log_channel_id = channel_id

    @property
    def queued_messages(self) -> List[Tuple[str, str]]:
        return list(self._init_log_queue)

    async def log_to_discord(self, message: str, level: str = "INFO", embed: Optional[discord.Embed] = None):
        """Posts a log line to the log channel, falling back to the console."""

        level = level.upper()

        if self.bot is None or not self.bot.is_ready():
            self._init_log_queue.append((message, level))
            print(f"[LOG_QUEUE|{level}] Bot not ready. Queued: {message}")
            return

        if self.log_channel_id is None or _severity(level) < _severity(self.discord_min_level):
            print(f"[LOG|{level}|{_timestamp()}] {message}")
            return

        log_channel = self.bot.get_channel(self.log_channel_id)
        if not isinstance(log_channel, discord.TextChannel):
            print(f"[LOG_ERROR|{level}] Log channel {self.log_channel_id} not found or not a TextChannel. "
                  f"Message: {message}")
            return

        try:
            await self._send(log_channel, message, level, embed)
        except discord.Forbidden:
            print(f"[LOG_FORBIDDEN] No permission to send to log channel {self.log_channel_id}.")
        except discord.HTTPException as e:
            print(f"[LOG_HTTP_ERROR] Failed to send to log channel {self.log_channel_id}: {e}")

    @staticmethod
    async def _send(channel: discord.TextChannel, message: str, level: str, embed: Optional[discord.Embed]):
        prefix = f"`[{_timestamp()}] [{level}]` "
        no_pings = discord.AllowedMentions.none()

        if len(prefix) + len(message) <= DISCORD_MESSAGE_LIMIT:
            await channel.send(content=prefix + message, embed=embed, allowed_mentions=no_pings)
            return

        await channel.send(content=f"{prefix}Log message too long, sent in chunks below.", embed=embed,
                           allowed_mentions=no_pings)
        for i in range(0, len(message), CHUNK_SIZE):
            await channel.send(f"```{level} Chunk {i // CHUNK_SIZE + 1}```\n{message[i:i + CHUNK_SIZE]}",
                               allowed_mentions=no_pings)

    def init_log(self, message: str, level: str = "INFO"):
        """
        Synchronous logger for helpers that cannot await. Prints immediately, then forwards to
        Discord on the running loop or queues until `flush_init_log_queue`.
        """

        level = level.upper()
        print(f"[INIT_LOG|{level}|{_timestamp()}] {message}")

        if self.bot and hasattr(self.bot, 'loop') and self.bot.loop.is_running():
            self.bot.loop.create_task(self.log_to_discord(message, level=level))
        else:
            self._init_log_queue.append((message, level))

    async def flush_init_log_queue(self):
        """Sends any queued logs generated before the bot was ready."""

        if not self._init_log_queue:
            return

        pending = list(self._init_log_queue)
        self._init_log_queue.clear()
        print(f"[LOG|DEBUG|{_timestamp()}] Flushing {len(pending)} queued startup logs.")
        for msg, level in pending:
            await self.log_to_discord(msg, level)
