import discord
from redbot.core import commands


def _notice(title: str, description: str) -> discord.Embed:
    embed = discord.Embed(title=title, description=description, color=discord.Color.orange())
    embed.set_footer(text="YourDay - Garden")
    return embed


def is_cog_ready():
    """Blocks commands until the catalog and saved gardens are loaded."""

    async def predicate(ctx: commands.Context):
        if getattr(ctx.cog, '_initialized', False):
            return True

        await ctx.send(embed=_notice("⏳ Garden Warming Up",
                                     "YourDay is still loading gardens. Please try again in a moment."),
                       delete_after=10)
        return False

    return commands.check(predicate)


def is_not_locked():
    """
    Blocks ledger-changing commands while the author has an action waiting on them,
    such as an unanswered garden reset confirmation.
    """

    async def predicate(ctx: commands.Context):
        lock_helper = getattr(ctx.cog, 'lock_helper', None)
        lock = lock_helper.get_user_lock(ctx.author.id) if lock_helper else None
        if lock is None:
            return True

        await ctx.send(embed=_notice(f"🔒 Pending {lock.lock_type.capitalize()}",
                                     f"{ctx.author.mention}, answer this first:\n\n*{lock.message}*"))
        return False

    return commands.check(predicate)
