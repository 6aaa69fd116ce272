from .yourday import YourDay


async def setup(bot):
    await bot.add_cog(YourDay(bot))
