import asyncio
import time
import traceback
from typing import List, Optional

import discord
from redbot.core import Config, commands, data_manager

from .decorators import is_cog_ready, is_not_locked
from .helpers import (
    TimeHelper,
    PlantHelper,
    GachaHelper,
    SalesHelper,
    LevelHelper,
    LockHelper,
    LoggingHelper,
    DataHelper,
    GameStateHelper,
    GardenHelper,
    TaskHelper,
    PointHelper,
    SessionHelper,
    SyncHelper,
    ConfigRemoteStore,
)
from .models import ActionResult, GridPosition, PlacedPlant, PlantTheme, Rarity

MAX_SUMMARY_FIELDS = 23


class YourDay(commands.Cog):
    """YourDay - Finish your to-dos, earn points, and grow a seasonal garden."""

    CURRENCY_LABEL = "pts"
    CONFIG_IDENTIFIER = 7205117304429713408
    REMOTE_CONFIG_IDENTIFIER = 7205117304429713409
    RARITY_EMOJI = {
        Rarity.COMMON: "⚪",
        Rarity.UNCOMMON: "🟢",
        Rarity.RARE: "🔵",
        Rarity.EPIC: "🟣",
        Rarity.LEGENDARY: "🟡",
    }
    THEME_EMOJI = {
        PlantTheme.SPRING: "🌷",
        PlantTheme.SUMMER: "☀️",
        PlantTheme.FALL: "🍂",
        PlantTheme.WINTER: "❄️",
    }

    def __init__(self, bot: commands.Bot):
        self._initialized = False

        self.bot = bot
        self.config = Config.get_conf(self, identifier=self.CONFIG_IDENTIFIER)
        self.config.register_global(game_state={})

        self.remote_config = Config.get_conf(None, identifier=self.REMOTE_CONFIG_IDENTIFIER,
                                             cog_name="YourDayRemote")
        self.remote_config.register_global(player_stats={}, leaderboard_entries={})

        self.cog_data_path = data_manager.bundled_data_path(self)
        self.lock_helper = LockHelper()
        self.session_helper = SessionHelper()
        self.logger = LoggingHelper(bot)
        self.data_loader = DataHelper(self.cog_data_path, self.logger)
        self.data_loader.load_all_data()

        self.game_state_helper = GameStateHelper(self.config, self.logger)

        self.plant_helper: Optional[PlantHelper] = None
        self.gacha_helper: Optional[GachaHelper] = None
        self.garden_helper: Optional[GardenHelper] = None
        self.task_helper: Optional[TaskHelper] = None
        self.point_helper: Optional[PointHelper] = None
        self.sync_helper: Optional[SyncHelper] = None

        self.autosave_task = self.bot.loop.create_task(self.startup_and_autosave_loop())

    def cog_unload(self):
        """Cog cleanup method."""

        if self.autosave_task:
            self.autosave_task.cancel()

        self.lock_helper.clear_all_locks()
        self.session_helper.clear_all_sessions()
        if self.sync_helper:
            self.sync_helper.cancel_pending()
        self.logger.init_log("YourDay cog systems are now offline.", "INFO")

    async def _load_and_initialize_helpers(self):
        await self.game_state_helper.load_game_state()
        self.logger.set_log_channel(self.game_state_helper.get_global_state("log_channel_id"))

        self.plant_helper = PlantHelper(self.data_loader.plant_blueprints)
        self.gacha_helper = GachaHelper(self.plant_helper)
        self.garden_helper = GardenHelper(self.game_state_helper, self.plant_helper, self.gacha_helper, self.logger)
        self.task_helper = TaskHelper(self.game_state_helper)
        self.point_helper = PointHelper(self.garden_helper, self.task_helper, self.game_state_helper, self.logger)
        self.sync_helper = SyncHelper(ConfigRemoteStore(self.remote_config), self.garden_helper,
                                      self.session_helper, self.logger)

        await self._log_catalog_gaps()

    async def _log_catalog_gaps(self) -> List[str]:
        gaps = [f"{theme.label}/{rarity.label}" for theme, rarity in self.plant_helper.find_catalog_gaps()]
        if gaps:
            await self.logger.log_to_discord(
                f"Catalog: {len(gaps)} empty theme/rarity cell(s), pulls will fall back: {', '.join(gaps)}",
                "CATALOG")
        return gaps

    async def startup_and_autosave_loop(self):
        """The main background task for the cog."""

        await self.bot.wait_until_ready()
        await self.logger.flush_init_log_queue()
        await self.logger.log_to_discord("Autosave Loop: System Online.", "INFO")

        await self._load_and_initialize_helpers()

        self._initialized = True

        await self.logger.log_to_discord("Autosave Loop: Startup complete. Entering save cycle.", "INFO")
        loop_counter = 0
        last_valued_on = None
        while not self.bot.is_closed():
            try:
                loop_start_time = time.monotonic()

                # Seasonal bonuses change with the date, so garden values are refreshed once per day.
                today = TimeHelper.today()
                if last_valued_on != today:
                    for user_id in self.garden_helper.get_all_user_ids():
                        self.garden_helper.update_garden_value(user_id, today)
                    last_valued_on = today

                await self.game_state_helper.commit_to_disk()

                loop_duration = time.monotonic() - loop_start_time
                await self.logger.log_to_discord(
                    f"Autosave Loop: Cycle {loop_counter} completed in {loop_duration:.2f}s. Data saved.",
                    "DEBUG")
            except Exception as e:
                await self.logger.log_to_discord(
                    f"Autosave Loop: CRITICAL Anomaly in cycle {loop_counter}: {e}\n{traceback.format_exc()}",
                    "CRITICAL")

            loop_counter += 1
            interval = self.game_state_helper.get_global_state("autosave_interval_seconds", 60)
            await asyncio.sleep(max(5, interval))

    # --- Shared presentation ---

    def _push(self, user: discord.abc.User):
        self.sync_helper.schedule_push(user.id, user.display_name)

    def _plant_line(self, plant: PlacedPlant) -> str:
        rarity_emoji = self.RARITY_EMOJI.get(plant.rarity, "▫️")
        if plant.is_fully_grown:
            status = f"grown, worth **{SalesHelper.get_dynamic_value(plant):,.0f}**"
            if SalesHelper.is_seasonal_bonus_active(plant):
                status += " (in season!)"
        else:
            watered = "💧" if TimeHelper.is_same_day(plant.last_watered_on_day, TimeHelper.today()) else "🥀"
            status = f"{plant.days_left_till_fully_grown} day(s) left {watered}"
        return f"{rarity_emoji} **{plant.name}** ({plant.theme.label}) - {status}"

    @staticmethod
    def _failure_embed(title: str, result: ActionResult) -> discord.Embed:
        embed = discord.Embed(title=f"❌ {title}", description=result.message, color=discord.Color.red())
        embed.set_footer(text=f"YourDay - {result.error_kind.value.replace('_', ' ').title()}")
        return embed

    def _plant_in_plot(self, user_id: int, plot_number: int) -> Optional[PlacedPlant]:
        ledger = self.garden_helper.get_ledger_view(user_id)
        return ledger.plant_at(GridPosition.from_plot_number(plot_number))

    async def _send_empty_plot(self, ctx: commands.Context, plot_number: int):
        embed = discord.Embed(title="❌ Empty Plot",
                              description=f"{ctx.author.mention}, there is no plant in plot {plot_number}.",
                              color=discord.Color.red())
        await ctx.send(embed=embed)

    # --- Garden ---

    @commands.command(name="garden")
    @is_cog_ready()
    async def garden_command(self, ctx: commands.Context, user: Optional[discord.Member] = None):
        """Show your garden plots, points and level."""

        target_user = user or ctx.author
        if target_user.id != ctx.author.id and not self.garden_helper.has_ledger(target_user.id):
            embed = discord.Embed(title="🌱 No Garden Yet",
                                  description=f"{target_user.display_name} hasn't started a garden.",
                                  color=discord.Color.orange())
            await ctx.send(embed=embed)
            return

        self.garden_helper.update_garden_value(target_user.id)
        ledger = self.garden_helper.get_ledger_view(target_user.id)

        plot_lines = []
        for plot_number in range(1, ledger.number_of_owned_plots + 1):
            plant = ledger.plant_at(GridPosition.from_plot_number(plot_number))
            plot_lines.append(f"`{plot_number:>2}` " + (self._plant_line(plant) if plant else "*empty*"))

        season = TimeHelper.season_for(TimeHelper.today())
        xp_needed = LevelHelper.xp_required_for_next_level(ledger.player_level)

        embed = discord.Embed(
            title=f"{self.THEME_EMOJI[season]} {target_user.display_name}'s Garden",
            description="\n".join(plot_lines),
            color=discord.Color.green()
        )
        embed.add_field(name="Points", value=f"{ledger.total_points:,.0f} {self.CURRENCY_LABEL}", inline=True)
        embed.add_field(name="Garden Value", value=f"{ledger.garden_value:,.0f}", inline=True)
        embed.add_field(name="Level", value=f"{ledger.player_level} ({ledger.current_xp:,.0f}/{xp_needed:,.0f} XP)",
                        inline=True)
        embed.add_field(name="Fertilizer", value=str(ledger.fertilizer_count), inline=True)
        embed.add_field(name="Plots",
                        value=f"{ledger.number_of_owned_plots}/"
                              f"{LevelHelper.max_plots_for_level(ledger.player_level)}",
                        inline=True)
        embed.set_footer(text=f"Current season: {season.label}. In-season grown plants are worth 1.5x.")
        await ctx.send(embed=embed)

    @commands.command(name="inventory")
    @is_cog_ready()
    async def inventory_command(self, ctx: commands.Context):
        """List the unplanted plants you own."""

        entries = self.garden_helper.get_inventory_blueprints(ctx.author.id)
        if not entries:
            embed = discord.Embed(title="🎒 Inventory Empty",
                                  description=f"You have no unplanted plants. Try `{ctx.prefix}pull <theme>`.",
                                  color=discord.Color.light_grey())
            await ctx.send(embed=embed)
            return

        lines = []
        for blueprint, blueprint_id, count in entries:
            if blueprint is None:
                lines.append(f"▫️ `{blueprint_id}` x{count} *(no longer in the catalog)*")
            else:
                lines.append(f"{self.RARITY_EMOJI[blueprint.rarity]} **{blueprint.name}** x{count} "
                             f"({blueprint.theme.label}, `{blueprint.id}`)")

        embed = discord.Embed(title=f"🎒 {ctx.author.display_name}'s Inventory", description="\n".join(lines),
                              color=discord.Color.blue())
        embed.set_footer(text=f"Use {ctx.prefix}plant <plot> <plant> to place one.")
        await ctx.send(embed=embed)

    @commands.command(name="catalog")
    @is_cog_ready()
    async def catalog_command(self, ctx: commands.Context, theme: Optional[str] = None):
        """Browse plant blueprints, optionally for a single theme."""

        if theme is not None:
            try:
                themes = [PlantTheme(theme.lower())]
            except ValueError:
                await ctx.send(embed=discord.Embed(
                    title="❌ Unknown Theme",
                    description=f"Choose one of: {', '.join(t.value for t in PlantTheme)}.",
                    color=discord.Color.red()))
                return
        else:
            themes = list(PlantTheme)

        embed = discord.Embed(title="📖 Plant Catalog", color=discord.Color.teal())
        for plant_theme in themes:
            blueprints = sorted(self.plant_helper.get_blueprints_by_theme(plant_theme),
                                key=lambda b: list(Rarity).index(b.rarity))
            lines = [f"{self.RARITY_EMOJI[b.rarity]} **{b.name}** - {b.base_value:,.0f} value, "
                     f"{b.initial_days_to_grow} day(s)" for b in blueprints]
            embed.add_field(name=f"{self.THEME_EMOJI[plant_theme]} {plant_theme.label}",
                            value="\n".join(lines) or "*No plants yet.*", inline=False)
        await ctx.send(embed=embed)

    @commands.command(name="pull")
    @is_cog_ready()
    @is_not_locked()
    async def pull_command(self, ctx: commands.Context, theme: str, count: int = 1):
        """Spend points on random plants of a theme. A 10-pull guarantees one rare or better."""

        prices = self.data_loader.pull_prices
        try:
            plant_theme = PlantTheme(theme.lower())
        except ValueError:
            await ctx.send(embed=discord.Embed(
                title="❌ Unknown Theme",
                description=f"Choose one of: {', '.join(t.value for t in PlantTheme)}.",
                color=discord.Color.red()))
            return

        if count not in prices:
            options = ", ".join(f"{n} for {cost:,.0f} {self.CURRENCY_LABEL}" for n, cost in sorted(prices.items()))
            await ctx.send(embed=discord.Embed(title="❌ Invalid Pull Size",
                                               description=f"Available pulls: {options}.",
                                               color=discord.Color.red()))
            return

        result = self.garden_helper.pull_plants(ctx.author.id, plant_theme, count, prices[count])
        if not result:
            await ctx.send(embed=self._failure_embed("Pull Failed", result))
            return

        ledger = self.garden_helper.get_ledger_view(ctx.author.id)
        lines = [f"{self.RARITY_EMOJI[b.rarity]} **{b.name}** ({b.rarity.label})" for b in result.value]
        embed = discord.Embed(title=f"{self.THEME_EMOJI[plant_theme]} {plant_theme.label} Pull x{count}",
                              description="\n".join(lines), color=discord.Color.gold())
        embed.add_field(name="Spent", value=f"{prices[count]:,.0f} {self.CURRENCY_LABEL}", inline=True)
        embed.add_field(name="Remaining", value=f"{ledger.total_points:,.0f} {self.CURRENCY_LABEL}", inline=True)
        await ctx.send(embed=embed)
        self._push(ctx.author)

    @commands.command(name="plant")
    @is_cog_ready()
    @is_not_locked()
    async def plant_command(self, ctx: commands.Context, plot_number: int, *, plant_name: str):
        """Place a plant from your inventory into an empty plot."""

        blueprint = self.plant_helper.find_blueprint(plant_name)
        blueprint_id = blueprint.id if blueprint else plant_name
        result = self.garden_helper.plant_from_inventory(ctx.author.id, blueprint_id,
                                                         GridPosition.from_plot_number(plot_number))
        if not result:
            await ctx.send(embed=self._failure_embed("Planting Failed", result))
            return

        plant: PlacedPlant = result.value
        embed = discord.Embed(title="🌱 Planted",
                              description=f"{result.message}\nWater it daily: it needs "
                                          f"{plant.days_left_till_fully_grown} more day(s) to grow.",
                              color=discord.Color.green())
        await ctx.send(embed=embed)
        self._push(ctx.author)

    @commands.command(name="water")
    @is_cog_ready()
    @is_not_locked()
    async def water_command(self, ctx: commands.Context, plot_number: Optional[int] = None):
        """Water one plot, or every plot when none is given. Each plant can be watered once per day."""

        if plot_number is None:
            result = self.garden_helper.water_all_plants(ctx.author.id)
        else:
            plant = self._plant_in_plot(ctx.author.id, plot_number)
            if plant is None:
                await self._send_empty_plot(ctx, plot_number)
                return
            result = self.garden_helper.water_plant(ctx.author.id, plant.id)

        if not result:
            embed = discord.Embed(title="💧 Nothing to Water", description=result.message,
                                  color=discord.Color.light_grey())
            await ctx.send(embed=embed)
            return

        await ctx.send(embed=discord.Embed(title="💧 Watered", description=result.message,
                                           color=discord.Color.blue()))
        self._push(ctx.author)

    @commands.command(name="fertilize")
    @is_cog_ready()
    @is_not_locked()
    async def fertilize_command(self, ctx: commands.Context, plot_number: int):
        """Use one fertilizer to make a plant fully grown instantly."""

        plant = self._plant_in_plot(ctx.author.id, plot_number)
        if plant is None:
            await self._send_empty_plot(ctx, plot_number)
            return

        result = self.garden_helper.use_fertilizer(ctx.author.id, plant.id)
        if not result:
            await ctx.send(embed=self._failure_embed("Fertilizer Not Used", result))
            return

        await ctx.send(embed=discord.Embed(title="✨ Fertilized", description=result.message,
                                           color=discord.Color.green()))
        self._push(ctx.author)

    @commands.command(name="sell")
    @is_cog_ready()
    @is_not_locked()
    async def sell_command(self, ctx: commands.Context, plot_number: int):
        """Sell a fully grown plant for 1.5x its base value."""

        plant = self._plant_in_plot(ctx.author.id, plot_number)
        if plant is None:
            await self._send_empty_plot(ctx, plot_number)
            return

        result = self.garden_helper.sell_plant(ctx.author.id, plant.id)
        if not result:
            await ctx.send(embed=self._failure_embed("Sale Failed", result))
            return

        ledger = self.garden_helper.get_ledger_view(ctx.author.id)
        embed = discord.Embed(title="💰 Plant Sold", description=result.message, color=discord.Color.green())
        embed.add_field(name="Balance", value=f"{ledger.total_points:,.0f} {self.CURRENCY_LABEL}", inline=True)
        embed.add_field(name="Garden Value", value=f"{ledger.garden_value:,.0f}", inline=True)
        await ctx.send(embed=embed)
        self._push(ctx.author)

    @commands.command(name="compost")
    @is_cog_ready()
    @is_not_locked()
    async def compost_command(self, ctx: commands.Context, quantity: int, *, plant_name: str):
        """Turn unplanted plants into fertilizer, 10 plants per fertilizer."""

        blueprint = self.plant_helper.find_blueprint(plant_name)
        blueprint_id = blueprint.id if blueprint else plant_name
        result = self.garden_helper.convert_to_fertilizer(ctx.author.id, blueprint_id, quantity)
        if not result:
            await ctx.send(embed=self._failure_embed("Compost Failed", result))
            return

        await ctx.send(embed=discord.Embed(title="🪱 Composted", description=result.message,
                                           color=discord.Color.dark_green()))
        self._push(ctx.author)

    @commands.command(name="buyplot")
    @is_cog_ready()
    @is_not_locked()
    async def buyplot_command(self, ctx: commands.Context):
        """Buy one more garden plot. Costs 20 points per level."""

        cost = self.garden_helper.cost_to_buy_next_plot(ctx.author.id)
        result = self.garden_helper.buy_next_plot(ctx.author.id)
        if not result:
            await ctx.send(embed=self._failure_embed("Plot Not Purchased", result))
            return

        embed = discord.Embed(title="🧱 Plot Purchased",
                              description=f"{result.message}\nSpent **{cost:,.0f}** {self.CURRENCY_LABEL}.",
                              color=discord.Color.green())
        await ctx.send(embed=embed)
        self._push(ctx.author)

    @commands.command(name="claim")
    @is_cog_ready()
    @is_not_locked()
    async def claim_command(self, ctx: commands.Context):
        """Collect points for the tasks you finished yesterday."""

        self.garden_helper.update_garden_value(ctx.author.id)
        total, breakdown = self.point_helper.evaluate_daily_points(ctx.author.id)
        next_reset_ts = int(TimeHelper.next_day_start().timestamp())

        if total <= 0:
            embed = discord.Embed(
                title="📋 Nothing to Claim",
                description=f"{ctx.author.mention}, there are no new points for yesterday.\n"
                            f"Finish tasks today and come back <t:{next_reset_ts}:R>.",
                color=discord.Color.light_grey())
            await ctx.send(embed=embed)
            self._push(ctx.author)
            return

        lines = [f"• **{r.title}**: {r.total_points:,.1f}" for r in breakdown]
        ledger = self.garden_helper.get_ledger_view(ctx.author.id)
        embed = discord.Embed(title="🏆 Daily Points Claimed",
                              description="\n".join(lines), color=discord.Color.gold())
        embed.add_field(name="Earned", value=f"{total:,.0f} {self.CURRENCY_LABEL} and {total:,.0f} XP", inline=False)
        embed.add_field(name="Balance", value=f"{ledger.total_points:,.0f} {self.CURRENCY_LABEL}", inline=True)
        embed.add_field(name="Level", value=str(ledger.player_level), inline=True)
        await ctx.send(embed=embed)
        self._push(ctx.author)

    @commands.command(name="yesterday")
    @is_cog_ready()
    async def yesterday_command(self, ctx: commands.Context):
        """Show what each of yesterday's tasks earned and how your level moved."""

        day = TimeHelper.yesterday(TimeHelper.today())
        summaries = self.point_helper.get_daily_summaries(ctx.author.id, day)

        if not summaries:
            embed = discord.Embed(
                title="📋 No Summary",
                description=f"{ctx.author.mention}, nothing has been claimed for {day.isoformat()}. "
                            f"Use `claim` to collect it.",
                color=discord.Color.light_grey())
            await ctx.send(embed=embed)
            return

        embed = discord.Embed(title=f"📅 Summary for {day.isoformat()}", color=discord.Color.blurple())
        # Discord allows 25 fields; two are used for the totals below.
        for summary in summaries[:MAX_SUMMARY_FIELDS]:
            name = f"{summary.task_title[:200]} ({summary.total_points:,.1f}/{summary.task_max_possible_points:,.1f})"
            embed.add_field(name=name, value="\n".join(self.point_helper.summary_lines(summary))[:1024],
                            inline=False)

        snapshot = summaries[0]
        embed.add_field(name="Tasks Completed", value=f"{snapshot.completed_count}/{snapshot.total_tasks_count}",
                        inline=True)
        embed.add_field(
            name="XP",
            value=f"+{snapshot.xp_earned_on_date:,.0f}: Lv {snapshot.level_before_xp} "
                  f"({snapshot.xp_before_xp:,.0f}) → Lv {snapshot.level_after_xp} "
                  f"({snapshot.xp_after_xp:,.0f}/{snapshot.xp_to_next_level_after_xp:,.0f})",
            inline=True)
        if len(summaries) > MAX_SUMMARY_FIELDS:
            embed.set_footer(text=f"{len(summaries) - MAX_SUMMARY_FIELDS} more task(s) not shown.")
        await ctx.send(embed=embed)

    @commands.command(name="leaderboard")
    @is_cog_ready()
    async def leaderboard_command(self, ctx: commands.Context, sort_by: str = "value", page: int = 1):
        """Display rankings by garden value or by level."""

        order_by = "playerLevel" if sort_by.lower() in ("level", "lvl") else "gardenValue"
        limit = self.game_state_helper.get_global_state("leaderboard_limit", 200)

        result = await self.sync_helper.fetch_leaderboard(order_by, limit, ctx.author.id)
        if not result:
            await ctx.send(embed=self._failure_embed("Leaderboard Unavailable", result))
            return

        entries, my_rank = result.value
        if not entries:
            await ctx.send("There are no gardens on the leaderboard yet.")
            return

        items_per_page = 10
        total_pages = max(1, (len(entries) + items_per_page - 1) // items_per_page)
        page = max(1, min(page, total_pages))
        start_index = (page - 1) * items_per_page

        lb_lines = []
        medals = ["🥇", "🥈", "🥉"]
        for entry in entries[start_index: start_index + items_per_page]:
            medal = medals[entry.rank - 1] if entry.rank <= 3 else "▫️"
            escaped_name = discord.utils.escape_markdown(entry.display_name)
            stat = f"Level {entry.player_level}" if order_by == "playerLevel" else f"{entry.garden_value:,.0f}"
            lb_lines.append(f"{medal} **#{entry.rank}** {escaped_name}: {stat}")

        label = "Level" if order_by == "playerLevel" else "Garden Value"
        embed = discord.Embed(title=f"📊 YourDay Rankings by {label} (Page {page}/{total_pages})",
                              description="\n".join(lb_lines), color=discord.Color.green())
        your_rank = f"Your rank: #{my_rank}. " if my_rank else ""
        embed.set_footer(text=f"{your_rank}Use {ctx.prefix}leaderboard [value|level] [page] to navigate.")
        await ctx.send(embed=embed)

    @commands.command(name="resetgarden")
    @is_cog_ready()
    @is_not_locked()
    async def resetgarden_command(self, ctx: commands.Context):
        """Delete your garden, tasks and history and start over."""

        self.lock_helper.acquire(ctx.author.id, "reset", "Awaiting confirmation to reset your garden.")

        embed = discord.Embed(
            title="⚠️ Reset Confirmation Required",
            description=f"{ctx.author.mention}, this permanently deletes your plants, points, tasks and "
                        f"leaderboard entry. Proceed? (yes/no)",
            color=discord.Color.orange())
        await ctx.send(embed=embed)

        try:
            msg = await self.bot.wait_for("message", timeout=60.0,
                                          check=lambda m: m.author == ctx.author and m.channel == ctx.channel
                                          and m.content.lower() in ["yes", "y", "no", "n"])

            if msg.content.lower() in ["no", "n"]:
                await ctx.send(embed=discord.Embed(title="🚫 Reset Cancelled",
                                                   description="Your garden is untouched.",
                                                   color=discord.Color.light_grey()))
                return
        except asyncio.TimeoutError:
            await ctx.send(embed=discord.Embed(title="⏰ Reset Timed Out",
                                               description="Confirmation not received. Your garden is untouched.",
                                               color=discord.Color.light_grey()))
            return
        finally:
            self.lock_helper.release(ctx.author.id)

        self.session_helper.end_session(ctx.author.id)
        self.garden_helper.delete_ledger(ctx.author.id)
        self.task_helper.clear_tasks(ctx.author.id)
        self.point_helper.forget_user(ctx.author.id)
        remote_result = await self.sync_helper.delete_remote(ctx.author.id)

        desc = "Your garden has been reset. A fresh ledger will be created on your next command."
        if not remote_result:
            desc += f"\n\n**Advisory:** {remote_result.message}"
        await ctx.send(embed=discord.Embed(title="🧹 Garden Reset", description=desc, color=discord.Color.green()))
        await self.logger.log_to_discord(f"Reset: User {ctx.author.id} reset their garden.", "INFO")

    # --- To-do list ---

    @commands.group(name="todo", invoke_without_command=True)
    @is_cog_ready()
    async def todo_group(self, ctx: commands.Context):
        """Manage your to-do list. Tasks finished today pay out when you claim tomorrow."""

        await self.todo_list_command(ctx)

    @todo_group.command(name="list")
    async def todo_list_command(self, ctx: commands.Context):
        tasks = self.task_helper.get_tasks(ctx.author.id)
        if not tasks:
            await ctx.send(embed=discord.Embed(title="📝 No Tasks",
                                               description=f"Add one with `{ctx.prefix}todo add <title>`.",
                                               color=discord.Color.light_grey()))
            return

        lines = []
        for i, task in enumerate(tasks, start=1):
            lines.append(f"`{i}.` {'✅' if task.is_done else '⬜'} **{task.title}**")
            for j, sub in enumerate(task.subtasks, start=1):
                lines.append(f" `{i}.{j}` {'✅' if sub.is_done else '⬜'} {sub.title}")

        ledger = self.garden_helper.get_ledger_view(ctx.author.id)
        per_task = PointHelper.max_points_per_task(ledger.garden_value)
        embed = discord.Embed(title=f"📝 {ctx.author.display_name}'s Tasks", description="\n".join(lines),
                              color=discord.Color.blue())
        embed.set_footer(text=f"Each task is worth up to {per_task:,.0f} {self.CURRENCY_LABEL} tomorrow.")
        await ctx.send(embed=embed)

    @todo_group.command(name="add")
    async def todo_add_command(self, ctx: commands.Context, *, text: str):
        """Add a task. Separate subtasks with `|`, e.g. `Clean room | desk | floor`."""

        parts = [p.strip() for p in text.split("|") if p.strip()]
        if not parts:
            await ctx.send("A task needs a title.")
            return

        task = self.task_helper.add_task(ctx.author.id, parts[0], subtask_titles=tuple(parts[1:]))
        desc = f"Added **{task.title}**"
        if task.subtasks:
            desc += f" with {len(task.subtasks)} subtask(s)"
        await ctx.send(embed=discord.Embed(title="📝 Task Added", description=desc + ".",
                                           color=discord.Color.green()))

    @todo_group.command(name="sub")
    async def todo_sub_command(self, ctx: commands.Context, task_number: int, *, title: str):
        """Add a subtask to a task."""

        task = self.task_helper.add_subtask(ctx.author.id, task_number - 1, title)
        if task is None:
            await ctx.send(f"There is no task #{task_number}.")
            return
        await ctx.send(embed=discord.Embed(title="📝 Subtask Added",
                                           description=f"**{task.title}** now has {len(task.subtasks)} subtask(s).",
                                           color=discord.Color.green()))

    @todo_group.command(name="done")
    async def todo_done_command(self, ctx: commands.Context, task_number: int):
        """Mark a task as done."""

        task = self.task_helper.set_task_done(ctx.author.id, task_number - 1, True)
        if task is None:
            await ctx.send(f"There is no task #{task_number}.")
            return
        await ctx.send(embed=discord.Embed(title="✅ Task Done", description=f"**{task.title}** completed.",
                                           color=discord.Color.green()))

    @todo_group.command(name="undo")
    async def todo_undo_command(self, ctx: commands.Context, task_number: int, subtask_number: Optional[int] = None):
        """Mark a task, or one of its subtasks, as not done."""

        if subtask_number is None:
            task = self.task_helper.set_task_done(ctx.author.id, task_number - 1, False)
        else:
            task = self.task_helper.set_subtask_done(ctx.author.id, task_number - 1, subtask_number - 1, False)

        if task is None:
            await ctx.send("That task or subtask does not exist.")
            return
        await ctx.send(embed=discord.Embed(title="↩️ Undone", description=f"**{task.title}** updated.",
                                           color=discord.Color.light_grey()))

    @todo_group.command(name="subdone")
    async def todo_subdone_command(self, ctx: commands.Context, task_number: int, subtask_number: int):
        """Mark a subtask as done."""

        task = self.task_helper.set_subtask_done(ctx.author.id, task_number - 1, subtask_number - 1, True)
        if task is None:
            await ctx.send("That task or subtask does not exist.")
            return
        sub = task.subtasks[subtask_number - 1]
        await ctx.send(embed=discord.Embed(title="✅ Subtask Done",
                                           description=f"**{sub.title}** ({task.title}) completed.",
                                           color=discord.Color.green()))

    @todo_group.command(name="remove")
    async def todo_remove_command(self, ctx: commands.Context, task_number: int):
        """Remove a task from your list."""

        task = self.task_helper.remove_task(ctx.author.id, task_number - 1)
        if task is None:
            await ctx.send(f"There is no task #{task_number}.")
            return
        await ctx.send(embed=discord.Embed(title="🗑️ Task Removed", description=f"Removed **{task.title}**.",
                                           color=discord.Color.light_grey()))

    # --- Administration ---

    @commands.group(name="yourdayadmin")
    @is_cog_ready()
    @commands.is_owner()
    async def admin_group(self, ctx: commands.Context):
        """Base command for owner-only YourDay utilities."""
        pass

    @admin_group.command(name="addpoints")
    async def admin_addpoints_command(self, ctx: commands.Context, target_user: discord.Member, amount: int):
        """Grants points to a user."""

        if amount <= 0:
            await ctx.send(embed=discord.Embed(title="❌ Invalid Input", description="Amount must be positive.",
                                               color=discord.Color.red()))
            return

        self.garden_helper.add_points(target_user.id, amount)
        ledger = self.garden_helper.get_ledger_view(target_user.id)

        embed = discord.Embed(title="⚙️ Admin: Points Granted", color=discord.Color.orange())
        embed.add_field(name="Target User", value=target_user.mention, inline=True)
        embed.add_field(name="Amount", value=f"{amount:,}", inline=True)
        embed.add_field(name="New Balance", value=f"{ledger.total_points:,.0f} {self.CURRENCY_LABEL}", inline=False)
        embed.set_footer(text="YourDay - Administration")
        await ctx.send(embed=embed)
        await self.logger.log_to_discord(f"Admin: {ctx.author.id} granted {amount} points to {target_user.id}.")
        self._push(target_user)

    @admin_group.command(name="addxp")
    async def admin_addxp_command(self, ctx: commands.Context, target_user: discord.Member, amount: int):
        """Grants XP to a user, levelling them up as needed."""

        leveled_up, new_level, new_xp = self.garden_helper.add_xp(target_user.id, amount)
        desc = f"{target_user.mention} is level **{new_level}** with {new_xp:,.0f} XP."
        if leveled_up:
            desc += " 🎉 Level up!"
        await ctx.send(embed=discord.Embed(title="⚙️ Admin: XP Granted", description=desc,
                                           color=discord.Color.orange()))
        self._push(target_user)

    @admin_group.command(name="addfertilizer")
    async def admin_addfertilizer_command(self, ctx: commands.Context, target_user: discord.Member,
                                          amount: int = 1):
        """Grants fertilizer to a user."""

        self.garden_helper.add_fertilizer(target_user.id, amount)
        ledger = self.garden_helper.get_ledger_view(target_user.id)
        await ctx.send(embed=discord.Embed(title="⚙️ Admin: Fertilizer Granted",
                                           description=f"{target_user.mention} now has "
                                                       f"{ledger.fertilizer_count} fertilizer.",
                                           color=discord.Color.orange()))
        self._push(target_user)

    @admin_group.command(name="additem")
    async def admin_additem_command(self, ctx: commands.Context, target_user: discord.Member, quantity: int, *,
                                    plant_name: str):
        """Adds plants straight to a user's inventory."""

        blueprint = self.plant_helper.find_blueprint(plant_name)
        if blueprint is None:
            await ctx.send(embed=discord.Embed(title="❌ Unknown Plant",
                                               description=f"No blueprint matches `{plant_name}`.",
                                               color=discord.Color.red()))
            return

        self.garden_helper.add_item_to_inventory(target_user.id, blueprint.id, quantity)
        await ctx.send(embed=discord.Embed(title="⚙️ Admin: Plants Granted",
                                           description=f"Gave {target_user.mention} {quantity}x **{blueprint.name}**.",
                                           color=discord.Color.orange()))
        self._push(target_user)

    @admin_group.command(name="logchannel")
    async def admin_logchannel_command(self, ctx: commands.Context, channel: Optional[discord.TextChannel] = None):
        """Sets the channel that receives system logs. Omit the channel to log to the console only."""

        channel_id = channel.id if channel else None
        self.game_state_helper.set_global_state("log_channel_id", channel_id)
        self.logger.set_log_channel(channel_id)
        await ctx.send(embed=discord.Embed(title="⚙️ Admin: Log Channel Updated",
                                           description=f"Logs now go to {channel.mention if channel else 'the console'}.",
                                           color=discord.Color.orange()))

    @admin_group.command(name="catalogcheck")
    async def admin_catalogcheck_command(self, ctx: commands.Context):
        """Reports empty theme/rarity cells in the plant catalog."""

        gaps = await self._log_catalog_gaps()
        if not gaps:
            desc = f"All {len(PlantTheme) * len(Rarity)} theme/rarity cells have at least one plant."
            color = discord.Color.green()
        else:
            desc = "Pulls landing in these cells fall back to a common, then any plant of the theme:\n" + \
                   "\n".join(f"• {gap}" for gap in gaps)
            color = discord.Color.orange()
        await ctx.send(embed=discord.Embed(title="📖 Catalog Check", description=desc, color=color))

    @admin_group.command(name="sync")
    async def admin_sync_command(self, ctx: commands.Context, target_user: discord.Member, direction: str = "push"):
        """Pushes a user's garden to the remote store, or pulls the remote copy over the local one."""

        if direction.lower() == "pull":
            result = await self.sync_helper.pull_ledger(target_user.id)
        else:
            result = await self.sync_helper.push_ledger(target_user.id, target_user.display_name)

        if not result:
            await ctx.send(embed=self._failure_embed("Sync Failed", result))
            return
        await ctx.send(embed=discord.Embed(title="⚙️ Admin: Sync Complete", description=result.message,
                                           color=discord.Color.green()))
