"""
Telegram Rent Notifier
======================
Chat front-end over the reclaim engine. Detect-only: it scans and alerts
but never closes accounts, regardless of DRY_RUN.

Commands:
    /start            - help text
    /status           - current configuration
    /scan             - one scan, reply with summary
    /watch <seconds>  - scan every N seconds, alert when reclaimable rent exists
    /stop             - stop watch mode for this chat
"""

import math
from typing import List, Optional

from telegram import Update
from telegram.ext import Application, ApplicationBuilder, CommandHandler, ContextTypes

from config.settings import Settings
from rent_reclaimer.modules.reclaimer.coordinator import ReclaimCoordinator
from rent_reclaimer.modules.reclaimer.errors import ConfigurationError
from rent_reclaimer.modules.reclaimer.reporting import ReportTemplates
from rent_reclaimer.shared.notification.watch_registry import WatchRegistry
from rent_reclaimer.shared.system.logging import Logger

MIN_WATCH_INTERVAL_SEC = 15
FALLBACK_WATCH_INTERVAL_SEC = 60

HELP_TEXT = "\n".join([
    "Rent Reclaim Notifier is running.",
    "",
    "Commands:",
    "/scan - scan for reclaimable empty token accounts",
    "/watch <seconds> - scan every N seconds and alert when reclaimable rent exists",
    "/stop - stop watch mode for this chat",
    "/status - show current config",
    "",
    "Note: This bot does NOT close accounts. It only reports.",
])


def parse_watch_interval(args: Optional[List[str]], default_sec: int) -> int:
    """`/watch [seconds]` argument -> interval; below 15s or invalid gives 60s."""
    raw = args[0] if args else str(default_sec)
    try:
        value = float(raw)
    except ValueError:
        return FALLBACK_WATCH_INTERVAL_SEC
    if not math.isfinite(value) or value < MIN_WATCH_INTERVAL_SEC:
        return FALLBACK_WATCH_INTERVAL_SEC
    return int(value)


class TelegramNotifier:
    """
    Telegram command handlers bound to one owner and one coordinator.

    Each chat gets at most one watch task (see WatchRegistry).
    """

    def __init__(self, settings: Settings, coordinator: ReclaimCoordinator, owner: str):
        self.settings = settings
        self.coordinator = coordinator
        self.owner = owner
        self.watchers = WatchRegistry()
        self.application: Optional[Application] = None

    # ═══════════════════════════════════════════════════════════════════
    # COMMANDS
    # ═══════════════════════════════════════════════════════════════════

    async def cmd_start(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        await update.message.reply_text(HELP_TEXT)

    async def cmd_status(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        lines = [f"{key}: {value}" for key, value in self.settings.describe().items()]
        await update.message.reply_text("\n".join(lines))

    async def cmd_scan(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        try:
            report = await self.coordinator.scan(self.owner)
        except Exception as e:
            Logger.warning("[TG] Scan failed", err=str(e))
            await update.message.reply_text(f"Scan failed: {e}")
            return
        await update.message.reply_text(ReportTemplates.summary(self.owner, report))

    async def cmd_stop(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        stopped = await self.watchers.stop(update.effective_chat.id)
        if stopped:
            await update.message.reply_text("Watch mode stopped for this chat.")
        else:
            await update.message.reply_text("Watch mode is not running in this chat.")

    async def cmd_watch(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        chat_id = update.effective_chat.id
        interval = parse_watch_interval(context.args, self.settings.TELEGRAM_DEFAULT_INTERVAL_SEC)
        min_alert = self.settings.TELEGRAM_MIN_ALERT_LAMPORTS

        await self.watchers.stop(chat_id)
        await update.message.reply_text(
            f"Watch mode enabled. Interval: {interval}s. Alert threshold: {min_alert} lamports."
        )

        async def tick():
            await self.watch_tick(context.bot, chat_id)

        await self.watchers.start(chat_id, interval, tick)

    async def watch_tick(self, bot, chat_id: int) -> None:
        """One watch iteration: scan, alert only when rent clears the threshold."""
        try:
            report = await self.coordinator.scan(self.owner)
        except Exception as e:
            await bot.send_message(chat_id=chat_id, text=f"Watch scan failed: {e}")
            return

        if report.candidates > 0 and report.reclaimable_lamports >= self.settings.TELEGRAM_MIN_ALERT_LAMPORTS:
            text = "\n\n".join([
                "Reclaimable rent detected:",
                ReportTemplates.summary(self.owner, report),
            ])
            await bot.send_message(chat_id=chat_id, text=text)

    # ═══════════════════════════════════════════════════════════════════
    # LIFECYCLE
    # ═══════════════════════════════════════════════════════════════════

    def build_application(self) -> Application:
        if not self.settings.TELEGRAM_BOT_TOKEN:
            raise ConfigurationError("Missing TELEGRAM_BOT_TOKEN in .env")

        app = ApplicationBuilder().token(self.settings.TELEGRAM_BOT_TOKEN).post_shutdown(self._on_shutdown).build()
        app.add_handler(CommandHandler("start", self.cmd_start))
        app.add_handler(CommandHandler("status", self.cmd_status))
        app.add_handler(CommandHandler("scan", self.cmd_scan))
        app.add_handler(CommandHandler("watch", self.cmd_watch))
        app.add_handler(CommandHandler("stop", self.cmd_stop))
        app.add_error_handler(self._on_error)
        self.application = app
        return app

    def run(self) -> None:
        """Blocking: poll Telegram until interrupted."""
        app = self.build_application()
        Logger.info(
            "[TG] Telegram notifier bot starting",
            rpc=self.settings.SOLANA_RPC_URL,
            owner_keypair_path=self.settings.OWNER_KEYPAIR_PATH,
        )
        app.run_polling(drop_pending_updates=True)

    async def _on_shutdown(self, app: Application) -> None:
        await self.watchers.stop_all()

    async def _on_error(self, update: object, context: ContextTypes.DEFAULT_TYPE) -> None:
        Logger.error("[TG] Telegram bot error", err=str(context.error))
