"""
FitTrack Assistant — Telegram Bot.

Telegram is the user interface: food, weight and health logging, daily
reports, premium vouchers, and the admin console all flow through here.

Every handler resolves the caller's Identity explicitly and passes the
user_id into the services. Suspended users are silently ignored.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import date, timedelta
from functools import wraps
from typing import TYPE_CHECKING, Any, Callable, Coroutine

from telegram import Update
from telegram.ext import Application, ApplicationBuilder, CommandHandler, ContextTypes

from src.config import settings
from src.core.reporter import WEIGHT_CHANGE_UNAVAILABLE
from src.core.results import ResultKind
from src.core.tracking import AutofillKind
from src.data.models import MEAL_TYPES, Identity
from src.ports.store_port import StoreError

if TYPE_CHECKING:
    from src.core.admin import AdminService
    from src.core.entitlement import EntitlementService
    from src.core.reporter import ReportService
    from src.core.tracking import TrackingService
    from src.data.db import ProfileDB
    from src.data.models import DailyReport
    from src.ports.estimator_port import NutritionEstimator

logger = logging.getLogger(__name__)

_Handler = Callable[..., Coroutine[Any, Any, None]]


# ---------------------------------------------------------------------------
# Service wiring
# ---------------------------------------------------------------------------


@dataclass
class Services:
    profiles: ProfileDB
    entitlement: EntitlementService
    reports: ReportService
    tracking: TrackingService
    admin: AdminService


def build_services(
    db_path: str | None = None,
    estimator: NutritionEstimator | None = None,
) -> Services:
    """Create the SQLite stores and the services on top of them."""
    from src.core.admin import AdminService
    from src.core.entitlement import EntitlementService
    from src.core.reporter import ReportService
    from src.core.tracking import TrackingService
    from src.data.db import FoodLogDB, HealthLogDB, ProfileDB, VoucherDB, WeightLogDB

    profiles = ProfileDB(db_path)
    vouchers = VoucherDB(db_path)
    food = FoodLogDB(db_path)
    health = HealthLogDB(db_path)
    weight = WeightLogDB(db_path)

    return Services(
        profiles=profiles,
        entitlement=EntitlementService(profiles, vouchers),
        reports=ReportService(food, health, weight),
        tracking=TrackingService(profiles, food, health, weight, estimator),
        admin=AdminService(profiles, vouchers, food),
    )


def resolve_identity(telegram_user_id: int) -> Identity:
    role = "admin" if telegram_user_id in settings.ADMIN_USER_IDS else "user"
    return Identity(user_id=telegram_user_id, role=role)


# ---------------------------------------------------------------------------
# Security: identity + suspension gate
# ---------------------------------------------------------------------------


def authorized_only(func: _Handler) -> _Handler:
    """Resolve the caller's Identity and silently ignore suspended users.

    The wrapped handler receives the Identity as a third argument.
    """

    @wraps(func)
    async def wrapper(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        user = update.effective_user
        if user is None:
            return
        services: Services = context.bot_data["services"]
        try:
            profile = services.profiles.get_profile(user.id)
        except StoreError as exc:
            logger.error("Profile lookup for user_id=%s failed: %s", user.id, exc)
            await update.message.reply_text("Service temporarily unavailable. Please try again later.")
            return
        if profile is not None and profile.suspended:
            logger.warning("Ignoring suspended user_id=%s", user.id)
            return  # Silent ignore
        return await func(update, context, resolve_identity(user.id))

    return wrapper


def admin_only(func: _Handler) -> _Handler:
    """Silently ignore non-admins. Stack under @authorized_only."""

    @wraps(func)
    async def wrapper(
        update: Update, context: ContextTypes.DEFAULT_TYPE, identity: Identity,
    ) -> None:
        if not identity.is_admin:
            logger.warning("Non-admin user_id=%s tried %s", identity.user_id, func.__name__)
            return
        return await func(update, context, identity)

    return wrapper


# ---------------------------------------------------------------------------
# Formatting & argument parsing helpers
# ---------------------------------------------------------------------------


def _fmt(value: float | None) -> str:
    if value is None:
        return "--"
    return str(int(value)) if float(value).is_integer() else f"{value:.1f}"


def _format_report(rows: list[DailyReport]) -> str:
    lines = [f"{'Date':<10} {'In':>6} {'Out':>6} {'Net':>6} {'Wt Δ':>7} {'Sleep':>5} {'SpO2':>4}"]
    for r in rows:
        change = "--" if r.weight_change_pct == WEIGHT_CHANGE_UNAVAILABLE else r.weight_change_pct
        lines.append(
            f"{r.date:<10} {_fmt(r.calories_taken):>6} {_fmt(r.calories_burned):>6} "
            f"{_fmt(r.deficit):>6} {change:>7} {_fmt(r.sleep_hours):>5} {_fmt(r.spo2_avg):>4}"
        )
    return "```\n" + "\n".join(lines) + "\n```"


def _parse_food_args(args: list[str]) -> tuple[str, str, list[float] | None] | None:
    """Split /food arguments into (meal_type, food_name, [kcal, protein, carbs, fat] | None).

    Accepted forms:
        /food banana
        /food breakfast oatmeal with milk
        /food lunch chicken salad 450 35 20 22
    """
    if not args:
        return None
    meal = "snack"
    rest = list(args)
    if rest[0].lower() in MEAL_TYPES:
        meal = rest.pop(0).lower()

    numbers: list[float] | None = None
    if len(rest) >= 5:
        try:
            numbers = [float(x) for x in rest[-4:]]
            rest = rest[:-4]
        except ValueError:
            numbers = None

    name = " ".join(rest).strip()
    if not name:
        return None
    return meal, name, numbers


_HEALTH_ALIASES = {
    "burned": "calories_burned",
    "calories_burned": "calories_burned",
    "sleep": "sleep_hours",
    "sleep_hours": "sleep_hours",
    "spo2": "spo2_avg",
    "spo2_avg": "spo2_avg",
    "bpm": "bpm_avg",
    "bpm_avg": "bpm_avg",
    "steps": "steps",
    "water": "water_ml",
    "water_ml": "water_ml",
}

_INT_METRICS = {"steps", "water_ml"}


def _parse_health_args(args: list[str]) -> dict[str, float] | None:
    """Parse `key=value` pairs like `steps=8000 sleep=7.5`. None on any bad pair."""
    metrics: dict[str, float] = {}
    for arg in args:
        key, sep, raw = arg.partition("=")
        field_name = _HEALTH_ALIASES.get(key.strip().lower())
        if not sep or field_name is None:
            return None
        try:
            value = float(raw)
        except ValueError:
            return None
        if not math.isfinite(value):
            return None
        metrics[field_name] = int(value) if field_name in _INT_METRICS else value
    return metrics or None


def _parse_int_arg(args: list[str]) -> int | None:
    if not args:
        return None
    try:
        return int(args[0])
    except ValueError:
        return None


# ---------------------------------------------------------------------------
# User commands
# ---------------------------------------------------------------------------


@authorized_only
async def cmd_start(update: Update, context: ContextTypes.DEFAULT_TYPE, identity: Identity) -> None:
    """Handle /start — sign up (create profile) and welcome."""
    services: Services = context.bot_data["services"]
    try:
        services.profiles.ensure_profile(identity.user_id, update.effective_user.first_name)
    except StoreError as exc:
        logger.error("/start profile creation failed: %s", exc)
        await update.message.reply_text("Couldn't create your profile. Please try again later.")
        return

    await update.message.reply_text(
        "Welcome to *FitTrack*!\n\n"
        "• /food to log what you eat (AI fills in the calories)\n"
        "• /weight and /health to track your body\n"
        "• /today for your dashboard, /report for daily trends\n"
        "• /redeem a voucher code to unlock Premium\n\n"
        "Type /help for the full command list.",
        parse_mode="Markdown",
    )


@authorized_only
async def cmd_help(update: Update, context: ContextTypes.DEFAULT_TYPE, identity: Identity) -> None:
    """Handle /help — list available commands."""
    text = (
        "*Available commands:*\n"
        "/today — Today's dashboard\n"
        "/food [meal] <name> [kcal protein carbs fat] — Log food\n"
        "/delfood <id> — Delete a food entry\n"
        "/weight <kg> — Log today's weight (no number: show history)\n"
        "/health steps=8000 sleep=7.5 burned=400 spo2=97 bpm=60 water=2000\n"
        "/goal <goal kg> [height cm] — Set your goals\n"
        "/report [days] — Daily report (default 7 days)\n"
        "/premium — Premium status\n"
        "/redeem <code> — Redeem a voucher"
    )
    if identity.is_admin:
        text += (
            "\n\n*Admin:*\n"
            "/users, /stats, /vouchers\n"
            "/grant <user> [days], /revoke <user>\n"
            "/suspend <user>, /unsuspend <user>\n"
            "/addvoucher <code> <days> <uses> [expiry days]\n"
            "/delvoucher <code>, /togglevoucher <code> on|off"
        )
    await update.message.reply_text(text, parse_mode="Markdown")


@authorized_only
async def cmd_today(update: Update, context: ContextTypes.DEFAULT_TYPE, identity: Identity) -> None:
    """Handle /today — dashboard for today."""
    services: Services = context.bot_data["services"]
    try:
        s = services.tracking.daily_summary(identity.user_id)
    except StoreError as exc:
        logger.error("/today error: %s", exc)
        await update.message.reply_text("Couldn't load today's data. Please try again.")
        return

    lines = [
        f"Today ({s.date})",
        f"Calories: {_fmt(s.calories)} kcal · Protein: {_fmt(s.protein)} g",
        f"Steps: {s.steps} · Water: {s.water_ml} ml",
        f"Sleep: {_fmt(s.sleep_hours)} h · BPM: {_fmt(s.bpm_avg)} · SpO2: {_fmt(s.spo2_avg)}%",
        f"BMI: {_fmt(s.bmi)} · Goal progress: {s.goal_progress}%",
        "Premium: active" if s.premium_active else "Premium: not active",
    ]
    if s.entries:
        lines.append("")
        for e in s.entries:
            lines.append(f"#{e.id} {e.meal_type}: {e.food_name} ({_fmt(e.calories)} kcal)")
    await update.message.reply_text("\n".join(lines))


@authorized_only
async def cmd_food(update: Update, context: ContextTypes.DEFAULT_TYPE, identity: Identity) -> None:
    """Handle /food — log a food entry, asking the AI for macros if none were given."""
    services: Services = context.bot_data["services"]
    parsed = _parse_food_args(context.args or [])
    if parsed is None:
        await update.message.reply_text(
            "Usage: /food [meal] <name> [kcal protein carbs fat]\n"
            "e.g. /food breakfast oatmeal  or  /food lunch salad 450 35 20 22"
        )
        return
    meal, name, numbers = parsed

    if numbers is None:
        autofill = await services.tracking.autofill_nutrition(name)
        if autofill.kind is not AutofillKind.FILLED:
            await update.message.reply_text(
                f"{autofill.message}\nUsage: /food {meal} {name} <kcal> <protein> <carbs> <fat>"
            )
            return
        est = autofill.estimate
        numbers = [est.calories, est.protein, est.carbs, est.fat]

    calories, protein, carbs, fat = numbers
    result = services.tracking.log_food(
        identity.user_id, name, meal, calories=calories, protein=protein, carbs=carbs, fat=fat,
    )
    if not result.ok:
        await update.message.reply_text(result.message)
        return
    await update.message.reply_text(
        f"✅ {name} ({meal}): {_fmt(calories)} kcal · P {_fmt(protein)} g · "
        f"C {_fmt(carbs)} g · F {_fmt(fat)} g"
    )


@authorized_only
async def cmd_delfood(update: Update, context: ContextTypes.DEFAULT_TYPE, identity: Identity) -> None:
    """Handle /delfood <id>."""
    services: Services = context.bot_data["services"]
    entry_id = _parse_int_arg(context.args or [])
    if entry_id is None:
        await update.message.reply_text("Usage: /delfood <entry id>\nUse /today to see IDs.")
        return
    result = services.tracking.delete_food(identity.user_id, entry_id)
    await update.message.reply_text(result.message)


async def _reply_weight_history(update: Update, services: Services, identity: Identity) -> None:
    try:
        history = services.tracking.weight_history(identity.user_id)
    except StoreError as exc:
        logger.error("/weight history error: %s", exc)
        await update.message.reply_text("Couldn't load your weight history. Please try again.")
        return
    if not history:
        await update.message.reply_text("No weights logged yet. Usage: /weight <kg>, e.g. /weight 78.4")
        return
    lines = ["Weight history:"]
    lines.extend(f"{e.date}: {_fmt(e.weight)} kg" for e in history)
    await update.message.reply_text("\n".join(lines))


@authorized_only
async def cmd_weight(update: Update, context: ContextTypes.DEFAULT_TYPE, identity: Identity) -> None:
    """Handle /weight <kg>, or /weight alone to show the weight history."""
    services: Services = context.bot_data["services"]
    if not context.args:
        await _reply_weight_history(update, services, identity)
        return
    try:
        weight = float(context.args[0])
    except (TypeError, IndexError, ValueError):
        await update.message.reply_text("Usage: /weight <kg>, e.g. /weight 78.4")
        return
    result = services.tracking.log_weight(identity.user_id, weight)
    await update.message.reply_text(result.message)


@authorized_only
async def cmd_health(update: Update, context: ContextTypes.DEFAULT_TYPE, identity: Identity) -> None:
    """Handle /health key=value ..."""
    services: Services = context.bot_data["services"]
    metrics = _parse_health_args(context.args or [])
    if metrics is None:
        await update.message.reply_text(
            "Usage: /health steps=8000 sleep=7.5 burned=400 spo2=97 bpm=60 water=2000"
        )
        return
    result = services.tracking.log_health(identity.user_id, **metrics)
    await update.message.reply_text(result.message)


@authorized_only
async def cmd_goal(update: Update, context: ContextTypes.DEFAULT_TYPE, identity: Identity) -> None:
    """Handle /goal <goal kg> [height cm]."""
    services: Services = context.bot_data["services"]
    args = context.args or []
    try:
        goal = float(args[0])
        height = float(args[1]) if len(args) > 1 else None
    except (IndexError, ValueError):
        await update.message.reply_text("Usage: /goal <goal kg> [height cm]")
        return
    result = services.tracking.set_goals(identity.user_id, goal_weight=goal, height_cm=height)
    await update.message.reply_text(result.message)


@authorized_only
async def cmd_report(update: Update, context: ContextTypes.DEFAULT_TYPE, identity: Identity) -> None:
    """Handle /report [days] — merged daily report for the last N days."""
    services: Services = context.bot_data["services"]
    days = 7
    if context.args:
        try:
            days = int(context.args[0])
        except ValueError:
            days = 0
    if days <= 0:
        await update.message.reply_text("Usage: /report [days], e.g. /report 14")
        return

    end = date.today()
    start = end - timedelta(days=days - 1)
    result = services.reports.report_for(identity.user_id, start.isoformat(), end.isoformat())
    if not result.ok:
        await update.message.reply_text(result.message)
        return
    if not result.rows:
        await update.message.reply_text("No report data yet.")
        return
    await update.message.reply_text(_format_report(result.rows), parse_mode="Markdown")


@authorized_only
async def cmd_premium(update: Update, context: ContextTypes.DEFAULT_TYPE, identity: Identity) -> None:
    """Handle /premium — show entitlement state."""
    services: Services = context.bot_data["services"]
    result = services.entitlement.premium_status(identity.user_id)
    if result.ok:
        await update.message.reply_text(
            f"👑 You're Premium! Expires on {result.new_expiry.date().isoformat()}."
        )
    elif result.kind is ResultKind.INACTIVE:
        await update.message.reply_text(
            "Go Premium: advanced reports, AI food analysis, priority support.\n"
            "Redeem a voucher with /redeem <code>."
        )
    else:
        await update.message.reply_text(result.message)


@authorized_only
async def cmd_redeem(update: Update, context: ContextTypes.DEFAULT_TYPE, identity: Identity) -> None:
    """Handle /redeem <code>."""
    services: Services = context.bot_data["services"]
    if not context.args:
        await update.message.reply_text("Usage: /redeem <voucher code>")
        return
    result = services.entitlement.redeem_voucher(identity.user_id, context.args[0])
    if result.ok:
        await update.message.reply_text(
            f"Premium activated! 🎉 Valid until {result.new_expiry.date().isoformat()}."
        )
        return
    await update.message.reply_text(result.message)


# ---------------------------------------------------------------------------
# Admin commands
# ---------------------------------------------------------------------------


@authorized_only
@admin_only
async def cmd_users(update: Update, context: ContextTypes.DEFAULT_TYPE, identity: Identity) -> None:
    """Handle /users — list all profiles."""
    services: Services = context.bot_data["services"]
    try:
        users = services.admin.list_users()
    except StoreError as exc:
        logger.error("/users error: %s", exc)
        await update.message.reply_text("Couldn't load users.")
        return
    if not users:
        await update.message.reply_text("No users yet.")
        return
    lines = ["Users:"]
    for u in users:
        flags = []
        if u.is_premium:
            flags.append("premium")
        if u.suspended:
            flags.append("suspended")
        joined = u.created_at.date().isoformat() if u.created_at else "?"
        lines.append(f"{u.user_id} — {u.full_name or 'Unknown'} (joined {joined}) {' '.join(flags)}".rstrip())
    await update.message.reply_text("\n".join(lines))


async def _admin_toggle(
    update: Update, context: ContextTypes.DEFAULT_TYPE, usage: str, action: Callable,
) -> None:
    user_id = _parse_int_arg(context.args or [])
    if user_id is None:
        await update.message.reply_text(f"Usage: {usage}")
        return
    result = action(user_id)
    await update.message.reply_text(result.message)


@authorized_only
@admin_only
async def cmd_grant(update: Update, context: ContextTypes.DEFAULT_TYPE, identity: Identity) -> None:
    """Handle /grant <user_id> [days]."""
    services: Services = context.bot_data["services"]
    args = context.args or []
    days = None
    if len(args) > 1:
        try:
            days = int(args[1])
        except ValueError:
            await update.message.reply_text("Usage: /grant <user_id> [days]")
            return
    await _admin_toggle(
        update, context, "/grant <user_id> [days]",
        lambda uid: services.entitlement.set_premium(uid, True, days),
    )


@authorized_only
@admin_only
async def cmd_revoke(update: Update, context: ContextTypes.DEFAULT_TYPE, identity: Identity) -> None:
    services: Services = context.bot_data["services"]
    await _admin_toggle(
        update, context, "/revoke <user_id>",
        lambda uid: services.entitlement.set_premium(uid, False),
    )


@authorized_only
@admin_only
async def cmd_suspend(update: Update, context: ContextTypes.DEFAULT_TYPE, identity: Identity) -> None:
    services: Services = context.bot_data["services"]
    await _admin_toggle(
        update, context, "/suspend <user_id>",
        lambda uid: services.entitlement.set_suspended(uid, True),
    )


@authorized_only
@admin_only
async def cmd_unsuspend(update: Update, context: ContextTypes.DEFAULT_TYPE, identity: Identity) -> None:
    services: Services = context.bot_data["services"]
    await _admin_toggle(
        update, context, "/unsuspend <user_id>",
        lambda uid: services.entitlement.set_suspended(uid, False),
    )


@authorized_only
@admin_only
async def cmd_vouchers(update: Update, context: ContextTypes.DEFAULT_TYPE, identity: Identity) -> None:
    """Handle /vouchers — list vouchers, newest first."""
    services: Services = context.bot_data["services"]
    try:
        vouchers = services.admin.list_vouchers()
    except StoreError as exc:
        logger.error("/vouchers error: %s", exc)
        await update.message.reply_text("Couldn't load vouchers.")
        return
    if not vouchers:
        await update.message.reply_text("No vouchers yet. Create one with /addvoucher.")
        return
    lines = ["Vouchers:"]
    for v in vouchers:
        state = "active" if v.active else "inactive"
        lines.append(
            f"{v.code} — {v.duration_days}d, {v.used_count}/{v.usage_limit} used, "
            f"expires {v.expiry_date.date().isoformat()}, {state}"
        )
    await update.message.reply_text("\n".join(lines))


@authorized_only
@admin_only
async def cmd_addvoucher(update: Update, context: ContextTypes.DEFAULT_TYPE, identity: Identity) -> None:
    """Handle /addvoucher <code> <duration_days> <usage_limit> [expiry_days]."""
    services: Services = context.bot_data["services"]
    args = context.args or []
    try:
        code = args[0]
        duration, limit = int(args[1]), int(args[2])
        expiry = int(args[3]) if len(args) > 3 else None
    except (IndexError, ValueError):
        await update.message.reply_text("Usage: /addvoucher <code> <days> <uses> [expiry days]")
        return
    result = services.admin.create_voucher(code, duration, limit, expiry)
    if result.ok:
        v = result.voucher
        await update.message.reply_text(
            f"Voucher {v.code} created: {v.duration_days} days, {v.usage_limit} uses, "
            f"redeemable until {v.expiry_date.date().isoformat()}."
        )
        return
    await update.message.reply_text(result.message)


@authorized_only
@admin_only
async def cmd_delvoucher(update: Update, context: ContextTypes.DEFAULT_TYPE, identity: Identity) -> None:
    services: Services = context.bot_data["services"]
    if not context.args:
        await update.message.reply_text("Usage: /delvoucher <code>")
        return
    result = services.admin.delete_voucher(context.args[0])
    await update.message.reply_text(result.message)


@authorized_only
@admin_only
async def cmd_togglevoucher(update: Update, context: ContextTypes.DEFAULT_TYPE, identity: Identity) -> None:
    """Handle /togglevoucher <code> on|off — the voucher kill-switch."""
    services: Services = context.bot_data["services"]
    args = context.args or []
    if len(args) != 2 or args[1].lower() not in ("on", "off"):
        await update.message.reply_text("Usage: /togglevoucher <code> on|off")
        return
    result = services.admin.set_voucher_active(args[0], args[1].lower() == "on")
    await update.message.reply_text(result.message)


@authorized_only
@admin_only
async def cmd_stats(update: Update, context: ContextTypes.DEFAULT_TYPE, identity: Identity) -> None:
    """Handle /stats — platform totals, signups per day, top loggers."""
    services: Services = context.bot_data["services"]
    try:
        stats = services.admin.platform_stats()
        analytics = services.admin.analytics()
    except StoreError as exc:
        logger.error("/stats error: %s", exc)
        await update.message.reply_text("Couldn't load stats.")
        return

    lines = [
        f"Total users: {stats.total_users}",
        f"Premium users: {stats.premium_users}",
        f"Active vouchers: {stats.active_vouchers}",
        f"Total food logs: {stats.total_food_logs}",
    ]
    if analytics.signups_by_day:
        lines.append("\nSignups by day:")
        lines.extend(f"{day}: {count}" for day, count in analytics.signups_by_day[-14:])
    if analytics.top_loggers:
        lines.append("\nTop users by food logs:")
        lines.extend(f"{i}. {t.name} — {t.logs}" for i, t in enumerate(analytics.top_loggers, 1))
    await update.message.reply_text("\n".join(lines))


# ---------------------------------------------------------------------------
# App builder
# ---------------------------------------------------------------------------

_COMMANDS: dict[str, _Handler] = {
    "start": cmd_start,
    "help": cmd_help,
    "today": cmd_today,
    "food": cmd_food,
    "delfood": cmd_delfood,
    "weight": cmd_weight,
    "health": cmd_health,
    "goal": cmd_goal,
    "report": cmd_report,
    "premium": cmd_premium,
    "redeem": cmd_redeem,
    "users": cmd_users,
    "grant": cmd_grant,
    "revoke": cmd_revoke,
    "suspend": cmd_suspend,
    "unsuspend": cmd_unsuspend,
    "vouchers": cmd_vouchers,
    "addvoucher": cmd_addvoucher,
    "delvoucher": cmd_delvoucher,
    "togglevoucher": cmd_togglevoucher,
    "stats": cmd_stats,
}


def build_app(services: Services | None = None) -> Application:
    """Build and configure the Telegram Application with all handlers.

    Args:
        services: Service container. Defaults to SQLite stores at
                  DATABASE_PATH and the configured nutrition estimator.
    """
    app = ApplicationBuilder().token(settings.TELEGRAM_BOT_TOKEN).build()

    if services is None:
        from src.adapters.estimator_factory import create_nutrition_estimator
        services = build_services(estimator=create_nutrition_estimator())

    # Store services in bot_data for handler access
    app.bot_data["services"] = services

    for name, handler in _COMMANDS.items():
        app.add_handler(CommandHandler(name, handler))

    logger.info("Telegram bot application built with %d handlers", len(app.handlers[0]))
    return app


def main() -> None:
    """Entry point: build the app and start polling."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    logger.info("Starting FitTrack Assistant bot...")
    app = build_app()
    app.run_polling()


if __name__ == "__main__":
    main()
