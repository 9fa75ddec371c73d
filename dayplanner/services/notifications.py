# services/notifications.py
"""
Outbound notification channels.

Each notifier owns one channel, decides whether a user can be reached
on it, and reports delivery as a bool. Send failures never raise.
"""
import logging
from datetime import date
from html import escape
from typing import Optional

import requests

from dayplanner.core.config import Settings, settings as default_settings
from dayplanner.core.timeutils import format_time_display
from dayplanner.models.user import ReminderChannel, User
from dayplanner.schemas.reminder import ReminderPayload

logger = logging.getLogger(__name__)


# =====================================================================
# MESSAGE FORMATTING
# =====================================================================

def format_reminder_text(payload: ReminderPayload) -> str:
    """Telegram HTML body for a block reminder."""
    lines = [
        "⏰ <b>Routine Reminder</b>",
        "",
        f"🕐 <b>Time:</b> {payload.start_time} – {payload.end_time}",
        f"✅ <b>Task:</b> {escape(payload.activity)}",
    ]
    if payload.topic:
        lines.append(f"📚 <b>Topic:</b> {escape(payload.topic)}")
    lines += ["", "Stay focused! 💪"]
    return "\n".join(lines)


def format_reflection_text(app_url: str) -> str:
    return "\n".join([
        "🌙 <b>Daily Reflection</b>",
        "",
        "Time to wrap up your day! How did it go?",
        "",
        f'<a href="{app_url}/reflection">Open your reflection</a>',
    ])


def format_reminder_html(payload: ReminderPayload) -> str:
    topic_line = (
        f'<p style="margin: 8px 0 0; color: #64748b;">📚 Topic: {escape(payload.topic)}</p>'
        if payload.topic
        else ""
    )
    return (
        "<div style=\"font-family: 'Segoe UI', sans-serif; max-width: 480px; margin: 0 auto;\">"
        "<h1>⏰ Routine Reminder</h1>"
        "<p>It's time for your scheduled activity!</p>"
        '<div style="border-left: 4px solid #10b981; padding: 16px;">'
        f"<p>🕐 {format_time_display(payload.start_time)} – {format_time_display(payload.end_time)}</p>"
        f"<p><strong>✅ {escape(payload.activity)}</strong></p>"
        f"{topic_line}"
        "</div>"
        "<p>Stay focused and make the most of your time! 💪</p>"
        "</div>"
    )


def format_reflection_html(app_url: str, day: date) -> str:
    moods = "".join(
        f'<a href="{app_url}/reflection?mood={mood}&date={day.isoformat()}" '
        f'style="font-size: 32px; padding: 12px; text-decoration: none;">{emoji}</a>'
        for mood, emoji in (("great", "😄"), ("okay", "😐"), ("bad", "😞"))
    )
    return (
        "<div style=\"font-family: 'Segoe UI', sans-serif; max-width: 480px; margin: 0 auto; text-align: center;\">"
        "<h1>📅 Daily Reflection</h1>"
        "<p>🌙 Time to wrap up your day! How did it go?</p>"
        f"<p>{moods}</p>"
        '<p style="font-size: 14px;">Click an emoji to submit your reflection</p>'
        "</div>"
    )


# =====================================================================
# NOTIFIERS
# =====================================================================

class Notifier:
    """Base class for a delivery channel."""

    channel: ReminderChannel

    def recipient_for(self, user: User) -> Optional[str]:
        """Address on this channel, or None when the user has it switched off."""
        raise NotImplementedError

    def send_reminder(self, recipient: str, payload: ReminderPayload) -> bool:
        raise NotImplementedError

    def send_reflection_prompt(self, recipient: str, day: date) -> bool:
        raise NotImplementedError


class EmailNotifier(Notifier):
    """Sends mail through an HTTP email API (Resend-compatible JSON body)."""

    channel = ReminderChannel.email

    def __init__(self, config: Settings = default_settings):
        self.config = config

    def recipient_for(self, user: User) -> Optional[str]:
        return user.email if user.reminder_email else None

    def _send(self, to: str, subject: str, html: str) -> bool:
        if not self.config.EMAIL_API_KEY or not self.config.EMAIL_FROM:
            logger.warning("Email API is not configured; skipping email")
            return False
        try:
            response = requests.post(
                self.config.EMAIL_API_URL,
                json={
                    "from": self.config.EMAIL_FROM,
                    "to": [to],
                    "subject": subject,
                    "html": html,
                },
                headers={"Authorization": f"Bearer {self.config.EMAIL_API_KEY}"},
                timeout=self.config.NOTIFY_TIMEOUT_SECONDS,
            )
        except requests.RequestException as e:
            logger.warning(f"Email to {to} failed: {e}")
            return False
        if response.status_code not in (200, 201, 202):
            logger.warning(f"Email to {to} rejected with status {response.status_code}")
            return False
        return True

    def send_reminder(self, recipient: str, payload: ReminderPayload) -> bool:
        return self._send(
            recipient, f"⏰ Reminder: {payload.activity}", format_reminder_html(payload)
        )

    def send_reflection_prompt(self, recipient: str, day: date) -> bool:
        return self._send(
            recipient,
            "🌙 How was your day? Quick reflection time!",
            format_reflection_html(self.config.APP_URL, day),
        )


class TelegramNotifier(Notifier):
    """Sends HTML messages through the Telegram Bot API."""

    channel = ReminderChannel.telegram

    def __init__(self, config: Settings = default_settings):
        self.config = config

    def recipient_for(self, user: User) -> Optional[str]:
        if user.reminder_telegram and user.telegram_chat_id:
            return user.telegram_chat_id
        return None

    def send_message(self, chat_id: str, text: str) -> bool:
        token = self.config.TELEGRAM_BOT_TOKEN
        if not token:
            logger.warning("Telegram bot token not configured; skipping message")
            return False
        try:
            response = requests.post(
                f"{self.config.TELEGRAM_API_URL}/bot{token}/sendMessage",
                json={"chat_id": chat_id, "text": text, "parse_mode": "HTML"},
                timeout=self.config.NOTIFY_TIMEOUT_SECONDS,
            )
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.warning(f"Telegram message to {chat_id} failed: {e}")
            return False
        if not data.get("ok"):
            logger.warning(f"Telegram API error for {chat_id}: {data.get('description')}")
            return False
        return True

    def send_reminder(self, recipient: str, payload: ReminderPayload) -> bool:
        return self.send_message(recipient, format_reminder_text(payload))

    def send_reflection_prompt(self, recipient: str, day: date) -> bool:
        return self.send_message(recipient, format_reflection_text(self.config.APP_URL))


def default_notifiers(config: Settings = default_settings):
    return [EmailNotifier(config), TelegramNotifier(config)]
