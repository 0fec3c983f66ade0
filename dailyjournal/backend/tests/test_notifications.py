import os
import smtplib
import sys
import unittest
from datetime import datetime

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "..", ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from dailyjournal.backend.app.notifications import (
    ALERT_SUBJECT,
    CrisisAlert,
    CrisisNotifier,
    EmailSettings,
    build_alert_message,
)


def make_alert() -> CrisisAlert:
    return CrisisAlert(
        user_email="writer@example.com",
        trusted_email="friend@example.com",
        entry_text="I feel hopeless <today>",
        timestamp=datetime(2025, 3, 10, 14, 30),
    )


class CrisisNotifierTests(unittest.TestCase):
    def setUp(self):
        self.settings = EmailSettings(user="alerts@example.com", password="secret", sender="alerts@example.com")
        self.sent = []

    def record(self, settings, message):
        self.sent.append(message)

    def test_sends_to_trusted_contact(self):
        notifier = CrisisNotifier(settings=self.settings, sender=self.record)
        self.assertTrue(notifier.send_crisis_alert(make_alert()))
        self.assertEqual(len(self.sent), 1)
        message = self.sent[0]
        self.assertEqual(message["To"], "friend@example.com")
        self.assertEqual(message["From"], "alerts@example.com")
        self.assertEqual(message["Subject"], ALERT_SUBJECT)

    def test_unconfigured_does_not_send(self):
        notifier = CrisisNotifier(settings=EmailSettings(), sender=self.record)
        with self.assertLogs("dailyjournal.backend.app.notifications", level="ERROR"):
            self.assertFalse(notifier.send_crisis_alert(make_alert()))
        self.assertEqual(self.sent, [])

    def test_smtp_failure_reported_not_raised(self):
        def broken(settings, message):
            raise smtplib.SMTPAuthenticationError(535, b"bad credentials")

        notifier = CrisisNotifier(settings=self.settings, sender=broken)
        with self.assertLogs("dailyjournal.backend.app.notifications", level="ERROR"):
            self.assertFalse(notifier.send_crisis_alert(make_alert()))

    def test_html_body_escapes_entry(self):
        message = build_alert_message(make_alert(), "alerts@example.com")
        html_part = message.get_body(preferencelist=("html",)).get_content()
        text_part = message.get_body(preferencelist=("plain",)).get_content()
        self.assertIn("&lt;today&gt;", html_part)
        self.assertIn("I feel hopeless <today>", text_part)
        self.assertIn("2025-03-10 14:30 UTC", text_part)

    def test_settings_from_env(self):
        keys = ["EMAIL_HOST", "EMAIL_PORT", "EMAIL_SECURE", "EMAIL_USER", "EMAIL_PASS", "EMAIL_FROM", "GMAIL_USER", "GMAIL_APP_PASSWORD"]
        backup = {key: os.environ.pop(key, None) for key in keys}
        try:
            os.environ["GMAIL_USER"] = "me@example.com"
            os.environ["GMAIL_APP_PASSWORD"] = "app-pass"
            os.environ["EMAIL_PORT"] = "465"
            os.environ["EMAIL_SECURE"] = "true"
            settings = EmailSettings.from_env()
            self.assertEqual(settings.user, "me@example.com")
            self.assertEqual(settings.sender, "me@example.com")
            self.assertEqual(settings.port, 465)
            self.assertTrue(settings.secure)
            self.assertTrue(settings.configured)
        finally:
            for key in keys:
                os.environ.pop(key, None)
                if backup[key] is not None:
                    os.environ[key] = backup[key]


if __name__ == "__main__":
    unittest.main()
