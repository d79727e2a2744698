# Created by Meri Kasprak with the assistance of Gemini.
# Released freely under the GNU General Public License version 3. USE AT YOUR OWN RISK.

import json


class SpoilerIO:
    """Handles console output and diagnostics. Subclass this for GUI integration."""

    def __init__(self, channel="MediaSpoiler"):
        self.channel = channel

    def log(self, message):
        try:
            print(message)
        except UnicodeEncodeError:
            # Fallback for Windows consoles that hate emojis
            print(message.encode('utf-8', errors='ignore').decode('utf-8'))

    def log_event(self, level, message, context=None):
        """Structured diagnostic: one header line plus the JSON context."""
        line = f"[{level.upper()}] {self.channel}: {message}"
        if context:
            line += " " + json.dumps(context, sort_keys=True, default=str)
        self.log(line)


class RecordingIO(SpoilerIO):
    """Keeps every message in memory instead of printing (batch reports, tests)."""

    def __init__(self, channel="MediaSpoiler"):
        super().__init__(channel)
        self.messages = []
        self.events = []

    def log(self, message):
        self.messages.append(message)

    def log_event(self, level, message, context=None):
        self.events.append({"level": level, "message": message, "context": dict(context or {})})
        super().log_event(level, message, context)
