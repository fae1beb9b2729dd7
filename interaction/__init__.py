"""Interaction package: speech output and announcement scheduling."""

from interaction.announcer import Announcement, AnnouncementScheduler, AnnouncementState
from interaction.voice import NullVoice, Pyttsx3Voice, VoiceOutput, resolve_voice

__all__ = [
    "Announcement",
    "AnnouncementScheduler",
    "AnnouncementState",
    "NullVoice",
    "Pyttsx3Voice",
    "VoiceOutput",
    "resolve_voice",
]
