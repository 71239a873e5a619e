"""Local application preferences shown on the settings view."""

import logging

logger = logging.getLogger(__name__)


class SettingsPanel:
    """Toggle state for the settings view. Never touches the active context."""

    def __init__(self, privacy_mode: bool = True, voice_feedback: bool = False):
        # Privacy mode: auto-delete history after 30 days (enforced server-side)
        self.privacy_mode = privacy_mode
        self.voice_feedback = voice_feedback

    def toggle_privacy_mode(self) -> bool:
        self.privacy_mode = not self.privacy_mode
        logger.debug("Privacy mode %s", "on" if self.privacy_mode else "off")
        return self.privacy_mode

    def toggle_voice_feedback(self) -> bool:
        self.voice_feedback = not self.voice_feedback
        logger.debug("Voice feedback %s", "on" if self.voice_feedback else "off")
        return self.voice_feedback
