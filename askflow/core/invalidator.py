"""Saved-state invalidation rules.

Clean means the prompt/response shown in the flow is the pair that was last
persisted. Any prompt edit away from the saved prompt, or any new AI
response, makes the pair Dirty. Only a committed save makes it Clean again.
"""

import logging

from askflow.models.flow_state import FlowState, SavedStatus

logger = logging.getLogger(__name__)


class SavedStateInvalidator:
    """Clean/Dirty transitions, evaluated by the store on each mutation."""

    def on_prompt_edit(self, state: FlowState, new_prompt: str) -> SavedStatus:
        """Status after the prompt becomes *new_prompt*.

        Only ever moves towards Dirty. Typing back the saved prompt does not
        make a Dirty pair Clean: that takes another save.
        """
        if new_prompt != state.last_saved_prompt_text:
            if state.saved == SavedStatus.clean:
                logger.debug("prompt edited away from saved text, marking dirty")
            return SavedStatus.dirty
        return state.saved

    def on_ai_response(self, state: FlowState) -> SavedStatus:
        # a new response means the shown pair is no longer the saved one
        return SavedStatus.dirty

    def on_save_committed(self, state: FlowState, saved_prompt: str) -> SavedStatus:
        """Status after a save of *saved_prompt* succeeded.

        If the prompt was edited while the save was in flight, the shown pair
        is not the persisted one and stays Dirty.
        """
        if state.prompt_text == saved_prompt:
            return SavedStatus.clean
        logger.debug("prompt changed while save was in flight, staying dirty")
        return SavedStatus.dirty

    def can_save(self, state: FlowState) -> bool:
        """Gate for the save action: both texts present and the pair is Dirty."""
        return (
            bool(state.prompt_text.strip())
            and bool(state.response_text.strip())
            and state.saved == SavedStatus.dirty
        )
