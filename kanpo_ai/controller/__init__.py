"""
Kanpo AI — フォームコントローラー

例:
    from kanpo_ai.controller import FormController, AutoSaver

    controller = FormController.from_config(config)
    controller.start()
    with AutoSaver(controller):
        controller.update_form(chief_complaint="腰痛", consent=True)
        controller.submit()
"""

from .state import AppState, ControllerPhase, RequestKind, FollowupRound
from .controller import FormController, FORM_FIELDS
from .autosave import AutoSaver

__all__ = [
    "AppState",
    "ControllerPhase",
    "RequestKind",
    "FollowupRound",
    "FormController",
    "FORM_FIELDS",
    "AutoSaver",
]
