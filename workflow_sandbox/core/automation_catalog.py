"""Automation Catalog listing the actions automated steps can trigger."""

import threading
from typing import Dict, Iterable, List, Optional

from ..models.core import AutomationAction
from .exceptions import AutomationCatalogError, AutomationNotFoundError
from .logging import get_logger

logger = get_logger(__name__)


DEFAULT_AUTOMATIONS: List[AutomationAction] = [
    AutomationAction(id="send_email", label="Send Email", params=["to", "subject", "body"]),
    AutomationAction(id="generate_contract", label="Generate Contract", params=["template_id", "candidate_name"]),
    AutomationAction(id="notify_slack", label="Notify Slack Channel", params=["channel", "message"]),
    AutomationAction(id="create_user_account", label="Create IT Account", params=["username", "department"]),
]


class AutomationCatalog:
    """Registry of automated actions offered to the workflow editor."""

    def __init__(self, actions: Optional[Iterable[AutomationAction]] = None):
        """Initialize the catalog.

        Args:
            actions: Actions to register. Defaults to DEFAULT_AUTOMATIONS.
        """
        self._actions: Dict[str, AutomationAction] = {}
        self._lock = threading.RLock()
        for action in (DEFAULT_AUTOMATIONS if actions is None else actions):
            self.register_action(action)

    def register_action(self, action: AutomationAction) -> None:
        """Register an automated action.

        Args:
            action: The action to add

        Raises:
            AutomationCatalogError: If an action with the same ID is already registered
        """
        with self._lock:
            if action.id in self._actions:
                raise AutomationCatalogError(
                    f"Automation '{action.id}' is already registered",
                    action_id=action.id,
                    operation="register"
                )
            self._actions[action.id] = action
        logger.debug(f"Registered automation '{action.id}' with params {action.params}")

    def get_action(self, action_id: str) -> AutomationAction:
        """Retrieve a registered action by ID.

        Raises:
            AutomationNotFoundError: If no action has the given ID
        """
        with self._lock:
            action = self._actions.get(action_id)
        if action is None:
            raise AutomationNotFoundError(action_id)
        return action

    def has_action(self, action_id: str) -> bool:
        with self._lock:
            return action_id in self._actions

    def list_actions(self) -> List[AutomationAction]:
        """List registered actions in registration order."""
        with self._lock:
            return list(self._actions.values())
