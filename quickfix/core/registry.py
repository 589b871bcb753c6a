from typing import Dict, List, Iterable

from ..models import RemedialAction

class ActionRegistry:
    """
    Static table of remedial actions, keyed by name.
    Built once at startup and only read afterwards.
    """
    def __init__(self, actions: Iterable[RemedialAction] = ()):
        self._registry: Dict[str, RemedialAction] = {}
        for action in actions:
            self.register(action)

    def register(self, action: RemedialAction) -> RemedialAction:
        if action.name in self._registry:
            raise ValueError(f"Duplicate remedial action: {action.name}")
        self._registry[action.name] = action
        return action

    def get(self, name: str) -> RemedialAction:
        try:
            return self._registry[name]
        except KeyError:
            raise KeyError(f"Unknown remedial action: {name}") from None

    def names(self) -> List[str]:
        return list(self._registry.keys())
