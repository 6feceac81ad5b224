"""Persistence port for client-local state (loans, expenses, balances, custom assets)"""

from typing import Any, Protocol

# Keys the dashboard stores outside the relational tables
LOANS_KEY = "loans"
EXPENSES_KEY = "expenses"
BALANCES_KEY = "balances"
CUSTOM_ASSETS_KEY = "custom_assets"

CLIENT_STATE_KEYS = (LOANS_KEY, EXPENSES_KEY, BALANCES_KEY, CUSTOM_ASSETS_KEY)


class StateStore(Protocol):
    """Key/value store for JSON-compatible client state"""

    def load(self, key: str, default: Any = None) -> Any:  # pragma: no cover - interface
        ...

    def save(self, key: str, value: Any) -> None:  # pragma: no cover - interface
        ...
