"""Storage module initialization"""

from medledger.storage.state_store import StateStore, StateStoreDefaults

__all__ = ["StateStore", "StateStoreDefaults"]
