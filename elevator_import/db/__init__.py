from .store import ElevatorStore, StoreError

__all__ = ["ElevatorStore", "StoreError"]
