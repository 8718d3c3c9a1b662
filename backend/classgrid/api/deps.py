from classgrid.core.config import get_settings
from classgrid.services.optimizer import OptimizerClient
from classgrid.services.store import TimetableStore

_store = TimetableStore()


def get_store() -> TimetableStore:
    return _store


def get_optimizer() -> OptimizerClient:
    return OptimizerClient(settings=get_settings())
