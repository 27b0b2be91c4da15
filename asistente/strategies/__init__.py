"""Data-acquisition strategies, one per method in the catalog."""

from asistente.models.catalog import get_method
from asistente.models.enums import MethodId
from asistente.strategies.base import AcquisitionStrategy
from asistente.strategies.chat import ChatStrategy
from asistente.strategies.lookup import IdLookupStrategy
from asistente.strategies.manual import ManualFormStrategy
from asistente.strategies.upload import PreviewRegistry, UploadFile, UploadStrategy

STRATEGIES: dict[MethodId, type[AcquisitionStrategy]] = {
    MethodId.MANUAL: ManualFormStrategy,
    MethodId.AI: ChatStrategy,
    MethodId.UPLOAD: UploadStrategy,
    MethodId.LOOKUP: IdLookupStrategy,
}


def create_strategy(method: MethodId | str, form_type: str, **kwargs) -> AcquisitionStrategy:
    """Instantiate the strategy for *method* (raises UnknownMethodError)."""
    entry = get_method(method)
    return STRATEGIES[entry.id](form_type, **kwargs)


__all__ = [
    "AcquisitionStrategy",
    "ChatStrategy",
    "IdLookupStrategy",
    "ManualFormStrategy",
    "PreviewRegistry",
    "STRATEGIES",
    "UploadFile",
    "UploadStrategy",
    "create_strategy",
]
