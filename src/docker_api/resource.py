"""
Base classes for resource handles and collections
"""

from typing import Any, Dict, Iterable, List, Optional

from .call import Call, StatusCodes


async def dial(modem, resource: str, path: str, method: str, status_codes: StatusCodes,
               **kwargs) -> Any:
    """Build a Call tagged with the resource kind and hand it to the modem"""
    call = Call(path=path, method=method, status_codes=status_codes, resource=resource, **kwargs)
    return await modem.dial(call)


class Model:
    """
    Handle on one remote resource: modem, identifier and last snapshot

    Handles never mutate their snapshot. Operations that fetch or change
    state return a fresh handle for the same identifier.
    """

    #: Resource kind used to tag errors
    resource = ''
    #: Key holding the identifier in list and create responses
    id_attribute = 'Id'

    def __init__(self, modem, id: str, attrs: Optional[Dict[str, Any]] = None):
        self.modem = modem
        self.id = id
        self.attrs = attrs if attrs is not None else {}

    def __repr__(self):
        return f"<{self.__class__.__name__}: {self.short_id}>"

    def __eq__(self, other):
        return isinstance(other, self.__class__) and self.id == other.id

    def __hash__(self):
        return hash((self.__class__.__name__, self.id))

    @property
    def short_id(self) -> str:
        if not self.id:
            return ''
        return self.id.split(':', 1)[-1][:12] if self.id.startswith('sha256:') else self.id[:12]

    def _new(self, attrs: Any = None) -> 'Model':
        """Fresh handle for the same identifier carrying attrs when it is a snapshot"""
        return self.__class__(self.modem, self.id, attrs if isinstance(attrs, dict) else None)

    async def _dial(self, path: str, method: str, status_codes: StatusCodes, **kwargs) -> Any:
        return await dial(self.modem, self.resource, path, method, status_codes, **kwargs)


class Collection:
    """Factory and collection operations for one resource kind"""

    model = Model

    def __init__(self, modem):
        self.modem = modem

    def __repr__(self):
        return f"<{self.__class__.__name__}>"

    def get(self, id: str) -> Model:
        """
        Handle for a known identifier

        No request is made; call ``status()`` on the result to fetch it.
        """
        return self.model(self.modem, id)

    def prepare_model(self, attrs: Dict[str, Any]) -> Model:
        """Wrap a list/create response item into a handle"""
        return self.model(self.modem, attrs.get(self.model.id_attribute), attrs)

    def prepare_models(self, items: Optional[Iterable[Dict[str, Any]]]) -> List[Model]:
        if not items:
            return []
        return [self.prepare_model(attrs) for attrs in items]

    async def _dial(self, path: str, method: str, status_codes: StatusCodes, **kwargs) -> Any:
        return await dial(self.modem, self.model.resource, path, method, status_codes, **kwargs)
