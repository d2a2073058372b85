import typing as t

from lectern.lib.json import JSONEncoder as BaseJSONEncoder
from lectern.lib.json import JSONValue


class JSONEncoder(BaseJSONEncoder):
    """Never fails: anything the base encoder cannot handle is logged by repr."""

    def default(self, o: t.Any) -> JSONValue:
        try:
            return super().default(o)
        except TypeError:
            return repr(o)
