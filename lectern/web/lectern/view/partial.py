import typing as t

import pydantic as p


def updates(request: p.BaseModel, *, nullable: t.Collection[str] = ()) -> dict[str, t.Any]:
    """The fields a partial-update request actually carries.

    An explicit null only clears the fields named in `nullable`; for any
    other field it is treated as absent.
    """
    fields = {k: getattr(request, k) for k in request.model_fields_set}
    return {k: v for k, v in fields.items() if v is not None or k in nullable}
