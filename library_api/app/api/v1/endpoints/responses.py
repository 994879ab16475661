"""Response helpers shared by the endpoint modules."""

from typing import Sequence, Union

from fastapi import Response, status
from pydantic import BaseModel


def list_or_no_content(items: Sequence[BaseModel]) -> Union[Sequence[BaseModel], Response]:
    """Return ``items`` or an empty 204 response when there are none.

    An empty listing is not an error; it is reported as "no content" so
    clients can tell it apart from a 404 for a single missing entity.
    """
    if not items:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    return items
