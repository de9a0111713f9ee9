"""
Translation of service exceptions into HTTP errors.

Services raise plain Python exceptions.  Endpoints wrap service calls in
``service_errors()`` so that:

* ``LookupError`` becomes 404,
* ``PermissionError`` becomes 403,
* ``ValueError`` becomes 400.
"""

from contextlib import contextmanager
from typing import Iterator

from fastapi import HTTPException, status


@contextmanager
def service_errors() -> Iterator[None]:
    try:
        yield
    except LookupError as e:
        detail = e.args[0] if e.args else str(e)
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=detail)
    except PermissionError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
