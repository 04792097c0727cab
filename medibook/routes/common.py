import logging
from contextlib import contextmanager

from fastapi import HTTPException, Request, status
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from medibook.services.errors import AuthorizationError, NotFoundError, ValidationError
from medibook.services.notifications import EventBus, NullBus

logger = logging.getLogger(__name__)

INTERNAL_ERROR_DETAIL = 'Internal server error'


class CamelModel(BaseModel):
    """Accepts and emits the camelCase field names the web client uses."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


def get_event_bus(request: Request) -> EventBus:
    """The app's bus, or a ``NullBus`` when the app was built without one."""
    return getattr(request.app.state, 'event_bus', None) or NullBus()


@contextmanager
def service_errors(db: Session | None = None, action: str = 'Request'):
    try:
        yield
    except ValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except AuthorizationError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc
    except SQLAlchemyError as exc:
        if db is not None:
            db.rollback()
        logger.exception('%s failed on a database error', action)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=INTERNAL_ERROR_DETAIL,
        ) from exc
