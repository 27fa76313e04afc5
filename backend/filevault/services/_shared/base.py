# filevault/services/_shared/base.py
from __future__ import annotations

from dataclasses import dataclass

from filevault.services._shared.errors import ValidationError
from filevault.uow import SessionFactory
from filevault.uow.sqlalchemy_uow import (
    SQLAlchemyReadOnlyUnitOfWork,
    SQLAlchemyUnitOfWork,
)


@dataclass(slots=True)
class ServiceContext:
    """
    Carry cross-cutting request-scoped data.

    :param actor_id: Authenticated user identifier.
    :param request_id: Correlation id for logging.
    """

    actor_id: str | None = None
    request_id: str | None = None


class BaseService:
    """
    Base class for application services.

    Responsibilities
    ----------------
    * Provide helpers to run read-only and read-write units of work.
    * Offer shared validation helpers.
    * Keep services thin: no Flask, no HTTP, no global session.

    Notes
    -----
    The session is never looked up globally. Each service receives a
    ``session_factory`` and every unit of work it opens calls it.
    """

    def __init__(
        self,
        *,
        session_factory: SessionFactory,
        ctx: ServiceContext | None = None,
    ) -> None:
        """
        :param session_factory: Zero-arg callable returning the session to use.
        :type session_factory: Callable[[], Session]
        :param ctx: Optional request-scoped context.
        :type ctx: ServiceContext | None
        """
        self.session_factory = session_factory
        self.ctx = ctx or ServiceContext()

    # -------------------------- UoW helpers ---------------------------------

    def rw_uow(self) -> SQLAlchemyUnitOfWork:
        """
        Create a read-write Unit of Work.

        :rtype: SQLAlchemyUnitOfWork
        """
        return SQLAlchemyUnitOfWork(self.session_factory)

    def ro_uow(self) -> SQLAlchemyReadOnlyUnitOfWork:
        """
        Create a read-only Unit of Work.

        :rtype: SQLAlchemyReadOnlyUnitOfWork
        """
        return SQLAlchemyReadOnlyUnitOfWork(self.session_factory)

    # ----------------------- Validation utilities ---------------------------

    def ensure_pagination(self, *, page: int, limit: int, max_limit: int = 100) -> tuple[int, int]:
        """
        Validate 1-based page and page size.

        :raises ValidationError: If ``page < 1`` or ``limit`` is outside
            ``[1, max_limit]``.
        :returns: ``(page, limit)`` as ints.
        """
        page = int(page)
        limit = int(limit)
        if page < 1:
            raise ValidationError("page must be >= 1")
        if limit < 1 or limit > max_limit:
            raise ValidationError(f"page_size must be between 1 and {max_limit}")
        return page, limit
