from __future__ import annotations

import logging

from pacerfetch.clients.base import CourtApiGateway
from pacerfetch.types import Binder, DocumentPart

logger = logging.getLogger(__name__)


class DocumentResolver:
    """
    Turn a listed document part into one CourtAPI can serve.

    A part that was never bought (`stored is None`) is purchased from PACER, which charges the
    account; any other part is read back from CourtAPI. Both paths return a `DocumentPart`.
    A failed purchase is raised to the caller and never retried here.
    """

    def __init__(self, client: CourtApiGateway) -> None:
        self.client = client
        self.purchases = 0

    async def resolve(self, binder: Binder, part: DocumentPart) -> DocumentPart:
        if part.stored is None:
            logger.info(
                "Purchasing document part from PACER",
                extra={"binder": binder, "part": part.number},
            )
            resolved = await self.client.buy_part(binder, part.number)
            self.purchases += 1
            return resolved
        return await self.client.get_part(binder, part.number)
