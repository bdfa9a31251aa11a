from __future__ import annotations

from collections.abc import Iterable
from typing import Any, Protocol

from core.errors import NotFoundError
from core.models import Document, FetchRequest, SearchRequest

DEFAULT_DOCUMENTS: tuple[Document, ...] = (
    Document(
        id="doc-1",
        title="Rendering itinerary cards",
        url="https://docs.travel-webapp.local/frontend/itinerary-cards",
        text=(
            "Itinerary cards are rendered client side from the trip payload. "
            "Each card shows the destination, dates and booked activities."
        ),
        metadata={"section": "frontend", "updated": "2024-05-02"},
    ),
    Document(
        id="doc-2",
        title="Booking API overview",
        url="https://docs.travel-webapp.local/api/bookings",
        text=(
            "The booking API exposes endpoints to create, confirm and cancel "
            "hotel and flight reservations."
        ),
        metadata={"section": "api", "updated": "2024-04-18"},
    ),
    Document(
        id="doc-3",
        title="Map component",
        url="https://docs.travel-webapp.local/frontend/map",
        text=(
            "The map component wraps the tile provider and re-renders markers "
            "whenever the selected trip changes."
        ),
        metadata={"section": "frontend", "updated": "2024-03-30"},
    ),
    Document(
        id="doc-4",
        title="Local development setup",
        url="https://docs.travel-webapp.local/dev/setup",
        text=(
            "Install dependencies with npm install, then start the dev server "
            "with npm run dev. Tests run with npm test."
        ),
        metadata={"section": "dev", "updated": "2024-05-10"},
    ),
    Document(
        id="doc-5",
        title="Deployment checklist",
        url="https://docs.travel-webapp.local/ops/deploy",
        text=(
            "Build the production bundle with npm run build and verify the "
            "health endpoint before switching traffic."
        ),
        metadata={"section": "ops", "updated": "2024-02-14"},
    ),
    Document(
        id="doc-6",
        title="Currency conversion",
        url="https://docs.travel-webapp.local/api/currency",
        text="Prices are stored in EUR and converted on display using daily rates.",
        metadata={"section": "api", "updated": "2024-01-22"},
    ),
)


class DocumentSource(Protocol):
    def get_by_id(self, doc_id: str) -> Document | None:
        ...

    def get_by_url(self, url: str) -> Document | None:
        ...

    def filter(self, text: str) -> list[Document]:
        ...


class StaticDocumentStore:
    def __init__(self, documents: Iterable[Document] = DEFAULT_DOCUMENTS):
        self._documents = tuple(documents)

    def get_by_id(self, doc_id: str) -> Document | None:
        return next((doc for doc in self._documents if doc.id == doc_id), None)

    def get_by_url(self, url: str) -> Document | None:
        return next((doc for doc in self._documents if doc.url == url), None)

    def filter(self, text: str) -> list[Document]:
        needle = text.lower()
        return [
            doc
            for doc in self._documents
            if needle in f"{doc.title} {doc.text}".lower()
        ]


class DocumentTools:
    def __init__(self, source: DocumentSource):
        self.source = source

    async def search(self, request: SearchRequest) -> dict[str, Any]:
        matches = self.source.filter(request.query)[: request.limit]
        return {
            "results": [
                {"id": doc.id, "title": doc.title, "url": doc.url} for doc in matches
            ]
        }

    async def fetch(self, request: FetchRequest) -> dict[str, Any]:
        if request.id:
            doc = self.source.get_by_id(request.id)
        elif request.url:
            doc = self.source.get_by_url(request.url)
        else:
            doc = None
        if doc is None:
            raise NotFoundError(
                "Document not found", extra={"id": request.id, "url": request.url}
            )
        return doc.model_dump(mode="json")
