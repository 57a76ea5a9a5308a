from __future__ import annotations

from dataclasses import dataclass, field

from ..llm.groq_client import GroqInference, InferenceClient
from ..places.client import PlacesClient
from ..places.config import DEFAULT_PLACES_CONFIG, PlacesConfig
from ..popularity.store import ChoiceStore, InMemoryChoiceStore
from .cache import DetailCache
from .config import DEFAULT_FILTER_CONFIG, FilterConfig
from .retrieval import CandidateRetriever


@dataclass(frozen=True)
class Services:
    """Long-lived provider handles handed to every pipeline run."""

    places: PlacesClient
    llm: InferenceClient
    cache: DetailCache = field(default_factory=DetailCache)
    choices: ChoiceStore = field(default_factory=InMemoryChoiceStore)
    places_config: PlacesConfig = DEFAULT_PLACES_CONFIG
    filter_config: FilterConfig = DEFAULT_FILTER_CONFIG

    @property
    def retriever(self) -> CandidateRetriever:
        return CandidateRetriever(
            self.places,
            cache=self.cache,
            config=self.places_config,
            filter_config=self.filter_config,
        )


_services: Services | None = None


def get_services() -> Services:
    """Return the process-wide service handles, building them on first call."""
    global _services
    if _services is None:
        _services = Services(places=PlacesClient(), llm=GroqInference())
    return _services
