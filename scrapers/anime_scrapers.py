"""
Scraper pour Anichin (donghua sous-titrés)
Chaque opération publique récupère une page, l'extrait et renvoie une enveloppe ApiResponse
"""

import functools
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple, Union

import httpx
import structlog
from pydantic import BaseModel, Field, ValidationError

from config import ScraperConfig
from .base_scraper import BaseScraper
from .exceptions import InvalidInputError
from .extractors import MarkupExtractor, episode_path
from .http_client import HttpClient
from .response import ApiResponse, build_response, error_response, handle_error

logger = structlog.get_logger(__name__)

ADVANCED_SEARCH_MODES = ("image", "text")

class AdvancedSearchFilter(BaseModel):
    """Filtres de la recherche avancée (/seri/)"""
    status: Optional[str] = None
    type: Optional[str] = None
    order: Optional[str] = None
    sub: Optional[str] = None
    genres: List[str] = Field(default_factory=list)
    studios: List[str] = Field(default_factory=list)
    seasons: List[str] = Field(default_factory=list)
    per_page: Optional[int] = Field(default=None, ge=1)

    def to_params(self, page: int = 1) -> List[Tuple[str, str]]:
        """Paramètres de query string: status=...&genre[]=...&genre[]=..."""
        params: List[Tuple[str, str]] = []
        if page > 1:
            params.append(("page", str(page)))
        for key in ("status", "type", "order", "sub"):
            value = getattr(self, key)
            if value and value.strip():
                params.append((key, value))
        for key, param in (("genres", "genre[]"), ("studios", "studio[]"), ("seasons", "season[]")):
            params.extend((param, value) for value in getattr(self, key) if value and value.strip())
        if self.per_page:
            params.append(("per_page", str(self.per_page)))
        return params

def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()

def rejects_invalid_input(method):
    """Transforme une InvalidInputError levée avant la requête en enveloppe d'échec"""
    @functools.wraps(method)
    async def wrapper(self, *args, **kwargs):
        try:
            return await method(self, *args, **kwargs)
        except InvalidInputError as e:
            logger.info("invalid_input", operation=method.__name__, error=str(e))
            return error_response(str(e), {"url": "", "scraped_at": now_iso()})
    return wrapper

def check_page(page: int) -> int:
    if isinstance(page, bool) or not isinstance(page, int) or page < 1:
        raise InvalidInputError(f"Invalid page: {page}")
    return page

def check_text(value: Optional[str], name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidInputError(f"Invalid {name}: {value!r}")
    return value.strip()

def paged_path(base: str, page: int) -> str:
    """'/ongoing/' + 3 -> '/ongoing/page/3/'"""
    return base if page == 1 else f"{base}page/{page}/"

class AnichinScraper(BaseScraper):
    """Scraper pour Anichin"""

    site_name = "Anichin"

    def __init__(self, config: Optional[ScraperConfig] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.config = config or ScraperConfig()
        self.client = HttpClient(self.config, transport=transport)
        self.extractor = MarkupExtractor(base_url=self.config.base_url)

    @property
    def base_url(self) -> str:
        return self.config.base_url

    async def _scrape(self, context: str, path: str, page_type: str,
                      params=None, missing_message: Optional[str] = None, **extract_context) -> ApiResponse:
        """Récupère une page et l'extrait; toute erreur devient une enveloppe d'échec"""
        metadata = {"url": self.client.build_url(path, params), "scraped_at": now_iso()}
        try:
            html = await self.client.fetch(path, params)
            data = self.extractor.extract(page_type, html, **extract_context)
        except Exception as e:
            logger.error("scrape_failed", context=context, url=metadata["url"], error=str(e) or type(e).__name__)
            return handle_error(e, context, metadata)

        if data is None:
            return error_response(missing_message or f"Failed to {context}", metadata)
        return build_response(data, metadata)

    # ==================== ACCUEIL ====================

    @rejects_invalid_input
    async def home(self, page: int = 1) -> ApiResponse:
        """Slider, populaires du jour, dernières sorties et recommandations"""
        return await self._scrape("parse home", paged_path("/", check_page(page)), "home")

    async def sidebar(self) -> ApiResponse:
        return await self._scrape("parse sidebar", "/", "sidebar")

    @rejects_invalid_input
    async def search(self, query: str, page: int = 1) -> ApiResponse:
        query = check_text(query, "query")
        path = paged_path("/", check_page(page))
        return await self._scrape("parse search", path, "search", params={"s": query}, query=query)

    @rejects_invalid_input
    async def schedule(self, day: Optional[str] = None) -> ApiResponse:
        """
        Planning de diffusion

        Args:
            day: Jour de la semaine en anglais (monday...sunday), tous si vide

        Returns:
            Enveloppe {jour: {list: [...]}}
        """
        day = str(day) if day else None
        if day and day.lower() not in self.extractor.site.weekdays:
            raise InvalidInputError(f'Day "{day}" not found')
        return await self._scrape(
            "parse schedule", "/schedule/", "schedule",
            missing_message=f'Day "{day}" not found', day=day,
        )

    # ==================== LISTES ====================

    @rejects_invalid_input
    async def ongoing(self, page: int = 1) -> ApiResponse:
        return await self._scrape("parse ongoing", paged_path("/ongoing/", check_page(page)), "listing")

    @rejects_invalid_input
    async def completed(self, page: int = 1) -> ApiResponse:
        return await self._scrape("parse completed", paged_path("/completed/", check_page(page)), "listing")

    @rejects_invalid_input
    async def azlist(self, page: int = 1, letter: Optional[str] = None) -> ApiResponse:
        """Liste A-Z, éventuellement filtrée sur une lettre"""
        params = {"show": check_text(letter, "letter")} if letter is not None else None
        path = paged_path("/az-lists/", check_page(page))
        return await self._scrape("parse A-Z list", path, "listing", params=params)

    async def _taxonomy(self, kind: str, slug: str, page: int) -> ApiResponse:
        slug = check_text(slug, "slug")
        path = paged_path(f"/{kind}/{slug}/", check_page(page))
        return await self._scrape(f"parse {kind}", path, "taxonomy", kind=kind, slug=slug)

    @rejects_invalid_input
    async def genres(self, slug: str, page: int = 1) -> ApiResponse:
        return await self._taxonomy("genres", slug, page)

    @rejects_invalid_input
    async def studio(self, slug: str, page: int = 1) -> ApiResponse:
        return await self._taxonomy("studio", slug, page)

    @rejects_invalid_input
    async def network(self, slug: str, page: int = 1) -> ApiResponse:
        return await self._taxonomy("network", slug, page)

    @rejects_invalid_input
    async def country(self, slug: str, page: int = 1) -> ApiResponse:
        return await self._taxonomy("country", slug, page)

    @rejects_invalid_input
    async def season(self, slug: str) -> ApiResponse:
        """Séries d'une saison (ex: 'winter-2024'), sans pagination"""
        slug = check_text(slug, "slug")
        return await self._scrape("parse season", f"/season/{slug}/", "season", slug=slug)

    # ==================== SÉRIE / EPISODE ====================

    @rejects_invalid_input
    async def series(self, slug: str) -> ApiResponse:
        slug = check_text(slug, "slug")
        return await self._scrape("parse series detail", f"/seri/{slug}/", "series", slug=slug)

    @rejects_invalid_input
    async def watch(self, slug: str, episode: int) -> ApiResponse:
        slug = check_text(slug, "slug")
        if isinstance(episode, bool) or not isinstance(episode, int) or episode < 1:
            raise InvalidInputError(f"Invalid episode: {episode}")
        return await self._scrape("parse watch", episode_path(slug, episode), "watch", slug=slug, episode=episode)

    # ==================== RECHERCHE AVANCÉE ====================

    @rejects_invalid_input
    async def advanced_search(self, mode: str = "image",
                              filters: Union[AdvancedSearchFilter, Dict[str, Any], None] = None,
                              page: int = 1) -> ApiResponse:
        """
        Recherche avancée

        Args:
            mode: 'image' (grille filtrée et paginée) ou 'text' (liste alphabétique complète)
            filters: Filtres du mode image
            page: Numéro de page du mode image
        """
        if mode not in ADVANCED_SEARCH_MODES:
            raise InvalidInputError(f'Invalid mode "{mode}"')
        if mode == "text":
            return await self._scrape("text mode advanced search", "/seri/list-mode/", "advanced_text")

        check_page(page)
        try:
            search_filter = filters if isinstance(filters, AdvancedSearchFilter) else AdvancedSearchFilter.model_validate(filters or {})
        except ValidationError as e:
            raise InvalidInputError(f"Invalid filters: {e.errors()[0]['msg']}") from e
        return await self._scrape(
            "image mode advanced search", "/seri/", "advanced_image",
            params=search_filter.to_params(page) or None,
            filters=search_filter.model_dump(exclude_defaults=True),
        )

    async def quickfilter(self) -> ApiResponse:
        """Catalogue des filtres disponibles (genres, studios, saisons, statut...)"""
        return await self._scrape("parse quickfilter", "/seri/", "quickfilter")

    async def close(self) -> None:
        await self.client.aclose()
