"""
Base Scraper - Enregistrements extraits et interface commune du site
"""

from abc import ABC, abstractmethod
from typing import List, Dict, Optional, Any
from dataclasses import dataclass, field, asdict

from .response import ApiResponse

class Record:
    """Enregistrement sérialisable en JSON"""

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

# ==================== LISTES ====================

@dataclass
class ListingItem(Record):
    """Représente une carte de série dans une grille"""
    title: str = ""
    slug: str = ""
    thumbnail_url: str = ""
    episode_label: str = ""
    type_label: str = ""
    badge_label: str = ""
    canonical_url: str = ""

@dataclass
class RecommendationItem(ListingItem):
    """Carte d'un onglet de recommandation de la page d'accueil"""
    status: str = ""

@dataclass
class NavLink(Record):
    url: str = ""
    text: str = ""

@dataclass
class PageLink(Record):
    number: int
    url: str = ""
    is_current: bool = False

@dataclass
class Pagination(Record):
    """Pagination dérivée des liens du pager"""
    current_page: int = 1
    total_pages: int = 1
    has_prev: bool = False
    has_next: bool = False
    prev: NavLink = field(default_factory=NavLink)
    next: NavLink = field(default_factory=NavLink)
    pages: List[PageLink] = field(default_factory=list)

@dataclass
class Formatted(Record):
    raw: str = ""
    formatted: str = ""

@dataclass
class ScheduleEntry(Record):
    """Série du planning de diffusion"""
    title: str = ""
    slug: str = ""
    thumbnail: str = ""
    countdown: Formatted = field(default_factory=Formatted)
    release_time: Formatted = field(default_factory=Formatted)
    current_episode: str = ""
    url: str = ""

# ==================== SÉRIE ====================

@dataclass
class NamedLink(Record):
    name: str = ""
    url: str = ""
    slug: Optional[str] = None

@dataclass
class Rating(Record):
    value: float = 0.0
    count: int = 0
    percentage: int = 0
    text: str = ""

@dataclass
class SeriesInformation(Record):
    status: str = ""
    network: List[NamedLink] = field(default_factory=list)
    studio: List[NamedLink] = field(default_factory=list)
    released: str = ""
    duration: str = ""
    season: str = ""
    country: str = ""
    type: str = ""
    episode_count: str = ""
    posted_by: str = ""
    released_on: str = ""
    updated_on: str = ""

@dataclass
class DownloadLink(Record):
    name: str = ""
    url: str = ""

@dataclass
class DownloadQuality(Record):
    quality: str = ""
    links: List[DownloadLink] = field(default_factory=list)

@dataclass
class DownloadBatch(Record):
    title: str = ""
    qualities: List[DownloadQuality] = field(default_factory=list)

@dataclass
class EpisodeRef(Record):
    name: str = ""
    number: str = ""
    url: str = ""

@dataclass
class EpisodeNav(Record):
    first: EpisodeRef = field(default_factory=EpisodeRef)
    newest: EpisodeRef = field(default_factory=EpisodeRef)

@dataclass
class EpisodeEntry(Record):
    index: int = 0
    number: str = ""
    title: str = ""
    subtitle: str = ""
    release_date: str = ""
    url: str = ""

@dataclass
class Cover(Record):
    banner: str = ""
    thumbnail: str = ""

@dataclass
class Bookmark(Record):
    count: int = 0
    text: str = ""

@dataclass
class SeriesDetail(Record):
    """Représente la fiche complète d'une série"""
    id: str = ""
    slug: str = ""
    title: str = ""
    alternate_title: str = ""
    short_description: str = ""
    synopsis: str = ""
    cover: Cover = field(default_factory=Cover)
    rating: Rating = field(default_factory=Rating)
    information: SeriesInformation = field(default_factory=SeriesInformation)
    trailer: NavLink = field(default_factory=NavLink)
    bookmark: Bookmark = field(default_factory=Bookmark)
    genres: List[NamedLink] = field(default_factory=list)
    tags: List[NamedLink] = field(default_factory=list)
    download_batches: List[DownloadBatch] = field(default_factory=list)
    episode_nav: EpisodeNav = field(default_factory=EpisodeNav)
    episodes: List[EpisodeEntry] = field(default_factory=list)
    url: str = ""

# ==================== EPISODE ====================

@dataclass
class Server(Record):
    id: str = ""
    name: str = ""
    url: str = ""

@dataclass
class SeriesInfo(Record):
    """Sous-ensemble de SeriesDetail affiché sur la page d'un épisode"""
    title: str = ""
    alternate_title: str = ""
    thumbnail: str = ""
    rating: Rating = field(default_factory=Rating)
    information: SeriesInformation = field(default_factory=SeriesInformation)
    genres: List[NamedLink] = field(default_factory=list)
    synopsis: str = ""

@dataclass
class EpisodeNavigation(Record):
    prev: NavLink = field(default_factory=NavLink)
    all: NavLink = field(default_factory=NavLink)
    next: NavLink = field(default_factory=NavLink)

@dataclass
class RelatedEpisode(Record):
    title: str = ""
    url: str = ""
    thumbnail: str = ""
    posted_by: str = ""
    released: str = ""

@dataclass
class Publisher(Record):
    name: str = ""
    logo: str = ""

@dataclass
class WatchMeta(Record):
    author: str = ""
    date_published: str = ""
    date_modified: str = ""
    publisher: Publisher = field(default_factory=Publisher)

@dataclass
class EpisodeWatch(Record):
    """Représente la page de lecture d'un épisode"""
    id: str = ""
    title: str = ""
    slug: str = ""
    episode_number: str = ""
    episode_number_formatted: str = ""
    thumbnail: str = ""
    release_date: str = ""
    posted_by: str = ""
    servers: List[Server] = field(default_factory=list)
    current_server: Server = field(default_factory=Server)
    downloads: List[DownloadBatch] = field(default_factory=list)
    description: str = ""
    series_info: SeriesInfo = field(default_factory=SeriesInfo)
    episode_navigation: EpisodeNavigation = field(default_factory=EpisodeNavigation)
    related_episodes: List[RelatedEpisode] = field(default_factory=list)
    meta: WatchMeta = field(default_factory=WatchMeta)
    url: str = ""

# ==================== SAISON ====================

@dataclass
class StudioLabel(Record):
    name: str = ""
    color_class: str = ""

@dataclass
class SeasonCard(Record):
    """Carte d'une série sur la page d'une saison"""
    title: str = ""
    slug: str = ""
    post_id: str = ""
    thumbnail: str = ""
    studio: StudioLabel = field(default_factory=StudioLabel)
    episodes_info: str = ""
    type: str = ""
    episodes_count: int = 0
    status: str = ""
    alternative_titles: str = ""
    rating: float = 0.0
    description: str = ""
    genres: List[NamedLink] = field(default_factory=list)
    url: str = ""

# ==================== INTERFACE ====================

class BaseScraper(ABC):
    """Interface commune d'un adaptateur de site"""

    site_name: str = ""

    @abstractmethod
    async def home(self, page: int = 1) -> ApiResponse:
        pass

    @abstractmethod
    async def search(self, query: str, page: int = 1) -> ApiResponse:
        """
        Recherche du contenu

        Args:
            query: Terme de recherche
            page: Numéro de page (>= 1)

        Returns:
            Enveloppe contenant les cartes trouvées et la pagination
        """
        pass

    @abstractmethod
    async def series(self, slug: str) -> ApiResponse:
        """
        Récupère la fiche complète d'une série

        Args:
            slug: Identifiant de la série

        Returns:
            Enveloppe contenant un SeriesDetail
        """
        pass

    @abstractmethod
    async def watch(self, slug: str, episode: int) -> ApiResponse:
        """
        Récupère la page de lecture d'un épisode

        Args:
            slug: Identifiant de la série
            episode: Numéro de l'épisode

        Returns:
            Enveloppe contenant un EpisodeWatch
        """
        pass

    @abstractmethod
    async def schedule(self, day: Optional[str] = None) -> ApiResponse:
        pass

    async def close(self) -> None:
        """Libère les ressources réseau"""
        return None

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.close()
