"""
Configuration du scraper Anichin
Client HTTP, pool de User-Agents et table déclarative des sélecteurs
"""

from typing import Dict, List, Optional, Tuple, NamedTuple
from dataclasses import dataclass, field
from enum import Enum

DEFAULT_BASE_URL = "https://anichin.cafe"

class ProxyProtocol(Enum):
    HTTP = "http"
    HTTPS = "https"
    SOCKS = "socks"
    SOCKS5 = "socks5"

# Pool de User-Agents (remplaçable via ScraperConfig.user_agents)
USER_AGENTS: List[str] = [
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/119.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:121.0) Gecko/20100101 Firefox/121.0",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.0 Safari/605.1.15",
]

def default_headers(base_url: str) -> Dict[str, str]:
    """Headers envoyés avec chaque requête (le User-Agent est ajouté par le client)"""
    return {
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
        "Accept-Language": "en-US,en;q=0.5",
        "Accept-Encoding": "gzip, deflate",
        "Connection": "keep-alive",
        "Upgrade-Insecure-Requests": "1",
        "Sec-Fetch-Dest": "document",
        "Sec-Fetch-Mode": "navigate",
        "Sec-Fetch-Site": "same-origin",
        "Cache-Control": "max-age=0",
        "Referer": base_url,
        "Origin": base_url,
    }

@dataclass
class ProxyConfig:
    host: str
    port: int
    protocol: ProxyProtocol = ProxyProtocol.HTTP
    username: Optional[str] = None
    password: Optional[str] = None

    def __post_init__(self):
        if isinstance(self.protocol, str):
            self.protocol = ProxyProtocol(self.protocol.lower())

    @property
    def url(self) -> str:
        # httpx ne connaît que socks5://
        scheme = "socks5" if self.protocol in (ProxyProtocol.SOCKS, ProxyProtocol.SOCKS5) else self.protocol.value
        if self.username:
            return f"{scheme}://{self.username}:{self.password or ''}@{self.host}:{self.port}"
        return f"{scheme}://{self.host}:{self.port}"

@dataclass
class ScraperConfig:
    """Configuration du client (durées en secondes)"""
    base_url: str = DEFAULT_BASE_URL
    user_agent: Optional[str] = None
    user_agents: List[str] = field(default_factory=lambda: list(USER_AGENTS))
    timeout: float = 30.0
    max_retries: int = 3
    retry_delay: float = 1.0
    request_delay: float = 1.0
    proxy: Optional[ProxyConfig] = None
    headers: Dict[str, str] = None

    def __post_init__(self):
        self.base_url = (self.base_url or DEFAULT_BASE_URL).rstrip('/')
        if self.headers is None:
            self.headers = default_headers(self.base_url)
        if not self.user_agents:
            raise ValueError("user_agents must contain at least one entry")
        if self.max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        if self.timeout <= 0:
            raise ValueError("timeout must be > 0")
        if self.retry_delay < 0 or self.request_delay < 0:
            raise ValueError("delays must be >= 0")

# ==================== TABLE DES SÉLECTEURS ====================

class Field(NamedTuple):
    """Règle d'extraction: (champ, sélecteur CSS, transformation)

    Un sélecteur vide désigne le noeud lui-même. Transformations:
    text, attr:<nom>, url:<nom>, slug:<nom>, int, float.
    """
    name: str
    selector: str
    transform: str = "text"

@dataclass
class SiteConfig:
    name: str
    base_url: str
    selectors: Dict[str, str]
    recipes: Dict[str, Tuple[Field, ...]]
    weekdays: Tuple[str, ...] = (
        "monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday",
    )

ANICHIN_SELECTORS: Dict[str, str] = {
    # Pagination
    "pagination": ".pagination, .hpage",
    "pagination_current": ".page-numbers.current, .current",
    "pagination_prev": ".prev.page-numbers, a.l",
    "pagination_next": ".next.page-numbers, a.r",
    "pagination_numbers": ".page-numbers",

    # Listes
    "listing_items": ".listupd article.bs",
    "taxonomy_items": "article.bs",
    "card_items": ".bs .bsx",
    "search_container": ".listupd",
    "taxonomy_header": ".bixbox .releases h1 span",
    "archive_header": ".bixbox.bixboxarc.bbnofrm .releases h1 span",

    # Accueil
    "home_slider": "#slidertwo .swiper-slide.item",
    "home_popular": '.bixbox.bbnofrm:-soup-contains("Popular Today") .listupd.normal .bs .bsx',
    "home_latest_header": ".releases.latesthome",
    "home_latest_items": ".bixbox:has(.releases.latesthome) .listupd .bs .bsx",
    "home_latest_nav": ".hpage",
    "home_recommendation": ".series-gen",

    # Sidebar
    "sidebar": "#sidebar",
    "quickfilter": ".quickfilter",
    "advanced_quickfilter": ".advancedsearch .quickfilter",
    "filter_dropdown": '.filter.dropdown:-soup-contains("{label}")',
    "ongoing_section": '.releases:-soup-contains("Ongoing Series")',
    "ongoing_container": ".ongoingseries",
    "popular_container": "#wpop-items",
    "movie_section": '.releases:-soup-contains("NEW MOVIE")',
    "sidebar_sections": ".releases",

    # Planning
    "schedule_sections": '[class*="sch_"]',
    "schedule_day": ".sch_{day}",
    "schedule_items": ".bsx",

    # Saison
    "season_header": ".newseason h1",
    "season_cards": ".card",

    # Série
    "shortlink": 'link[rel="shortlink"]',
    "canonical": 'link[rel="canonical"]',
    "series_cover": ".bixbox.animefull",
    "series_info": ".infox",
    "info_content": ".info-content",
    "tags": ".bottom.tags",
    "downloads": '.bixbox:-soup-contains("Download") .soraddlx',
    "episode_nav": ".lastend",
    "episode_list": ".bixbox.bxcl.epcheck .eplister li",

    # Episode
    "player": ".megavid",
    "default_embed": ".video-content #pembed iframe",
    "mirror_options": ".item.video-nav select.mirror option",
    "watch_description": ".entry-content .bixbox.infx p",
    "single_info": ".single-info",
    "naveps": ".naveps.bignav",
    "related_episodes": '.bixbox:-soup-contains("Related Episodes") .stylefiv',

    # Recherche avancée (mode texte)
    "text_mode_groups": ".soralist .blix",
}

ANICHIN_RECIPES: Dict[str, Tuple[Field, ...]] = {
    "list_item": (
        Field("title", ".tt h2"),
        Field("slug", "a.tip", "slug:href"),
        Field("thumbnail_url", "img.ts-post-image", "attr:src"),
        Field("episode_label", ".epx"),
        Field("type_label", ".typez"),
        Field("badge_label", ".sb"),
        Field("canonical_url", "a.tip", "url:href"),
    ),
    "schedule_item": (
        Field("title", ".tt"),
        Field("slug", "a", "slug:href"),
        Field("thumbnail", "img", "url:src"),
        Field("raw_countdown", ".epx.cndwn", "attr:data-cndwn"),
        Field("raw_release_time", ".epx.cndwn", "attr:data-rlsdt"),
        Field("current_episode", ".sb"),
        Field("url", "a", "url:href"),
    ),
    "popular_item": (
        Field("top", ".ctr"),
        Field("title", "h4 a"),
        Field("slug", "h4 a", "slug:href"),
        Field("thumbnail", "img", "url:src"),
        Field("rating", ".numscore"),
        Field("url", "h4 a", "url:href"),
    ),
    "episode_entry": (
        Field("number", ".epl-num"),
        Field("title", ".epl-title"),
        Field("subtitle", ".epl-sub span"),
        Field("release_date", ".epl-date"),
        Field("url", "a", "url:href"),
    ),
    "related_episode": (
        Field("title", ".inf h2 a"),
        Field("url", ".inf h2 a", "url:href"),
        Field("thumbnail", ".thumb img", "attr:src"),
    ),
    "season_card": (
        Field("title", ".card-thumb .card-title h2"),
        Field("slug", ".card-box a", "slug:href"),
        Field("post_id", ".card-box a", "attr:rel"),
        Field("thumbnail", ".card-thumb img", "attr:src"),
        Field("status", ".card-info .status"),
        Field("alternative_titles", ".card-info .alternative"),
        Field("rating", ".card-info .stats .right span", "float"),
        Field("description", ".card-info .desc p"),
        Field("url", ".card-box a", "url:href"),
    ),
    "text_mode_item": (
        Field("title", ""),
        Field("slug", "", "slug:href"),
        Field("rel_id", "", "attr:rel"),
        Field("url", "", "url:href"),
    ),
}

ANICHIN_SITE = SiteConfig(
    name="Anichin",
    base_url=DEFAULT_BASE_URL,
    selectors=ANICHIN_SELECTORS,
    recipes=ANICHIN_RECIPES,
)

# Filtres de la recherche avancée
CHECKBOX_FILTERS = ("genre", "studio", "season")
RADIO_FILTERS = ("status", "type", "order", "sub")

# Seuil au-delà duquel un timestamp est exprimé en millisecondes (an 10000)
MILLISECONDS_THRESHOLD = 253402300800
