"""
Anichin Scraper API
API pour scraper les donghua (animation chinoise) d'Anichin
"""

import os
from typing import List, Optional
from contextlib import asynccontextmanager

from fastapi import FastAPI, Query
from fastapi.middleware.cors import CORSMiddleware
import structlog
import uvicorn

from config import DEFAULT_BASE_URL, ScraperConfig
from scrapers import AnichinScraper, AdvancedSearchFilter, ApiResponse

structlog.configure(
    processors=[
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="%H:%M:%S"),
        structlog.dev.ConsoleRenderer(),
    ],
    wrapper_class=structlog.make_filtering_bound_logger(
        10 if os.environ.get("DEBUG", "false").lower() == "true" else 20
    ),
    context_class=dict,
    logger_factory=structlog.PrintLoggerFactory(),
)

logger = structlog.get_logger(__name__)

VERSION = "1.0.0"

# ==================== INSTANCE DU SCRAPER ====================

scraper = AnichinScraper(ScraperConfig(base_url=os.environ.get("ANICHIN_BASE_URL", DEFAULT_BASE_URL)))

# ==================== LIFESPAN ====================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Gestion du cycle de vie de l'application"""
    logger.info("api_started", base_url=scraper.base_url)
    yield
    await scraper.close()
    logger.info("api_stopped")

# ==================== APP FASTAPI ====================

app = FastAPI(
    title="Anichin Scraper API",
    description="""
    API pour scraper Anichin (donghua sous-titrés).

    ## Fonctionnalités:
    - 🏠 Accueil, sidebar et planning de diffusion
    - 📋 Listes (en cours, terminées, A-Z, genres, studios, networks, pays, saisons)
    - 📺 Fiches séries et pages d'épisodes (serveurs, téléchargements)
    - 🔍 Recherche simple et avancée

    Toutes les routes renvoient l'enveloppe `{success, data, message, metadata}`.
    """,
    version=VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ==================== ENDPOINTS ====================

@app.get("/", tags=["Root"])
async def root():
    """Page d'accueil de l'API"""
    return {
        "name": "Anichin Scraper API",
        "version": VERSION,
        "docs": "/docs",
        "endpoints": {
            "home": "/api/home?page={page}",
            "sidebar": "/api/sidebar",
            "search": "/api/search?q={query}&page={page}",
            "schedule": "/api/schedule?day={day}",
            "ongoing": "/api/ongoing?page={page}",
            "completed": "/api/completed?page={page}",
            "azlist": "/api/azlist?page={page}&letter={letter}",
            "genres": "/api/genres/{slug}?page={page}",
            "studio": "/api/studio/{slug}?page={page}",
            "network": "/api/network/{slug}?page={page}",
            "country": "/api/country/{slug}?page={page}",
            "season": "/api/season/{slug}",
            "series": "/api/series/{slug}",
            "watch": "/api/watch/{slug}/{episode}",
            "advanced_search": "/api/advanced-search?mode={image|text}",
            "quickfilter": "/api/quickfilter",
            "health": "/health"
        },
    }

@app.get("/health", tags=["Health"])
async def health_check():
    """Vérification de l'état de l'API"""
    return {
        "status": "healthy",
        "site": scraper.site_name,
        "base_url": scraper.base_url,
        "version": VERSION
    }

@app.get("/api/home", tags=["Home"], response_model=ApiResponse)
async def get_home(page: int = Query(default=1, description="Numéro de page")):
    """Slider, populaires du jour, dernières sorties et recommandations"""
    return await scraper.home(page)

@app.get("/api/sidebar", tags=["Home"], response_model=ApiResponse)
async def get_sidebar():
    """Filtres rapides, séries en cours, populaires, nouveaux films, genres et saisons"""
    return await scraper.sidebar()

@app.get("/api/search", tags=["Search"], response_model=ApiResponse)
async def search_content(
    q: str = Query(..., description="Terme de recherche"),
    page: int = Query(default=1, description="Numéro de page")
):
    """
    Recherche de séries

    - **q**: Terme de recherche (ex: "Soul Land")
    - **page**: Numéro de page (>= 1)
    """
    return await scraper.search(q, page)

@app.get("/api/schedule", tags=["Schedule"], response_model=ApiResponse)
async def get_schedule(day: Optional[str] = Query(default=None, description="monday ... sunday")):
    """Planning de diffusion de la semaine ou d'un jour"""
    return await scraper.schedule(day)

@app.get("/api/ongoing", tags=["Lists"], response_model=ApiResponse)
async def get_ongoing(page: int = Query(default=1)):
    return await scraper.ongoing(page)

@app.get("/api/completed", tags=["Lists"], response_model=ApiResponse)
async def get_completed(page: int = Query(default=1)):
    return await scraper.completed(page)

@app.get("/api/azlist", tags=["Lists"], response_model=ApiResponse)
async def get_azlist(
    page: int = Query(default=1),
    letter: Optional[str] = Query(default=None, description="Lettre (A-Z, 0-9, .)")
):
    return await scraper.azlist(page, letter)

@app.get("/api/genres/{slug}", tags=["Lists"], response_model=ApiResponse)
async def get_genre(slug: str, page: int = Query(default=1)):
    return await scraper.genres(slug, page)

@app.get("/api/studio/{slug}", tags=["Lists"], response_model=ApiResponse)
async def get_studio(slug: str, page: int = Query(default=1)):
    return await scraper.studio(slug, page)

@app.get("/api/network/{slug}", tags=["Lists"], response_model=ApiResponse)
async def get_network(slug: str, page: int = Query(default=1)):
    return await scraper.network(slug, page)

@app.get("/api/country/{slug}", tags=["Lists"], response_model=ApiResponse)
async def get_country(slug: str, page: int = Query(default=1)):
    return await scraper.country(slug, page)

@app.get("/api/season/{slug}", tags=["Lists"], response_model=ApiResponse)
async def get_season(slug: str):
    """Séries d'une saison (ex: winter-2024)"""
    return await scraper.season(slug)

@app.get("/api/series/{slug}", tags=["Details"], response_model=ApiResponse)
async def get_series(slug: str):
    """Fiche complète d'une série: informations, téléchargements, épisodes"""
    return await scraper.series(slug)

@app.get("/api/watch/{slug}/{episode}", tags=["Details"], response_model=ApiResponse)
async def get_watch(slug: str, episode: int):
    """Page de lecture d'un épisode: serveurs vidéo, téléchargements, navigation"""
    return await scraper.watch(slug, episode)

@app.get("/api/advanced-search", tags=["Search"], response_model=ApiResponse)
async def advanced_search(
    mode: str = Query(default="image", description="image ou text"),
    page: int = Query(default=1),
    status: Optional[str] = Query(default=None),
    type: Optional[str] = Query(default=None),
    order: Optional[str] = Query(default=None),
    sub: Optional[str] = Query(default=None),
    genre: List[str] = Query(default=[]),
    studio: List[str] = Query(default=[]),
    season: List[str] = Query(default=[]),
    per_page: Optional[int] = Query(default=None, ge=1)
):
    """
    Recherche avancée

    - **mode**: `image` (grille filtrée, paginée) ou `text` (liste alphabétique)
    - **genre / studio / season**: valeurs répétables (`?genre=action&genre=fantasy`)
    """
    filters = AdvancedSearchFilter(
        status=status, type=type, order=order, sub=sub,
        genres=genre, studios=studio, seasons=season, per_page=per_page,
    )
    return await scraper.advanced_search(mode, filters, page)

@app.get("/api/quickfilter", tags=["Search"], response_model=ApiResponse)
async def get_quickfilter():
    """Catalogue des filtres de la recherche avancée"""
    return await scraper.quickfilter()

# ==================== POINT D'ENTRÉE ====================

if __name__ == "__main__":
    port = int(os.environ.get("PORT", 8000))
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=port,
        reload=os.environ.get("DEBUG", "false").lower() == "true"
    )
