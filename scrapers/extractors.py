"""
Extraction des données depuis le HTML du site
Un seul extracteur, paramétré par la table de sélecteurs d'un SiteConfig
"""

import re
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

from config import ANICHIN_SITE, CHECKBOX_FILTERS, RADIO_FILTERS, Field, SiteConfig
from .base_scraper import (
    Bookmark, Cover, DownloadBatch, DownloadLink, DownloadQuality, EpisodeEntry,
    EpisodeNavigation, EpisodeRef, EpisodeWatch, Formatted, ListingItem, RecommendationItem,
    NamedLink, NavLink, PageLink, Pagination, Publisher, Rating, RelatedEpisode,
    ScheduleEntry, SeasonCard, SeriesDetail, SeriesInfo, SeriesInformation, Server,
    StudioLabel, WatchMeta,
)
from .markup import NodeSet
from .utils import (
    absolute_url, decode_base64_url, extract_episode_number, extract_iframe_src,
    extract_slug, extract_style_url, extract_width_percentage, format_countdown,
    format_episode_number, format_release_time, parse_float, parse_int,
)

# Libellés "Clé:" de la boîte d'informations -> attribut de SeriesInformation
INFO_LABELS = (
    ("Status:", "status"),
    ("Released:", "released"),
    ("Duration:", "duration"),
    ("Type:", "type"),
    ("Episodes:", "episode_count"),
    ("Season:", "season"),
    ("Country:", "country"),
)

POPULAR_PERIODS = (("weekly", ".wpop-weekly li"), ("monthly", ".wpop-monthly li"), ("all_time", ".wpop-alltime li"))

Page = Union[NodeSet, str, bytes]

def episode_path(slug: str, episode: int) -> str:
    """Chemin de la page de lecture d'un épisode"""
    return f"/{slug}-episode-{format_episode_number(episode)}-subtitle-indonesia/"

class MarkupExtractor:
    """
    Transforme les pages du site en enregistrements.

    Aucun noeud manquant ne lève d'exception: les champs absents prennent
    leur valeur par défaut ('', 0 ou liste vide).
    """

    def __init__(self, site: SiteConfig = ANICHIN_SITE, base_url: Optional[str] = None):
        self.site = site
        self.sel = site.selectors
        self.recipes = site.recipes
        self.base_url = (base_url or site.base_url).rstrip('/')
        self._handlers: Dict[str, Callable[..., Any]] = {
            "home": self.home,
            "sidebar": self.sidebar,
            "search": self.search,
            "schedule": self.schedule,
            "listing": self.listing,
            "taxonomy": self.taxonomy,
            "season": self.season,
            "series": self.series,
            "watch": self.watch,
            "advanced_image": self.advanced_image,
            "advanced_text": self.advanced_text,
            "quickfilter": self.quickfilter,
        }

    @property
    def page_types(self) -> List[str]:
        return list(self._handlers)

    def extract(self, page_type: str, html: Page, **context):
        """Point d'entrée générique: type de page + HTML brut -> enregistrement"""
        handler = self._handlers.get(page_type)
        if handler is None:
            raise ValueError(f"Unknown page type: {page_type}")
        return handler(self._page(html), **context)

    # ==================== OUTILS ====================

    @staticmethod
    def _page(html: Page) -> NodeSet:
        return html if isinstance(html, NodeSet) else NodeSet.parse(html)

    def url(self, href: Optional[str]) -> str:
        return absolute_url(href, self.base_url)

    def slug(self, href: Optional[str]) -> str:
        return extract_slug(href, self.base_url)

    def extract_fields(self, node: NodeSet, recipe: Union[str, Sequence[Field]]) -> Dict[str, Any]:
        """Applique une recette (champ, sélecteur, transformation) à un noeud"""
        fields = self.recipes[recipe] if isinstance(recipe, str) else recipe
        values: Dict[str, Any] = {}
        for rule in fields:
            target = node.find(rule.selector) if rule.selector else node
            kind, _, arg = rule.transform.partition(":")
            if kind == "text":
                values[rule.name] = target.text()
            elif kind == "attr":
                values[rule.name] = target.attr(arg)
            elif kind == "url":
                values[rule.name] = self.url(target.attr(arg))
            elif kind == "slug":
                values[rule.name] = self.slug(target.attr(arg))
            elif kind == "int":
                values[rule.name] = parse_int(target.text())
            elif kind == "float":
                values[rule.name] = parse_float(target.text())
            else:
                raise ValueError(f"Unknown transform: {rule.transform}")
        return values

    def parse_list_item(self, node: NodeSet) -> ListingItem:
        return ListingItem(**self.extract_fields(node, "list_item"))

    def list_items(self, page: NodeSet, selector_key: str) -> List[ListingItem]:
        return [self.parse_list_item(node) for node in page.find(self.sel[selector_key])]

    def parse_pagination(self, page: NodeSet) -> Pagination:
        """
        Lit le pager (.pagination / .hpage)

        total_pages est le plus grand numéro rencontré, les liens pouvant
        être rendus dans le désordre.
        """
        pagination = Pagination()
        pager = page.find(self.sel["pagination"])

        current = pager.find(self.sel["pagination_current"])
        if current:
            pagination.current_page = parse_int(current.first().text(), 1) or 1

        prev_link = pager.find(self.sel["pagination_prev"])
        if prev_link:
            pagination.has_prev = True
            pagination.prev = NavLink(url=self.url(prev_link.attr("href")), text=prev_link.first().text())

        next_link = pager.find(self.sel["pagination_next"])
        if next_link:
            pagination.has_next = True
            pagination.next = NavLink(url=self.url(next_link.attr("href")), text=next_link.first().text())

        for number in pager.find(self.sel["pagination_numbers"]):
            text = number.text()
            if not re.match(r'\s*\d', text):
                continue
            pagination.pages.append(PageLink(
                number=parse_int(text),
                url=self.url(number.attr("href")),
                is_current=number.has_class("current"),
            ))

        if pagination.pages:
            pagination.total_pages = max(p.number for p in pagination.pages)
        return pagination

    def named_links(self, links: NodeSet, with_slug: bool = True) -> List[NamedLink]:
        return [
            NamedLink(
                name=link.text(),
                url=self.url(link.attr("href")),
                slug=self.slug(link.attr("href")) if with_slug else None,
            )
            for link in links
        ]

    def parse_information(self, content: NodeSet) -> SeriesInformation:
        """Boîte "Status: / Network: / Studio: ..." d'une série"""
        info = SeriesInformation()
        if not content:
            return info
        for label, attribute in INFO_LABELS:
            span = content.find(f'span:-soup-contains("{label}")')
            if span:
                setattr(info, attribute, span.text().replace(label, "").strip())
        info.network = self.named_links(content.find('span:-soup-contains("Network:") a'), with_slug=False)
        info.studio = self.named_links(content.find('span:-soup-contains("Studio:") a'), with_slug=False)
        info.posted_by = content.find(".author").text()
        info.released_on = content.find('time[itemprop="datePublished"]').attr("datetime")
        info.updated_on = content.find('time[itemprop="dateModified"]').attr("datetime")
        return info

    def parse_rating(self, container: NodeSet) -> Rating:
        return Rating(
            value=parse_float(container.find('meta[itemprop="ratingValue"]').attr("content")),
            count=parse_int(container.find('meta[itemprop="ratingCount"]').attr("content")),
            percentage=extract_width_percentage(container.find(".rtb span").attr("style")),
            text=container.find(".rating strong").text(),
        )

    def parse_downloads(self, page: NodeSet) -> List[DownloadBatch]:
        batches = []
        for batch in page.find(self.sel["downloads"]):
            qualities = []
            for quality in batch.find(".soraurlx"):
                links = [DownloadLink(name=a.text(), url=a.attr("href")) for a in quality.find("a")]
                qualities.append(DownloadQuality(quality=quality.find("strong").text(), links=links))
            batches.append(DownloadBatch(title=batch.find(".sorattlx h3").text(), qualities=qualities))
        return batches

    def parse_quick_filter(self, container: NodeSet) -> Dict[str, Dict[str, Any]]:
        """Filtres à cases (genre, studio, saison) et boutons radio (statut, type...)"""
        data: Dict[str, Dict[str, Any]] = {"checkbox_filters": {}, "radio_filters": {}}
        if not container:
            return data
        groups = (
            ("checkbox_filters", CHECKBOX_FILTERS, "checkbox"),
            ("radio_filters", RADIO_FILTERS, "radio"),
        )
        for key, names, input_type in groups:
            for name in names:
                dropdown = container.find(self.sel["filter_dropdown"].format(label=name.capitalize())).first()
                if not dropdown:
                    continue
                items = [
                    {
                        "value": field_input.attr("value"),
                        "label": field_input.next("label").text(),
                        "checked": field_input.is_checked(),
                    }
                    for field_input in dropdown.find(f'input[type="{input_type}"]')
                ]
                data[key][name] = {
                    "label": dropdown.find(".dropdown-toggle").text(),
                    "type": input_type,
                    "multiple": input_type == "checkbox",
                    "items": items,
                }
        return data

    # ==================== PAGES ====================

    def home(self, page: NodeSet) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "slider": [],
            "popular_today": self.list_items(page, "home_popular"),
            "latest_release": [],
            "latest_nav": {"view_all": "", "prev": "", "next": ""},
            "recommendation": {"tabs": [], "data": {}},
            "pagination": self.parse_pagination(page),
        }

        for slide in page.find(self.sel["home_slider"]):
            title_link = slide.find(".info h2 a")
            watch = slide.find(".watch")
            data["slider"].append({
                "title": title_link.attr("data-jtitle") or title_link.text(),
                "slug": self.slug(watch.attr("href")),
                "description": slide.find(".info p").text(),
                "thumbnail": extract_style_url(slide.find(".backdrop").attr("style")),
                "url": self.url(watch.attr("href")),
            })

        latest = page.find(self.sel["home_latest_header"])
        if latest:
            nav = page.find(self.sel["home_latest_nav"])
            data["latest_nav"] = {
                "view_all": self.url(latest.find(".vl").attr("href")),
                "prev": self.url(nav.find("a.l").attr("href")),
                "next": self.url(nav.find("a.r").attr("href")),
            }
            data["latest_release"] = self.list_items(page, "home_latest_items")

        recommendation = page.find(self.sel["home_recommendation"])
        for tab in recommendation.find(".nav-tabs li"):
            link = tab.find("a")
            data["recommendation"]["tabs"].append({
                "id": link.attr("href").lstrip("#"),
                "name": link.text(),
                "active": tab.has_class("active"),
            })
        for pane in recommendation.find(".tab-pane"):
            items = []
            for card in pane.find(self.sel["card_items"]):
                items.append(RecommendationItem(
                    status=card.find(".status").text(),
                    **self.extract_fields(card, "list_item"),
                ))
            data["recommendation"]["data"][pane.attr("id")] = items
        return data

    def sidebar(self, page: NodeSet) -> Dict[str, Any]:
        sidebar = page.find(self.sel["sidebar"])
        data: Dict[str, Any] = {
            "quick_filter": self.parse_quick_filter(sidebar.find(self.sel["quickfilter"])),
            "ongoing_series": [],
            "popular_series": {period: [] for period, _ in POPULAR_PERIODS},
            "new_movie": [],
            "genres": [],
            "seasons": [],
        }

        if sidebar.find(self.sel["ongoing_section"]):
            for item in sidebar.find(self.sel["ongoing_container"]).first().find("li"):
                title = re.sub(r"[►▶]", "", item.find(".l").text()).strip()
                href = item.find("a").attr("href")
                if title:
                    data["ongoing_series"].append({
                        "title": title,
                        "slug": self.slug(href),
                        "episode": item.find(".r").text(),
                        "url": self.url(href),
                    })

        popular = sidebar.find(self.sel["popular_container"])
        for period, selector in POPULAR_PERIODS:
            for item in popular.find(selector):
                entry = self.extract_fields(item, "popular_item")
                if entry["title"]:
                    entry["genre"] = [genre.text() for genre in item.find(".leftseries span a")]
                    data["popular_series"][period].append(entry)

        movies = sidebar.find(self.sel["movie_section"]).next(".serieslist")
        for item in movies.find("li"):
            title_link = item.find("h4 a.series")
            if not title_link.text():
                continue
            data["new_movie"].append({
                "title": title_link.text(),
                "slug": self.slug(title_link.attr("href")),
                "thumbnail": self.url(item.find("img").attr("src")),
                "release_date": item.find("span").last().text(),
                "genres": [
                    {"name": genre.text(), "slug": self.slug(genre.attr("href"))}
                    for genre in item.find('a[rel~="tag"]')
                ],
                "url": self.url(title_link.attr("href")),
            })

        for section in sidebar.find(self.sel["sidebar_sections"]):
            header = section.find("h3").text()
            if "Genres" in header:
                for link in section.next("ul.genre").find("li a"):
                    if link.text():
                        data["genres"].append({
                            "title": link.text(),
                            "slug": self.slug(link.attr("href")),
                            "url": self.url(link.attr("href")),
                        })
            if "Season" in header:
                for item in section.next(".mseason").find("ul.season li"):
                    link = item.find("a")
                    count = item.find("span").text()
                    if link.text():
                        data["seasons"].append({
                            "title": link.text().replace(count, "").strip(),
                            "slug": self.slug(link.attr("href")),
                            "count": count,
                            "url": self.url(link.attr("href")),
                        })
        return data

    def search(self, page: NodeSet, query: str = "") -> Dict[str, Any]:
        container = page.find(self.sel["search_container"])
        return {
            "query": query,
            "items": [self.parse_list_item(node) for node in container.find(self.sel["card_items"])],
            "pagination": self.parse_pagination(page),
        }

    def parse_schedule_entries(self, section: NodeSet) -> List[ScheduleEntry]:
        entries = []
        for item in section.find(self.sel["schedule_items"]):
            values = self.extract_fields(item, "schedule_item")
            if not values["title"]:
                continue
            raw_countdown = values.pop("raw_countdown")
            raw_release = values.pop("raw_release_time")
            entries.append(ScheduleEntry(
                countdown=Formatted(raw=raw_countdown, formatted=format_countdown(raw_countdown)),
                release_time=Formatted(raw=raw_release, formatted=format_release_time(raw_release)),
                **values,
            ))
        return entries

    def schedule(self, page: NodeSet, day: Optional[str] = None) -> Optional[Dict[str, Any]]:
        """
        Planning de la semaine, ou d'un seul jour si `day` est fourni.

        Renvoie None quand la section du jour demandé est absente.
        """
        if day:
            day = day.lower()
            section = page.find(self.sel["schedule_day"].format(day=day))
            if not section:
                return None
            return {day: {"list": self.parse_schedule_entries(section)}}

        data: Dict[str, Any] = {weekday: {"list": []} for weekday in self.site.weekdays}
        for section in page.find(self.sel["schedule_sections"]):
            classes = section.attr("class").split()
            name = next((c[len("sch_"):] for c in classes if c.startswith("sch_")), None)
            if name in data:
                data[name]["list"].extend(self.parse_schedule_entries(section))
        return data

    def listing(self, page: NodeSet) -> Dict[str, Any]:
        """Pages en cours / terminées / A-Z"""
        return {
            "lists": self.list_items(page, "listing_items"),
            "pagination": self.parse_pagination(page),
        }

    def taxonomy(self, page: NodeSet, kind: str = "genres", slug: str = "") -> Dict[str, Any]:
        """Pages genre / studio / network / country"""
        name = page.find(self.sel["taxonomy_header"]).text()
        if kind == "genres":
            name = name.replace("Genre:", "").strip()
        pagination = self.parse_pagination(page)
        label = "genre" if kind == "genres" else kind
        return {
            "page_type": kind,
            label: {"name": name, "slug": slug, "total_pages": pagination.total_pages or 1},
            "lists": self.list_items(page, "taxonomy_items"),
            "pagination": pagination,
        }

    def season(self, page: NodeSet, slug: str = "") -> Dict[str, Any]:
        cards = []
        for card in page.find(self.sel["season_cards"]):
            values = self.extract_fields(card, "season_card")
            studio = card.find(".card-thumb .card-title .studio")
            episodes_info = card.find(".card-info .stats .left span").first().text()
            episodes_match = re.search(r'(\d+)\s+episodes', episodes_info)
            type_match = re.search(r'·\s+(.+)', episodes_info)
            cards.append(SeasonCard(
                studio=StudioLabel(name=studio.text(), color_class=studio.attr("class")),
                episodes_info=episodes_info,
                type=type_match.group(1).strip() if type_match else "",
                episodes_count=parse_int(episodes_match.group(1)) if episodes_match else 0,
                genres=self.named_links(card.find('.card-info .card-info-bottom a[rel~="tag"]')),
                **values,
            ))
        return {
            "page_type": "seasons",
            "season": {"year": page.find(self.sel["season_header"]).text(), "slug": slug},
            "lists": cards,
            "pagination": {"has_pagination": False, "note": "Seasons page does not have pagination"},
        }

    def post_id(self, page: NodeSet, use_canonical: bool = False) -> str:
        """Identifiant WordPress du billet (?p=123 du shortlink)"""
        match = re.search(r'p=(\d+)', page.find(self.sel["shortlink"]).attr("href"))
        if match:
            return match.group(1)
        if use_canonical:
            match = re.search(r'/(\d+)/?$', page.find(self.sel["canonical"]).attr("href"))
            if match:
                return match.group(1)
        return ""

    def series(self, page: NodeSet, slug: str = "") -> SeriesDetail:
        detail = SeriesDetail(slug=slug, id=self.post_id(page, use_canonical=True))
        detail.url = self.url(f"/seri/{slug}/") if slug else ""

        cover = page.find(self.sel["series_cover"])
        if cover:
            detail.cover = Cover(banner=cover.find(".ime img").attr("src"), thumbnail=cover.find(".thumb img").attr("src"))
            detail.rating = self.parse_rating(cover)
            trailer = cover.find(".trailerbutton")
            if trailer:
                detail.trailer = NavLink(url=trailer.attr("href"), text=trailer.text())
            bookmark = cover.find(".bookmark .bmc")
            if bookmark:
                detail.bookmark = Bookmark(count=parse_int(extract_episode_number(bookmark.text())), text=bookmark.text())

        info = page.find(self.sel["series_info"])
        if info:
            detail.title = info.find(".entry-title").text()
            detail.alternate_title = info.find(".alter").text()
            detail.short_description = info.find(".mindesc").text()
            detail.synopsis = info.find(".desc").text()
            detail.information = self.parse_information(info.find(self.sel["info_content"]))
            detail.genres = self.named_links(info.find('.genxed a[rel~="tag"]'))

        detail.tags = self.named_links(page.find(self.sel["tags"]).find('a[rel~="tag"]'), with_slug=False)
        detail.download_batches = self.parse_downloads(page)

        nav = page.find(self.sel["episode_nav"]).find(".inepcx")
        if nav:
            first_name = nav.first().find(".epcurfirst").text()
            first_number = extract_episode_number(first_name)
            detail.episode_nav.first = EpisodeRef(
                name=first_name,
                number=first_number,
                url=self.url(episode_path(slug, parse_int(first_number))) if first_number else "#",
            )
            newest = nav.last()
            newest_name = newest.find(".epcurlast").text()
            detail.episode_nav.newest = EpisodeRef(
                name=newest_name,
                number=extract_episode_number(newest_name),
                url=self.url(newest.find("a").attr("href")),
            )

        for index, item in enumerate(page.find(self.sel["episode_list"])):
            detail.episodes.append(EpisodeEntry(index=index, **self.extract_fields(item, "episode_entry")))
        return detail

    def parse_servers(self, page: NodeSet) -> List[Server]:
        """Lecteurs proposés dans <select class="mirror"> (valeurs souvent en base64)"""
        servers = []
        for index, option in enumerate(page.find(self.sel["mirror_options"])):
            value = option.attr("value").strip()
            data_index = option.attr("data-index")
            if not value or not data_index or data_index == "0":
                continue
            if "base64," in value:
                server_url = extract_iframe_src(decode_base64_url(value.split("base64,", 1)[1]))
            elif "<iframe" in value:
                server_url = extract_iframe_src(value)
            else:
                server_url = value
            name = option.text()
            if not server_url or name == "Select Video Server":
                continue
            servers.append(Server(id=str(index), name=name, url=server_url))
        return servers

    def watch(self, page: NodeSet, slug: str = "", episode: int = 1) -> EpisodeWatch:
        watch = EpisodeWatch(
            id=self.post_id(page),
            slug=slug,
            episode_number=str(episode),
            episode_number_formatted=format_episode_number(episode),
            url=self.url(episode_path(slug, episode)) if slug else "",
        )

        player = page.find(self.sel["player"])
        if player:
            watch.thumbnail = player.find(".tb img").attr("src")
            watch.title = player.find(".entry-title").text()
            watch.episode_number = player.find('meta[itemprop="episodeNumber"]').attr("content") or str(episode)
            watch.release_date = player.find(".lm .updated").text()
            watch.posted_by = player.find(".lm .vcard a").text()

        embed = page.find(self.sel["default_embed"])
        if embed:
            default = Server(id="0", name="Default Server", url=embed.attr("src"))
            watch.servers.append(default)
            watch.current_server = default
        mirrors = self.parse_servers(page)
        watch.servers.extend(mirrors)
        if not embed and mirrors:
            watch.current_server = mirrors[0]

        watch.downloads = self.parse_downloads(page)
        watch.description = page.find(self.sel["watch_description"]).text()

        single = page.find(self.sel["single_info"])
        if single:
            watch.series_info = SeriesInfo(
                title=single.find('h2[itemprop="partOfSeries"]').text(),
                alternate_title=single.find(".alter").text(),
                thumbnail=single.find(".thumb img").attr("src"),
                rating=Rating(
                    text=single.find(".rating strong").text(),
                    percentage=extract_width_percentage(single.find(".rtb span").attr("style")),
                ),
                information=self.parse_information(single.find(self.sel["info_content"])),
                genres=self.named_links(single.find('.genxed a[rel~="tag"]')),
                synopsis=single.find(".desc.mindes").text(),
            )

        naveps = page.find(self.sel["naveps"])
        if naveps:
            sides = naveps.find(".nvs")
            watch.episode_navigation = EpisodeNavigation(
                prev=self._nav_link(sides.first()),
                all=self._nav_link(naveps.find(".nvsc")),
                next=self._nav_link(sides.last()),
            )

        for item in page.find(self.sel["related_episodes"]):
            spans = item.find(".inf span")
            watch.related_episodes.append(RelatedEpisode(
                posted_by=spans.eq(0).text(),
                released=spans.eq(1).text(),
                **self.extract_fields(item, "related_episode"),
            ))

        watch.meta = WatchMeta(
            author=page.find('meta[itemprop="author"]').attr("content"),
            date_published=page.find('meta[itemprop="datePublished"]').attr("content"),
            date_modified=page.find('meta[itemprop="dateModified"]').attr("content"),
            publisher=Publisher(
                name=page.find('span[itemprop="publisher"] meta[itemprop="name"]').attr("content"),
                logo=page.find('span[itemprop="logo"] meta[itemprop="url"]').attr("content"),
            ),
        )
        return watch

    def _nav_link(self, side: NodeSet) -> NavLink:
        return NavLink(text=side.find(".tex").text(), url=self.url(side.find("a").attr("href")))

    def advanced_image(self, page: NodeSet, filters: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return {
            "mode": "image",
            "title": page.find(self.sel["archive_header"]).text(),
            "applied_filters": filters or {},
            "lists": self.list_items(page, "listing_items"),
            "pagination": self.parse_pagination(page),
        }

    def advanced_text(self, page: NodeSet) -> Dict[str, Any]:
        """Liste alphabétique complète (/seri/list-mode/)"""
        results: Dict[str, List[Dict[str, Any]]] = {}
        for group in page.find(self.sel["text_mode_groups"]):
            letter_link = group.find("span a")
            letter = letter_link.text() if letter_link else group.find("span").first().text()
            if not letter:
                continue
            key = letter.replace("#", "hash")
            results[key] = [
                self.extract_fields(link, "text_mode_item")
                for link in group.find("ul li a.series.tip")
            ]
        return {
            "mode": "text",
            "title": page.find(self.sel["archive_header"]).text(),
            "results": results,
        }

    def quickfilter(self, page: NodeSet) -> Dict[str, Dict[str, Any]]:
        return self.parse_quick_filter(page.find(self.sel["advanced_quickfilter"]))
