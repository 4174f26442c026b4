"""Tests for MarkupExtractor, one class per page type."""

import pytest

from config import Field
from scrapers.markup import NodeSet
from scrapers.utils import extract_slug
from pages import (
    HOME_HTML, LISTING_HTML, SCHEDULE_HTML, SEASON_HTML, SERIES_HTML, SIDEBAR_HTML,
    TEXT_MODE_HTML, WATCH_HTML,
)


class TestExtractFields:
    def test_transforms(self, extractor):
        node = NodeSet.parse('<div><a href="/seri/x/" rel="7"> X </a><b>12 eps</b><i>8.5</i><img src="/i.jpg"></div>')
        values = extractor.extract_fields(node, (
            Field("title", "a"),
            Field("slug", "a", "slug:href"),
            Field("url", "a", "url:href"),
            Field("raw", "img", "attr:src"),
            Field("count", "b", "int"),
            Field("score", "i", "float"),
        ))
        assert values == {
            "title": "X",
            "slug": "x",
            "url": "https://anichin.cafe/seri/x/",
            "raw": "/i.jpg",
            "count": 12,
            "score": 8.5,
        }

    def test_unknown_transform(self, extractor):
        with pytest.raises(ValueError):
            extractor.extract_fields(NodeSet.parse("<p></p>"), (Field("x", "p", "upper"),))

    def test_unknown_page_type(self, extractor):
        with pytest.raises(ValueError):
            extractor.extract("profile", "<html></html>")


class TestListing:
    def test_items(self, extractor):
        data = extractor.extract("listing", LISTING_HTML)
        first, second = data["lists"]
        assert first.title == "Soul Land 2"
        assert first.slug == "soul-land-2"
        assert first.thumbnail_url == "https://anichin.cafe/img/sl2.jpg"
        assert first.episode_label == "Ep 45"
        assert first.type_label == "Donghua"
        assert first.badge_label == "Sub"
        assert first.canonical_url == "https://anichin.cafe/seri/soul-land-2/"
        assert second.canonical_url == "https://anichin.cafe/seri/battle-through-the-heavens/"
        assert second.episode_label == ""
        assert "status" not in first.to_dict()

    def test_canonical_url_gives_back_slug(self, extractor):
        for item in extractor.extract("listing", LISTING_HTML)["lists"]:
            assert extract_slug(item.canonical_url) == item.slug

    def test_pagination(self, extractor):
        pagination = extractor.extract("listing", LISTING_HTML)["pagination"]
        assert [page.number for page in pagination.pages] == [1, 2, 4, 5]
        assert pagination.current_page == 2
        assert pagination.total_pages == 5
        assert pagination.has_prev and pagination.has_next
        assert pagination.next.url == "https://anichin.cafe/ongoing/page/3/"
        assert [page.is_current for page in pagination.pages] == [False, True, False, False]

    def test_absent_markup_gives_defaults(self, extractor):
        data = extractor.extract("listing", "<html><body><p>maintenance</p></body></html>")
        assert data["lists"] == []
        pagination = data["pagination"]
        assert (pagination.current_page, pagination.total_pages) == (1, 1)
        assert not pagination.has_prev and not pagination.has_next
        assert pagination.pages == []


class TestTaxonomy:
    def test_genre_header(self, extractor):
        data = extractor.extract("taxonomy", LISTING_HTML, kind="genres", slug="action")
        assert data["page_type"] == "genres"
        assert data["genre"] == {"name": "Action", "slug": "action", "total_pages": 5}
        assert len(data["lists"]) == 2

    def test_studio_header_kept(self, extractor):
        data = extractor.extract("taxonomy", LISTING_HTML, kind="studio", slug="sparkly-key")
        assert data["studio"]["name"] == "Genre: Action"


class TestSchedule:
    def test_single_day(self, extractor):
        data = extractor.extract("schedule", SCHEDULE_HTML, day="Monday")
        (entry,) = data["monday"]["list"]
        assert entry.title == "Example Series"
        assert entry.slug == "example-series"
        assert entry.thumbnail == "https://anichin.cafe/img/example.jpg"
        assert entry.countdown.raw == "5400"
        assert entry.countdown.formatted == "1h 30m"
        assert entry.release_time.formatted.startswith("At ")
        assert entry.current_episode == "12"

    def test_malformed_release_attribute(self, extractor):
        html = SCHEDULE_HTML.replace('data-rlsdt="1700000000"', 'data-rlsdt="' + "9" * 5000 + '"')
        (entry,) = extractor.extract("schedule", html, day="monday")["monday"]["list"]
        assert entry.countdown.formatted == "1h 30m"
        assert entry.release_time.formatted == "Unknown"

    def test_missing_day_section(self, extractor):
        assert extractor.extract("schedule", SCHEDULE_HTML, day="sunday") is None

    def test_whole_week(self, extractor):
        data = extractor.extract("schedule", SCHEDULE_HTML)
        assert list(data) == ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]
        assert len(data["monday"]["list"]) == 1
        assert data["tuesday"]["list"] == []


class TestHome:
    def test_sections(self, extractor):
        data = extractor.extract("home", HOME_HTML)
        (slide,) = data["slider"]
        assert slide == {
            "title": "Xian Ni",
            "slug": "renegade-immortal",
            "description": "Wang Lin walks the path of immortality.",
            "thumbnail": "https://anichin.cafe/bg/ri.jpg",
            "url": "https://anichin.cafe/seri/renegade-immortal/",
        }
        assert [item.slug for item in data["popular_today"]] == ["renegade-immortal"]
        assert [item.slug for item in data["latest_release"]] == ["battle-through-the-heavens"]
        assert data["latest_nav"] == {
            "view_all": "https://anichin.cafe/anime/?order=update",
            "prev": "",
            "next": "https://anichin.cafe/page/2/",
        }
        assert data["pagination"].has_next

    def test_recommendation_tabs(self, extractor):
        recommendation = extractor.extract("home", HOME_HTML)["recommendation"]
        assert recommendation["tabs"] == [
            {"id": "series-donghua", "name": "Donghua", "active": True},
            {"id": "series-movie", "name": "Movie", "active": False},
        ]
        (item,) = recommendation["data"]["series-donghua"]
        assert item.status == "Ongoing"
        assert item.to_dict()["status"] == "Ongoing"
        assert recommendation["data"]["series-movie"] == []


class TestSidebar:
    def test_widgets(self, extractor):
        data = extractor.extract("sidebar", SIDEBAR_HTML)
        assert data["ongoing_series"] == [{
            "title": "Soul Land 2",
            "slug": "soul-land-2",
            "episode": "52",
            "url": "https://anichin.cafe/soul-land-2-episode-52-subtitle-indonesia/",
        }]
        (weekly,) = data["popular_series"]["weekly"]
        assert weekly["top"] == "1"
        assert weekly["slug"] == "battle-through-the-heavens"
        assert weekly["rating"] == "9.1"
        assert weekly["genre"] == ["Action", "Fantasy"]
        assert data["popular_series"]["monthly"] == []
        (movie,) = data["new_movie"]
        assert movie["release_date"] == "2024"
        assert movie["genres"] == [{"name": "Action", "slug": "action"}]
        assert [genre["slug"] for genre in data["genres"]] == ["action", "fantasy"]
        assert data["seasons"] == [{
            "title": "Winter 2024",
            "slug": "winter-2024",
            "count": "37",
            "url": "https://anichin.cafe/season/winter-2024/",
        }]

    def test_quick_filter(self, extractor):
        quick_filter = extractor.extract("sidebar", SIDEBAR_HTML)["quick_filter"]
        genre = quick_filter["checkbox_filters"]["genre"]
        assert genre["multiple"] is True
        assert genre["items"] == [
            {"value": "action", "label": "Action", "checked": True},
            {"value": "comedy", "label": "Comedy", "checked": False},
        ]
        status = quick_filter["radio_filters"]["status"]
        assert status["type"] == "radio"
        assert [item["value"] for item in status["items"]] == ["", "ongoing"]
        assert "studio" not in quick_filter["checkbox_filters"]

    def test_empty_page(self, extractor):
        data = extractor.extract("sidebar", "<html></html>")
        assert data["ongoing_series"] == []
        assert data["popular_series"] == {"weekly": [], "monthly": [], "all_time": []}
        assert data["quick_filter"] == {"checkbox_filters": {}, "radio_filters": {}}


class TestSeries:
    def test_detail(self, extractor):
        detail = extractor.extract("series", SERIES_HTML, slug="soul-land-2")
        assert detail.id == "12345"
        assert detail.title == "Soul Land 2"
        assert detail.alternate_title == "Douluo Dalu 2"
        assert detail.short_description == "Tang Wulin joins Shrek Academy."
        assert detail.synopsis == "Ten thousand years after the first Soul Land."
        assert detail.url == "https://anichin.cafe/seri/soul-land-2/"
        assert detail.cover.banner == "https://anichin.cafe/banner.jpg"
        assert (detail.rating.value, detail.rating.count, detail.rating.percentage) == (8.5, 42, 85)
        assert detail.trailer.url == "https://www.youtube.com/watch?v=abc"
        assert detail.bookmark.count == 1234
        assert [genre.slug for genre in detail.genres] == ["action", "fantasy"]
        assert [tag.name for tag in detail.tags] == ["Douluo"]

    def test_information(self, extractor):
        info = extractor.extract("series", SERIES_HTML, slug="soul-land-2").information
        assert info.status == "Ongoing"
        assert info.released == "2023"
        assert info.duration == "20 min. per ep."
        assert info.season == "Summer 2023"
        assert info.country == "China"
        assert info.type == "ONA"
        assert info.episode_count == "52"
        assert [(n.name, n.url) for n in info.network] == [
            ("Tencent Penguin Pictures", "https://anichin.cafe/network/tencent-penguin-pictures/"),
        ]
        assert info.studio[0].name == "Sparkly Key"
        assert info.posted_by == "admin"
        assert info.released_on == "2023-06-24T10:00:00+07:00"
        assert info.updated_on == "2024-01-01T10:00:00+07:00"

    def test_downloads_and_episodes(self, extractor):
        detail = extractor.extract("series", SERIES_HTML, slug="soul-land-2")
        (batch,) = detail.download_batches
        assert batch.title == "Soul Land 2 Episode 1-10"
        assert batch.qualities[0].quality == "720p"
        assert [link.name for link in batch.qualities[0].links] == ["GDrive", "Mega"]
        assert detail.episode_nav.first.number == "1"
        assert detail.episode_nav.first.url == "https://anichin.cafe/soul-land-2-episode-01-subtitle-indonesia/"
        assert detail.episode_nav.newest.number == "52"
        assert [(e.index, e.number) for e in detail.episodes] == [(0, "52"), (1, "51")]
        assert detail.episodes[0].subtitle == "Sub"

    def test_id_from_canonical_when_no_shortlink(self, extractor):
        html = '<html><head><link rel="canonical" href="https://anichin.cafe/archives/678/"></head></html>'
        assert extractor.extract("series", html, slug="x").id == "678"

    def test_empty_page(self, extractor):
        detail = extractor.extract("series", "<html></html>", slug="ghost")
        assert detail.title == ""
        assert detail.episodes == []
        assert detail.rating.value == 0.0


class TestWatch:
    def test_player_and_servers(self, extractor):
        watch = extractor.extract("watch", WATCH_HTML, slug="soul-land-2", episode=5)
        assert watch.id == "999"
        assert watch.title == "Soul Land 2 Episode 05"
        assert watch.episode_number == "5"
        assert watch.episode_number_formatted == "05"
        assert watch.release_date == "January 5, 2024"
        assert watch.posted_by == "admin"
        assert watch.url == "https://anichin.cafe/soul-land-2-episode-05-subtitle-indonesia/"
        assert [(s.id, s.name, s.url) for s in watch.servers] == [
            ("0", "Default Server", "https://ok.ru/videoembed/111"),
            ("1", "Dailymotion", "https://www.dailymotion.com/embed/video/x8abc"),
            ("2", "Rumble", "https://rumble.com/embed/v2"),
        ]
        assert watch.current_server.url == "https://ok.ru/videoembed/111"

    def test_current_server_falls_back_to_first_mirror(self, extractor):
        html = WATCH_HTML.replace('<iframe src="https://ok.ru/videoembed/111"></iframe>', "")
        watch = extractor.extract("watch", html, slug="soul-land-2", episode=5)
        assert watch.servers[0].name == "Dailymotion"
        assert watch.current_server == watch.servers[0]

    def test_page_sections(self, extractor):
        watch = extractor.extract("watch", WATCH_HTML, slug="soul-land-2", episode=5)
        assert watch.description == "Tang Wulin awakens his martial soul."
        assert watch.series_info.title == "Soul Land 2"
        assert watch.series_info.rating.percentage == 85
        assert watch.series_info.information.country == "China"
        assert watch.episode_navigation.prev.url == "https://anichin.cafe/soul-land-2-episode-04-subtitle-indonesia/"
        assert watch.episode_navigation.all.text == "All Episodes"
        assert watch.episode_navigation.next.text == "Next"
        (related,) = watch.related_episodes
        assert related.posted_by == "Posted by: admin"
        assert related.released == "Released: December 29, 2023"
        assert related.thumbnail == "https://anichin.cafe/ep4.jpg"
        assert watch.meta.author == "admin"
        assert watch.meta.publisher.name == "Anichin"
        assert watch.meta.publisher.logo == "https://anichin.cafe/logo.png"

    def test_episode_number_defaults_to_request(self, extractor):
        watch = extractor.extract("watch", "<html></html>", slug="x", episode=12)
        assert watch.episode_number == "12"
        assert watch.servers == []
        assert watch.current_server.url == ""


class TestSeason:
    def test_cards(self, extractor):
        data = extractor.extract("season", SEASON_HTML, slug="winter-2024")
        assert data["season"] == {"year": "Winter 2024", "slug": "winter-2024"}
        assert data["pagination"]["has_pagination"] is False
        (card,) = data["lists"]
        assert card.title == "Perfect World"
        assert card.slug == "perfect-world"
        assert card.post_id == "321"
        assert card.studio.name == "Shenman"
        assert card.studio.color_class == "studio color-3"
        assert card.episodes_count == 52
        assert card.type == "ONA"
        assert card.rating == 8.7
        assert card.alternative_titles == "Wanmei Shijie"
        assert [genre.slug for genre in card.genres] == ["action"]


class TestAdvancedSearch:
    def test_text_mode_groups(self, extractor):
        data = extractor.extract("advanced_text", TEXT_MODE_HTML)
        assert data["mode"] == "text"
        assert data["title"] == "Donghua List"
        assert list(data["results"]) == ["hash", "A"]
        assert data["results"]["hash"][0] == {
            "title": "100.000 Years of Refining Qi",
            "slug": "100000-years-of-refining-qi",
            "rel_id": "111",
            "url": "https://anichin.cafe/seri/100000-years-of-refining-qi/",
        }
        assert [item["slug"] for item in data["results"]["A"]] == ["a-will-eternal", "against-the-gods"]

    def test_image_mode(self, extractor):
        data = extractor.extract("advanced_image", LISTING_HTML, filters={"status": "ongoing"})
        assert data["mode"] == "image"
        assert data["applied_filters"] == {"status": "ongoing"}
        assert len(data["lists"]) == 2
        assert data["pagination"].total_pages == 5

    def test_quickfilter_catalog(self, extractor):
        html = SIDEBAR_HTML.replace('<div id="sidebar">', '<div class="advancedsearch">', 1)
        data = extractor.extract("quickfilter", html)
        assert [item["value"] for item in data["checkbox_filters"]["genre"]["items"]] == ["action", "comedy"]
