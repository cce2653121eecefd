import pytest

from trendscan.config import MAX_PAGE_LIMIT, Settings, build_source_specs
from trendscan.errors import InvalidConfigurationError, InvalidRedditUrlError
from trendscan.models import SortMode, SourceSpec
from trendscan.utils import format_window, normalize_text, parse_reddit_url


@pytest.mark.parametrize(
    "url, expected",
    [
        ("https://www.reddit.com/r/OpenAI/comments/1abcde/gpt_release/", ("OpenAI", "1abcde")),
        ("https://old.reddit.com/r/LocalLLaMA/comments/xyz789", ("LocalLLaMA", "xyz789")),
        ("reddit.com/r/singularity/comments/q1w2e3/?utm_source=share", ("singularity", "q1w2e3")),
    ],
)
def test_parse_reddit_url(url, expected):
    assert parse_reddit_url(url) == expected


@pytest.mark.parametrize(
    "url",
    [
        "",
        "https://www.reddit.com/r/OpenAI/",
        "https://notreddit.example/r/OpenAI/comments/abc/",
    ],
)
def test_parse_reddit_url_rejects(url):
    with pytest.raises(InvalidRedditUrlError):
        parse_reddit_url(url)


def test_format_window():
    assert format_window(86400) == "24 hours"
    assert format_window(3600) == "1 hour"
    assert format_window(1800) == "30 minutes"
    assert format_window(45) == "45 seconds"


def test_normalize_text():
    assert normalize_text("  a\n\tb  ") == "a b"
    assert normalize_text(None) == ""


def test_build_source_specs_follows_configured_order():
    config = Settings(_env_file=None, SUBREDDITS=["OpenAI", " ", "artificial"], SORT_MODES=["top", "hot"])

    specs = build_source_specs(config)

    assert [spec.name for spec in specs] == ["OpenAI", "artificial"]
    assert specs[0].sort_modes == (SortMode.TOP, SortMode.HOT)
    assert specs[0].page_limit(SortMode.TOP) == 50


def test_build_source_specs_clamps_page_limit():
    config = Settings(_env_file=None, SUBREDDITS=["OpenAI"], POST_LIMIT_PER_SOURCE=500)
    assert build_source_specs(config)[0].page_limit(SortMode.HOT) == MAX_PAGE_LIMIT


def test_default_settings_cover_ten_subreddits():
    config = Settings(_env_file=None)
    assert len(build_source_specs(config)) == 10
    assert config.window_seconds == 86400
    assert config.TOP_N == 3


def test_build_source_specs_rejects_unknown_sort_mode():
    config = Settings(_env_file=None, SUBREDDITS=["OpenAI"], SORT_MODES=["hot", "best"])

    with pytest.raises(InvalidConfigurationError, match="best"):
        build_source_specs(config)


def test_build_source_specs_normalizes_sort_mode_case():
    config = Settings(_env_file=None, SUBREDDITS=["OpenAI"], SORT_MODES=["Hot", " TOP "])
    assert build_source_specs(config)[0].sort_modes == (SortMode.HOT, SortMode.TOP)


def test_settings_read_comma_separated_lists(monkeypatch):
    monkeypatch.setenv("SUBREDDITS", "OpenAI, artificial,,LocalLLaMA")
    monkeypatch.setenv("SORT_MODES", "hot,new")
    monkeypatch.setenv("CORS_ALLOW_ORIGINS", "http://localhost:3000")

    config = Settings(_env_file=None)

    assert config.SUBREDDITS == ["OpenAI", "artificial", "LocalLLaMA"]
    assert config.SORT_MODES == ["hot", "new"]
    assert config.CORS_ALLOW_ORIGINS == ["http://localhost:3000"]
    assert [spec.name for spec in build_source_specs(config)] == ["OpenAI", "artificial", "LocalLLaMA"]


def test_settings_read_json_lists(monkeypatch):
    monkeypatch.setenv("SUBREDDITS", '["OpenAI", "Bard"]')
    assert Settings(_env_file=None).SUBREDDITS == ["OpenAI", "Bard"]


def test_source_specs_are_hashable():
    spec = SourceSpec(name="OpenAI", sort_modes=(SortMode.HOT,), page_limits={SortMode.HOT: 25})
    same = SourceSpec(name="OpenAI", sort_modes=(SortMode.HOT,), page_limits=((SortMode.HOT, 25),))

    assert hash(spec) == hash(same)
    assert {spec, same} == {spec}
    assert spec.page_limit(SortMode.HOT) == 25
    assert spec.page_limit(SortMode.NEW) == 50


def test_built_source_specs_are_hashable():
    specs = build_source_specs(Settings(_env_file=None, SUBREDDITS=["OpenAI", "Bard"]))
    assert len(set(specs)) == 2
