from __future__ import annotations

import pytest

from occi_codec.config.settings import CodecSettings, LoggingSettings, RenderingSettings
from occi_codec.presentation.json_occi import JsonOcciParser, JsonOcciPresenter
from occi_codec.presentation.negotiation import (
    accepted_types,
    codec_for,
    parser_for,
    select_media_type,
)
from occi_codec.presentation.text_occi import TextOcciParser, TextOcciPresenter


@pytest.mark.parametrize(
    ("header", "expected"),
    [
        (None, "text/occi"),
        ("", "text/occi"),
        ("text/occi", "text/occi"),
        ("application/occi+json", "application/occi+json"),
        ("application/json; charset=utf-8", "application/json"),
        ("text/html, application/occi+json;q=0.9", "application/occi+json"),
        ("text/occi;q=0.2, application/json;q=0.8", "application/json"),
        ("application/json;q=0, text/plain", "text/plain"),
        ("application/*", "application/occi+json"),
        ("*/*", "text/occi"),
        ("image/png", "text/occi"),
    ],
)
def test_select_media_type(header, expected) -> None:
    assert select_media_type(header) == expected


def test_codec_for_json_media_types(infra) -> None:
    settings = CodecSettings(logging=LoggingSettings(correlation_id_header="X-Request-ID"))
    parser, presenter = codec_for("application/json", infra.registry, settings)
    assert isinstance(parser, JsonOcciParser)
    assert isinstance(presenter, JsonOcciPresenter)
    assert parser.media_type == presenter.media_type == "application/json"
    assert presenter.settings is settings.rendering


def test_codec_for_text_media_types(infra) -> None:
    parser, presenter = codec_for("text/plain", infra.registry, CodecSettings())
    assert isinstance(parser, TextOcciParser)
    assert isinstance(presenter, TextOcciPresenter)


def test_parsers_are_shared() -> None:
    assert parser_for("application/occi+json") is parser_for("application/occi+json")
    assert isinstance(parser_for(None), TextOcciParser)


def test_accepted_types_lists_supported_media_types() -> None:
    settings = RenderingSettings(accepted_media_types=["text/occi", "application/occi+json"])
    assert accepted_types(settings) == "text/occi, application/occi+json"


def test_presenters_advertise_the_configured_accept_header(infra) -> None:
    settings = RenderingSettings(accepted_media_types=["text/occi", "application/json"])
    for presenter in (
        TextOcciPresenter(infra.registry, settings),
        JsonOcciPresenter(infra.registry, settings),
    ):
        response = presenter.render("ok")
        assert response.headers["accept"] == accepted_types(settings)
        assert response.headers["accept"] == "text/occi, application/json"
