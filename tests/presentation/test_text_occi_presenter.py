from __future__ import annotations

import pytest
from fastapi.responses import Response

from occi_codec.config.settings import DEFAULT_SERVER_HEADER, RenderingSettings
from occi_codec.observability.metrics import RENDER_TOTAL
from occi_codec.presentation.text_occi import (
    TextOcciParser,
    TextOcciPresenter,
    attribute_value,
    escape_header_text,
    unescape_header_text,
)
from occi_codec.utils.errors import CategoryParseError, ResponseParseError
from occi_codec.utils.logging import bind_correlation_id, reset_correlation_id

from tests.conftest import COMPUTE_ID, INFRA_SCHEME, INTERFACE_ID

COMPUTE_ACTIONS = "http://schemas.ogf.org/occi/infrastructure/compute/action#"


def _presenter(infra, **settings) -> TextOcciPresenter:
    return TextOcciPresenter(infra.registry, RenderingSettings(**settings))


def test_entity_renders_category_attribute_location_and_link_headers(
    infra, compute_resource
) -> None:
    response = _presenter(infra).render(compute_resource)

    assert response.status_code == 200
    assert response.body == b"ok"
    assert response.media_type == "text/occi"
    assert response.headers["category"] == f'compute; scheme="{INFRA_SCHEME}"; class="kind"'
    assert response.headers["x-occi-attribute"] == ", ".join(
        [
            f'occi.core.id="urn:uuid:{COMPUTE_ID}"',
            'occi.core.title="vm1"',
            "occi.compute.cores=2",
            'occi.compute.hostname="vm1.example.org"',
            "occi.compute.memory=4.5",
            'occi.compute.state="active"',
        ]
    )
    assert response.headers["x-occi-location"] == f"/compute/{COMPUTE_ID}"
    assert response.headers.getlist("link") == [
        f'</compute/{COMPUTE_ID}>; rel="{COMPUTE_ACTIONS}start"; title="start"',
        f'</compute/{COMPUTE_ID}>; rel="{COMPUTE_ACTIONS}stop"; title="stop"',
    ]
    assert response.headers["server"] == DEFAULT_SERVER_HEADER
    assert response.headers["accept"] == "text/occi, application/occi+json, application/json, text/plain"


def test_mixins_are_listed_after_the_kind(infra, network_resource) -> None:
    response = _presenter(infra).render(network_resource)
    assert response.headers["category"] == (
        f'network; scheme="{INFRA_SCHEME}"; class="kind", '
        'ipnetwork; scheme="http://schemas.ogf.org/occi/infrastructure/network#"; class="mixin"'
    )
    assert 'occi.core.title="lan"' in response.headers["x-occi-attribute"]
    assert 'occi.network.address="10.0.0.0/24"' in response.headers["x-occi-attribute"]


def test_link_renders_source_and_target_as_stored(infra, interface_link) -> None:
    response = _presenter(infra).render(interface_link)
    attributes = response.headers["x-occi-attribute"]
    assert attributes.startswith(
        f'occi.core.id="urn:uuid:{INTERFACE_ID}", '
        'occi.core.source="compute/1", occi.core.target="network/1"'
    )
    assert 'occi.networkinterface.interface="eth0"' in attributes
    assert response.headers["x-occi-location"] == f"/networkinterface/{INTERFACE_ID}"
    assert response.headers.getlist("link") == []


def test_single_entity_list_renders_like_the_entity(infra, compute_resource) -> None:
    presenter = _presenter(infra)
    single = presenter.render(compute_resource)
    listed = presenter.render([compute_resource])
    assert listed.body == single.body
    assert listed.headers.items() == single.headers.items()


def test_only_the_first_entity_fits_in_headers(infra, compute_resource, network_resource) -> None:
    response = _presenter(infra).render([compute_resource, network_resource])
    assert response.headers.getlist("category") == [
        f'compute; scheme="{INFRA_SCHEME}"; class="kind"'
    ]


def test_header_entity_limit_is_configurable(infra, compute_resource, network_resource) -> None:
    response = _presenter(infra, header_entity_limit=2).render([compute_resource, network_resource])
    assert len(response.headers.getlist("category")) == 2
    assert len(response.headers.getlist("x-occi-location")) == 2


def test_locations_render_one_header_each(infra) -> None:
    presenter = _presenter(infra, server_uri="http://localhost:8080")
    response = presenter.render(["/compute/1", "/compute/2"])
    assert response.body == b"ok"
    assert response.headers.getlist("x-occi-location") == [
        "http://localhost:8080/compute/1",
        "http://localhost:8080/compute/2",
    ]


def test_message_body_is_ok_for_success_only(infra) -> None:
    presenter = _presenter(infra)
    assert presenter.render("created").body == b"ok"
    response = presenter.render("resource not found", status_code=404)
    assert response.status_code == 404
    assert response.body == b"resource not found"


def test_passthrough_response_keeps_headers(infra) -> None:
    presenter = _presenter(infra)
    original = Response(content="gone", status_code=410, headers={"X-Extra": "1"})
    response = presenter.render(original, status_code=410)
    assert response.status_code == 410
    assert response.body == b"gone"
    assert response.headers["x-extra"] == "1"
    assert presenter.render(original).body == b"ok"


def test_error_uses_codec_error_status(infra) -> None:
    response = _presenter(infra).error(CategoryParseError("Kind is not defined"))
    assert response.status_code == 400
    assert response.body == b"Kind is not defined"


def test_unknown_value_cannot_be_represented(infra, compute_resource) -> None:
    presenter = _presenter(infra)
    with pytest.raises(ResponseParseError):
        presenter.render(42)
    with pytest.raises(ResponseParseError, match="unknown datatype collection"):
        presenter.render([compute_resource, 3.5])


def test_error_body_appends_problem_detail(infra, compute_resource) -> None:
    presenter = _presenter(infra)
    with pytest.raises(ResponseParseError) as excinfo:
        presenter.render([compute_resource, 3.5])
    response = presenter.error(excinfo.value)
    assert response.status_code == 500
    assert response.body.decode() == (
        "unknown datatype collection: float\nCannot represent this value as text/occi"
    )


def test_formatting_failure_becomes_internal_error(infra, compute_resource, monkeypatch) -> None:
    presenter = _presenter(infra)

    def boom(views, status):
        raise UnicodeEncodeError("latin-1", "€", 0, 1, "unsupported")

    monkeypatch.setattr(presenter, "_render_views", boom)
    counter = RENDER_TOTAL.labels("text/occi", "error", "500")
    before = counter._value.get()  # type: ignore[attr-defined]
    response = presenter.render(compute_resource)
    assert response.status_code == 500
    assert response.body.startswith(
        b"Error while rendering the response to text/occi representation -->"
    )
    assert counter._value.get() == before + 1  # type: ignore[attr-defined]


def test_failure_without_error_envelope_raises(infra, compute_resource, monkeypatch) -> None:
    presenter = _presenter(infra)

    def boom(*args):
        raise TypeError("cannot format")

    monkeypatch.setattr(presenter, "_render_views", boom)
    monkeypatch.setattr(presenter, "_render_error", boom)
    with pytest.raises(ResponseParseError):
        presenter.render(compute_resource)


def test_correlation_id_is_echoed(infra) -> None:
    token = bind_correlation_id("corr-42")
    try:
        response = _presenter(infra).render("ok")
    finally:
        reset_correlation_id(token)
    assert response.headers["x-correlation-id"] == "corr-42"


def test_attribute_value_quotes_strings_only() -> None:
    assert attribute_value("vm1") == '"vm1"'
    assert attribute_value(2) == "2"
    assert attribute_value(4.5) == "4.5"
    assert attribute_value(True) == "true"
    assert attribute_value('say "hi"') == '"say \\"hi\\""'


def test_rendered_headers_decode_back_to_the_entity(infra, compute_resource) -> None:
    compute_resource.mixins.append(infra.ipnetwork)
    compute_resource.title = 'vm1, the "primary" one'
    response = _presenter(infra).render(compute_resource)

    data = TextOcciParser().parse_headers(response.headers)

    assert data.kind == infra.compute.identifier
    assert data.mixins == {infra.ipnetwork.identifier}
    assert data.entity_id == COMPUTE_ID
    assert data.attributes == {
        "occi.core.id": f"urn:uuid:{COMPUTE_ID}",
        "occi.core.title": 'vm1, the "primary" one',
        "occi.compute.cores": "2",
        "occi.compute.hostname": "vm1.example.org",
        "occi.compute.memory": "4.5",
        "occi.compute.state": "active",
    }
    assert data.extra_locations == [f"/compute/{COMPUTE_ID}"]


def test_non_latin1_values_are_escaped_in_headers(infra, compute_resource) -> None:
    compute_resource.title = "serveur été — 主机 \U0001f680"
    infra.registry.register_location(compute_resource, "/compute/été")
    response = _presenter(infra).render(compute_resource)

    assert response.status_code == 200
    attributes = response.headers["x-occi-attribute"]
    assert attributes.isascii()
    assert 'occi.core.title="serveur \\u00e9t\\u00e9 \\u2014 \\u4e3b\\u673a \\ud83d\\ude80"' in attributes
    assert response.headers["x-occi-location"] == "/compute/%C3%A9t%C3%A9"

    data = TextOcciParser().parse_headers(response.headers)
    assert data.attributes["occi.core.title"] == "serveur été — 主机 \U0001f680"


def test_header_text_escaping() -> None:
    assert escape_header_text('a\\b "c"') == 'a\\\\b \\"c\\"'
    assert unescape_header_text('a\\\\b \\"c\\"') == 'a\\b "c"'
    assert unescape_header_text("caf\\u00e9") == "café"
