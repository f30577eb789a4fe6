from __future__ import annotations

from dataclasses import dataclass

import pytest

from occi_codec.config.settings import RenderingSettings
from occi_codec.models.core import (
    OCCI_CORE_SCHEME,
    Action,
    Attribute,
    AttributeState,
    Kind,
    Link,
    Mixin,
    Resource,
)
from occi_codec.models.registry import ModelRegistry

INFRA_SCHEME = "http://schemas.ogf.org/occi/infrastructure#"
COMPUTE_ACTION_SCHEME = "http://schemas.ogf.org/occi/infrastructure/compute/action#"
NETWORK_ACTION_SCHEME = "http://schemas.ogf.org/occi/infrastructure/network/action#"

COMPUTE_ID = "f88486b7-0632-482d-a184-a9195733ddd0"
NETWORK_ID = "a7f5d5ad-a1c0-42f5-b0f4-5e25b54e11b5"
INTERFACE_ID = "0b1a8ee8-2b1f-4e67-ad5c-5b9c2e6a7f42"


@dataclass(slots=True)
class Infrastructure:
    registry: ModelRegistry
    entity: Kind
    resource: Kind
    link: Kind
    compute: Kind
    network: Kind
    networkinterface: Kind
    ipnetwork: Mixin
    start: Action
    stop: Action
    up: Action
    down: Action

    @property
    def kinds(self) -> list[Kind]:
        return [
            self.entity,
            self.resource,
            self.link,
            self.compute,
            self.network,
            self.networkinterface,
        ]


@pytest.fixture()
def infra() -> Infrastructure:
    entity = Kind(
        scheme=OCCI_CORE_SCHEME,
        term="entity",
        title="Entity",
        attributes=[
            Attribute("occi.core.id", "string", mutable=False, required=True),
            Attribute("occi.core.title", "string"),
        ],
    )
    resource = Kind(
        scheme=OCCI_CORE_SCHEME,
        term="resource",
        title="Resource",
        attributes=[Attribute("occi.core.summary", "string")],
        parent=entity,
    )
    link = Kind(
        scheme=OCCI_CORE_SCHEME,
        term="link",
        title="Link",
        attributes=[
            Attribute("occi.core.source", "string", required=True),
            Attribute("occi.core.target", "string", required=True),
        ],
        parent=entity,
    )
    start = Action(COMPUTE_ACTION_SCHEME, "start", "Start the system")
    stop = Action(
        COMPUTE_ACTION_SCHEME,
        "stop",
        "Stop the system",
        attributes=[Attribute("method", "string", default="graceful")],
    )
    compute = Kind(
        scheme=INFRA_SCHEME,
        term="compute",
        title="Compute Resource",
        attributes=[
            Attribute("occi.compute.cores", "integer", default="1"),
            Attribute("occi.compute.hostname", "string"),
            Attribute("occi.compute.memory", "float", description="Memory in GiB"),
            Attribute("occi.compute.state", "enum", mutable=False, required=True),
            Attribute("occi.compute.ephemeral", "boolean", default="false"),
        ],
        actions=[start, stop],
        parent=resource,
    )
    up = Action(NETWORK_ACTION_SCHEME, "up", "Bring the network up")
    down = Action(NETWORK_ACTION_SCHEME, "down", "Take the network down")
    network = Kind(
        scheme=INFRA_SCHEME,
        term="network",
        title="Network Resource",
        attributes=[
            Attribute("occi.network.vlan", "integer"),
            Attribute("occi.network.label", "string"),
            Attribute("occi.network.state", "enum", mutable=False),
        ],
        actions=[up, down],
        parent=resource,
    )
    networkinterface = Kind(
        scheme=INFRA_SCHEME,
        term="networkinterface",
        title="Network Interface",
        attributes=[
            Attribute("occi.networkinterface.interface", "string", mutable=False),
            Attribute("occi.networkinterface.mac", "string"),
        ],
        parent=link,
    )
    ipnetwork = Mixin(
        scheme="http://schemas.ogf.org/occi/infrastructure/network#",
        term="ipnetwork",
        title="IP Networking Mixin",
        attributes=[Attribute("occi.network.address", "string")],
    )

    registry = ModelRegistry()
    registry.register_extension("core", [entity, resource, link])
    registry.register_extension(
        "infrastructure", [compute, network, networkinterface, ipnetwork]
    )
    return Infrastructure(
        registry=registry,
        entity=entity,
        resource=resource,
        link=link,
        compute=compute,
        network=network,
        networkinterface=networkinterface,
        ipnetwork=ipnetwork,
        start=start,
        stop=stop,
        up=up,
        down=down,
    )


@pytest.fixture()
def compute_resource(infra: Infrastructure) -> Resource:
    return Resource(
        id=COMPUTE_ID,
        kind=infra.compute,
        attributes=[
            AttributeState("occi.core.id", COMPUTE_ID),
            AttributeState("occi.core.title", "vm1"),
            AttributeState("occi.compute.cores", "2"),
            AttributeState("occi.compute.hostname", "vm1.example.org"),
            AttributeState("occi.compute.memory", "4.5"),
            AttributeState("occi.compute.state", "active"),
        ],
    )


@pytest.fixture()
def network_resource(infra: Infrastructure) -> Resource:
    return Resource(
        id=NETWORK_ID,
        kind=infra.network,
        mixins=[infra.ipnetwork],
        attributes=[
            AttributeState("occi.network.vlan", "12"),
            AttributeState("occi.network.label", "private"),
            AttributeState("occi.network.address", "10.0.0.0/24"),
        ],
        title="lan",
    )


@pytest.fixture()
def interface_link(
    infra: Infrastructure, compute_resource: Resource, network_resource: Resource
) -> Link:
    infra.registry.register_location(compute_resource, "compute/1")
    infra.registry.register_location(network_resource, "network/1")
    link = Link(
        id=INTERFACE_ID,
        kind=infra.networkinterface,
        attributes=[
            AttributeState("occi.core.source", "compute/1"),
            AttributeState("occi.core.target", "network/1"),
            AttributeState("occi.networkinterface.interface", "eth0"),
        ],
        source=compute_resource,
        target=network_resource,
    )
    compute_resource.links.append(link)
    return link


@pytest.fixture()
def rendering() -> RenderingSettings:
    return RenderingSettings()
