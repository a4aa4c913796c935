"""OPC-UA address-space crawling and value mapping."""

from opcbridge.opcua.browsing import RemoteNode
from opcbridge.opcua.client import OPCUAConfig, OPCUASession, RemoteSession
from opcbridge.opcua.crawler import AddressSpaceCrawler, CrawlerOptions, SubscriptionBinding
from opcbridge.opcua.mapping import (
    VALUE_TYPE_NAME,
    map_value,
    map_value_type,
    timestamp_to_millis,
    variant_to_json,
)

__all__ = [
    "AddressSpaceCrawler",
    "CrawlerOptions",
    "OPCUAConfig",
    "OPCUASession",
    "RemoteNode",
    "RemoteSession",
    "SubscriptionBinding",
    "VALUE_TYPE_NAME",
    "map_value",
    "map_value_type",
    "timestamp_to_millis",
    "variant_to_json",
]
