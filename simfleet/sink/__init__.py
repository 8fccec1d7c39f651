"""Telemetry sinks — where generated samples go."""

from simfleet.sink.base import BaseSink
from simfleet.sink.elasticsearch import ElasticsearchSink
from simfleet.sink.stream import JsonLinesSink

__all__ = ["BaseSink", "ElasticsearchSink", "JsonLinesSink"]
