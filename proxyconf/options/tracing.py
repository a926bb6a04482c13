"""Distributed tracing options."""
from dataclasses import dataclass, field
from typing import Any, Dict, List

from .. import defaults as d
from ..lookups import TracerType
from .base import clone_section, derived, section_to_dict


@dataclass
class StdoutOptions:
    pretty_print: bool = False

    def clone(self) -> "StdoutOptions":
        return clone_section(self)

    def to_dict(self) -> Dict[str, Any]:
        return section_to_dict(self)


@dataclass
class JaegerOptions:
    endpoint_type: str = d.DEFAULT_JAEGER_ENDPOINT_TYPE

    def clone(self) -> "JaegerOptions":
        return clone_section(self)

    def to_dict(self) -> Dict[str, Any]:
        return section_to_dict(self)


@dataclass
class TracingOptions:
    tracer_type: str = d.DEFAULT_TRACER_TYPE
    service_name: str = d.DEFAULT_TRACING_SERVICE_NAME
    collector_url: str = ""
    collector_user: str = ""
    collector_pass: str = ""
    sample_rate: float = d.DEFAULT_TRACING_SAMPLE_RATE
    tags: Dict[str, str] = field(default_factory=dict)
    omit_tags: List[str] = field(default_factory=list)
    stdout: StdoutOptions = field(default_factory=StdoutOptions)
    jaeger: JaegerOptions = field(default_factory=JaegerOptions)

    name: str = derived("")
    tracer_type_id: TracerType = derived(TracerType.NONE)

    def clone(self) -> "TracingOptions":
        return clone_section(self)

    def to_dict(self) -> Dict[str, Any]:
        return section_to_dict(self)
