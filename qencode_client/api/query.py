"""Encoding query dataclasses for POST /v1/start_encode2.

WHY: The ``query`` form field of start_encode2 carries a nested JSON
document describing the outputs to produce: formats, where to deliver
them, and the adaptive stream variants. Building it from dataclasses
keeps field names in one place and makes typos fail loudly.

HOW: Plain dataclasses with to_dict() producing the exact wire shape
(https://docs.qencode.com/api-reference/transcoding/#starting-a-task).
StartTaskQuery.to_json() is the serialization the client sends.
from_dict() is the inverse, for callers that keep query documents as
JSON and want them as dataclasses; start_task also accepts such a
document directly as a mapping.

RULES:
- Field order in to_dict() matches the wire document
- Format.video_codec, Format.audio_bitrate and Stream.chunklist_name are
  omitted when empty; every other field is always present
- to_json() is compact (no whitespace)
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, List

OUTPUT_HLS = "advanced_hls"
"""Output type for adaptive HLS encoding."""

SEPARATE_AUDIO_DISABLED = 0
SEPARATE_AUDIO_ENABLED = 1

OPTIMIZE_BITRATE_DISABLED = 0
OPTIMIZE_BITRATE_ENABLED = 1


@dataclass
class Destination:
    """Where encoded outputs are delivered once the task completes."""

    url: str = ""
    key: str = ""
    secret: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"url": self.url, "key": self.key, "secret": self.secret}

    @classmethod
    def from_dict(cls, data: dict) -> Destination:
        return cls(
            url=data.get("url", ""),
            key=data.get("key", ""),
            secret=data.get("secret", ""),
        )


@dataclass
class Stream:
    """A single rendition of an adaptive stream format."""

    video_codec: str = ""
    height: int = 0
    audio_bitrate: int = 0
    optimize_bitrate: int = OPTIMIZE_BITRATE_DISABLED
    chunklist_name: str = ""

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "video_codec": self.video_codec,
            "height": self.height,
            "audio_bitrate": self.audio_bitrate,
            "optimize_bitrate": self.optimize_bitrate,
        }
        if self.chunklist_name:
            d["chunklist_name"] = self.chunklist_name
        return d

    @classmethod
    def from_dict(cls, data: dict) -> Stream:
        return cls(
            video_codec=data.get("video_codec", ""),
            height=data.get("height", 0),
            audio_bitrate=data.get("audio_bitrate", 0),
            optimize_bitrate=data.get("optimize_bitrate", OPTIMIZE_BITRATE_DISABLED),
            chunklist_name=data.get("chunklist_name", ""),
        )


@dataclass
class Format:
    """One output format of the encoding task.

    RULES:
    - output: output type, e.g. OUTPUT_HLS
    - separate_audio: SEPARATE_AUDIO_DISABLED or SEPARATE_AUDIO_ENABLED
    - segment_duration: seconds per segment for segmented outputs
    - stream: rendition list for adaptive outputs
    """

    output: str = ""
    separate_audio: int = SEPARATE_AUDIO_DISABLED
    video_codec: str = ""
    audio_bitrate: str = ""
    segment_duration: int = 0
    destination: Destination = field(default_factory=Destination)
    stream: List[Stream] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "output": self.output,
            "separate_audio": self.separate_audio,
        }
        if self.video_codec:
            d["video_codec"] = self.video_codec
        if self.audio_bitrate:
            d["audio_bitrate"] = self.audio_bitrate
        d["segment_duration"] = self.segment_duration
        d["destination"] = self.destination.to_dict()
        d["stream"] = [s.to_dict() for s in self.stream]
        return d

    @classmethod
    def from_dict(cls, data: dict) -> Format:
        return cls(
            output=data.get("output", ""),
            separate_audio=data.get("separate_audio", SEPARATE_AUDIO_DISABLED),
            video_codec=data.get("video_codec", ""),
            audio_bitrate=data.get("audio_bitrate", ""),
            segment_duration=data.get("segment_duration", 0),
            destination=Destination.from_dict(data.get("destination") or {}),
            stream=[Stream.from_dict(s) for s in data.get("stream") or []],
        )


@dataclass
class Query:
    """Body of the encoding query: source, outputs, and callback."""

    format: List[Format] = field(default_factory=list)
    encoder_version: str = ""
    source: str = ""
    callback_url: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "format": [f.to_dict() for f in self.format],
            "encoder_version": self.encoder_version,
            "source": self.source,
            "callback_url": self.callback_url,
        }

    @classmethod
    def from_dict(cls, data: dict) -> Query:
        return cls(
            format=[Format.from_dict(f) for f in data.get("format") or []],
            encoder_version=data.get("encoder_version", ""),
            source=data.get("source", ""),
            callback_url=data.get("callback_url", ""),
        )


@dataclass
class StartTaskQuery:
    """The ``query`` form parameter of start_encode2: ``{"query": {...}}``."""

    query: Query = field(default_factory=Query)

    def to_dict(self) -> dict[str, Any]:
        return {"query": self.query.to_dict()}

    def to_json(self) -> str:
        """Serialize to the compact JSON string sent in the form body.

        Raises:
            TypeError: a field holds a value JSON cannot represent.
            ValueError: a float field is NaN or infinite.
        """
        return json.dumps(self.to_dict(), separators=(",", ":"), allow_nan=False)

    @classmethod
    def from_dict(cls, data: dict) -> StartTaskQuery:
        return cls(query=Query.from_dict(data.get("query") or {}))
