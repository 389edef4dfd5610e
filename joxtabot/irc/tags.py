"""Decoding of the ``@key=value;...`` tag segment."""

from __future__ import annotations

from ..errors.internal import TagDecodeError
from .models import EmotePosition, Tags, TagValue

IGNORED_TAGS = frozenset({"client-nonce", "flags"})


def decode_tags(raw: str) -> Tags:
    """Decode a raw tag segment (without the leading ``@``).

    ``badges`` and ``badge-info`` become ``{name: version}``, ``emotes``
    becomes ``{emote_id: [EmotePosition, ...]}``, ``emote-sets`` becomes a list
    of set ids. Every other tag keeps its raw string. Empty values decode to
    None and ignored tags are dropped.

    Raises:
        TagDecodeError: If a badge or emote entry misses its delimiter or an
            emote position is not numeric.
    """
    tags: Tags = {}
    for pair in raw.split(";"):
        if not pair:
            continue
        name, _, value = pair.partition("=")
        if name in IGNORED_TAGS:
            continue
        tags[name] = _decode_value(name, value or None)
    return tags


def _decode_value(name: str, value: str | None) -> TagValue:
    if value is None:
        return None
    if name in ("badges", "badge-info"):
        return _decode_badges(name, value)
    if name == "emotes":
        return _decode_emotes(value)
    if name == "emote-sets":
        return value.split(",")
    return value


def _decode_badges(name: str, value: str) -> dict[str, str]:
    # badges=staff/1,broadcaster/1,turbo/1
    badges: dict[str, str] = {}
    for entry in value.split(","):
        badge, sep, version = entry.partition("/")
        if not sep:
            raise TagDecodeError(
                f"Badge entry without version: {entry!r}", data={"tag": name}
            )
        badges[badge] = version
    return badges


def _decode_emotes(value: str) -> dict[str, list[EmotePosition]]:
    # emotes=25:0-4,12-16/1902:6-10
    emotes: dict[str, list[EmotePosition]] = {}
    for segment in value.split("/"):
        emote_id, sep, positions = segment.partition(":")
        if not sep or not positions:
            raise TagDecodeError(
                f"Emote entry without positions: {segment!r}", data={"tag": "emotes"}
            )
        emotes[emote_id] = [_decode_position(p) for p in positions.split(",")]
    return emotes


def _decode_position(position: str) -> EmotePosition:
    start, sep, end = position.partition("-")
    try:
        if not sep:
            raise ValueError("missing '-'")
        return EmotePosition(start=int(start), end=int(end))
    except ValueError as e:
        raise TagDecodeError(
            f"Invalid emote position {position!r}: {e}", data={"tag": "emotes"}
        ) from e


__all__ = ["IGNORED_TAGS", "decode_tags"]
