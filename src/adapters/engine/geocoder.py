from __future__ import annotations

import logging
import re
import threading
import unicodedata
from collections import OrderedDict
from collections.abc import Iterable
from dataclasses import dataclass, field

from src.adapters.engine.stop_index import StopIndex
from src.adapters.engine.street_network import StreetNetwork
from src.app.ports.output import IEndpointHandler
from src.app.ports.output.engine_api import LocationType, Match, Mode
from src.app.services.request_synthesizer import parse_place
from src.domain.algorithms.geo_utils import haversine_distance_m
from src.domain.models import ApiRequest, Stop

logger = logging.getLogger(__name__)

_WORD_RE = re.compile(r"\w+", re.UNICODE)


class NameFormatter:
    """Normalizes names and queries for matching (case, accents, punctuation)."""

    def normalize(self, text: str) -> str:
        decomposed = unicodedata.normalize("NFKD", text.casefold())
        return "".join(ch for ch in decomposed if not unicodedata.combining(ch))

    def tokens(self, text: str) -> list[tuple[str, int, int]]:
        """(normalized token, start, length) for each word of `text`."""

        return [
            (self.normalize(m.group()), m.start(), m.end() - m.start())
            for m in _WORD_RE.finditer(text)
        ]


@dataclass(slots=True)
class QueryCache:
    """Bounded LRU of normalized query → matches, shared across request threads."""

    capacity: int = 256
    _entries: OrderedDict[str, list[Match]] = field(
        default_factory=OrderedDict, init=False, repr=False
    )
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    def get(self, key: str) -> list[Match] | None:
        with self._lock:
            value = self._entries.get(key)
            if value is not None:
                self._entries.move_to_end(key)
            return value

    def put(self, key: str, value: list[Match]) -> None:
        with self._lock:
            self._entries[key] = value
            self._entries.move_to_end(key)
            while len(self._entries) > self.capacity:
                self._entries.popitem(last=False)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


@dataclass(frozen=True, slots=True)
class PlaceEntry:
    stop: Stop
    name_tokens: tuple[str, ...]
    importance: float
    modes: tuple[Mode, ...]


@dataclass(slots=True)
class StopNameIndex:
    """Token → stop lookup over de-duplicated stop names."""

    entries: tuple[PlaceEntry, ...]
    _by_token: dict[str, list[int]] = field(default_factory=dict, init=False, repr=False)

    def __post_init__(self) -> None:
        for i, entry in enumerate(self.entries):
            for token in set(entry.name_tokens):
                self._by_token.setdefault(token, []).append(i)

    @classmethod
    def build(
        cls,
        stops: Iterable[Stop],
        formatter: NameFormatter,
        *,
        departures_by_stop: dict[str, int] | None = None,
        modes_by_stop: dict[str, set[Mode]] | None = None,
        merge_distance_m: float = 1000.0,
    ) -> "StopNameIndex":
        departures_by_stop = departures_by_stop or {}
        modes_by_stop = modes_by_stop or {}
        busiest = max(departures_by_stop.values(), default=0) or 1

        # Platforms of one station share a name; keep the busiest per cluster.
        groups: dict[str, list[list[Stop]]] = {}
        for stop in sorted(stops, key=lambda s: (-departures_by_stop.get(s.id, 0), s.id)):
            key = formatter.normalize(stop.name)
            clusters = groups.setdefault(key, [])
            for cluster in clusters:
                if haversine_distance_m(cluster[0].location, stop.location) <= merge_distance_m:
                    cluster.append(stop)
                    break
            else:
                clusters.append([stop])

        entries: list[PlaceEntry] = []
        for clusters in groups.values():
            for cluster in clusters:
                head = cluster[0]
                modes: set[Mode] = set()
                departures = 0
                for stop in cluster:
                    modes |= modes_by_stop.get(stop.id, set())
                    departures += departures_by_stop.get(stop.id, 0)
                entries.append(
                    PlaceEntry(
                        stop=head,
                        name_tokens=tuple(t for t, _, _ in formatter.tokens(head.name)),
                        importance=min(1.0, departures / busiest),
                        modes=tuple(sorted(modes, key=lambda m: m.value)),
                    )
                )
        entries.sort(key=lambda e: e.stop.id)
        return cls(entries=tuple(entries))

    def candidates(self, token: str, *, prefix: bool) -> set[int]:
        if not prefix:
            return set(self._by_token.get(token, ()))
        out: set[int] = set()
        for name_token, ids in self._by_token.items():
            if name_token.startswith(token):
                out.update(ids)
        return out


def _stop_match(
    entry: PlaceEntry, *, score: float, tokens: list[list[int]] | None = None
) -> Match:
    return Match(
        type=LocationType.STOP,
        name=entry.stop.name,
        id=entry.stop.id,
        lat=entry.stop.location.lat,
        lon=entry.stop.location.lon,
        score=score,
        tokens=tokens or [],
        areas=[],
        modes=list(entry.modes) or None,
        importance=entry.importance,
    )


@dataclass(slots=True)
class LocalGeocodeEndpoint(IEndpointHandler):
    index: StopNameIndex
    formatter: NameFormatter
    cache: QueryCache
    max_results: int = 10

    def __call__(self, request: ApiRequest) -> list[Match]:
        text = request.get("text") or ""
        query_tokens = self.formatter.tokens(text)
        if not query_tokens:
            return []

        key = " ".join(t for t, _, _ in query_tokens)
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        matched_spans: dict[int, list[list[int]]] = {}
        last = len(query_tokens) - 1
        for i, (token, start, length) in enumerate(query_tokens):
            # The last word may still be being typed.
            hits = self.index.candidates(token, prefix=i == last and len(token) >= 2)
            for entry_id in hits:
                matched_spans.setdefault(entry_id, []).append([start, length])

        scored: list[tuple[float, PlaceEntry, list[list[int]]]] = []
        for entry_id, spans in matched_spans.items():
            entry = self.index.entries[entry_id]
            coverage = len(spans) / len(query_tokens)
            precision = len(spans) / max(1, len(entry.name_tokens))
            score = coverage * (0.5 + 0.5 * min(1.0, precision)) + 0.05 * entry.importance
            scored.append((score, entry, spans))

        scored.sort(key=lambda x: (-x[0], x[1].stop.name, x[1].stop.id))
        results = [
            _stop_match(entry, score=round(score, 6), tokens=spans)
            for score, entry, spans in scored[: self.max_results]
        ]
        self.cache.put(key, results)
        logger.debug("Geocode %r: %d results", text, len(results))
        return results


@dataclass(slots=True)
class LocalReverseGeocodeEndpoint(IEndpointHandler):
    """Nearest stops to a `lat,lon` place, plus the nearest named street."""

    stops: StopIndex
    index: StopNameIndex
    network: StreetNetwork
    radius_m: float = 1000.0
    max_results: int = 5

    def __call__(self, request: ApiRequest) -> list[Match]:
        place = parse_place(request.get("place"))
        if place is None:
            raise ValueError("place must be given as 'lat,lon'")

        entry_by_stop = {e.stop.id: e for e in self.index.entries}
        found: list[tuple[float, Match]] = []
        for distance, stop in self.stops.nearest(
            place, radius_m=self.radius_m, limit=self.max_results
        ):
            entry = entry_by_stop.get(stop.id) or PlaceEntry(
                stop=stop, name_tokens=(), importance=0.0, modes=()
            )
            found.append((distance, _stop_match(entry, score=round(distance, 1))))

        street = self.network.street_name(place)
        if street:
            node = self.network.nearest_node(place)
            at = self.network.node_point(node)
            distance = haversine_distance_m(place, at)
            found.append(
                (
                    distance,
                    Match(
                        type=LocationType.ADDRESS,
                        name=street,
                        id=f"street/{node}",
                        lat=at.lat,
                        lon=at.lon,
                        score=round(distance, 1),
                        street=street,
                    ),
                )
            )

        found.sort(key=lambda x: (x[0], x[1].id))
        return [m for _, m in found[: self.max_results]]
