from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from src.domain.models.gtfs import Connection

_UNREACHED = 2**31 - 1


@dataclass(frozen=True, slots=True)
class TripSegment:
    """Ride on one trip from `board` to `alight` (connections of that trip)."""

    board: Connection
    alight: Connection

    @property
    def trip_id(self) -> str:
        return self.board.trip_id


@dataclass(frozen=True, slots=True)
class CsaResult:
    arrival_time_s_by_stop: dict[str, int]
    segment_by_stop: dict[str, TripSegment]

    def arrival(self, stop_id: str) -> int | None:
        value = self.arrival_time_s_by_stop.get(stop_id)
        return None if value is None or value >= _UNREACHED else value


def earliest_arrival(
    connections: Iterable[Connection],
    *,
    initial_time_s_by_stop: dict[str, int],
    transfer_time_s: int = 0,
    latest_departure_s: int | None = None,
) -> CsaResult:
    """Connection Scan over connections sorted by departure.

    A trip, once boarded, stays usable for the rest of the scan, so riding
    through a stop never counts as a transfer. `transfer_time_s` applies
    only when changing between trips, not at the first boarding.
    """

    arrival: dict[str, int] = dict(initial_time_s_by_stop)
    segment_by_stop: dict[str, TripSegment] = {}
    boarded: dict[str, Connection] = {}

    for c in connections:
        if latest_departure_s is not None and c.dep_time_s > latest_departure_s:
            break

        board = boarded.get(c.trip_id)
        if board is None:
            reached = arrival.get(c.dep_stop_id, _UNREACHED)
            if c.dep_stop_id in segment_by_stop:
                reached += transfer_time_s
            if reached > c.dep_time_s:
                continue
            board = c
            boarded[c.trip_id] = c

        if c.arr_time_s < arrival.get(c.arr_stop_id, _UNREACHED):
            arrival[c.arr_stop_id] = c.arr_time_s
            segment_by_stop[c.arr_stop_id] = TripSegment(board=board, alight=c)

    return CsaResult(arrival_time_s_by_stop=arrival, segment_by_stop=segment_by_stop)


def reconstruct_segments(result: CsaResult, *, dest_stop_id: str) -> list[TripSegment]:
    """Trip segments used to reach `dest_stop_id`, in travel order."""

    out: list[TripSegment] = []
    seen: set[str] = set()
    cur = dest_stop_id
    while cur in result.segment_by_stop and cur not in seen:
        seen.add(cur)
        segment = result.segment_by_stop[cur]
        out.append(segment)
        cur = segment.board.dep_stop_id
    out.reverse()
    return out
