from __future__ import annotations

from dataclasses import dataclass, field
from urllib.parse import parse_qsl, quote


def encode_query_value(value: str) -> str:
    """Percent-encode everything outside [A-Za-z0-9-_.~], uppercase hex."""

    return quote(value, safe="")


@dataclass(frozen=True, slots=True)
class ApiRequest:
    """Canonical endpoint request: a path plus ordered, decoded query params."""

    path: str
    params: tuple[tuple[str, str], ...] = field(default_factory=tuple)

    @classmethod
    def parse(cls, path_and_query: str) -> "ApiRequest":
        path, _, query = path_and_query.partition("?")
        path, _, _ = path.partition("#")
        query, _, _ = query.partition("#")
        return cls(path=path, params=tuple(parse_qsl(query, keep_blank_values=True)))

    def get(self, name: str, default: str | None = None) -> str | None:
        for key, value in self.params:
            if key == name:
                return value
        return default

    def get_all(self, name: str) -> list[str]:
        return [value for key, value in self.params if key == name]

    @property
    def query_string(self) -> str:
        return "&".join(f"{k}={encode_query_value(v)}" for k, v in self.params)

    @property
    def url(self) -> str:
        query = self.query_string
        return f"{self.path}?{query}" if query else self.path
