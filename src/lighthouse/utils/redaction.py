from __future__ import annotations

from dataclasses import dataclass

from yarl import URL


@dataclass
class Redactor:
    enabled: bool = True
    visible: int = 4

    def redact_token(self, token: str) -> str:
        if not self.enabled or len(token) <= self.visible:
            return token
        return f"{token[: self.visible]}..."

    def redact_url(self, url: URL | str) -> str:
        """Hide the credential segment of ``http://host/api/<token>/...``."""
        if not self.enabled:
            return str(url)
        parsed = URL(url) if isinstance(url, str) else url
        segments = parsed.raw_path.split("/")
        if len(segments) > 2 and segments[1] == "api" and segments[2]:
            segments[2] = self.redact_token(segments[2])
            return str(parsed.with_path("/".join(segments), encoded=True))
        return str(parsed)


_default = Redactor()


def redact_url(url: URL | str) -> str:
    return _default.redact_url(url)


def redact_token(token: str) -> str:
    return _default.redact_token(token)
