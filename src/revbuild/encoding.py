"""Output encodings supported by :meth:`Builder.render`.

The buffer is always built as ``str``; only the finished text is encoded,
so a document is transcoded in one pass and never partially.
"""

from __future__ import annotations

from enum import Enum
from typing import Union

from revbuild.exceptions import ConfigError


class OutputEncoding(Enum):
    UTF8 = "UTF-8"
    EUC = "EUC"
    SJIS = "SJIS"
    JIS = "JIS"

    @classmethod
    def parse(cls, value: Union[str, OutputEncoding, None]) -> OutputEncoding:
        """Accept the enum itself or a case-insensitive name."""
        if value is None:
            return cls.UTF8
        if isinstance(value, cls):
            return value
        key = str(value).strip().upper().replace("_", "-")
        aliases = {"UTF8": "UTF-8", "EUC-JP": "EUC", "SHIFT-JIS": "SJIS", "ISO-2022-JP": "JIS"}
        key = aliases.get(key, key)
        for member in cls:
            if member.value == key:
                return member
        raise ConfigError(
            f"Unknown output encoding '{value}'. "
            f"Available: {', '.join(m.value for m in cls)}"
        )

    @property
    def codec(self) -> str:
        return _CODECS[self]


_CODECS = {
    OutputEncoding.UTF8: "utf-8",
    OutputEncoding.EUC: "euc_jp",
    # cp932 covers the vendor extensions (circled digits etc.) authors expect
    OutputEncoding.SJIS: "cp932",
    OutputEncoding.JIS: "iso2022_jp",
}


def transcode(text: str, encoding: OutputEncoding, errors: str = "replace") -> bytes:
    """Encode *text* for *encoding*; unencodable characters follow *errors*."""
    return text.encode(encoding.codec, errors=errors)
