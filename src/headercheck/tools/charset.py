from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol

import chardet


@dataclass(frozen=True)
class CharsetMatch:
  name: str
  confidence: int  # 0..100


class CharsetDetector(Protocol):
  def detect(self, sample: bytes) -> Optional[CharsetMatch]:
    ...


class ChardetDetector:
  """Statistical encoding guess over a byte sample using chardet."""

  def detect(self, sample: bytes) -> Optional[CharsetMatch]:
    if not sample:
      return None
    result = chardet.detect(sample)
    name = result.get("encoding")
    if not name:
      return None
    confidence = int(round(float(result.get("confidence") or 0.0) * 100))
    return CharsetMatch(name=name, confidence=confidence)
