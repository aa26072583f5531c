"""Domain-list ingestion for uploads and batch files.

Brief:
  Uploaded documents are split on line breaks and then on commas. The
  resulting names are handed to the batch checker only when the list stays
  within the configured ceilings.
"""

from __future__ import annotations

import logging
from typing import List

logger = logging.getLogger("portfoliocheck.ingest")

DEFAULT_MAX_DOMAINS = 10000
DEFAULT_MAX_BYTES = 1024 * 1024


class DomainLimitExceeded(Exception):
    """
    Brief: Uploaded list holds more names than allowed.

    Inputs:
    - max_domains: configured ceiling

    Outputs:
    - Exception instance whose str() is the client-facing message
    """

    def __init__(self, max_domains: int) -> None:
        self.max_domains = max_domains
        super().__init__(
            f"Domain limit exceeded, max file size is {max_domains} domains"
        )


class UploadTooLarge(Exception):
    """
    Brief: Uploaded document is larger than the byte ceiling.

    Inputs:
    - size: bytes received; callers reading at most max_bytes + 1 see that cap
    - max_bytes: configured ceiling

    Outputs:
    - Exception instance
    """

    def __init__(self, size: int, max_bytes: int) -> None:
        self.size = size
        self.max_bytes = max_bytes
        super().__init__(f"upload exceeds limit of {max_bytes} bytes")


def decode_upload(data: bytes, max_bytes: int = DEFAULT_MAX_BYTES) -> str:
    """Brief: Decode an uploaded document as UTF-8 after checking its size.

    Inputs:
      - data: raw uploaded bytes.
      - max_bytes: byte ceiling.

    Outputs:
      - str with undecodable bytes replaced.

    Raises:
      - UploadTooLarge when len(data) > max_bytes.
    """

    if len(data) > max_bytes:
        raise UploadTooLarge(len(data), max_bytes)
    return data.decode("utf-8", errors="replace")


def split_domain_list(text: str, max_domains: int = DEFAULT_MAX_DOMAINS) -> List[str]:
    """Brief: Split a domain list document into names, in document order.

    Inputs:
      - text: document text; names separated by newlines and/or commas.
      - max_domains: maximum number of names accepted.

    Outputs:
      - list[str]: non-blank tokens, untrimmed.

    Raises:
      - DomainLimitExceeded as soon as the count passes max_domains.

    Example:
      >>> split_domain_list("a.test,b.test\\nc.test\\n")
      ['a.test', 'b.test', 'c.test']
    """

    names: List[str] = []
    for line in text.split("\n"):
        for token in line.split(","):
            if not token.strip():
                continue
            if len(names) >= max_domains:
                logger.warning("Rejected domain list: more than %d names", max_domains)
                raise DomainLimitExceeded(max_domains)
            names.append(token)
    return names
