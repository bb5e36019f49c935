"""
=============================================================================
HTTP STATUS CODES
=============================================================================

A worker only ever answers with one of two statuses:

    ┌────────┬──────────────────────────────────────────────────────────────┐
    │  200   │ OK         - the resolved resource exists                    │
    ├────────┼──────────────────────────────────────────────────────────────┤
    │  404   │ Not Found  - the resolved resource does not exist            │
    └────────┴──────────────────────────────────────────────────────────────┘

The status is decided once, from existence alone, before the body is read.

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes with reason phrases.

        >>> HTTPStatus.OK == 200
        True
        >>> HTTPStatus.NOT_FOUND.phrase
        'Not Found'
    """

    OK = 200
    NOT_FOUND = 404

    @property
    def phrase(self) -> str:
        """
        Reason phrase as it appears in the status line:

            HTTP/1.1 404 Not Found
                     ─── ─────────
                      │      └── phrase
                      └───────── code
        """
        return _STATUS_PHRASES[self]

    @property
    def is_success(self) -> bool:
        return 200 <= self < 300


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.NOT_FOUND: "Not Found",
}
