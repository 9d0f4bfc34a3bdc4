"""Modification detection from HTTP caching validators.

Compares the ETag and Last-Modified headers of a response with the values
stored from the previous fetch:

- 304: not modified, stored validators kept
- 200: modified if any present validator differs or none is present;
  stored validators are replaced by the response values
- anything else: no determination, stored validators kept
"""

from src.fetch.constants import HTTP_STATUS_NOT_MODIFIED, HTTP_STATUS_OK
from src.fetch.models import ModificationStatus, ValidationOutcome


def has_been_modified(
    response_etag: str | None,
    response_last_modified: str | None,
    stored_etag: str,
    stored_last_modified: str,
) -> bool:
    """Check validators of a 200 response against stored ones.

    Only validators present and non-empty in the response are compared.
    Every present one must match for the resource to count as unchanged.

    Args:
        response_etag: ETag header of the response.
        response_last_modified: Last-Modified header of the response.
        stored_etag: Previously stored ETag.
        stored_last_modified: Previously stored Last-Modified.

    Returns:
        True if the resource must be treated as modified.
    """
    pairs = (
        (response_etag, stored_etag),
        (response_last_modified, stored_last_modified),
    )

    present_count = 0
    for received, stored in pairs:
        if not received:
            continue
        if received != stored:
            return True
        present_count += 1

    # Freshness cannot be proven without any validator
    return present_count == 0


def check_modification(
    status_code: int,
    response_etag: str | None,
    response_last_modified: str | None,
    stored_etag: str,
    stored_last_modified: str,
    preserve_missing: bool = False,
) -> ValidationOutcome:
    """Decide modification status and the validators to store next.

    Args:
        status_code: HTTP status of the response.
        response_etag: ETag header of the response, if any.
        response_last_modified: Last-Modified header of the response, if any.
        stored_etag: Currently stored ETag.
        stored_last_modified: Currently stored Last-Modified.
        preserve_missing: Keep a stored validator when the 200 response
            does not carry it, instead of clearing it.

    Returns:
        ValidationOutcome with the status and the validators to store.
    """
    if status_code == HTTP_STATUS_NOT_MODIFIED:
        return ValidationOutcome(
            status=ModificationStatus.NOT_MODIFIED,
            etag=stored_etag,
            last_modified=stored_last_modified,
        )

    if status_code != HTTP_STATUS_OK:
        return ValidationOutcome(
            status=ModificationStatus.UNCHECKED,
            etag=stored_etag,
            last_modified=stored_last_modified,
        )

    modified = has_been_modified(
        response_etag, response_last_modified, stored_etag, stored_last_modified
    )

    next_etag = response_etag or ""
    next_last_modified = response_last_modified or ""
    if preserve_missing:
        next_etag = next_etag or stored_etag
        next_last_modified = next_last_modified or stored_last_modified

    return ValidationOutcome(
        status=(
            ModificationStatus.MODIFIED if modified else ModificationStatus.NOT_MODIFIED
        ),
        etag=next_etag,
        last_modified=next_last_modified,
    )
