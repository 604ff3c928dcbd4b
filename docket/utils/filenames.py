# docket/utils/filenames.py
import datetime
import re

from docket.utils.clock import epoch_millis

_UNSAFE = re.compile(r"[^a-zA-Z0-9.\-_]")


def sanitize_filename(filename: str) -> str:
    """
    Replace every character outside letters, digits, ``.``, ``-`` and ``_``
    with an underscore. One character in, one character out.

    >>> sanitize_filename("report (final)!.pdf")
    'report__final__.pdf'
    """
    return _UNSAFE.sub("_", filename)


def build_storage_key(case_id: str, created_at: datetime.datetime, filename: str) -> str:
    """
    Derive the blob key ``<case_id>/<epoch millis>-<sanitized name>``.

    The millisecond timestamp keeps keys distinct when the same file name is
    uploaded twice to one case.
    """
    return f"{case_id}/{epoch_millis(created_at)}-{sanitize_filename(filename)}"
