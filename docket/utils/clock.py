# docket/utils/clock.py
import datetime

EPOCH = datetime.datetime(1970, 1, 1)


def utcnow() -> datetime.datetime:
    # naive UTC, matching how DateTime columns round-trip through SQLite
    return datetime.datetime.now(datetime.timezone.utc).replace(tzinfo=None)


def epoch_millis(moment: datetime.datetime) -> int:
    if moment.tzinfo is not None:
        moment = moment.astimezone(datetime.timezone.utc).replace(tzinfo=None)
    return (moment - EPOCH) // datetime.timedelta(milliseconds=1)
