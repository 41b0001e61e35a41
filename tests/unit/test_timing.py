import re
from datetime import datetime

from cart_pilot.timing import now_utc_iso, process_start_utc_iso

ISO_MS_UTC = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z$")


def test_utc_timestamps_have_millisecond_precision_and_z_suffix():
    stamp = now_utc_iso()
    assert ISO_MS_UTC.match(stamp)
    assert ISO_MS_UTC.match(process_start_utc_iso())
    assert datetime.fromisoformat(stamp.replace("Z", "+00:00")).utcoffset().total_seconds() == 0


def test_process_start_is_not_after_now():
    assert process_start_utc_iso() <= now_utc_iso()
