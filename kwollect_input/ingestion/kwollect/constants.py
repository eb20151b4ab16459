import pytz

# Grid'5000 expects its local civil time (UTC+2) in start_time/end_time,
# whatever the timezone of the machine running the plugin.
API_OFFSET = pytz.FixedOffset(2 * 60)
API_TIME_FORMAT = "%Y-%m-%dT%H:%M:%S"

REQUIRED_FIELDS = ("device_id", "metric_id", "timestamp", "value", "labels")
ENCODED_FIELD_ORDER = ("timestamp", "metric_id", "device_id", "value", "labels")

ARRAY_LABEL_SEPARATOR = ", "
U64_MAX = 2**64 - 1

DEVICE_ORIGIN_LABEL = "_device_orig"
RESOURCE_KIND_DEVICE = "device_id"
CONSUMER_KIND_DEVICE_ORIGIN = "device_origin"
METRIC_ID_ATTRIBUTE = "metric_id"
