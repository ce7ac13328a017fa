CONTROL_HEADER_PREFIX = "x-sfetch-"
TARGET_URL_HEADER = "x-sfetch-url"
EXTRAS_HEADER = "x-sfetch-extras"
ORIGIN_CONTENT_TYPE_HEADER = "x-sfetch-content-type"

SET_COOKIE_HEADER = "set-cookie"

INVALID_URL_MESSAGE = "Invalid URL"
UNKNOWN_ERROR_MESSAGE = "Unknown error"
