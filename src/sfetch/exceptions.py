class SFetchException(Exception):
    pass


class InvalidTarget(SFetchException):
    pass


class InvalidDescriptor(SFetchException):
    pass


class TransportFailure(SFetchException):
    pass


class ConfigurationException(SFetchException):
    pass
