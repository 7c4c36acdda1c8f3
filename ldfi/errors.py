class SupplyError(Exception):
    # Whether the caller may retry the same operation in a later cycle
    retryable: bool = False


class TransportError(SupplyError):
    # Network failure, timeout, non-2xx status or a failure reported by the explorer
    retryable = True


class ProtocolError(SupplyError):
    # The explorer answered with something we can't interpret
    pass


class ComputationError(SupplyError):
    # The fetched amounts are inconsistent, e.g. a negative derived supply
    pass


class ConfigError(SupplyError):
    pass
