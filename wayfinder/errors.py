from __future__ import annotations


class WayfinderError(RuntimeError):
    pass


class ConfigError(WayfinderError):
    pass


class DiscoveryError(WayfinderError):
    pass


class ProviderError(WayfinderError):
    pass


class BaselineFetchError(ProviderError):
    pass


class MutationError(ProviderError):
    pass
