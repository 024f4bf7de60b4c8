"""
Exceptions for the paywall access module
This is placed such that there is a general error catcher
"""


class PaywallError(Exception):
    # general container for errors
    pass


class AccessError(PaywallError):
    # raised when a caller's context, proof or payment does not grant access.
    # Callers match on the message text to tell the failed check apart.
    pass


class StorageError(PaywallError):
    # raised if a metadata store or the OS keyring fails in some way
    pass


class ConfigurationError(PaywallError, ValueError):
    # raised when an AccessConfig value is out of range
    pass
