"""Client payload exceptions."""


class ClientProtocolError(Exception):
    """A client payload could not be parsed as a JSON object.

    The relay does not reject such payloads; it logs the failure and forwards
    the raw frame unchanged.
    """


__all__ = ["ClientProtocolError"]
