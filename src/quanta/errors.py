"""Exception types shared across the pillars."""


class QuantaError(Exception):
    """Base class for all Quanta errors."""


class PersistenceError(QuantaError):
    """Reading or writing the persistent slot failed.

    Always recovered inside the store: ``load`` falls back to an empty
    conversation and ``save``/``clear`` report ``False``.
    """


class ReplyGenerationError(QuantaError):
    """The reply generator could not produce a reply.

    Covers network failures, timeouts, non-success statuses and malformed
    responses. The message is meant to be shown to the user.
    """
