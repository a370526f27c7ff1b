"""Errors raised while answering a SigV4 authentication challenge."""


class SigV4AuthError(Exception):
    """Base class for every error raised by this package."""


class MalformedChallengeError(SigV4AuthError, ValueError):
    """The challenge payload does not carry a ``nonce=`` property."""


class MissingCredentialsError(SigV4AuthError, ValueError):
    """A required credential field is empty or could not be found."""


class MissingRegionError(SigV4AuthError, ValueError):
    """No region is configured in the environment or in botocore."""


class CredentialResolutionError(SigV4AuthError):
    """The credentials callback failed at signing time.

    The original exception is kept on ``cause`` and chained as ``__cause__``.
    """

    PREFIX = 'failed to retrieve AWS credentials: '

    def __init__(self, cause: BaseException):
        super().__init__(f"{self.PREFIX}{cause}")
        self.cause = cause
