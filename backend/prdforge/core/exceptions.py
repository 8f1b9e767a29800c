class PrdForgeError(Exception):
    """Base exception for PRD Forge.

    Subclasses set ``status_code`` so the API layer can translate them
    without knowing each type.
    """

    status_code: int = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class InputValidationError(PrdForgeError):
    """Raised when caller-supplied text or lists fail length/count constraints."""

    status_code = 400


class NotFoundError(PrdForgeError):
    """Raised when an artifact, version or template id does not exist."""

    status_code = 404

    def __init__(self, resource: str, resource_id: object):
        self.resource = resource
        self.resource_id = resource_id
        super().__init__(f"{resource} not found")


class VersionMismatchError(PrdForgeError):
    """Raised when a version is restored onto an artifact it does not belong to."""

    status_code = 409


class ConflictError(PrdForgeError):
    """Raised when an update carries a stale expected revision."""

    status_code = 409

    def __init__(self, expected_revision: int, current_revision: int):
        self.expected_revision = expected_revision
        self.current_revision = current_revision
        super().__init__(
            f"Artifact was modified concurrently (expected revision {expected_revision}, "
            f"current revision {current_revision})"
        )


class UpstreamGenerationError(PrdForgeError):
    """Raised when the model call fails or its reply cannot be turned into an artifact.

    The message stays generic; the underlying cause is chained via ``__cause__``.
    """

    status_code = 500


class SchemaValidationError(PrdForgeError):
    """Raised when a model reply cannot be coerced into the target payload shape."""

    status_code = 500

    def __init__(self, field_path: str, expected: str):
        self.field_path = field_path
        self.expected = expected
        super().__init__(f"Invalid value at '{field_path}': expected {expected}")


class ExportUnavailableError(PrdForgeError):
    """Raised when an export sink is not configured."""

    status_code = 503


class ExportError(PrdForgeError):
    """Raised when an export sink rejects a request."""

    status_code = 502
