"""
cronbind exception hierarchy.

Every error in the package inherits from CronbindError.
Builder-time validation failures share BindingError so configuration
code can catch them together; collaborator failures (scheduler, engine)
have their own branches.

Usage:
    try:
        definition = builder.build()
    except MissingJobNameError:
        # Name was never set
    except BindingError as e:
        # Any other configuration mistake
"""

from __future__ import annotations


class CronbindError(Exception):
    """Base exception for all cronbind errors."""

    def __init__(self, message: str, details: dict | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


# ━━━ Configuration ━━━


class ConfigError(CronbindError):
    """Configuration is invalid, missing, or malformed."""

    pass


# ━━━ Builder validation ━━━


class BindingError(CronbindError):
    """A job definition or trigger binding could not be built."""

    pass


class ReservedKeyError(BindingError):
    """Caller tried to set a parameter key reserved for identity metadata."""

    def __init__(self, key: str, details: dict | None = None):
        self.key = key
        super().__init__(f"Parameter key {key!r} is reserved", details)


class UnsupportedParameterTypeError(BindingError):
    """Parameter value is not one of the supported kinds."""

    def __init__(self, key: str, value: object, details: dict | None = None):
        self.key = key
        self.value_type = type(value).__name__
        message = f"Unsupported parameter type {self.value_type!r}"
        if key:
            message += f" for parameter {key!r}"
        super().__init__(message, details)


class MissingJobNameError(BindingError):
    """Job definition was built without a name."""

    def __init__(self, message: str = "Job name is required", details: dict | None = None):
        super().__init__(message, details)


class IncompleteTriggerError(BindingError):
    """Trigger binding was built without a cron expression or job definition."""

    def __init__(self, missing: list[str], details: dict | None = None):
        self.missing = missing
        super().__init__(
            f"Trigger binding is incomplete, missing: {', '.join(missing)}", details
        )


# ━━━ Collaborators ━━━


class SchedulerError(CronbindError):
    """Scheduler registration or firing failure."""

    pass


class CronExpressionError(SchedulerError):
    """Cron expression rejected by the scheduler."""

    def __init__(self, expression: str, details: dict | None = None):
        self.expression = expression
        super().__init__(f"Invalid cron expression: {expression!r}", details)


class ExecutionError(CronbindError):
    """Execution engine failure."""

    pass


class DuplicateExecutionError(ExecutionError):
    """Execution engine already ran a request with the same key."""

    def __init__(self, execution_key: object, details: dict | None = None):
        self.execution_key = execution_key
        super().__init__(f"Execution already exists for key {execution_key!r}", details)
