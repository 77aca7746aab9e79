"""
cronbind: bind cron triggers to parameterized, uniquely identified jobs.

Public API:
    from cronbind import job_definition_builder, trigger_binder, materialize
"""

__version__ = "0.1.0"

# Core
from cronbind.core.config import CronbindConfig
from cronbind.core.errors import (
    BindingError,
    CronbindError,
    IncompleteTriggerError,
    MissingJobNameError,
    ReservedKeyError,
    UnsupportedParameterTypeError,
)

# Jobs
from cronbind.jobs.parameters import (
    JobParameter,
    JobParameters,
    ParameterKind,
    date_param,
    float_param,
    int_param,
    text_param,
)
from cronbind.jobs.definition import (
    JobDefinition,
    JobDefinitionBuilder,
    JobDefinitionSpec,
    build_job_definition,
    job_definition_builder,
)

# Scheduler
from cronbind.scheduler.binding import (
    JobData,
    TriggerBinder,
    TriggerBinding,
    TriggerSpec,
    build_trigger_binding,
    trigger_binder,
)
from cronbind.scheduler.materialize import (
    ExecutionKey,
    ExecutionRequest,
    Materializer,
    materialize,
)

__all__ = [
    # Core
    "CronbindConfig",
    "CronbindError",
    "BindingError",
    "ReservedKeyError",
    "UnsupportedParameterTypeError",
    "MissingJobNameError",
    "IncompleteTriggerError",
    # Jobs
    "JobParameter",
    "JobParameters",
    "ParameterKind",
    "text_param",
    "float_param",
    "int_param",
    "date_param",
    "JobDefinition",
    "JobDefinitionBuilder",
    "JobDefinitionSpec",
    "build_job_definition",
    "job_definition_builder",
    # Scheduler
    "JobData",
    "TriggerBinder",
    "TriggerBinding",
    "TriggerSpec",
    "build_trigger_binding",
    "trigger_binder",
    "ExecutionKey",
    "ExecutionRequest",
    "Materializer",
    "materialize",
]
