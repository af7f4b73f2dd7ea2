from core.exceptions import DomainError


class ChecklistError(DomainError):
    default_code = 'CHECKLIST_ERROR'


class ChecklistValidationError(ChecklistError):
    default_code = 'VALIDATION_ERROR'


class ScheduleError(ChecklistError):
    default_code = 'SCHEDULE_ERROR'


class InstanceError(ChecklistError):
    default_code = 'INSTANCE_ERROR'


class CompletionError(ChecklistError):
    default_code = 'COMPLETION_ERROR'
