from core.exceptions import DomainError


class AuditTemplateError(DomainError):
    default_code = 'TEMPLATE_ERROR'


class AuditCompletionError(DomainError):
    default_code = 'COMPLETION_ERROR'
