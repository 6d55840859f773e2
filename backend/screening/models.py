from django.db import models

# The screening core owns no durable state. Results are handed back to the
# approval workflow, which persists them on its side.


class CheckKind(models.TextChoices):
    SANCTIONS = 'SANCTIONS', 'Sanctions Lists'
    EXPORT_CONTROL = 'EXPORT_CONTROL', 'Export Control Lists'
    PEP = 'PEP', 'PEPs Check'
    ADVERSE_MEDIA = 'ADVERSE_MEDIA', 'Adverse Media'
    COUNTRY_RISK = 'COUNTRY_RISK', 'Country Risk'


class CheckStatus(models.TextChoices):
    PASS = 'PASS', 'Pass'
    WARNING = 'WARNING', 'Warning'
    FAIL = 'FAIL', 'Fail'
    ERROR = 'ERROR', 'Error'


class RecommendationSeverity(models.TextChoices):
    CRITICAL = 'CRITICAL', 'Critical'
    WARNING = 'WARNING', 'Warning'
    INFO = 'INFO', 'Info'


class RiskTier(models.TextChoices):
    LOW = 'LOW', 'Low'
    MEDIUM = 'MEDIUM', 'Medium'
    HIGH = 'HIGH', 'High'


class VatSource(models.TextChoices):
    FORMAT_CHECK = 'FORMAT_CHECK', 'Format Check'
    REGISTRY = 'REGISTRY', 'Registry'
    ERROR = 'ERROR', 'Error'


class ErrorCode(models.TextChoices):
    INVALID_INPUT = 'INVALID_INPUT', 'Invalid Input'
    SERVICE_UNAVAILABLE = 'SERVICE_UNAVAILABLE', 'Service Unavailable'
    MS_UNAVAILABLE = 'MS_UNAVAILABLE', 'Member State Unavailable'
    TIMEOUT = 'TIMEOUT', 'Timeout'
    SERVER_BUSY = 'SERVER_BUSY', 'Server Busy'
    FORMAT_CHECK = 'FORMAT_CHECK', 'Format Check'
    ERROR = 'ERROR', 'Error'


CHECK_KIND_ORDER = (
    CheckKind.SANCTIONS,
    CheckKind.EXPORT_CONTROL,
    CheckKind.PEP,
    CheckKind.ADVERSE_MEDIA,
    CheckKind.COUNTRY_RISK,
)
