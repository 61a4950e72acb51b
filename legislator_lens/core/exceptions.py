"""
Legislator Lens - custom exception classes
"""

class LegislatorLensError(Exception):
    """Base exception for the package"""
    pass

class ClientError(LegislatorLensError):
    """Client-side failure, e.g. a transport error talking to an API"""
    pass

class QuotaExceededError(ClientError):
    """The provider rejected the call with a rate-limit or quota response"""
    pass

class ConfigError(LegislatorLensError):
    """Configuration error"""
    pass

class ParsingError(LegislatorLensError):
    """Data parsing error"""
    pass

class MalformedResponseError(ParsingError):
    """Model output could not be parsed into the expected structure"""
    pass

class UnavailableError(LegislatorLensError):
    """A required on-device capability or cloud credential is missing"""
    pass

class SessionTimeoutError(LegislatorLensError):
    """On-device model session creation exceeded its time bound"""
    pass

class AnalysisCancelledError(LegislatorLensError):
    """The caller cancelled the call while it was in flight"""
    pass

class ValidationError(LegislatorLensError):
    """Input validation error"""
    pass
