"""
vSphere Provider Errors

Exception hierarchy raised by resource callbacks, plus a mapping of
vim/vmodl fault types to operator-friendly messages.
"""

from typing import Optional, Dict, Tuple, Any, List
import re


class ProviderError(Exception):
    """Base exception for vSphere provider operations"""

    def __init__(self, message: str, fault_info: Optional[Dict[str, Any]] = None):
        self.message = message
        self.fault_info = fault_info
        super().__init__(self.message)


class ConfigResolutionError(ProviderError):
    """Raised when a host system or datacenter referenced by the config cannot be resolved"""


class RemoteOperationError(ProviderError):
    """Raised when an add/update/remove call against the platform fails or times out"""

    def __init__(self, operation: str, cause: Exception):
        friendly_msg, info = parse_vcenter_error(cause)
        super().__init__(f"error {operation}: {friendly_msg}", fault_info=info)
        self.operation = operation
        self.cause = cause


class NotFoundError(ProviderError):
    """Raised when a named remote object does not exist"""


class PortGroupNotFoundError(NotFoundError):
    """Raised when the host network system has no port group with the given name"""

    def __init__(self, name: str):
        super().__init__(f"could not find port group {name}")
        self.name = name


class NetworkNotFoundError(NotFoundError):
    """Raised when no network object matches the port group name"""

    def __init__(self, name: str):
        super().__init__(f"Network {name} not found")
        self.name = name


class SchemaValidationError(ProviderError):
    """Raised when a declarative configuration does not satisfy the resource schema"""

    def __init__(self, problems: List[str]):
        self.problems = problems
        super().__init__("invalid configuration: " + "; ".join(problems))


# Mapping of vCenter fault patterns to user-friendly messages
VCENTER_ERROR_MESSAGES: Dict[str, Dict[str, Any]] = {
    'vim.fault.AlreadyExists': {
        'title': 'Already Exists',
        'message': 'A port group with this name already exists on the host.',
        'severity': 'error',
        'is_recoverable': False,
    },
    'vim.fault.NotFound': {
        'title': 'Not Found',
        'message': 'The port group or virtual switch does not exist on the host.',
        'severity': 'error',
        'is_recoverable': False,
    },
    'vim.fault.ResourceInUse': {
        'title': 'Port Group In Use',
        'message': 'The port group still has connected virtual NICs or VMkernel adapters.',
        'severity': 'error',
        'is_recoverable': True,
    },
    'vim.fault.HostConfigFault': {
        'title': 'Host Configuration Fault',
        'message': 'The host rejected the network configuration change.',
        'severity': 'error',
        'is_recoverable': True,
    },
    'vmodl.fault.InvalidArgument': {
        'title': 'Invalid Argument',
        'message': 'The port group specification contains an invalid value.',
        'severity': 'error',
        'is_recoverable': False,
    },
    'vmodl.fault.ManagedObjectNotFound': {
        'title': 'Managed Object Not Found',
        'message': 'The referenced managed object no longer exists.',
        'severity': 'error',
        'is_recoverable': False,
    },
    'vim.fault.Timedout': {
        'title': 'Operation Timeout',
        'message': 'The vCenter operation timed out.',
        'severity': 'warning',
        'is_recoverable': True,
    },
    'vim.fault.InvalidLogin': {
        'title': 'Authentication Failed',
        'message': 'Invalid credentials for vCenter connection.',
        'severity': 'error',
        'is_recoverable': False,
    },
    'vim.fault.NotAuthenticated': {
        'title': 'Session Expired',
        'message': 'The vCenter session is no longer authenticated.',
        'severity': 'error',
        'is_recoverable': True,
    },
    'vim.fault.NoPermission': {
        'title': 'Permission Denied',
        'message': 'Insufficient permissions to perform this operation.',
        'severity': 'error',
        'is_recoverable': False,
    },
    'vmodl.fault.NotSupported': {
        'title': 'Operation Not Supported',
        'message': 'This operation is not supported on the target host.',
        'severity': 'error',
        'is_recoverable': False,
    },
}

# Short class names, e.g. "AlreadyExists" -> "vim.fault.AlreadyExists"
_FAULT_TYPE_NAMES = {pattern.rsplit('.', 1)[-1]: pattern for pattern in VCENTER_ERROR_MESSAGES}


def _fault_pattern_for(error: Exception) -> Optional[str]:
    error_str = str(error)
    error_type = type(error).__name__

    if error_type in VCENTER_ERROR_MESSAGES:
        return error_type
    if error_type in _FAULT_TYPE_NAMES:
        return _FAULT_TYPE_NAMES[error_type]

    for fault_pattern in VCENTER_ERROR_MESSAGES:
        if fault_pattern in error_str:
            return fault_pattern
    return None


def parse_vcenter_error(error: Exception) -> Tuple[str, Optional[Dict[str, Any]]]:
    """
    Parse a vCenter exception and return a user-friendly message.

    The fault's own ``msg`` wins over the mapped message when present.

    Returns:
        Tuple of (friendly_message, error_info_dict or None)
    """
    error_str = str(error)
    msg_match = re.search(r"msg\s*=\s*'([^']+)'", error_str)
    actual_msg = msg_match.group(1) if msg_match else getattr(error, 'msg', None)

    fault_pattern = _fault_pattern_for(error)
    if fault_pattern:
        info = VCENTER_ERROR_MESSAGES[fault_pattern]
        return actual_msg or info['message'], {
            'title': info['title'],
            'severity': info['severity'],
            'is_recoverable': info['is_recoverable'],
            'original_message': actual_msg,
            'fault_type': fault_pattern,
        }

    if actual_msg:
        return actual_msg, None

    if isinstance(error, TimeoutError) and not error_str:
        return "operation timed out", None

    return error_str, None
